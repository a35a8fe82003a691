# /// script
# requires-python = ">=3.12"
# dependencies = ["pytest>=7.0"]
# ///
"""Tests for the control_plane feature.

Verifies the cooperative cancellation and pause primitive:
1. arm() is exactly-once per run; re-arming while active raises
2. pause() and resume() are idempotent no-ops when they have nothing to do
3. cancel() makes the next checkpoint raise Cancelled
4. A cancel issued while paused is still observed once the gate opens
5. interruptible_delay() honors cancellation before, during and after the sleep
6. ControlledSurface checkpoints inputs and waits, and never splits a key sequence
"""

import sys
import threading
import time
from pathlib import Path
from unittest.mock import MagicMock, patch

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from control_plane import (
    AutomationRun,
    Cancelled,
    ControlledSurface,
    ControlPlane,
    RunAlreadyActive,
)
from surface import Locator


def armed_plane(description="test run"):
    plane = ControlPlane()
    run = AutomationRun(description=description)
    plane.arm(run)
    return plane, run


def run_in_thread(fn):
    """Run *fn* on a thread; return (thread, outcome dict)."""
    outcome = {}

    def target():
        try:
            outcome["value"] = fn()
        except BaseException as e:  # recorded for the assertion
            outcome["error"] = e

    thread = threading.Thread(target=target, daemon=True)
    thread.start()
    return thread, outcome


# ===========================================================================
# Step 1: arm / disarm lifecycle
# ===========================================================================

class TestStep1Lifecycle:
    def test_arm_makes_plane_active(self):
        plane, run = armed_plane()
        assert plane.is_active
        assert plane.active_run is run
        assert not plane.is_paused

    def test_rearm_while_active_raises(self):
        plane, _ = armed_plane()
        with pytest.raises(RunAlreadyActive):
            plane.arm(AutomationRun(description="second"))

    def test_arm_after_disarm_is_legal(self):
        plane, run = armed_plane()
        plane.disarm(run)
        assert not plane.is_active
        second = AutomationRun(description="second")
        plane.arm(second)
        assert plane.active_run is second

    def test_arm_gives_fresh_token(self):
        plane, run = armed_plane()
        plane.cancel()
        plane.disarm(run)
        plane.arm(run)
        assert not run.cancel_requested
        plane.checkpoint()

    def test_disarm_other_run_is_noop(self):
        plane, run = armed_plane()
        plane.disarm(AutomationRun(description="stranger"))
        assert plane.active_run is run

    def test_checkpoint_without_run_raises(self):
        plane = ControlPlane()
        with pytest.raises(RuntimeError):
            plane.checkpoint()


# ===========================================================================
# Step 2: pause / resume are idempotent
# ===========================================================================

class TestStep2PauseResume:
    def test_pause_without_run_is_noop(self):
        plane = ControlPlane()
        assert plane.pause() is False
        assert not plane.is_paused

    def test_second_pause_is_noop(self):
        plane, _ = armed_plane()
        assert plane.pause() is True
        assert plane.pause() is False
        assert plane.is_paused

    def test_resume_when_not_paused_is_noop(self):
        plane, _ = armed_plane()
        assert plane.resume() is False

    def test_pause_then_resume_lets_checkpoint_through(self):
        plane, _ = armed_plane()
        plane.pause()
        plane.resume()
        plane.checkpoint()  # does not block

    def test_checkpoint_blocks_until_resume(self):
        plane, _ = armed_plane()
        plane.pause()
        thread, outcome = run_in_thread(lambda: plane.checkpoint() or "passed")
        thread.join(0.2)
        assert thread.is_alive(), "checkpoint should block while paused"
        plane.resume()
        thread.join(2)
        assert not thread.is_alive()
        assert outcome == {"value": "passed"}

    def test_disarm_releases_blocked_checkpoint(self):
        plane, run = armed_plane()
        plane.pause()
        thread, _ = run_in_thread(plane.checkpoint)
        thread.join(0.1)
        plane.disarm(run)
        thread.join(2)
        assert not thread.is_alive()


# ===========================================================================
# Step 3: cancel
# ===========================================================================

class TestStep3Cancel:
    def test_cancel_without_run_is_noop(self):
        assert ControlPlane().cancel() is False

    def test_checkpoint_raises_after_cancel(self):
        plane, run = armed_plane()
        assert plane.cancel() is True
        assert run.cancel_requested
        with pytest.raises(Cancelled):
            plane.checkpoint()

    def test_cancel_clears_pause_gate(self):
        plane, _ = armed_plane()
        plane.pause()
        plane.cancel()
        assert not plane.is_paused


# ===========================================================================
# Step 4: cancel while paused
# ===========================================================================

class TestStep4CancelWhilePaused:
    def test_cancel_while_paused_is_observed(self):
        plane, _ = armed_plane()
        plane.pause()
        thread, outcome = run_in_thread(plane.checkpoint)
        thread.join(0.2)
        assert thread.is_alive()

        plane.cancel()
        thread.join(2)
        assert not thread.is_alive()
        assert isinstance(outcome.get("error"), Cancelled)

    def test_no_input_when_gate_opens_before_cancel_lands(self):
        """The woken step must already see the token when the gate opens."""

        class SlowSetEvent(threading.Event):
            def set(self):
                super().set()
                time.sleep(0.3)

        plane, _ = armed_plane()
        raw = MagicMock()
        surface = ControlledSurface(raw, plane)
        # Only the pause gate is built from the slow event class
        with patch("control_plane.threading.Event", SlowSetEvent):
            plane.pause()
        thread, outcome = run_in_thread(lambda: surface.click_center(Locator.PITCH_AREA))
        thread.join(0.2)
        assert thread.is_alive()

        plane.cancel()
        thread.join(2)
        assert not thread.is_alive()
        assert isinstance(outcome.get("error"), Cancelled)
        raw.click_center.assert_not_called()

    def test_resume_after_cancel_does_not_undo_it(self):
        plane, _ = armed_plane()
        plane.pause()
        plane.cancel()
        plane.resume()
        with pytest.raises(Cancelled):
            plane.checkpoint()


# ===========================================================================
# Step 5: interruptible delay
# ===========================================================================

class TestStep5InterruptibleDelay:
    def test_zero_delay_returns(self):
        plane, _ = armed_plane()
        plane.interruptible_delay(0)

    def test_delay_raises_if_already_cancelled(self):
        plane, _ = armed_plane()
        plane.cancel()
        with pytest.raises(Cancelled):
            plane.interruptible_delay(10)

    def test_cancel_wakes_delay_early(self):
        plane, _ = armed_plane()
        threading.Timer(0.05, plane.cancel).start()
        started = time.monotonic()
        with pytest.raises(Cancelled):
            plane.interruptible_delay(10)
        assert time.monotonic() - started < 5

    def test_pause_during_delay_blocks_after_sleep(self):
        plane, _ = armed_plane()
        thread, outcome = run_in_thread(lambda: plane.interruptible_delay(0.05) or "done")
        plane.pause()
        thread.join(0.3)
        if thread.is_alive():
            plane.resume()
            thread.join(2)
        assert outcome == {"value": "done"}


# ===========================================================================
# Step 6: ControlledSurface
# ===========================================================================

class TestStep6ControlledSurface:
    def test_input_after_cancel_is_not_sent(self):
        plane, _ = armed_plane()
        raw = MagicMock()
        surface = ControlledSurface(raw, plane)
        plane.cancel()
        with pytest.raises(Cancelled):
            surface.click(Locator.NEXT_BATTER)
        raw.click.assert_not_called()

    def test_reads_do_not_checkpoint(self):
        plane, _ = armed_plane()
        raw = MagicMock()
        raw.get_text.return_value = "TOP 3"
        surface = ControlledSurface(raw, plane)
        plane.cancel()
        assert surface.get_text(Locator.INNING) == "TOP 3"

    def test_send_keys_sends_whole_sequence(self):
        plane, _ = armed_plane()
        raw = MagicMock()
        surface = ControlledSurface(raw, plane)
        surface.send_keys(("p", "s", "s"))
        assert [c.args[0] for c in raw.send_key.call_args_list] == ["p", "s", "s"]

    def test_wait_for_checkpoints_after_wait(self):
        plane, _ = armed_plane()
        raw = MagicMock()
        raw.wait_for.side_effect = lambda locator, timeout: plane.cancel() or True
        surface = ControlledSurface(raw, plane)
        with pytest.raises(Cancelled):
            surface.wait_for(Locator.PITCH_MENU, 3.0)
        raw.wait_for.assert_called_once_with(Locator.PITCH_MENU, 3.0)

    def test_step_records_current_step(self):
        plane, run = armed_plane()
        surface = ControlledSurface(MagicMock(), plane)
        surface.step("strikeout: finalize")
        assert run.current_step == "strikeout: finalize"

    def test_invoke_checkpoints_but_evaluate_does_not(self):
        plane, _ = armed_plane()
        raw = MagicMock()
        raw.evaluate.return_value = ["a"]
        surface = ControlledSurface(raw, plane)
        plane.cancel()
        assert surface.evaluate("options", {"kind": "umpire"}) == ["a"]
        with pytest.raises(Cancelled):
            surface.invoke("choose", {"kind": "umpire", "index": 1})
        raw.evaluate.assert_called_once_with("options", {"kind": "umpire"})
