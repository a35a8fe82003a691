# /// script
# requires-python = ">=3.12"
# dependencies = []
# ///
"""Cooperative cancellation and pause for automation runs.

A ``ControlPlane`` holds at most one armed ``AutomationRun``.  Every
automation step calls ``checkpoint()`` at its natural pause points; that is
the only place cancellation or pausing takes effect.  A step that is busy
between two inputs with no checkpoint in between runs to completion, so a
single logical UI action is never left half-applied.

Operator calls (``pause``, ``resume``, ``cancel``) come from any thread.
The automation itself runs on exactly one thread.  State is guarded by a
``threading.Lock``; the pause gate is a one-shot ``threading.Event``.

``ControlledSurface`` wraps a driven-surface adapter so that the executor
gets checkpoints for free: each input call is preceded by one and each
bounded wait is bracketed by two.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Iterable

from surface import DrivenSurface, Locator

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class Cancelled(Exception):
    """The active run was cancelled; raised from the next checkpoint."""


class RunAlreadyActive(RuntimeError):
    """A run was armed while another one is still active."""


# ---------------------------------------------------------------------------
# Run lifecycle object
# ---------------------------------------------------------------------------

@dataclass
class AutomationRun:
    """One invocation of the progression engine.

    Owns the cancellation token.  The pause gate is installed on the
    control plane while this run is armed.
    """
    description: str = ""
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    current_step: str | None = None
    started_at: float = field(default_factory=time.monotonic)
    _token: threading.Event = field(default_factory=threading.Event, repr=False)

    @property
    def cancel_requested(self) -> bool:
        return self._token.is_set()

    def elapsed(self) -> float:
        return time.monotonic() - self.started_at


# ---------------------------------------------------------------------------
# Control plane
# ---------------------------------------------------------------------------

class ControlPlane:
    """Single point through which cancellation and pausing are observed."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._run: AutomationRun | None = None
        self._gate: threading.Event | None = None

    # -- lifecycle ---------------------------------------------------------

    def arm(self, run: AutomationRun) -> None:
        """Associate *run* with a fresh token and clear any pause gate.

        Raises:
            RunAlreadyActive: Another run is armed and has not been disarmed.
        """
        with self._lock:
            if self._run is not None:
                raise RunAlreadyActive(
                    f"Run {self._run.run_id} is already active; cannot arm {run.run_id}"
                )
            run._token = threading.Event()
            self._run = run
            self._gate = None
        logger.debug("Armed run %s (%s)", run.run_id, run.description)

    def disarm(self, run: AutomationRun) -> None:
        """Release *run*.  Disarming a run that is not armed is a no-op."""
        with self._lock:
            if self._run is not run:
                return
            if self._gate is not None:
                self._gate.set()
            self._gate = None
            self._run = None
        logger.debug("Disarmed run %s", run.run_id)

    @property
    def active_run(self) -> AutomationRun | None:
        with self._lock:
            return self._run

    @property
    def is_active(self) -> bool:
        with self._lock:
            return self._run is not None

    @property
    def is_paused(self) -> bool:
        with self._lock:
            return self._gate is not None

    # -- operator controls ---------------------------------------------------

    def pause(self) -> bool:
        """Install a pause gate.

        Returns:
            True if a gate was installed, False if there is no active run or
            the run is already paused.
        """
        with self._lock:
            if self._run is None or self._gate is not None:
                return False
            self._gate = threading.Event()
            run_id = self._run.run_id
        logger.info("Pause requested for run %s", run_id)
        return True

    def resume(self) -> bool:
        """Release the pause gate.  Returns False if not paused."""
        with self._lock:
            gate = self._gate
            if gate is None:
                return False
            self._gate = None
        gate.set()
        logger.info("Resumed")
        return True

    def cancel(self) -> bool:
        """Trigger the cancellation token, then release any pause gate.

        Returns:
            True if an active run was signalled, False if nothing was armed.
        """
        with self._lock:
            run = self._run
            if run is None:
                return False
            gate = self._gate
            self._gate = None
        # Token before gate: a step woken by the gate re-checks the token
        run._token.set()
        if gate is not None:
            gate.set()
        logger.info("Cancel requested for run %s", run.run_id)
        return True

    # -- automation-side primitives -----------------------------------------

    def checkpoint(self) -> None:
        """Observe cancellation and pausing.

        Raises:
            Cancelled: The token is triggered, before or after a pause.
            RuntimeError: No run is armed.
        """
        with self._lock:
            run = self._run
            gate = self._gate
        if run is None:
            raise RuntimeError("checkpoint() called with no armed run")
        if run.cancel_requested:
            raise Cancelled(f"Run {run.run_id} cancelled")
        if gate is not None:
            logger.info("Paused at step %r", run.current_step)
            gate.wait()
            # A cancel issued while paused releases the gate as well
            if run.cancel_requested:
                raise Cancelled(f"Run {run.run_id} cancelled while paused")
            logger.debug("Continuing step %r", run.current_step)

    def interruptible_delay(self, seconds: float) -> None:
        """checkpoint -> sleep -> checkpoint.

        The sleep wakes early on cancellation so the second checkpoint can
        raise without waiting out the full delay.
        """
        self.checkpoint()
        if seconds > 0:
            run = self.active_run
            if run is not None:
                run._token.wait(seconds)
        self.checkpoint()

    def mark_step(self, label: str) -> None:
        """Record the step the active run is executing (for error reports)."""
        with self._lock:
            run = self._run
        if run is not None:
            run.current_step = label
        logger.debug("Step: %s", label)


# ---------------------------------------------------------------------------
# Checkpointed adapter wrapper
# ---------------------------------------------------------------------------

class ControlledSurface:
    """Adapter wrapper that routes every slow or mutating call through a
    control plane."""

    def __init__(self, surface: DrivenSurface, plane: ControlPlane):
        self.surface = surface
        self.plane = plane

    # reads are best-effort and fast, no checkpoint
    def exists(self, locator: Locator) -> bool:
        return self.surface.exists(locator)

    def get_text(self, locator: Locator) -> str:
        return self.surface.get_text(locator)

    def evaluate(self, script: str, arg: Any = None) -> Any:
        return self.surface.evaluate(script, arg)

    # inputs
    def click(self, locator: Locator) -> None:
        self.plane.checkpoint()
        logger.debug("click %s", locator.value)
        self.surface.click(locator)

    def click_center(self, locator: Locator) -> None:
        self.plane.checkpoint()
        logger.debug("click_center %s", locator.value)
        self.surface.click_center(locator)

    def click_at_point(self, x: float, y: float) -> None:
        self.plane.checkpoint()
        logger.debug("click_at_point (%.0f, %.0f)", x, y)
        self.surface.click_at_point(x, y)

    def click_relative(self, locator: Locator, dx: float, dy: float) -> None:
        self.plane.checkpoint()
        logger.debug("click_relative %s (%+.0f, %+.0f)", locator.value, dx, dy)
        self.surface.click_relative(locator, dx, dy)

    def send_key(self, key: str) -> None:
        self.plane.checkpoint()
        logger.debug("key %r", key)
        self.surface.send_key(key)

    def send_keys(self, keys: Iterable[str], interval: float = 0.0) -> None:
        """Send a key sequence as one uninterruptible input.

        One checkpoint precedes the whole sequence; the gaps between keys are
        plain sleeps so a pause never lands between, say, pitch and location.
        """
        self.plane.checkpoint()
        keys = list(keys)
        logger.debug("keys %s", "".join(keys))
        for i, key in enumerate(keys):
            if i and interval > 0:
                time.sleep(interval)
            self.surface.send_key(key)

    def type_text(self, locator: Locator, text: str) -> None:
        self.plane.checkpoint()
        self.surface.type_text(locator, text)

    def invoke(self, script: str, arg: Any = None) -> Any:
        """Evaluate a script that changes the page; checkpointed like an input."""
        self.plane.checkpoint()
        logger.debug("invoke %s %r", script, arg)
        return self.surface.evaluate(script, arg)

    # bounded waits
    def wait_for(self, locator: Locator, timeout: float) -> bool:
        self.plane.checkpoint()
        found = self.surface.wait_for(locator, timeout)
        self.plane.checkpoint()
        return found

    # control-plane passthroughs
    def checkpoint(self) -> None:
        self.plane.checkpoint()

    def delay(self, seconds: float) -> None:
        self.plane.interruptible_delay(seconds)

    def step(self, label: str) -> None:
        self.plane.mark_step(label)
