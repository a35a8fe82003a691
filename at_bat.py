# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""At-bat executor.

A fixed library of at-bat outcomes, each a deterministic input sequence
against the stringer UI:

* **Strikeout** -- throw the strikes still missing from the count, then
  finalize with ``k``.
* **Walk** -- throw the balls still missing, finalize with ``w``, confirm
  the forced runner advance if the UI asks.
* **Hit(kind)** -- put the ball in play, pick single/double/triple/home
  run, then confirm with "score runs" or "advance runners" depending on
  the runners read *before* any input was sent.
* **Out(kind)** -- put the ball in play and record a fly or ground out.

Every sequence either completes the at-bat or raises.  It ends by waiting
(bounded) for the next-batter prompt; a missing prompt is logged, not
fatal, since it legitimately means the half-inning or the game ended.

Settle delays go through the control plane so that pause and cancel are
honored at every natural break.
"""

from __future__ import annotations

import logging

from config import Timing
from control_plane import ControlledSurface
from game_state_reader import read_count, read_runners, snapshot
from models import AtBatOutcome, HitKind, OutKind
from surface import AutomationError, Key, Locator, UIAffordanceTimeout

logger = logging.getLogger(__name__)

FIRST_PITCH_HEADER_TEXT = "First Pitch"

HIT_KEYS: dict[HitKind, str] = {
    HitKind.SINGLE: Key.SINGLE,
    HitKind.DOUBLE: Key.DOUBLE,
    HitKind.TRIPLE: Key.TRIPLE,
    HitKind.HOME_RUN: Key.HOME_RUN,
}

OUT_KEYS: dict[OutKind, str] = {
    OutKind.FLY_OUT: Key.FLY_OUT,
    OutKind.GROUND_OUT: Key.GROUND_OUT,
}


class InningDidNotEnd(AutomationError):
    """Repeated strikeouts failed to close the half-inning."""

    def __init__(self, message: str, attempts: int, outs: int):
        self.attempts = attempts
        self.outs = outs
        super().__init__(message)


class AtBatExecutor:
    """Enters at-bat outcomes on a checkpointed surface."""

    def __init__(self, surface: ControlledSurface, timing: Timing | None = None,
                 max_strikeout_attempts: int = 6):
        self.surface = surface
        self.timing = timing or Timing()
        self.max_strikeout_attempts = max_strikeout_attempts

    # -------------------------------------------------------------------
    # Shared building blocks
    # -------------------------------------------------------------------

    def open_pitch_menu(self) -> None:
        """Click the pitch area and wait for the pitch menu.

        The first pitch of a half-inning shows a "First Pitch" dialog that
        must be committed before the menu opens.

        Raises:
            UIAffordanceTimeout: The pitch menu did not appear.
        """
        s = self.surface
        s.click_center(Locator.PITCH_AREA)
        s.delay(self.timing.pitch_area_settle)

        if s.exists(Locator.FIRST_PITCH_DIALOG):
            header = s.get_text(Locator.FIRST_PITCH_HEADER)
            if FIRST_PITCH_HEADER_TEXT in header:
                logger.info("Handling First Pitch dialog")
                s.click(Locator.FIRST_PITCH_COMMIT)
                s.delay(self.timing.first_pitch_settle)
                s.click_center(Locator.PITCH_AREA)
                s.delay(self.timing.pitch_area_settle)

        if not s.wait_for(Locator.PITCH_MENU, self.timing.pitch_menu_timeout):
            raise UIAffordanceTimeout(
                Locator.PITCH_MENU, self.timing.pitch_menu_timeout,
                "Pitch menu did not appear after clicking the pitch area",
            )

    def _pitch(self, sequence: tuple[str, ...]) -> None:
        self.open_pitch_menu()
        self.surface.send_keys(sequence, self.timing.key_interval)
        self.surface.delay(self.timing.pitch_settle)

    def finish_at_bat(self, third_out: bool) -> bool:
        """Dismiss the next-batter prompt unless the half-inning just ended.

        Returns:
            True if the prompt was found and clicked.
        """
        if third_out:
            logger.info("Third out recorded, skipping next-batter prompt")
            return False
        if self.surface.wait_for(Locator.NEXT_BATTER, self.timing.next_batter_timeout):
            self.surface.click(Locator.NEXT_BATTER)
            logger.debug("Clicked Next Batter")
            return True
        logger.warning("Next batter prompt did not appear (half-inning or game may be over)")
        return False

    # -------------------------------------------------------------------
    # Outcomes
    # -------------------------------------------------------------------

    def strikeout(self) -> None:
        """Throw the remaining strikes and record a strikeout."""
        _, strikes, outs = read_count(self.surface)
        strikes_needed = max(0, 3 - strikes.value)
        logger.info("Strikeout: %d strike(s), %d out(s) -> throwing %d strike(s)",
                    strikes.value, outs.value, strikes_needed)

        for i in range(strikes_needed):
            self.surface.step(f"strikeout: strike {i + 1} of {strikes_needed}")
            self._pitch(Key.STRIKE_SEQUENCE)

        self.surface.step("strikeout: finalize")
        self.surface.send_key(Key.STRIKEOUT)
        self.surface.delay(self.timing.finalize_settle)
        self.finish_at_bat(third_out=outs.value >= 2)

    def walk(self) -> None:
        """Throw the remaining balls and record a walk."""
        balls, _, _ = read_count(self.surface)
        balls_needed = max(1, 4 - balls.value)
        logger.info("Walk: %d ball(s) -> throwing %d ball(s)", balls.value, balls_needed)

        for i in range(balls_needed):
            self.surface.step(f"walk: ball {i + 1} of {balls_needed}")
            self._pitch(Key.BALL_SEQUENCE)

        self.surface.step("walk: finalize")
        self.surface.send_key(Key.WALK)
        self.surface.delay(self.timing.finalize_settle)

        if self.surface.wait_for(Locator.RUNNER_ADVANCE_CONFIRM,
                                 self.timing.runner_advance_timeout):
            self.surface.click(Locator.RUNNER_ADVANCE_CONFIRM)
            logger.debug("Confirmed forced runner advance")
        self.finish_at_bat(third_out=False)

    def hit(self, kind: HitKind) -> int:
        """Record a hit of *kind*.

        Returns:
            The number of runs the hit is expected to score, computed from
            the runners on base before the hit.
        """
        # Must be read before any input: the hit changes the runners
        runners = read_runners(self.surface).value
        expected_runs = runners.runs_on_hit(kind)
        logger.info("Hit: %s with %d runner(s) on -> expecting %d run(s)",
                    kind.value, runners.count(), expected_runs)

        self.surface.step(f"hit: {kind.value}")
        self.open_pitch_menu()
        self.surface.send_keys(Key.IN_PLAY_SEQUENCE, self.timing.key_interval)
        self.surface.delay(self.timing.key_interval)
        self.surface.send_key(HIT_KEYS[kind])
        self.surface.delay(self.timing.key_interval)
        self.surface.send_key(Key.SCORE_RUNS if expected_runs else Key.ADVANCE_RUNNERS)
        self.surface.delay(self.timing.finalize_settle)
        self.finish_at_bat(third_out=False)
        return expected_runs

    def out(self, kind: OutKind) -> None:
        """Record a fly out or ground out."""
        _, _, outs = read_count(self.surface)
        logger.info("Out: %s with %d out(s)", kind.value, outs.value)

        self.surface.step(f"out: {kind.value}")
        self.open_pitch_menu()
        self.surface.send_keys(Key.IN_PLAY_SEQUENCE, self.timing.key_interval)
        self.surface.delay(self.timing.key_interval)
        self.surface.send_key(OUT_KEYS[kind])
        self.surface.delay(self.timing.finalize_settle)
        self.finish_at_bat(third_out=outs.value >= 2)

    def execute(self, outcome: AtBatOutcome) -> None:
        """Enter *outcome*; every member of ``AtBatOutcome`` is handled."""
        if outcome is AtBatOutcome.STRIKEOUT:
            self.strikeout()
        elif outcome is AtBatOutcome.WALK:
            self.walk()
        elif outcome.hit_kind is not None:
            self.hit(outcome.hit_kind)
        elif outcome.out_kind is not None:
            self.out(outcome.out_kind)
        else:
            raise ValueError(f"Unhandled at-bat outcome: {outcome!r}")

    # -------------------------------------------------------------------
    # Composed sequences
    # -------------------------------------------------------------------

    def strikeouts_to_end_inning(self) -> int:
        """Strike out batters until the half-inning ends.

        Outs are re-read between strikeouts rather than assumed, so a
        strikeout that does not record an out is simply followed by another.

        Returns:
            Number of strikeouts entered.

        Raises:
            InningDidNotEnd: The half-inning was still open after
                ``max_strikeout_attempts`` strikeouts.
        """
        start = snapshot(self.surface)
        logger.info("Strikeouts to end %s: %d out(s), %d needed",
                    start.label, start.outs, max(0, 3 - start.outs))

        attempts = 0
        while True:
            before = snapshot(self.surface)
            if not before.same_half_as(start) or before.outs >= 3:
                break
            if attempts >= self.max_strikeout_attempts:
                raise InningDidNotEnd(
                    f"{start.label} still open after {attempts} strikeouts "
                    f"({before.outs} out(s))",
                    attempts=attempts, outs=before.outs,
                )
            if attempts:
                self.surface.delay(self.timing.between_strikeouts)

            attempts += 1
            self.surface.step(f"{start.label}: strikeout {attempts}")
            self.strikeout()

            after = snapshot(self.surface)
            if not after.same_half_as(start) or after.outs >= 3:
                break
            if after.outs <= before.outs:
                logger.warning("Strikeout did not record an out (still %d out(s))",
                               after.outs)

        logger.info("%s closed after %d strikeout(s)", start.label, attempts)
        return attempts

    def advance_to_next_half(self, defense_timeout: float,
                             next_batter_timeout: float) -> None:
        """Confirm the defense and call up the first batter of the next half.

        Both prompts are optional: when either is missing the absence is
        logged and the sequence moves on.
        """
        s = self.surface
        s.step("transition: confirm defense")
        if s.wait_for(Locator.CONFIRM_DEFENSE, defense_timeout):
            s.click(Locator.CONFIRM_DEFENSE)
            logger.info("Clicked Confirm Defense")
        else:
            logger.warning("Confirm Defense did not appear within %.1fs", defense_timeout)
        s.delay(self.timing.after_confirm_defense)

        s.step("transition: next batter")
        if s.wait_for(Locator.NEXT_BATTER, next_batter_timeout):
            s.click(Locator.NEXT_BATTER)
            logger.info("Clicked Next Batter")
        else:
            logger.warning("Next Batter did not appear within %.1fs", next_batter_timeout)
        s.delay(self.timing.after_next_batter)
