# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Game-progression engine.

Sequences at-bat executor calls to realize a goal, re-reading the game from
the surface after every step:

1. **advance_half_innings** -- strike out the side N times, confirming the
   half-inning transition in between.
2. **simulate_to_score** -- drive the game to a final score that is at
   least the requested one.  Runs are spread over the remaining innings by
   a ``RunPlanner`` and entered as home runs; the deciding bottom halves
   (inning 9 or later) are scored exactly so the game neither ends early
   on a walk-off nor stops short of the home target.
3. **simulate_random_game** -- play at-bats drawn from the weighted
   outcome table until the game ends.

Game-over rules (applied after each completed half-inning, inning >= 9):

* Top just ended and the home team leads -> game over, no bottom half.
* Bottom just ended and the score is not tied -> game over.
* Otherwise play continues (extra innings on a tie).

A scoring play in the bottom of inning 9 or later that puts the home team
ahead ends the game immediately (walk-off).
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from at_bat import AtBatExecutor
from config import Timing
from control_plane import ControlledSurface
from game_state_reader import snapshot
from models import (
    OUTCOME_WEIGHTS,
    REGULATION_INNINGS,
    AdvanceHalfInnings,
    AtBatOutcome,
    GameState,
    Half,
    OutcomeWeight,
    SimulateRandomGame,
    SimulateToScore,
)
from surface import AutomationError

logger = logging.getLogger(__name__)

# A walk-off scores at most four runs (bases-loaded home run)
MAX_WALK_OFF_MARGIN = 4
# Bound on the open-ended simulators only; advance_half_innings is exact
MAX_HALF_INNINGS = 60


class ProgressionStalled(AutomationError):
    """The engine exceeded its safety bound without the game ending."""


class EndReason(str, Enum):
    GAME_OVER = "game_over"
    WALK_OFF = "walk_off"
    COMPLETED = "completed"


@dataclass
class ProgressionResult:
    final_state: GameState
    end_reason: EndReason
    half_innings: int = 0
    at_bats: int = 0

    def summary(self) -> str:
        return (f"{self.end_reason.value}: {self.final_state.score_display()} "
                f"({self.final_state.label}, {self.half_innings} half-inning(s), "
                f"{self.at_bats} at-bat(s))")


# ---------------------------------------------------------------------------
# Game-over rules
# ---------------------------------------------------------------------------

def is_game_over_after_half(inning: int, half: Half, home_score: int,
                            visiting_score: int) -> bool:
    """Whether the game ends once the given half-inning is complete."""
    if inning < REGULATION_INNINGS:
        return False
    if half is Half.TOP:
        return home_score > visiting_score
    return home_score != visiting_score


def is_walk_off(inning: int, half: Half, home_score: int, visiting_score: int) -> bool:
    return (half is Half.BOTTOM and inning >= REGULATION_INNINGS
            and home_score > visiting_score)


def game_already_over(state: GameState) -> bool:
    """Whether a freshly read state shows a finished game."""
    if state.is_top or state.inning < REGULATION_INNINGS:
        return False
    if state.home_score > state.visiting_score:
        return True
    return state.outs >= 3 and state.home_score != state.visiting_score


# ---------------------------------------------------------------------------
# Run distribution policy
# ---------------------------------------------------------------------------

class RunPlanner:
    """Decides how many of a team's remaining runs to score this half-inning.

    Before the deadline inning each needed run is drawn independently with
    probability ``min(1, aggressiveness / remaining)`` where ``remaining``
    counts the innings left up to and including the deadline.  If nothing
    was drawn a single run is still forced with ``forced_run_probability``.
    From the deadline inning on, the entire need is planned.
    """

    def __init__(self, rng: random.Random | None = None, aggressiveness: float = 1.5,
                 forced_run_probability: float = 0.2):
        self.rng = rng or random.Random()
        self.aggressiveness = aggressiveness
        self.forced_run_probability = forced_run_probability

    def plan(self, runs_needed: int, inning: int,
             deadline: int = REGULATION_INNINGS) -> int:
        if runs_needed <= 0:
            return 0
        if inning >= deadline:
            return runs_needed

        remaining = max(1, deadline - inning + 1)
        p = min(1.0, self.aggressiveness / remaining)
        planned = sum(1 for _ in range(runs_needed) if self.rng.random() < p)
        if planned == 0 and self.rng.random() < self.forced_run_probability:
            planned = 1
        return planned


def choose_outcome(rng: random.Random,
                   weights: Sequence[OutcomeWeight] = OUTCOME_WEIGHTS) -> AtBatOutcome:
    """Cumulative-weight sampling over the outcome table."""
    total = sum(w.weight for w in weights)
    draw = rng.random() * total
    cumulative = 0.0
    for item in weights:
        cumulative += item.weight
        if draw < cumulative:
            return item.outcome
    # Float rounding can leave draw == total
    return weights[-1].outcome


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class ProgressionEngine:
    """Drives the game toward a goal through an ``AtBatExecutor``."""

    def __init__(self, surface: ControlledSurface, executor: AtBatExecutor,
                 timing: Timing | None = None, rng: random.Random | None = None,
                 planner: RunPlanner | None = None,
                 weights: Sequence[OutcomeWeight] = OUTCOME_WEIGHTS,
                 max_at_bats: int = 600):
        self.surface = surface
        self.executor = executor
        self.timing = timing or Timing()
        self.rng = rng or random.Random()
        self.planner = planner or RunPlanner(self.rng)
        self.weights = tuple(weights)
        self.max_at_bats = max_at_bats
        self._at_bats = 0
        self._half_innings = 0

    def run(self, goal: AdvanceHalfInnings | SimulateToScore | SimulateRandomGame
            ) -> ProgressionResult:
        """Dispatch *goal* to the matching simulator."""
        if isinstance(goal, AdvanceHalfInnings):
            return self.advance_half_innings(goal.half_innings)
        if isinstance(goal, SimulateToScore):
            return self.simulate_to_score(goal.home_target, goal.visiting_target)
        if isinstance(goal, SimulateRandomGame):
            return self.simulate_random_game()
        raise TypeError(f"Unknown goal type: {type(goal).__name__}")

    # -- bookkeeping -------------------------------------------------------

    def _reset(self) -> None:
        self._at_bats = 0
        self._half_innings = 0

    def _result(self, reason: EndReason) -> ProgressionResult:
        final = snapshot(self.surface)
        result = ProgressionResult(final_state=final, end_reason=reason,
                                   half_innings=self._half_innings,
                                   at_bats=self._at_bats)
        logger.info("Progression finished -- %s", result.summary())
        return result

    def _at_bat(self, outcome: AtBatOutcome) -> GameState:
        if self._at_bats >= self.max_at_bats:
            raise ProgressionStalled(
                f"Exceeded {self.max_at_bats} at-bats without reaching the goal")
        self._at_bats += 1
        self.surface.step(f"at-bat {self._at_bats}: {outcome.value}")
        self.executor.execute(outcome)
        return snapshot(self.surface)

    def _close_half(self, started: GameState) -> bool:
        """Strike out the side and apply the game-over rules.

        Returns:
            True if the game is over.
        """
        self.executor.strikeouts_to_end_inning()
        self._half_innings += 1
        after = snapshot(self.surface)
        if is_game_over_after_half(started.inning, started.half,
                                   after.home_score, after.visiting_score):
            logger.info("Game over after %s: %s", started.label, after.score_display())
            return True
        return False

    def _transition(self, defense_timeout: float, next_batter_timeout: float,
                    bounded: bool = True) -> None:
        if bounded and self._half_innings >= MAX_HALF_INNINGS:
            raise ProgressionStalled(
                f"Exceeded {MAX_HALF_INNINGS} half-innings without the game ending")
        logger.info("Transitioning to the next half-inning")
        self.executor.advance_to_next_half(defense_timeout, next_batter_timeout)

    # -------------------------------------------------------------------
    # Fixed-count advancer
    # -------------------------------------------------------------------

    def advance_half_innings(self, count: int) -> ProgressionResult:
        """Strike out the side *count* times without touching the score."""
        self._reset()
        for i in range(count):
            self.surface.checkpoint()
            started = snapshot(self.surface)
            logger.info("Advancing half-inning %d of %d (%s)", i + 1, count, started.label)
            if self._close_half(started):
                return self._result(EndReason.GAME_OVER)
            if i < count - 1:
                self._transition(self.timing.advance_confirm_defense_timeout,
                                 self.timing.transition_next_batter_timeout,
                                 bounded=False)
        return self._result(EndReason.COMPLETED)

    # -------------------------------------------------------------------
    # Goal-directed simulator
    # -------------------------------------------------------------------

    def simulate_to_score(self, home_target: int, visiting_target: int) -> ProgressionResult:
        """Play until the game ends with at least the target final score."""
        self._reset()
        logger.info("Simulating to final score: Visiting %d - Home %d",
                    visiting_target, home_target)

        while True:
            self.surface.checkpoint()
            state = snapshot(self.surface)
            if game_already_over(state):
                logger.info("Game over: home leads in %s", state.label)
                return self._result(EndReason.GAME_OVER)

            if state.is_top or state.inning < REGULATION_INNINGS:
                planned = self._plan_half(state, home_target, visiting_target)
                target = visiting_target if state.is_top else home_target
                logger.info("%s: %s needs %d, scoring %d now", state.label,
                            "visiting" if state.is_top else "home",
                            max(0, target - state.batting_score), planned)
                self._score_with_home_runs(state, planned, target)
            elif self._play_deciding_home_half(state, home_target, visiting_target):
                logger.info("Walk-off! Home wins")
                return self._result(EndReason.WALK_OFF)

            if self._close_half(state):
                return self._result(EndReason.GAME_OVER)
            self._transition(self.timing.confirm_defense_timeout,
                             self.timing.transition_next_batter_timeout)

    def _plan_half(self, state: GameState, home_target: int, visiting_target: int) -> int:
        target = visiting_target if state.is_top else home_target
        need = max(0, target - state.batting_score)

        if need == 0:
            # Tied in extra innings with both targets met: the visitors
            # break the tie when they are meant to win
            if (state.is_top and state.inning >= REGULATION_INNINGS
                    and state.home_score == state.visiting_score
                    and visiting_target > home_target):
                return 1
            return 0

        # A home team meant to win must be done by the 8th: once it leads
        # after the top of the 9th there is no bottom half
        deadline = REGULATION_INNINGS
        if not state.is_top and home_target > visiting_target:
            deadline = REGULATION_INNINGS - 1
        return self.planner.plan(need, state.inning, deadline)

    def _score_with_home_runs(self, state: GameState, planned: int, target: int) -> None:
        scored_at = state.batting_score
        for r in range(planned):
            self.surface.checkpoint()
            now = self._at_bat(AtBatOutcome.HOME_RUN)
            score = now.visiting_score if state.is_top else now.home_score
            logger.debug("Run %d of %d planned: batting score %d -> %d",
                         r + 1, planned, scored_at, score)
            scored_at = score
            if score >= target:
                break

    # -- deciding home halves (bottom of inning 9 or later) -----------------

    def _play_deciding_home_half(self, state: GameState, home_target: int,
                                 visiting_target: int) -> bool:
        """Score the home half of inning 9+ without ending the game early.

        Returns:
            True if the half ended in a walk-off.
        """
        if state.visiting_score < visiting_target:
            # The visitors still need to bat again: at most tie the game
            self._score_exactly(state.visiting_score - state.home_score)
            return False

        if home_target >= state.visiting_score:
            margin = max(1, home_target - state.visiting_score)
            if margin > MAX_WALK_OFF_MARGIN:
                raise ProgressionStalled(
                    f"Home cannot win by {margin} in {state.label}: a walk-off "
                    f"scores at most {MAX_WALK_OFF_MARGIN} runs")
            self._score_exactly(state.visiting_score - state.home_score)
            return self._walk_off_by(margin)

        self._score_exactly(max(0, home_target - state.home_score))
        return False

    def _score_exactly(self, runs: int) -> None:
        """Score exactly *runs* for the home team without overshooting.

        A home run is used only when it cannot score more than what is left;
        otherwise singles, which score at most the runner from third.
        """
        if runs <= 0:
            return
        target = snapshot(self.surface).home_score + runs
        logger.info("Scoring exactly %d run(s) for the home team", runs)
        while True:
            self.surface.checkpoint()
            now = snapshot(self.surface)
            remaining = target - now.home_score
            if remaining <= 0:
                return
            if now.runners.count() + 1 <= remaining:
                self._at_bat(AtBatOutcome.HOME_RUN)
            else:
                self._at_bat(AtBatOutcome.SINGLE)

    def _walk_off_by(self, margin: int) -> bool:
        """From a tie, end the game with one play worth exactly *margin* runs."""
        logger.info("Setting up a %d-run walk-off", margin)
        while True:
            self.surface.checkpoint()
            now = snapshot(self.surface)
            if is_walk_off(now.inning, now.half, now.home_score, now.visiting_score):
                return True
            on_base = now.runners.count()
            if margin == 1:
                outcome = AtBatOutcome.HOME_RUN if on_base == 0 else AtBatOutcome.SINGLE
            elif on_base < margin - 1:
                outcome = AtBatOutcome.WALK
            elif on_base == margin - 1:
                outcome = AtBatOutcome.HOME_RUN
            elif on_base == margin:
                outcome = AtBatOutcome.TRIPLE
            else:
                # bases loaded, two-run margin: the double scores second and third
                outcome = AtBatOutcome.DOUBLE
            after = self._at_bat(outcome)
            if is_walk_off(now.inning, now.half, after.home_score, after.visiting_score):
                return True

    # -------------------------------------------------------------------
    # Random-outcome simulator
    # -------------------------------------------------------------------

    def simulate_random_game(self) -> ProgressionResult:
        """Play weighted-random at-bats until the game ends."""
        self._reset()
        logger.info("Starting random outcome game simulation")

        while True:
            self.surface.checkpoint()
            before = snapshot(self.surface)
            if game_already_over(before):
                logger.info("Game over: %s in %s", before.score_display(), before.label)
                return self._result(EndReason.GAME_OVER)

            outcome = choose_outcome(self.rng, self.weights)
            logger.info("At-bat #%d (%s, %d out): %s", self._at_bats + 1,
                        before.label, before.outs, outcome.value)
            after = self._at_bat(outcome)

            if is_walk_off(before.inning, before.half, after.home_score, after.visiting_score):
                logger.info("Walk-off! Home wins %d-%d", after.home_score, after.visiting_score)
                return self._result(EndReason.WALK_OFF)

            # Outs belong to the surface; detect the half change from the label
            if not after.same_half_as(before) or after.outs >= 3:
                self._half_innings += 1
                logger.info("Half-inning ended: %s -> %s", before.label, after.label)
                if is_game_over_after_half(before.inning, before.half,
                                           after.home_score, after.visiting_score):
                    logger.info("Game over after %s", before.label)
                    return self._result(EndReason.GAME_OVER)
                self._transition(self.timing.random_transition_timeout,
                                 self.timing.random_transition_timeout)
            else:
                self.surface.delay(self.timing.between_at_bats)
