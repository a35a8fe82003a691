# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Operator-facing automation surface.

``AutomationRunner`` owns the control plane, the executor and the engine
for one driven surface.  It validates a goal against the live game state,
arms an ``AutomationRun`` and executes the goal either on a worker thread
(default) or inline on the caller's thread.  Every outcome is recorded in
a ``RunResult``: completed, cancelled, or failed with the step that was
running when the failure happened.

Only one run may be active at a time.  A second ``start_run`` is rejected
(``RunPolicy.REJECT``) or cancels the active run first
(``RunPolicy.SUPERSEDE``).
"""

from __future__ import annotations

import logging
import random
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence

from pydantic import TypeAdapter, ValidationError

from at_bat import AtBatExecutor
from config import DriverConfig, RunPolicy
from control_plane import (
    AutomationRun,
    Cancelled,
    ControlledSurface,
    ControlPlane,
    RunAlreadyActive,
)
from game_state_reader import snapshot
from initial_setup import InitialSetupExecutor, SetupResult
from models import (
    OUTCOME_WEIGHTS,
    REGULATION_INNINGS,
    AdvanceHalfInnings,
    GameState,
    Goal,
    InitialSetup,
    OutcomeWeight,
    SimulateRandomGame,
    SimulateToScore,
    describe_goal,
)
from progression import (
    MAX_WALK_OFF_MARGIN,
    ProgressionEngine,
    ProgressionResult,
    RunPlanner,
    game_already_over,
)
from surface import AutomationError, DrivenSurface

logger = logging.getLogger(__name__)

GoalType = AdvanceHalfInnings | SimulateToScore | SimulateRandomGame | InitialSetup

_goal_adapter: TypeAdapter = TypeAdapter(Goal)


# ---------------------------------------------------------------------------
# Exceptions and results
# ---------------------------------------------------------------------------

class InvalidGoal(AutomationError):
    """The goal violates baseball's scoring rules for the current game."""


class RunStatus(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class RunResult:
    run_id: str
    goal: GoalType
    status: RunStatus
    progression: ProgressionResult | None = None
    setup: SetupResult | None = None
    error: str | None = None
    error_type: str | None = None
    failed_step: str | None = None

    def describe(self) -> str:
        if self.status is RunStatus.COMPLETED and self.progression is not None:
            return f"Run {self.run_id} completed -- {self.progression.summary()}"
        if self.status is RunStatus.COMPLETED and self.setup is not None:
            return f"Run {self.run_id} completed -- {self.setup.summary()}"
        if self.status is RunStatus.CANCELLED:
            return f"Run {self.run_id} cancelled at step {self.failed_step!r}"
        return (f"Run {self.run_id} failed at step {self.failed_step!r}: "
                f"{self.error_type}: {self.error}")


# ---------------------------------------------------------------------------
# Goal validation
# ---------------------------------------------------------------------------

def parse_goal(goal: GoalType | dict[str, Any]) -> GoalType:
    """Accept a goal model or its dict form (``{"kind": ..., ...}``).

    Raises:
        InvalidGoal: The dict does not describe a known goal.
    """
    if isinstance(goal, (AdvanceHalfInnings, SimulateToScore, SimulateRandomGame,
                         InitialSetup)):
        return goal
    try:
        return _goal_adapter.validate_python(goal)
    except ValidationError as e:
        raise InvalidGoal(f"Invalid goal: {e.error_count()} validation error(s): "
                          + "; ".join(err["msg"] for err in e.errors())) from e


def validate_goal(goal: GoalType, state: GameState) -> None:
    """Reject goals the engine cannot realize from *state*.

    Raises:
        InvalidGoal: With a message suitable for the operator.
    """
    # Setup runs before the first pitch; there is no score to check yet
    if isinstance(goal, InitialSetup):
        return
    if game_already_over(state):
        raise InvalidGoal(f"The game is already over ({state.score_display()}, {state.label}).")

    if not isinstance(goal, SimulateToScore):
        return

    home, visiting = goal.home_target, goal.visiting_target
    if home < state.home_score:
        raise InvalidGoal(f"Home score cannot be less than current score ({state.home_score}).")
    if visiting < state.visiting_score:
        raise InvalidGoal(
            f"Visiting score cannot be less than current score ({state.visiting_score}).")
    if home == visiting:
        raise InvalidGoal("Scores cannot be tied in baseball.")

    if state.inning >= REGULATION_INNINGS and home > state.home_score:
        if state.is_top and state.home_score > visiting:
            raise InvalidGoal(
                f"Home would already lead after the {state.label}; "
                f"the game ends before home can reach {home}.")
        if home - visiting > MAX_WALK_OFF_MARGIN:
            raise InvalidGoal(
                f"From inning {REGULATION_INNINGS} on the home team can only win by "
                f"walk-off, which scores at most {MAX_WALK_OFF_MARGIN} runs.")


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

class AutomationRunner:
    """Start, pause, resume and cancel goal runs against one surface."""

    def __init__(self, surface: DrivenSurface, config: DriverConfig | None = None,
                 rng: random.Random | None = None,
                 weights: Sequence[OutcomeWeight] = OUTCOME_WEIGHTS):
        self.config = config or DriverConfig()
        self.raw_surface = surface
        self.plane = ControlPlane()
        self.surface = ControlledSurface(surface, self.plane)
        self.rng = rng or random.Random()
        self.executor = AtBatExecutor(self.surface, self.config.timing,
                                      self.config.max_strikeout_attempts)
        self.engine = ProgressionEngine(
            self.surface, self.executor, self.config.timing, rng=self.rng,
            planner=RunPlanner(self.rng), weights=weights,
            max_at_bats=self.config.max_at_bats,
        )
        self.setup = InitialSetupExecutor(self.surface, self.config.timing)
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._finished = threading.Event()
        self._finished.set()
        self._result: RunResult | None = None

    # -- operator controls ---------------------------------------------------

    def start_run(self, goal: GoalType | dict[str, Any],
                  background: bool = True) -> AutomationRun:
        """Validate *goal* against the live state and start executing it.

        Args:
            goal: The goal model (or its dict form).
            background: Run on a worker thread (True) or inline, returning
                only once the run has finished (False).

        Raises:
            InvalidGoal: Before any input is sent.
            RunAlreadyActive: A run is active and the policy is ``reject``.
        """
        goal = parse_goal(goal)

        if self.plane.is_active:
            if self.config.run_policy is RunPolicy.REJECT:
                raise RunAlreadyActive("An automation run is already active")
            logger.info("Superseding the active run")
            self.cancel()
            self._finished.wait()

        state = snapshot(self.raw_surface)
        validate_goal(goal, state)

        run = AutomationRun(description=describe_goal(goal))
        self.plane.arm(run)
        with self._lock:
            self._result = None
            self._finished.clear()
        logger.info("Starting run %s: %s from %s", run.run_id, run.description,
                    state.situation_display())

        if background:
            thread = threading.Thread(target=self._execute, args=(run, goal),
                                      name=f"automation-{run.run_id}", daemon=True)
            with self._lock:
                self._thread = thread
            thread.start()
        else:
            self._execute(run, goal)
        return run

    def pause(self) -> bool:
        return self.plane.pause()

    def resume(self) -> bool:
        return self.plane.resume()

    def cancel(self) -> bool:
        return self.plane.cancel()

    def wait(self, timeout: float | None = None) -> RunResult | None:
        """Block until the current run finishes; returns its result, or
        None if it is still running after *timeout* seconds."""
        if not self._finished.wait(timeout):
            return None
        return self.result

    @property
    def result(self) -> RunResult | None:
        with self._lock:
            return self._result

    @property
    def is_running(self) -> bool:
        return self.plane.is_active

    @property
    def is_paused(self) -> bool:
        return self.plane.is_paused

    # -- execution -----------------------------------------------------------

    def _execute(self, run: AutomationRun, goal: GoalType) -> None:
        result = RunResult(run_id=run.run_id, goal=goal, status=RunStatus.FAILED)
        try:
            if isinstance(goal, InitialSetup):
                result.setup = self.setup.run(goal)
            else:
                result.progression = self.engine.run(goal)
            result.status = RunStatus.COMPLETED
        except Cancelled:
            result.status = RunStatus.CANCELLED
            result.failed_step = run.current_step
            logger.info("Run %s cancelled during %r", run.run_id, run.current_step)
        except AutomationError as e:
            result.error = str(e)
            result.error_type = type(e).__name__
            result.failed_step = e.step or run.current_step
            logger.error("Run %s failed at step %r: %s: %s", run.run_id,
                         result.failed_step, result.error_type, e)
        except Exception as e:
            result.error = str(e)
            result.error_type = type(e).__name__
            result.failed_step = run.current_step
            logger.exception("Run %s crashed at step %r", run.run_id, run.current_step)
        finally:
            self.plane.disarm(run)
            with self._lock:
                self._result = result
                self._finished.set()
        logger.info("Run %s finished in %.1fs: %s", run.run_id, run.elapsed(),
                    result.status.value)
