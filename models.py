# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Data models for the stringer driver.

Everything the automation reasons about is described here: the game-state
snapshot read back from the driven surface, the closed set of at-bat
outcomes the executor knows how to enter, the weighted outcome table used by
the random simulator, the roster rows read during pre-game setup, and the
goals an operator can hand to the automation runner.

GameState is frozen.  A snapshot is produced fresh by re-reading the
surface after every automation step and is never mutated or cached.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


REGULATION_INNINGS = 9


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Half(str, Enum):
    TOP = "TOP"        # visiting team bats
    BOTTOM = "BOTTOM"  # home team bats


class HitKind(str, Enum):
    SINGLE = "SINGLE"
    DOUBLE = "DOUBLE"
    TRIPLE = "TRIPLE"
    HOME_RUN = "HOME_RUN"

    @property
    def bases(self) -> int:
        """Number of bases every runner (and the batter) advances."""
        return {
            HitKind.SINGLE: 1,
            HitKind.DOUBLE: 2,
            HitKind.TRIPLE: 3,
            HitKind.HOME_RUN: 4,
        }[self]


class OutKind(str, Enum):
    FLY_OUT = "FLY_OUT"
    GROUND_OUT = "GROUND_OUT"


class AtBatOutcome(str, Enum):
    """Closed set of at-bat outcomes the executor can enter."""
    STRIKEOUT = "STRIKEOUT"
    WALK = "WALK"
    SINGLE = "SINGLE"
    DOUBLE = "DOUBLE"
    TRIPLE = "TRIPLE"
    HOME_RUN = "HOME_RUN"
    FLY_OUT = "FLY_OUT"
    GROUND_OUT = "GROUND_OUT"

    @property
    def hit_kind(self) -> HitKind | None:
        try:
            return HitKind(self.value)
        except ValueError:
            return None

    @property
    def out_kind(self) -> OutKind | None:
        try:
            return OutKind(self.value)
        except ValueError:
            return None

    @property
    def is_out(self) -> bool:
        return self in (AtBatOutcome.STRIKEOUT, AtBatOutcome.FLY_OUT,
                        AtBatOutcome.GROUND_OUT)


# ---------------------------------------------------------------------------
# Game state snapshot
# ---------------------------------------------------------------------------

class Runners(BaseModel):
    """Base occupancy as shown by the base indicators."""
    model_config = ConfigDict(frozen=True)

    first: bool = False
    second: bool = False
    third: bool = False

    def count(self) -> int:
        return int(self.first) + int(self.second) + int(self.third)

    @property
    def loaded(self) -> bool:
        return self.first and self.second and self.third

    def runs_on_hit(self, kind: HitKind) -> int:
        """Runs a hit of *kind* scores from this base state.

        Every runner advances the same number of bases as the batter, so a
        runner scores when its base number plus the hit's bases reaches
        home.  A single scores only a runner on third, a double scores
        runners on second and third, a triple clears the bases and a home
        run also scores the batter.
        """
        occupied = [self.first, self.second, self.third]
        runs = sum(
            1 for base, on in enumerate(occupied, start=1)
            if on and base + kind.bases >= 4
        )
        if kind is HitKind.HOME_RUN:
            runs += 1
        return runs


class GameState(BaseModel):
    """Snapshot of the game as displayed by the driven surface."""
    model_config = ConfigDict(frozen=True)

    inning: int = Field(default=1, ge=1)
    half: Half = Half.TOP
    outs: int = Field(default=0, ge=0, le=3)  # 3 is transient, see Half changes
    balls: int = Field(default=0, ge=0, le=3)
    strikes: int = Field(default=0, ge=0, le=3)
    home_score: int = Field(default=0, ge=0)
    visiting_score: int = Field(default=0, ge=0)
    runners: Runners = Field(default_factory=Runners)

    @property
    def is_top(self) -> bool:
        return self.half is Half.TOP

    @property
    def batting_score(self) -> int:
        return self.visiting_score if self.is_top else self.home_score

    @property
    def fielding_score(self) -> int:
        return self.home_score if self.is_top else self.visiting_score

    @property
    def label(self) -> str:
        return f"{'Top' if self.is_top else 'Bottom'} {self.inning}"

    def same_half_as(self, other: GameState) -> bool:
        return self.inning == other.inning and self.half is other.half

    def score_display(self) -> str:
        return f"Visiting {self.visiting_score} - Home {self.home_score}"

    def situation_display(self) -> str:
        on_bases = [name for name, on in (("1st", self.runners.first),
                                          ("2nd", self.runners.second),
                                          ("3rd", self.runners.third)) if on]
        runners_str = ("runners on " + ", ".join(on_bases)) if on_bases else "bases empty"
        return (f"{self.label}, {self.balls}-{self.strikes}, {self.outs} out, "
                f"{runners_str}, {self.score_display()}")


# ---------------------------------------------------------------------------
# Random outcome weights
# ---------------------------------------------------------------------------

class OutcomeWeight(BaseModel):
    model_config = ConfigDict(frozen=True)

    outcome: AtBatOutcome
    weight: float = Field(gt=0.0, description="Relative weight; totals need not be 100")


# MLB average plate appearance outcomes (percent)
OUTCOME_WEIGHTS: tuple[OutcomeWeight, ...] = (
    OutcomeWeight(outcome=AtBatOutcome.GROUND_OUT, weight=23.5),
    OutcomeWeight(outcome=AtBatOutcome.STRIKEOUT, weight=22.2),
    OutcomeWeight(outcome=AtBatOutcome.FLY_OUT, weight=21.8),
    OutcomeWeight(outcome=AtBatOutcome.SINGLE, weight=14.3),
    OutcomeWeight(outcome=AtBatOutcome.WALK, weight=8.4),
    OutcomeWeight(outcome=AtBatOutcome.DOUBLE, weight=4.2),
    OutcomeWeight(outcome=AtBatOutcome.HOME_RUN, weight=3.1),
    OutcomeWeight(outcome=AtBatOutcome.TRIPLE, weight=0.3),
)


# ---------------------------------------------------------------------------
# Pre-game roster
# ---------------------------------------------------------------------------

PITCHER_POSITION = "1"
AVAILABLE_STATUS = "A"


class RosterPlayer(BaseModel):
    """One row of the roster table shown beside a lineup card."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    status: str = ""
    position: str = ""  # scorebook position number
    name: str = "Unknown"

    @property
    def available(self) -> bool:
        return self.status == AVAILABLE_STATUS

    @property
    def is_pitcher(self) -> bool:
        return self.position == PITCHER_POSITION


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------

class AdvanceHalfInnings(BaseModel):
    """Skip exactly N half-innings without affecting the score."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["advance_half_innings"] = "advance_half_innings"
    half_innings: int = Field(ge=1)


class SimulateToScore(BaseModel):
    """Drive the game to (at least) the given final score."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["simulate_to_score"] = "simulate_to_score"
    home_target: int = Field(ge=0)
    visiting_target: int = Field(ge=0)


class SimulateRandomGame(BaseModel):
    """Play the rest of the game with weighted random at-bat outcomes."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["simulate_random_game"] = "simulate_random_game"


class InitialSetup(BaseModel):
    """Fill both starting lineups, the pre-game officials and the weather."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["initial_setup"] = "initial_setup"
    weather_condition: str = Field(default="Clear", min_length=1)
    temperature: int = Field(default=70, ge=-20, le=130)
    wind_direction: str = Field(default="Calm", min_length=1)
    wind_speed: int = Field(default=0, ge=0, le=100)


Goal = Annotated[
    Union[AdvanceHalfInnings, SimulateToScore, SimulateRandomGame, InitialSetup],
    Field(discriminator="kind"),
]


def describe_goal(goal: AdvanceHalfInnings | SimulateToScore | SimulateRandomGame
                  | InitialSetup) -> str:
    """Human-readable one-line description of a goal."""
    if isinstance(goal, AdvanceHalfInnings):
        return f"advance {goal.half_innings} half-inning(s)"
    if isinstance(goal, SimulateToScore):
        return (f"simulate to final score Visiting {goal.visiting_target}"
                f" - Home {goal.home_target}")
    if isinstance(goal, SimulateRandomGame):
        return "simulate random game"
    if isinstance(goal, InitialSetup):
        return (f"initial setup (weather {goal.weather_condition}, {goal.temperature}F, "
                f"wind {goal.wind_direction} {goal.wind_speed} mph)")
    raise TypeError(f"Unknown goal type: {type(goal).__name__}")
