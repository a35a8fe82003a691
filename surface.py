# /// script
# requires-python = ">=3.12"
# dependencies = []
# ///
"""Driven-surface adapter contract.

The automation never touches a concrete UI toolkit.  Everything above this
module talks to a ``DrivenSurface``: a small set of primitives (existence
check, click, key press, text read, bounded wait, script evaluation)
addressed by logical ``Locator`` names.  Adapters map those names to
whatever the real surface needs (CSS selectors for the browser adapter,
widget names for the simulated stringer).  Page scripts are addressed the
same way, by ``Script`` name.

The error taxonomy shared by every layer also lives here so that adapters,
the at-bat executor and the progression engine raise from a single family.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol, runtime_checkable


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class AutomationError(Exception):
    """Base class for failures that abort an automation run.

    Attributes:
        step: Label of the automation step that was running, when known.
    """

    def __init__(self, message: str, step: str | None = None):
        self.step = step
        super().__init__(message)


class AdapterFailure(AutomationError):
    """The underlying surface raised while evaluating a primitive."""


class ElementNotFound(AdapterFailure):
    """A click or read targeted an element that is not on the surface."""

    def __init__(self, locator: Locator | str, message: str | None = None):
        self.locator = locator
        super().__init__(message or f"Element not found: {_locator_name(locator)}")


class UIAffordanceTimeout(AutomationError):
    """An element the sequence depends on did not appear in time."""

    def __init__(self, locator: Locator | str, timeout: float,
                 message: str | None = None):
        self.locator = locator
        self.timeout = timeout
        super().__init__(
            message or f"{_locator_name(locator)} did not appear within {timeout:.1f}s"
        )


def _locator_name(locator: Locator | str) -> str:
    return locator.value if isinstance(locator, Locator) else str(locator)


# ---------------------------------------------------------------------------
# Logical locators
# ---------------------------------------------------------------------------

class Locator(str, Enum):
    """Logical names for every element the automation reads or clicks."""
    PITCH_AREA = "pitch_area"
    PITCH_MENU = "pitch_menu"
    MATCHUP_STATUS = "matchup_status"
    FIRST_PITCH_DIALOG = "first_pitch_dialog"
    FIRST_PITCH_HEADER = "first_pitch_header"
    FIRST_PITCH_COMMIT = "first_pitch_commit"
    NEXT_BATTER = "next_batter"
    CONFIRM_DEFENSE = "confirm_defense"
    HOME_SCORE = "home_score"
    VISITING_SCORE = "visiting_score"
    INNING = "inning"
    RUNNER_FIRST = "runner_first"
    RUNNER_SECOND = "runner_second"
    RUNNER_THIRD = "runner_third"
    RUNNER_ADVANCE_CONFIRM = "runner_advance_confirm"

    # Pre-game setup screens
    VISITING_LINEUPS_MENU = "visiting_lineups_menu"
    ROSTER_ROWS = "roster_rows"
    LINEUP_ROWS = "lineup_rows"
    DH_OPTION = "dh_option"
    LINEUP_CONFIRM = "lineup_confirm"
    STRINGER_INPUT = "stringer_input"
    OFFICIAL_SCORER_INPUT = "official_scorer_input"
    UMPIRE_HOME_PLATE_INPUT = "umpire_home_plate_input"
    UMPIRE_LEFT_FIELD_INPUT = "umpire_left_field_input"
    UMPIRE_FIRST_BASE_INPUT = "umpire_first_base_input"
    UMPIRE_RIGHT_FIELD_INPUT = "umpire_right_field_input"
    UMPIRE_SECOND_BASE_INPUT = "umpire_second_base_input"
    UMPIRE_THIRD_BASE_INPUT = "umpire_third_base_input"
    PREGAME_CONFIRM = "pregame_confirm"
    WEATHER_CONDITION_INPUT = "weather_condition_input"
    WEATHER_TEMPERATURE = "weather_temperature"
    WIND_DIRECTION_INPUT = "wind_direction_input"
    WIND_SPEED = "wind_speed"
    WEATHER_CONFIRM = "weather_confirm"


class Script(str, Enum):
    """Logical names of the page scripts the pre-game setup evaluates.

    Like locators, adapters map each name to something they can run: the
    browser adapter to JavaScript, the simulated stringer to a handler.
    """
    ROSTER = "roster"                      # -> [{id, status, position, name}]
    DH_ENABLED = "dh_enabled"              # -> bool
    OPEN_LINEUP_CELL = "open_lineup_cell"  # {row, column} -> bool
    DROPDOWN_OPTIONS = "dropdown_options"  # {kind} -> [value] or None
    CHOOSE_OPTION = "choose_option"        # {kind, value | index} -> bool


class Dropdown(str, Enum):
    """Selectize dropdown kinds (the dropdown's CSS class in the app)."""
    POSITION = "position"
    PLAYER = "player"
    STRINGER = "stringer"
    SCORER = "scorer"
    UMPIRE = "umpire"
    WEATHER_CONDITION = "weather-condition"
    WIND_DIRECTION = "wind-direction"


# ---------------------------------------------------------------------------
# Key contract
# ---------------------------------------------------------------------------

class Key:
    """Keyboard shortcuts understood by the stringer's pitch menu."""
    PITCH = "p"
    STRIKE = "s"
    BALL = "b"
    IN_PLAY = "x"
    STRIKEOUT = "k"
    WALK = "w"
    SINGLE = "1"
    DOUBLE = "2"
    TRIPLE = "3"
    HOME_RUN = "4"
    FLY_OUT = "f"
    GROUND_OUT = "g"
    SCORE_RUNS = "r"
    ADVANCE_RUNNERS = "a"

    # A called strike is recorded as pitch -> strike -> strike (location)
    STRIKE_SEQUENCE = (PITCH, STRIKE, STRIKE)
    BALL_SEQUENCE = (PITCH, BALL, BALL)
    IN_PLAY_SEQUENCE = (PITCH, IN_PLAY)


# ---------------------------------------------------------------------------
# Adapter protocol
# ---------------------------------------------------------------------------

@runtime_checkable
class DrivenSurface(Protocol):
    """Primitives every adapter provides.

    All calls are blocking with adapter-defined latency bounds.  Failures
    other than the documented ``ElementNotFound`` surface as
    ``AdapterFailure``.
    """

    def exists(self, locator: Locator) -> bool: ...

    def click(self, locator: Locator) -> None: ...

    def click_center(self, locator: Locator) -> None: ...

    def click_at_point(self, x: float, y: float) -> None: ...

    def click_relative(self, locator: Locator, dx: float, dy: float) -> None: ...

    def send_key(self, key: str) -> None: ...

    def type_text(self, locator: Locator, text: str) -> None: ...

    def get_text(self, locator: Locator) -> str: ...

    def wait_for(self, locator: Locator, timeout: float) -> bool: ...

    def evaluate(self, script: str, arg: Any = None) -> Any: ...
