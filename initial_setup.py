# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Pre-game setup automation.

Walks the stringer through the screens that come before the first pitch:

1. Open the visiting team's starting-lineup card from the menu.
2. Fill every lineup row with a position and an available player, then
   confirm.  With the designated-hitter option on, the card has ten rows:
   the DH takes row one and the pitcher row ten.  Without it the pitcher
   takes row one and the card has nine rows.
3. Repeat for the home team.
4. Pick the stringer, the official scorer and six umpires on the
   pre-game data screen, and confirm.
5. Set the weather condition, temperature, wind direction and wind speed,
   and confirm.

Rows and fields are best-effort: one that cannot be filled is logged,
recorded in the ``SetupResult`` and skipped.  Screens are not.  If the menu
entry, a confirm button or the next screen does not appear, the run fails
with ``UIAffordanceTimeout``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from pydantic import ValidationError

from config import Timing
from control_plane import ControlledSurface
from models import InitialSetup, RosterPlayer
from surface import AdapterFailure, Dropdown, Locator, Script, UIAffordanceTimeout

logger = logging.getLogger(__name__)

# (label, input, dropdown kind, option index); each umpire takes a different entry
OFFICIALS: tuple[tuple[str, Locator, Dropdown, int], ...] = (
    ("Stringer 1", Locator.STRINGER_INPUT, Dropdown.STRINGER, 1),
    ("Official Scorer", Locator.OFFICIAL_SCORER_INPUT, Dropdown.SCORER, 1),
    ("Home Plate", Locator.UMPIRE_HOME_PLATE_INPUT, Dropdown.UMPIRE, 1),
    ("Left Field", Locator.UMPIRE_LEFT_FIELD_INPUT, Dropdown.UMPIRE, 2),
    ("First Base", Locator.UMPIRE_FIRST_BASE_INPUT, Dropdown.UMPIRE, 3),
    ("Right Field", Locator.UMPIRE_RIGHT_FIELD_INPUT, Dropdown.UMPIRE, 4),
    ("Second Base", Locator.UMPIRE_SECOND_BASE_INPUT, Dropdown.UMPIRE, 5),
    ("Third Base", Locator.UMPIRE_THIRD_BASE_INPUT, Dropdown.UMPIRE, 6),
)

WEATHER_FIELDS = ("Weather condition", "Temperature", "Wind direction", "Wind speed")


# ---------------------------------------------------------------------------
# Lineup planning
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LineupRow:
    row: int
    pitcher: bool         # fill the row with a pitcher
    position_index: int   # index into the position dropdown, -1 is the last (DH)


def lineup_rows(dh: bool) -> list[LineupRow]:
    """The rows of a lineup card and what goes in each.

    Position options are listed in scorebook order after a placeholder, so
    without the DH row N takes position N.
    """
    if not dh:
        return [LineupRow(row, pitcher=(row == 1), position_index=row)
                for row in range(1, 10)]
    rows = [LineupRow(1, pitcher=False, position_index=-1)]
    rows += [LineupRow(row, pitcher=False, position_index=row) for row in range(2, 10)]
    rows.append(LineupRow(10, pitcher=True, position_index=1))
    return rows


def pick_player(options: Sequence[str], roster: Sequence[RosterPlayer],
                used: set[str], pitcher: bool) -> str | None:
    """First dropdown option that is an available, unused player of the
    right kind.  A non-pitcher row falls back to any available player."""
    available = {p.id: p for p in roster if p.available}
    candidates = [value for value in options
                  if value and value not in used and value in available]
    for value in candidates:
        if available[value].is_pitcher == pitcher:
            return value
    if not pitcher and candidates:
        return candidates[0]
    return None


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass
class LineupSlot:
    row: int
    position: str | None = None
    player_id: str | None = None

    @property
    def complete(self) -> bool:
        return self.position is not None and self.player_id is not None


@dataclass
class SetupResult:
    visiting: list[LineupSlot] = field(default_factory=list)
    home: list[LineupSlot] = field(default_factory=list)
    officials: list[str] = field(default_factory=list)
    weather: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    game_ready: bool = False

    def summary(self) -> str:
        def filled(slots: list[LineupSlot]) -> str:
            return f"{sum(1 for s in slots if s.complete)}/{len(slots)}"

        text = (f"initial setup: visiting lineup {filled(self.visiting)}, "
                f"home lineup {filled(self.home)}, "
                f"officials {len(self.officials)}/{len(OFFICIALS)}, "
                f"weather {len(self.weather)}/{len(WEATHER_FIELDS)}")
        if self.skipped:
            text += f", skipped: {', '.join(self.skipped)}"
        return text + ("" if self.game_ready else " (scoring screen not showing)")


# ---------------------------------------------------------------------------
# Executor
# ---------------------------------------------------------------------------

class InitialSetupExecutor:
    """Fills the pre-game screens through a checkpointed surface."""

    def __init__(self, surface: ControlledSurface, timing: Timing | None = None):
        self.surface = surface
        self.timing = timing or Timing()

    def run(self, goal: InitialSetup) -> SetupResult:
        result = SetupResult()
        t = self.timing
        logger.info("Starting initial setup")

        self.surface.step("setup: open visiting lineups")
        self._require(Locator.VISITING_LINEUPS_MENU)
        self.surface.click(Locator.VISITING_LINEUPS_MENU)
        self.surface.delay(t.setup_menu_settle)

        result.visiting = self.populate_lineup("visiting", result)
        self.confirm_lineup("visiting")
        self.surface.delay(t.setup_screen_settle)

        result.home = self.populate_lineup("home", result)
        self.confirm_lineup("home")
        self.surface.delay(t.setup_screen_settle)

        self.populate_pregame_data(result)
        self.surface.delay(t.setup_screen_settle)

        self.populate_weather(goal, result)
        self.surface.delay(t.setup_screen_settle)

        result.game_ready = self.surface.wait_for(Locator.PITCH_AREA, t.setup_screen_timeout)
        if not result.game_ready:
            logger.warning("Setup finished but the scoring screen is not showing")
        logger.info("Initial setup finished -- %s", result.summary())
        return result

    def _require(self, locator: Locator) -> None:
        timeout = self.timing.setup_screen_timeout
        if not self.surface.wait_for(locator, timeout):
            raise UIAffordanceTimeout(locator, timeout)

    # -- lineups -------------------------------------------------------------

    def read_roster(self) -> list[RosterPlayer]:
        """Roster rows of the open lineup card.

        Raises:
            AdapterFailure: The roster script did not return a list.
        """
        rows = self.surface.evaluate(Script.ROSTER)
        if not isinstance(rows, list):
            raise AdapterFailure(
                f"Roster script returned {type(rows).__name__}, expected a list")
        roster = []
        for row in rows:
            try:
                roster.append(RosterPlayer.model_validate(row))
            except ValidationError:
                logger.warning("Skipping unreadable roster row %r", row)
        return roster

    def populate_lineup(self, team: str, result: SetupResult) -> list[LineupSlot]:
        self.surface.step(f"setup: {team} lineup")
        roster = self.read_roster()
        available = [p for p in roster if p.available]
        dh = bool(self.surface.evaluate(Script.DH_ENABLED))
        rows = lineup_rows(dh)
        logger.info("%s lineup: %d available player(s), %d pitcher(s), DH %s, %d rows",
                    team.capitalize(), len(available),
                    sum(1 for p in available if p.is_pitcher),
                    "on" if dh else "off", len(rows))

        used: set[str] = set()
        slots = []
        for plan in rows:
            self.surface.step(f"setup: {team} lineup row {plan.row}")
            slot = LineupSlot(plan.row)
            slot.position = self._select_position(plan)
            self.surface.delay(self.timing.dropdown_settle)
            slot.player_id = self._select_player(plan, roster, used)
            self.surface.delay(self.timing.dropdown_settle)
            if slot.position is None:
                result.skipped.append(f"{team} row {plan.row} position")
            if slot.player_id is None:
                result.skipped.append(f"{team} row {plan.row} player")
            slots.append(slot)
        logger.info("%s lineup filled: %d of %d rows", team.capitalize(),
                    sum(1 for s in slots if s.complete), len(slots))
        return slots

    def _select_position(self, plan: LineupRow) -> str | None:
        options = self._open_lineup_cell(plan.row, Dropdown.POSITION)
        if options is None:
            return None
        if not -len(options) <= plan.position_index < len(options):
            logger.warning("Row %d: position option %d not found", plan.row,
                           plan.position_index)
            return None
        value = options[plan.position_index]
        return value if self._choose(Dropdown.POSITION, value=value) else None

    def _select_player(self, plan: LineupRow, roster: list[RosterPlayer],
                       used: set[str]) -> str | None:
        options = self._open_lineup_cell(plan.row, Dropdown.PLAYER)
        if options is None:
            return None
        player = pick_player(options, roster, used, plan.pitcher)
        if player is None:
            logger.warning("Row %d: no available %s", plan.row,
                           "pitcher" if plan.pitcher else "player")
            return None
        if not self._choose(Dropdown.PLAYER, value=player):
            return None
        used.add(player)
        return player

    def _open_lineup_cell(self, row: int, kind: Dropdown) -> list[str] | None:
        if not self.surface.invoke(Script.OPEN_LINEUP_CELL,
                                   {"row": row, "column": kind.value}):
            logger.warning("Row %d: %s input not found", row, kind.value)
            return None
        self.surface.delay(self.timing.dropdown_settle)
        return self._options(kind)

    def confirm_lineup(self, team: str) -> None:
        self.surface.step(f"setup: confirm {team} lineup")
        self._require(Locator.LINEUP_CONFIRM)
        self.surface.click(Locator.LINEUP_CONFIRM)
        logger.info("Confirmed the %s lineup", team)

    # -- dropdowns -----------------------------------------------------------

    def _options(self, kind: Dropdown) -> list[str] | None:
        options = self.surface.evaluate(Script.DROPDOWN_OPTIONS, {"kind": kind.value})
        if options is None:
            logger.warning("The %s dropdown did not open", kind.value)
            return None
        return [str(option) for option in options]

    def _choose(self, kind: Dropdown, value: str | None = None,
                index: int | None = None) -> bool:
        chosen = self.surface.invoke(Script.CHOOSE_OPTION,
                                     {"kind": kind.value, "value": value, "index": index})
        if not chosen:
            logger.warning("No %s option %r", kind.value, value if value is not None else index)
        return bool(chosen)

    def _pick_from(self, label: str, locator: Locator, kind: Dropdown,
                   value: str | None = None, index: int | None = None) -> bool:
        if not self.surface.exists(locator):
            logger.warning("%s: input not found", label)
            return False
        self.surface.click(locator)
        self.surface.delay(self.timing.dropdown_settle)
        if not self._choose(kind, value=value, index=index):
            return False
        logger.info("%s: selected", label)
        return True

    # -- pre-game data -------------------------------------------------------

    def populate_pregame_data(self, result: SetupResult) -> None:
        self.surface.step("setup: pre-game data")
        self._require(Locator.PREGAME_CONFIRM)
        for label, locator, kind, index in OFFICIALS:
            self.surface.step(f"setup: {label}")
            if self._pick_from(label, locator, kind, index=index):
                result.officials.append(label)
            else:
                result.skipped.append(label)
            self.surface.delay(self.timing.official_settle)

        self.surface.step("setup: confirm pre-game data")
        self.surface.click(Locator.PREGAME_CONFIRM)
        logger.info("Confirmed pre-game data")

    # -- weather -------------------------------------------------------------

    def populate_weather(self, goal: InitialSetup, result: SetupResult) -> None:
        self.surface.step("setup: weather")
        self._require(Locator.WEATHER_TEMPERATURE)
        condition, temperature, direction, speed = WEATHER_FIELDS

        self._record(result, condition, self._pick_from(
            condition, Locator.WEATHER_CONDITION_INPUT, Dropdown.WEATHER_CONDITION,
            value=goal.weather_condition))
        self._record(result, temperature, self._fill(
            temperature, Locator.WEATHER_TEMPERATURE, str(goal.temperature)))
        self._record(result, direction, self._pick_from(
            direction, Locator.WIND_DIRECTION_INPUT, Dropdown.WIND_DIRECTION,
            value=goal.wind_direction))
        self._record(result, speed, self._fill(
            speed, Locator.WIND_SPEED, str(goal.wind_speed)))

        self.surface.step("setup: confirm weather")
        self._require(Locator.WEATHER_CONFIRM)
        self.surface.click(Locator.WEATHER_CONFIRM)
        logger.info("Confirmed weather data")

    def _fill(self, label: str, locator: Locator, text: str) -> bool:
        if not self.surface.exists(locator):
            logger.warning("%s: input not found", label)
            return False
        self.surface.type_text(locator, text)
        logger.info("%s: set to %s", label, text)
        return True

    def _record(self, result: SetupResult, label: str, done: bool) -> None:
        (result.weather if done else result.skipped).append(label)
        self.surface.delay(self.timing.weather_field_settle)
