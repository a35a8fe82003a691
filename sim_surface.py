# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Simulated stringer surface.

An in-memory scorebook that reacts to the same clicks and key sequences as
the real stringer application and renders the texts the game-state reader
parses.  Used by ``driver.py --sim`` and throughout the tests.

Behaviour modelled:

* Clicking the pitch area opens the pitch menu.  The first pitch of every
  half-inning is preceded by a "First Pitch" dialog that has to be
  committed.  Clicks are ignored while any dialog is open or after the
  game has ended.
* ``p s s`` records a strike, ``p b b`` a ball, ``p x`` puts the ball in
  play.  In play, ``1``-``4`` select a hit which is confirmed with ``r``
  (runs scored) or ``a`` (runners advance, no runs); ``f``/``g`` record a
  fly or ground out.  ``k`` records a strikeout once three strikes are
  on the count, ``w`` a walk once four balls are.
* After each at-bat a "Next Batter" prompt appears; a walk that forces a
  runner first asks for the runner advance to be confirmed.  The third out
  ends the half-inning: the inning label moves on immediately, outs stay at
  3 and a "Confirm Defense" prompt must be clicked before the next half
  starts.
* Game-over and walk-off rules follow regulation baseball.
* Optionally (``setup=SimulatedSetup()``) the game is preceded by the
  pre-game screens: both lineup cards, the officials and the weather.
  Until the weather is confirmed the scoring screen is not shown and
  pitch inputs are ignored.

The simulator never advances by itself: every state change is the direct
result of an input, so ``wait_for`` simply reports whether the element is
present right now.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from models import (
    AVAILABLE_STATUS,
    PITCHER_POSITION,
    REGULATION_INNINGS,
    GameState,
    Half,
    HitKind,
    RosterPlayer,
    Runners,
)
from surface import AdapterFailure, Dropdown, ElementNotFound, Key, Locator, Script

logger = logging.getLogger(__name__)


class Prompt(str, Enum):
    NONE = "NONE"
    FIRST_PITCH = "FIRST_PITCH"
    NEXT_BATTER = "NEXT_BATTER"
    RUNNER_ADVANCE = "RUNNER_ADVANCE"
    CONFIRM_DEFENSE = "CONFIRM_DEFENSE"


class MenuStage(str, Enum):
    CLOSED = "CLOSED"
    OPEN = "OPEN"
    PITCH = "PITCH"              # "p" pressed, waiting for pitch type
    STRIKE_LOCATION = "STRIKE_LOCATION"
    BALL_LOCATION = "BALL_LOCATION"
    IN_PLAY = "IN_PLAY"          # waiting for the result key
    HIT_CONFIRM = "HIT_CONFIRM"  # waiting for r / a


HIT_BY_KEY = {
    Key.SINGLE: HitKind.SINGLE,
    Key.DOUBLE: HitKind.DOUBLE,
    Key.TRIPLE: HitKind.TRIPLE,
    Key.HOME_RUN: HitKind.HOME_RUN,
}

PROMPT_HEADERS = {
    Prompt.FIRST_PITCH: "First Pitch",
    Prompt.NEXT_BATTER: "Next Batter",
}


@dataclass
class RunsEvent:
    inning: int
    half: Half
    team: str  # "home" or "visiting"
    runs: int


class SimulatedStringer:
    """In-memory stand-in for the stringer UI."""

    def __init__(self, inning: int = 1, half: Half = Half.TOP, home_score: int = 0,
                 visiting_score: int = 0, outs: int = 0, balls: int = 0,
                 strikes: int = 0, runners: Runners | None = None,
                 first_pitch_prompt: bool = True, setup: SimulatedSetup | None = None):
        self.inning = inning
        self.half = half
        self.home_score = home_score
        self.visiting_score = visiting_score
        self.outs = outs
        self.balls = balls
        self.strikes = strikes
        runners = runners or Runners()
        self.bases = [runners.first, runners.second, runners.third]

        self.prompt = Prompt.NONE
        self.menu = MenuStage.CLOSED
        self.pending_hit: HitKind | None = None
        self.first_pitch_pending = first_pitch_prompt
        self.game_over = False
        self.setup = setup

        self.input_log: list[str] = []
        self.runs_log: list[RunsEvent] = []
        self.failing: set[Locator] = set()

    # -------------------------------------------------------------------
    # Introspection helpers (tests, --sim summary)
    # -------------------------------------------------------------------

    def game_state(self) -> GameState:
        return GameState(
            inning=self.inning, half=self.half, outs=self.outs,
            balls=min(self.balls, 3), strikes=self.strikes,
            home_score=self.home_score, visiting_score=self.visiting_score,
            runners=Runners(first=self.bases[0], second=self.bases[1],
                            third=self.bases[2]),
        )

    @property
    def in_setup(self) -> bool:
        return self.setup is not None and not self.setup.done

    def keys_sent(self) -> str:
        return "".join(entry[len("key:"):] for entry in self.input_log
                       if entry.startswith("key:"))

    def _check(self, locator: Locator) -> None:
        if locator in self.failing:
            raise AdapterFailure(f"Simulated failure reading {locator.value}")

    # -------------------------------------------------------------------
    # DrivenSurface: reads
    # -------------------------------------------------------------------

    def exists(self, locator: Locator) -> bool:
        self._check(locator)
        if locator in SETUP_LOCATORS:
            return self.setup is not None and self.setup.exists(locator)
        if self.in_setup:
            return False
        if locator is Locator.PITCH_MENU:
            return self.menu is not MenuStage.CLOSED
        if locator in (Locator.FIRST_PITCH_DIALOG, Locator.FIRST_PITCH_HEADER,
                       Locator.FIRST_PITCH_COMMIT):
            return self.prompt in (Prompt.FIRST_PITCH, Prompt.NEXT_BATTER)
        if locator is Locator.NEXT_BATTER:
            return self.prompt is Prompt.NEXT_BATTER
        if locator is Locator.CONFIRM_DEFENSE:
            return self.prompt is Prompt.CONFIRM_DEFENSE
        if locator is Locator.RUNNER_ADVANCE_CONFIRM:
            return self.prompt is Prompt.RUNNER_ADVANCE
        if locator is Locator.RUNNER_FIRST:
            return self.bases[0]
        if locator is Locator.RUNNER_SECOND:
            return self.bases[1]
        if locator is Locator.RUNNER_THIRD:
            return self.bases[2]
        return True

    def get_text(self, locator: Locator) -> str:
        self._check(locator)
        if locator is Locator.HOME_SCORE:
            return str(self.home_score)
        if locator is Locator.VISITING_SCORE:
            return str(self.visiting_score)
        if locator is Locator.INNING:
            return f"{'TOP' if self.half is Half.TOP else 'BOT'} {self.inning}"
        if locator is Locator.MATCHUP_STATUS:
            return (f"{min(self.balls, 3)}-{self.strikes} {self.outs} "
                    f"{'out' if self.outs == 1 else 'outs'}")
        if locator is Locator.FIRST_PITCH_HEADER:
            return PROMPT_HEADERS.get(self.prompt, "")
        return ""

    def wait_for(self, locator: Locator, timeout: float) -> bool:
        return self.exists(locator)

    def evaluate(self, script: str, arg: Any = None) -> Any:
        if script.strip() == "state":
            return self.game_state().model_dump(mode="json") | {
                "game_over": self.game_over,
                "prompt": self.prompt.value,
                "in_setup": self.in_setup,
            }
        try:
            named = Script(script)
        except ValueError:
            raise AdapterFailure(f"Simulated stringer cannot evaluate {script!r}") from None
        if self.setup is None:
            raise AdapterFailure(f"No pre-game screens to run {named.value!r} on")
        if named in (Script.OPEN_LINEUP_CELL, Script.CHOOSE_OPTION):
            self.input_log.append(f"script:{named.value}")
        return self.setup.evaluate(named, arg or {})

    # -------------------------------------------------------------------
    # DrivenSurface: inputs
    # -------------------------------------------------------------------

    def click(self, locator: Locator) -> None:
        self._check(locator)
        self.input_log.append(f"click:{locator.value}")

        if locator in SETUP_LOCATORS:
            if self.setup is None:
                raise ElementNotFound(locator)
            self.setup.click(locator)
        elif locator is Locator.PITCH_AREA:
            self._click_pitch_area()
        elif locator is Locator.FIRST_PITCH_COMMIT and self.prompt is Prompt.FIRST_PITCH:
            self.prompt = Prompt.NONE
            self.first_pitch_pending = False
        # the commit selector is less specific and also matches the next-batter button
        elif locator in (Locator.FIRST_PITCH_COMMIT, Locator.NEXT_BATTER) \
                and self.prompt is Prompt.NEXT_BATTER:
            self.prompt = Prompt.NONE
            self.balls = self.strikes = 0
        elif locator is Locator.RUNNER_ADVANCE_CONFIRM and self.prompt is Prompt.RUNNER_ADVANCE:
            self.prompt = Prompt.NEXT_BATTER
        elif locator is Locator.CONFIRM_DEFENSE and self.prompt is Prompt.CONFIRM_DEFENSE:
            self._start_half_inning()
        else:
            raise ElementNotFound(locator)

    def click_center(self, locator: Locator) -> None:
        self.click(locator)

    def click_at_point(self, x: float, y: float) -> None:
        self.input_log.append(f"point:{x:.0f},{y:.0f}")

    def click_relative(self, locator: Locator, dx: float, dy: float) -> None:
        self._check(locator)
        self.input_log.append(f"relative:{locator.value}:{dx:.0f},{dy:.0f}")

    def type_text(self, locator: Locator, text: str) -> None:
        self._check(locator)
        self.input_log.append(f"type:{locator.value}:{text}")
        if locator in SETUP_LOCATORS:
            if self.setup is None:
                raise ElementNotFound(locator)
            self.setup.type_text(locator, text)

    def send_key(self, key: str) -> None:
        self.input_log.append(f"key:{key}")
        if self.game_over or self.in_setup or self.prompt is not Prompt.NONE:
            logger.debug("Key %r ignored (prompt %s, game over %s, setup %s)",
                         key, self.prompt.value, self.game_over, self.in_setup)
            return

        stage = self.menu
        if stage is MenuStage.OPEN and key == Key.PITCH:
            self.menu = MenuStage.PITCH
        elif stage is MenuStage.PITCH and key == Key.STRIKE:
            self.menu = MenuStage.STRIKE_LOCATION
        elif stage is MenuStage.PITCH and key == Key.BALL:
            self.menu = MenuStage.BALL_LOCATION
        elif stage is MenuStage.PITCH and key == Key.IN_PLAY:
            self.menu = MenuStage.IN_PLAY
        elif stage is MenuStage.STRIKE_LOCATION and key == Key.STRIKE:
            self.menu = MenuStage.CLOSED
            self.strikes = min(3, self.strikes + 1)
        elif stage is MenuStage.BALL_LOCATION and key == Key.BALL:
            self.menu = MenuStage.CLOSED
            self.balls = min(4, self.balls + 1)
        elif stage is MenuStage.IN_PLAY and key in HIT_BY_KEY:
            self.pending_hit = HIT_BY_KEY[key]
            self.menu = MenuStage.HIT_CONFIRM
        elif stage is MenuStage.IN_PLAY and key in (Key.FLY_OUT, Key.GROUND_OUT):
            self.menu = MenuStage.CLOSED
            self._complete_at_bat(outs=1)
        elif stage is MenuStage.HIT_CONFIRM and key in (Key.SCORE_RUNS, Key.ADVANCE_RUNNERS):
            self._confirm_hit(key)
        elif stage is MenuStage.CLOSED and key == Key.STRIKEOUT and self.strikes >= 3:
            self._complete_at_bat(outs=1)
        elif stage is MenuStage.CLOSED and key == Key.WALK and self.balls >= 4:
            self._resolve_walk()
        else:
            logger.warning("Simulated stringer ignored key %r in menu stage %s",
                           key, stage.value)

    # -------------------------------------------------------------------
    # Game logic
    # -------------------------------------------------------------------

    def _click_pitch_area(self) -> None:
        if self.game_over or self.in_setup or self.prompt is not Prompt.NONE:
            logger.debug("Pitch area click ignored (prompt %s)", self.prompt.value)
            return
        if self.first_pitch_pending:
            self.prompt = Prompt.FIRST_PITCH
            return
        if self.menu is MenuStage.CLOSED:
            self.menu = MenuStage.OPEN

    def _confirm_hit(self, key: str) -> None:
        kind = self.pending_hit
        if kind is None:
            return
        runs = self.game_state().runners.runs_on_hit(kind)
        expected_key = Key.SCORE_RUNS if runs else Key.ADVANCE_RUNNERS
        if key != expected_key:
            logger.warning("Hit confirmation %r does not match %d run(s) scoring; ignored",
                           key, runs)
            return

        advanced = [False, False, False]
        for base, occupied in enumerate(self.bases, start=1):
            if occupied and base + kind.bases < 4:
                advanced[base + kind.bases - 1] = True
        if kind.bases < 4:
            advanced[kind.bases - 1] = True
        self.bases = advanced
        self.pending_hit = None
        self.menu = MenuStage.CLOSED
        self._complete_at_bat(runs=runs)

    def _resolve_walk(self) -> None:
        """Advance forced runners; a bases-loaded walk scores one."""
        first, second, third = self.bases
        runs = 0
        forced = first
        if first and second and third:
            runs = 1
        elif first and second:
            third = True
        elif first:
            second = True
        if first:
            second = True
        self.bases = [True, second, third]
        self._complete_at_bat(runs=runs, confirm_runners=forced)

    def _complete_at_bat(self, outs: int = 0, runs: int = 0,
                         confirm_runners: bool = False) -> None:
        self.balls = self.strikes = 0
        if runs:
            if self.half is Half.TOP:
                self.visiting_score += runs
            else:
                self.home_score += runs
            self.runs_log.append(RunsEvent(self.inning, self.half,
                                           "visiting" if self.half is Half.TOP else "home",
                                           runs))

        # Walk-off
        if (self.half is Half.BOTTOM and self.inning >= REGULATION_INNINGS
                and self.home_score > self.visiting_score):
            logger.info("Walk-off! Home wins %d-%d", self.home_score, self.visiting_score)
            self.game_over = True
            return

        self.outs += outs
        if self.outs >= 3:
            self._end_half_inning()
            return
        self.prompt = Prompt.RUNNER_ADVANCE if confirm_runners else Prompt.NEXT_BATTER

    def _end_half_inning(self) -> None:
        self.bases = [False, False, False]
        if self.half is Half.TOP:
            self.half = Half.BOTTOM
            if self.inning >= REGULATION_INNINGS and self.home_score > self.visiting_score:
                logger.info("Game over! Home wins %d-%d", self.home_score, self.visiting_score)
                self.game_over = True
                return
        else:
            if self.inning >= REGULATION_INNINGS and self.home_score != self.visiting_score:
                logger.info("Game over! Final: Visiting %d - Home %d",
                            self.visiting_score, self.home_score)
                self.game_over = True
                return
            self.inning += 1
            self.half = Half.TOP
        self.prompt = Prompt.CONFIRM_DEFENSE

    def _start_half_inning(self) -> None:
        self.outs = 0
        self.balls = self.strikes = 0
        self.bases = [False, False, False]
        self.first_pitch_pending = True
        self.prompt = Prompt.NEXT_BATTER


# ---------------------------------------------------------------------------
# Pre-game screens
# ---------------------------------------------------------------------------

class SetupScreen(str, Enum):
    MENU = "MENU"
    VISITING_LINEUP = "VISITING_LINEUP"
    HOME_LINEUP = "HOME_LINEUP"
    PREGAME_DATA = "PREGAME_DATA"
    WEATHER = "WEATHER"
    DONE = "DONE"


LINEUP_TEAMS = {
    SetupScreen.VISITING_LINEUP: "visiting",
    SetupScreen.HOME_LINEUP: "home",
}

# placeholder first, then scorebook order; DH last
POSITION_OPTIONS = ("--", "P", "C", "1B", "2B", "3B", "SS", "LF", "CF", "RF", "DH")

OFFICIAL_INPUTS = {
    Locator.STRINGER_INPUT: Dropdown.STRINGER,
    Locator.OFFICIAL_SCORER_INPUT: Dropdown.SCORER,
    Locator.UMPIRE_HOME_PLATE_INPUT: Dropdown.UMPIRE,
    Locator.UMPIRE_LEFT_FIELD_INPUT: Dropdown.UMPIRE,
    Locator.UMPIRE_FIRST_BASE_INPUT: Dropdown.UMPIRE,
    Locator.UMPIRE_RIGHT_FIELD_INPUT: Dropdown.UMPIRE,
    Locator.UMPIRE_SECOND_BASE_INPUT: Dropdown.UMPIRE,
    Locator.UMPIRE_THIRD_BASE_INPUT: Dropdown.UMPIRE,
}

WEATHER_INPUTS = {
    Locator.WEATHER_CONDITION_INPUT: Dropdown.WEATHER_CONDITION,
    Locator.WIND_DIRECTION_INPUT: Dropdown.WIND_DIRECTION,
}
WEATHER_TEXT_INPUTS = (Locator.WEATHER_TEMPERATURE, Locator.WIND_SPEED)

LIST_OPTIONS = {
    Dropdown.STRINGER: ("--", "Sam Stringer", "Alex Backup"),
    Dropdown.SCORER: ("--", "Jordan Scorer"),
    Dropdown.UMPIRE: ("--", "Umpire One", "Umpire Two", "Umpire Three",
                      "Umpire Four", "Umpire Five", "Umpire Six"),
    Dropdown.WEATHER_CONDITION: ("Clear", "Partly Cloudy", "Cloudy", "Overcast",
                                 "Drizzle", "Rain", "Snow", "Dome"),
    Dropdown.WIND_DIRECTION: ("Calm", "In From CF", "Out To CF", "L To R", "R To L",
                              "Varies"),
}

LINEUP_LOCATORS = frozenset({
    Locator.ROSTER_ROWS, Locator.LINEUP_ROWS, Locator.DH_OPTION, Locator.LINEUP_CONFIRM,
})
SETUP_LOCATORS = frozenset({
    Locator.VISITING_LINEUPS_MENU, Locator.PREGAME_CONFIRM, Locator.WEATHER_CONFIRM,
    *LINEUP_LOCATORS, *OFFICIAL_INPUTS, *WEATHER_INPUTS, *WEATHER_TEXT_INPUTS,
})


def default_roster(prefix: str) -> list[RosterPlayer]:
    """Five pitchers and eleven position players; one of each is inactive."""
    roster = [
        RosterPlayer(id=f"{prefix}p{n}", status="I" if n == 5 else AVAILABLE_STATUS,
                     position=PITCHER_POSITION, name=f"Pitcher {prefix.upper()}{n}")
        for n in range(1, 6)
    ]
    for n, position in enumerate("23456789237", start=1):
        roster.append(RosterPlayer(id=f"{prefix}f{n}",
                                   status="I" if n == 11 else AVAILABLE_STATUS,
                                   position=position, name=f"Fielder {prefix.upper()}{n}"))
    return roster


class SimulatedSetup:
    """The lineup cards, pre-game data and weather screens.

    Confirm buttons refuse incomplete screens (logged as a warning), the
    way the real application keeps the operator on a screen until every
    required field is filled.
    """

    def __init__(self, dh: bool = False,
                 rosters: dict[str, list[RosterPlayer]] | None = None):
        self.dh = dh
        self.rosters = rosters or {"visiting": default_roster("v"),
                                   "home": default_roster("h")}
        self.screen = SetupScreen.MENU
        self.card: dict[int, dict[str, str]] = {}
        self.lineups: dict[str, dict[int, dict[str, str]]] = {}
        self.officials: dict[Locator, str] = {}
        self.weather: dict[Locator, str] = {}
        # open dropdown and the row or input it belongs to
        self.dropdown: tuple[Dropdown, int | Locator] | None = None

    @property
    def done(self) -> bool:
        return self.screen is SetupScreen.DONE

    @property
    def team(self) -> str | None:
        return LINEUP_TEAMS.get(self.screen)

    @property
    def row_count(self) -> int:
        return 10 if self.dh else 9

    def exists(self, locator: Locator) -> bool:
        if locator is Locator.VISITING_LINEUPS_MENU:
            return self.screen is SetupScreen.MENU
        if locator in LINEUP_LOCATORS:
            return self.team is not None
        if locator in OFFICIAL_INPUTS or locator is Locator.PREGAME_CONFIRM:
            return self.screen is SetupScreen.PREGAME_DATA
        if (locator in WEATHER_INPUTS or locator in WEATHER_TEXT_INPUTS
                or locator is Locator.WEATHER_CONFIRM):
            return self.screen is SetupScreen.WEATHER
        return False

    def click(self, locator: Locator) -> None:
        if not self.exists(locator):
            raise ElementNotFound(locator)
        if locator is Locator.VISITING_LINEUPS_MENU:
            self.screen = SetupScreen.VISITING_LINEUP
            self.card = {}
        elif locator is Locator.LINEUP_CONFIRM:
            self._confirm_lineup()
        elif locator in OFFICIAL_INPUTS:
            self.dropdown = (OFFICIAL_INPUTS[locator], locator)
        elif locator in WEATHER_INPUTS:
            self.dropdown = (WEATHER_INPUTS[locator], locator)
        elif locator is Locator.PREGAME_CONFIRM:
            missing = [loc.value for loc in OFFICIAL_INPUTS if loc not in self.officials]
            if missing:
                logger.warning("Pre-game data refused, missing: %s", ", ".join(missing))
                return
            self.screen = SetupScreen.WEATHER
        elif locator is Locator.WEATHER_CONFIRM:
            required = (*WEATHER_INPUTS, *WEATHER_TEXT_INPUTS)
            missing = [loc.value for loc in required if not self.weather.get(loc)]
            if missing:
                logger.warning("Weather refused, missing: %s", ", ".join(missing))
                return
            self.screen = SetupScreen.DONE

    def type_text(self, locator: Locator, text: str) -> None:
        if locator not in WEATHER_TEXT_INPUTS or not self.exists(locator):
            raise ElementNotFound(locator)
        self.weather[locator] = text

    def evaluate(self, script: Script, arg: dict[str, Any]) -> Any:
        if script is Script.ROSTER:
            if self.team is None:
                return []
            return [p.model_dump() for p in self.rosters[self.team]]
        if script is Script.DH_ENABLED:
            return self.team is not None and self.dh
        if script is Script.OPEN_LINEUP_CELL:
            row = int(arg["row"])
            kind = _dropdown(arg.get("column"))
            if (self.team is None or kind not in (Dropdown.POSITION, Dropdown.PLAYER)
                    or not 1 <= row <= self.row_count):
                return False
            self.dropdown = (kind, row)
            return True
        if script is Script.DROPDOWN_OPTIONS:
            kind = _dropdown(arg.get("kind"))
            if self.dropdown is None or self.dropdown[0] is not kind:
                return None
            return list(self._options(kind))
        if script is Script.CHOOSE_OPTION:
            return self._choose(_dropdown(arg.get("kind")), arg.get("value"),
                                arg.get("index"))
        raise AdapterFailure(f"Simulated setup cannot evaluate {script.value!r}")

    def _options(self, kind: Dropdown) -> tuple[str, ...]:
        if kind is Dropdown.POSITION:
            return POSITION_OPTIONS
        if kind is Dropdown.PLAYER:
            return tuple(p.id for p in self.rosters[self.team])
        return LIST_OPTIONS[kind]

    def _choose(self, kind: Dropdown | None, value: str | None, index: int | None) -> bool:
        if kind is None or self.dropdown is None or self.dropdown[0] is not kind:
            return False
        options = self._options(kind)
        if value is not None:
            if value not in options:
                return False
            chosen = value
        elif index is not None and 0 <= index < len(options):
            chosen = options[index]
        else:
            return False

        target = self.dropdown[1]
        self.dropdown = None
        if kind in (Dropdown.POSITION, Dropdown.PLAYER):
            self.card.setdefault(target, {})[kind.value] = chosen
        elif kind in (Dropdown.WEATHER_CONDITION, Dropdown.WIND_DIRECTION):
            self.weather[target] = chosen
        else:
            self.officials[target] = chosen
        return True

    def _confirm_lineup(self) -> None:
        team = self.team
        rows = [self.card.get(row, {}) for row in range(1, self.row_count + 1)]
        players = [r.get("player") for r in rows]
        positions = [r.get("position") for r in rows]
        available = {p.id for p in self.rosters[team] if p.available}
        if (None in players or None in positions
                or len(set(players)) != len(players)
                or len(set(positions)) != len(positions)
                or not set(players) <= available):
            logger.warning("Simulated stringer refused the %s lineup: %s", team, rows)
            return
        self.lineups[team] = dict(self.card)
        self.card = {}
        self.dropdown = None
        if self.screen is SetupScreen.VISITING_LINEUP:
            self.screen = SetupScreen.HOME_LINEUP
        else:
            self.screen = SetupScreen.PREGAME_DATA


def _dropdown(kind: Any) -> Dropdown | None:
    try:
        return Dropdown(kind)
    except ValueError:
        return None
