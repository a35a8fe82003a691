# /// script
# requires-python = ">=3.12"
# dependencies = []
# ///
"""Centralized configuration for environment variables, timing and selectors."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from pathlib import Path

from surface import Locator

logger = logging.getLogger(__name__)

CDP_URL_ENV = "PLAYWRIGHT_CDP_URL"
PAGE_URL_FRAGMENT_ENV = "STRINGER_PAGE_URL_FRAGMENT"
SELECTORS_FILE_ENV = "STRINGER_SELECTORS_FILE"
TIME_SCALE_ENV = "STRINGER_TIME_SCALE"
RUN_POLICY_ENV = "STRINGER_RUN_POLICY"
LOG_LEVEL_ENV = "STRINGER_LOG_LEVEL"

DEFAULT_CDP_URL = "http://localhost:9222"
DEFAULT_PAGE_URL_FRAGMENT = "stringer"


class RunPolicy(str, Enum):
    """What to do when a run is triggered while another is active."""
    REJECT = "reject"
    SUPERSEDE = "supersede"


# ---------------------------------------------------------------------------
# Environment getters
# ---------------------------------------------------------------------------

def get_cdp_url() -> str:
    """Return the Chrome DevTools Protocol endpoint of the stringer app."""
    return os.environ.get(CDP_URL_ENV, "") or DEFAULT_CDP_URL


def get_page_url_fragment() -> str:
    """Return the substring used to pick the stringer page among open tabs."""
    return os.environ.get(PAGE_URL_FRAGMENT_ENV, "") or DEFAULT_PAGE_URL_FRAGMENT


def get_selectors_file() -> Path | None:
    """Return the selector override file, or None if not configured."""
    value = os.environ.get(SELECTORS_FILE_ENV, "")
    return Path(value) if value else None


def get_time_scale() -> float:
    """Return the settle-delay multiplier (1.0 when unset or invalid)."""
    raw = os.environ.get(TIME_SCALE_ENV, "")
    if not raw:
        return 1.0
    try:
        scale = float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number", TIME_SCALE_ENV, raw)
        return 1.0
    if scale < 0:
        logger.warning("Ignoring %s=%r: must be >= 0", TIME_SCALE_ENV, raw)
        return 1.0
    return scale


def get_run_policy() -> RunPolicy:
    """Return the policy for a second trigger while a run is active."""
    raw = os.environ.get(RUN_POLICY_ENV, "").strip().lower()
    if not raw:
        return RunPolicy.REJECT
    try:
        return RunPolicy(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: expected 'reject' or 'supersede'",
                       RUN_POLICY_ENV, raw)
        return RunPolicy.REJECT


def get_log_level() -> str:
    """Return the log level name configured in the environment (default INFO)."""
    return os.environ.get(LOG_LEVEL_ENV, "").strip().upper() or "INFO"


# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Timing:
    """Settle delays and affordance timeouts, in seconds.

    Delays are deliberate pauses that let the stringer UI catch up; they
    are scaled by ``scaled()``.  Timeouts bound waits for elements and are
    never scaled, so a slow UI still gets its full allowance.
    """
    # Delays
    pitch_area_settle: float = 0.5
    first_pitch_settle: float = 1.0
    key_interval: float = 0.2
    pitch_settle: float = 1.5
    finalize_settle: float = 1.0
    between_strikeouts: float = 3.0
    after_confirm_defense: float = 1.0
    after_next_batter: float = 2.0
    between_at_bats: float = 1.0
    setup_menu_settle: float = 2.0
    setup_screen_settle: float = 3.0
    dropdown_settle: float = 0.5
    official_settle: float = 0.4
    weather_field_settle: float = 0.5

    # Timeouts
    pitch_menu_timeout: float = field(default=3.0, metadata={"timeout": True})
    next_batter_timeout: float = field(default=3.0, metadata={"timeout": True})
    runner_advance_timeout: float = field(default=2.0, metadata={"timeout": True})
    confirm_defense_timeout: float = field(default=10.0, metadata={"timeout": True})
    advance_confirm_defense_timeout: float = field(default=15.0, metadata={"timeout": True})
    transition_next_batter_timeout: float = field(default=10.0, metadata={"timeout": True})
    random_transition_timeout: float = field(default=3.0, metadata={"timeout": True})
    setup_screen_timeout: float = field(default=10.0, metadata={"timeout": True})

    def scaled(self, factor: float) -> Timing:
        """Return a copy with every delay multiplied by *factor*."""
        if factor < 0:
            raise ValueError(f"time scale must be >= 0, got {factor}")
        changes = {
            f.name: getattr(self, f.name) * factor
            for f in fields(self)
            if not f.metadata.get("timeout")
        }
        return replace(self, **changes)

    @classmethod
    def instant(cls) -> Timing:
        """Timing with all delays disabled (simulated surface, tests)."""
        return cls().scaled(0.0)


# ---------------------------------------------------------------------------
# Selectors (browser adapter only)
# ---------------------------------------------------------------------------

_PREGAME = "#mainContainer > div.content > div.pure-g.pregame-data-container"
_WEATHER = "#mainContainer > div.content > div.weather-wrap.pure-g"


def _pregame_input(form: int, field_div: int) -> str:
    return (f"{_PREGAME} > form:nth-child({form}) > fieldset"
            f" > div:nth-child({field_div}) > div.selectize-input.items")


DEFAULT_SELECTORS: dict[Locator, str] = {
    Locator.PITCH_AREA: ".field.responsive-pitch-fx",
    Locator.PITCH_MENU: "#stringer-client-ingame > div.content > div.panelMenu",
    Locator.MATCHUP_STATUS: (
        "#matchup > div:nth-child(2) > div.matchup-progress-container"
        " > div.matchup-atbat-status"
    ),
    Locator.FIRST_PITCH_DIALOG: "#templated-dialog",
    Locator.FIRST_PITCH_HEADER: "#templated-dialog-header",
    Locator.FIRST_PITCH_COMMIT: "#templated-dialog > div.templated-dialog-content > button",
    Locator.NEXT_BATTER: (
        "#templated-dialog > div.templated-dialog-content"
        " > button.pure-button.submit.default-focus-button"
    ),
    Locator.CONFIRM_DEFENSE: (
        "#field-dialog > div.pure-u-1-1.baseball-interrupt-actions > span:nth-child(2)"
        " > button.commit-fielders-button.pure-button.submit.commit"
    ),
    Locator.RUNNER_ADVANCE_CONFIRM: (
        "#field-dialog > div.pure-u-1-1.baseball-interrupt-actions"
        " > span:nth-child(2) > button.pure-button.submit.commit"
    ),
    Locator.HOME_SCORE: "#scoreboard .team-home .runs",
    Locator.VISITING_SCORE: "#scoreboard .team-visiting .runs",
    Locator.INNING: "#scoreboard .inning-indicator",
    Locator.RUNNER_FIRST: "#diamond .base-first.occupied",
    Locator.RUNNER_SECOND: "#diamond .base-second.occupied",
    Locator.RUNNER_THIRD: "#diamond .base-third.occupied",
    Locator.VISITING_LINEUPS_MENU: (
        "xpath=/html/body/div[3]/core-drawer-panel/core-selector/div[2]"
        "/core-header-panel/div/div/div[1]/core-menu/core-item[8]/div"
    ),
    Locator.ROSTER_ROWS: "#lineup-scroller > div > table > tbody > tr",
    Locator.LINEUP_ROWS: (
        "#mainContainer > div.content > div > div.view-wrap.pure-u-2-3"
        " > div:nth-child(2) > table > tbody > tr"
    ),
    Locator.DH_OPTION: "#dhOption",
    Locator.LINEUP_CONFIRM: (
        "#mainContainer > div.content > div"
        " > div.pure-u-1-1.baseball-interrupt-actions > button:nth-child(1)"
    ),
    Locator.STRINGER_INPUT: _pregame_input(1, 3),
    Locator.OFFICIAL_SCORER_INPUT: (
        f"{_PREGAME} > form:nth-child(2) > fieldset > div > div.selectize-input.items"
    ),
    Locator.UMPIRE_HOME_PLATE_INPUT: _pregame_input(3, 3),
    Locator.UMPIRE_LEFT_FIELD_INPUT: _pregame_input(4, 3),
    Locator.UMPIRE_FIRST_BASE_INPUT: _pregame_input(3, 5),
    Locator.UMPIRE_RIGHT_FIELD_INPUT: _pregame_input(4, 5),
    Locator.UMPIRE_SECOND_BASE_INPUT: _pregame_input(3, 7),
    Locator.UMPIRE_THIRD_BASE_INPUT: _pregame_input(3, 9),
    Locator.PREGAME_CONFIRM: "#mainContainer > div.content > button",
    Locator.WEATHER_CONDITION_INPUT: (
        f"{_WEATHER} > form:nth-child(1) > fieldset > div > div.selectize-input"
    ),
    Locator.WEATHER_TEMPERATURE: "#weather-temperature",
    Locator.WIND_DIRECTION_INPUT: (
        f"{_WEATHER} > form:nth-child(3) > fieldset"
        " > div.selectize-control.wind-direction.single > div.selectize-input"
    ),
    Locator.WIND_SPEED: "#weather-wind-speed",
    # the pre-game and weather screens share one confirm button
    Locator.WEATHER_CONFIRM: "#mainContainer > div.content > button",
}


def load_selectors(path: Path | None = None) -> dict[Locator, str]:
    """Return the selector map, with overrides from a JSON file applied.

    The file maps locator names (e.g. ``"home_score"``) to CSS selectors.

    Raises:
        ValueError: The file is not a JSON object or names an unknown locator.
    """
    selectors = dict(DEFAULT_SELECTORS)
    if path is None:
        path = get_selectors_file()
    if path is None:
        return selectors

    with open(path) as f:
        overrides = json.load(f)
    if not isinstance(overrides, dict):
        raise ValueError(f"{path}: expected a JSON object of locator -> selector")

    for name, selector in overrides.items():
        try:
            locator = Locator(name)
        except ValueError:
            known = ", ".join(loc.value for loc in Locator)
            raise ValueError(f"{path}: unknown locator {name!r} (known: {known})") from None
        if not isinstance(selector, str) or not selector:
            raise ValueError(f"{path}: selector for {name!r} must be a non-empty string")
        selectors[locator] = selector
    logger.info("Loaded %d selector override(s) from %s", len(overrides), path)
    return selectors


# ---------------------------------------------------------------------------
# Aggregate driver configuration
# ---------------------------------------------------------------------------

@dataclass
class DriverConfig:
    """Everything the automation runner needs besides the surface itself."""
    timing: Timing = field(default_factory=Timing)
    run_policy: RunPolicy = RunPolicy.REJECT
    max_strikeout_attempts: int = 6
    max_at_bats: int = 600

    @classmethod
    def from_env(cls) -> DriverConfig:
        return cls(
            timing=Timing().scaled(get_time_scale()),
            run_policy=get_run_policy(),
        )
