# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Game-state reader.

Translates the text the stringer displays (score labels, the inning label,
the ball-strike-out counter and the base indicators) into a ``GameState``.

Reads are independent and best-effort.  A field that cannot be read or
parsed falls back to a defined default:

* 0 for scores and counts
* 1 for the inning number
* ``TOP`` when the inning label is missing
* all-false runners

Internally every field is a ``Reading``, either ``Parsed`` or ``Defaulted``
(with the reason), so callers and tests can tell a real 0-0 from a failed
read.  ``read_game_state`` returns the snapshot together with a
``StateReport`` listing the defaulted fields.

Adapter failures during a read are absorbed into defaults.  ``Cancelled``
is never absorbed: only ``AdapterFailure`` is caught here.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from models import GameState, Half, Runners
from surface import AdapterFailure, Locator

logger = logging.getLogger(__name__)

T = TypeVar("T")

# "0-1 0 out", "3-2 2 outs"  (balls-strikes outs)
MATCHUP_RE = re.compile(r"(\d+)-(\d+)\s+(\d+)\s+outs?", re.IGNORECASE)
DIGITS_RE = re.compile(r"\d+")


# ---------------------------------------------------------------------------
# Tagged readings
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Parsed(Generic[T]):
    value: T


@dataclass(frozen=True)
class Defaulted(Generic[T]):
    value: T
    reason: str


Reading = Parsed[T] | Defaulted[T]


@dataclass
class StateReport:
    """Which fields of a snapshot were defaulted, and why."""
    defaulted: dict[str, str] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return not self.defaulted

    def is_defaulted(self, name: str) -> bool:
        return name in self.defaulted

    def record(self, name: str, reading: Reading) -> None:
        if isinstance(reading, Defaulted):
            self.defaulted[name] = reading.reason


# ---------------------------------------------------------------------------
# Text parsing (pure)
# ---------------------------------------------------------------------------

def parse_first_int(text: str | None, default: int = 0) -> Reading[int]:
    """Extract the first run of digits from *text*."""
    if not text:
        return Defaulted(default, "empty text")
    m = DIGITS_RE.search(text)
    if m is None:
        return Defaulted(default, f"no digits in {text!r}")
    return Parsed(int(m.group(0)))


def parse_half(text: str | None) -> Reading[Half]:
    """TOP if the label contains "top" (any case), otherwise BOTTOM."""
    if not text or not text.strip():
        return Defaulted(Half.TOP, "empty inning label")
    if "top" in text.lower():
        return Parsed(Half.TOP)
    return Parsed(Half.BOTTOM)


def parse_matchup(text: str | None) -> tuple[Reading[int], Reading[int], Reading[int]]:
    """Parse the "B-S N out(s)" counter into (balls, strikes, outs)."""
    if not text:
        reason = "empty matchup status"
        return Defaulted(0, reason), Defaulted(0, reason), Defaulted(0, reason)
    m = MATCHUP_RE.search(text)
    if m is None:
        reason = f"unrecognized matchup status {text!r}"
        return Defaulted(0, reason), Defaulted(0, reason), Defaulted(0, reason)
    balls, strikes, outs = (int(g) for g in m.groups())
    return (_clamped(balls, 3, "balls"), _clamped(strikes, 3, "strikes"),
            _clamped(outs, 3, "outs"))


def _clamped(value: int, upper: int, name: str) -> Reading[int]:
    if value > upper:
        return Defaulted(upper, f"{name}={value} out of range, clamped to {upper}")
    return Parsed(value)


# ---------------------------------------------------------------------------
# Surface reads (best-effort)
# ---------------------------------------------------------------------------

def read_text(surface, locator: Locator) -> Reading[str]:
    """Read the text of *locator*, defaulting to "" on adapter failure."""
    try:
        return Parsed(surface.get_text(locator))
    except AdapterFailure as e:
        return Defaulted("", f"{locator.value}: {e}")


def read_flag(surface, locator: Locator) -> Reading[bool]:
    try:
        return Parsed(bool(surface.exists(locator)))
    except AdapterFailure as e:
        return Defaulted(False, f"{locator.value}: {e}")


def _text_then(reading: Reading[str], parse) -> Reading:
    if isinstance(reading, Defaulted):
        parsed = parse(None)
        return Defaulted(parsed.value, reading.reason)
    return parse(reading.value)


def read_scores(surface) -> tuple[Reading[int], Reading[int]]:
    """Return (home, visiting) score readings."""
    home = _text_then(read_text(surface, Locator.HOME_SCORE), parse_first_int)
    visiting = _text_then(read_text(surface, Locator.VISITING_SCORE), parse_first_int)
    return home, visiting


def read_inning(surface) -> tuple[Reading[int], Reading[Half]]:
    """Return (inning number, half) readings from the inning label."""
    text = read_text(surface, Locator.INNING)
    number = _text_then(text, lambda t: parse_first_int(t, default=1))
    if isinstance(number, Parsed) and number.value < 1:
        number = Defaulted(1, f"inning {number.value} is not positive")
    half = _text_then(text, parse_half)
    return number, half


def read_count(surface) -> tuple[Reading[int], Reading[int], Reading[int]]:
    """Return (balls, strikes, outs) readings from the matchup counter."""
    text = read_text(surface, Locator.MATCHUP_STATUS)
    if isinstance(text, Defaulted):
        return (Defaulted(0, text.reason), Defaulted(0, text.reason),
                Defaulted(0, text.reason))
    return parse_matchup(text.value)


def read_runners(surface) -> Reading[Runners]:
    """Return base occupancy from the three base indicators."""
    first = read_flag(surface, Locator.RUNNER_FIRST)
    second = read_flag(surface, Locator.RUNNER_SECOND)
    third = read_flag(surface, Locator.RUNNER_THIRD)
    runners = Runners(first=first.value, second=second.value, third=third.value)
    failed = [r.reason for r in (first, second, third) if isinstance(r, Defaulted)]
    if failed:
        return Defaulted(runners, "; ".join(failed))
    return Parsed(runners)


def read_game_state(surface) -> tuple[GameState, StateReport]:
    """Read a fresh snapshot of the game from *surface*.

    Returns:
        The snapshot and a report of which fields fell back to defaults.
    """
    report = StateReport()
    home, visiting = read_scores(surface)
    inning, half = read_inning(surface)
    balls, strikes, outs = read_count(surface)
    runners = read_runners(surface)

    for name, reading in (("home_score", home), ("visiting_score", visiting),
                          ("inning", inning), ("half", half), ("balls", balls),
                          ("strikes", strikes), ("outs", outs),
                          ("runners", runners)):
        report.record(name, reading)

    state = GameState(
        inning=inning.value,
        half=half.value,
        outs=outs.value,
        balls=balls.value,
        strikes=strikes.value,
        home_score=home.value,
        visiting_score=visiting.value,
        runners=runners.value,
    )
    if not report.complete:
        logger.warning("Game state read with defaults: %s",
                       ", ".join(f"{k} ({v})" for k, v in report.defaulted.items()))
    return state, report


def snapshot(surface) -> GameState:
    """Shorthand for ``read_game_state(surface)[0]``."""
    return read_game_state(surface)[0]
