# /// script
# requires-python = ">=3.12"
# dependencies = [
#     "playwright>=1.40",
#     "pydantic>=2.0",
# ]
# ///
"""Stringer driver -- command-line entry point.

Usage:
    uv run driver.py advance --halves 4              # strike out the side 4 times
    uv run driver.py score --home 5 --visiting 3     # play to a 3-5 final
    uv run driver.py random --seed 7                 # weighted random game
    uv run driver.py --sim score --home 2 --visiting 4 --start-inning 6
    uv run driver.py setup --condition Cloudy --temperature 64  # lineups, officials, weather
    uv run driver.py --sim setup --dh                # pre-game screens, DH on

By default the driver attaches to the running stringer app over CDP
(``PLAYWRIGHT_CDP_URL``).  ``--sim`` drives the in-memory simulated
stringer instead.

While a run is active, type ``p`` (pause), ``r`` (resume), ``c`` (cancel)
or ``s`` (status) followed by Enter.  Ctrl-C cancels; a second Ctrl-C
aborts immediately.

Exit codes: 0 completed, 1 failed or invalid goal, 130 cancelled.
"""

from __future__ import annotations

import argparse
import logging
import random
import signal
import sys
import threading
from typing import Iterable, TextIO

from pydantic import ValidationError

from automation import AutomationRunner, InvalidGoal, RunResult, RunStatus
from config import (
    DriverConfig,
    Timing,
    get_cdp_url,
    get_log_level,
    get_page_url_fragment,
    load_selectors,
)
from control_plane import RunAlreadyActive
from game_state_reader import snapshot
from models import (
    AdvanceHalfInnings,
    Half,
    InitialSetup,
    SimulateRandomGame,
    SimulateToScore,
)
from playwright_surface import PlaywrightSurface
from sim_surface import SimulatedSetup, SimulatedStringer
from surface import AdapterFailure

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CANCELLED = 130

EXIT_CODES = {
    RunStatus.COMPLETED: EXIT_OK,
    RunStatus.FAILED: EXIT_FAILED,
    RunStatus.CANCELLED: EXIT_CANCELLED,
}


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Automate game progression in the baseball stringer app."
    )
    parser.add_argument(
        "--sim", action="store_true",
        help="Drive the simulated stringer instead of the live app.",
    )
    parser.add_argument(
        "--start-inning", type=int, default=1,
        help="Simulated stringer: starting inning (default 1).",
    )
    parser.add_argument(
        "--start-half", choices=["top", "bottom"], default="top",
        help="Simulated stringer: starting half (default top).",
    )
    parser.add_argument(
        "--start-home", type=int, default=0,
        help="Simulated stringer: starting home score.",
    )
    parser.add_argument(
        "--start-visiting", type=int, default=0,
        help="Simulated stringer: starting visiting score.",
    )
    parser.add_argument(
        "--cdp-url", default=None,
        help="CDP endpoint of the stringer app (default: $PLAYWRIGHT_CDP_URL "
             "or http://localhost:9222).",
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Random seed for run planning and random games.",
    )
    parser.add_argument(
        "--verbose", action="store_true",
        help="Log every input (DEBUG).",
    )
    parser.add_argument(
        "--quiet", action="store_true",
        help="Only log warnings and errors.",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    advance = sub.add_parser("advance", help="Skip half-innings without scoring.")
    advance.add_argument("--halves", type=int, default=4,
                         help="Number of half-innings to advance (default 4).")

    score = sub.add_parser("score", help="Simulate to a final score.")
    score.add_argument("--home", type=int, required=True, help="Final home score.")
    score.add_argument("--visiting", type=int, required=True, help="Final visiting score.")

    sub.add_parser("random", help="Simulate the rest of the game at random.")

    setup = sub.add_parser(
        "setup", help="Fill both lineups, the pre-game officials and the weather.")
    setup.add_argument("--condition", default="Clear",
                       help="Weather condition option (default Clear).")
    setup.add_argument("--temperature", type=int, default=70,
                       help="Temperature in degrees F (default 70).")
    setup.add_argument("--wind-direction", default="Calm",
                       help="Wind direction option (default Calm).")
    setup.add_argument("--wind-speed", type=int, default=0,
                       help="Wind speed in mph (default 0).")
    setup.add_argument("--dh", action="store_true",
                       help="Simulated stringer: lineup cards use the designated hitter.")
    return parser


def make_goal(args: argparse.Namespace):
    """Build the goal model for the parsed subcommand.

    Raises:
        InvalidGoal: The arguments do not form a valid goal.
    """
    if args.command == "advance":
        if args.halves < 1:
            raise InvalidGoal("--halves must be at least 1.")
        return AdvanceHalfInnings(half_innings=args.halves)
    if args.command == "score":
        if args.home < 0 or args.visiting < 0:
            raise InvalidGoal("Scores cannot be negative.")
        return SimulateToScore(home_target=args.home, visiting_target=args.visiting)
    if args.command == "random":
        return SimulateRandomGame()
    if args.command == "setup":
        try:
            return InitialSetup(weather_condition=args.condition,
                                temperature=args.temperature,
                                wind_direction=args.wind_direction,
                                wind_speed=args.wind_speed)
        except ValidationError as e:
            raise InvalidGoal("; ".join(f"{err['loc'][0]}: {err['msg']}"
                                        for err in e.errors())) from e
    raise InvalidGoal(f"Unknown command {args.command!r}")


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = getattr(logging, get_log_level(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# Operator console
# ---------------------------------------------------------------------------

def handle_command(runner: AutomationRunner, command: str, out: TextIO) -> None:
    """Apply one operator command to *runner*."""
    cmd = command.strip().lower()
    if not cmd:
        return
    if cmd in ("p", "pause"):
        print("Pausing..." if runner.pause() else "Nothing to pause.", file=out)
    elif cmd in ("r", "resume"):
        print("Resuming." if runner.resume() else "Not paused.", file=out)
    elif cmd in ("c", "cancel"):
        print("Cancelling..." if runner.cancel() else "No active run.", file=out)
    elif cmd in ("s", "status"):
        run = runner.plane.active_run
        if run is None:
            print("Idle.", file=out)
        else:
            state = "paused" if runner.is_paused else "running"
            print(f"Run {run.run_id} {state}: {run.description} (step: {run.current_step})",
                  file=out)
    else:
        print(f"Unknown command {cmd!r}. Use p(ause), r(esume), c(ancel), s(tatus).",
              file=out)


def operator_console(runner: AutomationRunner, lines: Iterable[str],
                     out: TextIO | None = None) -> None:
    """Feed operator commands from *lines* until they run out."""
    for line in lines:
        handle_command(runner, line, out or sys.stdout)


def _start_console(runner: AutomationRunner) -> None:
    thread = threading.Thread(target=operator_console, args=(runner, sys.stdin),
                              name="operator-console", daemon=True)
    thread.start()


def _install_interrupt_handler(runner: AutomationRunner) -> None:
    def on_interrupt(signum, frame):
        print("\nCancelling (Ctrl-C again to abort)...", file=sys.stderr)
        runner.cancel()
        signal.signal(signal.SIGINT, signal.default_int_handler)

    signal.signal(signal.SIGINT, on_interrupt)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def build_sim_surface(args: argparse.Namespace) -> SimulatedStringer:
    return SimulatedStringer(
        inning=max(1, args.start_inning),
        half=Half.TOP if args.start_half == "top" else Half.BOTTOM,
        home_score=max(0, args.start_home),
        visiting_score=max(0, args.start_visiting),
        setup=SimulatedSetup(dh=args.dh) if args.command == "setup" else None,
    )


def report(result: RunResult | None, surface, out: TextIO | None = None) -> int:
    """Print the outcome of a run and return the process exit code."""
    out = out or sys.stdout
    if result is None:
        print("Run did not finish.", file=out)
        return EXIT_FAILED
    print(result.describe(), file=out)
    if isinstance(result.goal, InitialSetup):
        return EXIT_CODES[result.status]
    final = (result.progression.final_state if result.progression is not None
             else snapshot(surface))
    print(f"Final: {final.score_display()} ({final.label})", file=out)
    return EXIT_CODES[result.status]


def run(args: argparse.Namespace, surface, config: DriverConfig,
        interactive: bool = True) -> int:
    rng = random.Random(args.seed)
    runner = AutomationRunner(surface, config, rng=rng)
    try:
        goal = make_goal(args)
    except InvalidGoal as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILED

    if interactive:
        _start_console(runner)
        _install_interrupt_handler(runner)
        print("Commands: p(ause), r(esume), c(ancel), s(tatus)")

    try:
        # Inline: Playwright's sync API must stay on this thread
        runner.start_run(goal, background=False)
    except (InvalidGoal, RunAlreadyActive) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILED
    return report(runner.result, surface)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose, args.quiet)

    config = DriverConfig.from_env()
    if args.sim:
        config.timing = Timing.instant()
        surface = build_sim_surface(args)
        return run(args, surface, config)

    cdp_url = args.cdp_url or get_cdp_url()
    try:
        selectors = load_selectors()
    except (OSError, ValueError) as e:
        print(f"Error loading selectors: {e}", file=sys.stderr)
        return EXIT_FAILED
    logger.info("Connecting to the stringer app at %s", cdp_url)
    try:
        surface = PlaywrightSurface.connect(cdp_url, get_page_url_fragment(), selectors)
    except AdapterFailure as e:
        logger.error("Could not attach to %s: %s", cdp_url, e)
        return EXIT_FAILED
    try:
        return run(args, surface, config)
    finally:
        surface.close()


if __name__ == "__main__":
    sys.exit(main())
