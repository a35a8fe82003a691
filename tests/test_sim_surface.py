# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0", "pytest>=7.0"]
# ///
"""Tests for the simulated stringer.

Verifies that the in-memory stringer behaves like the real application:
1. Rendered texts match what the game-state reader parses
2. Prompts gate the pitch area and the keyboard
3. Finalize keys are only accepted once the count allows them
4. Hit confirmation must match whether runs scored
5. Half-inning ends, game over and walk-off follow regulation rules
6. Failure injection and script evaluation
7. Pre-game screens: lineup cards, officials and weather gate the game
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from models import Half, Runners
from sim_surface import MenuStage, Prompt, SetupScreen, SimulatedSetup, SimulatedStringer
from surface import AdapterFailure, DrivenSurface, ElementNotFound, Locator, Script


def press(sim, keys):
    for key in keys:
        sim.send_key(key)


def ready(**kwargs):
    """A stringer with the pitch menu open."""
    sim = SimulatedStringer(first_pitch_prompt=False, **kwargs)
    sim.click(Locator.PITCH_AREA)
    return sim


# ===========================================================================
# Step 1: rendered texts
# ===========================================================================

class TestStep1Texts:
    def test_satisfies_driven_surface_protocol(self):
        assert isinstance(SimulatedStringer(), DrivenSurface)

    def test_inning_label(self):
        assert SimulatedStringer(inning=3).get_text(Locator.INNING) == "TOP 3"
        assert SimulatedStringer(inning=10, half=Half.BOTTOM).get_text(Locator.INNING) == "BOT 10"

    def test_matchup_status(self):
        assert SimulatedStringer(balls=2, strikes=1, outs=1) \
            .get_text(Locator.MATCHUP_STATUS) == "2-1 1 out"
        assert SimulatedStringer(outs=2).get_text(Locator.MATCHUP_STATUS) == "0-0 2 outs"

    def test_scores_and_bases(self):
        sim = SimulatedStringer(home_score=4, visiting_score=7, runners=Runners(second=True))
        assert sim.get_text(Locator.HOME_SCORE) == "4"
        assert sim.get_text(Locator.VISITING_SCORE) == "7"
        assert sim.exists(Locator.RUNNER_SECOND)
        assert not sim.exists(Locator.RUNNER_FIRST)


# ===========================================================================
# Step 2: prompts
# ===========================================================================

class TestStep2Prompts:
    def test_first_pitch_dialog(self):
        sim = SimulatedStringer()
        sim.click(Locator.PITCH_AREA)
        assert sim.prompt is Prompt.FIRST_PITCH
        assert sim.get_text(Locator.FIRST_PITCH_HEADER) == "First Pitch"
        assert not sim.exists(Locator.PITCH_MENU)

        sim.click(Locator.FIRST_PITCH_COMMIT)
        sim.click(Locator.PITCH_AREA)
        assert sim.exists(Locator.PITCH_MENU)

    def test_keys_ignored_while_prompt_open(self):
        sim = SimulatedStringer()
        sim.click(Locator.PITCH_AREA)
        press(sim, "pss")
        assert sim.strikes == 0

    def test_clicking_absent_prompt_raises(self):
        with pytest.raises(ElementNotFound):
            SimulatedStringer().click(Locator.NEXT_BATTER)

    def test_commit_button_also_calls_next_batter(self):
        sim = ready()
        press(sim, "px1a")
        assert sim.prompt is Prompt.NEXT_BATTER
        sim.click(Locator.FIRST_PITCH_COMMIT)
        assert sim.prompt is Prompt.NONE


# ===========================================================================
# Step 3: finalize keys
# ===========================================================================

class TestStep3Finalize:
    def test_strike_sequence_counts_one_strike(self):
        sim = ready()
        press(sim, "pss")
        assert sim.strikes == 1
        assert sim.menu is MenuStage.CLOSED

    def test_strikeout_key_needs_three_strikes(self):
        sim = ready(strikes=2)
        sim.send_key("k")
        assert sim.outs == 0
        sim.click(Locator.PITCH_AREA)
        press(sim, "pssk")
        assert sim.outs == 1
        assert sim.prompt is Prompt.NEXT_BATTER

    def test_walk_key_needs_four_balls(self):
        sim = ready(balls=3)
        sim.send_key("w")
        assert sim.bases == [False, False, False]
        sim.click(Locator.PITCH_AREA)
        press(sim, "pbbw")
        assert sim.bases == [True, False, False]


# ===========================================================================
# Step 4: hit confirmation
# ===========================================================================

class TestStep4HitConfirm:
    def test_wrong_confirmation_is_ignored(self):
        sim = ready(runners=Runners(third=True))
        press(sim, "px1a")
        assert sim.menu is MenuStage.HIT_CONFIRM
        assert sim.visiting_score == 0
        sim.send_key("r")
        assert sim.visiting_score == 1
        assert sim.bases == [True, False, False]

    def test_triple_clears_the_bases(self):
        sim = ready(runners=Runners(first=True, second=True))
        press(sim, "px3r")
        assert sim.visiting_score == 2
        assert sim.bases == [False, False, True]


# ===========================================================================
# Step 5: half-inning and game end
# ===========================================================================

class TestStep5GameEnd:
    def test_third_out_flips_label_and_waits_for_defense(self):
        sim = ready(outs=2, runners=Runners(first=True))
        press(sim, "pxg")
        assert (sim.inning, sim.half, sim.outs) == (1, Half.BOTTOM, 3)
        assert sim.prompt is Prompt.CONFIRM_DEFENSE
        assert sim.bases == [False, False, False]

        sim.click(Locator.CONFIRM_DEFENSE)
        assert sim.outs == 0
        assert sim.prompt is Prompt.NEXT_BATTER
        assert sim.first_pitch_pending

    def test_home_leading_after_top_nine_ends_game(self):
        sim = ready(inning=9, outs=2, home_score=3, visiting_score=1)
        press(sim, "pxf")
        assert sim.game_over
        assert sim.prompt is Prompt.NONE

    def test_tie_after_bottom_nine_goes_to_extras(self):
        sim = ready(inning=9, half=Half.BOTTOM, outs=2, home_score=2, visiting_score=2)
        press(sim, "pxf")
        assert not sim.game_over
        assert (sim.inning, sim.half) == (10, Half.TOP)

    def test_walk_off_ends_game_immediately(self):
        sim = ready(inning=9, half=Half.BOTTOM, home_score=2, visiting_score=2,
                    runners=Runners(third=True))
        press(sim, "px1r")
        assert sim.game_over
        assert sim.home_score == 3
        assert sim.outs == 0
        sim.click(Locator.PITCH_AREA)
        assert not sim.exists(Locator.PITCH_MENU)

    def test_runs_are_logged_for_batting_team(self):
        sim = ready(inning=4, half=Half.BOTTOM)
        press(sim, "px4r")
        assert [(e.inning, e.half, e.team, e.runs) for e in sim.runs_log] == \
            [(4, Half.BOTTOM, "home", 1)]


# ===========================================================================
# Step 6: failure injection and evaluate
# ===========================================================================

class TestStep6Misc:
    def test_failing_locator_raises(self):
        sim = SimulatedStringer()
        sim.failing.add(Locator.INNING)
        with pytest.raises(AdapterFailure):
            sim.get_text(Locator.INNING)

    def test_evaluate_state(self):
        sim = SimulatedStringer(inning=2, home_score=1)
        state = sim.evaluate("state")
        assert state["inning"] == 2
        assert state["home_score"] == 1
        assert state["game_over"] is False
        assert state["prompt"] == "NONE"

    def test_evaluate_unknown_script_raises(self):
        with pytest.raises(AdapterFailure):
            SimulatedStringer().evaluate("document.title")

    def test_pointer_inputs_are_logged(self):
        sim = SimulatedStringer()
        sim.click_at_point(10, 20)
        sim.click_relative(Locator.PITCH_AREA, 5, -5)
        sim.type_text(Locator.INNING, "x")
        assert sim.input_log == ["point:10,20", "relative:pitch_area:5,-5",
                                 "type:inning:x"]


# ===========================================================================
# Step 7: pre-game screens
# ===========================================================================

def fill_card(sim, rows):
    """Fill a lineup card with (position, player) pairs, row 1 first."""
    for row, (position, player) in enumerate(rows, start=1):
        sim.evaluate(Script.OPEN_LINEUP_CELL, {"row": row, "column": "position"})
        assert sim.evaluate(Script.CHOOSE_OPTION, {"kind": "position", "value": position})
        sim.evaluate(Script.OPEN_LINEUP_CELL, {"row": row, "column": "player"})
        assert sim.evaluate(Script.CHOOSE_OPTION, {"kind": "player", "value": player})


NINE_POSITIONS = ("P", "C", "1B", "2B", "3B", "SS", "LF", "CF", "RF")


class TestStep7Setup:
    def test_scoring_screen_hidden_until_setup_done(self):
        sim = SimulatedStringer(setup=SimulatedSetup())
        assert sim.in_setup
        assert sim.exists(Locator.VISITING_LINEUPS_MENU)
        assert not sim.exists(Locator.PITCH_AREA)
        assert sim.evaluate("state")["in_setup"] is True

    def test_roster_only_on_lineup_card(self):
        sim = SimulatedStringer(setup=SimulatedSetup())
        assert sim.evaluate(Script.ROSTER) == []
        sim.click(Locator.VISITING_LINEUPS_MENU)
        roster = sim.evaluate(Script.ROSTER)
        assert len(roster) == 16
        assert roster[0] == {"id": "vp1", "status": "A", "position": "1",
                             "name": "Pitcher V1"}

    def test_dropdown_must_be_open_to_choose(self):
        sim = SimulatedStringer(setup=SimulatedSetup())
        sim.click(Locator.VISITING_LINEUPS_MENU)
        assert sim.evaluate(Script.DROPDOWN_OPTIONS, {"kind": "position"}) is None
        assert not sim.evaluate(Script.CHOOSE_OPTION, {"kind": "position", "value": "P"})
        assert sim.evaluate(Script.OPEN_LINEUP_CELL, {"row": 1, "column": "position"})
        assert sim.evaluate(Script.DROPDOWN_OPTIONS, {"kind": "position"})[-1] == "DH"
        assert not sim.evaluate(Script.OPEN_LINEUP_CELL, {"row": 10, "column": "position"})

    def test_incomplete_lineup_is_refused(self):
        sim = SimulatedStringer(setup=SimulatedSetup())
        sim.click(Locator.VISITING_LINEUPS_MENU)
        fill_card(sim, [("P", "vp1"), ("C", "vf1")])
        sim.click(Locator.LINEUP_CONFIRM)
        assert sim.setup.screen is SetupScreen.VISITING_LINEUP

    def test_inactive_player_is_refused(self):
        sim = SimulatedStringer(setup=SimulatedSetup())
        sim.click(Locator.VISITING_LINEUPS_MENU)
        players = ["vp1"] + [f"vf{n}" for n in range(4, 12)]  # vf11 is inactive
        fill_card(sim, zip(NINE_POSITIONS, players))
        sim.click(Locator.LINEUP_CONFIRM)
        assert sim.setup.screen is SetupScreen.VISITING_LINEUP

    def test_confirmed_lineup_moves_to_home_card(self):
        sim = SimulatedStringer(setup=SimulatedSetup())
        sim.click(Locator.VISITING_LINEUPS_MENU)
        players = ["vp1"] + [f"vf{n}" for n in range(1, 9)]
        fill_card(sim, zip(NINE_POSITIONS, players))
        sim.click(Locator.LINEUP_CONFIRM)
        assert sim.setup.screen is SetupScreen.HOME_LINEUP
        assert sim.setup.lineups["visiting"][9] == {"position": "RF", "player": "vf8"}
        assert sim.evaluate(Script.ROSTER)[0]["id"] == "hp1"
        assert "script:choose_option" in sim.input_log

    def test_pregame_confirm_needs_every_official(self):
        setup = SimulatedSetup()
        setup.screen = SetupScreen.PREGAME_DATA
        sim = SimulatedStringer(setup=setup)
        sim.click(Locator.STRINGER_INPUT)
        assert sim.evaluate(Script.CHOOSE_OPTION, {"kind": "stringer", "index": 1})
        sim.click(Locator.PREGAME_CONFIRM)
        assert setup.screen is SetupScreen.PREGAME_DATA
        assert setup.officials == {Locator.STRINGER_INPUT: "Sam Stringer"}

    def test_weather_confirm_ends_setup(self):
        setup = SimulatedSetup()
        setup.screen = SetupScreen.WEATHER
        sim = SimulatedStringer(setup=setup)
        for locator, value in ((Locator.WEATHER_CONDITION_INPUT, "Rain"),
                               (Locator.WIND_DIRECTION_INPUT, "Varies")):
            sim.click(locator)
            kind = "weather-condition" if locator is Locator.WEATHER_CONDITION_INPUT \
                else "wind-direction"
            assert sim.evaluate(Script.CHOOSE_OPTION, {"kind": kind, "value": value})
        sim.type_text(Locator.WEATHER_TEMPERATURE, "58")
        sim.type_text(Locator.WIND_SPEED, "5")
        sim.click(Locator.WEATHER_CONFIRM)
        assert setup.done
        assert not sim.in_setup
        assert sim.exists(Locator.PITCH_AREA)

    def test_setup_locators_without_setup(self):
        sim = SimulatedStringer()
        assert not sim.exists(Locator.LINEUP_CONFIRM)
        with pytest.raises(ElementNotFound):
            sim.click(Locator.LINEUP_CONFIRM)
        with pytest.raises(AdapterFailure):
            sim.evaluate(Script.ROSTER)
