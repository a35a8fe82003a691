# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0", "pytest>=7.0"]
# ///
"""Tests for the data models.

Verifies:
1. Runs scored by a hit follow from the runners on base
2. GameState validates its ranges and renders labels
3. Outcome enum helpers and the weighted outcome table
4. Goals validate and round-trip through the discriminated union
5. Roster rows know whether a player is available and a pitcher
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest
from pydantic import TypeAdapter, ValidationError

from models import (
    OUTCOME_WEIGHTS,
    AdvanceHalfInnings,
    AtBatOutcome,
    GameState,
    Goal,
    Half,
    HitKind,
    InitialSetup,
    OutcomeWeight,
    OutKind,
    RosterPlayer,
    Runners,
    SimulateRandomGame,
    SimulateToScore,
    describe_goal,
)


# ===========================================================================
# Step 1: runs on hit
# ===========================================================================

LOADED = Runners(first=True, second=True, third=True)


@pytest.mark.parametrize("runners,kind,expected", [
    (Runners(), HitKind.SINGLE, 0),
    (Runners(), HitKind.HOME_RUN, 1),
    (Runners(third=True), HitKind.SINGLE, 1),
    (Runners(second=True), HitKind.SINGLE, 0),
    (Runners(second=True), HitKind.DOUBLE, 1),
    (Runners(first=True), HitKind.DOUBLE, 0),
    (Runners(first=True), HitKind.TRIPLE, 1),
    (LOADED, HitKind.SINGLE, 1),
    (LOADED, HitKind.DOUBLE, 2),
    (LOADED, HitKind.TRIPLE, 3),
    (LOADED, HitKind.HOME_RUN, 4),
])
def test_runs_on_hit(runners, kind, expected):
    assert runners.runs_on_hit(kind) == expected


def test_runner_helpers():
    assert LOADED.count() == 3
    assert LOADED.loaded
    assert not Runners(first=True).loaded
    assert Runners().count() == 0


# ===========================================================================
# Step 2: game state
# ===========================================================================

class TestStep2GameState:
    @pytest.mark.parametrize("field,value", [
        ("inning", 0), ("outs", 4), ("balls", 4), ("strikes", 4), ("home_score", -1),
    ])
    def test_out_of_range_rejected(self, field, value):
        with pytest.raises(ValidationError):
            GameState(**{field: value})

    def test_frozen(self):
        with pytest.raises(ValidationError):
            GameState().outs = 2

    def test_labels(self):
        state = GameState(inning=9, half=Half.BOTTOM, home_score=2, visiting_score=5,
                          runners=Runners(first=True, third=True), outs=1)
        assert state.label == "Bottom 9"
        assert state.score_display() == "Visiting 5 - Home 2"
        assert state.batting_score == 2
        assert state.fielding_score == 5
        assert "runners on 1st, 3rd" in state.situation_display()

    def test_same_half(self):
        a = GameState(inning=3, half=Half.TOP, outs=0)
        assert a.same_half_as(GameState(inning=3, half=Half.TOP, outs=2))
        assert not a.same_half_as(GameState(inning=3, half=Half.BOTTOM))
        assert not a.same_half_as(GameState(inning=4, half=Half.TOP))


# ===========================================================================
# Step 3: outcomes
# ===========================================================================

class TestStep3Outcomes:
    def test_hit_and_out_kinds(self):
        assert AtBatOutcome.DOUBLE.hit_kind is HitKind.DOUBLE
        assert AtBatOutcome.WALK.hit_kind is None
        assert AtBatOutcome.FLY_OUT.out_kind is OutKind.FLY_OUT
        assert AtBatOutcome.STRIKEOUT.out_kind is None
        assert AtBatOutcome.STRIKEOUT.is_out
        assert not AtBatOutcome.HOME_RUN.is_out

    def test_weight_table_covers_every_outcome(self):
        assert {w.outcome for w in OUTCOME_WEIGHTS} == set(AtBatOutcome)
        assert sum(w.weight for w in OUTCOME_WEIGHTS) == pytest.approx(97.8)

    def test_weight_must_be_positive(self):
        with pytest.raises(ValidationError):
            OutcomeWeight(outcome=AtBatOutcome.WALK, weight=0)


# ===========================================================================
# Step 4: goals
# ===========================================================================

class TestStep4Goals:
    def test_discriminated_union(self):
        adapter = TypeAdapter(Goal)
        goal = adapter.validate_python({"kind": "simulate_to_score", "home_target": 2,
                                        "visiting_target": 1})
        assert isinstance(goal, SimulateToScore)
        assert adapter.validate_json('{"kind": "simulate_random_game"}') == SimulateRandomGame()

    def test_half_innings_must_be_positive(self):
        with pytest.raises(ValidationError):
            AdvanceHalfInnings(half_innings=0)

    def test_describe(self):
        assert describe_goal(AdvanceHalfInnings(half_innings=3)) == "advance 3 half-inning(s)"
        assert describe_goal(SimulateToScore(home_target=4, visiting_target=2)) == \
            "simulate to final score Visiting 2 - Home 4"
        assert describe_goal(SimulateRandomGame()) == "simulate random game"

    def test_initial_setup_defaults(self):
        goal = TypeAdapter(Goal).validate_python({"kind": "initial_setup"})
        assert goal == InitialSetup()
        assert (goal.weather_condition, goal.temperature) == ("Clear", 70)
        assert describe_goal(InitialSetup(wind_direction="L To R", wind_speed=8)) == \
            "initial setup (weather Clear, 70F, wind L To R 8 mph)"

    @pytest.mark.parametrize("field, value", [
        ("temperature", 200),
        ("wind_speed", -1),
        ("weather_condition", ""),
    ])
    def test_initial_setup_ranges(self, field, value):
        with pytest.raises(ValidationError):
            InitialSetup(**{field: value})


# ===========================================================================
# Step 5: roster rows
# ===========================================================================

class TestStep5Roster:
    def test_available_pitcher(self):
        player = RosterPlayer(id="p7", status="A", position="1", name="Pitcher Seven")
        assert player.available and player.is_pitcher

    def test_inactive_fielder(self):
        player = RosterPlayer(id="f3", status="I", position="6")
        assert not player.available and not player.is_pitcher
        assert player.name == "Unknown"

    def test_id_required(self):
        with pytest.raises(ValidationError):
            RosterPlayer(id="")
