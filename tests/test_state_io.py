from __future__ import annotations

import json
from pathlib import Path

import pytest

from worldtick.content.io import load_state_json, save_state_json, state_from_payload
from worldtick.sim.hash import state_hash
from worldtick.sim.state import NpcState, RegionState, SimulationState, TickClock, WeatherState, next_clock

EXAMPLE_STATE = Path(__file__).resolve().parents[1] / "content" / "examples" / "forest_glade" / "state.json"


def _state() -> SimulationState:
    return SimulationState(
        clock=TickClock(day_index=4, band="night"),
        weather=WeatherState(region_id="b", state="rain", front="moderate"),
        regions={
            "b": RegionState(prosperity=10, threat=20, travel_risk=30, last_event="e.flood"),
            "a": RegionState(prosperity=40, threat=50, travel_risk=60),
        },
        npcs={"n1": NpcState(current_location="inn", current_intent="rest", last_update=17.5)},
    )


def test_load_example_state() -> None:
    state = load_state_json(EXAMPLE_STATE)

    assert state.clock == TickClock(day_index=1, band="morning")
    assert list(state.regions) == ["region.forest_glade", "region.mountain_pass"]
    assert state.regions["region.mountain_pass"] == RegionState(prosperity=30, threat=45, travel_risk=50)


def test_save_load_round_trip_keeps_region_order(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "state.json"
    state = _state()

    save_state_json(path, state)
    loaded = load_state_json(path)

    assert loaded == state
    assert list(loaded.regions) == ["b", "a"]
    assert state_hash(loaded) == state_hash(state)
    assert json.loads(path.read_text(encoding="utf-8"))["schema_version"] == 1
    assert list(tmp_path.joinpath("nested").glob("*.tmp")) == []


def test_schema_version_required() -> None:
    with pytest.raises(ValueError, match="schema_version"):
        state_from_payload(_state().to_dict())


def test_duplicate_region_rows_rejected() -> None:
    payload = {"schema_version": 1, **_state().to_dict()}
    payload["regions"].append(dict(payload["regions"][0]))

    with pytest.raises(ValueError, match="duplicate region_id: b"):
        state_from_payload(payload)


def test_state_copy_is_deep() -> None:
    state = _state()

    staged = state.copy()
    staged.regions["a"].threat = 99

    assert state.regions["a"].threat == 50


def test_next_clock_steps_and_wraps() -> None:
    assert next_clock(TickClock(day_index=2, band="morning")) == TickClock(day_index=2, band="afternoon")
    assert next_clock(TickClock(day_index=2, band="night")) == TickClock(day_index=3, band="dawn")
    assert next_clock(TickClock(day_index=0, band="day"), ("day", "night")) == TickClock(day_index=0, band="night")


def test_next_clock_rejects_unknown_band() -> None:
    with pytest.raises(ValueError, match="unknown band 'brunch'"):
        next_clock(TickClock(day_index=1, band="brunch"))


def test_replace_with_keeps_existing_rows_and_follows_new_order() -> None:
    state = _state()
    kept = state.regions["a"]
    staged = state.copy()
    staged.regions = {
        "a": RegionState(prosperity=41, threat=51, travel_risk=61),
        "c": RegionState(prosperity=1, threat=2, travel_risk=3),
    }

    state.replace_with(staged)

    assert list(state.regions) == ["a", "c"]
    assert state.regions["a"] is kept
    assert kept == RegionState(prosperity=41, threat=51, travel_risk=61)
    assert state.regions["c"] == RegionState(prosperity=1, threat=2, travel_risk=3)
