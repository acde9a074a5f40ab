from __future__ import annotations

import json
from pathlib import Path

import pytest

from worldtick.content.events import load_events_json
from worldtick.content.io import load_content_dir
from worldtick.content.regions import DriftRule, load_regions_json
from worldtick.content.schedules import load_schedules_json
from worldtick.sim.acts import RegionDelta, WeatherSet, WorldFlagSet

EXAMPLE_CONTENT_DIR = Path(__file__).resolve().parents[1] / "content" / "examples" / "forest_glade"


def _write(path: Path, payload: dict) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def _region_row(region_id: str = "r1", **threat) -> dict:
    return {
        "region_id": region_id,
        "drift_rules": {
            "threat": {"step": 1, **threat},
            "prosperity": {"step": 2},
            "travel_risk": {"step": 3, "min": 5, "max": 25},
        },
    }


def test_load_example_content_dir() -> None:
    content = load_content_dir(EXAMPLE_CONTENT_DIR)

    assert [region.region_id for region in content.regions.regions] == [
        "region.forest_glade",
        "region.mountain_pass",
    ]
    assert [event.event_id for event in content.events.for_world("world.forest_glade")] == [
        "event.festival_herbal",
        "event.rockslide",
    ]
    assert len(content.schedules) == 2
    festival = content.events.get("event.festival_herbal")
    assert festival.guards.band == ("dawn", "morning")
    assert festival.effects[1] == WorldFlagSet(key="festival_active", val=True)
    rockslide = content.events.get("event.rockslide")
    assert isinstance(rockslide.effects[0], RegionDelta)
    assert isinstance(rockslide.effects[1], WeatherSet)


def test_missing_content_files_mean_empty_registries(tmp_path: Path) -> None:
    content = load_content_dir(tmp_path)

    assert len(content.regions) == 0
    assert len(content.events) == 0
    assert len(content.schedules) == 0


def test_missing_content_dir_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="content directory not found"):
        load_content_dir(tmp_path / "nope")


def test_region_bounds_default_to_full_range(tmp_path: Path) -> None:
    registry = load_regions_json(_write(tmp_path / "regions.json", {"schema_version": 1, "regions": [_region_row()]}))

    rules = registry.get("r1").drift_rules
    assert rules.threat == DriftRule(step=1, min=0, max=100)
    assert rules.travel_risk == DriftRule(step=3, min=5, max=25)


def test_region_step_must_be_positive(tmp_path: Path) -> None:
    row = _region_row()
    row["drift_rules"]["threat"]["step"] = 0
    path = _write(tmp_path / "regions.json", {"schema_version": 1, "regions": [row]})

    with pytest.raises(ValueError, match=r"regions\[0\]\.drift_rules\.threat\.step must be integer > 0"):
        load_regions_json(path)


def test_region_min_above_max_rejected(tmp_path: Path) -> None:
    path = _write(tmp_path / "regions.json", {"schema_version": 1, "regions": [_region_row(min=60, max=40)]})

    with pytest.raises(ValueError, match="min must be <= max"):
        load_regions_json(path)


def test_duplicate_region_rejected(tmp_path: Path) -> None:
    path = _write(tmp_path / "regions.json", {"schema_version": 1, "regions": [_region_row(), _region_row()]})

    with pytest.raises(ValueError, match="duplicate region_id: r1"):
        load_regions_json(path)


def test_region_schema_version_checked(tmp_path: Path) -> None:
    path = _write(tmp_path / "regions.json", {"schema_version": 2, "regions": []})

    with pytest.raises(ValueError, match="unsupported region schema_version: 2"):
        load_regions_json(path)


@pytest.mark.parametrize("weight", [-1, 101, 12.5, True])
def test_event_rarity_weight_range(tmp_path: Path, weight) -> None:
    path = _write(
        tmp_path / "events.json",
        {
            "schema_version": 1,
            "events": [{"event_id": "e1", "world_id": "w1", "region_id": "r1", "rarity_weight": weight}],
        },
    )

    with pytest.raises(ValueError, match=r"events\[0\]\.rarity_weight must be integer in \[0, 100\]"):
        load_events_json(path)


def test_event_effect_type_checked(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "events.json",
        {
            "schema_version": 1,
            "events": [
                {
                    "event_id": "e1",
                    "world_id": "w1",
                    "region_id": "r1",
                    "rarity_weight": 5,
                    "effects": [{"type": "SUMMON_DRAGON"}],
                }
            ],
        },
    )

    with pytest.raises(ValueError, match=r"events\[0\]\.effects\[0\]\.type unsupported"):
        load_events_json(path)


def test_event_guard_must_be_integer(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "events.json",
        {
            "schema_version": 1,
            "events": [
                {
                    "event_id": "e1",
                    "world_id": "w1",
                    "region_id": "r1",
                    "rarity_weight": 5,
                    "guards": {"region_threat_min": "high"},
                }
            ],
        },
    )

    with pytest.raises(ValueError, match=r"events\[0\]\.guards\.region_threat_min must be an integer"):
        load_events_json(path)


def test_schedule_variance_range(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "schedules.json",
        {
            "schema_version": 1,
            "schedules": [
                {
                    "npc_id": "n1",
                    "world_id": "w1",
                    "entries": [{"band": "morning", "location": "gate", "intent": "guard"}],
                    "behavior_variance": {"curiosity": 1.5},
                }
            ],
        },
    )

    with pytest.raises(ValueError, match=r"behavior_variance\.curiosity must be a number in \[0, 1\]"):
        load_schedules_json(path)


def test_schedule_entry_fields_required(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "schedules.json",
        {
            "schema_version": 1,
            "schedules": [{"npc_id": "n1", "world_id": "w1", "entries": [{"band": "morning", "location": "gate"}]}],
        },
    )

    with pytest.raises(ValueError, match=r"entries\[0\]\.intent must be a non-empty string"):
        load_schedules_json(path)


def test_display_keys_in_content_rows_are_ignored(tmp_path: Path) -> None:
    row = {**_region_row(), "name": "Forest Glade", "tags": ["forest"]}

    registry = load_regions_json(_write(tmp_path / "regions.json", {"schema_version": 1, "regions": [row]}))

    assert len(registry) == 1
    assert registry.get("r1").drift_rules.threat == DriftRule(step=1)
