from __future__ import annotations

from pathlib import Path

from worldtick.content.events import EventConfig, EventGuards, EventRegistry
from worldtick.content.io import load_content_dir
from worldtick.content.lint import lint_world_content
from worldtick.content.regions import RegionRegistry
from worldtick.content.schedules import NpcScheduleConfig, NpcScheduleRegistry, ScheduleEntry
from worldtick.sim.acts import RegionDelta, WorldFlagSet

EXAMPLE_CONTENT_DIR = Path(__file__).resolve().parents[1] / "content" / "examples" / "forest_glade"


def test_example_content_lints_clean() -> None:
    content = load_content_dir(EXAMPLE_CONTENT_DIR)

    report = lint_world_content(content.regions, content.events, content.schedules)

    assert report.valid
    assert report.errors == []
    assert report.warnings == []
    assert report.stats == {"regions": 2, "events": 2, "schedules": 2}


def test_schedule_band_problems() -> None:
    schedules = NpcScheduleRegistry(
        schedules=(
            NpcScheduleConfig(
                npc_id="n1",
                world_id="w1",
                entries=(
                    ScheduleEntry(band="morning", location="gate", intent="guard"),
                    ScheduleEntry(band="morning", location="wall", intent="daydream"),
                    ScheduleEntry(band="brunch", location="inn", intent="rest"),
                ),
            ),
        )
    )

    report = lint_world_content(RegionRegistry(), EventRegistry(), schedules, bands=("morning", "night"))

    assert report.errors == [
        "npc n1: duplicate schedule entries for band morning",
        "npc n1: unknown schedule band 'brunch'",
    ]
    assert report.warnings == [
        "npc n1: no schedule entry for band night",
        "npc n1: unknown intent 'daydream' for band morning",
    ]
    assert not report.valid


def test_event_problems() -> None:
    events = EventRegistry(
        events=(
            EventConfig(
                event_id="e1",
                world_id="w1",
                region_id="r.missing",
                rarity_weight=0,
                guards=EventGuards(
                    region_prosperity_min=70,
                    region_prosperity_max=20,
                    band=("teatime",),
                    start_day=9,
                    end_day=3,
                ),
                effects=(RegionDelta(region_id="r.gone", threat_delta=1), WorldFlagSet(key="  ")),
            ),
        )
    )

    report = lint_world_content(RegionRegistry(), events, NpcScheduleRegistry())

    assert report.errors == [
        "event e1: invalid prosperity guard range (min > max)",
        "event e1: invalid day window (start_day > end_day)",
        "event e1: unknown guard band 'teatime'",
        "event e1: effects[1] WORLD_FLAG_SET has blank key",
    ]
    assert report.warnings == [
        "event e1: unknown region 'r.missing'",
        "event e1: rarity_weight 0 never triggers",
        "event e1: effects[0] targets unknown region 'r.gone'",
    ]
