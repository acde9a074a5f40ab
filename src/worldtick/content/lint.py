from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Sequence

from worldtick.content.events import EventRegistry
from worldtick.content.regions import RegionRegistry
from worldtick.content.schedules import NpcScheduleRegistry
from worldtick.sim.acts import RegionDelta, WorldFlagSet
from worldtick.sim.state import DEFAULT_BANDS

KNOWN_INTENTS = frozenset(
    {
        "guard",
        "scout",
        "explore",
        "wait",
        "rest",
        "sleep",
        "work",
        "trade",
        "socialize",
        "gather_herbs",
        "tend_garden",
        "sell_herbs",
        "patrol",
        "hide",
        "observe",
    }
)


@dataclass
class LintReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    stats: dict[str, int] = field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return not self.errors


def _lint_schedules(
    report: LintReport,
    schedules: NpcScheduleRegistry,
    bands: Sequence[str],
    intents: frozenset[str],
) -> None:
    for schedule in schedules.schedules:
        npc_id = schedule.npc_id
        band_counts = Counter(entry.band for entry in schedule.entries)
        for band in sorted(band for band, count in band_counts.items() if count > 1):
            report.errors.append(f"npc {npc_id}: duplicate schedule entries for band {band}")
        for band in sorted(band for band in band_counts if band not in bands):
            report.errors.append(f"npc {npc_id}: unknown schedule band {band!r}")
        for band in bands:
            if band not in band_counts:
                report.warnings.append(f"npc {npc_id}: no schedule entry for band {band}")
        for entry in schedule.entries:
            if entry.intent not in intents:
                report.warnings.append(f"npc {npc_id}: unknown intent {entry.intent!r} for band {entry.band}")


def _lint_events(
    report: LintReport,
    events: EventRegistry,
    regions: RegionRegistry,
    bands: Sequence[str],
) -> None:
    for event in events.events:
        event_id = event.event_id
        guards = event.guards

        if regions.get(event.region_id) is None:
            report.warnings.append(f"event {event_id}: unknown region {event.region_id!r}")
        if (
            guards.region_prosperity_min is not None
            and guards.region_prosperity_max is not None
            and guards.region_prosperity_min > guards.region_prosperity_max
        ):
            report.errors.append(f"event {event_id}: invalid prosperity guard range (min > max)")
        if (
            guards.region_threat_min is not None
            and guards.region_threat_max is not None
            and guards.region_threat_min > guards.region_threat_max
        ):
            report.errors.append(f"event {event_id}: invalid threat guard range (min > max)")
        if guards.start_day is not None and guards.end_day is not None and guards.start_day > guards.end_day:
            report.errors.append(f"event {event_id}: invalid day window (start_day > end_day)")
        for band in guards.band or ():
            if band not in bands:
                report.errors.append(f"event {event_id}: unknown guard band {band!r}")
        if event.rarity_weight == 0:
            report.warnings.append(f"event {event_id}: rarity_weight 0 never triggers")

        for index, effect in enumerate(event.effects):
            if isinstance(effect, RegionDelta) and regions.get(effect.region_id) is None:
                report.warnings.append(f"event {event_id}: effects[{index}] targets unknown region {effect.region_id!r}")
            if isinstance(effect, WorldFlagSet) and not effect.key.strip():
                report.errors.append(f"event {event_id}: effects[{index}] WORLD_FLAG_SET has blank key")


def lint_world_content(
    regions: RegionRegistry,
    events: EventRegistry,
    schedules: NpcScheduleRegistry,
    *,
    bands: Sequence[str] = DEFAULT_BANDS,
    intents: frozenset[str] = KNOWN_INTENTS,
) -> LintReport:
    """Cross-reference checks the per-file loaders cannot make on their own."""
    report = LintReport()
    _lint_schedules(report, schedules, bands, intents)
    _lint_events(report, events, regions, bands)
    report.stats = {
        "regions": len(regions),
        "events": len(events),
        "schedules": len(schedules),
    }
    return report
