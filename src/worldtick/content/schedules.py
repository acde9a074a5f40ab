from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

SCHEDULE_SCHEMA_VERSION = 1
DEFAULT_CONTENT_SCHEDULES_FILE = "schedules.json"


@dataclass(frozen=True)
class ScheduleEntry:
    band: str
    location: str
    intent: str


@dataclass(frozen=True)
class BehaviorVariance:
    curiosity: float | None = None
    caution: float | None = None


@dataclass(frozen=True)
class NpcScheduleConfig:
    npc_id: str
    world_id: str
    entries: tuple[ScheduleEntry, ...]
    behavior_variance: BehaviorVariance = field(default_factory=BehaviorVariance)

    def entry_for_band(self, band: str) -> ScheduleEntry | None:
        for entry in self.entries:
            if entry.band == band:
                return entry
        return None


@dataclass(frozen=True)
class NpcScheduleRegistry:
    schedules: tuple[NpcScheduleConfig, ...] = ()
    _index: dict[str, NpcScheduleConfig] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index: dict[str, NpcScheduleConfig] = {}
        for schedule in self.schedules:
            if schedule.npc_id in index:
                raise ValueError(f"duplicate npc_id: {schedule.npc_id}")
            index[schedule.npc_id] = schedule
        object.__setattr__(self, "_index", index)

    def get(self, npc_id: str) -> NpcScheduleConfig | None:
        return self._index.get(npc_id)

    def for_world(self, world_id: str) -> list[NpcScheduleConfig]:
        return [schedule for schedule in self.schedules if schedule.world_id == world_id]

    def __len__(self) -> int:
        return len(self.schedules)


def load_schedules_json(path: str | Path) -> NpcScheduleRegistry:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    return schedule_registry_from_payload(payload)


def _variance_from_payload(row: Any, *, field_name: str) -> BehaviorVariance:
    if row is None:
        return BehaviorVariance()
    if not isinstance(row, dict):
        raise ValueError(f"{field_name} must be an object when present")

    values: dict[str, float] = {}
    for key in ("curiosity", "caution"):
        value = row.get(key)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 <= value <= 1:
            raise ValueError(f"{field_name}.{key} must be a number in [0, 1]")
        values[key] = float(value)
    return BehaviorVariance(**values)


def schedule_registry_from_payload(payload: dict[str, Any]) -> NpcScheduleRegistry:
    if not isinstance(payload, dict):
        raise ValueError("schedule payload must be an object")

    schema_version = payload.get("schema_version")
    if not isinstance(schema_version, int):
        raise ValueError("schedule payload must contain integer field: schema_version")
    if schema_version != SCHEDULE_SCHEMA_VERSION:
        raise ValueError(f"unsupported schedule schema_version: {schema_version}")

    rows = payload.get("schedules")
    if not isinstance(rows, list):
        raise ValueError("schedule payload must contain list field: schedules")

    seen_ids: set[str] = set()
    schedules: list[NpcScheduleConfig] = []
    for index, row in enumerate(rows):
        if not isinstance(row, dict):
            raise ValueError(f"schedules[{index}] must be an object")

        for key in ("npc_id", "world_id"):
            value = row.get(key)
            if not isinstance(value, str) or not value:
                raise ValueError(f"schedules[{index}].{key} must be a non-empty string")

        npc_id = row["npc_id"]
        if npc_id in seen_ids:
            raise ValueError(f"duplicate npc_id: {npc_id}")
        seen_ids.add(npc_id)

        entries_payload = row.get("entries")
        if not isinstance(entries_payload, list):
            raise ValueError(f"schedules[{index}].entries must be a list")

        entries: list[ScheduleEntry] = []
        for entry_index, entry in enumerate(entries_payload):
            if not isinstance(entry, dict):
                raise ValueError(f"schedules[{index}].entries[{entry_index}] must be an object")
            for key in ("band", "location", "intent"):
                value = entry.get(key)
                if not isinstance(value, str) or not value:
                    raise ValueError(
                        f"schedules[{index}].entries[{entry_index}].{key} must be a non-empty string"
                    )
            entries.append(ScheduleEntry(band=entry["band"], location=entry["location"], intent=entry["intent"]))

        schedules.append(
            NpcScheduleConfig(
                npc_id=npc_id,
                world_id=row["world_id"],
                entries=tuple(entries),
                behavior_variance=_variance_from_payload(
                    row.get("behavior_variance"),
                    field_name=f"schedules[{index}].behavior_variance",
                ),
            )
        )

    return NpcScheduleRegistry(schedules=tuple(schedules))
