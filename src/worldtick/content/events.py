from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from worldtick.sim.acts import WorldAct, act_from_dict

EVENT_SCHEMA_VERSION = 1
DEFAULT_CONTENT_EVENTS_FILE = "events.json"
MIN_RARITY_WEIGHT = 0
MAX_RARITY_WEIGHT = 100

_INT_GUARD_FIELDS = (
    "region_prosperity_min",
    "region_prosperity_max",
    "region_threat_min",
    "region_threat_max",
    "start_day",
    "end_day",
)


@dataclass(frozen=True)
class EventGuards:
    region_prosperity_min: int | None = None
    region_prosperity_max: int | None = None
    region_threat_min: int | None = None
    region_threat_max: int | None = None
    band: tuple[str, ...] | None = None
    start_day: int | None = None
    end_day: int | None = None

    def needs_region(self) -> bool:
        return any(
            bound is not None
            for bound in (
                self.region_prosperity_min,
                self.region_prosperity_max,
                self.region_threat_min,
                self.region_threat_max,
            )
        )


@dataclass(frozen=True)
class EventConfig:
    event_id: str
    world_id: str
    region_id: str
    rarity_weight: int
    guards: EventGuards = field(default_factory=EventGuards)
    effects: tuple[WorldAct, ...] = ()


@dataclass(frozen=True)
class EventRegistry:
    events: tuple[EventConfig, ...] = ()
    _index: dict[str, EventConfig] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index: dict[str, EventConfig] = {}
        for event in self.events:
            if event.event_id in index:
                raise ValueError(f"duplicate event_id: {event.event_id}")
            index[event.event_id] = event
        object.__setattr__(self, "_index", index)

    def get(self, event_id: str) -> EventConfig | None:
        return self._index.get(event_id)

    def for_world(self, world_id: str) -> list[EventConfig]:
        return [event for event in self.events if event.world_id == world_id]

    def __len__(self) -> int:
        return len(self.events)


def load_events_json(path: str | Path) -> EventRegistry:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    return event_registry_from_payload(payload)


def _guards_from_payload(row: Any, *, field_name: str) -> EventGuards:
    if row is None:
        return EventGuards()
    if not isinstance(row, dict):
        raise ValueError(f"{field_name} must be an object when present")

    values: dict[str, Any] = {}
    for key in _INT_GUARD_FIELDS:
        value = row.get(key)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{field_name}.{key} must be an integer when present")
        values[key] = value

    bands = row.get("band")
    if bands is not None:
        if not isinstance(bands, list) or not all(isinstance(band, str) and band for band in bands):
            raise ValueError(f"{field_name}.band must be a list of non-empty strings when present")
        values["band"] = tuple(bands)

    return EventGuards(**values)


def event_registry_from_payload(payload: dict[str, Any]) -> EventRegistry:
    if not isinstance(payload, dict):
        raise ValueError("event payload must be an object")

    schema_version = payload.get("schema_version")
    if not isinstance(schema_version, int):
        raise ValueError("event payload must contain integer field: schema_version")
    if schema_version != EVENT_SCHEMA_VERSION:
        raise ValueError(f"unsupported event schema_version: {schema_version}")

    rows = payload.get("events")
    if not isinstance(rows, list):
        raise ValueError("event payload must contain list field: events")

    seen_ids: set[str] = set()
    events: list[EventConfig] = []
    for index, row in enumerate(rows):
        if not isinstance(row, dict):
            raise ValueError(f"events[{index}] must be an object")

        for key in ("event_id", "world_id", "region_id"):
            value = row.get(key)
            if not isinstance(value, str) or not value:
                raise ValueError(f"events[{index}].{key} must be a non-empty string")

        event_id = row["event_id"]
        if event_id in seen_ids:
            raise ValueError(f"duplicate event_id: {event_id}")
        seen_ids.add(event_id)

        rarity_weight = row.get("rarity_weight")
        if (
            isinstance(rarity_weight, bool)
            or not isinstance(rarity_weight, int)
            or not MIN_RARITY_WEIGHT <= rarity_weight <= MAX_RARITY_WEIGHT
        ):
            raise ValueError(
                f"events[{index}].rarity_weight must be integer in [{MIN_RARITY_WEIGHT}, {MAX_RARITY_WEIGHT}]"
            )

        effects_payload = row.get("effects", [])
        if not isinstance(effects_payload, list):
            raise ValueError(f"events[{index}].effects must be a list")
        effects = tuple(
            act_from_dict(effect, field_name=f"events[{index}].effects[{effect_index}]")
            for effect_index, effect in enumerate(effects_payload)
        )

        events.append(
            EventConfig(
                event_id=event_id,
                world_id=row["world_id"],
                region_id=row["region_id"],
                rarity_weight=rarity_weight,
                guards=_guards_from_payload(row.get("guards"), field_name=f"events[{index}].guards"),
                effects=effects,
            )
        )

    return EventRegistry(events=tuple(events))
