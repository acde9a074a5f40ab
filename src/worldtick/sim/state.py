from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Sequence

DEFAULT_BANDS = ("dawn", "morning", "afternoon", "evening", "night")


def _require_int(value: Any, *, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field_name} must be an integer")
    return value


def _require_str(value: Any, *, field_name: str) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{field_name} must be a non-empty string")
    return value


@dataclass
class TickClock:
    day_index: int
    band: str

    def __post_init__(self) -> None:
        if _require_int(self.day_index, field_name="clock.day_index") < 0:
            raise ValueError("clock.day_index must be >= 0")
        _require_str(self.band, field_name="clock.band")

    def to_dict(self) -> dict[str, Any]:
        return {"day_index": self.day_index, "band": self.band}

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "TickClock":
        if not isinstance(payload, dict):
            raise ValueError("clock must be an object")
        return cls(day_index=payload.get("day_index"), band=payload.get("band"))


@dataclass
class WeatherState:
    region_id: str
    state: str = "clear"
    front: str = "none"

    def __post_init__(self) -> None:
        _require_str(self.region_id, field_name="weather.region_id")
        _require_str(self.state, field_name="weather.state")
        _require_str(self.front, field_name="weather.front")

    def to_dict(self) -> dict[str, Any]:
        return {"region_id": self.region_id, "state": self.state, "front": self.front}

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "WeatherState":
        if not isinstance(payload, dict):
            raise ValueError("weather must be an object")
        return cls(
            region_id=payload.get("region_id"),
            state=payload.get("state", "clear"),
            front=payload.get("front", "none"),
        )


@dataclass
class RegionState:
    prosperity: int
    threat: int
    travel_risk: int
    last_event: str | None = None

    def __post_init__(self) -> None:
        _require_int(self.prosperity, field_name="region.prosperity")
        _require_int(self.threat, field_name="region.threat")
        _require_int(self.travel_risk, field_name="region.travel_risk")
        if self.last_event is not None and not isinstance(self.last_event, str):
            raise ValueError("region.last_event must be a string when present")

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "prosperity": self.prosperity,
            "threat": self.threat,
            "travel_risk": self.travel_risk,
        }
        if self.last_event is not None:
            payload["last_event"] = self.last_event
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "RegionState":
        if not isinstance(payload, dict):
            raise ValueError("region must be an object")
        return cls(
            prosperity=payload.get("prosperity"),
            threat=payload.get("threat"),
            travel_risk=payload.get("travel_risk"),
            last_event=payload.get("last_event"),
        )


@dataclass
class NpcState:
    current_location: str
    current_intent: str
    last_update: float = 0.0

    def __post_init__(self) -> None:
        _require_str(self.current_location, field_name="npc.current_location")
        _require_str(self.current_intent, field_name="npc.current_intent")
        if isinstance(self.last_update, bool) or not isinstance(self.last_update, (int, float)):
            raise ValueError("npc.last_update must be a number")

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_location": self.current_location,
            "current_intent": self.current_intent,
            "last_update": self.last_update,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "NpcState":
        if not isinstance(payload, dict):
            raise ValueError("npc must be an object")
        return cls(
            current_location=payload.get("current_location"),
            current_intent=payload.get("current_intent"),
            last_update=payload.get("last_update", 0.0),
        )


@dataclass
class SimulationState:
    """Caller-owned world state advanced by ``WorldTickEngine``.

    ``regions`` and ``npcs`` keep insertion order; region drift walks regions in
    that order, so it is part of the replay key.
    """

    clock: TickClock
    weather: WeatherState
    regions: dict[str, RegionState] = field(default_factory=dict)
    npcs: dict[str, NpcState] = field(default_factory=dict)

    def copy(self) -> "SimulationState":
        return copy.deepcopy(self)

    def replace_with(self, other: "SimulationState") -> None:
        """Write ``other`` into this state in place; existing objects keep their identity."""
        _assign_fields(self.clock, other.clock)
        _assign_fields(self.weather, other.weather)
        _merge_rows(self.regions, other.regions)
        _merge_rows(self.npcs, other.npcs)

    def to_dict(self) -> dict[str, Any]:
        # Lists, not objects: region order must survive sort_keys JSON dumps.
        return {
            "clock": self.clock.to_dict(),
            "weather": self.weather.to_dict(),
            "regions": [{"region_id": region_id, **region.to_dict()} for region_id, region in self.regions.items()],
            "npcs": [{"npc_id": npc_id, **npc.to_dict()} for npc_id, npc in self.npcs.items()],
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "SimulationState":
        if not isinstance(payload, dict):
            raise ValueError("simulation state must be an object")
        return cls(
            clock=TickClock.from_dict(payload.get("clock")),
            weather=WeatherState.from_dict(payload.get("weather")),
            regions=_keyed_rows(payload.get("regions", []), id_field="region_id", factory=RegionState.from_dict),
            npcs=_keyed_rows(payload.get("npcs", []), id_field="npc_id", factory=NpcState.from_dict),
        )


def _assign_fields(target: Any, source: Any) -> None:
    for item in fields(source):
        setattr(target, item.name, getattr(source, item.name))


def _merge_rows(target: dict[str, Any], source: dict[str, Any]) -> None:
    merged: dict[str, Any] = {}
    for row_id, row in source.items():
        current = target.get(row_id)
        if current is None:
            merged[row_id] = row
        else:
            _assign_fields(current, row)
            merged[row_id] = current
    target.clear()
    target.update(merged)


def _keyed_rows(rows: Any, *, id_field: str, factory: Callable[[dict[str, Any]], Any]) -> dict[str, Any]:
    collection = id_field.removesuffix("_id") + "s"
    if not isinstance(rows, list):
        raise ValueError(f"{collection} must be a list")
    keyed: dict[str, Any] = {}
    for index, row in enumerate(rows):
        if not isinstance(row, dict):
            raise ValueError(f"{collection}[{index}] must be an object")
        row_id = _require_str(row.get(id_field), field_name=f"{collection}[{index}].{id_field}")
        if row_id in keyed:
            raise ValueError(f"duplicate {id_field}: {row_id}")
        keyed[row_id] = factory({key: value for key, value in row.items() if key != id_field})
    return keyed


def next_clock(clock: TickClock, bands: Sequence[str] = DEFAULT_BANDS) -> TickClock:
    """Step to the next band, rolling over to the first band of the next day."""
    if not bands:
        raise ValueError("bands must be a non-empty sequence")
    try:
        index = list(bands).index(clock.band)
    except ValueError:
        raise ValueError(f"unknown band {clock.band!r}; expected one of {list(bands)}") from None
    if index + 1 < len(bands):
        return TickClock(day_index=clock.day_index, band=bands[index + 1])
    return TickClock(day_index=clock.day_index + 1, band=bands[0])
