from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Union

WORLD_FLAG_SET_ACT_TYPE = "WORLD_FLAG_SET"
REGION_DELTA_ACT_TYPE = "REGION_DELTA"
WEATHER_SET_ACT_TYPE = "WEATHER_SET"
NPC_SCHEDULE_SET_ACT_TYPE = "NPC_SCHEDULE_SET"
EVENT_TRIGGER_ACT_TYPE = "EVENT_TRIGGER"


def _is_json_primitive(value: Any) -> bool:
    return value is None or isinstance(value, (bool, int, float, str))


def validate_json_value(value: Any, *, field_name: str) -> None:
    if _is_json_primitive(value):
        return
    if isinstance(value, list):
        for item in value:
            validate_json_value(item, field_name=field_name)
        return
    if isinstance(value, dict):
        for key, nested_value in value.items():
            if not isinstance(key, str):
                raise ValueError(f"{field_name} keys must be strings")
            validate_json_value(nested_value, field_name=field_name)
        return
    raise ValueError(f"{field_name} must contain only canonical JSON primitives")


def _require_str(payload: dict[str, Any], key: str, *, field_name: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        raise ValueError(f"{field_name}.{key} must be a non-empty string")
    return value


def _optional_int(payload: dict[str, Any], key: str, *, field_name: str) -> int:
    value = payload.get(key, 0)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field_name}.{key} must be an integer")
    return value


@dataclass(frozen=True)
class WorldFlagSet:
    key: str
    val: Any = None

    act_type = WORLD_FLAG_SET_ACT_TYPE

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.act_type, "key": self.key, "val": copy.deepcopy(self.val)}


@dataclass(frozen=True)
class RegionDelta:
    region_id: str
    threat_delta: int = 0
    prosperity_delta: int = 0
    travel_risk_delta: int = 0

    act_type = REGION_DELTA_ACT_TYPE

    def is_zero(self) -> bool:
        return self.threat_delta == 0 and self.prosperity_delta == 0 and self.travel_risk_delta == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.act_type,
            "region_id": self.region_id,
            "threat_delta": self.threat_delta,
            "prosperity_delta": self.prosperity_delta,
            "travel_risk_delta": self.travel_risk_delta,
        }


@dataclass(frozen=True)
class WeatherSet:
    region_id: str
    state: str
    front: str

    act_type = WEATHER_SET_ACT_TYPE

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.act_type, "region_id": self.region_id, "state": self.state, "front": self.front}


@dataclass(frozen=True)
class NpcScheduleSet:
    npc_id: str
    band: str
    location: str
    intent: str

    act_type = NPC_SCHEDULE_SET_ACT_TYPE

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.act_type,
            "npc_id": self.npc_id,
            "band": self.band,
            "location": self.location,
            "intent": self.intent,
        }


@dataclass(frozen=True)
class EventTrigger:
    """Marker act; the triggered event's own effect acts follow it in the act stream."""

    event_id: str

    act_type = EVENT_TRIGGER_ACT_TYPE

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.act_type, "event_id": self.event_id}


WorldAct = Union[WorldFlagSet, RegionDelta, WeatherSet, NpcScheduleSet, EventTrigger]


def act_from_dict(payload: dict[str, Any], *, field_name: str = "act") -> WorldAct:
    if not isinstance(payload, dict):
        raise ValueError(f"{field_name} must be an object")

    act_type = payload.get("type")
    if act_type == WORLD_FLAG_SET_ACT_TYPE:
        val = payload.get("val")
        validate_json_value(val, field_name=f"{field_name}.val")
        return WorldFlagSet(key=_require_str(payload, "key", field_name=field_name), val=copy.deepcopy(val))
    if act_type == REGION_DELTA_ACT_TYPE:
        return RegionDelta(
            region_id=_require_str(payload, "region_id", field_name=field_name),
            threat_delta=_optional_int(payload, "threat_delta", field_name=field_name),
            prosperity_delta=_optional_int(payload, "prosperity_delta", field_name=field_name),
            travel_risk_delta=_optional_int(payload, "travel_risk_delta", field_name=field_name),
        )
    if act_type == WEATHER_SET_ACT_TYPE:
        return WeatherSet(
            region_id=_require_str(payload, "region_id", field_name=field_name),
            state=_require_str(payload, "state", field_name=field_name),
            front=_require_str(payload, "front", field_name=field_name),
        )
    if act_type == NPC_SCHEDULE_SET_ACT_TYPE:
        return NpcScheduleSet(
            npc_id=_require_str(payload, "npc_id", field_name=field_name),
            band=_require_str(payload, "band", field_name=field_name),
            location=_require_str(payload, "location", field_name=field_name),
            intent=_require_str(payload, "intent", field_name=field_name),
        )
    if act_type == EVENT_TRIGGER_ACT_TYPE:
        return EventTrigger(event_id=_require_str(payload, "event_id", field_name=field_name))
    raise ValueError(f"{field_name}.type unsupported: {act_type!r}")
