from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

from worldtick.content.events import DEFAULT_CONTENT_EVENTS_FILE, EventRegistry, load_events_json
from worldtick.content.regions import DEFAULT_CONTENT_REGIONS_FILE, RegionRegistry, load_regions_json
from worldtick.content.schedules import DEFAULT_CONTENT_SCHEDULES_FILE, NpcScheduleRegistry, load_schedules_json
from worldtick.sim.state import SimulationState

STATE_SCHEMA_VERSION = 1
CANONICAL_JSON_INDENT = 2
CANONICAL_JSON_SEPARATORS = (",", ": ")


@dataclass(frozen=True)
class WorldContent:
    regions: RegionRegistry
    events: EventRegistry
    schedules: NpcScheduleRegistry


def load_content_dir(path: str | Path) -> WorldContent:
    """Load the three registries of a content directory; a missing file means an empty registry."""
    directory = Path(path)
    if not directory.is_dir():
        raise ValueError(f"content directory not found: {directory}")

    regions_path = directory / DEFAULT_CONTENT_REGIONS_FILE
    events_path = directory / DEFAULT_CONTENT_EVENTS_FILE
    schedules_path = directory / DEFAULT_CONTENT_SCHEDULES_FILE
    return WorldContent(
        regions=load_regions_json(regions_path) if regions_path.exists() else RegionRegistry(),
        events=load_events_json(events_path) if events_path.exists() else EventRegistry(),
        schedules=load_schedules_json(schedules_path) if schedules_path.exists() else NpcScheduleRegistry(),
    )


def _canonical_json(payload: dict[str, Any]) -> str:
    return json.dumps(
        payload,
        indent=CANONICAL_JSON_INDENT,
        separators=CANONICAL_JSON_SEPARATORS,
        sort_keys=True,
    )


def _write_atomic_json(path: str | Path, payload: dict[str, Any]) -> None:
    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    serialized = _canonical_json(payload)

    temp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=destination.parent,
            delete=False,
            suffix=".tmp",
        ) as temp_file:
            temp_file.write(serialized)
            temp_file.flush()
            os.fsync(temp_file.fileno())
            temp_path = Path(temp_file.name)
        os.replace(temp_path, destination)
    except Exception:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise


def state_from_payload(payload: dict[str, Any]) -> SimulationState:
    if not isinstance(payload, dict):
        raise ValueError("state payload must be an object")
    schema_version = payload.get("schema_version")
    if not isinstance(schema_version, int):
        raise ValueError("state payload must contain integer field: schema_version")
    if schema_version != STATE_SCHEMA_VERSION:
        raise ValueError(f"unsupported state schema_version: {schema_version}")
    return SimulationState.from_dict(payload)


def load_state_json(path: str | Path) -> SimulationState:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    return state_from_payload(payload)


def save_state_json(path: str | Path, state: SimulationState) -> None:
    payload = {"schema_version": STATE_SCHEMA_VERSION, **state.to_dict()}
    _write_atomic_json(path, payload)
