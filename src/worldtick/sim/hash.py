from __future__ import annotations

import hashlib
import json
from typing import Any

from worldtick.sim.engine import WorldTickResult
from worldtick.sim.state import SimulationState


def canonical_hash(payload: Any) -> str:
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


def state_hash(state: SimulationState, *, include_timestamps: bool = False) -> str:
    payload = state.to_dict()
    if not include_timestamps:
        # last_update is wall-clock stamped on commit and is not part of the replay key.
        for npc in payload["npcs"]:
            npc.pop("last_update", None)
    return canonical_hash(payload)


def result_hash(result: WorldTickResult) -> str:
    return canonical_hash(result.to_dict())
