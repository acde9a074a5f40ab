from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from worldtick.content.schedules import BehaviorVariance, NpcScheduleRegistry

GUARD_INTENT = "guard"
SCOUT_INTENT = "scout"
CURIOUS_SCOUT_CHANCE = 0.5
CAUTIOUS_GUARD_CHANCE = 0.3


@dataclass(frozen=True)
class NpcScheduleHint:
    npc_id: str
    loc_key: str
    intent: str

    def to_dict(self) -> dict[str, str]:
        return {"npc_id": self.npc_id, "loc_key": self.loc_key, "intent": self.intent}


def apply_behavior_variance(intent: str, variance: BehaviorVariance, rng: Callable[[], float]) -> str:
    # Curiosity resolves before caution; each gate draws only when configured,
    # and the follow-up draw happens only when the gate passes.
    if variance.curiosity is not None and rng() < variance.curiosity:
        if intent == GUARD_INTENT and rng() < CURIOUS_SCOUT_CHANCE:
            intent = SCOUT_INTENT
    if variance.caution is not None and rng() < variance.caution:
        if intent == SCOUT_INTENT and rng() < CAUTIOUS_GUARD_CHANCE:
            intent = GUARD_INTENT
    return intent


class NpcScheduleResolver:
    def __init__(self, registry: NpcScheduleRegistry) -> None:
        self._registry = registry

    def resolve(self, world_id: str, band: str, rng: Callable[[], float]) -> list[NpcScheduleHint]:
        hints: list[NpcScheduleHint] = []
        for schedule in self._registry.for_world(world_id):
            entry = schedule.entry_for_band(band)
            if entry is None:
                continue
            intent = apply_behavior_variance(entry.intent, schedule.behavior_variance, rng)
            hints.append(NpcScheduleHint(npc_id=schedule.npc_id, loc_key=entry.location, intent=intent))
        return hints
