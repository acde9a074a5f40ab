from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Callable

from worldtick.content.events import EventConfig, EventGuards, EventRegistry
from worldtick.sim.acts import WorldAct
from worldtick.sim.state import SimulationState


@dataclass(frozen=True)
class TriggeredEvent:
    event_id: str
    region_id: str
    effects: tuple[WorldAct, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": self.event_id,
            "region_id": self.region_id,
            "effects": [effect.to_dict() for effect in self.effects],
        }


def guards_pass(event: EventConfig, state: SimulationState) -> bool:
    guards: EventGuards = event.guards
    day_index = state.clock.day_index

    if guards.band is not None and state.clock.band not in guards.band:
        return False
    if guards.start_day is not None and day_index < guards.start_day:
        return False
    if guards.end_day is not None and day_index > guards.end_day:
        return False
    if not guards.needs_region():
        return True

    region = state.regions.get(event.region_id)
    if region is None:
        return False
    if guards.region_prosperity_min is not None and region.prosperity < guards.region_prosperity_min:
        return False
    if guards.region_prosperity_max is not None and region.prosperity > guards.region_prosperity_max:
        return False
    if guards.region_threat_min is not None and region.threat < guards.region_threat_min:
        return False
    if guards.region_threat_max is not None and region.threat > guards.region_threat_max:
        return False
    return True


class EventEvaluator:
    """Guard-check then roll each world event once per tick.

    Events that fail a guard never draw, so they cannot shift the rolls of the
    events evaluated after them.
    """

    def __init__(self, registry: EventRegistry) -> None:
        self._registry = registry

    def evaluate(
        self,
        world_id: str,
        state: SimulationState,
        rng: Callable[[], float],
        *,
        max_events: int | None = None,
    ) -> list[TriggeredEvent]:
        candidates = self._registry.for_world(world_id)
        if max_events is not None:
            candidates = candidates[:max_events]

        triggered: list[TriggeredEvent] = []
        for event in candidates:
            if not guards_pass(event, state):
                continue
            roll = rng()
            if roll < event.rarity_weight / 100:
                triggered.append(
                    TriggeredEvent(
                        event_id=event.event_id,
                        region_id=event.region_id,
                        effects=copy.deepcopy(event.effects),
                    )
                )
        return triggered
