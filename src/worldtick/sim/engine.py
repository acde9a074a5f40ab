from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable

from worldtick.content.events import EventRegistry
from worldtick.content.regions import RegionRegistry
from worldtick.content.schedules import NpcScheduleRegistry
from worldtick.sim.acts import EventTrigger, NpcScheduleSet, RegionDelta, WeatherSet, WorldAct
from worldtick.sim.events import EventEvaluator, TriggeredEvent
from worldtick.sim.regions import RegionDriftModel
from worldtick.sim.rng import TickRng
from worldtick.sim.schedules import NpcScheduleHint, NpcScheduleResolver
from worldtick.sim.state import NpcState, SimulationState, WeatherState
from worldtick.sim.weather import WeatherChange, WeatherTransitionModel

logger = logging.getLogger(__name__)

TICK_FAILED_SUMMARY = "World tick failed"
NO_CHANGES_SUMMARY = "No changes"


@dataclass(frozen=True)
class TickOptions:
    dry_run: bool = False
    max_events: int | None = None
    max_regions: int | None = None

    def __post_init__(self) -> None:
        for name in ("max_events", "max_regions"):
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer or None")


@dataclass
class TickDeltas:
    regions: dict[str, RegionDelta] = field(default_factory=dict)
    weather: dict[str, WeatherChange] = field(default_factory=dict)
    events: list[TriggeredEvent] = field(default_factory=list)
    npcs: dict[str, NpcScheduleHint] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not (self.regions or self.weather or self.events or self.npcs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "regions": {region_id: delta.to_dict() for region_id, delta in self.regions.items()},
            "weather": {region_id: change.to_dict() for region_id, change in self.weather.items()},
            "events": [trigger.to_dict() for trigger in self.events],
            "npcs": {npc_id: hint.to_dict() for npc_id, hint in self.npcs.items()},
        }


@dataclass
class WorldTickResult:
    success: bool
    new_acts: list[WorldAct] = field(default_factory=list)
    summary: str = NO_CHANGES_SUMMARY
    errors: list[str] = field(default_factory=list)
    deltas: TickDeltas = field(default_factory=TickDeltas)

    @classmethod
    def failure(cls, message: str) -> "WorldTickResult":
        return cls(success=False, summary=TICK_FAILED_SUMMARY, errors=[message])

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "new_acts": [act.to_dict() for act in self.new_acts],
            "summary": self.summary,
            "errors": list(self.errors),
            "deltas": self.deltas.to_dict(),
        }


def summarize_deltas(deltas: TickDeltas) -> str:
    parts: list[str] = []
    if deltas.regions:
        parts.append(f"{len(deltas.regions)} regions updated")
    if deltas.weather:
        parts.append(f"weather changed in {len(deltas.weather)} regions")
    if deltas.events:
        parts.append(f"{len(deltas.events)} events triggered")
    if deltas.npcs:
        parts.append(f"{len(deltas.npcs)} NPCs scheduled")
    return ", ".join(parts) if parts else NO_CHANGES_SUMMARY


class WorldTickEngine:
    """Deterministic one-tick world step.

    Stages always run Weather -> RegionDrift -> Events -> NPC schedules against a
    single ``TickRng`` seeded from ``(world_id, day_index, band)``. The engine
    holds only its injected read-only registries, so one instance may serve many
    worlds; ticks for the same world must be serialized by the caller.
    """

    def __init__(
        self,
        regions: RegionRegistry | None = None,
        events: EventRegistry | None = None,
        schedules: NpcScheduleRegistry | None = None,
        *,
        now: Callable[[], float] = time.time,
    ) -> None:
        self.regions = regions if regions is not None else RegionRegistry()
        self.events = events if events is not None else EventRegistry()
        self.schedules = schedules if schedules is not None else NpcScheduleRegistry()
        self.weather_model = WeatherTransitionModel()
        self.drift_model = RegionDriftModel(self.regions)
        self.event_evaluator = EventEvaluator(self.events)
        self.schedule_resolver = NpcScheduleResolver(self.schedules)
        self._now = now

    def advance(
        self,
        world_id: str,
        state: SimulationState,
        options: TickOptions | None = None,
    ) -> WorldTickResult:
        options = options if options is not None else TickOptions()
        try:
            result = self._run_stages(world_id, state, options)
            if not options.dry_run:
                staged = state.copy()
                self._apply_deltas(staged, result.deltas)
                state.replace_with(staged)
        except Exception as exc:
            logger.warning("world tick failed world_id=%s: %s", world_id, exc, exc_info=True)
            return WorldTickResult.failure(f"World tick failed: {exc}")

        logger.debug(
            "world tick world_id=%s day=%s band=%s dry_run=%s summary=%s",
            world_id,
            state.clock.day_index,
            state.clock.band,
            options.dry_run,
            result.summary,
        )
        return result

    def _run_stages(self, world_id: str, state: SimulationState, options: TickOptions) -> WorldTickResult:
        clock = state.clock
        rng = TickRng.for_tick(world_id, clock.day_index, clock.band)
        deltas = TickDeltas()
        new_acts: list[WorldAct] = []

        change = self.weather_model.transition(state.weather, rng)
        if change is not None:
            deltas.weather[change.region_id] = change
            new_acts.append(WeatherSet(region_id=change.region_id, state=change.state, front=change.front))

        for delta in self.drift_model.drift(state.regions, rng, max_regions=options.max_regions):
            deltas.regions[delta.region_id] = delta
            new_acts.append(delta)

        for trigger in self.event_evaluator.evaluate(world_id, state, rng, max_events=options.max_events):
            deltas.events.append(trigger)
            new_acts.append(EventTrigger(event_id=trigger.event_id))
            new_acts.extend(trigger.effects)

        for hint in self.schedule_resolver.resolve(world_id, clock.band, rng):
            deltas.npcs[hint.npc_id] = hint
            new_acts.append(
                NpcScheduleSet(npc_id=hint.npc_id, band=clock.band, location=hint.loc_key, intent=hint.intent)
            )

        return WorldTickResult(success=True, new_acts=new_acts, summary=summarize_deltas(deltas), deltas=deltas)

    def _apply_deltas(self, state: SimulationState, deltas: TickDeltas) -> None:
        # Event effects are left for the caller to interpret.
        for region_id, change in deltas.weather.items():
            state.weather = WeatherState(region_id=region_id, state=change.state, front=change.front)

        for region_id, delta in deltas.regions.items():
            region = state.regions[region_id]
            region.threat += delta.threat_delta
            region.prosperity += delta.prosperity_delta
            region.travel_risk += delta.travel_risk_delta

        if deltas.npcs:
            stamp = self._now()
            for npc_id, hint in deltas.npcs.items():
                state.npcs[npc_id] = NpcState(
                    current_location=hint.loc_key,
                    current_intent=hint.intent,
                    last_update=stamp,
                )