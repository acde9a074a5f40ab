from __future__ import annotations

from itertools import islice
from typing import Callable, Mapping

from worldtick.content.regions import DriftRule, RegionRegistry
from worldtick.sim.acts import RegionDelta
from worldtick.sim.state import RegionState


def drift_metric(current: int, rule: DriftRule, rng: Callable[[], float]) -> int:
    """Random-walk one metric by up to ``rule.step`` and return the clamped delta.

    Always consumes two draws: direction first, then magnitude.
    """
    direction = -1 if rng() < 0.5 else 1
    magnitude = int(rng() * rule.step) + 1
    return rule.clamp(current + direction * magnitude) - current


class RegionDriftModel:
    def __init__(self, registry: RegionRegistry) -> None:
        self._registry = registry

    def drift(
        self,
        regions: Mapping[str, RegionState],
        rng: Callable[[], float],
        *,
        max_regions: int | None = None,
    ) -> list[RegionDelta]:
        deltas: list[RegionDelta] = []
        scanned = regions.items() if max_regions is None else islice(regions.items(), max_regions)
        for region_id, region in scanned:
            config = self._registry.get(region_id)
            if config is None:
                continue

            rules = config.drift_rules
            delta = RegionDelta(
                region_id=region_id,
                threat_delta=drift_metric(region.threat, rules.threat, rng),
                prosperity_delta=drift_metric(region.prosperity, rules.prosperity, rng),
                travel_risk_delta=drift_metric(region.travel_risk, rules.travel_risk, rng),
            )
            if not delta.is_zero():
                deltas.append(delta)
        return deltas
