from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

REGION_SCHEMA_VERSION = 1
DEFAULT_CONTENT_REGIONS_FILE = "regions.json"
DEFAULT_METRIC_MIN = 0
DEFAULT_METRIC_MAX = 100
DRIFT_METRICS = ("threat", "prosperity", "travel_risk")


@dataclass(frozen=True)
class DriftRule:
    step: int
    min: int = DEFAULT_METRIC_MIN
    max: int = DEFAULT_METRIC_MAX

    def clamp(self, value: int) -> int:
        return max(self.min, min(self.max, value))


@dataclass(frozen=True)
class RegionDriftRules:
    threat: DriftRule
    prosperity: DriftRule
    travel_risk: DriftRule


@dataclass(frozen=True)
class RegionConfig:
    region_id: str
    drift_rules: RegionDriftRules


@dataclass(frozen=True)
class RegionRegistry:
    regions: tuple[RegionConfig, ...] = ()
    _index: dict[str, RegionConfig] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index: dict[str, RegionConfig] = {}
        for region in self.regions:
            if region.region_id in index:
                raise ValueError(f"duplicate region_id: {region.region_id}")
            index[region.region_id] = region
        object.__setattr__(self, "_index", index)

    def get(self, region_id: str) -> RegionConfig | None:
        return self._index.get(region_id)

    def __len__(self) -> int:
        return len(self.regions)


def load_regions_json(path: str | Path) -> RegionRegistry:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    return region_registry_from_payload(payload)


def _drift_rule_from_payload(row: Any, *, field_name: str) -> DriftRule:
    if not isinstance(row, dict):
        raise ValueError(f"{field_name} must be an object")

    step = row.get("step")
    if isinstance(step, bool) or not isinstance(step, int) or step <= 0:
        raise ValueError(f"{field_name}.step must be integer > 0")

    bounds: dict[str, int] = {}
    for bound, default in (("min", DEFAULT_METRIC_MIN), ("max", DEFAULT_METRIC_MAX)):
        value = row.get(bound, default)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{field_name}.{bound} must be an integer when present")
        bounds[bound] = value
    if bounds["min"] > bounds["max"]:
        raise ValueError(f"{field_name} min must be <= max")

    return DriftRule(step=step, min=bounds["min"], max=bounds["max"])


def region_registry_from_payload(payload: dict[str, Any]) -> RegionRegistry:
    if not isinstance(payload, dict):
        raise ValueError("region payload must be an object")

    schema_version = payload.get("schema_version")
    if not isinstance(schema_version, int):
        raise ValueError("region payload must contain integer field: schema_version")
    if schema_version != REGION_SCHEMA_VERSION:
        raise ValueError(f"unsupported region schema_version: {schema_version}")

    rows = payload.get("regions")
    if not isinstance(rows, list):
        raise ValueError("region payload must contain list field: regions")

    seen_ids: set[str] = set()
    regions: list[RegionConfig] = []
    for index, row in enumerate(rows):
        if not isinstance(row, dict):
            raise ValueError(f"regions[{index}] must be an object")

        region_id = row.get("region_id")
        if not isinstance(region_id, str) or not region_id:
            raise ValueError(f"regions[{index}].region_id must be a non-empty string")
        if region_id in seen_ids:
            raise ValueError(f"duplicate region_id: {region_id}")
        seen_ids.add(region_id)

        drift_payload = row.get("drift_rules")
        if not isinstance(drift_payload, dict):
            raise ValueError(f"regions[{index}].drift_rules must be an object")
        rules = {
            metric: _drift_rule_from_payload(
                drift_payload.get(metric),
                field_name=f"regions[{index}].drift_rules.{metric}",
            )
            for metric in DRIFT_METRICS
        }

        regions.append(
            RegionConfig(
                region_id=region_id,
                drift_rules=RegionDriftRules(**rules),
            )
        )

    return RegionRegistry(regions=tuple(regions))
