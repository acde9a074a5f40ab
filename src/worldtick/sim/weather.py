from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping

from worldtick.sim.state import WeatherState

WEATHER_STATES = ("clear", "overcast", "rain", "storm")
WEATHER_FRONT_LEVELS = ("none", "light", "moderate", "severe")
DEFAULT_WEATHER_STATE = "clear"
TRANSITION_SUM_TOLERANCE = 1e-9

# Row order is significant: rolls walk each row in declared order.
WEATHER_TRANSITIONS: dict[str, dict[str, float]] = {
    "clear": {"clear": 0.7, "overcast": 0.2, "rain": 0.1},
    "overcast": {"clear": 0.3, "overcast": 0.4, "rain": 0.3},
    "rain": {"overcast": 0.4, "rain": 0.5, "storm": 0.1},
    "storm": {"rain": 0.6, "storm": 0.4},
}

WEATHER_FRONTS: dict[str, str] = {
    "clear": "none",
    "overcast": "light",
    "rain": "moderate",
    "storm": "severe",
}

TRAVEL_PENALTY_EFFECT = "travel_penalty"
VISIBILITY_PENALTY_EFFECT = "visibility_penalty"
RESOURCE_DRAIN_EFFECT = "resource_drain"
STATUS_EFFECT = "status_effect"


@dataclass(frozen=True)
class WeatherChange:
    region_id: str
    state: str
    front: str

    def to_dict(self) -> dict[str, str]:
        return {"region_id": self.region_id, "state": self.state, "front": self.front}


@dataclass(frozen=True)
class WeatherEffect:
    effect_type: str
    magnitude: float
    description: str
    duration: int | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "effect_type": self.effect_type,
            "magnitude": self.magnitude,
            "description": self.description,
            "duration": self.duration,
        }


WEATHER_EFFECTS: dict[str, tuple[WeatherEffect, ...]] = {
    "clear": (),
    "overcast": (
        WeatherEffect(VISIBILITY_PENALTY_EFFECT, 0.1, "Reduced visibility due to overcast skies"),
    ),
    "rain": (
        WeatherEffect(TRAVEL_PENALTY_EFFECT, 0.2, "Wet conditions slow travel"),
        WeatherEffect(VISIBILITY_PENALTY_EFFECT, 0.3, "Rain reduces visibility"),
        WeatherEffect(STATUS_EFFECT, 1, "Soaked - reduced comfort and warmth", duration=2),
    ),
    "storm": (
        WeatherEffect(TRAVEL_PENALTY_EFFECT, 0.5, "Dangerous storm conditions prevent safe travel"),
        WeatherEffect(VISIBILITY_PENALTY_EFFECT, 0.6, "Storm severely limits visibility"),
        WeatherEffect(RESOURCE_DRAIN_EFFECT, 0.1, "Storm drains energy and resources"),
        WeatherEffect(STATUS_EFFECT, 2, "Soaked and chilled - significant discomfort", duration=3),
    ),
}


def next_weather_state(current: str, roll: float) -> str:
    """Return the first state whose cumulative probability reaches ``roll``.

    Unknown states use the ``clear`` row. If float error leaves the roll above
    every cumulative value the current state is kept.
    """
    row = WEATHER_TRANSITIONS.get(current, WEATHER_TRANSITIONS[DEFAULT_WEATHER_STATE])
    cumulative = 0.0
    for candidate, probability in row.items():
        cumulative += probability
        if cumulative >= roll:
            return candidate
    return current


def weather_front(state: str) -> str:
    return WEATHER_FRONTS.get(state, "none")


def weather_effects(state: str) -> tuple[WeatherEffect, ...]:
    return WEATHER_EFFECTS.get(state, ())


def validate_transition_table(table: Mapping[str, Mapping[str, float]]) -> list[str]:
    errors: list[str] = []
    known_states = set(table)
    for source, row in table.items():
        total = sum(row.values())
        if abs(total - 1.0) > TRANSITION_SUM_TOLERANCE:
            errors.append(f"transitions from {source} sum to {total}, expected 1.0")
        for target, probability in row.items():
            if target not in known_states:
                errors.append(f"transition {source}->{target} targets unknown state")
            if probability < 0:
                errors.append(f"transition {source}->{target} has negative probability {probability}")
    return errors


class WeatherTransitionModel:
    """Single global weather region; consumes exactly one draw per tick."""

    def transition(self, weather: WeatherState, rng: Callable[[], float]) -> WeatherChange | None:
        roll = rng()
        next_state = next_weather_state(weather.state, roll)
        if next_state == weather.state:
            return None
        return WeatherChange(region_id=weather.region_id, state=next_state, front=weather_front(next_state))
