from __future__ import annotations

UINT32_MODULUS = 2**32
LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223
HASH_MULTIPLIER = 31


def string_hash32(text: str) -> int:
    """Stable 32-bit rolling hash over UTF-16 code units.

    Characters outside the BMP contribute both surrogate units, matching
    ``charCodeAt``-style hashes. Never use the interpreter's ``hash()`` here.
    """
    encoded = text.encode("utf-16-le", "surrogatepass")
    value = 0
    for offset in range(0, len(encoded), 2):
        unit = int.from_bytes(encoded[offset : offset + 2], "little")
        value = (value * HASH_MULTIPLIER + unit) % UINT32_MODULUS
    return value


def tick_seed_key(world_id: str, day_index: int, band: str) -> str:
    return f"{world_id}:{day_index}:{band}"


def derive_tick_seed(world_id: str, day_index: int, band: str) -> int:
    """Derive the deterministic tick seed from (world_id, day_index, band)."""
    return string_hash32(tick_seed_key(world_id, day_index, band))


class TickRng:
    """Linear congruential generator shared by every stage of one tick."""

    def __init__(self, seed: int) -> None:
        if isinstance(seed, bool) or not isinstance(seed, int):
            raise ValueError("seed must be an integer")
        self._state = seed % UINT32_MODULUS
        self._draws = 0

    @classmethod
    def for_tick(cls, world_id: str, day_index: int, band: str) -> "TickRng":
        return cls(derive_tick_seed(world_id, day_index, band))

    @property
    def state(self) -> int:
        return self._state

    @property
    def draws(self) -> int:
        return self._draws

    def next(self) -> float:
        self._state = (self._state * LCG_MULTIPLIER + LCG_INCREMENT) % UINT32_MODULUS
        self._draws += 1
        return self._state / UINT32_MODULUS

    __call__ = next
