"""Deterministic hash source.

Every roll in the engine is derived from a stored seed instead of a live RNG,
so the same persisted state always reproduces the same outcome.
"""

FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619
UINT32_MASK = 0xFFFFFFFF


def fnv1a_32(seed: str) -> int:
    """Return the 32-bit FNV-1a hash of the UTF-8 bytes of `seed`."""
    h = FNV_OFFSET_BASIS
    for byte in seed.encode("utf-8"):
        h ^= byte
        h = (h * FNV_PRIME) & UINT32_MASK
    return h


def derive_seed(base_seed: str, purpose: str, discriminator) -> str:
    """Build a purpose-tagged seed, e.g. ``"abc-election-3"``."""
    return f"{base_seed}-{purpose}-{discriminator}"


def roll_percent(h: int) -> int:
    """0..99 roll taken from a hash value."""
    return h % 100


def variance_points(h: int, spread: float = 10.0) -> float:
    """Signed variance in percentage points, in [-spread/2, +spread/2)."""
    return ((h % 1000) / 1000) * spread - spread / 2


def unit_interval(h: int) -> float:
    """Map a hash value onto [0, 1) with 1/10000 resolution."""
    return (h % 10000) / 10000
