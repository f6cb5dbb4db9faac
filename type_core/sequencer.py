"""Seeded, reproducible item ordering.

The same ``(items, seed)`` pair always produces the same order, so an answer
recorded at position *k* of a shuffled session can be tied back to its item
at scoring time without storing the shuffled order itself.  Nothing here
touches the wall clock or the global ``random`` state.
"""
from __future__ import annotations

from typing import Callable, List, Sequence, TypeVar

__all__ = ["hash32", "make_prng", "permute"]

T = TypeVar("T")

_MASK = 0xFFFFFFFF
_FNV_PRIME = 16777619
_LANE_OFFSETS: tuple[int, int, int, int] = (0x9E3779B9, 0x85EBCA77, 0xC2B2AE3D, 0x27D4EB2F)


def _code_units(text: str) -> List[int]:
    raw = text.encode("utf-16-le", "surrogatepass")
    return [raw[i] | (raw[i + 1] << 8) for i in range(0, len(raw), 2)]


def hash32(text: str, offset: int) -> int:
    """FNV-1a over UTF-16 code units, starting from ``offset``.

    Each unit is folded in before the multiply, so the result depends on both
    the characters and their positions.
    """

    h = offset & _MASK
    for unit in _code_units(text):
        h ^= unit
        h = (h * _FNV_PRIME) & _MASK
    return h


def make_prng(seed: str) -> Callable[[], float]:
    """Return a 4-lane xorshift128 generator yielding floats in ``[0, 1)``."""

    # | 1 keeps every lane odd, so an all-zero state is unreachable
    a, b, c, d = (hash32(seed, off) | 1 for off in _LANE_OFFSETS)

    def next_float() -> float:
        nonlocal a, b, c, d
        t = (a ^ (a << 11)) & _MASK
        a, b, c = b, c, d
        d = (d ^ (d >> 19) ^ (t ^ (t >> 8))) & _MASK
        return d / 0x100000000

    return next_float


def permute(items: Sequence[T], seed: str) -> List[T]:
    """Fisher-Yates shuffle of a copy of ``items`` driven by ``seed``."""

    rnd = make_prng(str(seed if seed is not None else ""))
    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        j = int(rnd() * (i + 1))
        out[i], out[j] = out[j], out[i]
    return out


if __name__ == "__main__":  # pragma: no cover - developer utility
    sample = [f"q{i}" for i in range(1, 11)]
    for s in ("", "abc", "abd"):
        print(repr(s), permute(sample, s))
