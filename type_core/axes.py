"""Four bipolar axes built from the eight function scores.

Each axis compares the summed ``raw`` of a positive set of functions against
a negative set; sets are written with function symbols and resolved through
the function metadata, never by array position.

The J/P axis is an approximation: it only weighs the extraverted judging
functions (Fe, Te) against the extraverted perceiving functions (Se, Ne) and
ignores the four introverted ones.  The authoritative type comes from the
type map in the resolver, not from this axis.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Mapping, Sequence

from .config import AXIS_EMPTY_PCT
from .types import AxisScore, FunctionScore

__all__ = ["AxisDefinition", "DEFAULT_AXES", "resolve_sets", "aggregate"]


@dataclass(frozen=True)
class AxisDefinition:
    name: str
    positive_label: str
    negative_label: str
    positive: FrozenSet[str]
    negative: FrozenSet[str]


DEFAULT_AXES: tuple[AxisDefinition, ...] = (
    AxisDefinition("EI", "E", "I", frozenset({"Fe", "Se", "Ne", "Te"}), frozenset({"Ni", "Ti", "Fi", "Si"})),
    AxisDefinition("NS", "N", "S", frozenset({"Ni", "Ne"}), frozenset({"Se", "Si"})),
    AxisDefinition("TF", "T", "F", frozenset({"Ti", "Te"}), frozenset({"Fe", "Fi"})),
    # approximation, see module docstring
    AxisDefinition("JP", "J", "P", frozenset({"Fe", "Te"}), frozenset({"Se", "Ne"})),
)


def resolve_sets(axis: AxisDefinition, kti: Mapping[str, int]) -> tuple[set[int], set[int]]:
    if axis.positive & axis.negative:
        raise ValueError(f"axis {axis.name}: positive and negative sets overlap")
    missing = sorted(k for k in axis.positive | axis.negative if k not in kti)
    if missing:
        raise ValueError(f"axis {axis.name}: unknown function keys {missing}")
    return {kti[k] for k in axis.positive}, {kti[k] for k in axis.negative}


def aggregate(
    scores: List[FunctionScore],
    kti: Mapping[str, int],
    axes: Sequence[AxisDefinition] = DEFAULT_AXES,
) -> Dict[str, AxisScore]:
    by_idx = {s.idx: s for s in scores}
    out: Dict[str, AxisScore] = {}
    for axis in axes:
        pos, neg = resolve_sets(axis, kti)
        p = sum(by_idx[i].raw for i in pos if i in by_idx)
        n = sum(by_idx[i].raw for i in neg if i in by_idx)
        total = p + n
        out[axis.name] = AxisScore(
            name=axis.name,
            positive_label=axis.positive_label,
            negative_label=axis.negative_label,
            positive_raw=p,
            negative_raw=n,
            pct=(p / total) if total > 0 else AXIS_EMPTY_PCT,
        )
    return out
