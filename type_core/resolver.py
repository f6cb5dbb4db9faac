from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional
import logging

from . import config
from .types import AxisScore, FunctionScore, TopFunctions, TypeEntry, TypeMap, TypeRecord

log = logging.getLogger(__name__)

HEURISTIC_AXES: tuple[str, ...] = ("EI", "NS", "TF", "JP")


@dataclass
class Resolution:
    type: TypeRecord
    top: TopFunctions


def rank(scores: List[FunctionScore]) -> List[FunctionScore]:
    """Descending by pct; equal pct keeps the lower index first."""
    return sorted(scores, key=lambda s: (-s.pct, s.idx))


def _record(entry: TypeEntry, how: str) -> TypeRecord:
    return TypeRecord(code=entry.code, how=how, name=entry.name, description=entry.description)


def _by_pair(top: TopFunctions, _axes, tm: Optional[TypeMap]) -> Optional[TypeRecord]:
    if tm is None or not tm.by_pair:
        return None
    dom, aux = top.dominant.idx, top.auxiliary.idx
    ent = tm.by_pair.get((dom, aux)) or tm.by_pair.get((aux, dom))
    return _record(ent, "pair") if ent else None


def _by_dominant(top: TopFunctions, _axes, tm: Optional[TypeMap]) -> Optional[TypeRecord]:
    if tm is None:
        return None
    ent = tm.by_dominant.get(top.dominant.idx)
    return _record(ent, "dominant") if ent else None


def _by_rule(top: TopFunctions, _axes, tm: Optional[TypeMap]) -> Optional[TypeRecord]:
    if tm is None:
        return None
    for rule in tm.rules:
        if rule.dom is not None and rule.dom != top.dominant.idx:
            continue
        if rule.aux is not None and rule.aux != top.auxiliary.idx:
            continue
        return _record(rule.entry, "rule")
    return None


def heuristic_code(axes: Dict[str, AxisScore], threshold: Optional[float] = None) -> str:
    th = config.HEURISTIC_THRESHOLD if threshold is None else threshold
    letters = []
    for name in HEURISTIC_AXES:
        ax = axes.get(name)
        if ax is None:
            # fixed fallback letters keep the code four characters long
            letters.append(name[0])
            continue
        letters.append(ax.positive_label if ax.pct >= th else ax.negative_label)
    return "".join(letters)


def _heuristic(_top, axes: Dict[str, AxisScore], _tm) -> TypeRecord:
    return TypeRecord(code=heuristic_code(axes), how="heuristic")


Strategy = Callable[[TopFunctions, Dict[str, AxisScore], Optional[TypeMap]], Optional[TypeRecord]]

STRATEGIES: List[tuple[str, Strategy]] = [
    ("pair", _by_pair),
    ("dominant", _by_dominant),
    ("rule", _by_rule),
    ("heuristic", _heuristic),
]


def resolve(
    scores: List[FunctionScore],
    axes: Dict[str, AxisScore],
    type_map: Optional[TypeMap] = None,
) -> Resolution:
    """Rank the functions and run the lookup cascade; first match wins.

    The heuristic tier needs only the axes, so resolution always produces a
    record even with no type map at all.
    """

    ordered = rank(scores)
    top = TopFunctions(dominant=ordered[0], auxiliary=ordered[1], tertiary=ordered[2], inferior=ordered[3])
    for name, strategy in STRATEGIES:
        rec = strategy(top, axes, type_map)
        if rec is not None:
            log.debug("resolve dom=%s aux=%s -> %s via %s", top.dominant.key, top.auxiliary.key, rec.code, name)
            return Resolution(type=rec, top=top)
    # unreachable: the heuristic tier always answers
    return Resolution(type=_heuristic(top, axes, type_map), top=top)
