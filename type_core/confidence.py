# type_core/confidence.py
from __future__ import annotations
from typing import List

from . import config
from .resolver import rank
from .types import Confidence, FunctionScore


def _clamp01(x: float) -> float:
    return max(0.0, min(1.0, x))


def estimate(by_function: List[FunctionScore], used_items: int = 0) -> Confidence:
    """How clearly the dominant and auxiliary stand out from the rest.

    Weighted gap between ranks 1-2 and 2-3 (pct points / 100); the
    dominant-auxiliary gap counts more.
    """
    if len(by_function) < 4:
        return Confidence(score=0.5, label="low", details={"used_items": float(used_items)})
    ranked = rank(by_function)
    gap1 = (ranked[0].pct - ranked[1].pct) / 100.0
    gap2 = (ranked[1].pct - ranked[2].pct) / 100.0
    s = _clamp01(gap1 * config.CONF_GAP1_WEIGHT + gap2 * config.CONF_GAP2_WEIGHT)
    label = "high" if s >= config.CONF_HIGH else "medium" if s >= config.CONF_MEDIUM else "low"
    return Confidence(
        score=round(s, 4),
        label=label,
        details={"gap1": round(gap1 * 100.0, 2), "gap2": round(gap2 * 100.0, 2), "used_items": float(used_items)},
    )
