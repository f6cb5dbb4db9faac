from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence
import math

from .sequencer import permute
from .types import AnswerRecord

_OFFSETS = {"one_to_five": 3.0, "zero_to_four": 2.0, "centered": 0.0}


@dataclass(frozen=True)
class Reduction:
    direction: int      # -1 | 0 | +1
    magnitude: float    # 0 | 0.5 | 1
    centered: float     # -2..2


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        v = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(v) or math.isinf(v) else v


def detect_scale(v: float) -> str:
    """Guess the encoding of a single response.

    Negative values can only be centered; 1..5 is read as the 1-based scale;
    a bare 0 as the 0-based one.  Callers that know their encoding should pass
    ``scale`` explicitly, since 1..4 are valid on every scale.
    """

    if v < 0:
        return "centered"
    if v >= 1:
        return "one_to_five"
    return "zero_to_four"


def detect_answer_scale(values: Iterable[Any]) -> str:
    """Pick one encoding for a whole answer set.

    Any negative value means centered, any 5 means 1..5; otherwise 0..4.
    A single value cannot tell ``1`` on 1..5 from ``1`` on -2..2, the set can.
    """

    nums = [v for v in (_to_float(x) for x in values) if v is not None]
    if any(v < 0 for v in nums):
        return "centered"
    if any(v >= 5 for v in nums):
        return "one_to_five"
    return "zero_to_four"


def center(value: Any, scale: Optional[str] = None) -> Optional[float]:
    v = _to_float(value)
    if v is None:
        return None
    if scale in (None, "auto"):
        scale = detect_scale(v)
    if scale not in _OFFSETS:
        raise ValueError(f"unknown answer scale: {scale}")
    return max(-2.0, min(2.0, v - _OFFSETS[scale]))


def reduce_answer(value: Any, scale: Optional[str] = None) -> Optional[Reduction]:
    """Map one raw response to ``(direction, magnitude)``.

    Returns ``None`` for values that are not numbers at all; the caller
    decides whether that means unanswered or invalid.
    """

    c = center(value, scale)
    if c is None:
        return None
    direction = 0 if c == 0 else (1 if c > 0 else -1)
    return Reduction(direction=direction, magnitude=min(1.0, abs(c) / 2.0), centered=c)


def to_zero_based(value: Any, scale: Optional[str] = None) -> Optional[int]:
    """Collection-side normalization: accept 1..5 or 0..4, store 0..4.

    Without an explicit scale, 1..5 wins over 0..4 for the overlapping values.
    """

    v = _to_float(value)
    if v is None or v != int(v):
        return None
    n = int(v)
    if scale == "zero_to_four":
        return n if 0 <= n <= 4 else None
    if scale == "centered":
        return n + 2 if -2 <= n <= 2 else None
    if 1 <= n <= 5:
        return n - 1
    if n == 0 and scale != "one_to_five":
        return 0
    return None


# ---- answer list shapes --------------------------------------------------

def _item_id(item: Any, pos: int) -> str:
    if isinstance(item, Mapping):
        iid = item.get("id", item.get("qid"))
    else:
        iid = getattr(item, "id", None)
    return str(iid) if iid not in (None, "") else f"q{pos + 1}"


def attach_ids(items: Sequence[Any], values: Sequence[Any]) -> List[AnswerRecord]:
    """Pair positional values with item ids (extra values or items are dropped)."""

    return [AnswerRecord(id=_item_id(items[i], i), value=values[i]) for i in range(min(len(items), len(values)))]


def answers_for_session(items: Sequence[Any], values: Sequence[Any], seed: str) -> List[AnswerRecord]:
    """Re-derive a session's shuffled order and pair its positional answers."""

    return attach_ids(permute(items, seed), values)


def coerce_answers(answers: Iterable[Any] | None, items: Sequence[Any] | None = None) -> List[AnswerRecord]:
    """Accept ``{id, value}`` dicts, AnswerRecords, or bare positional values.

    Bare values need ``items`` (in answer order) to recover ids; without it
    the position itself becomes the id.
    """

    out: List[AnswerRecord] = []
    for pos, a in enumerate(answers or []):
        if isinstance(a, AnswerRecord):
            out.append(a)
        elif isinstance(a, Mapping) and "id" in a:
            out.append(AnswerRecord(id=str(a["id"]), value=a.get("value")))
        else:
            iid = _item_id(items[pos], pos) if items is not None and pos < len(items) else str(pos)
            out.append(AnswerRecord(id=iid, value=a))
    return out
