# type_core/accumulate.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional
import logging

from .answers import detect_answer_scale, reduce_answer
from .config import EPS, N_FUNCS, DEBUG_TRACE, TRACE_FIELDS
from .types import AnswerRecord, FuncMeta, FunctionScore, ItemDiagnostic, WeightRow


log = logging.getLogger(__name__)


def _emit_trace(**values: object) -> None:
    if not DEBUG_TRACE:
        return
    ordered = []
    for key in TRACE_FIELDS:
        if key in values:
            ordered.append(f"{key}={values[key]}")
    if ordered:
        log.info("trace %s", " ".join(str(val) for val in ordered))


def _clamp01(x: float) -> float:
    if x < 0.0: return 0.0
    if x > 1.0: return 1.0
    return x


@dataclass
class Accumulation:
    by_function: List[FunctionScore]
    per_item: List[ItemDiagnostic] = field(default_factory=list)
    used_items: int = 0


def _classify(ans: AnswerRecord, weights: Mapping[str, WeightRow], scale: Optional[str]):
    if ans.value is None:
        return ItemDiagnostic(id=ans.id, status="unanswered"), None, None
    red = reduce_answer(ans.value, scale)
    if red is None:
        return ItemDiagnostic(id=ans.id, status="invalid"), None, None
    if red.direction == 0 or red.magnitude == 0:
        return ItemDiagnostic(id=ans.id, status="neutral", centered=red.centered), None, None
    row = weights.get(str(ans.id))
    if row is None:
        return ItemDiagnostic(id=ans.id, status="skipped", centered=red.centered), None, None
    side = "A" if red.direction > 0 else "B"
    diag = ItemDiagnostic(id=ans.id, status="applied", side=side, magnitude=red.magnitude, centered=red.centered)
    return diag, row, red


def accumulate(
    answers: Iterable[AnswerRecord],
    weights: Mapping[str, WeightRow],
    funcs: List[FuncMeta],
    scale: Optional[str] = None,
) -> Accumulation:
    """Fold answers into eight ``(raw, max)`` pairs.

    Each applied item adds ``magnitude * vec[i]`` to ``raw[i]`` and its own
    per-dimension ceiling ``max(A[i], B[i])`` to ``max[i]``; items that barely
    touch a dimension therefore barely move its denominator either.
    Unanswered, invalid, neutral and unweighted items add nothing and are
    only recorded in ``per_item``.

    When ``scale`` is None or ``"auto"`` one encoding is detected from the
    whole answer set and applied to every value.
    """

    answers = list(answers)
    if scale in (None, "auto"):
        scale = detect_answer_scale(a.value for a in answers)
        log.debug("accumulate detected scale=%s", scale)

    raw = [0.0] * N_FUNCS
    mx = [0.0] * N_FUNCS
    per_item: List[ItemDiagnostic] = []
    used = 0

    for ans in answers:
        diag, row, red = _classify(ans, weights, scale)
        per_item.append(diag)
        if row is None or red is None:
            _emit_trace(item_id=diag.id, status=diag.status, used=used)
            continue
        vec = row.A if diag.side == "A" else row.B
        for i in range(N_FUNCS):
            raw[i] += red.magnitude * vec[i]
            mx[i] += row.ceiling(i)
        used += 1
        _emit_trace(item_id=diag.id, status=diag.status, side=diag.side, magnitude=diag.magnitude, used=used)

    counts: Dict[str, int] = {}
    for d in per_item:
        counts[d.status] = counts.get(d.status, 0) + 1
    log.debug("accumulate used=%d statuses=%s", used, counts)

    by_function = []
    for i in range(N_FUNCS):
        meta = funcs[i] if i < len(funcs) else FuncMeta(idx=i, key=f"f{i}", name=f"Function {i}")
        denom = mx[i] if mx[i] > 0 else EPS
        by_function.append(
            FunctionScore(
                idx=i,
                key=meta.key,
                name=meta.name,
                desc=meta.desc,
                raw=raw[i],
                max=denom,
                pct=_clamp01(raw[i] / denom) * 100.0,
            )
        )
    return Accumulation(by_function=by_function, per_item=per_item, used_items=used)
