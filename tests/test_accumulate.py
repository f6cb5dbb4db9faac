from __future__ import annotations

from type_core.accumulate import accumulate
from type_core.normalize import normalize_func_meta
from type_core.types import AnswerRecord, WeightRow

FUNCS = normalize_func_meta(None)
Z = (0.0,) * 8


def _row(a: dict[int, float], b: dict[int, float]) -> WeightRow:
    return WeightRow(
        A=tuple(a.get(i, 0.0) for i in range(8)),
        B=tuple(b.get(i, 0.0) for i in range(8)),
    )


def test_equal_sides_add_max_not_sum():
    weights = {"q1": _row({0: 1.0}, {0: 1.0})}
    acc = accumulate([AnswerRecord("q1", 5)], weights, FUNCS, scale="one_to_five")
    ni = acc.by_function[0]
    assert ni.max == 1.0
    assert ni.raw == 1.0
    assert ni.pct == 100.0


def test_per_item_ceiling_uses_both_sides():
    weights = {"q1": _row({0: 1.0}, {1: 0.5})}
    acc = accumulate([AnswerRecord("q1", 1)], weights, FUNCS, scale="one_to_five")
    assert acc.by_function[0].max == 1.0 and acc.by_function[0].raw == 0.0
    assert acc.by_function[1].max == 0.5 and acc.by_function[1].raw == 0.5
    assert acc.by_function[1].pct == 100.0


def test_neutral_and_null_contribute_nothing_but_differ_in_diagnostics():
    weights = {"q1": _row({0: 1.0}, {1: 1.0}), "q2": _row({2: 1.0}, {3: 1.0})}
    acc = accumulate([AnswerRecord("q1", 3), AnswerRecord("q2", None)], weights, FUNCS, scale="one_to_five")
    assert all(f.raw == 0.0 and f.pct == 0.0 for f in acc.by_function)
    assert all(f.max < 1e-6 for f in acc.by_function)
    assert [d.status for d in acc.per_item] == ["neutral", "unanswered"]
    assert acc.per_item[0].centered == 0.0
    assert acc.per_item[1].centered is None
    assert acc.used_items == 0


def test_missing_row_and_invalid_value():
    weights = {"q1": _row({0: 1.0}, {})}
    answers = [AnswerRecord("q9", 5), AnswerRecord("q1", "oops"), AnswerRecord("q1", 4)]
    acc = accumulate(answers, weights, FUNCS, scale="one_to_five")
    assert [d.status for d in acc.per_item] == ["skipped", "invalid", "applied"]
    applied = acc.per_item[2]
    assert applied.side == "A" and applied.magnitude == 0.5
    assert acc.by_function[0].pct == 50.0
    assert acc.used_items == 1


def test_pct_is_clamped():
    weights = {f"q{i}": _row({0: 0.1}, {}) for i in range(10)}
    answers = [AnswerRecord(f"q{i}", 5) for i in range(10)]
    acc = accumulate(answers, weights, FUNCS, scale="one_to_five")
    for f in acc.by_function:
        assert 0.0 <= f.pct <= 100.0
    assert abs(acc.by_function[0].pct - 100.0) < 1e-9


def test_function_metadata_flows_through():
    acc = accumulate([], {}, FUNCS)
    assert [f.key for f in acc.by_function] == [f.key for f in FUNCS]
    assert [f.idx for f in acc.by_function] == list(range(8))
    assert acc.per_item == []


def test_centered_answers_detected_as_a_set():
    weights = {f"q{i}": _row({0: 1.0}, {1: 1.0}) for i in range(5)}
    answers = [AnswerRecord(f"q{i}", v) for i, v in enumerate([-2, -1, 0, 1, 2])]
    acc = accumulate(answers, weights, FUNCS)
    assert [(d.status, d.side, d.centered) for d in acc.per_item] == [
        ("applied", "B", -2.0),
        ("applied", "B", -1.0),
        ("neutral", None, 0.0),
        ("applied", "A", 1.0),
        ("applied", "A", 2.0),
    ]
    assert acc.used_items == 4
    assert acc.by_function[0].raw == 1.5 and acc.by_function[1].raw == 1.5


def test_zero_weight_rows_still_count_as_used():
    weights = {"q1": WeightRow(A=Z, B=Z)}
    acc = accumulate([AnswerRecord("q1", 5)], weights, FUNCS, scale="one_to_five")
    assert acc.per_item[0].status == "applied"
    assert acc.used_items == 1
    assert all(f.pct == 0.0 for f in acc.by_function)
