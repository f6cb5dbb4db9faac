from __future__ import annotations

import pytest

from type_core.answers import (
    answers_for_session,
    attach_ids,
    center,
    coerce_answers,
    detect_answer_scale,
    detect_scale,
    reduce_answer,
    to_zero_based,
)
from type_core.sequencer import permute
from type_core.types import AnswerRecord


@pytest.mark.parametrize(
    "value,scale,direction,magnitude",
    [
        (5, "one_to_five", 1, 1.0),
        (4, "one_to_five", 1, 0.5),
        (3, "one_to_five", 0, 0.0),
        (2, "one_to_five", -1, 0.5),
        (1, "one_to_five", -1, 1.0),
        (4, "zero_to_four", 1, 1.0),
        (2, "zero_to_four", 0, 0.0),
        (0, "zero_to_four", -1, 1.0),
        (2, "centered", 1, 1.0),
        (-1, "centered", -1, 0.5),
        (0, "centered", 0, 0.0),
    ],
)
def test_reduce_answer_by_scale(value, scale, direction, magnitude):
    red = reduce_answer(value, scale)
    assert red.direction == direction
    assert red.magnitude == magnitude


def test_auto_detection():
    assert detect_scale(-1) == "centered"
    assert detect_scale(0) == "zero_to_four"
    assert detect_scale(5) == "one_to_five"
    assert reduce_answer(5).direction == 1
    assert reduce_answer(-2).direction == -1
    assert reduce_answer(0).magnitude == 1.0


def test_out_of_range_values_are_clamped():
    assert center(9, "one_to_five") == 2.0
    assert reduce_answer(-7, "centered").magnitude == 1.0


def test_non_numeric_values_reduce_to_none():
    for v in (None, "abc", float("nan"), True, {"v": 1}):
        assert reduce_answer(v) is None
    assert reduce_answer("4", "one_to_five").direction == 1


def test_unknown_scale_raises():
    with pytest.raises(ValueError):
        reduce_answer(3, "one_to_seven")


def test_to_zero_based():
    assert to_zero_based(5) == 4
    assert to_zero_based(1) == 0
    assert to_zero_based(0) == 0
    assert to_zero_based(4, "zero_to_four") == 4
    assert to_zero_based(-2, "centered") == 0
    assert to_zero_based(0, "one_to_five") is None
    assert to_zero_based(6) is None
    assert to_zero_based(2.5) is None
    assert to_zero_based("x") is None


def test_coerce_answers_shapes():
    items = [{"id": "q7"}, {"id": "q3"}]
    out = coerce_answers([{"id": "q1", "value": 4}, AnswerRecord(id="q2", value=None)])
    assert out == [AnswerRecord(id="q1", value=4), AnswerRecord(id="q2", value=None)]
    assert coerce_answers([5, 1], items) == [AnswerRecord(id="q7", value=5), AnswerRecord(id="q3", value=1)]
    assert coerce_answers([5, 1]) == [AnswerRecord(id="0", value=5), AnswerRecord(id="1", value=1)]
    assert coerce_answers(None) == []


def test_attach_ids_falls_back_to_position():
    recs = attach_ids([{"text": "no id"}, {"id": "b"}], [1, 2, 3])
    assert [r.id for r in recs] == ["q1", "b"]


def test_answers_for_session_follows_seeded_order():
    items = [{"id": f"q{i}"} for i in range(1, 11)]
    values = list(range(10))
    shuffled = permute(items, "s1")
    recs = answers_for_session(items, values, "s1")
    assert [r.id for r in recs] == [it["id"] for it in shuffled]
    assert [r.value for r in recs] == values


def test_detect_answer_scale_for_a_set():
    assert detect_answer_scale([-2, -1, 0, 1, 2]) == "centered"
    assert detect_answer_scale([1, 3, 5, None]) == "one_to_five"
    assert detect_answer_scale([0, 2, 4]) == "zero_to_four"
    assert detect_answer_scale(["x", None]) == "zero_to_four"
