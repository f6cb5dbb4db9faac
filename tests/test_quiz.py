from __future__ import annotations

import asyncio

import pytest

from tests.conftest import build_items
from type_core.errors import SessionError, UnknownModeError
from type_core.question_bank import items_for_mode, load_items, to_item
from type_core.quiz import QuizSession, score_session
from type_core.sequencer import permute


def test_session_order_is_seeded():
    items = build_items(8)
    s1 = QuizSession(items, seed="abc")
    s2 = QuizSession(items, seed="abc")
    assert [it.id for it in s1.items] == [it.id for it in s2.items]
    assert [it.id for it in s1.items] == [it["id"] for it in permute(items, "abc")]
    assert sorted(it.id for it in s1.items) == sorted(it["id"] for it in items)


def test_answer_walk_and_state():
    sess = QuizSession(build_items(3), seed="s")
    st = sess.state()
    assert st["step"] == 0 and st["total"] == 3 and not st["done"]
    assert st["current"]["id"] == sess.items[0].id
    sess.answer(5)
    sess.answer(1)
    st = sess.answer(3)
    assert st["done"] and st["progress"] == 1.0 and st["current"] is None
    assert sess.answers == [4, 0, 2]
    assert sess.is_complete()


def test_answer_validation():
    sess = QuizSession(build_items(2), seed="s")
    with pytest.raises(ValueError):
        sess.answer(7)
    with pytest.raises(ValueError):
        sess.answer("x")
    zero = QuizSession(build_items(2), seed="s", answer_scale="zero_to_four")
    zero.answer(4)
    zero.answer(0)
    assert zero.answers == [4, 0]


def test_go_and_restore():
    sess = QuizSession(build_items(4), seed="s")
    sess.go(99)
    assert sess.step == 4
    sess.go(-3)
    assert sess.step == 0
    st = sess.restore([4, 3, None])
    assert sess.answers == [4, 3, None, None]
    assert st["step"] == 2


def test_finish_requires_all_answers():
    sess = QuizSession(build_items(2), seed="s")
    sess.answer(5)
    with pytest.raises(SessionError):
        sess.finish()
    sess.answer(2)
    summary = sess.finish({"client": "test"})
    assert summary["seed"] == "s"
    assert summary["meta"]["client"] == "test"
    assert "finishedAt" in summary["meta"]
    assert [a["value"] for a in summary["answers"]] == [4, 1]
    assert summary["parts"] == [{"mode": "basic", "start": 0, "end": 2}]


def test_items_without_ids_get_positional_ids():
    sess = QuizSession([{"text": "a"}, {"text": "b"}, {"text": "c"}], seed="x")
    assert [it.id for it in sess.items] == ["q1", "q2", "q3"]


def test_continue_to_advanced():
    sess = QuizSession(build_items(2), seed="s")
    with pytest.raises(SessionError):
        sess.continue_to_advanced("basic", build_items(2, prefix="a"))
    sess.continue_to_advanced("advB", build_items(3, prefix="a"))
    assert sess.total == 5 and sess.mode == "advB"
    parts = sess.answers_by_part()
    assert set(parts) == {"basic", "advB"}
    assert len(parts["basic"]) == 2 and len(parts["advB"]) == 3
    assert all(r.id.startswith("a") for r in parts["advB"])
    with pytest.raises(SessionError):
        sess.continue_to_advanced("advA", build_items(1, prefix="a"))


def test_bad_construction():
    with pytest.raises(UnknownModeError):
        QuizSession(build_items(2), mode="weird")
    with pytest.raises(SessionError):
        QuizSession([], mode="basic")


def test_score_session_scores_each_part(scorer, synthetic_payload):
    sess = QuizSession(synthetic_payload["items"]["basic"], seed="run-1")
    sess.continue_to_advanced("advA", synthetic_payload["items"]["advA"])
    while not sess.is_complete():
        sess.answer(5)
    sess.finish()
    results = asyncio.run(score_session(scorer, sess))
    assert set(results) == {"basic", "advA"}
    assert results["basic"].used_items == 8
    assert results["advA"].used_items == 4


def test_question_bank_shapes(tmp_path):
    assert to_item({"qid": 3, "stem": "Hello", "options": ["a"], "tag": "x"}).id == "3"
    it = to_item({"id": "q1", "prompt": "Hi", "tag": "x"})
    assert (it.text, it.extra) == ("Hi", {"tag": "x"})
    assert [i.id for i in load_items({"items": [{"id": "a"}, {"id": "b"}]})] == ["a", "b"]
    assert load_items(42) == []

    (tmp_path / "items_public_adv_A.json").write_text('[{"id": "a1", "text": "x"}]', encoding="utf-8")
    assert [i.id for i in items_for_mode("advA", None, str(tmp_path))] == ["a1"]
    assert items_for_mode("advB", None, str(tmp_path)) == []
    assert [i.id for i in items_for_mode("basic", {"items": {"basic": [{"id": "z"}]}})] == ["z"]
    with pytest.raises(UnknownModeError):
        items_for_mode("nope")
