# type_core/quiz.py
from __future__ import annotations
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence
import logging
import secrets
import uuid

from .answers import to_zero_based
from .config import ADVANCED_MODES, MODE_TO_WEIGHTS
from .errors import SessionError, UnknownModeError
from .question_bank import to_item
from .sequencer import permute
from .types import AnswerRecord, Item, ScoreResult


log = logging.getLogger(__name__)

# stored answers are always 0..4
STORED_SCALE = "zero_to_four"


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_seed() -> str:
    return secrets.token_hex(8)


@dataclass
class Part:
    mode: str
    start: int
    end: int


def _prepare(items: Sequence[Any], seed: str, prefix: str) -> List[Item]:
    shuffled = permute([to_item(it) for it in items], seed)
    return [it if it.id else replace(it, id=f"{prefix}{i + 1}") for i, it in enumerate(shuffled)]


def _first_unanswered(answers: List[Optional[int]]) -> int:
    for i, v in enumerate(answers):
        if v is None:
            return i
    return len(answers)


class QuizSession:
    """Answer collection over a seeded shuffle of the item bank.

    Only the seed and the positional answers need to survive between
    requests; the shuffled order is rebuilt from the seed.
    """

    def __init__(
        self,
        items: Sequence[Any],
        mode: str = "basic",
        seed: Optional[str] = None,
        session_id: Optional[str] = None,
        answer_scale: Optional[str] = None,
    ):
        if mode not in MODE_TO_WEIGHTS:
            raise UnknownModeError(mode)
        if not items:
            raise SessionError(f"Empty item list for mode={mode}")
        self.session_id = session_id or str(uuid.uuid4())
        self.seed = seed if seed is not None else new_seed()
        self.mode = mode
        self.answer_scale = answer_scale
        self.items: List[Item] = _prepare(items, self.seed, "q")
        self.answers: List[Optional[int]] = [None] * len(self.items)
        self.step = 0
        self.meta: Dict[str, Any] = {"startedAt": utcnow_iso()}
        self.parts: List[Part] = [Part(mode=mode, start=0, end=len(self.items))]

    @property
    def total(self) -> int:
        return len(self.items)

    def restore(self, answers: Sequence[Any]) -> Dict[str, Any]:
        """Resume from stored positional answers (padded or cut to fit)."""
        vals = [to_zero_based(v, STORED_SCALE) if v is not None else None for v in answers[: self.total]]
        vals += [None] * (self.total - len(vals))
        self.answers = vals
        self.step = _first_unanswered(vals)
        return self.state()

    def current(self) -> Optional[Item]:
        return self.items[self.step] if self.step < self.total else None

    def state(self) -> Dict[str, Any]:
        idx = max(0, min(self.step, self.total))
        cur = self.items[idx] if idx < self.total else None
        return {
            "sessionId": self.session_id,
            "mode": self.mode,
            "seed": self.seed,
            "meta": dict(self.meta),
            "total": self.total,
            "step": idx,
            "done": idx >= self.total,
            "progress": min(1.0, idx / self.total) if self.total else 0.0,
            "current": _serialize_item(cur),
            "answers": list(self.answers),
        }

    def answer(self, value: Any) -> Dict[str, Any]:
        v = to_zero_based(value, self.answer_scale)
        if v is None:
            raise ValueError("answer(value) expects 0..4 or 1..5")
        if self.step >= self.total:
            return self.state()
        self.answers[self.step] = v
        self.step += 1
        log.debug("session=%s step=%d/%d", self.session_id, self.step, self.total)
        return self.state()

    def go(self, index: int) -> Dict[str, Any]:
        self.step = max(0, min(int(index), self.total))
        return self.state()

    def is_complete(self) -> bool:
        return self.step >= self.total

    def export_answers(self) -> List[AnswerRecord]:
        return [AnswerRecord(id=str(it.id), value=self.answers[i]) for i, it in enumerate(self.items)]

    def answers_by_part(self) -> Dict[str, List[AnswerRecord]]:
        exported = self.export_answers()
        return {p.mode: exported[p.start : p.end] for p in self.parts}

    def finish(self, extra_meta: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if any(v is None for v in self.answers):
            raise SessionError("Cannot finish: some answers are empty")
        self.meta = {**self.meta, "finishedAt": utcnow_iso(), **(extra_meta or {})}
        return {
            "sessionId": self.session_id,
            "mode": self.mode,
            "total": self.total,
            "answers": [{"id": a.id, "value": a.value} for a in self.export_answers()],
            "seed": self.seed,
            "meta": dict(self.meta),
            "parts": [vars(p).copy() for p in self.parts],
        }

    def continue_to_advanced(self, kind: str, items: Sequence[Any]) -> Dict[str, Any]:
        """Append an advanced bank after ``basic``, shuffled with the same seed."""
        if self.mode != "basic":
            raise SessionError("continue_to_advanced only allowed after basic mode")
        if kind not in ADVANCED_MODES:
            raise SessionError(f"Invalid advanced kind {kind!r}. Use {' | '.join(ADVANCED_MODES)}")
        if not items:
            raise SessionError(f"Empty item list for {kind}")
        appended = _prepare(items, self.seed, "a")
        start = self.total
        self.items.extend(appended)
        self.answers.extend([None] * len(appended))
        self.parts.append(Part(mode=kind, start=start, end=self.total))
        self.mode = kind
        log.info("session=%s continued to %s (+%d items)", self.session_id, kind, len(appended))
        return self.state()


def _serialize_item(it: Optional[Item]) -> Optional[Dict[str, Any]]:
    if it is None:
        return None
    return {"id": it.id, "text": it.text, "options": it.options}


async def score_session(scorer, session: QuizSession) -> Dict[str, ScoreResult]:
    """Score each part of a session with its own mode's weights."""
    out: Dict[str, ScoreResult] = {}
    for mode, records in session.answers_by_part().items():
        await scorer.init(mode)
        out[mode] = scorer.score(mode=mode, answers=records, scale=STORED_SCALE)
    return out
