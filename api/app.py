from __future__ import annotations
from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from pathlib import Path
import logging, os

from type_core.answers import answers_for_session, attach_ids
from type_core.audit_export import to_csv as audit_to_csv, to_json as audit_to_json
from type_core.config import AUDIT_EXPORT_ENABLED, ITEMS_DIR, MODE_TO_WEIGHTS, PAYLOAD_PATH
from type_core.engine import Scorer
from type_core.errors import ConfigError, PayloadUnavailableError, SessionError, UnknownModeError
from type_core.payload import PayloadLoader, dir_source, file_source, static_source
from type_core.question_bank import items_for_mode
from type_core.quiz import QuizSession, score_session
from type_core.types import AnswerRecord, Item

log = logging.getLogger(__name__)


def _default_loader() -> PayloadLoader:
    if not PAYLOAD_PATH:
        return PayloadLoader(static_source(None))
    p = Path(PAYLOAD_PATH)
    return PayloadLoader(dir_source(p) if p.is_dir() else file_source(p))


LOADER = _default_loader()
SCORER = Scorer(LOADER)
SESS: dict[str, QuizSession] = {}

app = FastAPI(title="Type Scoring API")

ALLOWED_ORIGINS = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)


@app.get("/")
def root():
    return {"status": "ok", "service": "type-scoring-api"}


# ---- Schemas ----
class StartReq(BaseModel):
    mode: str = "basic"
    seed: str | None = None
    answer_scale: str | None = None

class AnswerReq(BaseModel):
    value: int | float

class GoReq(BaseModel):
    index: int

class ContinueReq(BaseModel):
    kind: str

class AnswerIn(BaseModel):
    id: str | int
    value: float | None = None

class ScoreReq(BaseModel):
    mode: str
    answers: list[AnswerIn | float | None]
    scale: str | None = None
    seed: str | None = None   # positional answers recorded in a seeded session order


# ---- Helpers ----
async def _init(mode: str):
    try:
        return await SCORER.init(mode)
    except UnknownModeError as e:
        raise HTTPException(404, str(e))
    except PayloadUnavailableError as e:
        raise HTTPException(503, str(e))
    except ConfigError as e:
        raise HTTPException(500, str(e))


async def _items(mode: str) -> list[Item]:
    try:
        payload = await LOADER.get()
    except PayloadUnavailableError as e:
        raise HTTPException(503, str(e))
    return items_for_mode(mode, payload, ITEMS_DIR)


def _session(sid: str) -> QuizSession:
    sess = SESS.get(sid)
    if not sess:
        raise HTTPException(404, "session not found")
    return sess


async def _records(req: ScoreReq) -> list[AnswerRecord]:
    if all(isinstance(a, AnswerIn) for a in req.answers):
        return [AnswerRecord(id=str(a.id), value=a.value) for a in req.answers]
    values = [a.value if isinstance(a, AnswerIn) else a for a in req.answers]
    items = await _items(req.mode)
    if not items:
        return attach_ids([{"id": str(i)} for i in range(len(values))], values)
    if req.seed is not None:
        return answers_for_session(items, values, req.seed)
    return attach_ids(items, values)


# ---- Health ----
@app.get("/health")
def health():
    return {
        "payload_loaded": LOADER.loaded,
        "payload_path": PAYLOAD_PATH,
        "modes": list(MODE_TO_WEIGHTS),
        "audit_export": AUDIT_EXPORT_ENABLED,
    }


# ---- Quiz sessions (in memory only) ----
@app.post("/session/start")
async def start(req: StartReq):
    await _init(req.mode)
    items = await _items(req.mode)
    if not items:
        raise HTTPException(404, f"no item bank for mode {req.mode}")
    try:
        sess = QuizSession(items, mode=req.mode, seed=req.seed, answer_scale=req.answer_scale)
    except SessionError as e:
        raise HTTPException(400, str(e))
    SESS[sess.session_id] = sess
    log.info("session start sid=%s mode=%s items=%d", sess.session_id, req.mode, sess.total)
    return sess.state()

@app.get("/session/{sid}")
def session_state(sid: str):
    return _session(sid).state()

@app.post("/session/{sid}/answer")
def answer(sid: str, req: AnswerReq):
    sess = _session(sid)
    try:
        return sess.answer(req.value)
    except ValueError as e:
        raise HTTPException(400, str(e))

@app.post("/session/{sid}/go")
def go(sid: str, req: GoReq):
    return _session(sid).go(req.index)

@app.post("/session/{sid}/continue")
async def continue_advanced(sid: str, req: ContinueReq):
    sess = _session(sid)
    if req.kind not in MODE_TO_WEIGHTS:
        raise HTTPException(404, f"Unknown mode: {req.kind}")
    items = await _items(req.kind)
    try:
        return sess.continue_to_advanced(req.kind, items)
    except SessionError as e:
        raise HTTPException(400, str(e))

@app.post("/session/{sid}/finish")
async def finish(sid: str):
    sess = _session(sid)
    try:
        summary = sess.finish()
    except SessionError as e:
        raise HTTPException(400, str(e))
    for part in sess.parts:
        await _init(part.mode)
    results = await score_session(SCORER, sess)
    SESS.pop(sid, None)
    return {"session": summary, "results": {mode: res.to_dict() for mode, res in results.items()}}


# ---- Stateless scoring ----
@app.post("/score")
async def score(req: ScoreReq):
    await _init(req.mode)
    records = await _records(req)
    try:
        res = SCORER.score(mode=req.mode, answers=records, scale=req.scale)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return res.to_dict()

@app.post("/score/audit.json")
async def score_audit_json(req: ScoreReq):
    if not AUDIT_EXPORT_ENABLED:
        raise HTTPException(404, "audit export disabled")
    await _init(req.mode)
    res = SCORER.score(mode=req.mode, answers=await _records(req), scale=req.scale)
    return {"mode": req.mode, "usedItems": res.used_items, **audit_to_json(res.per_item)}

@app.post("/score/audit.csv")
async def score_audit_csv(req: ScoreReq):
    if not AUDIT_EXPORT_ENABLED:
        raise HTTPException(404, "audit export disabled")
    await _init(req.mode)
    res = SCORER.score(mode=req.mode, answers=await _records(req), scale=req.scale)
    return Response(
        content=audit_to_csv(res.per_item),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=\"{req.mode}_items.csv\""},
    )


# ---- Mapping metadata ----
@app.get("/meta/funcs")
async def meta_funcs():
    await _init("basic")
    return {"funcs": [vars(f) for f in SCORER.get_func_meta() or []]}

@app.get("/meta/types")
async def meta_types():
    await _init("basic")
    tm = SCORER.get_type_map()
    if tm is None:
        return {"types": None}
    return {
        "types": {
            "byPair": {f"{d}-{a}": vars(e) for (d, a), e in tm.by_pair.items()},
            "byDominant": {str(k): vars(e) for k, e in tm.by_dominant.items()},
            "rules": [{"if": {"dom": r.dom, "aux": r.aux}, **vars(r.entry)} for r in tm.rules],
        }
    }
