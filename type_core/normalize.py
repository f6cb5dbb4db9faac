"""Canonicalize hand-authored weight tables, function metadata and type maps.

Weight files are written by hand in several shapes.  Everything downstream
works on a single canonical form::

    {item_id: WeightRow(A=(8 floats), B=(8 floats))}

Shapes are recognized by small ``(name, predicate, canonicalizer)`` tables,
tried in order; the first predicate that accepts a value wins.  Dimension
symbols are always resolved through ``key_to_index`` rather than position,
since weight authors and mapping authors do not share an ordering.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .config import DEFAULT_FUNCS, N_FUNCS
from .types import FuncMeta, TypeEntry, TypeMap, TypeRule, WeightRow

__all__ = [
    "normalize_vector",
    "normalize_weights",
    "normalize_func_meta",
    "key_to_index",
    "resolve_func_ref",
    "normalize_type_map",
    "VECTOR_SHAPES",
    "TABLE_SHAPES",
]

log = logging.getLogger(__name__)

Shape = Tuple[str, Callable[[Any], bool], Callable[..., Any]]

_SIDE_ALIASES: Dict[str, str] = {
    "a": "A", "pos": "A", "positive": "A", "agree": "A",
    "b": "B", "neg": "B", "negative": "B", "disagree": "B",
}
_ID_KEYS: tuple[str, ...] = ("id", "qid", "questionId")


def _num(x: Any) -> float:
    try:
        v = float(x)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(v) or math.isinf(v) or v < 0.0:
        return 0.0
    return v


def _is_index_key(k: Any) -> bool:
    if isinstance(k, bool):
        return False
    if isinstance(k, int):
        return True
    return isinstance(k, str) and k.strip().isdigit()


# ---- vector shapes -------------------------------------------------------

def _from_sequence(x, _kti) -> List[float]:
    vals = list(x)[:N_FUNCS]
    return [_num(v) for v in vals] + [0.0] * (N_FUNCS - len(vals))


def _from_index_keys(x, _kti) -> List[float]:
    out = [0.0] * N_FUNCS
    for k, v in x.items():
        i = int(k)
        if 0 <= i < N_FUNCS:
            out[i] = _num(v)
    return out


def _from_symbol_keys(x, kti) -> List[float]:
    # numeric keys may still be mixed in with symbols
    out = [0.0] * N_FUNCS
    for k, v in x.items():
        if _is_index_key(k):
            i = int(k)
        elif k in kti:
            i = kti[k]
        else:
            continue
        if 0 <= i < N_FUNCS:
            out[i] = _num(v)
    return out


VECTOR_SHAPES: List[Shape] = [
    ("sequence", lambda x: isinstance(x, (list, tuple)), _from_sequence),
    ("index_keyed", lambda x: isinstance(x, Mapping) and bool(x) and all(_is_index_key(k) for k in x), _from_index_keys),
    ("symbol_keyed", lambda x: isinstance(x, Mapping), _from_symbol_keys),
]


def normalize_vector(x: Any, kti: Mapping[str, int]) -> List[float]:
    """Return an 8-float list; anything unrecognized becomes all zeros."""

    for _name, accepts, canon in VECTOR_SHAPES:
        if accepts(x):
            return canon(x, kti)
    return [0.0] * N_FUNCS


# ---- row shapes ----------------------------------------------------------

def _side_of(label: Any) -> str:
    """``A`` for labels starting with a/pos (agree, positive...), else ``B``."""

    return "A" if str(label).strip().lower().startswith(("a", "pos")) else "B"


def _pick_side_keys(row: Mapping) -> Dict[str, str]:
    picked: Dict[str, str] = {}
    for key in row:
        side = _SIDE_ALIASES.get(str(key).lower())
        if side and side not in picked:
            picked[side] = key
    return picked


class _TableBuilder:
    """Collects halves per item; side records for one id combine."""

    def __init__(self, kti: Mapping[str, int]):
        self.kti = kti
        self.halves: Dict[str, Dict[str, List[float]]] = {}

    def put(self, item_id: str, side: str, vec: Any) -> None:
        self.halves.setdefault(item_id, {})[side] = normalize_vector(vec, self.kti)

    def touch(self, item_id: str) -> None:
        self.halves.setdefault(item_id, {})

    def add_row(self, item_id: str, row: Any) -> None:
        if isinstance(row, list) and any(isinstance(part, Mapping) for part in row):
            for part in row:
                self.add_row(item_id, part)
            return
        if not isinstance(row, Mapping):
            log.debug("weights: non-object row for %s kept as zeros", item_id)
            self.touch(item_id)
            return
        if "side" in row and "weights" in row:
            self.put(item_id, _side_of(row["side"]), row["weights"])
            return
        keys = _pick_side_keys(row)
        self.touch(item_id)
        for side, key in keys.items():
            self.put(item_id, side, row[key])

    def build(self) -> Dict[str, WeightRow]:
        zero = [0.0] * N_FUNCS
        return {
            iid: WeightRow(A=tuple(h.get("A", zero)), B=tuple(h.get("B", zero)))
            for iid, h in self.halves.items()
        }


def _row_id(row: Any) -> str:
    if not isinstance(row, Mapping):
        return ""
    for k in _ID_KEYS:
        v = row.get(k)
        if v is not None and str(v) != "":
            return str(v)
    return ""


def _from_row_list(raw, builder: _TableBuilder) -> None:
    for row in raw:
        iid = _row_id(row)
        if not iid:
            log.debug("weights: row without id skipped")
            continue
        builder.add_row(iid, row)


def _from_id_keyed(raw, builder: _TableBuilder) -> None:
    for k, row in raw.items():
        builder.add_row(str(k), row)


def _from_wrapped(raw, builder: _TableBuilder) -> None:
    _from_row_list(raw["items"], builder)


TABLE_SHAPES: List[Shape] = [
    ("wrapped", lambda r: isinstance(r, Mapping) and isinstance(r.get("items"), list), _from_wrapped),
    ("row_list", lambda r: isinstance(r, (list, tuple)), _from_row_list),
    ("id_keyed", lambda r: isinstance(r, Mapping), _from_id_keyed),
]


def normalize_weights(raw: Any, kti: Optional[Mapping[str, int]] = None) -> Dict[str, WeightRow]:
    """Canonicalize a raw weight table into ``{item_id: WeightRow}``.

    Unknown top-level shapes (numbers, strings, ``None``) give an empty map.
    """

    if kti is None:
        kti = key_to_index(normalize_func_meta(None))
    builder = _TableBuilder(kti)
    for name, accepts, canon in TABLE_SHAPES:
        if accepts(raw):
            canon(raw, builder)
            log.debug("weights: shape=%s rows=%d", name, len(builder.halves))
            break
    else:
        log.debug("weights: unrecognized table type %s", type(raw).__name__)
    return builder.build()


# ---- function metadata ---------------------------------------------------

def _default_funcs() -> List[FuncMeta]:
    return [FuncMeta(idx=i, key=k, name=n, desc="") for i, (k, n) in enumerate(DEFAULT_FUNCS)]


def normalize_func_meta(funcs: Any) -> List[FuncMeta]:
    """Accept ``{list: [...]}`` or a bare list of at least eight entries."""

    entries = funcs.get("list") if isinstance(funcs, Mapping) else funcs
    if not isinstance(entries, (list, tuple)) or len(entries) < N_FUNCS:
        return _default_funcs()
    out: List[FuncMeta] = []
    for i, ent in enumerate(entries[:N_FUNCS]):
        if isinstance(ent, Mapping):
            key = str(ent.get("key") or f"f{i}")
            out.append(FuncMeta(idx=i, key=key, name=str(ent.get("name") or key), desc=str(ent.get("desc") or "")))
        else:
            key = str(ent)
            out.append(FuncMeta(idx=i, key=key, name=key))
    return out


def key_to_index(funcs: List[FuncMeta]) -> Dict[str, int]:
    return {f.key: f.idx for f in funcs}


def resolve_func_ref(ref: Any, kti: Mapping[str, int]) -> Optional[int]:
    """Map an index (int or digit string) or a dimension symbol to an index."""

    if ref is None:
        return None
    if _is_index_key(ref):
        i = int(ref)
        return i if 0 <= i < N_FUNCS else None
    return kti.get(str(ref).strip())


# ---- type maps -----------------------------------------------------------

def _entry(raw: Any) -> Optional[TypeEntry]:
    if isinstance(raw, str) and raw:
        return TypeEntry(code=raw)
    if not isinstance(raw, Mapping) or not raw.get("code"):
        return None
    return TypeEntry(code=str(raw["code"]), name=raw.get("name"), description=raw.get("description"))


def normalize_type_map(raw: Any, kti: Mapping[str, int]) -> Optional[TypeMap]:
    """Canonicalize ``mapping.types``; returns ``None`` when nothing usable."""

    if not isinstance(raw, Mapping):
        return None
    tm = TypeMap()

    pairs = raw.get("byPair") or raw.get("pairs") or {}
    if isinstance(pairs, Mapping):
        for k, v in pairs.items():
            parts = str(k).split("-")
            ent = _entry(v)
            if len(parts) != 2 or ent is None:
                continue
            dom, aux = (resolve_func_ref(p, kti) for p in parts)
            if dom is None or aux is None:
                log.debug("types: unresolved pair key %r", k)
                continue
            tm.by_pair[(dom, aux)] = ent

    by_dom = raw.get("byDominant") or {}
    if isinstance(by_dom, Mapping):
        items = by_dom.items()
    elif isinstance(by_dom, list):
        items = enumerate(by_dom)
    else:
        items = ()
    for k, v in items:
        idx, ent = resolve_func_ref(k, kti), _entry(v)
        if idx is not None and ent is not None:
            tm.by_dominant[idx] = ent

    for r in raw.get("rules") or []:
        if not isinstance(r, Mapping):
            continue
        ent = _entry(r)
        if ent is None:
            continue
        cond = r.get("if") or {}
        dom_ref, aux_ref = cond.get("dom"), cond.get("aux")
        dom, aux = resolve_func_ref(dom_ref, kti), resolve_func_ref(aux_ref, kti)
        if (dom_ref is not None and dom is None) or (aux_ref is not None and aux is None):
            log.debug("types: rule %s references unknown function", ent.code)
            continue
        tm.rules.append(TypeRule(entry=ent, dom=dom, aux=aux))

    return None if tm.is_empty() else tm
