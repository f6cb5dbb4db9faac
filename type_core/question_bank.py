from __future__ import annotations
import json
from pathlib import Path
from typing import Any, List, Mapping

from .config import MODE_TO_ITEMS
from .errors import UnknownModeError
from .types import Item


def _rows(raw: Any) -> List[Any]:
    if isinstance(raw, list):
        return raw
    if isinstance(raw, Mapping) and isinstance(raw.get("items"), list):
        return raw["items"]
    return []


def to_item(r: Any) -> Item:
    if isinstance(r, Item):
        return r
    r = dict(r) if isinstance(r, Mapping) else {"text": str(r)}
    iid = r.pop("id", None)
    if iid is None:
        iid = r.pop("qid", None)
    text = r.pop("text", None) or r.pop("stem", None) or r.pop("prompt", None) or ""
    options = r.pop("options", None)
    return Item(id="" if iid is None else str(iid), text=str(text), options=options, extra=r)


def load_items(raw: Any) -> List[Item]:
    """Accept a bare list or ``{"items": [...]}``; ids are kept as given.

    Items without an id keep ``id=""`` here; the quiz session assigns
    positional ids after shuffling.
    """
    return [to_item(r) for r in _rows(raw)]


def load_items_file(path: str | Path) -> List[Item]:
    return load_items(json.loads(Path(path).read_text(encoding="utf-8")))


def items_for_mode(mode: str, payload: Mapping[str, Any] | None = None, items_dir: str | None = None) -> List[Item]:
    """Item bank for ``mode`` from the payload's ``items`` section or ``items_dir``."""
    if mode not in MODE_TO_ITEMS:
        raise UnknownModeError(mode)
    embedded = ((payload or {}).get("items") or {}).get(mode)
    if embedded is not None:
        return load_items(embedded)
    if items_dir:
        p = Path(items_dir) / MODE_TO_ITEMS[mode]
        if p.exists():
            return load_items_file(p)
    return []
