"""Helpers to export per-item scoring diagnostics in JSON/CSV formats."""
from __future__ import annotations

from dataclasses import asdict, is_dataclass
from typing import Iterable, List, Dict, Any
import csv
import io

_FIELDS: tuple[str, ...] = (
    "id",
    "status",
    "side",
    "magnitude",
    "centered",
)


def _normalize_event(event: Any) -> Dict[str, Any]:
    if is_dataclass(event):
        event = asdict(event)
    event = event or {}
    out: Dict[str, Any] = {}
    for key in _FIELDS:
        val = event.get(key)
        if key == "magnitude":
            try:
                out[key] = float(val)
            except (TypeError, ValueError):
                out[key] = 0.0
        elif key == "centered":
            try:
                out[key] = float(val)
            except (TypeError, ValueError):
                out[key] = ""
        else:
            out[key] = "" if val is None else str(val)
    return out


def to_json(events: Iterable[Any]) -> Dict[str, Any]:
    """Return a JSON-safe payload for diagnostics export."""

    normalized: List[Dict[str, Any]] = [_normalize_event(evt) for evt in events]
    counts: Dict[str, int] = {}
    for row in normalized:
        counts[row["status"]] = counts.get(row["status"], 0) + 1
    return {"events": normalized, "counts": counts}


def to_csv(events: Iterable[Any]) -> str:
    """Render diagnostics as CSV with a fixed header."""

    normalized = [_normalize_event(evt) for evt in events]
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=_FIELDS)
    writer.writeheader()
    for row in normalized:
        writer.writerow(row)
    return buf.getvalue()


__all__ = ["to_json", "to_csv"]
