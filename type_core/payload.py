"""Access to the decoded weights/mapping payload.

The payload reaches memory through some outside channel (a JSON file, an
inline blob decoded by the delivery layer, ...).  This module only needs
its decoded shape::

    {"version": 1, "ts": "...",
     "weights": {"weights_32": <raw table>, ...},
     "mapping": {"funcs": <raw func meta>, "types": <raw type map>},
     "items":   {"basic": [...], ...}}          # optional

:class:`PayloadLoader` wraps the accessor so decoding happens at most once
per process: concurrent callers share one in-flight decode and everyone gets
the same cached object afterwards.
"""
from __future__ import annotations

import asyncio
import inspect
import json
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

from .config import MODE_TO_WEIGHTS
from .errors import PayloadUnavailableError

__all__ = ["PayloadLoader", "file_source", "dir_source", "static_source"]

log = logging.getLogger(__name__)

Source = Callable[[], Union[Mapping[str, Any], None, Awaitable[Optional[Mapping[str, Any]]]]]


class PayloadLoader:
    def __init__(self, source: Source):
        self._source = source
        self._value: Optional[Mapping[str, Any]] = None
        self._pending: Optional[asyncio.Future] = None
        self.decode_count = 0

    @property
    def loaded(self) -> bool:
        return self._value is not None

    async def _decode(self) -> Mapping[str, Any]:
        self.decode_count += 1
        try:
            result = self._source()
            if inspect.isawaitable(result):
                result = await result
            if result is None:
                raise PayloadUnavailableError()
            if not isinstance(result, Mapping):
                raise PayloadUnavailableError(f"payload must be an object, got {type(result).__name__}")
        except Exception:
            # a failed decode is not cached; the next caller starts over
            self._pending = None
            raise
        self._value = result
        log.info("payload decoded version=%s ts=%s", result.get("version"), result.get("ts"))
        return result

    async def get(self) -> Mapping[str, Any]:
        if self._value is not None:
            return self._value
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._decode())
        # shield: one caller giving up must not cancel the shared decode
        return await asyncio.shield(self._pending)


def static_source(payload: Optional[Mapping[str, Any]]) -> Source:
    return lambda: payload


def file_source(path: Union[str, Path]) -> Source:
    p = Path(path)

    def _read() -> Optional[Dict[str, Any]]:
        if not p.exists():
            return None
        return json.loads(p.read_text(encoding="utf-8"))

    async def _load():
        return await asyncio.to_thread(_read)

    return _load


def _read_json(p: Path) -> Any:
    return json.loads(p.read_text(encoding="utf-8")) if p.exists() else None


def dir_source(root: Union[str, Path]) -> Source:
    """Compose ``weights/*.json`` and ``mapping/{funcs,types}.json`` into a payload."""

    base = Path(root)

    def _compose() -> Optional[Dict[str, Any]]:
        wdir, mdir = base / "weights", base / "mapping"
        if not wdir.is_dir():
            return None
        weights = {key: _read_json(wdir / f"{key}.json") for key in MODE_TO_WEIGHTS.values()}
        return {
            "version": 1,
            "ts": None,
            "weights": {k: v for k, v in weights.items() if v is not None},
            "mapping": {"funcs": _read_json(mdir / "funcs.json"), "types": _read_json(mdir / "types.json")},
        }

    async def _load():
        return await asyncio.to_thread(_compose)

    return _load
