# type_core/engine.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence
import logging

from .accumulate import accumulate
from .answers import coerce_answers
from .axes import DEFAULT_AXES, AxisDefinition, aggregate, resolve_sets
from .confidence import estimate
from .config import MODE_TO_WEIGHTS, DEFAULT_SCALE
from .errors import ConfigError, ModeNotInitializedError, UnknownModeError
from .normalize import key_to_index, normalize_func_meta, normalize_type_map, normalize_weights
from .payload import PayloadLoader
from .resolver import resolve
from .types import FuncMeta, ScoreResult, TypeMap, WeightRow


log = logging.getLogger(__name__)


@dataclass
class ModeContext:
    """Everything ``score`` needs for one mode, built once by ``init``."""

    mode: str
    weights: Dict[str, WeightRow]
    funcs: List[FuncMeta]
    key_to_index: Dict[str, int]
    type_map: Optional[TypeMap]
    axis_index: Dict[str, int] = field(default_factory=dict)
    axes: Sequence[AxisDefinition] = field(default=DEFAULT_AXES)


def _axis_index(axes: Sequence[AxisDefinition], kti: Dict[str, int]) -> Dict[str, int]:
    """Index used for axis symbols; the default ordering when the metadata lacks them."""

    symbols = set().union(*(a.positive | a.negative for a in axes)) if axes else set()
    if symbols <= set(kti):
        return kti
    log.warning("function metadata lacks axis symbols %s; using default order", sorted(symbols - set(kti)))
    return key_to_index(normalize_func_meta(None))


def build_context(
    payload: Mapping[str, Any],
    mode: str,
    axes: Sequence[AxisDefinition] = DEFAULT_AXES,
) -> ModeContext:
    key = MODE_TO_WEIGHTS.get(mode)
    if key is None:
        raise UnknownModeError(mode)
    mapping = payload.get("mapping") or {}
    funcs = normalize_func_meta(mapping.get("funcs"))
    kti = key_to_index(funcs)
    axis_index = _axis_index(axes, kti)
    for axis in axes:
        try:
            resolve_sets(axis, axis_index)
        except ValueError as e:
            raise ConfigError(str(e)) from e
    raw_weights = (payload.get("weights") or {}).get(key)
    if raw_weights is None:
        log.warning("payload has no weights table %s for mode=%s", key, mode)
    weights = normalize_weights(raw_weights, kti)
    type_map = normalize_type_map(mapping.get("types"), kti)
    log.info("init mode=%s items=%d type_map=%s", mode, len(weights), type_map is not None)
    return ModeContext(mode=mode, weights=weights, funcs=funcs, key_to_index=kti, type_map=type_map,
                       axis_index=axis_index, axes=axes)


def score_context(ctx: ModeContext, answers: Iterable[Any], scale: Optional[str] = None) -> ScoreResult:
    """Pure scoring step: same context and answers give the same result."""

    acc = accumulate(answers, ctx.weights, ctx.funcs, scale=scale)
    axes = aggregate(acc.by_function, ctx.axis_index or ctx.key_to_index, ctx.axes)
    res = resolve(acc.by_function, axes, ctx.type_map)
    return ScoreResult(
        mode=ctx.mode,
        by_function=acc.by_function,
        top=res.top,
        type=res.type,
        axes=axes,
        confidence=estimate(acc.by_function, acc.used_items),
        per_item=acc.per_item,
        used_items=acc.used_items,
    )


class Scorer:
    """Engine instance holding decoded weights, function metadata and type map.

    ``await init(mode)`` once per mode (repeat calls are no-ops), then call
    ``score`` as often as needed.
    """

    def __init__(self, loader: PayloadLoader, axes: Sequence[AxisDefinition] = DEFAULT_AXES):
        self.loader = loader
        self.axes = axes
        self._contexts: Dict[str, ModeContext] = {}
        self._payload: Optional[Mapping[str, Any]] = None

    async def init(self, mode: str) -> ModeContext:
        if mode not in MODE_TO_WEIGHTS:
            raise UnknownModeError(mode)
        ctx = self._contexts.get(mode)
        if ctx is not None:
            return ctx
        payload = await self.loader.get()
        self._payload = payload
        ctx = self._contexts.setdefault(mode, build_context(payload, mode, self.axes))
        return ctx

    def context(self, mode: str) -> ModeContext:
        if mode not in MODE_TO_WEIGHTS:
            raise UnknownModeError(mode)
        ctx = self._contexts.get(mode)
        if ctx is None:
            raise ModeNotInitializedError(mode)
        return ctx

    def score(
        self,
        *,
        mode: str,
        answers: Iterable[Any] | None,
        items: Sequence[Any] | None = None,
        scale: Optional[str] = None,
    ) -> ScoreResult:
        """Score ``answers`` for an initialized mode.

        ``answers`` may be ``{id, value}`` records (preferred, and required
        when merging several parts) or positional values, in which case
        ``items`` supplies the ids in answer order.
        """

        ctx = self.context(mode)
        records = coerce_answers(answers, items)
        return score_context(ctx, records, scale or DEFAULT_SCALE)

    @property
    def payload(self) -> Optional[Mapping[str, Any]]:
        return self._payload

    def get_func_meta(self) -> Optional[List[FuncMeta]]:
        for ctx in self._contexts.values():
            return ctx.funcs
        return None

    def get_type_map(self) -> Optional[TypeMap]:
        for ctx in self._contexts.values():
            return ctx.type_map
        return None
