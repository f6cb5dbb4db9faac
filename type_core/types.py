from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import List, Dict, Optional, Literal, Any

Side = Literal["A", "B"]
Provenance = Literal["pair", "dominant", "rule", "heuristic"]
ItemStatus = Literal["applied", "neutral", "unanswered", "skipped", "invalid"]


@dataclass
class Item:
    id: str; text: str = ""
    options: Optional[List[str]] = None
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AnswerRecord:
    id: str; value: Optional[float] = None


@dataclass(frozen=True)
class WeightRow:
    A: tuple
    B: tuple

    def ceiling(self, i: int) -> float:
        return max(self.A[i], self.B[i])


@dataclass
class FuncMeta:
    idx: int; key: str; name: str; desc: str = ""


@dataclass
class FunctionScore:
    idx: int
    key: str
    name: str
    desc: str
    raw: float
    max: float
    pct: float


@dataclass
class AxisScore:
    name: str
    positive_label: str
    negative_label: str
    positive_raw: float
    negative_raw: float
    pct: float


@dataclass
class TypeRecord:
    code: str
    how: Provenance
    name: Optional[str] = None
    description: Optional[str] = None


@dataclass
class TypeEntry:
    code: str
    name: Optional[str] = None
    description: Optional[str] = None


@dataclass
class TypeRule:
    entry: TypeEntry
    dom: Optional[int] = None
    aux: Optional[int] = None


@dataclass
class TypeMap:
    by_pair: Dict[tuple, TypeEntry] = field(default_factory=dict)
    by_dominant: Dict[int, TypeEntry] = field(default_factory=dict)
    rules: List[TypeRule] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.by_pair or self.by_dominant or self.rules)


@dataclass
class TopFunctions:
    dominant: FunctionScore
    auxiliary: FunctionScore
    tertiary: FunctionScore
    inferior: FunctionScore


@dataclass
class ItemDiagnostic:
    id: str
    status: ItemStatus
    side: Optional[Side] = None
    magnitude: float = 0.0
    centered: Optional[float] = None


@dataclass
class Confidence:
    score: float
    label: Literal["high", "medium", "low"]
    details: Dict[str, float] = field(default_factory=dict)


@dataclass
class ScoreResult:
    mode: str
    by_function: List[FunctionScore]
    top: TopFunctions
    type: TypeRecord
    axes: Dict[str, AxisScore]
    confidence: Confidence
    per_item: List[ItemDiagnostic] = field(default_factory=list)
    used_items: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly representation handed to report/render collaborators."""

        return {
            "mode": self.mode,
            "byFunction": [asdict(f) for f in self.by_function],
            "top": {k: asdict(v) for k, v in vars(self.top).items()},
            "type": asdict(self.type),
            "axes": {k: asdict(v) for k, v in self.axes.items()},
            "confidence": asdict(self.confidence),
            "debug": {
                "perItem": [asdict(d) for d in self.per_item],
                "usedItems": self.used_items,
            },
        }
