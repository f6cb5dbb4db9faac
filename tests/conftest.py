from __future__ import annotations

import pytest

from type_core.config import DEFAULT_FUNCS
from type_core.engine import Scorer
from type_core.payload import PayloadLoader, static_source

KEYS = [k for k, _ in DEFAULT_FUNCS]


def _vec(key: str | None) -> list[float]:
    out = [0.0] * 8
    if key is not None:
        out[KEYS.index(key)] = 1.0
    return out


def build_weight_rows(pairs: list[tuple[str, str]], *, prefix: str = "q") -> list[dict]:
    """One row per ``(a_key, b_key)`` pair, weight 1 on a single function per side."""

    return [
        {"id": f"{prefix}{i + 1}", "A": _vec(a), "B": _vec(b)}
        for i, (a, b) in enumerate(pairs)
    ]


def build_items(n: int, *, prefix: str = "q") -> list[dict]:
    return [{"id": f"{prefix}{i + 1}", "text": f"Statement {i + 1}"} for i in range(n)]


# each function is favoured by two items, once on each side
BASIC_PAIRS: list[tuple[str, str]] = [
    ("Ni", "Se"), ("Ne", "Si"), ("Ti", "Fe"), ("Te", "Fi"),
    ("Se", "Ni"), ("Si", "Ne"), ("Fe", "Ti"), ("Fi", "Te"),
]


def build_synthetic_payload(
    *,
    with_types: bool = True,
    with_items: bool = True,
    adv_items: int = 4,
) -> dict:
    """Deterministic payload shaped like the decoded delivery blob."""

    weights = {
        "weights_32": build_weight_rows(BASIC_PAIRS),
        "weights_adv_A": build_weight_rows(BASIC_PAIRS[:adv_items], prefix="a"),
        "weights_adv_B": build_weight_rows(BASIC_PAIRS[:adv_items], prefix="a"),
        "weights_adv_C": build_weight_rows(BASIC_PAIRS[:adv_items], prefix="a"),
    }
    mapping: dict = {"funcs": {"list": [{"key": k, "name": n} for k, n in DEFAULT_FUNCS]}}
    if with_types:
        mapping["types"] = {
            "byPair": {"Ni-Te": {"code": "INTJ", "name": "Architect"}, "Ni-Fe": "INFJ"},
            "byDominant": {"Se": {"code": "ESTP"}},
            "rules": [{"if": {"dom": "Fi"}, "code": "ISFP"}],
        }
    payload: dict = {"version": 1, "ts": "2024-01-01T00:00:00Z", "weights": weights, "mapping": mapping}
    if with_items:
        payload["items"] = {
            "basic": build_items(len(BASIC_PAIRS)),
            "advA": build_items(adv_items, prefix="a"),
            "advB": build_items(adv_items, prefix="a"),
            "advC": build_items(adv_items, prefix="a"),
        }
    return payload


@pytest.fixture
def synthetic_payload() -> dict:
    return build_synthetic_payload()


@pytest.fixture
def scorer(synthetic_payload) -> Scorer:
    return Scorer(PayloadLoader(static_source(synthetic_payload)))
