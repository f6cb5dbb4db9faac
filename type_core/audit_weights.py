from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Iterable, Mapping, Sequence

from . import config
from .normalize import key_to_index, normalize_func_meta, normalize_weights
from .payload import PayloadLoader, dir_source, file_source
from .question_bank import items_for_mode
from .types import FuncMeta, Item, WeightRow


def audit_weights(
    weights: Mapping[str, WeightRow],
    funcs: Sequence[FuncMeta],
    items: Iterable[Item] | None = None,
) -> dict[str, object]:
    """Coverage of a normalized weight table.

    Counts, per function, how many items carry a non-zero weight on either
    side, and cross-checks item ids against weight rows when a bank is given.
    """

    coverage: dict[str, dict[str, float]] = {
        f.key: {"items": 0, "sum_A": 0.0, "sum_B": 0.0} for f in funcs
    }
    zero_rows: list[str] = []
    for iid, row in weights.items():
        if not any(row.A) and not any(row.B):
            zero_rows.append(iid)
        for f in funcs:
            a, b = row.A[f.idx], row.B[f.idx]
            if a or b:
                coverage[f.key]["items"] += 1
            coverage[f.key]["sum_A"] += a
            coverage[f.key]["sum_B"] += b

    missing_weights: list[str] = []
    orphan_rows: list[str] = []
    if items is not None:
        ids = [it.id for it in items]
        missing_weights = [i for i in ids if i not in weights]
        known = set(ids)
        orphan_rows = sorted(i for i in weights if i not in known)

    warnings: list[str] = []
    for key, data in coverage.items():
        if data["items"] < config.WEIGHTS_MIN_ITEMS_PER_FUNC:
            warnings.append(
                f"{key} touched by {int(data['items'])} items (<{config.WEIGHTS_MIN_ITEMS_PER_FUNC})"
            )
    if zero_rows:
        warnings.append(f"{len(zero_rows)} weight rows are all zero")
    if missing_weights:
        warnings.append(f"{len(missing_weights)} items have no weight row")

    return {
        "coverage": coverage,
        "zero_rows": sorted(zero_rows),
        "missing_weights": missing_weights,
        "orphan_rows": orphan_rows,
        "warnings": warnings,
        "totals": {"rows": len(weights)},
    }


def print_report(summary: dict[str, object]) -> None:
    coverage: dict[str, dict[str, float]] = summary["coverage"]  # type: ignore[assignment]
    print("=== Weight Coverage ===")
    for key, data in coverage.items():
        print(f"  {key:<4} items:{int(data['items']):3d}  A:{data['sum_A']:7.2f}  B:{data['sum_B']:7.2f}")

    warnings: list[str] = summary["warnings"]  # type: ignore[assignment]
    if warnings:
        print("\nWarnings:")
        for msg in warnings:
            print(f" - {msg}")
    else:
        print("\nNo warnings.")
    print("\nTotals:", summary["totals"])


def write_summary(summary: dict[str, object], path: Path) -> str:
    text = json.dumps(summary, indent=2, sort_keys=True)
    path.write_text(text + "\n", encoding="utf-8")
    return text


def _loader_for(target: str) -> PayloadLoader:
    p = Path(target)
    return PayloadLoader(dir_source(p) if p.is_dir() else file_source(p))


def main(argv: list[str] | None = None) -> int:
    argv = list(argv or [])
    mode = argv[0] if argv else "basic"
    target = argv[1] if len(argv) > 1 else config.PAYLOAD_PATH
    if not target:
        print("usage: audit_weights MODE [PAYLOAD_PATH_OR_DIR] [OUT_JSON]")
        return 1
    payload = asyncio.run(_loader_for(target).get())
    funcs = normalize_func_meta((payload.get("mapping") or {}).get("funcs"))
    raw = (payload.get("weights") or {}).get(config.MODE_TO_WEIGHTS.get(mode, ""))
    weights = normalize_weights(raw, key_to_index(funcs))
    items = items_for_mode(mode, payload, config.ITEMS_DIR) or None
    summary = audit_weights(weights, funcs, items)
    print_report(summary)
    if len(argv) > 2:
        write_summary(summary, Path(argv[2]))
    return 2 if summary["warnings"] else 0


if __name__ == "__main__":
    import sys
    raise SystemExit(main(sys.argv[1:]))
