
from __future__ import annotations
import asyncio, os, sys
from pathlib import Path
from type_core.config import load_config
from type_core.engine import Scorer
from type_core.payload import PayloadLoader, dir_source, file_source
from type_core.question_bank import items_for_mode
from type_core.quiz import QuizSession, score_session
SCALE_HINT = "[1=strongly disagree, 3=neutral, 5=strongly agree]"
def ask(prompt: str) -> str:
    while True:
        v = input(f"(1-5) {prompt}  {SCALE_HINT} ").strip()
        if v in {"1", "2", "3", "4", "5"}: return v
        print("Enter a number from 1 to 5.")
def print_result(mode, res):
    print(f"\n== {mode}: {res.type.code} (via {res.type.how}), confidence {res.confidence.label}")
    for f in sorted(res.by_function, key=lambda s: (-s.pct, s.idx)):
        print(f"  {f.key:<3} {f.pct:6.1f}%  {'#' * int(f.pct // 5)}")
    for name, ax in res.axes.items():
        print(f"  {name}: {ax.positive_label} {ax.pct * 100:5.1f}% / {ax.negative_label} {(1 - ax.pct) * 100:5.1f}%")
    print(f"  items used: {res.used_items}")
async def run(mode: str) -> int:
    cfg = load_config(); target = cfg.get("PAYLOAD_PATH")
    if not target:
        print("Set PAYLOAD_PATH to a payload JSON file or a weights/mapping directory."); return 1
    p = Path(target)
    loader = PayloadLoader(dir_source(p) if p.is_dir() else file_source(p))
    scorer = Scorer(loader); await scorer.init(mode)
    items = items_for_mode(mode, await loader.get(), cfg.get("ITEMS_DIR"))
    if not items:
        print(f"No item bank for mode {mode}; set ITEMS_DIR."); return 1
    print(f"Cognitive function self-test ({mode}, {len(items)} items)")
    session = QuizSession(items, mode=mode, seed=cfg.get("SEED"), answer_scale="one_to_five")
    while not session.is_complete():
        item = session.current(); print(f"\n[{session.step + 1}/{session.total}]")
        session.answer(int(ask(item.text)))
    session.finish()
    for part_mode, res in (await score_session(scorer, session)).items(): print_result(part_mode, res)
    return 0
def main():
    mode = sys.argv[1] if len(sys.argv) > 1 else os.getenv("MODE", "basic")
    raise SystemExit(asyncio.run(run(mode)))
if __name__ == "__main__": main()
