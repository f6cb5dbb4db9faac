from __future__ import annotations
import os, json, pathlib


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def _env_str(name: str, default: str | None) -> str | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


N_FUNCS: int = 8
EPS: float = 1e-9

DEFAULT_FUNCS: tuple[tuple[str, str], ...] = (
    ("Ni", "Introverted Intuition (Ni)"),
    ("Fe", "Extraverted Feeling (Fe)"),
    ("Ti", "Introverted Thinking (Ti)"),
    ("Se", "Extraverted Sensing (Se)"),
    ("Ne", "Extraverted Intuition (Ne)"),
    ("Fi", "Introverted Feeling (Fi)"),
    ("Te", "Extraverted Thinking (Te)"),
    ("Si", "Introverted Sensing (Si)"),
)

MODE_TO_WEIGHTS: dict[str, str] = {
    "basic": "weights_32",
    "advA": "weights_adv_A",
    "advB": "weights_adv_B",
    "advC": "weights_adv_C",
}
MODE_TO_ITEMS: dict[str, str] = {
    "basic": "items_public_32.json",
    "advA": "items_public_adv_A.json",
    "advB": "items_public_adv_B.json",
    "advC": "items_public_adv_C.json",
}
ADVANCED_MODES: tuple[str, ...] = ("advA", "advB", "advC")

# fixed: ties round toward the positive letter
HEURISTIC_THRESHOLD: float = 0.5
AXIS_EMPTY_PCT: float = 0.5

# one_to_five | zero_to_four | centered | auto
DEFAULT_SCALE: str = "auto"

CONF_HIGH: float = 0.60
CONF_MEDIUM: float = 0.35
CONF_GAP1_WEIGHT: float = 0.7
CONF_GAP2_WEIGHT: float = 0.3

WEIGHTS_MIN_ITEMS_PER_FUNC: int = 3
AUDIT_EXPORT_ENABLED: bool = True

PAYLOAD_PATH: str | None = None
ITEMS_DIR: str | None = None

DEBUG_TRACE: bool = False
TRACE_FIELDS: tuple[str, ...] = (
    "item_id",
    "status",
    "side",
    "magnitude",
    "used",
)
# // env overrides for staging/ops; defaults remain conservative.
DEFAULT_SCALE = _env_str("DEFAULT_SCALE", DEFAULT_SCALE) or "auto"
WEIGHTS_MIN_ITEMS_PER_FUNC = _env_int("WEIGHTS_MIN_ITEMS_PER_FUNC", WEIGHTS_MIN_ITEMS_PER_FUNC)
AUDIT_EXPORT_ENABLED = _env_bool("AUDIT_EXPORT_ENABLED", AUDIT_EXPORT_ENABLED)
PAYLOAD_PATH = _env_str("PAYLOAD_PATH", PAYLOAD_PATH)
ITEMS_DIR = _env_str("ITEMS_DIR", ITEMS_DIR)
DEBUG_TRACE = _env_bool("DEBUG_TRACE", False)


def load_config() -> dict:
    cfg = {}
    p = pathlib.Path("config.json")
    if p.exists():
        try: cfg = json.loads(p.read_text(encoding="utf-8"))
        except ValueError: cfg = {}
    e = os.environ
    for k in ("PAYLOAD_PATH", "ITEMS_DIR", "DEFAULT_SCALE"):
        if e.get(k): cfg[k] = e.get(k)
    if e.get("SEED"): cfg["SEED"] = e.get("SEED")
    cfg.setdefault("PAYLOAD_PATH", PAYLOAD_PATH)
    cfg.setdefault("ITEMS_DIR", ITEMS_DIR)
    cfg.setdefault("DEFAULT_SCALE", DEFAULT_SCALE)
    return cfg
