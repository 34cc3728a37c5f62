"""Plain-text and JSON rendering of lab results."""
from __future__ import annotations
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any
import math

from .enums import Verdict
from .models import LabError


# ANSI color codes
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"


VERDICT_COLORS = {
    Verdict.OK: Colors.GREEN,
    Verdict.WARN: Colors.YELLOW,
    Verdict.FAIL: Colors.RED,
}


def fmt_num(value: float, digits: int = 2) -> str:
    """Round for display; infinity shows as ∞."""
    if value is None:
        return "—"
    if math.isinf(value):
        return "∞" if value > 0 else "-∞"
    return f"{round(value, digits):g}"


def fmt_pct(value: float) -> str:
    return f"{round(value * 100)}%"


def badge(level: Verdict, text: str, color: bool = True) -> str:
    label = f"[{level.value.upper()}] {text}"
    if not color:
        return label
    return f"{VERDICT_COLORS[level]}{label}{Colors.RESET}"


def to_jsonable(value: Any) -> Any:
    """Convert result dataclasses and enums to plain JSON data. Non-finite floats become None."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return {k: to_jsonable(v) for k, v in asdict(value).items()}
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def render_table(headers: list[str], rows: list[list[str]]) -> str:
    """Left-aligned fixed-width table."""
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))
    lines = ["  ".join(h.ljust(w) for h, w in zip(headers, widths))]
    lines.append("  ".join("-" * w for w in widths))
    for row in rows:
        lines.append("  ".join(c.ljust(w) for c, w in zip(row, widths)))
    return "\n".join(lines)


def render_error(error: LabError, color: bool = True) -> str:
    return badge(Verdict.FAIL, error.message, color)
