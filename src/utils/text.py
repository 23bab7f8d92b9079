from __future__ import annotations

import math
import re
from typing import Iterable


def normalize_text(text: str) -> str:
    lines = [ln.rstrip() for ln in text.replace("\r\n", "\n").replace("\r", "\n").splitlines()]
    normalized = "\n".join(lines)
    normalized = re.sub(r"\n{3,}", "\n\n", normalized)
    return normalized.strip("\n")


def word_count(text: str) -> int:
    return len(text.split())


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round halves away from zero for positive values (0.25 -> 0.3, 12.5 -> 13)."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def safe_mean(values: Iterable[float]) -> float:
    items = list(values)
    return sum(items) / max(len(items), 1)
