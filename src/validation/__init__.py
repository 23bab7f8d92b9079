"""Rule-based validation of per-aim statistical plans."""
from validation.rigor_validator import RIGOR_RULES, validate_rigor

__all__ = [
    "RIGOR_RULES",
    "validate_rigor",
]
