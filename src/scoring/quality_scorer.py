"""Deterministic quality scorer for grant documents.

Implements the module rubric:
- Presence (0 / 2.5 / 5 from module status)
- Clarity (fraction of present source sections x 5)
- Sufficiency (0-5 word-count ladder on the FIRST source section only)
- Module score = mean(presence, clarity, sufficiency), weighted per module
- Normalized = weighted total / (sum of weights x 5)
- Calibrated = 9 - normalized x 8, clamped to 1-9, one decimal (lower is better)
- Structural cap: any critical module below 2.5 floors the calibrated score at 6
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

import structlog

from config.rubrics import QualityRubric
from models.document import Module, Section
from models.shared import SectionStatus
from utils.text import clamp, round_half_up

logger = structlog.get_logger(__name__)


@dataclass
class ModuleScore:
    """Breakdown of one module's rubric score.

    ``raw_score`` is always within [0, 5]; ``weighted_score`` multiplies it
    by the module weight.
    """
    module_number: int
    presence: float = 0.0
    clarity: float = 0.0
    sufficiency: float = 0.0
    weight: float = 1.0
    word_count: int = 0

    @property
    def raw_score(self) -> float:
        return (self.presence + self.clarity + self.sufficiency) / 3

    @property
    def weighted_score(self) -> float:
        return self.raw_score * self.weight

    def to_dict(self) -> dict[str, Any]:
        return {
            "module_number": self.module_number,
            "presence": round_half_up(self.presence, 1),
            "clarity": round_half_up(self.clarity, 1),
            "sufficiency": round_half_up(self.sufficiency, 1),
            "raw_score": round_half_up(self.raw_score, 1),
            "weighted_score": round_half_up(self.weighted_score, 1),
            "word_count": self.word_count,
        }


@dataclass
class QualityResult:
    """Calibrated 1-9 quality estimate with its probability band."""
    weighted_total: float
    normalized_score: float
    calibrated_score: float
    probability_band: str
    probability_range: str
    structural_cap_applied: bool = False
    critical_module_scores: dict[str, float] = field(default_factory=dict)
    model_version: str = "deterministic_v1"

    def to_dict(self) -> dict[str, Any]:
        return {
            "weighted_total": round(self.weighted_total, 2),
            "normalized_score": round(self.normalized_score, 2),
            "calibrated_score": self.calibrated_score,
            "probability_band": self.probability_band,
            "probability_range": self.probability_range,
            "structural_cap_applied": self.structural_cap_applied,
            "critical_module_scores": {
                k: round_half_up(v, 1) for k, v in self.critical_module_scores.items()
            },
            "model_version": self.model_version,
        }


def _compute_presence(module: Module, rubric: QualityRubric) -> float:
    return float(rubric.presence_points.get(module.status.value, 0.0))


def _compute_clarity(module: Module) -> float:
    """Fraction of present sources x 5; a module without sources scores 0."""
    present = sum(1 for s in module.source_sections if s.status == SectionStatus.PRESENT)
    total = max(len(module.source_sections), 1)
    return (present / total) * 5


def _compute_sufficiency(word_count: int, rubric: QualityRubric) -> float:
    for step in rubric.sufficiency_ladder:
        if word_count > step.above_words:
            return float(step.points)
    return 0.0


def _first_source_word_count(module: Module, sections: dict[str, Section]) -> int:
    # Only the first source counts; sources often overlap across modules.
    if not module.source_sections:
        return 0
    section = sections.get(module.source_sections[0].section)
    return section.word_count if section else 0


def score_module(module: Module, sections: dict[str, Section], rubric: Optional[QualityRubric] = None) -> ModuleScore:
    """Compute presence/clarity/sufficiency for one module."""
    rubric = rubric or QualityRubric()
    words = _first_source_word_count(module, sections)
    return ModuleScore(
        module_number=module.number,
        presence=_compute_presence(module, rubric),
        clarity=_compute_clarity(module),
        sufficiency=_compute_sufficiency(words, rubric),
        weight=module.weight,
        word_count=words,
    )


def calibrate(normalized_score: float, rubric: QualityRubric) -> float:
    """Map a 0-1 normalized score onto the 1-9 scale (lower is better)."""
    span = rubric.max_score - rubric.min_score
    return clamp(rubric.max_score - normalized_score * span, rubric.min_score, rubric.max_score)


def classify_probability_band(calibrated_score: float, rubric: Optional[QualityRubric] = None) -> tuple[str, str]:
    """Return (band, score_range) for a calibrated score."""
    rubric = rubric or QualityRubric()
    for band in rubric.probability_bands:
        if calibrated_score <= band.max_score:
            return band.band, band.score_range
    return rubric.fallback_band.band, rubric.fallback_band.score_range


def score_quality(
    modules: list[Module],
    sections: dict[str, Section],
    rubric: Optional[QualityRubric] = None,
) -> tuple[list[ModuleScore], QualityResult]:
    """Score every module and derive the calibrated QualityResult."""
    rubric = rubric or QualityRubric()

    module_scores = [score_module(m, sections, rubric) for m in modules]
    weighted_total = sum(ms.weighted_score for ms in module_scores)

    max_possible = rubric.max_possible_weighted or 1.0
    normalized = clamp(weighted_total / max_possible, 0.0, 1.0)
    calibrated = calibrate(normalized, rubric)

    critical_scores = {
        m.key: ms.raw_score for m, ms in zip(modules, module_scores) if m.critical
    }
    cap_applied = any(
        score < rubric.structural_cap_threshold for score in critical_scores.values()
    )
    if cap_applied:
        calibrated = max(calibrated, rubric.structural_cap_floor)

    calibrated = round_half_up(calibrated, 1)
    band, score_range = classify_probability_band(calibrated, rubric)

    result = QualityResult(
        weighted_total=weighted_total,
        normalized_score=normalized,
        calibrated_score=calibrated,
        probability_band=band,
        probability_range=score_range,
        structural_cap_applied=cap_applied,
        critical_module_scores=critical_scores,
        model_version=rubric.model_version,
    )

    logger.info(
        "quality_scored",
        weighted_total=round(weighted_total, 3),
        normalized=round(normalized, 3),
        calibrated=calibrated,
        structural_cap_applied=cap_applied,
    )
    return module_scores, result
