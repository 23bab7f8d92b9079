"""Statistical adequacy scorer for a single aim.

Six weighted categories (ceilings from AdequacyRubric.weights):
- Experimental unit & replication: 25
- Endpoint clarity: 20
- Model appropriateness: 20
- Power / detectable effect: 15
- Multiplicity & missingness: 10
- Decision & reporting rules: 10

Each category's raw points are clamped to its ceiling before summing, so no
category can spill into another's budget.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Optional

import structlog

from config.rubrics import AdequacyRubric
from models.shared import CORRELATED_ENDPOINT_TYPES, RationaleBlockType
from models.stats import RationaleBlock, StatsIntake
from utils.text import clamp, round_half_up

logger = structlog.get_logger(__name__)

CORRELATED_MODEL_PATTERN = re.compile(r"mixed|gee|multilevel|hierarchical", re.IGNORECASE)
MODEL_DIAGNOSTICS_PATTERN = re.compile(r"assumption|diagnostic|residual", re.IGNORECASE)
MULTIPLICITY_PATTERN = re.compile(r"bonferroni|fdr|holm|multiplicity|adjustment", re.IGNORECASE)
MISSINGNESS_PATTERN = re.compile(r"missing|imputation|dropout|attrition", re.IGNORECASE)
ROBUSTNESS_PATTERN = re.compile(r"outlier|robust|sensitivity", re.IGNORECASE)
DECISION_PATTERN = re.compile(r"success|criterion|threshold|conclude", re.IGNORECASE)
REPORTING_PATTERN = re.compile(r"confidence interval|effect size|report", re.IGNORECASE)

CLOSING_STATEMENT = (
    "This score reflects endpoint clarity, analysis model appropriateness, power planning, "
    "and data handling provisions. It does not predict review outcomes."
)


@dataclass
class CategoryScore:
    """Raw and clamped points for one rubric category."""
    key: str
    raw_points: float
    ceiling: float

    @property
    def points(self) -> float:
        return clamp(self.raw_points, 0.0, self.ceiling)

    def to_dict(self) -> dict[str, Any]:
        return {
            "raw_points": self.raw_points,
            "ceiling": self.ceiling,
            "points": self.points,
        }


@dataclass
class AdequacyScore:
    """0-100 adequacy score with a plain-language explanation."""
    value: int
    explanation: str
    categories: dict[str, CategoryScore] = field(default_factory=dict)
    fragments: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "adequacy_score": self.value,
            "explanation": self.explanation,
            "categories": {k: v.to_dict() for k, v in self.categories.items()},
        }


def _find_block(blocks: list[RationaleBlock], block_type: RationaleBlockType) -> str:
    """Content of the first block of ``block_type`` (empty when absent)."""
    for block in blocks:
        if block.block_type == block_type.value:
            return block.content_md or ""
    return ""


def _score_unit_replication(intake: StatsIntake, notes: list[str]) -> float:
    points = 0.0
    if (intake.experimental_unit or "").strip():
        points += 10
        notes.append("Experimental unit defined.")
    else:
        notes.append("Missing: experimental unit not specified.")

    reps = intake.replicates
    if reps is not None and (reps.biological or reps.technical):
        points += 10
        notes.append("Replication structure specified.")
    if reps is not None and reps.pseudo_addressed:
        points += 5
    return points


def _score_endpoint_clarity(intake: StatsIntake, notes: list[str]) -> float:
    points = 0.0
    if (intake.primary_endpoint_text or "").strip():
        points += 10
        notes.append("Primary endpoint defined.")
    else:
        notes.append("Missing: primary endpoint not specified.")
    if (intake.timepoint_text or "").strip():
        points += 5
    if intake.secondary_endpoints:
        points += 5
    return points


def _score_model(intake: StatsIntake, model_text: str, notes: list[str]) -> float:
    if not model_text.strip():
        return 0.0
    points = 10.0
    if intake.endpoint_type in CORRELATED_ENDPOINT_TYPES:
        # Rigor credit only when the model accounts for correlated observations.
        if CORRELATED_MODEL_PATTERN.search(model_text):
            points += 5
            notes.append("Model handles clustered/repeated structure.")
    else:
        points += 5
    if MODEL_DIAGNOSTICS_PATTERN.search(model_text):
        points += 5
    return points


def _score_power(intake: StatsIntake, notes: list[str]) -> float:
    points = 0.0
    if (intake.effect_size or "").strip() or (intake.effect_size_scale or "").strip():
        points += 8
        notes.append("Effect size specified.")
    if (intake.variance_source or "").strip() and intake.variance_source != "unknown":
        points += 7
        notes.append("Variance source documented.")
    return points


def _score_multiplicity(text: str) -> float:
    if not text.strip():
        return 0.0
    points = 0.0
    if MULTIPLICITY_PATTERN.search(text):
        points += 4
    if MISSINGNESS_PATTERN.search(text):
        points += 3
    if ROBUSTNESS_PATTERN.search(text):
        points += 3
    return points


def _score_decision(text: str) -> float:
    if not text.strip():
        return 0.0
    points = 0.0
    if DECISION_PATTERN.search(text):
        points += 5
    if REPORTING_PATTERN.search(text):
        points += 5
    return points


def build_explanation(score: int, fragments: list[str], rubric: Optional[AdequacyRubric] = None) -> str:
    """Band sentence + first fragments + fixed closing disclaimer."""
    rubric = rubric or AdequacyRubric()
    band = rubric.fallback_explanation
    for candidate in rubric.explanation_bands:
        if score >= candidate.min_score:
            band = candidate.text
            break
    summary = " ".join(fragments[: rubric.max_fragments])
    return " ".join(part for part in (band, summary, CLOSING_STATEMENT) if part)


def score_adequacy(
    intake: StatsIntake,
    rationale_blocks: Optional[list[RationaleBlock]] = None,
    rubric: Optional[AdequacyRubric] = None,
) -> AdequacyScore:
    """Score one aim's statistical plan on the six-category rubric."""
    rubric = rubric or AdequacyRubric()
    blocks = rationale_blocks or []
    notes: list[str] = []

    raw = {
        "experimental_unit_replication": _score_unit_replication(intake, notes),
        "endpoint_clarity": _score_endpoint_clarity(intake, notes),
        "model_appropriateness": _score_model(
            intake, _find_block(blocks, RationaleBlockType.MODEL), notes
        ),
        "power_detectable": _score_power(intake, notes),
        "multiplicity_missingness": _score_multiplicity(
            _find_block(blocks, RationaleBlockType.MULTIPLICITY_MISSINGNESS)
        ),
        "decision_reporting": _score_decision(
            _find_block(blocks, RationaleBlockType.DECISION_REPORTING)
        ),
    }

    categories = {
        key: CategoryScore(key=key, raw_points=points, ceiling=float(rubric.weights.get(key, 0)))
        for key, points in raw.items()
    }
    total = sum(c.points for c in categories.values())
    value = int(clamp(round_half_up(total), 0, 100))

    logger.info(
        "adequacy_scored",
        aim_id=intake.aim_id,
        score=value,
        categories={k: c.points for k, c in categories.items()},
    )
    return AdequacyScore(
        value=value,
        explanation=build_explanation(value, notes, rubric),
        categories=categories,
        fragments=notes,
    )
