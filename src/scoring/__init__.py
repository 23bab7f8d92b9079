"""Scoring modules for the grant-rigor engine.

This package contains:
- quality_scorer.py: Module rubric and calibrated 1-9 quality estimate
- adequacy_scorer.py: Six-category statistical adequacy score
- claim_verifier.py: Heuristic evidence scoring per claim
- integrity.py: Project integrity aggregation and letter grades
- criteria_scorer.py: Review-criterion scores and recommendations
"""
from scoring.quality_scorer import (
    ModuleScore,
    QualityResult,
    classify_probability_band,
    score_module,
    score_quality,
)
from scoring.adequacy_scorer import (
    AdequacyScore,
    CategoryScore,
    build_explanation,
    score_adequacy,
)
from scoring.claim_verifier import (
    VerificationResult,
    apply_verification,
    classify_verification,
    verify_claim,
)
from scoring.integrity import (
    compute_integrity_score,
    compute_section_breakdown,
    integrity_grade,
)
from scoring.criteria_scorer import (
    ReviewCriteriaResult,
    score_review_criteria,
)

__all__ = [
    # Quality
    "ModuleScore",
    "QualityResult",
    "classify_probability_band",
    "score_module",
    "score_quality",
    # Adequacy
    "AdequacyScore",
    "CategoryScore",
    "build_explanation",
    "score_adequacy",
    # Claims
    "VerificationResult",
    "apply_verification",
    "classify_verification",
    "verify_claim",
    # Integrity
    "compute_integrity_score",
    "compute_section_breakdown",
    "integrity_grade",
    # Review criteria
    "ReviewCriteriaResult",
    "score_review_criteria",
]
