"""Project integrity aggregation.

The IntegrityScore is always recomputed in full from every non-pending
claim of a project; there is no incremental update.
"""
from __future__ import annotations

from typing import Optional

import structlog

from config.rubrics import IntegrityRubric
from models.claims import Claim, IntegrityGrade, IntegrityScore, SectionIntegrity
from models.shared import ClaimStatus
from utils.text import safe_mean

logger = structlog.get_logger(__name__)


def integrity_grade(score: float, rubric: Optional[IntegrityRubric] = None) -> IntegrityGrade:
    """Letter grade for an overall score (A >= 0.9 ... F below 0.6)."""
    rubric = rubric or IntegrityRubric()
    for band in rubric.bands:
        if score >= band.min_score:
            return IntegrityGrade(grade=band.grade, label=band.label, color=band.color)
    fallback = rubric.fallback
    return IntegrityGrade(grade=fallback.grade, label=fallback.label, color=fallback.color)


def compute_section_breakdown(claims: list[Claim]) -> dict[str, SectionIntegrity]:
    """Per-section tallies over all claims, pending ones included."""
    breakdown: dict[str, SectionIntegrity] = {}
    scores: dict[str, list[float]] = {}

    for claim in claims:
        section = breakdown.setdefault(claim.section_type, SectionIntegrity())
        section.total += 1
        if claim.status == ClaimStatus.VERIFIED:
            section.verified += 1
        elif claim.status == ClaimStatus.UNVERIFIED:
            section.unverified += 1
        elif claim.status == ClaimStatus.PARTIAL:
            section.partial += 1
        else:
            section.pending += 1

        if not claim.is_pending and claim.verification_score is not None:
            scores.setdefault(claim.section_type, []).append(claim.verification_score)

    for name, values in scores.items():
        breakdown[name].avg_score = round(safe_mean(values), 4)

    return breakdown


def compute_integrity_score(
    project_id: str,
    claims: list[Claim],
    rubric: Optional[IntegrityRubric] = None,
) -> IntegrityScore:
    """Full recompute of a project's IntegrityScore from its claims."""
    scored = [c for c in claims if not c.is_pending]
    overall = round(safe_mean(c.verification_score or 0.0 for c in scored), 4)

    result = IntegrityScore(
        project_id=project_id,
        overall_score=overall,
        claims_total=len(scored),
        claims_verified=sum(1 for c in scored if c.status == ClaimStatus.VERIFIED),
        claims_unverified=sum(1 for c in scored if c.status == ClaimStatus.UNVERIFIED),
        section_breakdown=compute_section_breakdown(claims),
        grade=integrity_grade(overall, rubric),
    )

    logger.info(
        "integrity_recomputed",
        project_id=project_id,
        overall_score=result.overall_score,
        claims_total=result.claims_total,
        grade=result.grade.grade if result.grade else None,
    )
    return result
