"""Heuristic evidentiary scoring for a single claim.

Score transform:
- base 0.5
- +0.15 well-formed p-value (statistical claims only)
- +0.10 percentage statistic (statistical claims only)
- +0.20 inline citation ("(2020)" or "et al."), recorded as one reference
- -0.15 vague attribution ("many studies", "some research", "it is known")
- clamped to [0, 1]; >= 0.7 verified, < 0.4 unverified, else partial
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from config.rubrics import VerificationRubric
from models.claims import Claim, Reference
from models.shared import ClaimStatus, ClaimType
from utils.error_handler import InputError
from utils.text import clamp

P_VALUE_PATTERN = re.compile(r"p\s*[<>=]\s*0?\.\d+", re.IGNORECASE)
PERCENTAGE_PATTERN = re.compile(r"\d+%")
CITATION_YEAR_PATTERN = re.compile(r"\(\d{4}\)")
ET_AL_PATTERN = re.compile(r"et\s+al\.?", re.IGNORECASE)
VAGUE_PATTERN = re.compile(r"many\s+studies|some\s+research|it\s+is\s+known", re.IGNORECASE)


@dataclass
class VerificationResult:
    """Outcome of verifying one claim."""
    claim_id: str
    status: ClaimStatus
    score: float
    notes: str
    references: list[Reference] = field(default_factory=list)

    def to_dict(self, claim_text: str = "") -> dict[str, Any]:
        out: dict[str, Any] = {
            "claim_id": self.claim_id,
            "status": self.status.value,
            "score": round(self.score, 3),
            "notes": self.notes,
            "references_found": len(self.references),
        }
        if claim_text:
            out["claim_text"] = claim_text[:100] + ("..." if len(claim_text) > 100 else "")
        return out


def classify_verification(score: float, rubric: Optional[VerificationRubric] = None) -> ClaimStatus:
    rubric = rubric or VerificationRubric()
    if score >= rubric.verified_at_or_above:
        return ClaimStatus.VERIFIED
    if score < rubric.unverified_below:
        return ClaimStatus.UNVERIFIED
    return ClaimStatus.PARTIAL


def verify_claim(claim: Claim, rubric: Optional[VerificationRubric] = None) -> VerificationResult:
    """Pure function of one claim; does not mutate it."""
    rubric = rubric or VerificationRubric()
    text = claim.text
    score = rubric.base_score
    notes: list[str] = []
    references: list[Reference] = []

    if claim.claim_type == ClaimType.STATISTICAL:
        if P_VALUE_PATTERN.search(text):
            score += rubric.p_value_bonus
            notes.append("Contains properly formatted p-value")
        if PERCENTAGE_PATTERN.search(text):
            score += rubric.percentage_bonus
            notes.append("Contains percentage statistic")

    if CITATION_YEAR_PATTERN.search(text) or ET_AL_PATTERN.search(text):
        score += rubric.citation_bonus
        notes.append("Contains citation reference")
        references.append(
            Reference(
                claim_id=claim.id,
                project_id=claim.project_id,
                text="Inline citation detected",
                source_type="citation",
                relevance_score=rubric.citation_relevance,
            )
        )

    if VAGUE_PATTERN.search(text):
        score -= rubric.vague_penalty
        notes.append("Contains vague reference language")

    # Accumulated float steps (0.5 + 0.2) must land on the thresholds exactly.
    score = round(clamp(score, 0.0, 1.0), 6)
    return VerificationResult(
        claim_id=claim.id,
        status=classify_verification(score, rubric),
        score=score,
        notes="; ".join(notes) or "Standard verification applied",
        references=references,
    )


def apply_verification(claim: Claim, result: VerificationResult) -> Claim:
    """Return the claim moved out of pending. Verified claims never change again."""
    if not claim.is_pending:
        raise InputError(
            "Claim already verified",
            claim_id=claim.id,
            project_id=claim.project_id,
        )
    return claim.model_copy(
        update={
            "status": result.status,
            "verification_score": result.score,
            "notes": result.notes,
            "verified_at": datetime.now(timezone.utc),
        }
    )
