"""Claim, reference and integrity-score models for the evidence pipeline."""
from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from models.shared import ClaimStatus, ClaimType


class Claim(BaseModel):
    """An atomic extracted assertion subject to independent verification."""
    id: str
    project_id: Optional[str] = None
    section_type: str
    text: str
    claim_type: ClaimType
    confidence: float = Field(ge=0.0, le=1.0)
    status: ClaimStatus = ClaimStatus.PENDING
    verification_score: Optional[float] = None
    notes: str = ""
    context: str = ""
    verified_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status == ClaimStatus.PENDING

    @staticmethod
    def generate_claim_id(project_id: Optional[str], section_type: str, position: int, text: str) -> str:
        """Deterministic per-project id so re-extracting identical text yields identical claims."""
        raw = f"{project_id or ''}:{section_type}:{position}:{text}"
        return f"clm-{hashlib.sha256(raw.encode('utf-8')).hexdigest()[:12]}"


class Reference(BaseModel):
    """Evidence attached to a verified claim. Append-only."""
    claim_id: str
    project_id: Optional[str] = None
    text: str
    source_type: str
    relevance_score: float
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class IntegrityGrade(BaseModel):
    """Letter grade with presentation metadata."""
    grade: str
    label: str
    color: str


class SectionIntegrity(BaseModel):
    """Per-section claim tallies."""
    total: int = 0
    verified: int = 0
    unverified: int = 0
    partial: int = 0
    pending: int = 0
    avg_score: float = 0.0


class IntegrityScore(BaseModel):
    """Project-level aggregate of claim verification results."""
    project_id: str
    overall_score: float = 0.0
    claims_total: int = 0
    claims_verified: int = 0
    claims_unverified: int = 0
    section_breakdown: dict[str, SectionIntegrity] = Field(default_factory=dict)
    grade: Optional[IntegrityGrade] = None
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
