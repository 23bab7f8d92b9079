"""Claim extractor: atomize section prose into verifiable claims.

Sentence-like units are tested against three pattern families in strict
priority order (statistical, factual, methodological). The first family
that matches decides the claim type; units matching none are not claims.
"""
from __future__ import annotations

import re
from typing import Optional

import structlog

from config.rubrics import ClaimRubric
from models.claims import Claim
from models.shared import ClaimType

logger = structlog.get_logger(__name__)

SENTENCE_SPLIT = re.compile(r"[.!?]+")

STATISTICAL_PATTERNS = [
    re.compile(r"\d+(\.\d+)?%"),
    re.compile(r"p\s*[<>=]\s*0?\.\d+", re.IGNORECASE),
    re.compile(r"\d+\s*(million|billion|thousand)", re.IGNORECASE),
    re.compile(r"significantly\s+(higher|lower|greater|more|less)", re.IGNORECASE),
    re.compile(r"\d+\s*-\s*fold", re.IGNORECASE),
]

FACTUAL_PATTERNS = [
    re.compile(r"studies?\s+(show|demonstrate|indicate|reveal|found)", re.IGNORECASE),
    re.compile(r"research\s+(has\s+)?(shown|demonstrated|established)", re.IGNORECASE),
    re.compile(r"evidence\s+(suggests|indicates|shows)", re.IGNORECASE),
    re.compile(r"according\s+to", re.IGNORECASE),
    re.compile(r"\d+%\s+of", re.IGNORECASE),
    re.compile(r"has\s+been\s+(shown|demonstrated|proven)", re.IGNORECASE),
]

METHODOLOGICAL_PATTERNS = [
    re.compile(r"we\s+(will\s+)?(use|employ|apply|implement)", re.IGNORECASE),
    re.compile(r"method(ology)?\s+(involves?|includes?|consists?)", re.IGNORECASE),
    re.compile(r"approach\s+(is|will\s+be|involves?)", re.IGNORECASE),
    re.compile(r"protocol\s+(requires?|specifies?)", re.IGNORECASE),
]

# Priority order matters: a unit with both statistical and factual cues is statistical.
CLAIM_PATTERN_FAMILIES: list[tuple[ClaimType, list[re.Pattern[str]]]] = [
    (ClaimType.STATISTICAL, STATISTICAL_PATTERNS),
    (ClaimType.FACTUAL, FACTUAL_PATTERNS),
    (ClaimType.METHODOLOGICAL, METHODOLOGICAL_PATTERNS),
]


def split_units(text: str, min_chars: int = 20) -> list[str]:
    """Split on sentence punctuation and drop short fragments."""
    units = []
    for fragment in SENTENCE_SPLIT.split(text):
        trimmed = fragment.strip()
        if len(trimmed) >= min_chars:
            units.append(trimmed)
    return units


def classify_unit(unit: str) -> Optional[ClaimType]:
    """Return the first matching claim family, or None."""
    for claim_type, patterns in CLAIM_PATTERN_FAMILIES:
        if any(p.search(unit) for p in patterns):
            return claim_type
    return None


def extract_claims_from_text(
    text: str,
    section_type: str,
    project_id: Optional[str] = None,
    rubric: Optional[ClaimRubric] = None,
) -> list[Claim]:
    """Extract pending claims from one section's prose, in text order."""
    rubric = rubric or ClaimRubric()
    claims: list[Claim] = []

    for position, unit in enumerate(split_units(text, rubric.min_unit_chars)):
        claim_type = classify_unit(unit)
        if claim_type is None:
            continue
        claims.append(
            Claim(
                id=Claim.generate_claim_id(project_id, section_type, position, unit),
                project_id=project_id,
                section_type=section_type,
                text=unit,
                claim_type=claim_type,
                confidence=rubric.confidences.get(claim_type.value, 0.5),
                context=section_type,
            )
        )

    logger.info(
        "claims_extracted",
        section_type=section_type,
        claims=len(claims),
        by_type={t.value: sum(1 for c in claims if c.claim_type == t) for t in ClaimType},
    )
    return claims
