"""Shared enum definitions for the scoring engine.

This module contains canonical definitions for the status and type codes
shared by the document, statistics and claim pipelines.

Usage:
    from models.shared import SectionStatus, ClaimType, ClaimStatus, CheckStatus
"""
from __future__ import annotations

from enum import Enum


class SectionStatus(str, Enum):
    """Presence classification of an extracted section or module.

    - PRESENT: body long enough to count as written
    - INCOMPLETE: heading found with a short body (or only some sources written)
    - MISSING: never matched, or matched with an empty body
    """
    PRESENT = "present"
    INCOMPLETE = "incomplete"
    MISSING = "missing"


class CheckStatus(str, Enum):
    """Outcome of one statistical rigor rule."""
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


class ClaimType(str, Enum):
    """Claim categories, listed in classification priority order."""
    STATISTICAL = "statistical"
    FACTUAL = "factual"
    METHODOLOGICAL = "methodological"


class ClaimStatus(str, Enum):
    """Verification lifecycle of a claim.

    Claims start PENDING and move exactly once to one of the other states.
    """
    PENDING = "pending"
    VERIFIED = "verified"
    PARTIAL = "partial"
    UNVERIFIED = "unverified"


class EndpointType(str, Enum):
    """Endpoint structures recognised by the rigor rules."""
    CONTINUOUS = "continuous"
    BINARY = "binary"
    COUNT = "count"
    TIME_TO_EVENT = "time_to_event"
    REPEATED = "repeated"
    CLUSTERED = "clustered"


# Endpoint structures whose observations are not independent
CORRELATED_ENDPOINT_TYPES = {
    EndpointType.REPEATED.value,
    EndpointType.CLUSTERED.value,
}


class RationaleBlockType(str, Enum):
    """Free-text rationale blocks the adequacy scorer reads."""
    MODEL = "model"
    MULTIPLICITY_MISSINGNESS = "multiplicity_missingness"
    DECISION_REPORTING = "decision_reporting"
