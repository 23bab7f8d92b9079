"""Record models shared by the scoring pipelines."""
from models.shared import (
    CheckStatus,
    ClaimStatus,
    ClaimType,
    EndpointType,
    RationaleBlockType,
    SectionStatus,
)
from models.document import Module, ModuleSource, Section
from models.stats import Aim, RationaleBlock, ReplicateInfo, RigorCheck, StatsIntake
from models.claims import (
    Claim,
    IntegrityGrade,
    IntegrityScore,
    Reference,
    SectionIntegrity,
)

__all__ = [
    # Enums
    "CheckStatus",
    "ClaimStatus",
    "ClaimType",
    "EndpointType",
    "RationaleBlockType",
    "SectionStatus",
    # Document
    "Module",
    "ModuleSource",
    "Section",
    # Statistics
    "Aim",
    "RationaleBlock",
    "ReplicateInfo",
    "RigorCheck",
    "StatsIntake",
    # Claims
    "Claim",
    "IntegrityGrade",
    "IntegrityScore",
    "Reference",
    "SectionIntegrity",
]
