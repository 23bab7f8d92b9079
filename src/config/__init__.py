"""Rubric configuration for the scoring engine."""
from config.loader import ConfigLoader, get_config
from config.rubrics import (
    AdequacyRubric,
    ClaimRubric,
    IntegrityRubric,
    QualityRubric,
    ScoringConfig,
    SectionRules,
    VerificationRubric,
    get_scoring_config,
)

__all__ = [
    "ConfigLoader",
    "get_config",
    "AdequacyRubric",
    "ClaimRubric",
    "IntegrityRubric",
    "QualityRubric",
    "ScoringConfig",
    "SectionRules",
    "VerificationRubric",
    "get_scoring_config",
]
