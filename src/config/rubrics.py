"""Typed rubric configuration.

Every constant table the scorers consult is a pydantic model here. The
defaults reproduce the calibrated rubric; ``get_scoring_config()`` overlays
whatever the YAML config provides so deployments and tests can probe
boundary values without touching scorer code.
"""
from __future__ import annotations

import re
from typing import Any, Pattern

from pydantic import BaseModel, Field, field_validator, model_validator

from config.loader import (
    get_adequacy_config,
    get_claims_config,
    get_integrity_config,
    get_quality_config,
    get_sections_config,
    get_verification_config,
)


class SectionRule(BaseModel):
    """Heading patterns that open one named section."""
    name: str
    patterns: list[str]

    def compiled(self) -> list[Pattern[str]]:
        return [re.compile(p, re.IGNORECASE) for p in self.patterns]


DEFAULT_SECTION_RULES: list[SectionRule] = [
    SectionRule(name="title", patterns=[r"^title[:\s]", r"project\s*title"]),
    SectionRule(name="abstract", patterns=[r"^abstract", r"project\s*summary", r"summary"]),
    SectionRule(name="specific_aims", patterns=[r"specific\s*aims?", r"^aims?[:\s]"]),
    SectionRule(name="significance", patterns=[r"significance", r"background"]),
    SectionRule(name="innovation", patterns=[r"innovation", r"innovative"]),
    SectionRule(
        name="approach",
        patterns=[r"approach", r"research\s*design", r"methods?", r"methodology"],
    ),
    SectionRule(name="preliminary_data", patterns=[r"preliminary\s*(data|studies|results)"]),
    SectionRule(name="environment", patterns=[r"environment", r"facilities", r"resources"]),
    SectionRule(name="budget", patterns=[r"budget", r"costs?"]),
    SectionRule(name="timeline", patterns=[r"timeline", r"milestones?", r"schedule"]),
    SectionRule(name="references", patterns=[r"references", r"bibliography", r"citations"]),
    SectionRule(
        name="biosketch",
        patterns=[r"biosketch", r"biographical", r"cv", r"curriculum\s*vitae"],
    ),
]


class SectionRules(BaseModel):
    """Ordered heading rules; earlier rules win when a line matches several."""
    rules: list[SectionRule] = Field(default_factory=lambda: list(DEFAULT_SECTION_RULES))
    incomplete_below_chars: int = 100

    @property
    def names(self) -> list[str]:
        return [rule.name for rule in self.rules]

    @field_validator("rules")
    @classmethod
    def _unique_names(cls, rules: list[SectionRule]) -> list[SectionRule]:
        seen: set[str] = set()
        for rule in rules:
            if rule.name in seen:
                raise ValueError(f"duplicate section rule: {rule.name}")
            seen.add(rule.name)
        return rules


class ModuleDefinition(BaseModel):
    """One reviewable grant module and the sections it draws from."""
    number: int
    key: str
    name: str
    sources: list[str]
    weight: float = 1.0
    critical: bool = False


DEFAULT_MODULES: list[ModuleDefinition] = [
    ModuleDefinition(number=1, key="concept", name="Title & Concept Clarity",
                     sources=["title", "abstract"]),
    ModuleDefinition(number=2, key="hypothesis", name="Hypothesis Development",
                     sources=["specific_aims", "significance"], weight=1.5, critical=True),
    ModuleDefinition(number=3, key="aims", name="Specific Aims Structure",
                     sources=["specific_aims"], weight=1.5, critical=True),
    ModuleDefinition(number=4, key="team", name="Team Mapping",
                     sources=["biosketch", "environment"]),
    ModuleDefinition(number=5, key="approach", name="Experimental Approach",
                     sources=["approach"], weight=1.5, critical=True),
    ModuleDefinition(number=6, key="preliminary_data", name="Preliminary Data & Rationale",
                     sources=["preliminary_data", "significance"]),
    ModuleDefinition(number=7, key="budget", name="Budget & Feasibility",
                     sources=["budget", "timeline"]),
    ModuleDefinition(number=8, key="impact", name="Impact & Translation",
                     sources=["significance", "innovation"]),
]


class SufficiencyStep(BaseModel):
    """Word counts strictly above ``above_words`` earn ``points``."""
    above_words: int
    points: int


class ProbabilityBand(BaseModel):
    """Calibrated scores at or below ``max_score`` fall in this band."""
    max_score: float
    band: str
    score_range: str


class QualityRubric(BaseModel):
    modules: list[ModuleDefinition] = Field(default_factory=lambda: list(DEFAULT_MODULES))
    sufficiency_ladder: list[SufficiencyStep] = Field(
        default_factory=lambda: [
            SufficiencyStep(above_words=500, points=5),
            SufficiencyStep(above_words=200, points=4),
            SufficiencyStep(above_words=100, points=3),
            SufficiencyStep(above_words=50, points=2),
            SufficiencyStep(above_words=0, points=1),
        ]
    )
    presence_points: dict[str, float] = Field(
        default_factory=lambda: {"present": 5.0, "incomplete": 2.5, "missing": 0.0}
    )
    structural_cap_threshold: float = 2.5
    structural_cap_floor: float = 6.0
    min_score: float = 1.0
    max_score: float = 9.0
    probability_bands: list[ProbabilityBand] = Field(
        default_factory=lambda: [
            ProbabilityBand(max_score=3.0, band="45-60%", score_range="1-3"),
            ProbabilityBand(max_score=5.0, band="20-35%", score_range="4-5"),
            ProbabilityBand(max_score=7.0, band="10-20%", score_range="6-7"),
        ]
    )
    fallback_band: ProbabilityBand = Field(
        default_factory=lambda: ProbabilityBand(max_score=9.0, band="<10%", score_range="8-9")
    )
    model_version: str = "deterministic_v1"

    @field_validator("sufficiency_ladder")
    @classmethod
    def _descending_ladder(cls, ladder: list[SufficiencyStep]) -> list[SufficiencyStep]:
        return sorted(ladder, key=lambda step: step.above_words, reverse=True)

    @field_validator("probability_bands")
    @classmethod
    def _ascending_bands(cls, bands: list[ProbabilityBand]) -> list[ProbabilityBand]:
        return sorted(bands, key=lambda band: band.max_score)

    @property
    def max_possible_weighted(self) -> float:
        return sum(m.weight for m in self.modules) * 5.0


class ExplanationBand(BaseModel):
    min_score: int
    text: str


class AdequacyRubric(BaseModel):
    """Category weight ceilings for the adequacy score (should sum to 100)."""
    weights: dict[str, int] = Field(
        default_factory=lambda: {
            "experimental_unit_replication": 25,
            "endpoint_clarity": 20,
            "model_appropriateness": 20,
            "power_detectable": 15,
            "multiplicity_missingness": 10,
            "decision_reporting": 10,
        }
    )
    explanation_bands: list[ExplanationBand] = Field(
        default_factory=lambda: [
            ExplanationBand(min_score=85, text="This aim has strong statistical rigor."),
            ExplanationBand(
                min_score=70,
                text="This aim has adequate statistical planning with some areas for improvement.",
            ),
            ExplanationBand(min_score=50, text="This aim needs attention to statistical methodology."),
        ]
    )
    fallback_explanation: str = "This aim requires significant statistical revision."
    max_fragments: int = 5

    @field_validator("explanation_bands")
    @classmethod
    def _descending_bands(cls, bands: list[ExplanationBand]) -> list[ExplanationBand]:
        return sorted(bands, key=lambda band: band.min_score, reverse=True)


class ClaimRubric(BaseModel):
    min_unit_chars: int = 20
    confidences: dict[str, float] = Field(
        default_factory=lambda: {"statistical": 0.85, "factual": 0.75, "methodological": 0.70}
    )


class VerificationRubric(BaseModel):
    base_score: float = 0.5
    p_value_bonus: float = 0.15
    percentage_bonus: float = 0.10
    citation_bonus: float = 0.20
    vague_penalty: float = 0.15
    verified_at_or_above: float = 0.7
    unverified_below: float = 0.4
    citation_relevance: float = 0.8
    batch_size: int = 10

    @model_validator(mode="after")
    def _ordered_thresholds(self) -> VerificationRubric:
        if self.unverified_below > self.verified_at_or_above:
            raise ValueError("unverified_below must not exceed verified_at_or_above")
        return self


class GradeBand(BaseModel):
    min_score: float
    grade: str
    label: str
    color: str


class IntegrityRubric(BaseModel):
    bands: list[GradeBand] = Field(
        default_factory=lambda: [
            GradeBand(min_score=0.9, grade="A", label="Excellent", color="#22c55e"),
            GradeBand(min_score=0.8, grade="B", label="Good", color="#84cc16"),
            GradeBand(min_score=0.7, grade="C", label="Adequate", color="#eab308"),
            GradeBand(min_score=0.6, grade="D", label="Needs Work", color="#f97316"),
        ]
    )
    fallback: GradeBand = Field(
        default_factory=lambda: GradeBand(min_score=0.0, grade="F", label="Poor", color="#ef4444")
    )

    @field_validator("bands")
    @classmethod
    def _descending_bands(cls, bands: list[GradeBand]) -> list[GradeBand]:
        return sorted(bands, key=lambda band: band.min_score, reverse=True)


class ScoringConfig(BaseModel):
    """All rubric tables in one injectable bundle."""
    sections: SectionRules = Field(default_factory=SectionRules)
    quality: QualityRubric = Field(default_factory=QualityRubric)
    adequacy: AdequacyRubric = Field(default_factory=AdequacyRubric)
    claims: ClaimRubric = Field(default_factory=ClaimRubric)
    verification: VerificationRubric = Field(default_factory=VerificationRubric)
    integrity: IntegrityRubric = Field(default_factory=IntegrityRubric)


def _drop_empty(section: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in (section or {}).items() if v is not None}


def get_scoring_config() -> ScoringConfig:
    """Build a ScoringConfig from the loaded YAML, defaulting missing keys."""
    return ScoringConfig.model_validate(
        {
            "sections": _drop_empty(get_sections_config()),
            "quality": _drop_empty(get_quality_config()),
            "adequacy": _drop_empty(get_adequacy_config()),
            "claims": _drop_empty(get_claims_config()),
            "verification": _drop_empty(get_verification_config()),
            "integrity": _drop_empty(get_integrity_config()),
        }
    )
