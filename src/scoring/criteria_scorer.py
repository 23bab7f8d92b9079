"""Review-criterion scorer.

Gives a deterministic 1-9 score per peer-review criterion from section
status and content length, rolls them into a 10-90 impact score, and flags
structurally deficient modules with template recommendations.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

from models.document import Module, Section
from models.shared import SectionStatus
from utils.text import round_half_up

logger = structlog.get_logger(__name__)

# Criterion -> contributing sections
CRITERIA_SECTIONS: dict[str, list[str]] = {
    "significance": ["significance", "abstract"],
    "innovation": ["innovation", "approach"],
    "approach": ["approach", "preliminary_data", "timeline"],
    "investigator": ["biosketch"],
    "environment": ["environment"],
}

# Recommendation fires when the criterion score exceeds the threshold
CRITERIA_RECOMMENDATIONS: dict[str, tuple[int, str]] = {
    "significance": (4, "Strengthen the significance section with clearer problem statement and broader impact"),
    "innovation": (4, "Highlight innovative aspects more prominently"),
    "approach": (4, "Provide more methodological detail and address potential pitfalls"),
    "investigator": (5, "Expand investigator credentials and relevant experience"),
    "environment": (5, "Better describe available resources and institutional support"),
}

DEFICIENT_BELOW = 3


@dataclass
class ModuleStrength:
    presence: int
    clarity: int
    sufficiency: int
    strength: int

    @property
    def deficient(self) -> bool:
        return self.strength < DEFICIENT_BELOW

    def to_dict(self) -> dict[str, Any]:
        return {
            "presence": self.presence,
            "clarity": self.clarity,
            "sufficiency": self.sufficiency,
            "strength": self.strength,
            "deficient": self.deficient,
        }


@dataclass
class ReviewCriteriaResult:
    criterion_scores: dict[str, int]
    impact_score: int
    funding_probability: str
    module_strength: dict[int, ModuleStrength] = field(default_factory=dict)
    deficient_modules: list[int] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "criterion_scores": dict(self.criterion_scores),
            "impact_score": self.impact_score,
            "funding_probability": self.funding_probability,
            "module_strength": {n: s.to_dict() for n, s in self.module_strength.items()},
            "deficient_modules": list(self.deficient_modules),
            "recommendations": list(self.recommendations),
        }


def _section_points(section: Section | None) -> int:
    if section is None:
        return 9
    if section.status == SectionStatus.PRESENT:
        length = len(section.raw_text)
        if length > 2000:
            return 2
        if length > 1000:
            return 3
        if length > 500:
            return 4
        return 5
    if section.status == SectionStatus.INCOMPLETE:
        return 6
    return 8


def score_criterion(section_names: list[str], sections: dict[str, Section]) -> int:
    """Average section points for one criterion (1 best, 9 worst)."""
    if not section_names:
        return 9
    total = sum(_section_points(sections.get(name)) for name in section_names)
    return int(round_half_up(total / len(section_names)))


def _funding_probability(impact_score: int) -> str:
    if impact_score <= 25:
        return "High"
    if impact_score <= 40:
        return "Moderate"
    return "Low"


def _module_strength(module: Module) -> ModuleStrength:
    presence = {SectionStatus.PRESENT: 5, SectionStatus.INCOMPLETE: 3}.get(module.status, 0)
    present_sources = sum(1 for s in module.source_sections if s.status == SectionStatus.PRESENT)
    clarity = int(round_half_up(present_sources / max(len(module.source_sections), 1) * 5))
    sufficiency = int(round_half_up((presence + clarity) / 2))
    strength = int(round_half_up((presence + clarity + sufficiency) / 3))
    return ModuleStrength(presence=presence, clarity=clarity, sufficiency=sufficiency, strength=strength)


def score_review_criteria(sections: dict[str, Section], modules: list[Module]) -> ReviewCriteriaResult:
    criterion_scores = {
        name: score_criterion(section_names, sections)
        for name, section_names in CRITERIA_SECTIONS.items()
    }
    avg_criterion = sum(criterion_scores.values()) / len(criterion_scores)
    impact_score = int(round_half_up(avg_criterion * 10))

    strength = {m.number: _module_strength(m) for m in modules}
    deficient = [number for number, s in strength.items() if s.deficient]

    recommendations = [
        text
        for name, (threshold, text) in CRITERIA_RECOMMENDATIONS.items()
        if criterion_scores[name] > threshold
    ]
    names = {m.number: m.name for m in modules}
    recommendations.extend(
        f'Module "{names[n]}" is structurally deficient and needs attention' for n in deficient
    )

    logger.info(
        "review_criteria_scored",
        impact_score=impact_score,
        deficient_modules=deficient,
    )
    return ReviewCriteriaResult(
        criterion_scores=criterion_scores,
        impact_score=impact_score,
        funding_probability=_funding_probability(impact_score),
        module_strength=strength,
        deficient_modules=deficient,
        recommendations=recommendations,
    )
