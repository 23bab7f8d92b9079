"""Statistical intake models for per-aim rigor validation and adequacy scoring."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from models.shared import CheckStatus


class ReplicateInfo(BaseModel):
    """Replication structure of an aim (counts per experimental unit)."""
    biological: Optional[int] = None
    technical: Optional[int] = None
    pseudo_addressed: bool = False


class StatsIntake(BaseModel):
    """Per-aim statistics record edited by the authoring UI.

    Scorers and validators treat it as read-only input.
    """
    aim_id: str = ""
    experimental_unit: Optional[str] = None
    primary_endpoint_text: Optional[str] = None
    endpoint_type: Optional[str] = None  # continuous, binary, repeated, clustered, ...
    timepoint_text: Optional[str] = None
    alpha: Optional[float] = None
    power: Optional[float] = None
    sample_size: Optional[int] = None
    effect_size: Optional[str] = None
    effect_size_scale: Optional[str] = None
    variance_source: Optional[str] = None  # pilot, literature, assumed, unknown
    secondary_endpoints: list[str] = Field(default_factory=list)
    replicates: Optional[ReplicateInfo] = None
    attrition_rate: float = 0.0
    missing_data_plan: Optional[str] = None

    @field_validator("endpoint_type", "variance_source")
    @classmethod
    def _lowercase_codes(cls, value: Optional[str]) -> Optional[str]:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("secondary_endpoints", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return [] if value is None else value

    @field_validator("attrition_rate", mode="before")
    @classmethod
    def _attrition_default(cls, value):
        return 0.0 if value is None else value


class RationaleBlock(BaseModel):
    """Free-text statistical rationale attached to an aim."""
    block_type: str
    content_md: str = ""


class RigorCheck(BaseModel):
    """One pass/warn/fail finding from the rigor rule set."""
    check_key: str
    status: CheckStatus
    message: str


class Aim(BaseModel):
    """A specific aim parsed out of the aims section."""
    id: str
    project_id: str
    aim_index: int
    text: str
    question_type: str
