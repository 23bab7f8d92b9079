"""Document structure models: extracted sections and the modules built on them."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from models.shared import SectionStatus


class Section(BaseModel):
    """A named span of extracted document text.

    Produced once by the section extractor and never mutated afterwards.
    ``start_offset`` is the line index of the heading that opened the
    section most recently, or -1 when no heading matched.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    raw_text: str = ""
    status: SectionStatus = SectionStatus.MISSING
    start_offset: int = -1

    @property
    def word_count(self) -> int:
        return len(self.raw_text.split())


class ModuleSource(BaseModel):
    """Status snapshot of one source section feeding a module."""
    model_config = ConfigDict(frozen=True)

    section: str
    status: SectionStatus


class Module(BaseModel):
    """A weighted grouping of sections representing a reviewable grant component."""
    model_config = ConfigDict(frozen=True)

    number: int
    key: str
    name: str
    weight: float = 1.0
    critical: bool = False
    source_sections: list[ModuleSource] = Field(default_factory=list)
    status: SectionStatus = SectionStatus.MISSING

    @property
    def source_names(self) -> list[str]:
        return [src.section for src in self.source_sections]
