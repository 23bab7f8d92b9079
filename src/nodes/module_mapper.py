"""Module mapper: aggregate extracted sections into the weighted module table."""
from __future__ import annotations

from typing import Optional

import structlog

from config.rubrics import ModuleDefinition, QualityRubric
from models.document import Module, ModuleSource, Section
from models.shared import SectionStatus
from utils.text import round_half_up

logger = structlog.get_logger(__name__)


def reduce_module_status(source_statuses: list[SectionStatus]) -> SectionStatus:
    """All sources present -> present; any present/incomplete -> incomplete.

    The asymmetry is deliberate: one written source is enough for
    ``incomplete`` but ``present`` needs every source.
    """
    if source_statuses and all(s == SectionStatus.PRESENT for s in source_statuses):
        return SectionStatus.PRESENT
    if any(s in (SectionStatus.PRESENT, SectionStatus.INCOMPLETE) for s in source_statuses):
        return SectionStatus.INCOMPLETE
    return SectionStatus.MISSING


def _build_module(definition: ModuleDefinition, sections: dict[str, Section]) -> Module:
    sources = [
        ModuleSource(
            section=name,
            status=sections[name].status if name in sections else SectionStatus.MISSING,
        )
        for name in definition.sources
    ]
    return Module(
        number=definition.number,
        key=definition.key,
        name=definition.name,
        weight=definition.weight,
        critical=definition.critical,
        source_sections=sources,
        status=reduce_module_status([s.status for s in sources]),
    )


def map_modules(sections: dict[str, Section], rubric: Optional[QualityRubric] = None) -> list[Module]:
    """Build one Module per configured definition, in table order."""
    rubric = rubric or QualityRubric()
    modules = [_build_module(d, sections) for d in rubric.modules]
    logger.debug(
        "modules_mapped",
        statuses={m.number: m.status.value for m in modules},
    )
    return modules


def completion_percent(modules: list[Module]) -> int:
    """Present modules count fully, incomplete ones half."""
    present = sum(1 for m in modules if m.status == SectionStatus.PRESENT)
    incomplete = sum(1 for m in modules if m.status == SectionStatus.INCOMPLETE)
    return int(round_half_up((present * 100 + incomplete * 50) / max(len(modules), 1)))
