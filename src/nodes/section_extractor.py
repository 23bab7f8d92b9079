"""Section extractor: split raw grant text into named sections.

Heading rules are tried line by line in document order. Within a line the
configured rule order decides: the first rule with a matching pattern opens
its section and closes the one before it. Lines matching no rule belong to
the open section, or are dropped before the first heading.

The matcher is intentionally loose (``re.search`` on the whole line, so a
body line mentioning "methods" reopens ``approach``). Downstream calibration
assumes exactly this behaviour.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Pattern

import structlog

from config.rubrics import SectionRules
from models.document import Section
from models.shared import SectionStatus

logger = structlog.get_logger(__name__)


@dataclass
class _OpenSection:
    text: str = ""
    start_offset: int = -1
    buffer: list[str] = field(default_factory=list)


def classify_section_text(text: str, incomplete_below_chars: int = 100) -> SectionStatus:
    """Empty -> missing; shorter than the threshold -> incomplete; else present."""
    if not text:
        return SectionStatus.MISSING
    if len(text) < incomplete_below_chars:
        return SectionStatus.INCOMPLETE
    return SectionStatus.PRESENT


def _match_heading(line: str, compiled: list[tuple[str, list[Pattern[str]]]]) -> Optional[str]:
    for name, patterns in compiled:
        if any(p.search(line) for p in patterns):
            return name
    return None


def _flush(state: _OpenSection) -> None:
    # A reopened heading with no body keeps the earlier text.
    body = "\n".join(state.buffer).strip()
    if body:
        state.text = body
    state.buffer = []


def extract_sections(raw_text: str, rules: Optional[SectionRules] = None) -> dict[str, Section]:
    """Extract every configured section from ``raw_text``.

    Returns an ordered mapping (rule order) that always contains every
    configured section name; unmatched sections are ``missing`` with empty
    text and ``start_offset`` -1.
    """
    rules = rules or SectionRules()
    compiled = [(rule.name, rule.compiled()) for rule in rules.rules]
    states: dict[str, _OpenSection] = {name: _OpenSection() for name in rules.names}

    current: Optional[str] = None
    for index, raw_line in enumerate(raw_text.split("\n")):
        line = raw_line.strip()
        heading = _match_heading(line, compiled)
        if heading is not None:
            if current is not None:
                _flush(states[current])
            current = heading
            states[heading].start_offset = index
            states[heading].buffer = []
            continue
        if current is not None:
            states[current].buffer.append(line)

    if current is not None:
        _flush(states[current])

    sections: dict[str, Section] = {}
    for name, state in states.items():
        sections[name] = Section(
            name=name,
            raw_text=state.text,
            status=classify_section_text(state.text, rules.incomplete_below_chars),
            start_offset=state.start_offset,
        )

    logger.info(
        "sections_extracted",
        present=sum(1 for s in sections.values() if s.status == SectionStatus.PRESENT),
        incomplete=sum(1 for s in sections.values() if s.status == SectionStatus.INCOMPLETE),
        missing=sum(1 for s in sections.values() if s.status == SectionStatus.MISSING),
    )
    return sections
