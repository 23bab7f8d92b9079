"""Tests for the section extractor."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from config.rubrics import DEFAULT_SECTION_RULES, SectionRule, SectionRules
from models.shared import SectionStatus
from nodes.section_extractor import classify_section_text, extract_sections


def filler(words: int) -> str:
    """Prose that matches no heading pattern."""
    return " ".join(["alpha"] * words)


LONG_BODY = filler(30)


class TestCompleteness:
    """Every configured section name appears exactly once."""

    def test_empty_text_yields_all_sections_missing(self):
        sections = extract_sections("")

        assert list(sections) == [rule.name for rule in DEFAULT_SECTION_RULES]
        assert all(s.status == SectionStatus.MISSING for s in sections.values())
        assert all(s.start_offset == -1 for s in sections.values())

    def test_headless_text_is_dropped(self):
        sections = extract_sections("Nothing but a plain note\nand another line")

        assert len(sections) == 12
        assert all(s.raw_text == "" for s in sections.values())

    def test_custom_rules_define_the_key_set(self):
        rules = SectionRules(
            rules=[SectionRule(name="intro", patterns=[r"^intro"])],
            incomplete_below_chars=5,
        )

        sections = extract_sections("Intro\nhello world", rules)

        assert list(sections) == ["intro"]
        assert sections["intro"].status == SectionStatus.PRESENT


class TestStatusClassification:
    def test_thresholds(self):
        assert classify_section_text("") == SectionStatus.MISSING
        assert classify_section_text("x" * 99) == SectionStatus.INCOMPLETE
        assert classify_section_text("x" * 100) == SectionStatus.PRESENT

    def test_present_and_incomplete_sections(self):
        text = f"Specific Aims\n{LONG_BODY}\nInnovation\nshort text"

        sections = extract_sections(text)

        aims = sections["specific_aims"]
        assert aims.status == SectionStatus.PRESENT
        assert aims.raw_text == LONG_BODY
        assert aims.start_offset == 0
        assert aims.word_count == 30

        innovation = sections["innovation"]
        assert innovation.status == SectionStatus.INCOMPLETE
        assert innovation.raw_text == "short text"
        assert innovation.start_offset == 2

    def test_heading_without_body_is_missing(self):
        sections = extract_sections(f"Budget\nInnovation\n{LONG_BODY}")

        assert sections["budget"].status == SectionStatus.MISSING
        assert sections["budget"].start_offset == 0
        assert sections["innovation"].status == SectionStatus.PRESENT


class TestHeadingMatching:
    def test_first_rule_in_order_wins(self):
        # "summary" (abstract) is listed before "significance"
        sections = extract_sections(f"Project Summary and Significance\n{LONG_BODY}")

        assert sections["abstract"].status == SectionStatus.PRESENT
        assert sections["significance"].status == SectionStatus.MISSING

    def test_heading_line_is_excluded_from_body(self):
        sections = extract_sections(f"Innovation\n{LONG_BODY}")

        assert "Innovation" not in sections["innovation"].raw_text

    def test_body_line_mentioning_methods_opens_approach(self):
        text = "Specific Aims\nfirst line\nour methods are novel\nmore"

        sections = extract_sections(text)

        assert sections["specific_aims"].raw_text == "first line"
        assert sections["approach"].raw_text == "more"
        assert sections["approach"].start_offset == 2

    def test_reopened_heading_without_body_keeps_text(self):
        text = f"Budget\n{LONG_BODY}\nInnovation\n{LONG_BODY}\nBudget"

        sections = extract_sections(text)

        assert sections["budget"].raw_text == LONG_BODY
        assert sections["budget"].start_offset == 4

    def test_reopened_heading_followed_by_blank_lines_keeps_text(self):
        text = f"Approach\n{LONG_BODY}\nApproach\n\n\nBudget\n{LONG_BODY}"

        sections = extract_sections(text)

        assert sections["approach"].raw_text == LONG_BODY
        assert sections["approach"].status == SectionStatus.PRESENT
        assert sections["approach"].start_offset == 2
        assert sections["budget"].raw_text == LONG_BODY

    def test_reopened_heading_with_body_replaces_text(self):
        text = f"Budget\n{LONG_BODY}\nInnovation\n{LONG_BODY}\nBudget\nsecond pass"

        sections = extract_sections(text)

        assert sections["budget"].raw_text == "second pass"
        assert sections["budget"].status == SectionStatus.INCOMPLETE


class TestSectionRules:
    def test_duplicate_rule_names_rejected(self):
        with pytest.raises(ValidationError):
            SectionRules(
                rules=[
                    SectionRule(name="a", patterns=["x"]),
                    SectionRule(name="a", patterns=["y"]),
                ]
            )
