"""Text-processing stages: sections, modules, claims and aims."""
from nodes.section_extractor import classify_section_text, extract_sections
from nodes.module_mapper import completion_percent, map_modules, reduce_module_status
from nodes.claim_extractor import classify_unit, extract_claims_from_text, split_units
from nodes.aim_parser import classify_aim, parse_aims

__all__ = [
    "classify_section_text",
    "extract_sections",
    "completion_percent",
    "map_modules",
    "reduce_module_status",
    "classify_unit",
    "extract_claims_from_text",
    "split_units",
    "classify_aim",
    "parse_aims",
]
