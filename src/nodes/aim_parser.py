"""Aim parser: split specific-aims prose into individual aims and classify them."""
from __future__ import annotations

import re

import structlog

logger = structlog.get_logger(__name__)

AIM_PATTERN = re.compile(
    r"(?:specific\s+aim|aim)\s*(\d+)[:.]?\s*(.*?)(?=(?:specific\s+aim|aim)\s*\d+|\Z)",
    re.IGNORECASE | re.DOTALL,
)
NUMBERED_ITEM_SPLIT = re.compile(r"\n\s*\d+[.)]\s+")

MIN_MARKED_AIM_CHARS = 11
MIN_LISTED_AIM_CHARS = 31

# Checked in order; the first match decides the question type.
QUESTION_TYPE_RULES: list[tuple[str, re.Pattern[str]]] = [
    ("time_to_event", re.compile(r"survival|time.to|hazard|kaplan")),
    ("repeated_measures", re.compile(r"repeated|longitudinal|over time|trajectory")),
    ("clustered", re.compile(r"cluster|multilevel|hierarchical|nested")),
    ("association_regression", re.compile(r"associat|correlat|regress|predict")),
    ("high_dimensional", re.compile(r"omics|genomic|proteomic|transcriptom")),
    ("diagnostic_classifier", re.compile(r"sensitiv|specific|roc|auc|diagnostic")),
    ("equivalence_noninferiority", re.compile(r"equivalen|non.?inferior|margin")),
]
COMPARISON_PATTERN = re.compile(r"compar|difference|between.*(group|arm)")
PROPORTION_PATTERN = re.compile(r"proportion|percent|rate|incidence")
DEFAULT_QUESTION_TYPE = "difference_means"


def parse_aims(text: str) -> list[str]:
    """Return aim texts in order.

    "Aim N" / "Specific Aim N" markers are preferred; without any, numbered
    list items are used instead.
    """
    aims = [
        match.group(2).strip()
        for match in AIM_PATTERN.finditer(text)
        if len(match.group(2).strip()) >= MIN_MARKED_AIM_CHARS
    ]

    if not aims:
        aims = [
            item.strip()
            for item in NUMBERED_ITEM_SPLIT.split(text)
            if len(item.strip()) >= MIN_LISTED_AIM_CHARS
        ]

    logger.info("aims_parsed", aims=len(aims))
    return aims


def classify_aim(text: str) -> str:
    """Infer the statistical question type an aim poses."""
    lower = text.lower()
    if COMPARISON_PATTERN.search(lower):
        if PROPORTION_PATTERN.search(lower):
            return "difference_proportions"
        return "difference_means"
    for question_type, pattern in QUESTION_TYPE_RULES:
        if pattern.search(lower):
            return question_type
    return DEFAULT_QUESTION_TYPE
