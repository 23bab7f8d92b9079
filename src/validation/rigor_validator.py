"""Statistical rigor validator for a single aim.

A flat, ordered list of rules; each inspects one StatsIntake and returns at
most one RigorCheck. When no rule fails, a synthetic ``basic_requirements``
pass is appended.
"""
from __future__ import annotations

from typing import Callable, Optional

import structlog

from models.shared import CORRELATED_ENDPOINT_TYPES, CheckStatus
from models.stats import RigorCheck, StatsIntake

logger = structlog.get_logger(__name__)

RigorRule = Callable[[StatsIntake], Optional[RigorCheck]]


def _blank(value: Optional[str]) -> bool:
    return not (value or "").strip()


def check_experimental_unit(intake: StatsIntake) -> Optional[RigorCheck]:
    if _blank(intake.experimental_unit):
        return RigorCheck(
            check_key="experimental_unit_required",
            status=CheckStatus.FAIL,
            message="Experimental unit is not defined. Specify whether measurements are per subject, cell, well, etc.",
        )
    return None


def check_primary_endpoint(intake: StatsIntake) -> Optional[RigorCheck]:
    if _blank(intake.primary_endpoint_text):
        return RigorCheck(
            check_key="primary_endpoint_required",
            status=CheckStatus.FAIL,
            message="Primary endpoint is not specified. Define the main outcome measure.",
        )
    return None


def check_correlated_endpoint_model(intake: StatsIntake) -> Optional[RigorCheck]:
    if intake.endpoint_type in CORRELATED_ENDPOINT_TYPES:
        return RigorCheck(
            check_key="mixed_model_required",
            status=CheckStatus.WARN,
            message="For repeated/clustered data, ensure analysis plan includes mixed models or GEE approach.",
        )
    return None


def check_multiplicity(intake: StatsIntake) -> Optional[RigorCheck]:
    multiple_timepoints = "," in (intake.timepoint_text or "")
    if len(intake.secondary_endpoints) > 1 or multiple_timepoints:
        return RigorCheck(
            check_key="multiplicity_plan",
            status=CheckStatus.WARN,
            message="Multiple endpoints/timepoints detected. Consider multiplicity adjustment (e.g., Bonferroni, FDR).",
        )
    return None


def check_variance_source(intake: StatsIntake) -> Optional[RigorCheck]:
    if _blank(intake.variance_source) or intake.variance_source == "unknown":
        return RigorCheck(
            check_key="variance_source",
            status=CheckStatus.WARN,
            message="Variance estimate source not specified. Indicate if from pilot data, literature, or assumed.",
        )
    return None


def check_pseudo_replication(intake: StatsIntake) -> Optional[RigorCheck]:
    reps = intake.replicates
    if reps is not None and reps.technical and not reps.biological:
        return RigorCheck(
            check_key="pseudo_replication_risk",
            status=CheckStatus.WARN,
            message="Technical replicates without biological replicates may lead to pseudo-replication. Verify experimental unit.",
        )
    return None


def check_missing_data_plan(intake: StatsIntake) -> Optional[RigorCheck]:
    if intake.attrition_rate > 0 and _blank(intake.missing_data_plan):
        return RigorCheck(
            check_key="missing_data_plan",
            status=CheckStatus.WARN,
            message="Attrition expected but no missing data handling plan specified.",
        )
    return None


RIGOR_RULES: list[RigorRule] = [
    check_experimental_unit,
    check_primary_endpoint,
    check_correlated_endpoint_model,
    check_multiplicity,
    check_variance_source,
    check_pseudo_replication,
    check_missing_data_plan,
]


def validate_rigor(intake: StatsIntake, rules: Optional[list[RigorRule]] = None) -> list[RigorCheck]:
    """Run every rule in order and return the complete replacement check set."""
    checks: list[RigorCheck] = []
    for rule in rules if rules is not None else RIGOR_RULES:
        check = rule(intake)
        if check is not None:
            checks.append(check)

    if not any(c.status == CheckStatus.FAIL for c in checks):
        checks.append(
            RigorCheck(
                check_key="basic_requirements",
                status=CheckStatus.PASS,
                message="Basic statistical requirements are met.",
            )
        )

    logger.info(
        "rigor_validated",
        aim_id=intake.aim_id,
        fails=sum(1 for c in checks if c.status == CheckStatus.FAIL),
        warns=sum(1 for c in checks if c.status == CheckStatus.WARN),
    )
    return checks
