"""Tests for the statistical rigor rule set."""
from __future__ import annotations

from models.shared import CheckStatus
from models.stats import ReplicateInfo, StatsIntake
from validation.rigor_validator import RIGOR_RULES, validate_rigor


def make_intake(**overrides) -> StatsIntake:
    """A fully specified intake that passes every rule."""
    data = {
        "aim_id": "aim-1",
        "experimental_unit": "mouse",
        "primary_endpoint_text": "tumor volume",
        "endpoint_type": "continuous",
        "timepoint_text": "day 28",
        "variance_source": "pilot",
        "secondary_endpoints": ["body weight"],
        "replicates": ReplicateInfo(biological=8, technical=2),
        "attrition_rate": 0.0,
    }
    data.update(overrides)
    return StatsIntake(**data)


def keys(checks) -> list[str]:
    return [c.check_key for c in checks]


class TestBasicRequirements:
    def test_complete_intake_gets_single_pass(self):
        checks = validate_rigor(make_intake())

        assert keys(checks) == ["basic_requirements"]
        assert checks[0].status == CheckStatus.PASS

    def test_blank_unit_fails_without_pass(self):
        intake = StatsIntake(experimental_unit="", primary_endpoint_text="tumor volume")

        checks = validate_rigor(intake)

        fails = [c for c in checks if c.status == CheckStatus.FAIL]
        assert keys(fails) == ["experimental_unit_required"]
        assert "basic_requirements" not in keys(checks)

    def test_missing_endpoint_fails(self):
        checks = validate_rigor(make_intake(primary_endpoint_text="   "))

        assert keys(checks) == ["primary_endpoint_required"]

    def test_warnings_still_get_pass(self):
        checks = validate_rigor(make_intake(variance_source="unknown"))

        assert keys(checks) == ["variance_source", "basic_requirements"]


class TestWarnings:
    def test_correlated_endpoint_needs_mixed_model(self):
        checks = validate_rigor(make_intake(endpoint_type="Repeated"))

        assert checks[0].check_key == "mixed_model_required"
        assert checks[0].status == CheckStatus.WARN

    def test_multiple_timepoints(self):
        checks = validate_rigor(make_intake(timepoint_text="baseline, week 4"))

        assert "multiplicity_plan" in keys(checks)

    def test_several_secondary_endpoints(self):
        checks = validate_rigor(make_intake(secondary_endpoints=["a", "b"]))

        assert "multiplicity_plan" in keys(checks)

    def test_single_secondary_endpoint_is_fine(self):
        assert "multiplicity_plan" not in keys(validate_rigor(make_intake()))

    def test_technical_without_biological_replicates(self):
        intake = make_intake(replicates=ReplicateInfo(biological=0, technical=3))

        assert "pseudo_replication_risk" in keys(validate_rigor(intake))

    def test_attrition_without_plan(self):
        assert "missing_data_plan" in keys(validate_rigor(make_intake(attrition_rate=0.1)))

    def test_attrition_with_plan(self):
        intake = make_intake(attrition_rate=0.1, missing_data_plan="multiple imputation")

        assert "missing_data_plan" not in keys(validate_rigor(intake))


class TestRuleOrder:
    def test_checks_follow_rule_order(self):
        intake = StatsIntake(
            endpoint_type="clustered",
            timepoint_text="a, b",
            replicates=ReplicateInfo(technical=2),
            attrition_rate=0.2,
        )

        checks = validate_rigor(intake)

        assert keys(checks) == [
            "experimental_unit_required",
            "primary_endpoint_required",
            "mixed_model_required",
            "multiplicity_plan",
            "variance_source",
            "pseudo_replication_risk",
            "missing_data_plan",
        ]

    def test_injected_rule_list(self):
        checks = validate_rigor(StatsIntake(), rules=RIGOR_RULES[:1])

        assert keys(checks) == ["experimental_unit_required"]
