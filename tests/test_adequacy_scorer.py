"""Tests for the statistical adequacy scorer."""
from __future__ import annotations

from config.rubrics import AdequacyRubric
from models.stats import RationaleBlock, ReplicateInfo, StatsIntake
from scoring.adequacy_scorer import CLOSING_STATEMENT, build_explanation, score_adequacy


def make_intake(**overrides) -> StatsIntake:
    data = {
        "aim_id": "aim-1",
        "experimental_unit": "mouse",
        "primary_endpoint_text": "tumor volume",
        "endpoint_type": "continuous",
        "timepoint_text": "day 28",
        "effect_size": "0.8",
        "variance_source": "pilot",
        "secondary_endpoints": ["body weight"],
        "replicates": ReplicateInfo(biological=8, technical=2, pseudo_addressed=True),
    }
    data.update(overrides)
    return StatsIntake(**data)


FULL_BLOCKS = [
    RationaleBlock(block_type="model", content_md="Linear mixed model with residual diagnostics."),
    RationaleBlock(
        block_type="multiplicity_missingness",
        content_md="Bonferroni adjustment; multiple imputation for missing data; sensitivity analysis.",
    ),
    RationaleBlock(
        block_type="decision_reporting",
        content_md="Success criterion is a 30% reduction; we report confidence intervals.",
    ),
]


class TestCategoryScoring:
    def test_fully_specified_aim_scores_hundred(self):
        score = score_adequacy(make_intake(), FULL_BLOCKS)

        assert score.value == 100
        assert {k: c.points for k, c in score.categories.items()} == {
            "experimental_unit_replication": 25,
            "endpoint_clarity": 20,
            "model_appropriateness": 20,
            "power_detectable": 15,
            "multiplicity_missingness": 10,
            "decision_reporting": 10,
        }

    def test_empty_intake_scores_zero(self):
        score = score_adequacy(StatsIntake(aim_id="aim-1"))

        assert score.value == 0
        assert score.explanation.startswith("This aim requires significant statistical revision.")
        assert "Missing: experimental unit not specified." in score.explanation

    def test_correlated_endpoint_without_mixed_model(self):
        blocks = [RationaleBlock(block_type="model", content_md="Two-way ANOVA")]

        score = score_adequacy(make_intake(endpoint_type="clustered"), blocks)

        assert score.categories["model_appropriateness"].points == 10

    def test_correlated_endpoint_with_gee(self):
        blocks = [RationaleBlock(block_type="model", content_md="GEE with exchangeable correlation")]

        score = score_adequacy(make_intake(endpoint_type="repeated"), blocks)

        assert score.categories["model_appropriateness"].points == 15
        assert "Model handles clustered/repeated structure." in score.fragments

    def test_unknown_variance_earns_nothing(self):
        score = score_adequacy(make_intake(variance_source="unknown", effect_size=None))

        assert score.categories["power_detectable"].points == 0

    def test_first_block_of_a_type_is_used(self):
        blocks = [
            RationaleBlock(block_type="decision_reporting", content_md="nothing relevant"),
            RationaleBlock(block_type="decision_reporting", content_md="success criterion and report"),
        ]

        score = score_adequacy(make_intake(), blocks)

        assert score.categories["decision_reporting"].points == 0


class TestWeightCeilings:
    def test_category_cannot_exceed_injected_ceiling(self):
        weights = dict(AdequacyRubric().weights, endpoint_clarity=5)
        rubric = AdequacyRubric(weights=weights)

        score = score_adequacy(make_intake(), FULL_BLOCKS, rubric)

        assert score.categories["endpoint_clarity"].raw_points == 20
        assert score.categories["endpoint_clarity"].points == 5
        assert score.value == 85

    def test_score_stays_within_range(self):
        rubric = AdequacyRubric(weights={k: 100 for k in AdequacyRubric().weights})

        score = score_adequacy(make_intake(), FULL_BLOCKS, rubric)

        assert 0 <= score.value <= 100


class TestExplanation:
    def test_band_boundaries(self):
        assert build_explanation(85, []).startswith("This aim has strong statistical rigor.")
        assert build_explanation(84, []).startswith("This aim has adequate statistical planning")
        assert build_explanation(50, []).startswith("This aim needs attention")
        assert build_explanation(49, []).startswith("This aim requires significant")

    def test_closing_statement_always_present(self):
        assert build_explanation(100, ["a."]).endswith(CLOSING_STATEMENT)

    def test_fragments_capped(self):
        text = build_explanation(90, [f"f{i}." for i in range(8)])

        assert "f4." in text
        assert "f5." not in text

    def test_to_dict(self):
        data = score_adequacy(make_intake(), FULL_BLOCKS).to_dict()

        assert data["adequacy_score"] == 100
        assert data["categories"]["power_detectable"]["ceiling"] == 15
