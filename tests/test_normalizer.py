# tests/test_normalizer.py
"""
Final Score Normalizer Tests - divider selection, validation, score bands
"""

import pytest
from decimal import Decimal

from speechcoach.core.exceptions import DividerValidationError
from speechcoach.models.enumerations import DividerSource, SkillCategory
from speechcoach.scoring.aggregator import CategorySummary
from speechcoach.scoring.normalizer import (
    FinalScoreNormalizer,
    compute_final_score,
    default_divider,
    describe_score,
    validate_divider,
)


def summary(category, raw, max_possible, count=1):
    raw = Decimal(str(raw))
    max_possible = Decimal(str(max_possible))
    return CategorySummary(
        category=category,
        score=(raw / max_possible * 100) if max_possible else Decimal("0"),
        count=count,
        max_possible=max_possible,
        raw_points=raw,
    )


@pytest.fixture
def scenario_a_summaries():
    return {
        SkillCategory.NERVOUSNESS: summary(SkillCategory.NERVOUSNESS, -4, 10),
        SkillCategory.VOICE: summary(SkillCategory.VOICE, 8, 10),
    }


class TestComputeFinalScore:

    def test_scenario_a_default_divider(self, normalizer, scenario_a_summaries):
        """totals 4 / 20, divider 20/110, final ≈ 22.0"""
        result = normalizer.compute(scenario_a_summaries)
        assert result.total_raw_points == Decimal("4")
        assert result.total_max_possible == Decimal("20")
        assert result.divider_source == DividerSource.DEFAULT
        assert abs(result.divider - Decimal("20") / Decimal("110")) < Decimal("1e-20")
        assert abs(result.final_score - Decimal("22")) < Decimal("1e-10")
        assert result.score_calculation == "4.00 ÷ 0.1818 = 22.00"
        print("✅ Scenario A final score 22.00")

    def test_custom_divider_used(self, normalizer, scenario_a_summaries):
        result = normalizer.compute(scenario_a_summaries, stored_divider=0.5)
        assert result.divider == Decimal("0.5")
        assert result.divider_source == DividerSource.CUSTOM
        assert result.final_score == Decimal("8")

    @pytest.mark.parametrize("stored", [None, 0, -3, float("nan"), float("inf"), "abc"])
    def test_invalid_stored_divider_falls_back_to_default(self, normalizer, scenario_a_summaries, stored):
        result = normalizer.compute(scenario_a_summaries, stored_divider=stored)
        assert result.divider_source == DividerSource.DEFAULT
        assert abs(result.final_score - Decimal("22")) < Decimal("1e-10")

    def test_no_data_scores_zero(self, normalizer):
        result = normalizer.compute({})
        assert result.final_score == Decimal("0")
        assert result.divider is None
        assert result.divider_source == DividerSource.NONE
        assert result.score_calculation == "no scored skills"

    def test_no_data_with_custom_divider(self, normalizer):
        result = normalizer.compute({}, stored_divider=2)
        assert result.final_score == Decimal("0")
        assert result.divider_source == DividerSource.CUSTOM

    def test_not_clamped_above_scale(self, normalizer):
        summaries = {SkillCategory.VOICE: summary(SkillCategory.VOICE, 10, 10)}
        result = normalizer.compute(summaries, stored_divider=0.01)
        assert result.final_score == Decimal("1000")
        assert result.out_of_range

    def test_out_of_range_uses_configured_scale(self):
        normalizer = FinalScoreNormalizer(scale=Decimal("100"))
        summaries = {SkillCategory.VOICE: summary(SkillCategory.VOICE, 10, 10)}

        full_marks = normalizer.compute(summaries)
        assert abs(full_marks.final_score - Decimal("100")) < Decimal("1e-10")
        assert full_marks.scale == Decimal("100")
        assert not full_marks.out_of_range

        above = normalizer.compute(summaries, stored_divider=0.095)
        assert Decimal("100") < above.final_score < Decimal("110")
        assert above.out_of_range
        assert above.to_dict()["out_of_range"] is True

    def test_negative_final_score_allowed(self, normalizer):
        summaries = {SkillCategory.NERVOUSNESS: summary(SkillCategory.NERVOUSNESS, -6, 10)}
        result = normalizer.compute(summaries)
        assert abs(result.final_score - Decimal("-66")) < Decimal("1e-10")
        assert result.out_of_range

    def test_perfect_score_is_110(self, normalizer):
        summaries = {
            SkillCategory.VOICE: summary(SkillCategory.VOICE, 10, 10),
            SkillCategory.LANGUAGE: summary(SkillCategory.LANGUAGE, 20, 20, count=2),
        }
        result = normalizer.compute(summaries)
        assert abs(result.final_score - Decimal("110")) < Decimal("1e-10")
        assert abs(result.max_possible_score - Decimal("110")) < Decimal("1e-10")

    def test_compute_final_score_function(self, scenario_a_summaries):
        assert compute_final_score(scenario_a_summaries, 2) == Decimal("2")
        assert compute_final_score({}) == Decimal("0")

    def test_to_dict(self, normalizer, scenario_a_summaries):
        data = normalizer.compute(scenario_a_summaries, stored_divider=0.5).to_dict()
        assert data["final_score"] == 8.0
        assert data["divider"] == 0.5
        assert data["divider_source"] == "custom"
        assert data["max_possible_score"] == 40.0
        assert data["band"] == "Work Required"
        assert data["out_of_range"] is False


class TestValidateDivider:

    @pytest.mark.parametrize("value", [0, -5, -0.0001, "0", Decimal("-1")])
    def test_non_positive_rejected(self, value):
        with pytest.raises(DividerValidationError) as exc_info:
            validate_divider(value)
        assert exc_info.value.message == "Divider must be greater than zero"

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), "abc", None, True, [1]])
    def test_non_numeric_rejected(self, value):
        with pytest.raises(DividerValidationError) as exc_info:
            validate_divider(value)
        assert exc_info.value.message == "Divider must be a valid number"

    def test_valid_divider(self):
        assert validate_divider(0.1818) == Decimal("0.1818")
        assert validate_divider("2.5") == Decimal("2.5")

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            validate_divider(0)


class TestDefaultDivider:

    def test_default_divider(self):
        assert default_divider(Decimal("110")) == Decimal("1")

    def test_no_max_possible(self):
        assert default_divider(Decimal("0")) is None


class TestDescribeScore:

    @pytest.mark.parametrize("score,label,level", [
        (Decimal("110"), "Outstanding", 6),
        (Decimal("90"), "Outstanding", 6),
        (Decimal("89.99"), "Excellent", 5),
        (Decimal("80"), "Excellent", 5),
        (Decimal("70"), "Very Good", 4),
        (Decimal("60"), "Good", 3),
        (Decimal("50"), "Satisfactory", 2),
        (Decimal("40"), "Needs Improvement", 1),
        (Decimal("39.99"), "Work Required", 0),
        (Decimal("-20"), "Work Required", 0),
    ])
    def test_bands(self, score, label, level):
        band = describe_score(score)
        assert band.label == label
        assert band.level == level
