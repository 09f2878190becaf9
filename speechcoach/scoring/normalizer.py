"""
Final Score Normalizer - Raw Points to the 110-Point Scale
speechcoach/scoring/normalizer.py

Formula:
    total_raw   = Σ category.raw_points
    total_max   = Σ category.max_possible
    divider     = stored custom divider (finite, > 0)
                  else total_max / 110          (total_max > 0)
                  else none ──► final score 0
    final_score = total_raw / divider           (not clamped)

A custom divider stays fixed while skills are added or removed, so the
final score can leave [0, 110]. That is reported, never corrected.

Score bands:
    ≥ 90  Outstanding         ≥ 60  Good
    ≥ 80  Excellent           ≥ 50  Satisfactory
    ≥ 70  Very Good           ≥ 40  Needs Improvement
                              else  Work Required
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

import structlog

from speechcoach.core.exceptions import DividerValidationError
from speechcoach.models.enumerations import DividerSource, SkillCategory
from speechcoach.scoring.aggregator import CategorySummary
from speechcoach.scoring.utils import as_finite_decimal, round2

logger = structlog.get_logger(__name__)

FINAL_SCORE_SCALE = Decimal("110")


@dataclass(frozen=True)
class ScoreBand:
    label: str
    color: str
    level: int
    min_score: Decimal


SCORE_BANDS = (
    ScoreBand("Outstanding", "green", 6, Decimal("90")),
    ScoreBand("Excellent", "green", 5, Decimal("80")),
    ScoreBand("Very Good", "blue", 4, Decimal("70")),
    ScoreBand("Good", "blue", 3, Decimal("60")),
    ScoreBand("Satisfactory", "yellow", 2, Decimal("50")),
    ScoreBand("Needs Improvement", "yellow", 1, Decimal("40")),
)
WORK_REQUIRED = ScoreBand("Work Required", "red", 0, Decimal("-Infinity"))


@dataclass
class FinalScoreResult:
    """Output of FinalScoreNormalizer.compute()."""
    final_score: Decimal
    total_raw_points: Decimal
    total_max_possible: Decimal
    divider: Optional[Decimal]
    divider_source: DividerSource
    max_possible_score: Decimal      # total_max_possible / divider
    band: ScoreBand
    scale: Decimal = FINAL_SCORE_SCALE

    @property
    def out_of_range(self) -> bool:
        return self.final_score < 0 or self.final_score > self.scale

    @property
    def score_calculation(self) -> str:
        if self.divider is None:
            return "no scored skills"
        return (
            f"{self.total_raw_points:.2f} ÷ {self.divider:.4f} = "
            f"{round2(self.final_score):.2f}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "final_score": float(round2(self.final_score)),
            "total_raw_points": float(self.total_raw_points),
            "total_max_possible": float(self.total_max_possible),
            "divider": float(self.divider) if self.divider is not None else None,
            "divider_source": self.divider_source.value,
            "max_possible_score": float(round2(self.max_possible_score)),
            "score_calculation": self.score_calculation,
            "out_of_range": self.out_of_range,
            "band": self.band.label,
            "band_color": self.band.color,
            "band_level": self.band.level,
        }


def validate_divider(value: Any) -> Decimal:
    """
    Validate an admin-supplied divider.

    Raises:
        DividerValidationError: non-numeric, NaN or infinite values
            ("valid number"); zero or negative values ("greater than zero").
    """
    divider = as_finite_decimal(value)
    if divider is None:
        raise DividerValidationError(DividerValidationError.NOT_A_NUMBER, value)
    if divider <= 0:
        raise DividerValidationError(DividerValidationError.NOT_POSITIVE, value)
    return divider


def default_divider(
    total_max_possible: Decimal,
    scale: Decimal = FINAL_SCORE_SCALE,
) -> Optional[Decimal]:
    """total_max / scale, or None when there is nothing to divide."""
    if total_max_possible <= 0:
        return None
    return total_max_possible / scale


def describe_score(final_score: Decimal) -> ScoreBand:
    """Map a final score to its descriptive band."""
    for band in SCORE_BANDS:
        if final_score >= band.min_score:
            return band
    return WORK_REQUIRED


class FinalScoreNormalizer:
    """Normalize category totals onto the final 110-point scale."""

    def __init__(self, scale: Decimal = FINAL_SCORE_SCALE):
        self.scale = scale

    def resolve_divider(
        self,
        total_max_possible: Decimal,
        stored_divider: Any = None,
    ) -> tuple[Optional[Decimal], DividerSource]:
        custom = as_finite_decimal(stored_divider)
        if custom is not None and custom > 0:
            return custom, DividerSource.CUSTOM
        if stored_divider is not None:
            logger.warning("stored_divider_ignored", stored_divider=str(stored_divider))
        fallback = default_divider(total_max_possible, self.scale)
        if fallback is None:
            return None, DividerSource.NONE
        return fallback, DividerSource.DEFAULT

    def compute(
        self,
        summaries: Mapping[SkillCategory, CategorySummary],
        stored_divider: Any = None,
    ) -> FinalScoreResult:
        """
        Args:
            summaries: Output of ScoreAggregator.aggregate().
            stored_divider: Custom divider persisted for the evaluation, if any.

        Returns:
            FinalScoreResult with the unclamped final score and its breakdown.
        """
        total_raw = sum((s.raw_points for s in summaries.values()), Decimal("0"))
        total_max = sum((s.max_possible for s in summaries.values()), Decimal("0"))

        divider, source = self.resolve_divider(total_max, stored_divider)
        if divider is None:
            final = Decimal("0")
            max_possible_score = Decimal("0")
        else:
            final = total_raw / divider
            max_possible_score = total_max / divider

        result = FinalScoreResult(
            final_score=final,
            total_raw_points=total_raw,
            total_max_possible=total_max,
            divider=divider,
            divider_source=source,
            max_possible_score=max_possible_score,
            band=describe_score(final),
            scale=self.scale,
        )

        logger.info(
            "final_score_computed",
            final_score=float(round2(final)),
            total_raw_points=float(total_raw),
            total_max_possible=float(total_max),
            divider=float(divider) if divider is not None else None,
            divider_source=source.value,
            out_of_range=result.out_of_range,
        )
        return result


def compute_final_score(
    summaries: Mapping[SkillCategory, CategorySummary],
    stored_divider: Any = None,
) -> Decimal:
    """total_raw / divider with the stored or default divider; 0 for no data."""
    return FinalScoreNormalizer().compute(summaries, stored_divider).final_score
