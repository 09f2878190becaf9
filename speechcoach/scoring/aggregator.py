"""
Score Aggregator - Per-Category Skill Totals
speechcoach/scoring/aggregator.py

Merges persisted skill scores (coach or committed AI) with a fresh,
not-yet-persisted AI language analysis and produces one summary per
category.

Formula per category:
    raw_points   = Σ effective_score × weight
    max_possible = Σ max_score × weight
    score        = raw_points / max_possible × 100     (2 dp, not clamped)

Merge rules:
    - A persisted row for a skill id always wins over a fresh AI entry.
    - Fresh AI entries are counted under Language with weight 1, max 10.
    - Two fresh entries targeting one skill id count once (first by
      (skill_id, key) order).
    - Rows with unknown ids or unusable values are skipped, never raised.
"""

from dataclasses import dataclass
from decimal import Decimal, DecimalException
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Union

import structlog

from speechcoach.models.enumerations import SkillCategory, UNKNOWN_CATEGORY
from speechcoach.scoring.ai_mapper import MappedEntry
from speechcoach.scoring.taxonomy import (
    DEFAULT_MAX_SCORE,
    DEFAULT_WEIGHT,
    SkillTaxonomy,
    coerce_skill_id,
)
from speechcoach.scoring.utils import as_finite_decimal, percentage

logger = structlog.get_logger(__name__)


@dataclass
class CategorySummary:
    """Aggregated result for one category. Derived, never persisted."""
    category: SkillCategory
    score: Decimal           # raw_points / max_possible × 100
    count: int               # contributing skills
    max_possible: Decimal
    raw_points: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.value,
            "score": float(self.score),
            "count": self.count,
            "max_possible": float(self.max_possible),
            "raw_points": float(self.raw_points),
        }


def _field(row: Any, name: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(name)
    return getattr(row, name, None)


def effective_score(row: Any) -> Optional[Decimal]:
    """
    Coach override if present, else the original score.

    Returns None when neither is set (skill not graded yet) or when the
    chosen value is not a finite number.
    """
    adjusted = _field(row, "adjusted_score")
    if adjusted is not None:
        return as_finite_decimal(adjusted)
    return as_finite_decimal(_field(row, "actual_score"))


class _Accumulator:
    __slots__ = ("raw_points", "max_possible", "count")

    def __init__(self):
        self.raw_points = Decimal("0")
        self.max_possible = Decimal("0")
        self.count = 0

    def add(self, points: Decimal, possible: Decimal) -> None:
        self.raw_points += points
        self.max_possible += possible
        self.count += 1


class ScoreAggregator:
    """Combine persisted and fresh AI scores into category summaries."""

    def __init__(
        self,
        taxonomy: SkillTaxonomy,
        default_max_score: Decimal = DEFAULT_MAX_SCORE,
        default_weight: Decimal = DEFAULT_WEIGHT,
    ):
        self.taxonomy = taxonomy
        self.default_max_score = default_max_score
        self.default_weight = default_weight

    # ------------------------------------------------------------------
    # Persisted rows
    # ------------------------------------------------------------------

    def _add_persisted(
        self,
        row: Any,
        accumulators: Dict[SkillCategory, _Accumulator],
    ) -> None:
        skill_id = _field(row, "skill_id")
        category = self.taxonomy.classify(skill_id)
        if category == UNKNOWN_CATEGORY:
            logger.warning("skill_score_skipped", skill_id=skill_id, reason="unknown_skill_id")
            return

        adjusted = _field(row, "adjusted_score")
        actual = _field(row, "actual_score")
        if adjusted is None and actual is None:
            return

        value = effective_score(row)
        if value is None:
            logger.warning("skill_score_skipped", skill_id=skill_id, reason="invalid_score")
            return

        weight = self._or_default(_field(row, "weight"), self.default_weight)
        max_score = self._or_default(_field(row, "max_score"), self.default_max_score)
        if weight is None or max_score is None:
            logger.warning("skill_score_skipped", skill_id=skill_id, reason="invalid_weight_or_max")
            return

        if not self._try_add(accumulators[category], value, weight, max_score):
            logger.warning("skill_score_skipped", skill_id=skill_id, reason="invalid_score")

    @staticmethod
    def _try_add(acc: _Accumulator, score: Decimal, weight: Decimal, max_score: Decimal) -> bool:
        """Add one skill unless its magnitude breaks Decimal arithmetic for the category."""
        try:
            points = score * weight
            possible = max_score * weight
            percentage(acc.raw_points + points, acc.max_possible + possible)
        except DecimalException:
            return False
        acc.add(points, possible)
        return True

    @staticmethod
    def _or_default(raw: Any, default: Decimal) -> Optional[Decimal]:
        if raw is None:
            return default
        return as_finite_decimal(raw)

    # ------------------------------------------------------------------
    # Fresh AI entries
    # ------------------------------------------------------------------

    def _fresh_entries(
        self,
        fresh: Union[Mapping[str, MappedEntry], Iterable[MappedEntry], None],
        persisted_ids: Set[int],
    ) -> List[MappedEntry]:
        if not fresh:
            return []
        entries = list(fresh.values()) if isinstance(fresh, Mapping) else list(fresh)
        entries.sort(key=lambda e: (e.skill_id, e.key))

        selected: List[MappedEntry] = []
        seen: Set[int] = set()
        for entry in entries:
            if entry.skill_id in persisted_ids:
                continue
            if entry.skill_id in seen:
                logger.warning(
                    "ai_entry_duplicate_skill",
                    key=entry.key,
                    skill_id=entry.skill_id,
                )
                continue
            seen.add(entry.skill_id)
            selected.append(entry)
        return selected

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def aggregate(
        self,
        persisted_scores: Optional[Iterable[Any]] = None,
        fresh_ai_entries: Union[Mapping[str, MappedEntry], Iterable[MappedEntry], None] = None,
    ) -> Dict[SkillCategory, CategorySummary]:
        """
        Args:
            persisted_scores: Rows (dicts or objects) with skill_id,
                              actual_score, adjusted_score, weight, max_score.
            fresh_ai_entries: Output of AIResultMapper.map_ai_results(), or
                              any iterable of MappedEntry.

        Returns:
            Category → CategorySummary, only for categories with count > 0,
            in taxonomy order.
        """
        accumulators = {category: _Accumulator() for category in SkillCategory}
        rows = list(persisted_scores or [])

        persisted_ids: Set[int] = set()
        for row in rows:
            sid = coerce_skill_id(_field(row, "skill_id"))
            if sid is not None:
                persisted_ids.add(sid)
            self._add_persisted(row, accumulators)

        for entry in self._fresh_entries(fresh_ai_entries, persisted_ids):
            added = self._try_add(
                accumulators[SkillCategory.LANGUAGE],
                entry.score,
                self.default_weight,
                self.default_max_score,
            )
            if not added:
                logger.warning("ai_entry_dropped", key=entry.key, skill_id=entry.skill_id, reason="invalid_score")

        summaries: Dict[SkillCategory, CategorySummary] = {}
        for category, acc in accumulators.items():
            if acc.count == 0:
                continue
            summaries[category] = CategorySummary(
                category=category,
                score=percentage(acc.raw_points, acc.max_possible),
                count=acc.count,
                max_possible=acc.max_possible,
                raw_points=acc.raw_points,
            )

        logger.info(
            "category_summaries_computed",
            persisted_rows=len(rows),
            categories={c.value: float(s.score) for c, s in summaries.items()},
        )
        return summaries
