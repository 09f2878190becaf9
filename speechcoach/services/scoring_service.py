"""
Scoring Service - Evaluation Scoring Orchestrator
speechcoach/services/scoring_service.py

Orchestrates the scoring engine for a single evaluation:

  1. Read persisted skill scores + custom divider (Snowflake)
  2. Map an optional fresh AI language analysis onto skill ids
  3. Aggregate per category (persisted wins over fresh AI)
  4. Normalize onto the 110-point scale
  5. Persist what the operation changed (scores, divider, final score)

The service holds no per-evaluation state; every call reads what it needs.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from speechcoach.models.enumerations import SkillCategory, UNKNOWN_CATEGORY
from speechcoach.repositories.evaluation_repository import EvaluationRepository
from speechcoach.repositories.skill_score_repository import SkillScoreRepository
from speechcoach.scoring.aggregator import CategorySummary, ScoreAggregator
from speechcoach.scoring.ai_mapper import AIResultMapper, MappedEntry
from speechcoach.scoring.ai_response import parse_analysis_response
from speechcoach.scoring.critical_skills import CriticalSkillsResult, CriticalSkillsSelector
from speechcoach.scoring.normalizer import FinalScoreNormalizer, FinalScoreResult, validate_divider
from speechcoach.scoring.taxonomy import SkillTaxonomy, coerce_skill_id

logger = logging.getLogger(__name__)

AnalysisInput = Union[str, Dict[str, Any], None]


@dataclass
class EvaluationScores:
    """Everything the engine derives for one evaluation."""
    evaluation_id: str
    summaries: Dict[SkillCategory, CategorySummary]
    final: FinalScoreResult
    mapped_entries: Dict[str, MappedEntry] = field(default_factory=dict)
    skipped_skill_ids: List[Any] = field(default_factory=list)
    rows_written: int = 0


class ScoringService:
    """
    Scoring operations for evaluations.

    Reads from:
      - SKILL_SCORES (persisted coach / AI rows)
      - EVALUATIONS  (custom divider, critical skills)

    Writes to:
      - SKILL_SCORES (coach entry, committed AI pass)
      - EVALUATIONS  (divider, final score, critical skills)
    """

    def __init__(
        self,
        taxonomy: SkillTaxonomy,
        skill_score_repo: SkillScoreRepository,
        evaluation_repo: EvaluationRepository,
        aggregator: Optional[ScoreAggregator] = None,
        normalizer: Optional[FinalScoreNormalizer] = None,
    ):
        self.taxonomy = taxonomy
        self.skill_score_repo = skill_score_repo
        self.evaluation_repo = evaluation_repo
        self.mapper = AIResultMapper(taxonomy)
        self.aggregator = aggregator or ScoreAggregator(taxonomy)
        self.normalizer = normalizer or FinalScoreNormalizer()
        self.selector = CriticalSkillsSelector(taxonomy)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def map_analysis(self, analysis: AnalysisInput) -> Dict[str, MappedEntry]:
        """Parse raw model text if needed, then map keys to skill ids."""
        if analysis is None:
            return {}
        if isinstance(analysis, str):
            analysis = parse_analysis_response(analysis)
        return self.mapper.map_ai_results(analysis)

    def get_evaluation_scores(
        self,
        evaluation_id: Any,
        analysis: AnalysisInput = None,
    ) -> EvaluationScores:
        """
        Category summaries and final score for an evaluation.

        Args:
            evaluation_id: Evaluation identifier
            analysis: Optional AI analysis that has not been committed yet

        Raises:
            EntityNotFoundException: evaluation does not exist
        """
        stored_divider = self.evaluation_repo.get_custom_divider(evaluation_id)
        rows = self.skill_score_repo.get_by_evaluation_id(evaluation_id)
        mapped = self.map_analysis(analysis)

        summaries = self.aggregator.aggregate(rows, mapped)
        final = self.normalizer.compute(summaries, stored_divider)

        logger.info(
            f"Scored evaluation {evaluation_id}: {len(rows)} rows, "
            f"{len(mapped)} fresh AI entries, final={final.score_calculation}"
        )
        return EvaluationScores(
            evaluation_id=str(evaluation_id),
            summaries=summaries,
            final=final,
            mapped_entries=mapped,
        )

    def preview_analysis(self, evaluation_id: Any, analysis: AnalysisInput) -> EvaluationScores:
        """Merge a fresh AI analysis into the current scores without writing."""
        return self.get_evaluation_scores(evaluation_id, analysis)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _recompute_and_store(self, evaluation_id: Any) -> EvaluationScores:
        scores = self.get_evaluation_scores(evaluation_id)
        final = scores.final
        self.evaluation_repo.update_final_score(
            evaluation_id,
            final_score=float(final.final_score),
            total_points=float(final.total_raw_points),
            max_potential_points=float(final.total_max_possible),
        )
        return scores

    def commit_ai_analysis(self, evaluation_id: Any, analysis: AnalysisInput) -> EvaluationScores:
        """
        Persist an AI analysis pass as automated skill score rows.

        Coach overrides already stored in ADJUSTED_SCORE are kept.

        Raises:
            AIResponseParseError: raw text could not be parsed
            ValueError: nothing in the analysis maps to a known skill
            EntityNotFoundException: evaluation does not exist
        """
        self.evaluation_repo.get_or_raise(evaluation_id)
        mapped = self.map_analysis(analysis)
        if not mapped:
            raise ValueError("AI analysis contains no entries for known skills")

        by_skill: Dict[int, MappedEntry] = {}
        for entry in sorted(mapped.values(), key=lambda e: (e.skill_id, e.key)):
            by_skill.setdefault(entry.skill_id, entry)

        rows = []
        for skill_id, entry in by_skill.items():
            definition = self.taxonomy.lookup(skill_id)
            rows.append({
                "skill_id": skill_id,
                "score": float(entry.score),
                "weight": float(definition.weight),
                "max_score": float(definition.max_score),
            })

        written = self.skill_score_repo.upsert_ai_scores(evaluation_id, rows)
        scores = self._recompute_and_store(evaluation_id)
        scores.mapped_entries = mapped
        scores.rows_written = written
        return scores

    def save_scores(
        self,
        evaluation_id: Any,
        scores: Iterable[Dict[str, Any]],
    ) -> EvaluationScores:
        """
        Upsert coach-entered skill scores and refresh the final score.

        Rows whose skill id falls outside every category are skipped and
        reported back in skipped_skill_ids.
        """
        self.evaluation_repo.get_or_raise(evaluation_id)

        accepted: List[Dict[str, Any]] = []
        skipped: List[Any] = []
        for score in scores:
            raw_id = score.get("skill_id")
            skill_id = coerce_skill_id(raw_id)
            if skill_id is None or self.taxonomy.classify(skill_id) == UNKNOWN_CATEGORY:
                skipped.append(raw_id)
                continue
            definition = self.taxonomy.lookup(skill_id)
            weight = score.get("weight")
            max_score = score.get("max_score")
            accepted.append({
                "skill_id": skill_id,
                "actual_score": score.get("actual_score"),
                "adjusted_score": score.get("adjusted_score"),
                "weight": weight if weight is not None else float(definition.weight),
                "max_score": max_score if max_score is not None else float(definition.max_score),
            })

        if skipped:
            logger.warning(f"Skipped {len(skipped)} unknown skill ids for evaluation {evaluation_id}: {skipped}")

        written = self.skill_score_repo.upsert_manual_scores(evaluation_id, accepted) if accepted else 0
        result = self._recompute_and_store(evaluation_id)
        result.skipped_skill_ids = skipped
        result.rows_written = written
        return result

    def update_divider(self, evaluation_id: Any, divider: Any) -> EvaluationScores:
        """
        Store a custom divider and the final score it produces.

        The divider is validated before any repository call. Individual
        skill scores are never modified.

        Raises:
            DividerValidationError: divider is not a finite number > 0
            EntityNotFoundException: evaluation does not exist
        """
        value = validate_divider(divider)

        rows = self.skill_score_repo.get_by_evaluation_id(evaluation_id)
        summaries = self.aggregator.aggregate(rows)
        final = self.normalizer.compute(summaries, value)

        self.evaluation_repo.update_divider(
            evaluation_id,
            divider=float(value),
            final_score=float(final.final_score),
            total_points=float(final.total_raw_points),
            max_potential_points=float(final.total_max_possible),
        )
        logger.info(f"Divider for evaluation {evaluation_id} set to {value}: {final.score_calculation}")
        return EvaluationScores(
            evaluation_id=str(evaluation_id),
            summaries=summaries,
            final=final,
        )

    # ------------------------------------------------------------------
    # Critical skills
    # ------------------------------------------------------------------

    def get_critical_skills(self, evaluation_id: Any) -> CriticalSkillsResult:
        skill_ids = self.evaluation_repo.get_critical_skills(evaluation_id)
        return self.selector.classify_selections(skill_ids)

    def update_critical_skills(self, evaluation_id: Any, skill_ids: Iterable[Any]) -> CriticalSkillsResult:
        """Store the coach's selection (known ids only) and return the split."""
        normalized = self.selector.normalize_selection(skill_ids)
        self.evaluation_repo.update_critical_skills(evaluation_id, normalized)
        return self.selector.classify_selections(normalized)
