"""
Dependencies - Speech Coach Scoring Engine
speechcoach/core/dependencies.py

FastAPI dependency injection for the taxonomy, repositories and scoring service.
"""

from decimal import Decimal
from functools import lru_cache

from speechcoach.config import get_settings
from speechcoach.repositories.evaluation_repository import EvaluationRepository
from speechcoach.repositories.skill_score_repository import SkillScoreRepository
from speechcoach.scoring.aggregator import ScoreAggregator
from speechcoach.scoring.normalizer import FinalScoreNormalizer
from speechcoach.scoring.taxonomy import SkillTaxonomy, load_default_taxonomy
from speechcoach.services.scoring_service import ScoringService


def get_taxonomy() -> SkillTaxonomy:
    """Get the shipped skill taxonomy (built once per process)."""
    return load_default_taxonomy()


@lru_cache()
def get_skill_score_repository() -> SkillScoreRepository:
    """Get cached SkillScoreRepository instance."""
    return SkillScoreRepository()


@lru_cache()
def get_evaluation_repository() -> EvaluationRepository:
    """Get cached EvaluationRepository instance."""
    return EvaluationRepository()


@lru_cache()
def get_scoring_service() -> ScoringService:
    """Get cached ScoringService wired with configured scoring defaults."""
    settings = get_settings()
    taxonomy = get_taxonomy()
    return ScoringService(
        taxonomy=taxonomy,
        skill_score_repo=get_skill_score_repository(),
        evaluation_repo=get_evaluation_repository(),
        aggregator=ScoreAggregator(
            taxonomy,
            default_max_score=Decimal(str(settings.DEFAULT_SKILL_MAX_SCORE)),
            default_weight=Decimal(str(settings.DEFAULT_SKILL_WEIGHT)),
        ),
        normalizer=FinalScoreNormalizer(scale=Decimal(str(settings.FINAL_SCORE_SCALE))),
    )
