# tests/conftest.py

"""
Pytest Fixtures - Shared test configurations and data for the scoring engine

SAMPLE DATA REFERENCE:
- Evaluation:   e1000000-0000-0000-0000-000000000001
- Skill 1:      Swaying (Nervousness, bad)
- Skill 7:      Register / Pitch (Voice, good)
- Skill 88:     Filler words (Language, bad)
- Skill 95:     Tricolon (Language, good)
"""

import pytest
from unittest.mock import MagicMock
from fastapi.testclient import TestClient

from speechcoach.core.dependencies import get_scoring_service
from speechcoach.main import app
from speechcoach.repositories.evaluation_repository import EvaluationRepository
from speechcoach.repositories.skill_score_repository import SkillScoreRepository
from speechcoach.scoring.aggregator import ScoreAggregator
from speechcoach.scoring.ai_mapper import AIResultMapper
from speechcoach.scoring.critical_skills import CriticalSkillsSelector
from speechcoach.scoring.normalizer import FinalScoreNormalizer
from speechcoach.scoring.taxonomy import load_default_taxonomy
from speechcoach.services.scoring_service import ScoringService


# =============================================================================
# ENGINE FIXTURES
# =============================================================================

@pytest.fixture
def taxonomy():
    return load_default_taxonomy()


@pytest.fixture
def mapper(taxonomy):
    return AIResultMapper(taxonomy)


@pytest.fixture
def aggregator(taxonomy):
    return ScoreAggregator(taxonomy)


@pytest.fixture
def normalizer():
    return FinalScoreNormalizer()


@pytest.fixture
def selector(taxonomy):
    return CriticalSkillsSelector(taxonomy)


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

@pytest.fixture
def sample_evaluation_id():
    return "e1000000-0000-0000-0000-000000000001"


@pytest.fixture
def scenario_a_rows(sample_evaluation_id):
    """Skill 1 (bad) scored -4, skill 7 (good) scored 8."""
    return [
        {
            "evaluation_id": sample_evaluation_id,
            "skill_id": 1,
            "actual_score": -4.0,
            "adjusted_score": None,
            "weight": 1.0,
            "max_score": 10.0,
            "is_automated": False,
        },
        {
            "evaluation_id": sample_evaluation_id,
            "skill_id": 7,
            "actual_score": 8.0,
            "adjusted_score": None,
            "weight": 1.0,
            "max_score": 10.0,
            "is_automated": False,
        },
    ]


@pytest.fixture
def sample_analysis():
    """AI language analysis as returned by the model."""
    return {
        "analysis": {
            "tricolon": {"score": 6, "words": ["veni, vidi, vici"], "explanation": "Clear triple"},
            "filler_language": {"score": 3, "frequency": 12},
            "not_a_skill": {"score": 9},
        }
    }


# =============================================================================
# SERVICE FIXTURES (repositories mocked, no Snowflake)
# =============================================================================

@pytest.fixture
def skill_score_repo():
    repo = MagicMock(spec=SkillScoreRepository)
    repo.get_by_evaluation_id.return_value = []
    repo.upsert_manual_scores.side_effect = lambda eval_id, rows: len(list(rows))
    repo.upsert_ai_scores.side_effect = lambda eval_id, rows: len(list(rows))
    return repo


@pytest.fixture
def evaluation_repo(sample_evaluation_id):
    repo = MagicMock(spec=EvaluationRepository)
    repo.get_or_raise.return_value = {"id": sample_evaluation_id, "custom_divider": None}
    repo.get_custom_divider.return_value = None
    repo.get_critical_skills.return_value = []
    return repo


@pytest.fixture
def scoring_service(taxonomy, skill_score_repo, evaluation_repo):
    return ScoringService(
        taxonomy=taxonomy,
        skill_score_repo=skill_score_repo,
        evaluation_repo=evaluation_repo,
    )


# =============================================================================
# FASTAPI TEST CLIENT FIXTURE
# =============================================================================

@pytest.fixture
def client(scoring_service):
    """TestClient with the scoring service wired to mocked repositories."""
    app.dependency_overrides[get_scoring_service] = lambda: scoring_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
