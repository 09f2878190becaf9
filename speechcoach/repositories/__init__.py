"""
Repositories Package - Speech Coach Scoring Engine
speechcoach/repositories/__init__.py

Data access layer for Snowflake database operations.
"""

from speechcoach.repositories.base import BaseRepository
from speechcoach.repositories.evaluation_repository import EvaluationRepository
from speechcoach.repositories.skill_score_repository import SkillScoreRepository

__all__ = [
    "BaseRepository",
    "EvaluationRepository",
    "SkillScoreRepository",
]
