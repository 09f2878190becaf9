"""
Evaluation Repository - Speech Coach Scoring Engine
speechcoach/repositories/evaluation_repository.py

Data access layer for evaluation-level scoring state: custom divider,
persisted final score and critical skill selections.

Table EVALUATIONS (scoring columns):
  - ID                    VARCHAR(36) PRIMARY KEY
  - CUSTOM_DIVIDER        FLOAT
  - FINAL_SCORE           FLOAT
  - TOTAL_POINTS          FLOAT
  - MAX_POTENTIAL_POINTS  FLOAT
  - CRITICAL_SKILLS       ARRAY
  - UPDATED_AT            TIMESTAMP_NTZ
"""

import json
import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from speechcoach.core.exceptions import EntityNotFoundException
from speechcoach.repositories.base import BaseRepository
from speechcoach.scoring.taxonomy import coerce_skill_id

logger = logging.getLogger(__name__)


class EvaluationRepository(BaseRepository):
    """Repository for evaluation scoring state."""

    TABLE_NAME = "EVALUATIONS"
    ENTITY_TYPE = "Evaluation"

    def get_by_id(self, evaluation_id: UUID) -> Optional[Dict[str, Any]]:
        """
        Retrieve an evaluation's scoring columns.

        Returns:
            Evaluation dict or None if not found
        """
        sql = """
            SELECT ID, CUSTOM_DIVIDER, FINAL_SCORE, TOTAL_POINTS,
                   MAX_POTENTIAL_POINTS, CRITICAL_SKILLS, UPDATED_AT
            FROM EVALUATIONS
            WHERE ID = %s
        """
        row = self.execute_query(sql, (str(evaluation_id),), fetch_one=True)
        if not row:
            return None
        return self._row_to_dict(row)

    def get_or_raise(self, evaluation_id: UUID) -> Dict[str, Any]:
        evaluation = self.get_by_id(evaluation_id)
        if evaluation is None:
            raise EntityNotFoundException(self.ENTITY_TYPE, str(evaluation_id))
        return evaluation

    def get_custom_divider(self, evaluation_id: UUID) -> Optional[float]:
        """Stored custom divider, or None when the default applies."""
        return self.get_or_raise(evaluation_id).get("custom_divider")

    def update_divider(
        self,
        evaluation_id: UUID,
        divider: float,
        final_score: float,
        total_points: float,
        max_potential_points: float,
    ) -> None:
        """Persist a new custom divider together with the recomputed final score."""
        sql = """
            UPDATE EVALUATIONS
            SET CUSTOM_DIVIDER = %s,
                FINAL_SCORE = %s,
                TOTAL_POINTS = %s,
                MAX_POTENTIAL_POINTS = %s,
                UPDATED_AT = CURRENT_TIMESTAMP()
            WHERE ID = %s
        """
        params = (divider, final_score, total_points, max_potential_points, str(evaluation_id))
        updated = self.execute_query(sql, params, commit=True)
        if not updated:
            raise EntityNotFoundException(self.ENTITY_TYPE, str(evaluation_id))
        logger.info(f"Updated divider for evaluation {evaluation_id}: {divider}")

    def update_final_score(
        self,
        evaluation_id: UUID,
        final_score: float,
        total_points: float,
        max_potential_points: float,
    ) -> None:
        """Persist a recomputed final score, leaving the divider untouched."""
        sql = """
            UPDATE EVALUATIONS
            SET FINAL_SCORE = %s,
                TOTAL_POINTS = %s,
                MAX_POTENTIAL_POINTS = %s,
                UPDATED_AT = CURRENT_TIMESTAMP()
            WHERE ID = %s
        """
        params = (final_score, total_points, max_potential_points, str(evaluation_id))
        updated = self.execute_query(sql, params, commit=True)
        if not updated:
            raise EntityNotFoundException(self.ENTITY_TYPE, str(evaluation_id))

    def get_critical_skills(self, evaluation_id: UUID) -> List[int]:
        return self.get_or_raise(evaluation_id).get("critical_skills") or []

    def update_critical_skills(self, evaluation_id: UUID, skill_ids: List[int]) -> None:
        """Replace the stored critical skill id list."""
        sql = """
            UPDATE EVALUATIONS
            SET CRITICAL_SKILLS = PARSE_JSON(%s),
                UPDATED_AT = CURRENT_TIMESTAMP()
            WHERE ID = %s
        """
        updated = self.execute_query(
            sql, (json.dumps(list(skill_ids)), str(evaluation_id)), commit=True
        )
        if not updated:
            raise EntityNotFoundException(self.ENTITY_TYPE, str(evaluation_id))
        logger.info(f"Stored {len(skill_ids)} critical skills for evaluation {evaluation_id}")

    def _row_to_dict(self, row: Dict[str, Any]) -> Dict[str, Any]:
        data = self.row_to_dict(row)
        for column in ("custom_divider", "final_score", "total_points", "max_potential_points"):
            data[column] = self.to_float(data.get(column))
        data["critical_skills"] = self._parse_critical_skills(data.get("id"), data.get("critical_skills"))
        return data

    def _parse_critical_skills(self, evaluation_id: Any, raw: Any) -> List[int]:
        """Stored selections as int ids; unreadable entries are dropped, not raised."""
        try:
            skills = self.parse_variant(raw)
        except ValueError:
            logger.warning(f"Unreadable CRITICAL_SKILLS for evaluation {evaluation_id}")
            return []
        if not isinstance(skills, list):
            return []
        ids = []
        for entry in skills:
            skill_id = coerce_skill_id(entry)
            if skill_id is None:
                logger.warning(f"Dropping critical skill entry {entry!r} for evaluation {evaluation_id}")
                continue
            ids.append(skill_id)
        return ids
