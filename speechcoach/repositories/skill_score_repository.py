"""
Skill Score Repository - Speech Coach Scoring Engine
speechcoach/repositories/skill_score_repository.py

Data access layer for per-skill scores of an evaluation.

Table SKILL_SCORES:
  - ID              VARCHAR(36) PRIMARY KEY
  - EVALUATION_ID   VARCHAR(36) NOT NULL
  - SKILL_ID        INT NOT NULL
  - ACTUAL_SCORE    FLOAT            (coach or committed AI score)
  - ADJUSTED_SCORE  FLOAT            (coach override)
  - WEIGHT          FLOAT DEFAULT 1.0
  - MAX_SCORE       FLOAT DEFAULT 10
  - IS_AUTOMATED    BOOLEAN DEFAULT FALSE
  - CREATED_AT / UPDATED_AT TIMESTAMP_NTZ
  - UNIQUE (EVALUATION_ID, SKILL_ID)

All writes are MERGE statements keyed on (EVALUATION_ID, SKILL_ID), so
concurrent writers for one skill resolve as last write wins.
"""

import logging
from typing import Any, Dict, Iterable, List
from uuid import UUID, uuid4

from speechcoach.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class SkillScoreRepository(BaseRepository):
    """Repository for SKILL_SCORES reads and upserts."""

    TABLE_NAME = "SKILL_SCORES"

    _SELECT_COLUMNS = """
        ID, EVALUATION_ID, SKILL_ID, ACTUAL_SCORE, ADJUSTED_SCORE,
        WEIGHT, MAX_SCORE, IS_AUTOMATED, CREATED_AT, UPDATED_AT
    """

    # Coach entry: every column the coach sends replaces the stored value
    _MERGE_MANUAL_SQL = """
        MERGE INTO SKILL_SCORES t
        USING (SELECT %s AS EVALUATION_ID, %s AS SKILL_ID) s
        ON t.EVALUATION_ID = s.EVALUATION_ID AND t.SKILL_ID = s.SKILL_ID
        WHEN MATCHED THEN UPDATE SET
            ACTUAL_SCORE = %s,
            ADJUSTED_SCORE = %s,
            WEIGHT = %s,
            MAX_SCORE = %s,
            IS_AUTOMATED = FALSE,
            UPDATED_AT = CURRENT_TIMESTAMP()
        WHEN NOT MATCHED THEN INSERT (
            ID, EVALUATION_ID, SKILL_ID, ACTUAL_SCORE, ADJUSTED_SCORE,
            WEIGHT, MAX_SCORE, IS_AUTOMATED, CREATED_AT, UPDATED_AT
        ) VALUES (
            %s, %s, %s, %s, %s,
            %s, %s, FALSE, CURRENT_TIMESTAMP(), CURRENT_TIMESTAMP()
        )
    """

    # AI commit: replaces ACTUAL_SCORE only, coach overrides survive
    _MERGE_AI_SQL = """
        MERGE INTO SKILL_SCORES t
        USING (SELECT %s AS EVALUATION_ID, %s AS SKILL_ID) s
        ON t.EVALUATION_ID = s.EVALUATION_ID AND t.SKILL_ID = s.SKILL_ID
        WHEN MATCHED THEN UPDATE SET
            ACTUAL_SCORE = %s,
            IS_AUTOMATED = TRUE,
            UPDATED_AT = CURRENT_TIMESTAMP()
        WHEN NOT MATCHED THEN INSERT (
            ID, EVALUATION_ID, SKILL_ID, ACTUAL_SCORE, ADJUSTED_SCORE,
            WEIGHT, MAX_SCORE, IS_AUTOMATED, CREATED_AT, UPDATED_AT
        ) VALUES (
            %s, %s, %s, %s, NULL,
            %s, %s, TRUE, CURRENT_TIMESTAMP(), CURRENT_TIMESTAMP()
        )
    """

    def get_by_evaluation_id(self, evaluation_id: UUID) -> List[Dict[str, Any]]:
        """
        Retrieve all skill score rows for an evaluation.

        Args:
            evaluation_id: UUID of the evaluation

        Returns:
            List of skill score dicts ordered by skill id
        """
        sql = f"""
            SELECT {self._SELECT_COLUMNS}
            FROM SKILL_SCORES
            WHERE EVALUATION_ID = %s
            ORDER BY SKILL_ID
        """
        rows = self.execute_query(sql, (str(evaluation_id),), fetch_all=True) or []
        return [self._row_to_dict(row) for row in rows]

    def upsert_manual_scores(
        self,
        evaluation_id: UUID,
        scores: Iterable[Dict[str, Any]],
    ) -> int:
        """
        Upsert coach-entered rows.

        Args:
            evaluation_id: UUID of the evaluation
            scores: Dicts with skill_id, actual_score, adjusted_score,
                    weight, max_score

        Returns:
            Number of rows written
        """
        eval_id = str(evaluation_id)
        params = []
        for score in scores:
            values = (
                score.get("actual_score"),
                score.get("adjusted_score"),
                score.get("weight"),
                score.get("max_score"),
            )
            params.append((
                eval_id, score["skill_id"],
                # UPDATE values
                *values,
                # INSERT values
                str(uuid4()), eval_id, score["skill_id"], *values,
            ))

        try:
            count = self.execute_many(self._MERGE_MANUAL_SQL, params)
        except Exception as e:
            logger.error(f"Failed to upsert manual scores for evaluation {eval_id}: {e}")
            raise
        logger.info(f"Upserted {count} manual skill scores for evaluation {eval_id}")
        return count

    def upsert_ai_scores(
        self,
        evaluation_id: UUID,
        scores: Iterable[Dict[str, Any]],
    ) -> int:
        """
        Persist a committed AI analysis pass.

        Args:
            evaluation_id: UUID of the evaluation
            scores: Dicts with skill_id, score, weight, max_score

        Returns:
            Number of rows written
        """
        eval_id = str(evaluation_id)
        params = [
            (
                eval_id, score["skill_id"],
                # UPDATE values
                score["score"],
                # INSERT values
                str(uuid4()), eval_id, score["skill_id"], score["score"],
                score.get("weight"), score.get("max_score"),
            )
            for score in scores
        ]

        try:
            count = self.execute_many(self._MERGE_AI_SQL, params)
        except Exception as e:
            logger.error(f"Failed to upsert AI scores for evaluation {eval_id}: {e}")
            raise
        logger.info(f"Upserted {count} AI skill scores for evaluation {eval_id}")
        return count

    def _row_to_dict(self, row: Dict[str, Any]) -> Dict[str, Any]:
        data = self.row_to_dict(row)
        for column in ("actual_score", "adjusted_score", "weight", "max_score"):
            data[column] = self.to_float(data.get(column))
        if data.get("skill_id") is not None:
            data["skill_id"] = int(data["skill_id"])
        data["is_automated"] = bool(data.get("is_automated"))
        return data
