"""
Evaluation Scoring API Router
speechcoach/routers/evaluations.py

Endpoints:
  GET  /api/v1/evaluations/{id}/scores             - Category summaries + final score
  POST /api/v1/evaluations/{id}/scores             - Coach-entered skill scores
  POST /api/v1/evaluations/{id}/analysis/preview   - Merge a fresh AI analysis, no writes
  POST /api/v1/evaluations/{id}/analysis/commit    - Persist an AI analysis pass
  PUT  /api/v1/evaluations/{id}/divider            - Set the custom divider
  GET  /api/v1/evaluations/{id}/critical-skills    - Strengths / improvements split
  PUT  /api/v1/evaluations/{id}/critical-skills    - Replace critical skill selection
"""

import logging
from datetime import datetime, timezone
from typing import NoReturn
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from speechcoach.core.dependencies import get_scoring_service
from speechcoach.core.exceptions import (
    AIResponseParseError,
    DatabaseConnectionException,
    DividerValidationError,
    EntityNotFoundException,
    RepositoryException,
)
from speechcoach.models.scoring import (
    AnalysisRequest,
    CategorySummaryResponse,
    CriticalSkillItem,
    CriticalSkillsResponse,
    CriticalSkillsUpdateRequest,
    DividerUpdateRequest,
    EvaluationScoresResponse,
    FinalScoreResponse,
    MappedEntryResponse,
    SaveScoresRequest,
)
from speechcoach.scoring.critical_skills import CriticalSkillsResult
from speechcoach.services.scoring_service import EvaluationScores, ScoringService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Evaluation Scoring"])


# =====================================================================
# Helpers
# =====================================================================

def _raise(status_code: int, error: str, message: str) -> NoReturn:
    raise HTTPException(
        status_code=status_code,
        detail={
            "error": error,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


def _raise_for(exc: Exception) -> NoReturn:
    """Translate service-layer exceptions into HTTP errors."""
    if isinstance(exc, EntityNotFoundException):
        _raise(status.HTTP_404_NOT_FOUND, "Not Found", str(exc))
    if isinstance(exc, (DividerValidationError, AIResponseParseError)):
        _raise(status.HTTP_400_BAD_REQUEST, "Bad Request", exc.message)
    if isinstance(exc, ValueError):
        _raise(status.HTTP_400_BAD_REQUEST, "Bad Request", str(exc))
    if isinstance(exc, DatabaseConnectionException):
        _raise(status.HTTP_503_SERVICE_UNAVAILABLE, "Service Unavailable", str(exc))
    if isinstance(exc, RepositoryException):
        _raise(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error", str(exc))
    logger.exception(f"Unexpected scoring error: {exc}")
    _raise(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal Server Error",
        f"Scoring failed due to server error: {exc}",
    )


def _scores_response(scores: EvaluationScores) -> EvaluationScoresResponse:
    return EvaluationScoresResponse(
        evaluation_id=scores.evaluation_id,
        categories=[CategorySummaryResponse(**s.to_dict()) for s in scores.summaries.values()],
        final=FinalScoreResponse(**scores.final.to_dict()),
        mapped_entries=[
            MappedEntryResponse(
                key=e.key,
                score=float(e.score),
                skill_id=e.skill_id,
                skill_name=e.skill_name,
                metadata=e.metadata,
            )
            for e in scores.mapped_entries.values()
        ],
        skipped_skill_ids=scores.skipped_skill_ids,
        rows_written=scores.rows_written,
    )


def _critical_response(evaluation_id: UUID, result: CriticalSkillsResult) -> CriticalSkillsResponse:
    return CriticalSkillsResponse(
        evaluation_id=str(evaluation_id),
        skill_ids=result.skill_ids,
        strengths=[CriticalSkillItem(**s.to_dict()) for s in result.strengths],
        improvements=[CriticalSkillItem(**s.to_dict()) for s in result.improvements],
    )


# =====================================================================
# Scores
# =====================================================================

@router.get(
    "/evaluations/{id}/scores",
    response_model=EvaluationScoresResponse,
    summary="Get evaluation scores",
    description="Per-category summaries and the final score on the 110-point scale.",
)
async def get_evaluation_scores(
    id: UUID,
    service: ScoringService = Depends(get_scoring_service),
) -> EvaluationScoresResponse:
    try:
        return _scores_response(service.get_evaluation_scores(id))
    except Exception as e:
        _raise_for(e)


@router.post(
    "/evaluations/{id}/scores",
    response_model=EvaluationScoresResponse,
    summary="Save coach scores",
    description="Upserts coach-entered skill scores (last write wins) and refreshes the final score.",
)
async def save_scores(
    id: UUID,
    request: SaveScoresRequest,
    service: ScoringService = Depends(get_scoring_service),
) -> EvaluationScoresResponse:
    try:
        scores = service.save_scores(id, [s.model_dump() for s in request.scores])
        return _scores_response(scores)
    except Exception as e:
        _raise_for(e)


# =====================================================================
# AI analysis
# =====================================================================

@router.post(
    "/evaluations/{id}/analysis/preview",
    response_model=EvaluationScoresResponse,
    summary="Preview an AI language analysis",
    description="Merges a fresh AI analysis with persisted scores. Persisted scores win; nothing is written.",
)
async def preview_analysis(
    id: UUID,
    request: AnalysisRequest,
    service: ScoringService = Depends(get_scoring_service),
) -> EvaluationScoresResponse:
    try:
        return _scores_response(service.preview_analysis(id, request.payload))
    except Exception as e:
        _raise_for(e)


@router.post(
    "/evaluations/{id}/analysis/commit",
    response_model=EvaluationScoresResponse,
    summary="Commit an AI language analysis",
    description="Stores mapped AI scores as automated rows. Coach overrides are kept.",
)
async def commit_analysis(
    id: UUID,
    request: AnalysisRequest,
    service: ScoringService = Depends(get_scoring_service),
) -> EvaluationScoresResponse:
    try:
        return _scores_response(service.commit_ai_analysis(id, request.payload))
    except Exception as e:
        _raise_for(e)


# =====================================================================
# Divider
# =====================================================================

@router.put(
    "/evaluations/{id}/divider",
    response_model=EvaluationScoresResponse,
    summary="Set custom divider",
    description="""
    Stores an admin-chosen divider and the final score it produces:

    ```
    final_score = total_raw_points / divider
    ```

    Rejected with 400 when the divider is not a finite number greater than zero.
    """,
)
async def update_divider(
    id: UUID,
    request: DividerUpdateRequest,
    service: ScoringService = Depends(get_scoring_service),
) -> EvaluationScoresResponse:
    try:
        return _scores_response(service.update_divider(id, request.divider))
    except Exception as e:
        _raise_for(e)


# =====================================================================
# Critical skills
# =====================================================================

@router.get(
    "/evaluations/{id}/critical-skills",
    response_model=CriticalSkillsResponse,
    summary="Get critical skills",
)
async def get_critical_skills(
    id: UUID,
    service: ScoringService = Depends(get_scoring_service),
) -> CriticalSkillsResponse:
    try:
        return _critical_response(id, service.get_critical_skills(id))
    except Exception as e:
        _raise_for(e)


@router.put(
    "/evaluations/{id}/critical-skills",
    response_model=CriticalSkillsResponse,
    summary="Replace critical skills",
    description="Stores the selected skill ids. Unknown ids are dropped and duplicates collapsed.",
)
async def update_critical_skills(
    id: UUID,
    request: CriticalSkillsUpdateRequest,
    service: ScoringService = Depends(get_scoring_service),
) -> CriticalSkillsResponse:
    try:
        return _critical_response(id, service.update_critical_skills(id, request.skill_ids))
    except Exception as e:
        _raise_for(e)
