"""
Skill Taxonomy API Router
speechcoach/routers/skills.py

Endpoints:
  GET /api/v1/skills             - Full catalogue grouped by category range
  GET /api/v1/skills/{skill_id}  - One skill with its range category
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status

from speechcoach.core.dependencies import get_taxonomy
from speechcoach.models.scoring import SkillCategoryGroup, SkillResponse, TaxonomyResponse
from speechcoach.scoring.taxonomy import CATEGORY_RANGES, SkillDefinition, SkillTaxonomy, classify

router = APIRouter(prefix="/api/v1", tags=["Skills"])


def _to_response(definition: SkillDefinition) -> SkillResponse:
    category = classify(definition.id)
    return SkillResponse(
        id=definition.id,
        name=definition.name,
        is_good_skill=definition.is_good_skill,
        category=getattr(category, "value", category),
        listed_category=definition.listed_category.value,
        max_score=float(definition.max_score),
        weight=float(definition.weight),
    )


@router.get(
    "/skills",
    response_model=TaxonomyResponse,
    summary="List the skill catalogue",
    description="All skills grouped by the id range that determines their scoring category.",
)
async def list_skills(taxonomy: SkillTaxonomy = Depends(get_taxonomy)) -> TaxonomyResponse:
    groups = []
    for category, low, high in CATEGORY_RANGES:
        skills = [
            _to_response(d) for d in taxonomy.all_skills()
            if low <= d.id <= high
        ]
        groups.append(SkillCategoryGroup(category=category.value, id_range=[low, high], skills=skills))
    return TaxonomyResponse(categories=groups, total_skills=len(taxonomy))


@router.get(
    "/skills/{skill_id}",
    response_model=SkillResponse,
    summary="Get one skill",
)
async def get_skill(
    skill_id: int,
    taxonomy: SkillTaxonomy = Depends(get_taxonomy),
) -> SkillResponse:
    definition = taxonomy.lookup(skill_id)
    if definition is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "error": "Not Found",
                "message": f"Skill with ID {skill_id} not found",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )
    return _to_response(definition)
