from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Any, Dict, List, Optional, Union


# ---------------------------------------------------------------------------
# Skill taxonomy
# ---------------------------------------------------------------------------

class SkillResponse(BaseModel):
    """
    One skill from the catalogue.
    """

    id: int = Field(..., ge=1, le=110, description="Skill identifier")
    name: str
    is_good_skill: bool = Field(..., description="Good skills score 0..+max, bad skills -max..0")
    category: str = Field(..., description="Category by id range, or 'Unknown'")
    listed_category: str = Field(..., description="Category list the skill is shipped under")
    max_score: float
    weight: float


class SkillCategoryGroup(BaseModel):
    category: str
    id_range: List[int] = Field(..., min_length=2, max_length=2)
    skills: List[SkillResponse]


class TaxonomyResponse(BaseModel):
    categories: List[SkillCategoryGroup]
    total_skills: int


# ---------------------------------------------------------------------------
# Scores
# ---------------------------------------------------------------------------

class SkillScoreInput(BaseModel):
    """
    Coach-entered score for one skill.
    """

    skill_id: int = Field(..., description="Skill identifier (1-110)")
    actual_score: Optional[float] = Field(default=None, description="Original score")
    adjusted_score: Optional[float] = Field(default=None, description="Coach override; wins over actual_score")
    weight: Optional[float] = Field(default=None, gt=0, description="Defaults to the skill's weight")
    max_score: Optional[float] = Field(default=None, gt=0, description="Defaults to the skill's max score")

    @field_validator("actual_score", "adjusted_score")
    @classmethod
    def validate_finite(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and (v != v or v in (float("inf"), float("-inf"))):
            raise ValueError("Score must be a finite number")
        return v


class SaveScoresRequest(BaseModel):
    scores: List[SkillScoreInput] = Field(..., min_length=1)


class CategorySummaryResponse(BaseModel):
    category: str
    score: float = Field(..., description="raw_points / max_possible x 100")
    count: int
    max_possible: float
    raw_points: float


class FinalScoreResponse(BaseModel):
    final_score: float
    total_raw_points: float
    total_max_possible: float
    divider: Optional[float] = None
    divider_source: str
    max_possible_score: float
    score_calculation: str
    out_of_range: bool
    band: str
    band_color: str
    band_level: int


class MappedEntryResponse(BaseModel):
    key: str
    score: float
    skill_id: int
    skill_name: str
    metadata: Dict[str, Any] = Field(default_factory=dict)


class EvaluationScoresResponse(BaseModel):
    evaluation_id: str
    categories: List[CategorySummaryResponse]
    final: FinalScoreResponse
    mapped_entries: List[MappedEntryResponse] = Field(default_factory=list)
    skipped_skill_ids: List[Any] = Field(default_factory=list)
    rows_written: int = 0


# ---------------------------------------------------------------------------
# AI analysis
# ---------------------------------------------------------------------------

class AnalysisRequest(BaseModel):
    """
    Language analysis produced by the AI model.

    Either the parsed analysis object or the raw model text (which may be
    wrapped in a ```json fenced block).
    """

    analysis: Optional[Dict[str, Any]] = None
    raw_response: Optional[str] = None

    @model_validator(mode="after")
    def validate_one_source(self) -> "AnalysisRequest":
        if (self.analysis is None) == (self.raw_response is None):
            raise ValueError("Provide exactly one of 'analysis' or 'raw_response'")
        return self

    @property
    def payload(self) -> Union[str, Dict[str, Any]]:
        return self.raw_response if self.raw_response is not None else self.analysis


# ---------------------------------------------------------------------------
# Divider
# ---------------------------------------------------------------------------

class DividerUpdateRequest(BaseModel):
    """
    Admin-set divider. Validated by the scoring engine so the response can
    distinguish "not a number" from "not greater than zero".
    """

    divider: Any = Field(..., description="Custom divider, must be a finite number > 0")


# ---------------------------------------------------------------------------
# Critical skills
# ---------------------------------------------------------------------------

class CriticalSkillsUpdateRequest(BaseModel):
    skill_ids: List[int] = Field(default_factory=list)


class CriticalSkillItem(BaseModel):
    id: int
    name: str
    category: str


class CriticalSkillsResponse(BaseModel):
    evaluation_id: str
    skill_ids: List[int]
    strengths: List[CriticalSkillItem]
    improvements: List[CriticalSkillItem]
