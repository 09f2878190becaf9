"""
Critical Skills Selector
speechcoach/scoring/critical_skills.py

A coach flags a handful of skills as critical for a student. Only the flat
id list is stored; the split into strengths (good skills) and areas for
improvement (bad skills) is derived from the taxonomy on every read.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Set

import structlog

from speechcoach.scoring.taxonomy import SkillTaxonomy

logger = structlog.get_logger(__name__)


@dataclass
class CriticalSkill:
    id: int
    name: str
    category: str        # range category, or "Unknown"

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "category": self.category}


@dataclass
class CriticalSkillsResult:
    strengths: List[CriticalSkill] = field(default_factory=list)
    improvements: List[CriticalSkill] = field(default_factory=list)

    @property
    def skill_ids(self) -> List[int]:
        return [s.id for s in self.strengths] + [s.id for s in self.improvements]


class CriticalSkillsSelector:
    """Partition selected skill ids by polarity."""

    def __init__(self, taxonomy: SkillTaxonomy):
        self.taxonomy = taxonomy

    def normalize_selection(self, selected_ids: Iterable[Any]) -> List[int]:
        """Known ids only, duplicates collapsed, first position kept."""
        ids: List[int] = []
        seen: Set[int] = set()
        for raw in selected_ids or []:
            definition = self.taxonomy.lookup(raw)
            if definition is None:
                logger.warning("critical_skill_skipped", skill_id=raw, reason="unknown_skill_id")
                continue
            if definition.id in seen:
                continue
            seen.add(definition.id)
            ids.append(definition.id)
        return ids

    def classify_selections(self, selected_ids: Iterable[Any]) -> CriticalSkillsResult:
        result = CriticalSkillsResult()
        for skill_id in self.normalize_selection(selected_ids):
            definition = self.taxonomy.lookup(skill_id)
            category = self.taxonomy.classify(skill_id)
            item = CriticalSkill(
                id=definition.id,
                name=definition.name,
                category=getattr(category, "value", category),
            )
            if definition.is_good_skill:
                result.strengths.append(item)
            else:
                result.improvements.append(item)
        return result
