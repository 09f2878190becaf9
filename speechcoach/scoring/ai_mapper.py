"""
AI Result Mapper - Language Analysis to Skill Ids
speechcoach/scoring/ai_mapper.py

Translates the free-text keys produced by the language-analysis model into
taxonomy skill ids and corrects polarity for bad skills.

Pipeline:
  model output ──► parse_analysis_response ──► AIResultMapper ──► MappedEntry per key
                                                                      │
                                                  ScoreAggregator ◄───┘ (Language)

Rules:
  1. Only keys present in AI_KEY_TO_SKILL_ID are considered.
  2. The target id must exist in the taxonomy.
  3. Bad skill with a positive score ──► score is negated.
  4. Anything else (unmapped key, missing/non-numeric score) is dropped.
The mapper never raises on malformed input.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

import structlog

from speechcoach.scoring.taxonomy import SkillTaxonomy
from speechcoach.scoring.utils import as_finite_decimal

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# AI key ──► skill id
#
# Hand curated. Several keys may point at the same id; keys with no entry
# are ignored. filler_sounds targets 25, which classifies as Voice.
# ---------------------------------------------------------------------------

AI_KEY_TO_SKILL_ID: Dict[str, int] = {
    "filler_sounds": 25,
    "adapted_language": 85,
    "flow": 86,
    "strong_rhetoric": 87,
    "filler_language": 88,
    "negations": 89,
    "repetitive_words": 90,
    "absolute_words": 91,
    "strategic_language": 92,
    "valued_language": 93,
    "hexacolon": 94,
    "tricolon": 95,
    "repetition": 96,
    "anaphora": 97,
    "epiphora": 98,
    "alliteration": 99,
    "correctio": 100,
    "climax": 101,
    "anadiplosis": 102,
}


@dataclass
class MappedEntry:
    """One AI analysis entry resolved to a skill id."""
    key: str
    score: Decimal                  # polarity-corrected
    skill_id: int
    skill_name: str
    metadata: Dict[str, Any] = field(default_factory=dict)   # words, frequency, explanation...

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.metadata,
            "key": self.key,
            "score": float(self.score),
            "skill_id": self.skill_id,
            "skill_name": self.skill_name,
        }


class AIResultMapper:
    """Map AI analysis entries onto the skill taxonomy."""

    def __init__(
        self,
        taxonomy: SkillTaxonomy,
        key_map: Optional[Mapping[str, int]] = None,
    ):
        self.taxonomy = taxonomy
        self.key_map = dict(AI_KEY_TO_SKILL_ID if key_map is None else key_map)

    @staticmethod
    def unwrap(analysis: Any) -> Dict[str, Any]:
        """Accept either the bare mapping or the {"analysis": {...}} wrapper."""
        if not isinstance(analysis, Mapping):
            return {}
        inner = analysis.get("analysis")
        if isinstance(inner, Mapping):
            return dict(inner)
        return dict(analysis)

    def map_entry(self, key: str, value: Any) -> Optional[MappedEntry]:
        skill_id = self.key_map.get(key)
        if skill_id is None:
            logger.debug("ai_entry_dropped", key=key, reason="unmapped_key")
            return None

        definition = self.taxonomy.lookup(skill_id)
        if definition is None:
            logger.warning("ai_entry_dropped", key=key, skill_id=skill_id, reason="unknown_skill")
            return None

        if not isinstance(value, Mapping):
            logger.warning("ai_entry_dropped", key=key, reason="malformed_entry")
            return None

        score = as_finite_decimal(value.get("score"))
        if score is None:
            logger.warning("ai_entry_dropped", key=key, reason="invalid_score", score=value.get("score"))
            return None

        if definition.is_bad_skill and score > 0:
            score = -score

        metadata = {
            k: v for k, v in value.items()
            if k not in ("score", "skill_id", "skill_name", "key")
        }
        return MappedEntry(
            key=key,
            score=score,
            skill_id=definition.id,
            skill_name=definition.name,
            metadata=metadata,
        )

    def map_ai_results(self, analysis: Any) -> Dict[str, MappedEntry]:
        """
        Args:
            analysis: AI output keyed by free-text skill keys, optionally
                      wrapped in {"analysis": ...}.

        Returns:
            Mapping of AI key → MappedEntry for every key that resolved.
        """
        entries = self.unwrap(analysis)
        mapped: Dict[str, MappedEntry] = {}
        for key, value in entries.items():
            if not isinstance(key, str):
                continue
            entry = self.map_entry(key, value)
            if entry is not None:
                mapped[key] = entry

        logger.info(
            "ai_results_mapped",
            received=len(entries),
            mapped=len(mapped),
            dropped=len(entries) - len(mapped),
        )
        return mapped
