"""
Skill Taxonomy - Speech Coaching Skill Catalogue
speechcoach/scoring/taxonomy.py

Static catalogue of the 110 atomic speaking skills and the six category
ranges they are scored under.

Category ranges (inclusive, checked in this order):
    Nervousness      1 -   6
    Voice            7 -  32
    Body Language   33 -  75
    Expressions     76 -  84
    Language        85 - 102
    Ultimate Level 103 - 110

Good skills score 0..+max, bad skills score -max..0. Every shipped skill has
max_score 10 and weight 1.0.

Skill 25 ("Filler sounds") is listed with the Language skills but falls in
the Voice range. classify() follows the range, lookup() finds it by id.
"""

from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple, Union

from speechcoach.models.enumerations import SkillCategory, UNKNOWN_CATEGORY

MIN_SKILL_ID = 1
MAX_SKILL_ID = 110

DEFAULT_MAX_SCORE = Decimal("10")
DEFAULT_WEIGHT = Decimal("1.0")


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SkillDefinition:
    """One atomic skill from the catalogue."""
    id: int
    name: str
    is_good_skill: bool
    listed_category: SkillCategory      # category list the skill is shipped under
    max_score: Decimal = DEFAULT_MAX_SCORE
    weight: Decimal = DEFAULT_WEIGHT

    @property
    def is_bad_skill(self) -> bool:
        return not self.is_good_skill


# ---------------------------------------------------------------------------
# Category ranges (order matters: first match wins)
# ---------------------------------------------------------------------------

CATEGORY_RANGES: List[Tuple[SkillCategory, int, int]] = [
    (SkillCategory.NERVOUSNESS, 1, 6),
    (SkillCategory.VOICE, 7, 32),
    (SkillCategory.BODY_LANGUAGE, 33, 75),
    (SkillCategory.EXPRESSIONS, 76, 84),
    (SkillCategory.LANGUAGE, 85, 102),
    (SkillCategory.ULTIMATE_LEVEL, 103, 110),
]


# ---------------------------------------------------------------------------
# Shipped skill table: (id, name, is_good_skill) per listed category
# ---------------------------------------------------------------------------

_SKILL_TABLE: Dict[SkillCategory, List[Tuple[int, str, bool]]] = {
    SkillCategory.NERVOUSNESS: [
        (1, "Swaying", False),
        (2, "Squirming", False),
        (3, "Irrational movement", False),
        (4, "Stroke / Fidget", False),
        (5, "Flight / Freeze", False),
        (6, "Unbalanced feet", False),
    ],
    SkillCategory.VOICE: [
        (7, "Register / Pitch", True),
        (8, "Slow pace", True),
        (9, "Fast pace", True),
        (10, "Base pace", True),
        (11, "Timbre", True),
        (12, "Emphasis", True),
        (13, "Playful emphasis", True),
        (14, "Base volume", True),
        (15, "Varied volume", True),
        (16, "Up-Down talk", True),
        (17, "Volume increase", True),
        (18, "Volume decrease", True),
        (19, "Unfunctional pauses", False),
        (20, "Relaxation pause", True),
        (21, "Strategic pause", True),
        (22, "Effect pause", True),
        (23, "Vocal Fry", False),
        (24, "Elongated vowels", True),
        (26, "Prosody", True),
        (27, "Melody", True),
        (28, "Articulation", True),
        (29, "Voice climax", True),
        (30, "Dramatising", True),
        (31, "Language change", True),
        (32, "Sound effects", True),
    ],
    SkillCategory.BODY_LANGUAGE: [
        (33, "Confident posture", True),
        (34, "Neutral Posture", True),
        (35, "Amplifying Posture", True),
        (36, "Ticks", False),
        (37, "Feet", True),
        (38, "Hips", True),
        (39, "Angle", True),
        (40, "Relaxed", True),
        (41, "Dramatising", True),
        (42, "Shrugging shoulders", False),
        (43, "Intensity variation", True),
        (44, "Functional", True),
        (45, "Smooth", True),
        (46, "Distinct", True),
        (47, "Adapted size", True),
        (48, "Standard pace", True),
        (49, "Adapted pace", True),
        (50, "Full out", True),
        (51, "Pointing", True),
        (52, "Volume/Size", True),
        (53, "Regulators", True),
        (54, "Rhythm of speech", True),
        (55, "Signs", True),
        (56, "Imaginary props", True),
        (57, "Drawings", True),
        (58, "Affect display", True),
        (59, "Sounds", True),
        (60, "Progression", True),
        (61, "Empowering head angle", True),
        (62, "Unfunctional head angle", False),
        (63, "Standard head angle", True),
        (64, "Amplifying head movement", True),
        (65, "Stage Presence", True),
        (66, "Anchoring", True),
        (67, "Vertical movement", True),
        (68, "Power areas", True),
        (69, "Horizontal movement", True),
        (70, "Bent knees", True),
        (71, "Amplification", True),
        (72, "General eye contact", True),
        (73, "Sweeping", True),
        (74, "Focus", True),
        (75, "Attire", True),
    ],
    SkillCategory.EXPRESSIONS: [
        (76, "Neutral", True),
        (77, "Matching", True),
        (78, "Dramatising", True),
        (79, "Mouth", True),
        (80, "Eyebrows", True),
        (81, "Forehead", True),
        (82, "Eyes", True),
        (83, "Self laugh", True),
        (84, "Straight face", True),
    ],
    SkillCategory.LANGUAGE: [
        (25, "Filler sounds", False),
        (85, "Adapted", True),
        (86, "Flow", True),
        (87, "Strong rhetorics", True),
        (88, "Filler words", False),
        (89, "Negations", False),
        (90, "Repetitive words", False),
        (91, "Absolute words", False),
        (92, "Strategic", True),
        (93, "Valued", True),
        (94, "Hexacolon", True),
        (95, "Tricolon", True),
        (96, "Repetition", True),
        (97, "Anaphora", True),
        (98, "Epiphora", True),
        (99, "Alliteration", True),
        (100, "Correctio", True),
        (101, "Climax", True),
        (102, "Anadiplosis", True),
    ],
    SkillCategory.ULTIMATE_LEVEL: [
        (103, "Loves presenting", True),
        (104, "Role playing", True),
        (105, "Total intensity transition", True),
        (106, "Acts out the obvious", True),
        (107, "Present and authentic", True),
        (108, "Synchronisity", True),
        (109, "Contrast", True),
        (110, "Visualisation", True),
    ],
}


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def coerce_skill_id(value: Any) -> Optional[int]:
    """
    Normalize an incoming skill id to int.

    Accepts ints, integral floats and digit strings. Booleans, fractional
    numbers and anything non-numeric return None.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        return int(value) if value.is_integer() else None
    if isinstance(value, Decimal):
        if not value.is_finite() or value != value.to_integral_value():
            return None
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        digits = text[1:] if text.startswith("-") else text
        if digits.isdecimal() and len(digits) <= 9:
            return int(text)
    return None


def classify(skill_id: Any) -> Union[SkillCategory, str]:
    """
    Map a skill id to its category by range.

    Total function: ids outside 1..110 or malformed ids return "Unknown".
    """
    sid = coerce_skill_id(skill_id)
    if sid is None:
        return UNKNOWN_CATEGORY
    for category, low, high in CATEGORY_RANGES:
        if low <= sid <= high:
            return category
    return UNKNOWN_CATEGORY


# ---------------------------------------------------------------------------
# Taxonomy
# ---------------------------------------------------------------------------

class SkillTaxonomy:
    """Immutable, id-indexed view of the skill catalogue."""

    def __init__(self, definitions: List[SkillDefinition]):
        by_id: Dict[int, SkillDefinition] = {}
        for definition in definitions:
            if definition.id in by_id:
                raise ValueError(f"Duplicate skill id {definition.id}")
            by_id[definition.id] = definition
        self._by_id = by_id
        self._ordered: Tuple[SkillDefinition, ...] = tuple(
            sorted(by_id.values(), key=lambda d: d.id)
        )

    def __len__(self) -> int:
        return len(self._ordered)

    def __contains__(self, skill_id: Any) -> bool:
        return self.lookup(skill_id) is not None

    def classify(self, skill_id: Any) -> Union[SkillCategory, str]:
        return classify(skill_id)

    def lookup(self, skill_id: Any) -> Optional[SkillDefinition]:
        """Find a definition by id across the whole table."""
        sid = coerce_skill_id(skill_id)
        if sid is None:
            return None
        return self._by_id.get(sid)

    def skills_in_category(self, category: SkillCategory) -> List[SkillDefinition]:
        """Definitions shipped under the given category list."""
        return [d for d in self._ordered if d.listed_category == category]

    def all_skills(self) -> List[SkillDefinition]:
        return list(self._ordered)


def build_definitions() -> List[SkillDefinition]:
    """Expand the shipped table into SkillDefinition records."""
    definitions = []
    for category, rows in _SKILL_TABLE.items():
        for skill_id, name, is_good in rows:
            definitions.append(
                SkillDefinition(
                    id=skill_id,
                    name=name,
                    is_good_skill=is_good,
                    listed_category=category,
                )
            )
    return definitions


@lru_cache(maxsize=1)
def load_default_taxonomy() -> SkillTaxonomy:
    """Build the shipped taxonomy once per process."""
    return SkillTaxonomy(build_definitions())
