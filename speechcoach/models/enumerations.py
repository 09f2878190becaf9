from enum import Enum


class SkillCategory(str, Enum):
    NERVOUSNESS = "Nervousness"
    VOICE = "Voice"
    BODY_LANGUAGE = "Body Language"
    EXPRESSIONS = "Expressions"
    LANGUAGE = "Language"
    ULTIMATE_LEVEL = "Ultimate Level"


# Returned by classify() for ids outside every category range
UNKNOWN_CATEGORY = "Unknown"


class DividerSource(str, Enum):
    CUSTOM = "custom"      # Admin-set divider stored on the evaluation
    DEFAULT = "default"    # Total max possible / 110
    NONE = "none"          # No data, final score is 0
