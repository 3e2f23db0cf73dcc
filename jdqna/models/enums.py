# jdqna/models/enums.py
# DB에는 문자열로 저장 (native_enum=False)

SKILL_LEVELS = ("BEGINNER", "INTERMEDIATE", "PROFESSIONAL", "EXPERT")
REQUIREMENTS = ("MANDATORY", "OPTIONAL")
SKILL_CATEGORIES = ("TECHNICAL", "FUNCTIONAL", "BEHAVIORAL", "COGNITIVE")
LIKE_STATUSES = ("LIKED", "DISLIKED", "NONE")

DEFAULT_LEVEL = "INTERMEDIATE"
DEFAULT_CATEGORY = "TECHNICAL"
DEFAULT_DIFFICULTY = "Medium"


def coerce_choice(value, choices, default):
    """허용된 값이면 그대로, 아니면 default"""
    if isinstance(value, str) and value in choices:
        return value
    return default
