# jdqna/services/skill_extraction.py
"""
LLM 으로 추출한 스킬 목록 -> SkillRecord + Skill 행 생성

규칙
- priority = 순번 + 1
- 앞 3개 또는 importance == "high" 는 MANDATORY, 나머지는 OPTIONAL
- 앞 8개까지만 질문 수 배정 (MANDATORY 2, OPTIONAL 1), 이후 0
- 잘못된 enum 값은 기본값으로 보정
"""
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from jdqna.models import Skill, SkillRecord
from jdqna.models.enums import (
    DEFAULT_CATEGORY,
    DEFAULT_DIFFICULTY,
    DEFAULT_LEVEL,
    SKILL_CATEGORIES,
    SKILL_LEVELS,
    coerce_choice,
)

DIFFICULTIES = ("Easy", "Medium", "Hard")
DEFAULT_QUESTION_FORMAT = "Scenario"
MANDATORY_HEAD = 3
QUESTIONED_HEAD = 8


def build_skill_rows(extracted: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    rows = []
    for index, skill in enumerate(extracted):
        mandatory = index < MANDATORY_HEAD or skill.get("importance") == "high"
        if index < QUESTIONED_HEAD:
            num_questions = 2 if mandatory else 1
        else:
            num_questions = 0
        rows.append({
            "name": skill["name"],
            "level": coerce_choice(skill.get("level"), SKILL_LEVELS, DEFAULT_LEVEL),
            "requirement": "MANDATORY" if mandatory else "OPTIONAL",
            "category": coerce_choice(skill.get("category"), SKILL_CATEGORIES, DEFAULT_CATEGORY),
            "difficulty": coerce_choice(skill.get("difficulty"), DIFFICULTIES, DEFAULT_DIFFICULTY),
            "num_questions": num_questions,
            "priority": index + 1,
            "question_format": DEFAULT_QUESTION_FORMAT,
        })
    return rows


def create_record(
    db: Session,
    job_title: str,
    job_description: str,
    extracted: List[Dict[str, Any]],
    interview_length: Optional[int] = None,
    custom_instructions: Optional[str] = None,
    req_id: Optional[int] = None,
    user_id: Optional[int] = None,
) -> SkillRecord:
    record = SkillRecord(
        job_title=job_title,
        raw_job_description=job_description,
        interview_length=interview_length or 60,
        custom_instructions=custom_instructions or None,
        req_id=req_id,
        user_id=user_id,
    )
    db.add(record)
    db.flush()

    for row in build_skill_rows(extracted):
        db.add(Skill(record_id=record.id, **row))
    db.flush()
    db.refresh(record)
    return record


def parse_optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
