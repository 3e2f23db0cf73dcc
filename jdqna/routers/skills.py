from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session

from jdqna.deps import get_db, get_loggers
from jdqna.models import Feedback, Skill
from jdqna.models.enums import REQUIREMENTS, SKILL_CATEGORIES, SKILL_LEVELS
from jdqna.services.logger import LoggerRegistry

router = APIRouter(prefix="/api/skills", tags=["skills"])

# 요청 필드 -> (컬럼, 허용값)
ENUM_FIELDS = {
    "level": ("level", SKILL_LEVELS),
    "requirement": ("requirement", REQUIREMENTS),
    "category": ("category", SKILL_CATEGORIES),
}
INT_FIELDS = {"numQuestions": "num_questions", "priority": "priority"}
TEXT_FIELDS = {"difficulty": "difficulty", "questionFormat": "question_format", "name": "name"}


def _get_skill(db: Session, skill_id: str) -> Skill:
    skill = db.get(Skill, skill_id)
    if skill is None:
        raise HTTPException(status_code=404, detail="Skill not found")
    return skill


# (1) 스킬 수정
# PATCH /api/skills/{skill_id}
@router.patch("/{skill_id}")
def update_skill(
    skill_id: str,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    loggers: LoggerRegistry = Depends(get_loggers),
):
    updates = {}

    for field, (column, choices) in ENUM_FIELDS.items():
        if field in payload:
            if payload[field] not in choices:
                raise HTTPException(status_code=400, detail=f"Invalid {field}")
            updates[column] = payload[field]

    for field, column in INT_FIELDS.items():
        if field in payload:
            value = payload[field]
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise HTTPException(status_code=400, detail=f"{field} must be a non-negative integer")
            updates[column] = value

    for field, column in TEXT_FIELDS.items():
        if field in payload:
            value = payload[field]
            if not isinstance(value, str) or not value.strip():
                raise HTTPException(status_code=400, detail=f"{field} must be a non-empty string")
            updates[column] = value.strip()

    if not updates:
        raise HTTPException(status_code=400, detail="No valid fields to update")

    skill = _get_skill(db, skill_id)
    for column, value in updates.items():
        setattr(skill, column, value)
    db.flush()

    loggers.get("skills").info("updated skill %s: %s", skill_id, sorted(updates))
    return {"success": True, "skill": skill.to_dict()}


# (2) 스킬 삭제 (hard delete, 질문/피드백/재생성 기록까지 cascade)
# DELETE /api/skills/{skill_id}
@router.delete("/{skill_id}")
def delete_skill(
    skill_id: str,
    db: Session = Depends(get_db),
    loggers: LoggerRegistry = Depends(get_loggers),
):
    skill = _get_skill(db, skill_id)
    db.delete(skill)
    db.flush()
    loggers.get("skills").info("deleted skill %s", skill_id)
    return {"success": True, "message": "Skill deleted successfully"}


# (3) 스킬 피드백
# POST /api/skills/{skill_id}/feedback
@router.post("/{skill_id}/feedback")
def add_feedback(
    skill_id: str,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
):
    content = payload.get("content")
    if not isinstance(content, str) or not content.strip():
        raise HTTPException(status_code=400, detail="Feedback content is required")

    _get_skill(db, skill_id)
    feedback = Feedback(skill_id=skill_id, content=content.strip())
    db.add(feedback)
    db.flush()
    return {"success": True, "feedback": feedback.to_dict()}


# GET /api/skills/{skill_id}/feedback
@router.get("/{skill_id}/feedback")
def list_feedback(skill_id: str, db: Session = Depends(get_db)):
    skill = _get_skill(db, skill_id)
    return {"success": True, "feedbacks": [f.to_dict() for f in skill.feedbacks]}
