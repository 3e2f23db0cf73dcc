from fastapi import APIRouter, Body, Depends, HTTPException, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from jdqna.deps import get_db, get_loggers
from jdqna.models import GlobalFeedback, Question, Skill, SkillRecord
from jdqna.models.enums import (
    DEFAULT_CATEGORY,
    DEFAULT_LEVEL,
    REQUIREMENTS,
    SKILL_CATEGORIES,
    SKILL_LEVELS,
)
from jdqna.services.logger import LoggerRegistry
from jdqna.services.skill_extraction import parse_optional_int

router = APIRouter(prefix="/api", tags=["records"])

REQUIREMENT_ORDER = {"MANDATORY": 0, "OPTIONAL": 1}


def _get_record(db: Session, record_id: str) -> SkillRecord:
    record = db.get(SkillRecord, record_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Record not found")
    return record


# (1) 레코드 목록 (최신순)
# GET /api/records
@router.get("/records")
def list_records(db: Session = Depends(get_db)):
    records = db.query(SkillRecord).order_by(SkillRecord.created_at.desc()).all()
    return {
        "success": True,
        "records": [
            {
                **r.to_dict(),
                "skillCount": len(r.skills),
                "questionCount": sum(1 for q in r.questions if not q.deleted),
            }
            for r in records
        ],
    }


# (2) 레코드 상세 (스킬: requirement -> priority 순)
# GET /api/records/{record_id}
@router.get("/records/{record_id}")
def get_record(record_id: str, db: Session = Depends(get_db)):
    record = _get_record(db, record_id)
    skills = sorted(
        record.skills,
        key=lambda s: (REQUIREMENT_ORDER.get(s.requirement, 2), s.priority or 0),
    )
    questions = sorted(record.questions, key=lambda q: q.created_at)
    return {
        "success": True,
        "record": {
            **record.to_dict(),
            "skills": [s.to_dict() for s in skills],
            "questions": [q.to_dict(include_skill=True) for q in questions],
            "globalFeedback": record.global_feedback.to_dict() if record.global_feedback else None,
        },
    }


# (3) 레코드의 질문 목록 (스킬 이름순)
# GET /api/records/{record_id}/questions?includeDeleted=false
@router.get("/records/{record_id}/questions")
def list_record_questions(
    record_id: str,
    include_deleted: bool = Query(False, alias="includeDeleted"),
    db: Session = Depends(get_db),
):
    _get_record(db, record_id)
    query = (
        db.query(Question)
        .join(Skill, Skill.id == Question.skill_id)
        .filter(Question.record_id == record_id)
    )
    if not include_deleted:
        query = query.filter(Question.deleted.is_(False))
    questions = query.order_by(Skill.name.asc(), Question.created_at.asc()).all()
    return {
        "success": True,
        "questions": [q.to_dict(include_skill=True) for q in questions],
    }


# (4) 스킬 수동 추가
# POST /api/records/{record_id}/add-skill
@router.post("/records/{record_id}/add-skill")
def add_skill(
    record_id: str,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    loggers: LoggerRegistry = Depends(get_loggers),
):
    name = payload.get("name")
    if not isinstance(name, str) or not name.strip():
        raise HTTPException(status_code=400, detail="Skill name is required")
    name = name.strip()

    _get_record(db, record_id)

    duplicate = (
        db.query(Skill)
        .filter(Skill.record_id == record_id, func.lower(Skill.name) == name.lower())
        .first()
    )
    if duplicate:
        raise HTTPException(status_code=400, detail="Skill already exists in this record")

    level = payload.get("level") or DEFAULT_LEVEL
    requirement = payload.get("requirement") or "OPTIONAL"
    category = payload.get("category") or DEFAULT_CATEGORY
    if level not in SKILL_LEVELS:
        raise HTTPException(status_code=400, detail="Invalid skill level")
    if requirement not in REQUIREMENTS:
        raise HTTPException(status_code=400, detail="Invalid requirement")
    if category not in SKILL_CATEGORIES:
        raise HTTPException(status_code=400, detail="Invalid category")

    for field in ("difficulty", "questionFormat"):
        value = payload.get(field)
        if value is not None and not isinstance(value, str):
            raise HTTPException(status_code=400, detail=f"{field} must be a string")

    max_priority = db.query(func.max(Skill.priority)).filter(Skill.record_id == record_id).scalar() or 0

    skill = Skill(
        record_id=record_id,
        name=name,
        level=level,
        requirement=requirement,
        category=category,
        num_questions=parse_optional_int(payload.get("numQuestions")) or 0,
        difficulty=payload.get("difficulty") or "Medium",
        question_format=payload.get("questionFormat") or "Scenario based",
        priority=max_priority + 1,
    )
    db.add(skill)
    db.flush()
    loggers.get("records").info("added skill %r to record %s", name, record_id)
    return {"success": True, "skill": skill.to_dict()}


# (5) 레코드 전체 피드백 (upsert)
# POST /api/records/{record_id}/global-feedback
@router.post("/records/{record_id}/global-feedback")
def save_global_feedback(
    record_id: str,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
):
    content = payload.get("feedback")
    if not isinstance(content, str) or not content.strip():
        raise HTTPException(status_code=400, detail="Feedback is required")

    record = _get_record(db, record_id)
    gf = record.global_feedback
    if gf is None:
        gf = GlobalFeedback(record_id=record_id, content=content.strip())
        db.add(gf)
    else:
        gf.content = content.strip()
    db.flush()
    return {"success": True, "globalFeedback": gf.to_dict()}


# GET /api/records/{record_id}/global-feedback
@router.get("/records/{record_id}/global-feedback")
def get_global_feedback(record_id: str, db: Session = Depends(get_db)):
    record = _get_record(db, record_id)
    gf = record.global_feedback
    return {"success": True, "globalFeedback": gf.to_dict() if gf else None}


# (6) FloCareer req/user 로 레코드 찾기
# POST /api/find-record
@router.post("/find-record")
def find_record(payload: dict = Body(...), db: Session = Depends(get_db)):
    req_id = parse_optional_int(payload.get("reqId"))
    user_id = parse_optional_int(payload.get("userId"))
    if req_id is None or user_id is None:
        raise HTTPException(status_code=400, detail="reqId and userId are required")

    record = (
        db.query(SkillRecord)
        .filter(SkillRecord.req_id == req_id, SkillRecord.user_id == user_id)
        .order_by(SkillRecord.created_at.desc())
        .first()
    )
    if record is None:
        raise HTTPException(status_code=404, detail="Record not found")
    return {"success": True, "recordId": record.id}
