from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from jdqna.deps import get_db, get_llm, get_loggers, json_body
from jdqna.models import Regeneration
from jdqna.services import regeneration_service as svc_regen
from jdqna.services.llm import QuestionLLM
from jdqna.services.logger import LoggerRegistry

router = APIRouter(prefix="/api", tags=["regenerations"])


def _str_or_none(value) -> Optional[str]:
    return value if isinstance(value, str) else None


# (1) 질문 1개 재생성
# POST /api/questions/{question_id}/regenerate   body: {reason?, userFeedback?}
@router.post("/questions/{question_id}/regenerate")
def regenerate_question(
    question_id: str,
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
    llm: QuestionLLM = Depends(get_llm),
):
    result = svc_regen.regenerate_question(
        db,
        llm,
        question_id,
        reason=_str_or_none(payload.get("reason")),
        user_feedback=_str_or_none(payload.get("userFeedback")),
    )
    return {"success": True, **result}


# (2) 싫어요 -> 재생성 (기본 사유 "Disliked question")
# POST /api/questions/{question_id}/regenerate-dislike
@router.post("/questions/{question_id}/regenerate-dislike")
def regenerate_disliked_question(
    question_id: str,
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
    llm: QuestionLLM = Depends(get_llm),
):
    result = svc_regen.regenerate_question(
        db,
        llm,
        question_id,
        reason=_str_or_none(payload.get("reason")),
        user_feedback=_str_or_none(payload.get("userFeedback")),
        default_reason=svc_regen.DISLIKE_REASON,
    )
    return {"success": True, **result}


# (3) 스킬의 활성 질문 전체 재생성
# POST /api/records/{record_id}/regenerate-questions-from-skill   body: {skillId, feedback?}
@router.post("/records/{record_id}/regenerate-questions-from-skill")
def regenerate_questions_from_skill(
    record_id: str,
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
    llm: QuestionLLM = Depends(get_llm),
):
    skill_id = payload.get("skillId")
    if not record_id or not isinstance(skill_id, str) or not skill_id:
        raise HTTPException(status_code=400, detail="Record ID and skill ID are required")

    result = svc_regen.regenerate_skill_questions(
        db, llm, record_id, skill_id, feedback=_str_or_none(payload.get("feedback"))
    )
    return {
        "success": True,
        "message": f"Regenerated {len(result['questions'])} questions",
        **result,
    }


# (3-1) 질문별 피드백 + 전체 피드백 반영 재생성
# POST /api/records/{record_id}/regenerate-with-feedback
#   body: {feedback: [{questionId, feedback}], globalFeedback?}
@router.post("/records/{record_id}/regenerate-with-feedback")
def regenerate_with_feedback(
    record_id: str,
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
    llm: QuestionLLM = Depends(get_llm),
    loggers: LoggerRegistry = Depends(get_loggers),
):
    feedback = payload.get("feedback") or []
    if not isinstance(feedback, list):
        raise HTTPException(status_code=400, detail="feedback must be an array")
    global_feedback = payload.get("globalFeedback")
    if global_feedback is not None and not isinstance(global_feedback, str):
        raise HTTPException(status_code=400, detail="globalFeedback must be a string")

    log = loggers.get("regenerate-with-feedback")
    log.info("record %s: %d feedback items", record_id, len(feedback))
    result = svc_regen.regenerate_with_feedback(db, llm, record_id, feedback, global_feedback)
    return {
        "success": True,
        "message": f"Regenerated {len(result['questions'])} questions based on feedback",
        **result,
    }


# (4) 재생성 결과에 대한 피드백
# PATCH /api/regenerations/{regeneration_id}/feedback   body: {liked?, userFeedback?}
@router.patch("/regenerations/{regeneration_id}/feedback")
def update_regeneration_feedback(
    regeneration_id: str,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
):
    user_feedback = payload.get("userFeedback")
    if user_feedback is not None and not isinstance(user_feedback, str):
        raise HTTPException(status_code=400, detail="userFeedback must be a string")

    regen = svc_regen.update_regeneration_feedback(
        db, regeneration_id, liked=payload.get("liked"), user_feedback=user_feedback
    )
    return {"success": True, "regeneration": regen.to_dict()}


# (5) 재생성 이력
# GET /api/regenerations?recordId=&skillId=
@router.get("/regenerations")
def list_regenerations(
    record_id: Optional[str] = Query(None, alias="recordId"),
    skill_id: Optional[str] = Query(None, alias="skillId"),
    db: Session = Depends(get_db),
):
    query = db.query(Regeneration)
    if record_id:
        query = query.filter(Regeneration.record_id == record_id)
    if skill_id:
        query = query.filter(Regeneration.skill_id == skill_id)
    items = query.order_by(Regeneration.created_at.desc()).all()
    return {"success": True, "regenerations": [r.to_dict() for r in items]}
