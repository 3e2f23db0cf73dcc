from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session

from jdqna.deps import get_db, get_loggers, json_body
from jdqna.models import Question
from jdqna.models.enums import LIKE_STATUSES
from jdqna.services.llm_parsing import is_coding_question
from jdqna.services.logger import LoggerRegistry

router = APIRouter(prefix="/api/questions", tags=["questions"])

EDITABLE_CONTENT_KEYS = ("question", "answer", "category", "difficulty", "questionFormat", "coding")


def _get_question(db: Session, question_id: str) -> Question:
    q = db.get(Question, question_id)
    if q is None:
        raise HTTPException(status_code=404, detail="Question not found")
    return q


def next_like_status(current: str, requested: str, toggle: bool) -> str:
    """toggle 이면 같은 상태를 다시 누를 때 NONE 으로 되돌린다"""
    if toggle and requested != "NONE" and current == requested:
        return "NONE"
    return requested


# (1) 질문 수정: feedback / floCareerId / content
# PATCH /api/questions/{question_id}
@router.patch("/{question_id}")
def update_question(
    question_id: str,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
):
    has_feedback = "feedback" in payload
    has_flo_id = "floCareerId" in payload
    content = payload.get("content")
    if not (has_feedback or has_flo_id or content is not None):
        raise HTTPException(status_code=400, detail="No valid fields to update")

    if has_feedback and payload["feedback"] is not None and not isinstance(payload["feedback"], str):
        raise HTTPException(status_code=400, detail="feedback must be a string")
    if has_flo_id:
        flo_id = payload["floCareerId"]
        if isinstance(flo_id, bool) or not isinstance(flo_id, int) or flo_id <= 0:
            raise HTTPException(status_code=400, detail="floCareerId must be a positive integer")
    if content is not None:
        if not isinstance(content, dict):
            raise HTTPException(status_code=400, detail="content must be an object")
        for key in EDITABLE_CONTENT_KEYS:
            expected = bool if key == "coding" else str
            if key in content and not isinstance(content[key], expected):
                raise HTTPException(status_code=400, detail=f"content.{key} has an invalid type")

    q = _get_question(db, question_id)

    if has_feedback:
        q.feedback = payload["feedback"]
    if has_flo_id:
        q.flocareer_id = payload["floCareerId"]
    if content is not None:
        merged = q.content_dict
        merged.update({k: v for k, v in content.items() if k in EDITABLE_CONTENT_KEYS})
        q.set_content(merged)
        q.coding = is_coding_question(merged)
    db.flush()
    return {"success": True, "question": q.to_dict()}


# (2) 질문 soft delete
# DELETE /api/questions/{question_id}   body: {feedback?}
@router.delete("/{question_id}")
def delete_question(
    question_id: str,
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
    loggers: LoggerRegistry = Depends(get_loggers),
):
    q = _get_question(db, question_id)
    q.deleted = True
    feedback = payload.get("feedback")
    if isinstance(feedback, str) and feedback.strip():
        q.deleted_feedback = feedback.strip()
    db.flush()
    loggers.get("questions").info("soft-deleted question %s", question_id)
    return {"success": True, "message": "Question deleted successfully"}


# (3) 좋아요/싫어요
# PATCH /api/questions/{question_id}/like   body: {status, toggle?}
@router.patch("/{question_id}/like")
def like_question(
    question_id: str,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
):
    status = payload.get("status")
    if status not in LIKE_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status. Must be LIKED, DISLIKED, or NONE")

    q = _get_question(db, question_id)
    q.liked = next_like_status(q.liked, status, bool(payload.get("toggle")))
    db.flush()
    return {"success": True, "question": q.to_dict()}


# (4) 질문 피드백
# PATCH /api/questions/{question_id}/feedback
@router.patch("/{question_id}/feedback")
def update_question_feedback(
    question_id: str,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
):
    feedback = payload.get("feedback")
    if feedback is not None and not isinstance(feedback, str):
        raise HTTPException(status_code=400, detail="feedback must be a string")

    q = _get_question(db, question_id)
    q.feedback = feedback
    db.flush()
    return {"success": True, "question": q.to_dict()}
