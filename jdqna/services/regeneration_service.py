# jdqna/services/regeneration_service.py
"""
질문 재생성

모든 경로에서 새 Question(새 id)을 만들고, 원본은 soft delete,
원본 -> 새 질문 Regeneration 1건을 같은 트랜잭션(get_db) 안에서 기록한다.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from jdqna.models import Question, Regeneration, Skill, SkillRecord
from jdqna.models.enums import LIKE_STATUSES
from jdqna.services.errors import BadRequestError, LLMError, NotFoundError
from jdqna.services.llm import QuestionLLM
from jdqna.services.llm_parsing import is_coding_question, normalize_question
from jdqna.services.question_generation_service import select_skills

logger = logging.getLogger("jdqna.regeneration")

DEFAULT_REASON = "Regenerated"
DISLIKE_REASON = "Disliked question"
SKILL_REGENERATION_REASON = "Regenerated from skill"
FEEDBACK_REASON = "Regenerated with feedback"


def _clean(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _replace(
    db: Session,
    original: Question,
    content: Dict[str, Any],
    reason: str,
    user_feedback: Optional[str],
) -> Tuple[Question, Regeneration]:
    new_q = Question(
        record_id=original.record_id,
        skill_id=original.skill_id,
        coding=is_coding_question(content),
        liked="NONE",
    )
    new_q.set_content({k: v for k, v in content.items() if k != "skillName"})
    db.add(new_q)
    db.flush()

    original.deleted = True
    original.deleted_feedback = reason

    regen = (
        db.query(Regeneration)
        .filter(
            Regeneration.original_question_id == original.id,
            Regeneration.new_question_id == new_q.id,
        )
        .first()
    )
    if regen is None:
        regen = Regeneration(
            original_question_id=original.id,
            new_question_id=new_q.id,
            record_id=original.record_id,
            skill_id=original.skill_id,
        )
        db.add(regen)
    regen.reason = reason
    regen.user_feedback = user_feedback
    db.flush()
    return new_q, regen


def regenerate_question(
    db: Session,
    llm: QuestionLLM,
    question_id: str,
    reason: Optional[str] = None,
    user_feedback: Optional[str] = None,
    default_reason: str = DEFAULT_REASON,
) -> Dict[str, Any]:
    original = db.get(Question, question_id)
    if original is None or original.deleted:
        raise NotFoundError("Question not found")

    skill = original.skill
    reason = _clean(reason)
    parsed = llm.regenerate_question(skill, original.content_dict, reason, _clean(original.feedback))

    new_q, regen = _replace(db, original, parsed.data, reason or default_reason, _clean(user_feedback))
    logger.info("regenerated question %s -> %s (%s)", original.id, new_q.id, regen.reason)

    return {
        "question": {**new_q.to_dict(), "skillName": skill.name},
        "regeneration": regen.to_dict(),
        "originalQuestionId": original.id,
    }


def regenerate_skill_questions(
    db: Session,
    llm: QuestionLLM,
    record_id: str,
    skill_id: str,
    feedback: Optional[str] = None,
) -> Dict[str, Any]:
    """
    스킬의 활성 질문 전체를 새 질문으로 교체.
    기존 질문 중 하나라도 코딩 질문이면 교체 질문도 코딩으로 강제한다.
    """
    skill = db.get(Skill, skill_id)
    if skill is None or skill.record_id != record_id:
        raise NotFoundError("Skill not found")

    active = [q for q in skill.questions if not q.deleted]
    if not active:
        raise NotFoundError("No active questions found for this skill")

    force_coding = any(q.coding or is_coding_question(q.content_dict) for q in active)
    feedback = _clean(feedback)
    guidance = [f.content for f in skill.feedbacks]
    if feedback:
        guidance.append(feedback)
    existing_texts = [q.text for q in active if q.text]
    reason = feedback or SKILL_REGENERATION_REASON

    new_questions: List[Dict[str, Any]] = []
    regenerations: List[Dict[str, Any]] = []
    for original in active:
        try:
            data = llm.generate_question_for_skill(skill, existing_texts, guidance, force_coding)
        except LLMError:
            logger.exception("regeneration failed for question %s", original.id)
            continue
        if force_coding:
            data["coding"] = True

        new_q, regen = _replace(db, original, data, reason, feedback)
        existing_texts.append(new_q.text)
        new_questions.append({**new_q.to_dict(), "skillName": skill.name})
        regenerations.append(regen.to_dict())

    logger.info(
        "regenerated %d/%d questions for skill %s (coding=%s)",
        len(new_questions), len(active), skill.name, force_coding,
    )
    return {
        "questions": new_questions,
        "regenerations": regenerations,
        "forceCoding": force_coding,
    }


def update_regeneration_feedback(
    db: Session,
    regeneration_id: str,
    liked: Optional[str] = None,
    user_feedback: Optional[str] = None,
) -> Regeneration:
    if liked is not None and liked not in LIKE_STATUSES:
        raise BadRequestError("Invalid liked status. Must be LIKED, DISLIKED, or NONE")

    regen = db.get(Regeneration, regeneration_id)
    if regen is None:
        raise NotFoundError("Regeneration not found")

    if liked is not None:
        regen.liked = liked
    if user_feedback is not None:
        regen.user_feedback = user_feedback
    db.flush()
    return regen


def regenerate_with_feedback(
    db: Session,
    llm: QuestionLLM,
    record_id: str,
    feedback_items: List[Dict[str, Any]],
    global_feedback: Optional[str] = None,
) -> Dict[str, Any]:
    """
    질문별 피드백 + 전체 피드백을 반영해 레코드의 질문을 스킬 단위로 교체.

    Args:
        feedback_items: [{questionId, feedback}] (형식이 맞지 않는 항목은 무시)
        global_feedback: 없으면 레코드에 저장된 GlobalFeedback 을 쓴다.
    """
    record = db.get(SkillRecord, record_id)
    if record is None:
        raise NotFoundError("Record not found")

    by_question: Dict[str, str] = {}
    for item in feedback_items:
        if not isinstance(item, dict) or not isinstance(item.get("questionId"), str):
            continue
        text = _clean(item.get("feedback"))
        if text:
            by_question[item["questionId"]] = text

    global_feedback = _clean(global_feedback)
    if global_feedback is None and record.global_feedback is not None:
        global_feedback = _clean(record.global_feedback.content)

    new_questions: List[Dict[str, Any]] = []
    regenerations: List[Dict[str, Any]] = []
    for skill in select_skills(record):
        active = sorted(
            (q for q in skill.questions if not q.deleted),
            key=lambda q: q.created_at,
        )
        if not active:
            continue

        pairs = [(q.text, by_question.get(q.id) or _clean(q.feedback)) for q in active]
        try:
            generated = llm.regenerate_with_feedback(skill, pairs, global_feedback)
        except LLMError:
            logger.exception("feedback regeneration failed for skill %s", skill.id)
            continue
        if len(generated) != len(active):
            logger.warning(
                "skill %s: expected %d questions, got %d", skill.id, len(active), len(generated)
            )

        for original, raw, (_, feedback) in zip(active, generated, pairs):
            content = normalize_question(raw, original.content_dict)
            new_q, regen = _replace(db, original, content, FEEDBACK_REASON, feedback)
            new_questions.append({**new_q.to_dict(), "skillName": skill.name})
            regenerations.append(regen.to_dict())

    logger.info(
        "regenerated %d questions with feedback for record %s (global=%s)",
        len(new_questions), record.id, global_feedback is not None,
    )
    return {
        "questions": new_questions,
        "regenerations": regenerations,
        "globalFeedback": global_feedback,
    }
