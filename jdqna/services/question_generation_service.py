# jdqna/services/question_generation_service.py

import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from jdqna.models import Question, Skill, SkillRecord
from jdqna.services.errors import BadRequestError, LLMError, NotFoundError
from jdqna.services.llm import QuestionLLM
from jdqna.services.llm_parsing import normalize_question
from jdqna.services.skill_extraction import create_record

logger = logging.getLogger("jdqna.generation")

FORCE_REGENERATED = "Force regenerated questions"


def select_skills(record: SkillRecord, skill_ids: Optional[Sequence[str]] = None) -> List[Skill]:
    """skillIds 가 있으면 그 스킬만, 없으면 MANDATORY + 질문 수가 있는 OPTIONAL"""
    active = [s for s in record.skills if not s.deleted]
    if skill_ids:
        wanted = set(skill_ids)
        return [s for s in active if s.id in wanted]
    return [s for s in active if s.requirement == "MANDATORY" or (s.num_questions or 0) > 0]


def _new_question(skill: Skill, data: Dict[str, Any]) -> Question:
    q = Question(
        record_id=skill.record_id,
        skill_id=skill.id,
        coding=bool(data.get("coding")),
        liked="NONE",
    )
    q.set_content({k: v for k, v in data.items() if k != "skillName"})
    return q


def _response_item(q: Question, skill: Skill) -> Dict[str, Any]:
    return {**q.content_dict, "id": q.id, "skillId": skill.id, "skillName": skill.name}


def generate_record_questions(
    db: Session,
    llm: QuestionLLM,
    record_id: str,
    force_regenerate: bool = False,
    skill_ids: Optional[Sequence[str]] = None,
) -> List[Dict[str, Any]]:
    """
    레코드의 스킬별로 부족한 만큼 질문 생성 (질문 1개당 LLM 1회)

    1) 대상 스킬 선택
    2) 스킬별 필요 개수 계산 (forceRegenerate 면 기존 질문 soft delete 후 전체)
    3) 피드백 + 기존 질문을 프롬프트에 넣어 1개씩 생성
    """
    record = db.get(SkillRecord, record_id)
    if record is None:
        raise NotFoundError("Record not found")

    skills = select_skills(record, skill_ids)
    if not skills:
        raise BadRequestError("No skills found for question generation")

    generated: List[Dict[str, Any]] = []
    for skill in skills:
        target = skill.num_questions or 1
        existing = [q for q in skill.questions if not q.deleted]

        if force_regenerate:
            for q in existing:
                q.deleted = True
                q.deleted_feedback = FORCE_REGENERATED
            existing = []
        needed = target - len(existing)
        if needed <= 0:
            continue

        feedback = [f.content for f in skill.feedbacks]
        existing_texts = [q.text for q in existing if q.text]

        for _ in range(needed):
            try:
                data = llm.generate_question_for_skill(skill, existing_texts, feedback)
            except LLMError:
                logger.exception("question generation failed for skill %s", skill.name)
                continue

            q = _new_question(skill, data)
            db.add(q)
            db.flush()
            existing_texts.append(q.text)
            generated.append(_response_item(q, skill))

    logger.info("generated %d questions for record %s", len(generated), record_id)
    return generated


def auto_generate(
    db: Session,
    llm: QuestionLLM,
    job_role: str,
    job_description: str,
    interview_length: Optional[int] = None,
    custom_instructions: Optional[str] = None,
    req_id: Optional[int] = None,
    user_id: Optional[int] = None,
) -> Dict[str, Any]:
    """레코드 생성 -> 스킬 추출 -> 한 번의 호출로 전체 질문 생성 -> 스킬 이름으로 매칭"""
    extracted = llm.extract_skills(job_role, job_description)
    record = create_record(
        db,
        job_role,
        job_description,
        extracted,
        interview_length=interview_length,
        custom_instructions=custom_instructions,
        req_id=req_id,
        user_id=user_id,
    )

    skills = select_skills(record)
    if not skills:
        return {
            "recordId": record.id,
            "skillsCount": len(record.skills),
            "questionsCount": 0,
            "message": "Skills extracted but no questions to generate",
        }

    raw_questions = llm.generate_questions_for_skills(job_role, skills, custom_instructions)

    by_name = {s.name.strip().lower(): s for s in skills}
    saved = 0
    for raw in raw_questions:
        skill = by_name.get(str(raw.get("skillName") or "").strip().lower())
        if skill is None:
            logger.warning("dropping question for unknown skill %r", raw.get("skillName"))
            continue
        db.add(_new_question(skill, normalize_question(raw, {"difficulty": skill.difficulty})))
        saved += 1
    db.flush()

    logger.info("auto-generated record %s: %d skills, %d questions", record.id, len(record.skills), saved)
    return {
        "recordId": record.id,
        "skillsCount": len(record.skills),
        "questionsCount": saved,
        "message": "Interview questions generated successfully",
    }
