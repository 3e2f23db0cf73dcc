# jdqna/services/excel_question_service.py
"""
시트 형식 질문 세트

JD -> 스킬 추출(레코드 생성) -> 스킬당 3문항 생성 -> ExcelQuestionSet/ExcelQuestion 저장
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from jdqna.models import ExcelQuestion, ExcelQuestionSet
from jdqna.services.errors import BadRequestError, NotFoundError
from jdqna.services.llm import DEFAULT_EXPERIENCE_RANGE, QuestionLLM
from jdqna.services.llm_parsing import is_coding_question
from jdqna.services.skill_extraction import create_record

logger = logging.getLogger("jdqna.excel_questions")

UNTITLED = "Untitled Position"


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def format_rows(raw_questions: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """LLM 응답 -> 저장용 행. slNo 는 응답 순서대로 다시 매긴다."""
    rows = []
    for index, q in enumerate(raw_questions):
        description = _as_text(q.get("questionDescription"))
        rows.append({
            "slNo": index + 1,
            "skill": _as_text(q.get("skill")),
            "questionTitle": _as_text(q.get("questionTitle")),
            "questionDescription": description,
            "idealAnswer": _as_text(q.get("idealAnswer")),
            "coding": is_coding_question({"coding": q.get("coding"), "question": description}),
        })
    return rows


def generate_question_set(
    db: Session,
    llm: QuestionLLM,
    job_description: str,
    job_title: Optional[str] = None,
    experience_range: str = DEFAULT_EXPERIENCE_RANGE,
) -> ExcelQuestionSet:
    # 1) 스킬 추출 + 레코드 저장
    title = job_title or UNTITLED
    record = create_record(db, title, job_description, llm.extract_skills(title, job_description))
    skills = [s.name for s in record.skills]
    if not skills:
        raise BadRequestError("No skills found in job description")
    logger.info("record %s: generating sheet questions for %d skills", record.id, len(skills))

    # 2) 질문 생성
    rows = format_rows(llm.generate_sheet_questions(skills, experience_range))

    # 3) 세트 저장
    question_set = ExcelQuestionSet(
        job_title=title,
        experience_range=experience_range,
        total_questions=len(rows),
        skills_extracted=skills,
        raw_job_description=job_description,
        record_id=record.id,
    )
    db.add(question_set)
    db.flush()
    for row in rows:
        db.add(ExcelQuestion(
            set_id=question_set.id,
            sl_no=row["slNo"],
            skill=row["skill"],
            question_title=row["questionTitle"],
            question_description=row["questionDescription"],
            ideal_answer=row["idealAnswer"],
            coding=row["coding"],
        ))
    db.flush()
    db.refresh(question_set)
    return question_set


def get_question_set(db: Session, set_id: str) -> ExcelQuestionSet:
    question_set = db.get(ExcelQuestionSet, set_id)
    if question_set is None:
        raise NotFoundError("Excel question set not found")
    return question_set
