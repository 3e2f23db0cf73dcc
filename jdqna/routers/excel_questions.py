from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session

from jdqna.deps import get_db, get_llm, get_loggers
from jdqna.services import excel_question_service as svc_excel
from jdqna.services.llm import DEFAULT_EXPERIENCE_RANGE, QUESTIONS_PER_SKILL, QuestionLLM
from jdqna.services.logger import LoggerRegistry

router = APIRouter(prefix="/api", tags=["excel-questions"])


# (1) JD -> 시트 형식 질문 세트 생성 + 저장
# POST /api/generate-question-format   body: {jobDescription, jobTitle?, experienceRange?}
@router.post("/generate-question-format")
def generate_question_format(
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    llm: QuestionLLM = Depends(get_llm),
    loggers: LoggerRegistry = Depends(get_loggers),
):
    job_description = payload.get("jobDescription")
    if not isinstance(job_description, str) or not job_description.strip():
        raise HTTPException(status_code=400, detail="Job description is required")
    job_title = payload.get("jobTitle")
    experience_range = payload.get("experienceRange") or DEFAULT_EXPERIENCE_RANGE
    if not isinstance(experience_range, str):
        raise HTTPException(status_code=400, detail="experienceRange must be a string")

    question_set = svc_excel.generate_question_set(
        db,
        llm,
        job_description.strip(),
        job_title=job_title.strip() if isinstance(job_title, str) and job_title.strip() else None,
        experience_range=experience_range,
    )
    loggers.get("generate-question-format").info(
        "saved question set %s with %d questions", question_set.id, question_set.total_questions
    )

    data = question_set.to_dict()
    return {
        "success": True,
        "setId": question_set.id,
        "data": {
            "jobTitle": data["jobTitle"],
            "experienceRange": data["experienceRange"],
            "skillsExtracted": data["skillsExtracted"],
            "questions": data["questions"],
            "totalQuestions": data["totalQuestions"],
            "questionsPerSkill": QUESTIONS_PER_SKILL,
        },
        "metadata": {"recordId": question_set.record_id, "generatedAt": data["createdAt"]},
    }


# (2) 저장된 세트 조회 (slNo 오름차순)
# GET /api/excel-questions/{set_id}
@router.get("/excel-questions/{set_id}")
def get_excel_questions(set_id: str, db: Session = Depends(get_db)):
    question_set = svc_excel.get_question_set(db, set_id)
    return {"success": True, "data": question_set.to_dict()}
