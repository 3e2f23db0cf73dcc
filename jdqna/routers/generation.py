from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, File, HTTPException, Path, UploadFile
from sqlalchemy.orm import Session

from jdqna.deps import get_db, get_llm, get_loggers, json_body, json_or_form
from jdqna.services import file_extraction
from jdqna.services import question_generation_service as svc_gen
from jdqna.services.llm import QuestionLLM
from jdqna.services.logger import LoggerRegistry
from jdqna.services.skill_extraction import create_record, parse_optional_int

router = APIRouter(prefix="/api", tags=["generation"])


def _text_field(payload: Dict[str, Any], *keys: str) -> str:
    for key in keys:
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


# (1) JD -> 스킬 추출 + 레코드 저장
# POST /api/extract-skills  (JSON 또는 multipart: file + 폼 필드)
@router.post("/extract-skills")
def extract_skills(
    payload: dict = Depends(json_or_form),
    db: Session = Depends(get_db),
    llm: QuestionLLM = Depends(get_llm),
    loggers: LoggerRegistry = Depends(get_loggers),
):
    log = loggers.get("extract-skills")

    # 1) 파일이 있으면 텍스트 추출
    job_description = _text_field(payload, "jobDescription")
    upload = payload.get("file")
    if not job_description and isinstance(upload, tuple):
        filename, data = upload
        try:
            job_description = file_extraction.extract_text(filename, data)
        except file_extraction.UnsupportedFileType as e:
            raise HTTPException(status_code=400, detail=str(e))

    if not job_description:
        raise HTTPException(status_code=400, detail="Job description is required")

    job_title = _text_field(payload, "jobTitle", "jobRole") or "Untitled Position"

    # 2) LLM 스킬 추출
    log.info("extracting skills for %r", job_title)
    extracted = llm.extract_skills(job_title, job_description)

    # 3) 레코드 + 스킬 저장
    record = create_record(
        db,
        job_title,
        job_description,
        extracted,
        interview_length=parse_optional_int(payload.get("interviewLength")),
        custom_instructions=_text_field(payload, "customInstructions") or None,
        req_id=parse_optional_int(payload.get("reqId")),
        user_id=parse_optional_int(payload.get("userId")),
    )
    log.info("created record %s with %d skills", record.id, len(record.skills))

    return {
        "success": True,
        "recordId": record.id,
        "record": record.to_dict(),
        "skills": [s.to_dict() for s in record.skills],
    }


# (2) 파일 -> 텍스트
# POST /api/extract-text
@router.post("/extract-text")
def extract_text(file: UploadFile = File(...)):
    try:
        content = file_extraction.extract_text(file.filename, file.file.read())
    except file_extraction.UnsupportedFileType as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "content": content}


# (2-1) JD -> 스킬 이름만 (저장 없음)
# POST /api/extract-skill-names
@router.post("/extract-skill-names")
def extract_skill_names(
    payload: dict = Body(...),
    llm: QuestionLLM = Depends(get_llm),
):
    job_description = _text_field(payload, "jobDescription")
    if not job_description:
        raise HTTPException(status_code=400, detail="Job description is required")
    return {"success": True, "skills": llm.extract_skill_names(job_description)}


# (3) 레코드 없이 질문만 생성
# POST /api/generate-questions
@router.post("/generate-questions")
def generate_questions(
    payload: dict = Body(...),
    llm: QuestionLLM = Depends(get_llm),
    loggers: LoggerRegistry = Depends(get_loggers),
):
    job_role = _text_field(payload, "jobRole")
    job_description = _text_field(payload, "jobDescription")
    if not job_role or not job_description:
        raise HTTPException(status_code=400, detail="Job role and job description are required")

    questions = llm.generate_questions_for_role(job_role, job_description, payload.get("customInstructions"))
    loggers.get("generate-questions").info("generated %d questions for %r", len(questions), job_role)
    return {"success": True, "questions": questions}


# (4) 레코드 스킬별 질문 생성
# POST /api/records/{record_id}/generate-questions
@router.post("/records/{record_id}/generate-questions")
def generate_record_questions(
    record_id: str = Path(...),
    payload: dict = Depends(json_body),
    db: Session = Depends(get_db),
    llm: QuestionLLM = Depends(get_llm),
):
    skill_ids = payload.get("skillIds")
    if skill_ids is not None and not isinstance(skill_ids, list):
        raise HTTPException(status_code=400, detail="skillIds must be an array")

    questions = svc_gen.generate_record_questions(
        db,
        llm,
        record_id,
        force_regenerate=bool(payload.get("forceRegenerate")),
        skill_ids=skill_ids,
    )
    return {
        "success": True,
        "message": f"Generated {len(questions)} questions",
        "questions": questions,
    }


# (5) 원샷: 레코드 생성 + 스킬 추출 + 질문 생성
# POST /api/auto-generate
@router.post("/auto-generate")
def auto_generate(
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    llm: QuestionLLM = Depends(get_llm),
):
    job_role = _text_field(payload, "jobRole")
    if not job_role:
        raise HTTPException(status_code=400, detail="Job role is required")
    job_description = _text_field(payload, "jobDescription")
    if not job_description:
        raise HTTPException(status_code=400, detail="Job description is required")

    result = svc_gen.auto_generate(
        db,
        llm,
        job_role,
        job_description,
        interview_length=parse_optional_int(payload.get("interviewLength")),
        custom_instructions=_text_field(payload, "customInstructions") or None,
        req_id=parse_optional_int(payload.get("reqId")),
        user_id=parse_optional_int(payload.get("userId")),
    )
    return {"success": True, **result}
