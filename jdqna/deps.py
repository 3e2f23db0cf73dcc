# jdqna/deps.py
from fastapi import Request

from jdqna.db.session import SessionLocal
from jdqna.services.flocareer_service import FloCareerClient
from jdqna.services.llm import QuestionLLM
from jdqna.services.logger import LoggerRegistry
from jdqna.services.storage_service import StorageService


# ----------------------------
# DB 세션
# ----------------------------
def get_db():
    db = SessionLocal()
    try:
        yield db
        db.commit()  # commit 포함
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


# ----------------------------
# 로거 레지스트리 (main.py 에서 app.state 에 등록)
# ----------------------------
def get_loggers(request: Request) -> LoggerRegistry:
    return request.app.state.loggers


# ----------------------------
# 외부 서비스 클라이언트 (테스트에서 dependency_overrides 로 교체)
# ----------------------------
def get_llm() -> QuestionLLM:
    return QuestionLLM()


def get_storage() -> StorageService:
    return StorageService()


def get_flocareer() -> FloCareerClient:
    return FloCareerClient()


# ----------------------------
# 요청 바디
# ----------------------------
async def json_body(request: Request) -> dict:
    """바디가 비었거나 JSON 이 아니면 빈 dict (재생성처럼 바디가 선택인 경우)"""
    try:
        data = await request.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


async def json_or_form(request: Request) -> dict:
    """
    JSON 또는 multipart 폼.
    폼에 파일이 있으면 "file": (파일명, bytes) 로 담는다.
    """
    content_type = request.headers.get("content-type", "")
    if "multipart/form-data" not in content_type and "application/x-www-form-urlencoded" not in content_type:
        return await json_body(request)

    form = await request.form()
    data = {}
    for key, value in form.items():
        if hasattr(value, "read"):
            data[key] = (value.filename, await value.read())
        else:
            data[key] = value
    return data
