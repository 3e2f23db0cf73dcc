# jdqna/main.py

# ------------------------
# 환경 변수 로드
# ------------------------
from dotenv import load_dotenv
load_dotenv()

from contextlib import asynccontextmanager

# ------------------------
# FastAPI, CORS 미들웨어 import
# ------------------------
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from jdqna.config import settings
from jdqna.db.session import Base, engine
from jdqna import models  # noqa: F401  (Base.metadata 에 테이블 등록)
from jdqna.services.auth import is_protected_path, verify_api_auth
from jdqna.services.errors import ServiceError
from jdqna.services.logger import LoggerRegistry

# ------------------------
# 라우터 import
# ------------------------
from jdqna.routers import analytics as analytics_router
from jdqna.routers import excel_questions as excel_questions_router
from jdqna.routers import exports as exports_router
from jdqna.routers import flocareer as flocareer_router
from jdqna.routers import generation as generation_router
from jdqna.routers import questions as questions_router
from jdqna.routers import records as records_router
from jdqna.routers import regenerations as regenerations_router
from jdqna.routers import skills as skills_router
from jdqna.routers import upload as upload_router

# ------------------------
# 1) 로거 레지스트리
# ------------------------
loggers = LoggerRegistry()
loggers.configure(settings.log_level)
log = loggers.get("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    log.info("jdqna started (env=%s)", settings.app_env)
    yield


# ------------------------
# 2) FastAPI 앱 생성
# ------------------------
app = FastAPI(title="Interview Question Generator API", lifespan=lifespan)
app.state.loggers = loggers


# ------------------------
# 3) /api/* 공유 토큰 인증
# ------------------------
@app.middleware("http")
async def api_auth(request: Request, call_next):
    if request.method != "OPTIONS" and is_protected_path(request.url.path):
        denied = verify_api_auth(request.headers.get("authorization"))
        if denied is not None:
            return denied
    return await call_next(request)


# ------------------------
# 4) CORS 미들웨어
#    - 개발용 전체 허용
# ------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------
# 5) 에러 -> {"success": false, "error": ...}
# ------------------------
def _envelope(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _envelope(exc.status_code, detail)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return _envelope(400, "; ".join(parts) or "Invalid request")


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _envelope(exc.status_code, exc.message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    # 상세 내용(SQL, 파라미터 등)은 로그에만 남긴다
    log.exception("unhandled error on %s %s", request.method, request.url.path)
    return _envelope(500, "Internal server error")


# ------------------------
# 6) 라우터 등록
# ------------------------
app.include_router(generation_router.router)
app.include_router(flocareer_router.router)
app.include_router(records_router.router)
app.include_router(skills_router.router)
app.include_router(questions_router.router)
app.include_router(regenerations_router.router)
app.include_router(analytics_router.router)
app.include_router(exports_router.router)
app.include_router(upload_router.router)
app.include_router(excel_questions_router.router)


# ------------------------
# 7) Root 엔드포인트 (health check)
# ------------------------
@app.get("/")
def root():
    return {"ok": True}
