# jdqna/services/auth.py
# 공유 Bearer 토큰 검증 (main.py 미들웨어에서 /api/* 요청마다 호출)
import hmac
import logging
from typing import Optional

from fastapi.responses import JSONResponse

from jdqna.config import settings

logger = logging.getLogger("jdqna.auth")

BEARER_PREFIX = "Bearer "


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def verify_api_auth(authorization: Optional[str], expected_token: Optional[str] = None) -> Optional[JSONResponse]:
    """
    통과하면 None, 아니면 바로 돌려줄 에러 응답.

    - 서버 토큰 미설정 -> 500
    - 헤더 없음 / "Bearer " 접두사 없음 -> 401
    - 토큰 불일치 -> 403
    """
    expected = expected_token if expected_token is not None else settings.auth_token
    if not expected:
        logger.error("AUTH_TOKEN is not configured")
        return _error(500, "API authentication not configured")

    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return _error(401, "Authentication required")

    token = authorization[len(BEARER_PREFIX):]
    if not hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8")):
        logger.warning("invalid API token presented")
        return _error(403, "Invalid authentication token")

    return None


def is_protected_path(path: str) -> bool:
    if not path.startswith("/api/"):
        return False
    return not any(path.startswith(prefix) for prefix in settings.public_api_paths)
