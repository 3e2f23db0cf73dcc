# jdqna/services/errors.py
# 서비스 계층 예외 -> main.py 핸들러에서 {"success": false, "error": ...} 로 변환


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class LLMError(ServiceError):
    """OpenAI 호출 실패 / 빈 응답 / 파싱 불가"""


class StorageError(ServiceError):
    """오브젝트 스토리지 업로드 실패"""


class FloCareerError(ServiceError):
    """FloCareer API 실패"""
    status_code = 502


class ExtractionError(ServiceError):
    """PDF/DOCX 텍스트 추출 실패"""
    status_code = 422


class NotFoundError(ServiceError):
    status_code = 404


class BadRequestError(ServiceError):
    status_code = 400
