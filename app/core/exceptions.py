from enum import Enum

from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.config import settings


class ErrorCode(str, Enum):
    """에러 코드 열거형"""

    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_INPUT = "INVALID_INPUT"
    VERIFICATION_FAILED = "VERIFICATION_FAILED"
    DUPLICATE_SUBMISSION = "DUPLICATE_SUBMISSION"
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
    CONCURRENT_UPDATE = "CONCURRENT_UPDATE"
    GITHUB_API_ERROR = "GITHUB_API_ERROR"
    LLM_ERROR = "LLM_ERROR"
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"


class CustomException(Exception):
    def __init__(
        self,
        status_code: int,
        error_code: ErrorCode | str,
        message: str,
        detail: str | None = None,
    ):
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        self.detail = detail
        super().__init__(message)


class UnauthorizedError(CustomException):
    def __init__(self, detail: str | None = None):
        super().__init__(
            status_code=401,
            error_code=ErrorCode.UNAUTHORIZED,
            message="인증이 필요합니다",
            detail=detail,
        )


class ValidationError(CustomException):
    def __init__(self, detail: str | None = None):
        super().__init__(
            status_code=400,
            error_code=ErrorCode.INVALID_INPUT,
            message="입력값이 올바르지 않습니다",
            detail=detail,
        )


class VerificationFailedError(CustomException):
    def __init__(self, detail: str | None = None):
        super().__init__(
            status_code=400,
            error_code=ErrorCode.VERIFICATION_FAILED,
            message="레포지토리를 찾을 수 없거나 비공개입니다. 공개 레포지토리를 제출해주세요",
            detail=detail,
        )


class DuplicateSubmissionError(CustomException):
    def __init__(self, detail: str | None = None):
        super().__init__(
            status_code=409,
            error_code=ErrorCode.DUPLICATE_SUBMISSION,
            message="이미 제출한 레포지토리입니다",
            detail=detail,
        )


class ProfileNotFoundError(CustomException):
    def __init__(self, detail: str | None = None):
        super().__init__(
            status_code=404,
            error_code=ErrorCode.PROFILE_NOT_FOUND,
            message="프로필을 찾을 수 없습니다. 먼저 각성을 진행해주세요",
            detail=detail,
        )


class ConcurrentUpdateError(CustomException):
    def __init__(self, detail: str | None = None):
        super().__init__(
            status_code=409,
            error_code=ErrorCode.CONCURRENT_UPDATE,
            message="다른 요청이 먼저 반영되었습니다. 다시 시도해주세요",
            detail=detail,
        )


class GitHubAPIError(CustomException):
    def __init__(self, detail: str | None = None):
        super().__init__(
            status_code=502,
            error_code=ErrorCode.GITHUB_API_ERROR,
            message="GitHub API 호출에 실패했습니다",
            detail=detail,
        )


class LLMError(CustomException):
    """LLM 호출/파싱 실패. 사용자에게 노출하지 않고 폴백으로 대체한다"""

    def __init__(self, detail: str | None = None):
        super().__init__(
            status_code=502,
            error_code=ErrorCode.LLM_ERROR,
            message="LLM 호출에 실패했습니다",
            detail=detail,
        )


class PersistenceError(CustomException):
    def __init__(self, detail: str | None = None):
        super().__init__(
            status_code=500,
            error_code=ErrorCode.PERSISTENCE_ERROR,
            message="데이터 저장에 실패했습니다",
            detail=detail,
        )


def register_exception_handlers(app):
    @app.exception_handler(CustomException)
    async def custom_exception_handler(request: Request, exc: CustomException):
        content = {
            "error_code": exc.error_code,
            "message": exc.message,
        }
        if exc.detail and not settings.is_production:
            content["detail"] = exc.detail

        return JSONResponse(
            status_code=exc.status_code,
            content=content,
        )
