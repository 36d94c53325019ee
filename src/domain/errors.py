"""
Error definitions for the template service.

규칙:
- 모든 에러는 code + message + context
- 생성 실패는 TemplateCreationError 하나로 수렴 (원인은 로그에만)
- 스토리지 에러는 StorageError 계열로 구분
"""

from typing import Any


class TemplateError(Exception):
    """
    템플릿 서비스 에러 베이스.

    Usage:
        raise FileConflictError("File already exists", path="/a.txt")
    """

    code = "TEMPLATE_ERROR"

    def __init__(self, message: str, code: str | None = None, **context: Any) -> None:
        if code is not None:
            self.code = code
        self.message = message
        self.context = context
        super().__init__(f"[{self.code}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "code": self.code,
            "message": self.message,
            **self.context,
        }


class FileConflictError(TemplateError):
    """대상 경로에 이미 파일이 존재함."""

    code = "FILE_ALREADY_EXISTS"


class TemplateCreationError(TemplateError):
    """
    템플릿 기반 파일 생성 실패.

    호출자에게는 고정 메시지만 노출. 원인은 서버 로그와 __cause__에만 남음.
    """

    code = "TEMPLATE_CREATE_FAILED"

    def __init__(self, message: str = "Failed to create file from template", **context: Any) -> None:
        super().__init__(message, **context)


# =============================================================================
# Storage Errors
# =============================================================================

class StorageError(TemplateError):
    """스토리지 계층 에러 베이스."""

    code = "STORAGE_ERROR"


class NotFoundError(StorageError):
    """경로에 노드가 없음."""

    code = "NOT_FOUND"


class NotPermittedError(StorageError):
    """접근 권한 없음."""

    code = "NOT_PERMITTED"


class NoUserError(StorageError):
    """인증된 사용자 없음."""

    code = "NO_USER"


class InvalidPathError(StorageError):
    """경로 형식 오류 또는 사용자 루트 밖의 경로."""

    code = "INVALID_PATH"


class StorageUnavailableError(StorageError):
    """백엔드 장애 (디스크 오류 등)."""

    code = "STORAGE_UNAVAILABLE"


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수."""

    # === Template ===
    FILE_ALREADY_EXISTS = FileConflictError.code
    TEMPLATE_CREATE_FAILED = TemplateCreationError.code

    # === Storage ===
    NOT_FOUND = NotFoundError.code
    NOT_PERMITTED = NotPermittedError.code
    NO_USER = NoUserError.code
    INVALID_PATH = InvalidPathError.code
    STORAGE_UNAVAILABLE = StorageUnavailableError.code
