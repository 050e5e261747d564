"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Provides pre-configured HTTPException subclasses for the error taxonomy
shared by services and repositories. Each class carries a ``kind`` string
that the exception handler in ``app.main`` renders next to the detail, so
callers receive a structured ``{"kind", "detail"}`` body.

Usage:
    from app.utils.exceptions import NotFoundError, ConflictError
    raise NotFoundError("Issue not found")
    raise ConflictError("Issue is already merged")
"""

from fastapi import HTTPException, status


class AppError(HTTPException):
    """도메인 예외 베이스 — kind 필드를 가진 HTTPException.

    Base class for domain errors. ``kind`` identifies the error category
    independently of the HTTP status code.
    """

    kind: str = "error"

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(status_code=status_code, detail=detail)


class NotFoundError(AppError):
    """404 Not Found 예외 — 요청한 리소스를 찾을 수 없을 때 사용.

    Raised when a referenced issue, merge record, or notification does not exist.
    Not retryable.

    Args:
        detail: 오류 메시지 (Error message, default: "Resource not found")
    """

    kind = "not_found"

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status.HTTP_404_NOT_FOUND, detail)


class BadRequestError(AppError):
    """400 Bad Request 예외 — 잘못된 인자.

    Raised for invalid arguments that Pydantic validation cannot catch
    (e.g. empty duplicate set, primary included in its own duplicates,
    blank remarks, disallowed status transition).

    Args:
        detail: 오류 메시지 (Error message, default: "Bad request")
    """

    kind = "invalid_argument"

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status.HTTP_400_BAD_REQUEST, detail)


class ConflictError(AppError):
    """409 Conflict 예외 — 현재 상태와 충돌하는 요청.

    Raised when a target is already linked to another merge, is ineligible
    (already Resolved/Merged), or a concurrent writer claimed it first.
    The caller may retry with an adjusted request.

    Args:
        detail: 오류 메시지 (Error message, default: "Resource state conflict")
    """

    kind = "conflict"

    def __init__(self, detail: str = "Resource state conflict") -> None:
        super().__init__(status.HTTP_409_CONFLICT, detail)


class StoreFailureError(AppError):
    """503 Service Unavailable 예외 — 저장소 트랜잭션 실패.

    Raised when the underlying store transaction failed (timeout, transient
    error). The transaction has been rolled back, so the caller may retry.

    Args:
        detail: 오류 메시지 (Error message, default: "Store operation failed")
    """

    kind = "store_failure"

    def __init__(self, detail: str = "Store operation failed") -> None:
        super().__init__(status.HTTP_503_SERVICE_UNAVAILABLE, detail)


class ForbiddenError(AppError):
    """403 Forbidden 예외 — 권한 부족 시 사용.

    Raised when the authenticated user's role does not allow the operation
    (e.g. a student attempting a status update).

    Args:
        detail: 오류 메시지 (Error message, default: "Insufficient permissions")
    """

    kind = "forbidden"

    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(status.HTTP_403_FORBIDDEN, detail)


class UnauthorizedError(AppError):
    """401 Unauthorized 예외 — 인증 실패 시 사용.

    Raised when the bearer token is missing, invalid, or expired.

    Args:
        detail: 오류 메시지 (Error message, default: "Authentication required")
    """

    kind = "unauthorized"

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(status.HTTP_401_UNAUTHORIZED, detail)
