"""공통 Pydantic 요청/응답 스키마 정의.

Common Pydantic request/response schema definitions.
Includes notification, pagination, error and generic message schemas
used across multiple API domains.
"""

from datetime import datetime
from typing import Any
from pydantic import BaseModel


# === 알림 (Notification) 스키마 ===

class NotificationResponse(BaseModel):
    """알림 응답 스키마.

    Notification response schema.
    reference_type + reference_id allow deep-linking to the issue in the client.

    Attributes:
        id: 알림 UUID (Notification unique identifier)
        type: 알림 유형 (Notification type)
        message: 알림 메시지 (Human-readable message)
        reference_type: 참조 엔티티 유형 (Source entity type, nullable)
        reference_id: 참조 엔티티 UUID (Source entity UUID, nullable)
        is_read: 읽음 여부 (Read status flag)
        created_at: 생성 일시 (Creation timestamp)
    """

    id: str  # 알림 UUID 문자열 (Notification UUID as string)
    type: str  # 알림 유형 — "status_changed"|"issue_merged"|"issue_unmerged"
    message: str  # 알림 메시지 (Display message)
    reference_type: str | None  # 참조 엔티티 유형 — 딥링크용 (Entity type for deep-linking)
    reference_id: str | None  # 참조 엔티티 UUID — 딥링크용 (Entity UUID for deep-linking)
    is_read: bool  # 읽음 여부 (Read flag)
    created_at: datetime  # 생성 일시 UTC (Creation timestamp)


# === 공통 (Common) 스키마 ===

class PaginatedResponse(BaseModel):
    """페이지네이션 응답 스키마.

    Paginated response wrapper schema.

    Attributes:
        items: 항목 목록 (List of result items)
        total: 전체 항목 수 (Total count across all pages)
        page: 현재 페이지 번호 (Current page number, 1-based)
        per_page: 페이지당 항목 수 (Items per page)
    """

    items: list[Any]  # 결과 항목 목록 (List of items for the current page)
    total: int  # 전체 항목 수 (Total item count)
    page: int  # 현재 페이지 — 1부터 시작 (Current page, 1-indexed)
    per_page: int  # 페이지당 항목 수 (Items per page)


class NotificationListResponse(PaginatedResponse):
    """알림 목록 응답 스키마 — Paginated notifications."""

    items: list[NotificationResponse]  # type: ignore[assignment]


class MessageResponse(BaseModel):
    """범용 메시지 응답 스키마.

    Generic message response schema for simple confirmations
    (unmerge, mark-read, and other actions without a body).

    Attributes:
        message: 응답 메시지 (Response message string)
    """

    message: str  # 응답 메시지 (Human-readable confirmation message)


class ErrorResponse(BaseModel):
    """오류 응답 스키마.

    Structured error body rendered for every domain error.

    Attributes:
        kind: 오류 분류 (not_found | invalid_argument | conflict | store_failure | forbidden | unauthorized)
        detail: 오류 메시지 (Message surfaced verbatim by the UI)
    """

    kind: str
    detail: str
