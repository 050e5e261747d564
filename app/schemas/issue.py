"""이슈 Pydantic 스키마.

Issue request/response schemas, including the status history entry and the
derived status timeline. Request bodies are parsed strictly at the boundary:
unknown priorities, visibilities or target statuses are rejected with 422
before any service code runs.
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

# 상태 변경 요청에서 허용하는 대상 상태 — "Merged"는 병합으로만 설정됨
# Targets accepted by a status update; "Merged" is only set by a merge
TargetStatus = Literal["Reported", "Assigned", "In Progress", "Resolved", "Closed"]
Priority = Literal["Low", "Normal", "High", "Emergency"]
Visibility = Literal["Public", "Private"]


class IssueCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: str = ""
    category: str = Field(..., min_length=1, max_length=50)
    location: str | None = None
    priority: Priority = "Normal"
    visibility: Visibility = "Public"
    images: list[str] = []


class StatusUpdate(BaseModel):
    """상태 변경 요청 스키마.

    Status update request. ``remarks`` is mandatory (blank remarks are
    rejected by the service), ``assigned_to`` is required when moving to
    "Assigned".
    """

    status: TargetStatus
    remarks: str = ""
    assigned_to: str | None = None  # 배정할 관리인 UUID (Caretaker UUID)
    resolution_images: list[str] = []


class RemarkCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=5000)


class RemarkResponse(BaseModel):
    id: str
    author_id: str
    author_name: str
    text: str
    created_at: datetime


class StatusHistoryEntry(BaseModel):
    """상태 이력 항목 — 타임라인 빌더의 입력.

    One status transition. Built from ORM rows via ``from_attributes`` so the
    timeline builder never sees loosely-typed payloads.
    """

    model_config = ConfigDict(from_attributes=True)

    status: str
    timestamp: datetime
    assigned_to: UUID | None = None
    remarks: str | None = None


class IssueResponse(BaseModel):
    id: str
    title: str
    description: str
    category: str
    location: str | None
    status: str
    priority: str
    visibility: str
    reported_by: str
    reported_by_name: str
    assigned_to: str | None
    assigned_to_name: str | None
    merge_id: str | None
    images: list[str]
    resolution_images: list[str]
    created_at: datetime
    updated_at: datetime
    status_history: list[StatusHistoryEntry] = []


# === 타임라인 (Timeline) 스키마 ===

class TimelineStep(BaseModel):
    """정규 상태 단계 — 완료 여부와 가장 최근 일치 항목의 메타데이터.

    One canonical step. Metadata comes from the most recent history entry
    with the same status; all three fields are None for a pending step.
    """

    status: str
    completed: bool
    timestamp: datetime | None = None
    assigned_to: UUID | None = None
    remarks: str | None = None


class TimelineSummary(BaseModel):
    total_updates: int
    current_status: str
    duration_hours: int | None = None  # 항목이 2개 이상일 때만 (Only with two or more entries)


class StatusTimeline(BaseModel):
    steps: list[TimelineStep]
    summary: TimelineSummary | None = None  # 이력이 비었으면 None (None for empty history)
