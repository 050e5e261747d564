"""이슈 관련 SQLAlchemy ORM 모델 정의.

Issue-related SQLAlchemy ORM model definitions.
An issue carries its current status inline and an append-only status
history in a child table; the latest history entry always matches the
inline status.

Tables:
    - issues: 유지보수 이슈 (Reported maintenance issues)
    - issue_status_history: 상태 변경 이력 (Append-only status transitions)
    - issue_remarks: 이슈 코멘트 (Free-form comments on an issue)
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, String, DateTime, Text, ForeignKey, Uuid, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

# 이슈 상태 — Issue statuses
STATUS_REPORTED = "Reported"
STATUS_ASSIGNED = "Assigned"
STATUS_IN_PROGRESS = "In Progress"
STATUS_RESOLVED = "Resolved"
STATUS_CLOSED = "Closed"
STATUS_MERGED = "Merged"

# 타임라인 표시용 정규 상태 순서 — Canonical sequence used for timeline display
CANONICAL_STATUSES: tuple[str, ...] = (
    STATUS_REPORTED,
    STATUS_ASSIGNED,
    STATUS_IN_PROGRESS,
    STATUS_RESOLVED,
    STATUS_CLOSED,
)

VISIBILITY_PUBLIC = "Public"
VISIBILITY_PRIVATE = "Private"


class Issue(Base):
    """이슈 모델 — 학생이 보고한 유지보수 이슈.

    Issue model — A maintenance issue reported by a student.
    ``merge_id`` is set only on a primary issue that has absorbed duplicates;
    linked duplicates carry status "Merged" and no merge_id.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        title: 이슈 제목 (Short title)
        description: 상세 설명 (Description)
        category: 분류 (Category, e.g. "Plumbing", "Electrical")
        location: 위치 (Hostel/block/room, free-form)
        reported_by: 보고자 FK (Reporter user foreign key)
        status: 현재 상태 (Current status)
        priority: 우선순위 (Low | Normal | High | Emergency)
        visibility: 공개 여부 (Public | Private)
        assigned_to: 담당 관리인 FK (Assigned caretaker, optional)
        merge_id: 병합 레코드 ID (Active merge record on a primary issue)
        images: 이미지 URL 목록 (Report image URLs)
        resolution_images: 해결 증빙 이미지 URL 목록 (Resolution proof URLs)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)

    Relationships:
        history: 상태 이력 (Status history, cascade delete)
        remarks: 코멘트 목록 (Remarks, cascade delete)
    """

    __tablename__ = "issues"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # 보고자 FK — Reporting student
    reported_by: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    # 현재 상태 — Reported → Assigned → In Progress → Resolved → Closed, or Merged
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=STATUS_REPORTED)
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default="Normal")
    visibility: Mapped[str] = mapped_column(String(10), nullable=False, default=VISIBILITY_PUBLIC)
    # 담당 관리인 FK — Caretaker working on the issue (SET NULL on user delete)
    assigned_to: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    # 병합 레코드 ID — FK 없음, 레코드가 이슈를 참조 (No FK; merge_records references issues)
    merge_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    images: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    resolution_images: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_issues_status", "status"),
        Index("ix_issues_reported_by", "reported_by"),
    )

    # 관계 — Relationships
    history = relationship(
        "IssueStatusHistory",
        back_populates="issue",
        cascade="all, delete-orphan",
        order_by="IssueStatusHistory.timestamp",
    )
    remarks = relationship(
        "IssueRemark",
        back_populates="issue",
        cascade="all, delete-orphan",
        order_by="IssueRemark.created_at",
    )


class IssueStatusHistory(Base):
    """상태 이력 모델 — 이슈 상태 전이 기록 (추가 전용).

    Status history model — One row per status transition, append-only.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        issue_id: 이슈 FK (Parent issue)
        status: 전이된 상태 (Status entered)
        timestamp: 전이 일시 UTC (When the status was entered)
        assigned_to: 배정 대상 (Assignee at the time, optional)
        remarks: 비고 (Remarks attached to the transition, optional)
        changed_by: 변경자 FK (Acting user, NULL for system entries)
    """

    __tablename__ = "issue_status_history"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    issue_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("issues.id", ondelete="CASCADE"), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    assigned_to: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
    changed_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    issue = relationship("Issue", back_populates="history")


class IssueRemark(Base):
    """이슈 코멘트 모델.

    Issue remark model — Free-form comment left by any user on an issue.
    """

    __tablename__ = "issue_remarks"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    issue_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("issues.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    issue = relationship("Issue", back_populates="remarks")


def issue_snapshot(issue: Issue) -> dict[str, Any]:
    """병합 시점 스냅샷 — Fields captured for a linked issue at merge time."""
    return {
        "title": issue.title,
        "reported_by": issue.reported_by,
        "issue_created_at": issue.created_at,
    }
