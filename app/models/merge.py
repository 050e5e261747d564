"""이슈 병합 관련 SQLAlchemy ORM 모델 정의.

Issue merge SQLAlchemy ORM model definitions.
A merge record ties one primary issue to the duplicates folded into it.
Uniqueness constraints on the primary and on each linked issue make the
store reject a second claim on the same issue, so two concurrent merges
racing for one duplicate produce exactly one winner.

Tables:
    - merge_records: 병합 레코드 (One active record per primary issue)
    - merge_record_links: 연결된 중복 이슈 (Linked duplicates with merge-time snapshot)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, String, DateTime, ForeignKey, Uuid, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class MergeRecord(Base):
    """병합 레코드 모델 — 주 이슈와 중복 이슈들의 연결 정보.

    Merge record model — Bookkeeping entity tying a primary issue to its
    linked duplicates and the aggregated reporter set.

    Attributes:
        id: 병합 ID (The mergeId stored on the primary issue)
        primary_issue_id: 주 이슈 FK (Primary issue, unique)
        all_reporters: 전체 보고자 ID 목록 (Deduplicated reporter ids, primary first)
        merged_at: 병합 일시 UTC (Merge timestamp)
        merged_by: 병합 수행자 FK (Acting user)

    Relationships:
        links: 연결된 중복 이슈 목록 (Linked duplicates)
    """

    __tablename__ = "merge_records"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 주 이슈 FK — 주 이슈당 활성 레코드는 하나 (At most one active record per primary)
    primary_issue_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("issues.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    # 전체 보고자 — JSON 문자열 UUID 목록 (List of reporter UUID strings)
    all_reporters: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    merged_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    merged_by: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)

    links = relationship(
        "MergeRecordLink",
        back_populates="merge_record",
        order_by="MergeRecordLink.position",
    )


class MergeRecordLink(Base):
    """병합 연결 모델 — 주 이슈에 연결된 중복 이슈 한 건.

    Merge link model — One duplicate issue folded into a primary.
    ``issue_id`` is unique across the table: an issue is linked under at most
    one record. ``prior_status`` is the status restored on unmerge.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        merge_id: 병합 레코드 FK (Parent merge record)
        issue_id: 중복 이슈 FK (Linked issue, unique)
        position: 요청 내 순서 (Order within the merge request)
        prior_status: 병합 직전 상태 (Status before the merge)
        title: 병합 시점 제목 (Title snapshot)
        reported_by: 병합 시점 보고자 (Reporter snapshot)
        issue_created_at: 이슈 생성 일시 (Issue creation timestamp snapshot)
    """

    __tablename__ = "merge_record_links"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    merge_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("merge_records.id", ondelete="CASCADE"), nullable=False, index=True)
    issue_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("issues.id", ondelete="CASCADE"), nullable=False)
    position: Mapped[int] = mapped_column(default=0)
    prior_status: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    reported_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    issue_created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("issue_id", name="uq_merge_link_issue"),
    )

    merge_record = relationship("MergeRecord", back_populates="links")
