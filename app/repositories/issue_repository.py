"""이슈 레포지토리.

Issue repository — Handles issues, issue_status_history and issue_remarks
queries. The conditional updates used by the merge flow check their row
count so a concurrent writer that got there first is detected instead of
overwritten.
"""

from datetime import datetime, timezone
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.issue import (
    Issue,
    IssueRemark,
    IssueStatusHistory,
    STATUS_MERGED,
    STATUS_RESOLVED,
    VISIBILITY_PUBLIC,
)
from app.repositories.base import BaseRepository

# 병합 대상이 될 수 없는 상태 — Statuses that cannot be folded into a primary
UNMERGEABLE_STATUSES: tuple[str, ...] = (STATUS_MERGED, STATUS_RESOLVED)


class IssueRepository(BaseRepository[Issue]):

    def __init__(self) -> None:
        super().__init__(Issue)

    async def get_list(
        self,
        db: AsyncSession,
        status: str | None = None,
        category: str | None = None,
        reported_by: UUID | None = None,
        assigned_to: UUID | None = None,
        visible_to: UUID | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Issue], int]:
        """이슈 목록을 최신순으로 조회합니다.

        List issues newest first. When ``visible_to`` is given, only public
        issues and that user's own private issues are returned.
        """
        query: Select = select(Issue).order_by(Issue.created_at.desc())
        if status:
            query = query.where(Issue.status == status)
        if category:
            query = query.where(Issue.category == category)
        if reported_by:
            query = query.where(Issue.reported_by == reported_by)
        if assigned_to:
            query = query.where(Issue.assigned_to == assigned_to)
        if visible_to:
            query = query.where(
                or_(Issue.visibility == VISIBILITY_PUBLIC, Issue.reported_by == visible_to)
            )
        return await self.get_paginated(db, query, page, per_page)

    async def get_mergeable(
        self,
        db: AsyncSession,
        primary_id: UUID,
    ) -> Sequence[Issue]:
        """병합 후보 이슈 목록 — Issues that may be merged into ``primary_id``."""
        query: Select = (
            select(Issue)
            .where(
                Issue.id != primary_id,
                Issue.status.not_in(UNMERGEABLE_STATUSES),
                Issue.merge_id.is_(None),
            )
            .order_by(Issue.created_at.desc())
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return result.scalars().all()

    # --- 상태 변경 (Status writes) ---

    async def update_status(
        self,
        db: AsyncSession,
        issue_id: UUID,
        status: str,
        expected_status: str | None = None,
    ) -> bool:
        """이슈 상태를 변경합니다.

        Set an issue's status. With ``expected_status`` the write only
        applies while the stored status still equals it.

        Returns:
            bool: 변경된 행이 있는지 여부 (Whether a row was updated)
        """
        stmt = update(Issue).where(Issue.id == issue_id)
        if expected_status is not None:
            stmt = stmt.where(Issue.status == expected_status)
        stmt = stmt.values(status=status, updated_at=datetime.now(timezone.utc))
        result = await db.execute(stmt.execution_options(synchronize_session=False))
        return result.rowcount == 1

    async def claim_as_duplicate(
        self,
        db: AsyncSession,
        issue_id: UUID,
    ) -> bool:
        """중복 이슈로 선점 — Force status to "Merged" if the issue is still eligible.

        Applies only while the issue is neither Merged nor Resolved and holds
        no merge_id of its own.

        Returns:
            bool: 선점 성공 여부 (False when another writer claimed it first)
        """
        stmt = (
            update(Issue)
            .where(
                Issue.id == issue_id,
                Issue.status.not_in(UNMERGEABLE_STATUSES),
                Issue.merge_id.is_(None),
            )
            .values(status=STATUS_MERGED, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        return result.rowcount == 1

    async def set_merge_id(
        self,
        db: AsyncSession,
        issue_id: UUID,
        merge_id: UUID,
    ) -> bool:
        """주 이슈에 병합 ID를 설정 — Only while the issue has none and is not linked."""
        stmt = (
            update(Issue)
            .where(
                Issue.id == issue_id,
                Issue.merge_id.is_(None),
                Issue.status != STATUS_MERGED,
            )
            .values(merge_id=merge_id, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        return result.rowcount == 1

    async def clear_merge_id(
        self,
        db: AsyncSession,
        issue_id: UUID,
        merge_id: UUID,
    ) -> bool:
        """주 이슈의 병합 ID를 해제 — Only while it still points at ``merge_id``."""
        stmt = (
            update(Issue)
            .where(Issue.id == issue_id, Issue.merge_id == merge_id)
            .values(merge_id=None, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        return result.rowcount == 1

    # --- 상태 이력 (Status history) ---

    async def get_history(
        self,
        db: AsyncSession,
        issue_id: UUID,
    ) -> Sequence[IssueStatusHistory]:
        query: Select = (
            select(IssueStatusHistory)
            .where(IssueStatusHistory.issue_id == issue_id)
            .order_by(IssueStatusHistory.timestamp)
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def add_history(
        self,
        db: AsyncSession,
        issue_id: UUID,
        status: str,
        changed_by: UUID | None = None,
        assigned_to: UUID | None = None,
        remarks: str | None = None,
    ) -> IssueStatusHistory:
        entry = IssueStatusHistory(
            issue_id=issue_id,
            status=status,
            changed_by=changed_by,
            assigned_to=assigned_to,
            remarks=remarks,
            timestamp=datetime.now(timezone.utc),
        )
        db.add(entry)
        await db.flush()
        return entry

    # --- 코멘트 (Remarks) ---

    async def get_remarks(
        self,
        db: AsyncSession,
        issue_id: UUID,
    ) -> Sequence[IssueRemark]:
        query: Select = (
            select(IssueRemark)
            .where(IssueRemark.issue_id == issue_id)
            .order_by(IssueRemark.created_at)
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def add_remark(
        self,
        db: AsyncSession,
        issue_id: UUID,
        author_id: UUID,
        text: str,
    ) -> IssueRemark:
        remark = IssueRemark(issue_id=issue_id, author_id=author_id, text=text)
        db.add(remark)
        await db.flush()
        await db.refresh(remark)
        return remark


issue_repository: IssueRepository = IssueRepository()
