"""병합 레코드 레포지토리.

Merge record repository — Handles merge_records and merge_record_links queries.
"""

from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.merge import MergeRecord, MergeRecordLink
from app.repositories.base import BaseRepository


class MergeRepository(BaseRepository[MergeRecord]):

    def __init__(self) -> None:
        super().__init__(MergeRecord)

    async def get_with_links(
        self,
        db: AsyncSession,
        merge_id: UUID,
    ) -> MergeRecord | None:
        """연결 정보와 함께 병합 레코드를 조회합니다.

        Retrieve a merge record with its links eager-loaded.
        """
        query: Select = (
            select(MergeRecord)
            .options(selectinload(MergeRecord.links))
            .where(MergeRecord.id == merge_id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_linked_issue_ids(
        self,
        db: AsyncSession,
        issue_ids: Sequence[UUID],
    ) -> set[UUID]:
        """이미 다른 병합에 연결된 이슈 ID — Ids among ``issue_ids`` already linked somewhere."""
        if not issue_ids:
            return set()
        result = await db.execute(
            select(MergeRecordLink.issue_id).where(MergeRecordLink.issue_id.in_(issue_ids))
        )
        return set(result.scalars().all())

    async def create_record(
        self,
        db: AsyncSession,
        record_data: dict[str, Any],
        links: list[dict[str, Any]],
    ) -> MergeRecord:
        """병합 레코드와 연결 행을 함께 생성합니다.

        Create the record and its link rows in one flush. A unique-constraint
        violation here means another merge already claimed the primary or one
        of the duplicates.

        Raises:
            sqlalchemy.exc.IntegrityError: 중복 선점 시 (On a concurrent claim)
        """
        record = MergeRecord(**record_data)
        db.add(record)
        await db.flush()
        for position, link in enumerate(links):
            db.add(MergeRecordLink(merge_id=record.id, position=position, **link))
        await db.flush()
        return record

    async def delete_record(
        self,
        db: AsyncSession,
        merge_id: UUID,
    ) -> bool:
        """병합 레코드와 연결 행을 삭제합니다.

        Delete the link rows, then the record itself.

        Returns:
            bool: 레코드 삭제 여부 (Whether the record row existed)
        """
        await db.execute(
            delete(MergeRecordLink)
            .where(MergeRecordLink.merge_id == merge_id)
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(
            delete(MergeRecord)
            .where(MergeRecord.id == merge_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1


merge_repository: MergeRepository = MergeRepository()
