"""사용자 레포지토리.

User repository — Lookups used to resolve display names, validate assignees
and list the caretakers management can assign issues to.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import ROLE_CARETAKER, User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):

    def __init__(self) -> None:
        super().__init__(User)

    async def get_names(
        self,
        db: AsyncSession,
        user_ids: Sequence[UUID],
    ) -> dict[UUID, str]:
        """사용자 ID별 표시 이름 — Display names keyed by user id."""
        ids = [uid for uid in user_ids if uid is not None]
        if not ids:
            return {}
        result = await db.execute(select(User.id, User.name).where(User.id.in_(ids)))
        return {row.id: row.name for row in result.all()}

    async def get_caretakers(
        self,
        db: AsyncSession,
    ) -> Sequence[User]:
        """활성 관리인 목록 — Active caretakers ordered by name."""
        query: Select = (
            select(User)
            .where(User.role == ROLE_CARETAKER, User.is_active.is_(True))
            .order_by(User.name)
        )
        result = await db.execute(query)
        return result.scalars().all()


user_repository: UserRepository = UserRepository()
