"""사용자 서비스.

User service — Directory lookups for management, such as the caretakers an
issue can be assigned to.
"""

from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.user_repository import user_repository


class UserService:

    async def list_caretakers(self, db: AsyncSession) -> Sequence[User]:
        """배정 가능한 관리인 목록을 조회합니다.

        List active caretakers; their ids feed ``assigned_to`` of an
        "Assigned" status update.
        """
        return await user_repository.get_caretakers(db)


user_service: UserService = UserService()
