"""관리인 라우터 — 배정 가능한 관리인 목록 API.

Caretaker Router — Lists caretakers for the assignment dialog. Management only.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_management
from app.database import get_db
from app.models.user import User
from app.schemas.user import CaretakerResponse
from app.services.user_service import user_service

router: APIRouter = APIRouter()


@router.get("", response_model=list[CaretakerResponse])
async def list_caretakers(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_management)],
) -> list[dict]:
    """관리인 목록 조회. 운영진 가능."""
    caretakers = await user_service.list_caretakers(db)
    return [{"id": str(u.id), "name": u.name, "email": u.email} for u in caretakers]
