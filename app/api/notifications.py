"""알림 라우터 — 내 알림 API.

Notification Router — API endpoints for the acting user's notifications.
Provides list, unread count, mark read, and mark all read operations.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.config import settings
from app.database import get_db
from app.models.user import User
from app.schemas.common import MessageResponse, NotificationListResponse
from app.services.notification_service import notification_service
from app.utils.exceptions import NotFoundError

router: APIRouter = APIRouter()


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=settings.PAGE_SIZE_MAX),
) -> dict:
    """내 알림 목록을 조회합니다.

    List notifications for the acting user, newest first.

    Returns:
        dict: 페이지네이션된 알림 목록 (Paginated notification list)
    """
    notifications, total = await notification_service.list_notifications(
        db,
        user_id=current_user.id,
        page=page,
        per_page=per_page,
    )

    items: list[dict] = [
        {
            "id": str(n.id),
            "type": n.type,
            "message": n.message,
            "reference_type": n.reference_type,
            "reference_id": str(n.reference_id) if n.reference_id else None,
            "is_read": n.is_read,
            "created_at": n.created_at,
        }
        for n in notifications
    ]

    return {
        "items": items,
        "total": total,
        "page": page,
        "per_page": per_page,
    }


@router.get("/unread-count")
async def get_unread_count(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """읽지 않은 알림 수를 조회합니다."""
    count: int = await notification_service.get_unread_count(db, user_id=current_user.id)
    return {"unread_count": count}


@router.patch("/read-all", response_model=MessageResponse)
async def mark_all_read(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """모든 읽지 않은 알림을 읽음 처리합니다."""
    count: int = await notification_service.mark_all_read(db, user_id=current_user.id)
    await db.commit()

    return {"message": f"{count}개의 알림이 읽음 처리되었습니다 ({count} notifications marked as read)"}


@router.patch("/{notification_id}/read", response_model=MessageResponse)
async def mark_read(
    notification_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """단일 알림을 읽음 처리합니다.

    Mark a single notification as read.

    Raises:
        NotFoundError: 본인 알림이 아닐 때 (Notification absent or not the user's)
    """
    success: bool = await notification_service.mark_read(
        db,
        notification_id=notification_id,
        user_id=current_user.id,
    )
    if not success:
        raise NotFoundError("알림을 찾을 수 없습니다 (Notification not found)")
    await db.commit()

    return {"message": "알림이 읽음 처리되었습니다 (Notification marked as read)"}
