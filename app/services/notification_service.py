"""알림 서비스 — 알림 비즈니스 로직.

Notification Service — Business logic for notification management.
Handles read/unread operations and the fan-out performed after issue status
changes and merge/unmerge operations.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.issue import Issue
from app.models.notification import (
    Notification,
    TYPE_ISSUE_MERGED,
    TYPE_ISSUE_UNMERGED,
    TYPE_STATUS_CHANGED,
)
from app.repositories.notification_repository import notification_repository


class NotificationService:
    """알림 서비스.

    Notification service providing shared read/unread operations
    and fan-out for issue lifecycle events.
    """

    # --- 공통 조회/읽음 처리 (Shared read/unread operations) ---

    async def list_notifications(
        self,
        db: AsyncSession,
        user_id: UUID,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Notification], int]:
        """사용자의 알림 목록을 페이지네이션하여 조회합니다.

        List paginated notifications for a user.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 사용자 UUID (User UUID)
            page: 페이지 번호 (Page number)
            per_page: 페이지당 항목 수 (Items per page)

        Returns:
            tuple[Sequence[Notification], int]: (알림 목록, 전체 개수)
                                                 (List of notifications, total count)
        """
        return await notification_repository.get_user_notifications(
            db, user_id, page, per_page
        )

    async def get_unread_count(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> int:
        """사용자의 읽지 않은 알림 수를 조회합니다.

        Get the count of unread notifications for a user.
        """
        return await notification_repository.get_unread_count(db, user_id)

    async def mark_read(
        self,
        db: AsyncSession,
        notification_id: UUID,
        user_id: UUID,
    ) -> bool:
        """단일 알림을 읽음 처리합니다.

        Mark a single notification as read.

        Returns:
            bool: 처리 성공 여부 (False when the notification is not the user's)
        """
        return await notification_repository.mark_read(db, notification_id, user_id)

    async def mark_all_read(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> int:
        """사용자의 모든 읽지 않은 알림을 읽음 처리합니다.

        Mark all unread notifications as read for a user.
        """
        return await notification_repository.mark_all_read(db, user_id)

    # --- 이슈 이벤트 알림 (Issue event fan-out) ---

    async def notify_status_change(
        self,
        db: AsyncSession,
        issue: Issue,
        recipients: Sequence[UUID],
        acting_user_id: UUID,
    ) -> int:
        """이슈 상태 변경 알림을 보고자들에게 발송합니다.

        Notify reporters that an issue's status changed. For a primary issue
        the recipients are all reporters of the merge; for a standalone issue
        only its reporter. The acting user is never notified of their own change.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            issue: 상태가 변경된 이슈 (Issue whose status changed)
            recipients: 수신 후보 사용자 ID (Candidate recipients)
            acting_user_id: 변경 수행자 (User who made the change)

        Returns:
            int: 생성된 알림 수 (Number of notifications created)
        """
        targets = _without(recipients, acting_user_id)
        message: str = f'"{issue.title}" 상태가 {issue.status}(으)로 변경되었습니다 (Status changed to {issue.status})'
        return await notification_repository.create_for_users(
            db,
            targets,
            notification_type=TYPE_STATUS_CHANGED,
            message=message,
            reference_type="issue",
            reference_id=issue.id,
        )

    async def notify_merged(
        self,
        db: AsyncSession,
        primary: Issue,
        recipients: Sequence[UUID],
        acting_user_id: UUID,
    ) -> int:
        """중복 이슈 보고자에게 병합 사실을 알립니다.

        Tell duplicate reporters their issue is now tracked by ``primary``.
        """
        targets = _without(recipients, acting_user_id)
        message: str = f'보고하신 이슈가 "{primary.title}"에 병합되었습니다 (Your issue was merged into "{primary.title}")'
        return await notification_repository.create_for_users(
            db,
            targets,
            notification_type=TYPE_ISSUE_MERGED,
            message=message,
            reference_type="issue",
            reference_id=primary.id,
        )

    async def notify_unmerged(
        self,
        db: AsyncSession,
        primary_id: UUID,
        recipients: Sequence[UUID],
        acting_user_id: UUID,
    ) -> int:
        """병합 해제 알림 — Tell duplicate reporters their issue is tracked separately again."""
        targets = _without(recipients, acting_user_id)
        message: str = "보고하신 이슈가 병합 해제되었습니다 (Your issue returned to separate tracking)"
        return await notification_repository.create_for_users(
            db,
            targets,
            notification_type=TYPE_ISSUE_UNMERGED,
            message=message,
            reference_type="issue",
            reference_id=primary_id,
        )


def _without(user_ids: Sequence[UUID], excluded: UUID) -> list[UUID]:
    # 순서 유지 중복 제거 (Order-preserving dedupe)
    return [uid for uid in dict.fromkeys(user_ids) if uid != excluded]


notification_service: NotificationService = NotificationService()
