"""이슈 서비스.

Issue service — Business logic for reporting issues, moving them through
the status lifecycle, remarks, and timeline derivation.
"""

import logging
from typing import Sequence
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.issue import (
    Issue,
    IssueRemark,
    STATUS_ASSIGNED,
    STATUS_CLOSED,
    STATUS_IN_PROGRESS,
    STATUS_MERGED,
    STATUS_REPORTED,
    STATUS_RESOLVED,
    VISIBILITY_PRIVATE,
)
from app.models.user import ROLE_CARETAKER, ROLE_STUDENT, User
from app.repositories.issue_repository import issue_repository
from app.repositories.merge_repository import merge_repository
from app.repositories.user_repository import user_repository
from app.schemas.issue import IssueCreate, StatusHistoryEntry, StatusTimeline, StatusUpdate
from app.services.notification_service import notification_service
from app.services.timeline_service import status_timeline_service
from app.utils.exceptions import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    StoreFailureError,
)

logger = logging.getLogger(__name__)

# 허용되는 상태 전이 — Allowed transitions from each status
ALLOWED_TRANSITIONS: dict[str, tuple[str, ...]] = {
    STATUS_REPORTED: (STATUS_ASSIGNED,),
    STATUS_ASSIGNED: (STATUS_IN_PROGRESS, STATUS_REPORTED),
    STATUS_IN_PROGRESS: (STATUS_RESOLVED, STATUS_ASSIGNED),
    STATUS_RESOLVED: (STATUS_CLOSED, STATUS_IN_PROGRESS),
    STATUS_CLOSED: (),
}

# 관리인이 설정할 수 있는 상태 — Targets a caretaker may set
CARETAKER_STATUSES: tuple[str, ...] = (STATUS_IN_PROGRESS, STATUS_RESOLVED)

_NOT_FOUND = "이슈를 찾을 수 없습니다 (Issue not found)"


class IssueService:

    async def build_response(
        self,
        db: AsyncSession,
        issue: Issue,
        include_history: bool = False,
    ) -> dict:
        names = await user_repository.get_names(db, [issue.reported_by, issue.assigned_to])
        response: dict = {
            "id": str(issue.id),
            "title": issue.title,
            "description": issue.description,
            "category": issue.category,
            "location": issue.location,
            "status": issue.status,
            "priority": issue.priority,
            "visibility": issue.visibility,
            "reported_by": str(issue.reported_by),
            "reported_by_name": names.get(issue.reported_by, "Unknown"),
            "assigned_to": str(issue.assigned_to) if issue.assigned_to else None,
            "assigned_to_name": names.get(issue.assigned_to) if issue.assigned_to else None,
            "merge_id": str(issue.merge_id) if issue.merge_id else None,
            "images": list(issue.images or []),
            "resolution_images": list(issue.resolution_images or []),
            "created_at": issue.created_at,
            "updated_at": issue.updated_at,
        }
        if include_history:
            response["status_history"] = [
                entry.model_dump() for entry in await self.get_history(db, issue.id)
            ]
        return response

    # --- 조회 (Reads) ---

    async def list_issues(
        self,
        db: AsyncSession,
        viewer: User,
        status: str | None = None,
        category: str | None = None,
        reported_by: UUID | None = None,
        assigned_to: UUID | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Issue], int]:
        # 학생은 공개 이슈와 본인 비공개 이슈만 조회 (Students see public issues and their own)
        visible_to = viewer.id if viewer.role == ROLE_STUDENT else None
        return await issue_repository.get_list(
            db, status, category, reported_by, assigned_to, visible_to, page, per_page
        )

    async def get_detail(
        self,
        db: AsyncSession,
        issue_id: UUID,
        viewer: User,
    ) -> Issue:
        issue = await issue_repository.get_by_id(db, issue_id)
        if issue is None or not self._can_view(issue, viewer):
            raise NotFoundError(_NOT_FOUND)
        return issue

    async def get_history(
        self,
        db: AsyncSession,
        issue_id: UUID,
    ) -> list[StatusHistoryEntry]:
        rows = await issue_repository.get_history(db, issue_id)
        return [StatusHistoryEntry.model_validate(row) for row in rows]

    async def get_timeline(
        self,
        db: AsyncSession,
        issue_id: UUID,
        viewer: User,
    ) -> StatusTimeline:
        """이슈의 상태 타임라인을 생성합니다.

        Build the status timeline for an issue from its stored history.
        """
        issue = await self.get_detail(db, issue_id, viewer)
        return status_timeline_service.build(await self.get_history(db, issue.id))

    # --- 생성 (Create) ---

    async def create_issue(
        self,
        db: AsyncSession,
        data: IssueCreate,
        reporter_id: UUID,
    ) -> Issue:
        """이슈를 생성하고 "Reported" 이력 항목을 기록합니다.

        Create an issue in status "Reported" and seed its history with a
        single "Reported" entry.
        """
        issue = await issue_repository.create(
            db,
            {
                "title": data.title,
                "description": data.description,
                "category": data.category,
                "location": data.location,
                "priority": data.priority,
                "visibility": data.visibility,
                "images": list(data.images),
                "reported_by": reporter_id,
                "status": STATUS_REPORTED,
            },
        )
        await issue_repository.add_history(
            db, issue.id, STATUS_REPORTED, changed_by=reporter_id, remarks="Issue reported"
        )
        return issue

    # --- 상태 변경 (Status update) ---

    async def update_status(
        self,
        db: AsyncSession,
        issue_id: UUID,
        data: StatusUpdate,
        acting_user: User,
    ) -> Issue:
        """이슈 상태를 변경하고 보고자들에게 알립니다.

        Move an issue to ``data.status``, append the transition to its
        history, and notify reporters. For a primary issue every reporter in
        the merge record is notified. Caretakers may only move issues assigned
        to them; moving back to "Reported" clears the assignee.

        Raises:
            NotFoundError: 이슈 또는 담당자 없음 (Issue or assignee not found)
            ForbiddenError: 역할이 허용하지 않는 변경 (Role does not allow the change)
            ConflictError: 병합된 이슈이거나 동시 변경 발생 (Issue is merged, or changed concurrently)
            BadRequestError: 비고 누락, 허용되지 않는 전이, 담당자 누락
                             (Missing remarks, disallowed transition, missing assignee)
            StoreFailureError: 저장소 오류, 롤백됨 (Store failure; rolled back)
        """
        issue = await issue_repository.get_by_id(db, issue_id)
        if issue is None:
            raise NotFoundError(_NOT_FOUND)
        if acting_user.role == ROLE_STUDENT:
            raise ForbiddenError("학생은 이슈 상태를 변경할 수 없습니다 (Students cannot update issue status)")
        if issue.status == STATUS_MERGED:
            raise ConflictError("병합된 이슈는 상태를 변경할 수 없습니다, 먼저 병합을 해제하세요 (Issue is merged; unmerge it first)")
        if not data.remarks.strip():
            raise BadRequestError("상태 변경 비고를 입력하세요 (Remarks are required for a status update)")
        if data.status not in ALLOWED_TRANSITIONS.get(issue.status, ()):
            raise BadRequestError(
                f"{issue.status}에서 {data.status}(으)로 변경할 수 없습니다 (Cannot move from {issue.status} to {data.status})"
            )
        if acting_user.role == ROLE_CARETAKER and data.status not in CARETAKER_STATUSES:
            raise ForbiddenError(f"관리인은 {data.status} 상태로 변경할 수 없습니다 (Caretakers cannot set {data.status})")
        if acting_user.role == ROLE_CARETAKER and issue.assigned_to != acting_user.id:
            raise ForbiddenError("본인에게 배정된 이슈만 변경할 수 있습니다 (Caretakers can only update issues assigned to them)")

        update_data: dict = {}
        assignee_id: UUID | None = None
        if data.status == STATUS_ASSIGNED:
            assignee_id = await self._resolve_assignee(db, data.assigned_to)
            update_data["assigned_to"] = assignee_id
        if data.status == STATUS_REPORTED:
            # 배정 취소 — Moving back to Reported drops the assignee
            update_data["assigned_to"] = None
        if data.status == STATUS_RESOLVED and data.resolution_images:
            update_data["resolution_images"] = list(issue.resolution_images or []) + list(data.resolution_images)

        previous = issue.status
        try:
            if not await issue_repository.update_status(db, issue.id, data.status, expected_status=previous):
                await db.rollback()
                raise ConflictError("이슈가 동시에 변경되었습니다 (Issue was changed concurrently, reload and retry)")
            if update_data:
                await issue_repository.update(db, issue.id, update_data)
            await issue_repository.add_history(
                db,
                issue.id,
                data.status,
                changed_by=acting_user.id,
                assigned_to=assignee_id,
                remarks=data.remarks.strip(),
            )
            await db.refresh(issue)
            recipients = await self._reporters_of(db, issue)
            await notification_service.notify_status_change(db, issue, recipients, acting_user.id)
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.warning("status update of %s failed: %s", issue_id, exc)
            raise StoreFailureError("상태 변경 중 저장소 오류가 발생했습니다 (Store failure during status update)") from exc

        logger.info("issue %s: %s -> %s by %s", issue_id, previous, data.status, acting_user.id)
        return issue

    # --- 코멘트 (Remarks) ---

    async def list_remarks(
        self,
        db: AsyncSession,
        issue_id: UUID,
        viewer: User,
    ) -> list[dict]:
        issue = await self.get_detail(db, issue_id, viewer)
        remarks = await issue_repository.get_remarks(db, issue.id)
        names = await user_repository.get_names(db, [r.author_id for r in remarks])
        return [self._remark_response(r, names) for r in remarks]

    async def add_remark(
        self,
        db: AsyncSession,
        issue_id: UUID,
        text: str,
        author: User,
    ) -> dict:
        issue = await self.get_detail(db, issue_id, author)
        if not text.strip():
            raise BadRequestError("코멘트 내용을 입력하세요 (Remark text is required)")
        remark = await issue_repository.add_remark(db, issue.id, author.id, text.strip())
        return self._remark_response(remark, {author.id: author.name})

    # --- 내부 헬퍼 (Internal helpers) ---

    def _can_view(self, issue: Issue, viewer: User) -> bool:
        if viewer.role != ROLE_STUDENT:
            return True
        return issue.visibility != VISIBILITY_PRIVATE or issue.reported_by == viewer.id

    async def _resolve_assignee(self, db: AsyncSession, assigned_to: str | None) -> UUID:
        if not assigned_to:
            raise BadRequestError("배정할 관리인을 지정하세요 (assigned_to is required when assigning)")
        try:
            assignee_id = UUID(assigned_to)
        except ValueError:
            raise BadRequestError("잘못된 관리인 ID입니다 (Invalid assigned_to id)")
        assignee = await user_repository.get_by_id(db, assignee_id)
        if assignee is None or not assignee.is_active:
            raise NotFoundError("관리인을 찾을 수 없습니다 (Caretaker not found)")
        if assignee.role != ROLE_CARETAKER:
            raise BadRequestError("관리인에게만 배정할 수 있습니다 (Issues can only be assigned to caretakers)")
        return assignee_id

    async def _reporters_of(self, db: AsyncSession, issue: Issue) -> list[UUID]:
        # 주 이슈면 병합된 모든 보고자 (All merged reporters for a primary issue)
        if issue.merge_id is not None:
            record = await merge_repository.get_by_id(db, issue.merge_id)
            if record is not None:
                return [UUID(reporter) for reporter in record.all_reporters]
        return [issue.reported_by]

    def _remark_response(self, remark: IssueRemark, names: dict[UUID, str]) -> dict:
        return {
            "id": str(remark.id),
            "author_id": str(remark.author_id),
            "author_name": names.get(remark.author_id, "Unknown"),
            "text": remark.text,
            "created_at": remark.created_at,
        }


issue_service: IssueService = IssueService()
