"""이슈 병합 서비스.

Issue merge service — Links duplicate issues to one primary issue and
reverses the link.

Every mutating operation is all-or-nothing from the caller's point of view.
Validation runs before any write; the writes themselves are conditional
(unique link rows, status claims that check their row count), and any
failure rolls the session back before the error is raised. The router
commits only after the service returns.
"""

import logging
from typing import Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.issue import STATUS_MERGED, STATUS_REPORTED, Issue, issue_snapshot
from app.models.merge import MergeRecord
from app.repositories.issue_repository import UNMERGEABLE_STATUSES, issue_repository
from app.repositories.merge_repository import merge_repository
from app.services.notification_service import notification_service
from app.utils.exceptions import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    StoreFailureError,
)

logger = logging.getLogger(__name__)


class MergeService:

    def build_response(self, record: MergeRecord) -> dict:
        """병합 레코드 응답 딕셔너리 — ``links`` must be loaded."""
        linked_ids: list[str] = [str(link.issue_id) for link in record.links]
        details: dict[str, dict] = {
            str(link.issue_id): {
                "title": link.title,
                "reported_by": str(link.reported_by),
                "created_at": link.issue_created_at,
                "prior_status": link.prior_status,
            }
            for link in record.links
        }
        return {
            "id": str(record.id),
            "primary_issue_id": str(record.primary_issue_id),
            "linked_issue_ids": linked_ids,
            "linked_issue_details": details,
            "all_reporters": list(record.all_reporters),
            "merged_at": record.merged_at,
            "merged_by": str(record.merged_by),
        }

    async def get_linked_issues(
        self,
        db: AsyncSession,
        merge_id: UUID,
    ) -> MergeRecord:
        """병합 레코드를 조회합니다.

        Fetch a merge record with its linked issues.

        Raises:
            NotFoundError: 레코드가 없을 때, 예: 직전에 병합 해제됨
                           (Record absent, e.g. an unmerge just removed it)
        """
        record = await merge_repository.get_with_links(db, merge_id)
        if record is None:
            raise NotFoundError("병합 레코드를 찾을 수 없습니다 (Merge record not found)")
        return record

    async def merge_issues(
        self,
        db: AsyncSession,
        primary_id: UUID,
        duplicate_ids: Sequence[UUID],
        acting_user_id: UUID,
    ) -> MergeRecord:
        """중복 이슈들을 주 이슈에 병합합니다.

        Merge ``duplicate_ids`` into ``primary_id``.

        Each duplicate is snapshotted, its current status recorded for a
        later unmerge, and its status forced to "Merged". The primary
        receives the new merge id. Repeated ids in ``duplicate_ids`` collapse.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            primary_id: 주 이슈 UUID (Issue kept as the tracking point)
            duplicate_ids: 중복 이슈 UUID 목록 (Duplicates to fold in)
            acting_user_id: 수행자 UUID (User performing the merge)

        Returns:
            MergeRecord: 생성된 병합 레코드, 연결 정보 포함 (Created record with links loaded)

        Raises:
            BadRequestError: 빈 목록 또는 주 이슈가 중복 목록에 포함
                             (Empty set, or primary listed as its own duplicate)
            NotFoundError: 존재하지 않는 이슈 (An id does not resolve to an issue)
            ConflictError: 이미 병합된 주 이슈 또는 자격 없는 중복 이슈, 동시 병합 경합 패배
                           (Primary already merged, ineligible duplicate, or lost a concurrent claim)
            StoreFailureError: 저장소 오류, 롤백됨 (Store failure; rolled back, retryable)
        """
        duplicates: list[UUID] = list(dict.fromkeys(duplicate_ids))
        if not duplicates:
            raise BadRequestError("병합할 중복 이슈를 하나 이상 선택하세요 (Select at least one duplicate issue to merge)")
        if primary_id in duplicates:
            raise BadRequestError("주 이슈는 자기 자신과 병합할 수 없습니다 (Primary issue cannot be merged into itself)")

        try:
            primary = await issue_repository.get_by_id(db, primary_id)
            if primary is None:
                raise NotFoundError(f"이슈를 찾을 수 없습니다 (Issue not found: {primary_id})")

            found = await issue_repository.get_many(db, duplicates)
            missing = [str(issue_id) for issue_id in duplicates if issue_id not in found]
            if missing:
                raise NotFoundError(f"이슈를 찾을 수 없습니다 (Issues not found: {', '.join(missing)})")

            self._check_primary(primary)
            already_linked = await merge_repository.get_linked_issue_ids(db, duplicates)
            for issue_id in duplicates:
                self._check_duplicate(found[issue_id], already_linked)

            ordered = [found[issue_id] for issue_id in duplicates]
            all_reporters: list[str] = list(
                dict.fromkeys(str(issue.reported_by) for issue in [primary, *ordered])
            )
            links = [
                {"issue_id": issue.id, "prior_status": issue.status, **issue_snapshot(issue)}
                for issue in ordered
            ]

            record = await merge_repository.create_record(
                db,
                {
                    "primary_issue_id": primary.id,
                    "all_reporters": all_reporters,
                    "merged_by": acting_user_id,
                },
                links,
            )
            if not await issue_repository.set_merge_id(db, primary.id, record.id):
                await db.rollback()
                raise ConflictError("주 이슈가 이미 다른 병합에 사용되었습니다 (Primary issue was claimed by a concurrent merge)")

            for issue in ordered:
                if not await issue_repository.claim_as_duplicate(db, issue.id):
                    await db.rollback()
                    raise ConflictError(
                        f"이슈가 이미 다른 병합에 연결되었습니다 (Issue {issue.id} was claimed by a concurrent merge)"
                    )
                await issue_repository.add_history(
                    db,
                    issue.id,
                    STATUS_MERGED,
                    changed_by=acting_user_id,
                    remarks=f"Merged into issue {primary.id}",
                )

            await notification_service.notify_merged(
                db, primary, [issue.reported_by for issue in ordered], acting_user_id
            )
            merge_id = record.id
            loaded = await merge_repository.get_with_links(db, merge_id)
        except IntegrityError:
            await db.rollback()
            raise ConflictError("이슈가 이미 다른 병합에 연결되었습니다 (An issue was claimed by a concurrent merge)")
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.warning("merge of %s into %s failed: %s", duplicates, primary_id, exc)
            raise StoreFailureError("병합 처리 중 저장소 오류가 발생했습니다 (Store failure during merge)") from exc

        logger.info(
            "merged %d issue(s) into %s as %s by %s",
            len(duplicates), primary_id, merge_id, acting_user_id,
        )
        return loaded

    async def unmerge_issues(
        self,
        db: AsyncSession,
        merge_id: UUID,
        acting_user_id: UUID,
    ) -> None:
        """병합을 해제합니다.

        Reverse a merge: restore each linked issue to the status it had
        before the merge, clear the primary's merge id, delete the record.
        Retrying after a successful unmerge raises NotFoundError.

        Raises:
            NotFoundError: 레코드가 없을 때 (Record absent or already unmerged)
            ConflictError: 연결 이슈 상태가 예상과 다를 때 (Linked state changed underneath)
            StoreFailureError: 저장소 오류, 롤백됨 (Store failure; rolled back, retryable)
        """
        try:
            record = await merge_repository.get_with_links(db, merge_id)
            if record is None:
                raise NotFoundError("병합 레코드를 찾을 수 없습니다 (Merge record not found)")

            primary_id = record.primary_issue_id
            links = list(record.links)
            for link in links:
                restored = link.prior_status or STATUS_REPORTED
                if not await issue_repository.update_status(
                    db, link.issue_id, restored, expected_status=STATUS_MERGED
                ):
                    await db.rollback()
                    raise ConflictError(
                        f"연결된 이슈 상태가 변경되었습니다 (Linked issue {link.issue_id} is no longer merged)"
                    )
                await issue_repository.add_history(
                    db,
                    link.issue_id,
                    restored,
                    changed_by=acting_user_id,
                    remarks=f"Unmerged from issue {primary_id}",
                )

            if not await issue_repository.clear_merge_id(db, primary_id, merge_id):
                await db.rollback()
                raise ConflictError("주 이슈의 병합 정보가 일치하지 않습니다 (Primary issue no longer holds this merge)")
            if not await merge_repository.delete_record(db, merge_id):
                await db.rollback()
                raise NotFoundError("병합 레코드를 찾을 수 없습니다 (Merge record not found)")

            await notification_service.notify_unmerged(
                db, primary_id, [link.reported_by for link in links], acting_user_id
            )
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.warning("unmerge of %s failed: %s", merge_id, exc)
            raise StoreFailureError("병합 해제 중 저장소 오류가 발생했습니다 (Store failure during unmerge)") from exc

        logger.info("unmerged %s (%d issue(s)) by %s", merge_id, len(links), acting_user_id)

    async def list_candidates(
        self,
        db: AsyncSession,
        primary_id: UUID,
    ) -> Sequence[Issue]:
        """병합 후보 목록 — Issues eligible to be merged into ``primary_id``."""
        primary = await issue_repository.get_by_id(db, primary_id)
        if primary is None:
            raise NotFoundError("이슈를 찾을 수 없습니다 (Issue not found)")
        return await issue_repository.get_mergeable(db, primary_id)

    def _check_primary(self, primary: Issue) -> None:
        # 이미 병합된 주 이슈 확장은 지원하지 않음 (Extending an existing merge is rejected)
        if primary.merge_id is not None:
            raise ConflictError(
                f"주 이슈에 이미 병합 레코드가 있습니다 (Primary issue already holds merge {primary.merge_id})"
            )
        if primary.status == STATUS_MERGED:
            raise ConflictError("병합된 이슈는 주 이슈가 될 수 없습니다 (A merged issue cannot be a primary)")

    def _check_duplicate(self, issue: Issue, already_linked: set[UUID]) -> None:
        if issue.id in already_linked or issue.status == STATUS_MERGED:
            raise ConflictError(f"이슈가 이미 다른 병합에 연결되어 있습니다 (Issue {issue.id} is already merged)")
        if issue.status in UNMERGEABLE_STATUSES:
            raise ConflictError(f"해결된 이슈는 병합할 수 없습니다 (Issue {issue.id} is {issue.status})")
        if issue.merge_id is not None:
            raise ConflictError(f"주 이슈는 중복으로 병합할 수 없습니다 (Issue {issue.id} is a primary issue)")


merge_service: MergeService = MergeService()
