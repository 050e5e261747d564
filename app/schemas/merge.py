"""이슈 병합 Pydantic 스키마.

Issue merge request/response schemas.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class MergeRequest(BaseModel):
    """병합 요청 스키마.

    Merge request. An empty ``duplicate_issue_ids`` parses successfully and
    is rejected by the service as an invalid argument, so callers get the
    same structured error as for other merge failures.

    Attributes:
        primary_issue_id: 유지할 주 이슈 (Issue kept as the single tracking point)
        duplicate_issue_ids: 병합할 중복 이슈 목록 (Duplicates to fold in)
    """

    primary_issue_id: UUID
    duplicate_issue_ids: list[UUID]


class LinkedIssueDetail(BaseModel):
    """병합 시점 스냅샷 — Snapshot of a linked issue captured at merge time."""

    title: str
    reported_by: str
    created_at: datetime
    prior_status: str


class MergeRecordResponse(BaseModel):
    """병합 레코드 응답 스키마.

    Attributes:
        id: 병합 ID (mergeId)
        primary_issue_id: 주 이슈 UUID (Primary issue)
        linked_issue_ids: 연결된 중복 이슈 UUID 목록 (Linked duplicates, request order)
        linked_issue_details: 이슈별 스냅샷 (Snapshot per linked issue id)
        all_reporters: 중복 제거된 보고자 목록 (Deduplicated reporters, primary first)
        merged_at: 병합 일시 (Merge timestamp)
        merged_by: 병합 수행자 (Acting user)
    """

    id: str
    primary_issue_id: str
    linked_issue_ids: list[str]
    linked_issue_details: dict[str, LinkedIssueDetail]
    all_reporters: list[str]
    merged_at: datetime
    merged_by: str
