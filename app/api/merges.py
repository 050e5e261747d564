"""이슈 병합 라우터 — 중복 이슈 병합/해제 API.

Merge Router — Endpoints that merge duplicate issues into a primary issue,
read a merge record, and reverse a merge. Management only for writes.
Each call returns its result; the client decides whether to refetch.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, require_management
from app.database import get_db
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.merge import MergeRecordResponse, MergeRequest
from app.services.merge_service import merge_service

router: APIRouter = APIRouter()


@router.post("", status_code=201, response_model=MergeRecordResponse)
async def merge_issues(
    data: MergeRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_management)],
) -> dict:
    """중복 이슈를 주 이슈에 병합. 운영진 가능."""
    record = await merge_service.merge_issues(
        db, data.primary_issue_id, data.duplicate_issue_ids, current_user.id
    )
    response = merge_service.build_response(record)
    await db.commit()
    return response


@router.get("/{merge_id}", response_model=MergeRecordResponse)
async def get_merge(
    merge_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """병합 레코드 조회."""
    record = await merge_service.get_linked_issues(db, merge_id)
    return merge_service.build_response(record)


@router.delete("/{merge_id}", response_model=MessageResponse)
async def unmerge_issues(
    merge_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_management)],
) -> dict:
    """병합 해제. 운영진 가능."""
    await merge_service.unmerge_issues(db, merge_id, current_user.id)
    await db.commit()
    return {"message": "병합이 해제되었습니다 (Issues unmerged)"}
