"""이슈 라우터 — 이슈 보고, 상태 변경, 타임라인, 코멘트 API.

Issue Router — Endpoints for reporting issues, status updates, the status
timeline, remarks, and merge candidates.
Any authenticated user can report and view. Caretakers and management can
update status. Management can list merge candidates.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, require_management, require_staff
from app.config import settings
from app.database import get_db
from app.models.user import User
from app.schemas.common import PaginatedResponse
from app.schemas.issue import (
    IssueCreate,
    IssueResponse,
    RemarkCreate,
    RemarkResponse,
    StatusTimeline,
    StatusUpdate,
)
from app.services.issue_service import issue_service
from app.services.merge_service import merge_service

router: APIRouter = APIRouter()


@router.get("", response_model=PaginatedResponse)
async def list_issues(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    status: str | None = Query(None),
    category: str | None = Query(None),
    reported_by: UUID | None = Query(None),
    assigned_to: UUID | None = Query(None),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=settings.PAGE_SIZE_MAX),
) -> dict:
    """이슈 목록 조회. 학생은 공개 이슈와 본인 이슈만."""
    issues, total = await issue_service.list_issues(
        db, current_user, status, category, reported_by, assigned_to, page, per_page
    )
    items = [await issue_service.build_response(db, i) for i in issues]
    return {"items": items, "total": total, "page": page, "per_page": per_page}


@router.post("", status_code=201, response_model=IssueResponse)
async def create_issue(
    data: IssueCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """이슈 보고. 전 역할 가능."""
    issue = await issue_service.create_issue(db, data, current_user.id)
    await db.commit()
    return await issue_service.build_response(db, issue, include_history=True)


@router.get("/{issue_id}", response_model=IssueResponse)
async def get_issue(
    issue_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """이슈 상세 조회 — 상태 이력 포함."""
    issue = await issue_service.get_detail(db, issue_id, current_user)
    return await issue_service.build_response(db, issue, include_history=True)


@router.patch("/{issue_id}/status", response_model=IssueResponse)
async def update_issue_status(
    issue_id: UUID,
    data: StatusUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> dict:
    """이슈 상태 변경. 관리인/운영진 가능."""
    issue = await issue_service.update_status(db, issue_id, data, current_user)
    await db.commit()
    return await issue_service.build_response(db, issue, include_history=True)


@router.get("/{issue_id}/timeline", response_model=StatusTimeline)
async def get_issue_timeline(
    issue_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> StatusTimeline:
    """이슈 상태 타임라인."""
    return await issue_service.get_timeline(db, issue_id, current_user)


@router.get("/{issue_id}/remarks", response_model=list[RemarkResponse])
async def list_issue_remarks(
    issue_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[dict]:
    """이슈 코멘트 목록."""
    return await issue_service.list_remarks(db, issue_id, current_user)


@router.post("/{issue_id}/remarks", status_code=201, response_model=RemarkResponse)
async def add_issue_remark(
    issue_id: UUID,
    data: RemarkCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """이슈 코멘트 작성."""
    remark = await issue_service.add_remark(db, issue_id, data.text, current_user)
    await db.commit()
    return remark


@router.get("/{issue_id}/merge-candidates", response_model=list[IssueResponse])
async def list_merge_candidates(
    issue_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_management)],
) -> list[dict]:
    """병합 후보 이슈 목록. 운영진 가능."""
    candidates = await merge_service.list_candidates(db, issue_id)
    return [await issue_service.build_response(db, i) for i in candidates]
