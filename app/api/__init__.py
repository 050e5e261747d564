"""API 라우터 패키지 — 모든 엔드포인트 통합.

API Router package — Aggregates all endpoints into a single router for
inclusion in the FastAPI application.

Included routers:
    - issues: 이슈 보고/상태 변경/타임라인/코멘트 (Issue lifecycle, timeline, remarks)
    - merges: 중복 이슈 병합/해제 (Duplicate issue merge and unmerge)
    - notifications: 내 알림 (Acting user's notifications)
    - caretakers: 배정 가능한 관리인 목록 (Caretakers management can assign)
"""

from fastapi import APIRouter

from app.api.caretakers import router as caretakers_router
from app.api.issues import router as issues_router
from app.api.merges import router as merges_router
from app.api.notifications import router as notifications_router
from app.schemas.common import ErrorResponse

# 도메인 오류 응답 문서화 — Structured {kind, detail} error bodies
_ERROR_RESPONSES: dict[int | str, dict] = {
    code: {"model": ErrorResponse} for code in (400, 401, 403, 404, 409, 503)
}

api_router: APIRouter = APIRouter(responses=_ERROR_RESPONSES)

# 이슈: /issues 하위 (Issues, status timeline, remarks, merge candidates)
api_router.include_router(issues_router, prefix="/issues", tags=["Issues"])
# 병합: /merges 하위 (Merge records)
api_router.include_router(merges_router, prefix="/merges", tags=["Merges"])
# 알림: /my/notifications 하위 (Notifications)
api_router.include_router(notifications_router, prefix="/my/notifications", tags=["Notifications"])
# 관리인: /caretakers 하위 (Assignable caretakers)
api_router.include_router(caretakers_router, prefix="/caretakers", tags=["Caretakers"])
