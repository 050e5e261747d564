"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
relationship resolution.

Modules:
    user: 사용자 (Users with hostel roles)
    issue: 이슈, 상태 이력, 코멘트 (Issues, status history, remarks)
    merge: 병합 레코드 및 연결 (Merge records and linked duplicates)
    notification: 알림 (User notifications)
"""

from app.models.user import User
from app.models.issue import Issue, IssueStatusHistory, IssueRemark
from app.models.merge import MergeRecord, MergeRecordLink
from app.models.notification import Notification

__all__ = [
    "User",
    "Issue", "IssueStatusHistory", "IssueRemark",
    "MergeRecord", "MergeRecordLink",
    "Notification",
]
