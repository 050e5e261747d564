"""사용자 관련 SQLAlchemy ORM 모델 정의.

User SQLAlchemy ORM model definitions.
Accounts are provisioned by the hostel identity service; this table holds the
subset of profile data the issue tracker needs (display name and role).

Tables:
    - users: 사용자 계정 (User accounts with a hostel role)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

# 역할 상수 — Role names carried in the JWT "role" claim
ROLE_STUDENT = "student"
ROLE_CARETAKER = "caretaker"
ROLE_MANAGEMENT = "management"


class User(Base):
    """사용자 모델 — 학생, 관리인, 운영진 계정.

    User model — Student, caretaker, and management accounts.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        name: 표시 이름 (Display name)
        email: 이메일 (Email address, unique)
        role: 역할 (Role: "student" | "caretaker" | "management")
        is_active: 활성 상태 (Active status, soft-delete pattern)
        created_at: 생성 일시 UTC (Creation timestamp)
    """

    __tablename__ = "users"

    # 사용자 고유 식별자 — User unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 표시 이름 — User's display name
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # 이메일 — Email address (unique across the hostel)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    # 역할 — student | caretaker | management
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=ROLE_STUDENT)
    # 활성 상태 — Whether the user account is active
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
