"""사용자 Pydantic 스키마.

User response schemas.
"""

from pydantic import BaseModel


class CaretakerResponse(BaseModel):
    """관리인 응답 스키마.

    Attributes:
        id: 사용자 UUID (User id, used as ``assigned_to``)
        name: 표시 이름 (Display name)
        email: 이메일 (Email address)
    """

    id: str
    name: str
    email: str
