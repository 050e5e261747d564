"""알림 API 테스트.

Notification API tests — List, unread count, mark read and mark all read.
"""

from uuid import uuid4

import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.conftest import auth_header


NOTIFY_URL = "/api/v1/my/notifications"


@pytest_asyncio.fixture
async def notifications(db: AsyncSession, alice):
    """테스트용 알림 데이터를 생성합니다."""
    from app.models.notification import Notification
    notifs = []
    for i in range(3):
        n = Notification(
            user_id=alice.id,
            type="status_changed",
            message=f"Test notification {i}",
            reference_type="issue",
            reference_id=uuid4(),
            is_read=False,
        )
        db.add(n)
        notifs.append(n)
    await db.commit()
    for n in notifs:
        await db.refresh(n)
    return notifs


class TestMyNotifications:
    """내 알림 API 테스트."""

    async def test_list_notifications(self, client: AsyncClient, alice, notifications):
        """알림 목록 조회."""
        res = await client.get(NOTIFY_URL, headers=auth_header(alice))
        assert res.status_code == 200
        data = res.json()
        assert data["total"] == 3
        assert {n["message"] for n in data["items"]} == {f"Test notification {i}" for i in range(3)}
        assert all(n["reference_type"] == "issue" for n in data["items"])

    async def test_other_users_notifications_hidden(self, client: AsyncClient, bob, notifications):
        res = await client.get(NOTIFY_URL, headers=auth_header(bob))
        assert res.json()["total"] == 0

    async def test_mark_notification_read(self, client: AsyncClient, alice, notifications):
        """알림 읽음 처리."""
        notif_id = str(notifications[0].id)
        res = await client.patch(f"{NOTIFY_URL}/{notif_id}/read", headers=auth_header(alice))
        assert res.status_code == 200

        res = await client.get(f"{NOTIFY_URL}/unread-count", headers=auth_header(alice))
        assert res.json() == {"unread_count": 2}

    async def test_mark_someone_elses_notification(self, client: AsyncClient, bob, notifications):
        res = await client.patch(f"{NOTIFY_URL}/{notifications[0].id}/read", headers=auth_header(bob))
        assert res.status_code == 404
        assert res.json()["kind"] == "not_found"

    async def test_mark_all_read(self, client: AsyncClient, alice, notifications):
        """전체 알림 읽음 처리."""
        res = await client.patch(f"{NOTIFY_URL}/read-all", headers=auth_header(alice))
        assert res.status_code == 200

        res = await client.get(f"{NOTIFY_URL}/unread-count", headers=auth_header(alice))
        assert res.json() == {"unread_count": 0}

    async def test_notifications_no_auth(self, client: AsyncClient):
        """인증 없이 접근 시 401."""
        res = await client.get(NOTIFY_URL)
        assert res.status_code == 401


async def test_health(client: AsyncClient):
    res = await client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}
