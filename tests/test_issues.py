"""이슈 API 테스트.

Issue API tests — Reporting, listing with student visibility, status
transitions with role rules, remarks, and status-change notifications.
"""

from uuid import uuid4

from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification import Notification
from app.services.merge_service import merge_service
from app.models.user import ROLE_CARETAKER
from tests.conftest import _make_user, auth_header, make_issue

ISSUES_URL = "/api/v1/issues"


async def set_status(client: AsyncClient, issue_id, user, status: str, **extra):
    body = {"status": status, "remarks": extra.pop("remarks", f"moving to {status}"), **extra}
    return await client.patch(f"{ISSUES_URL}/{issue_id}/status", json=body, headers=auth_header(user))


class TestReportIssue:
    """이슈 보고 테스트."""

    async def test_create_issue_seeds_history(self, client: AsyncClient, alice):
        res = await client.post(
            ISSUES_URL,
            json={"title": "Broken window", "category": "Carpentry", "location": "Block B / 204"},
            headers=auth_header(alice),
        )
        assert res.status_code == 201
        data = res.json()
        assert data["status"] == "Reported"
        assert data["reported_by"] == str(alice.id)
        assert data["reported_by_name"] == "Alice"
        assert data["priority"] == "Normal"
        assert data["visibility"] == "Public"
        assert [h["status"] for h in data["status_history"]] == ["Reported"]
        assert data["status_history"][0]["remarks"] == "Issue reported"

    async def test_create_issue_rejects_unknown_priority(self, client: AsyncClient, alice):
        res = await client.post(
            ISSUES_URL,
            json={"title": "Broken window", "category": "Carpentry", "priority": "Whenever"},
            headers=auth_header(alice),
        )
        assert res.status_code == 422

    async def test_create_issue_requires_auth(self, client: AsyncClient):
        res = await client.post(ISSUES_URL, json={"title": "x", "category": "y"})
        assert res.status_code == 401
        assert res.json()["kind"] == "unauthorized"

    async def test_invalid_token(self, client: AsyncClient):
        res = await client.get(ISSUES_URL, headers={"Authorization": "Bearer not-a-jwt"})
        assert res.status_code == 401


class TestListIssues:
    """이슈 목록 및 공개 범위 테스트."""

    async def test_student_sees_public_and_own(self, client: AsyncClient, db: AsyncSession, alice, bob, manager):
        public = await make_issue(db, bob, "Public issue")
        bobs_private = await make_issue(db, bob, "Bob private", visibility="Private")
        alices_private = await make_issue(db, alice, "Alice private", visibility="Private")

        res = await client.get(ISSUES_URL, headers=auth_header(alice))
        assert res.status_code == 200
        ids = {i["id"] for i in res.json()["items"]}
        assert ids == {str(public.id), str(alices_private.id)}
        assert res.json()["total"] == 2

        res = await client.get(f"{ISSUES_URL}/{bobs_private.id}", headers=auth_header(alice))
        assert res.status_code == 404

        res = await client.get(ISSUES_URL, headers=auth_header(manager))
        assert res.json()["total"] == 3

    async def test_filters_and_pagination(self, client: AsyncClient, db: AsyncSession, alice, manager):
        for n in range(3):
            await make_issue(db, alice, f"Tap {n}")
        await make_issue(db, alice, "Fuse", category="Electrical", status="Assigned")

        res = await client.get(ISSUES_URL, params={"category": "Plumbing", "per_page": 2}, headers=auth_header(manager))
        data = res.json()
        assert data["total"] == 3
        assert len(data["items"]) == 2
        assert data["per_page"] == 2

        res = await client.get(ISSUES_URL, params={"status": "Assigned"}, headers=auth_header(manager))
        assert [i["title"] for i in res.json()["items"]] == ["Fuse"]

        res = await client.get(ISSUES_URL, params={"per_page": 1000}, headers=auth_header(manager))
        assert res.status_code == 422

    async def test_filter_by_assignee(self, client: AsyncClient, db: AsyncSession, alice, caretaker, manager):
        dave = await _make_user(db, "Dave", ROLE_CARETAKER)
        await make_issue(db, alice, "Carol tap", status="Assigned", assigned_to=caretaker.id)
        await make_issue(db, alice, "Dave fuse", status="Assigned", assigned_to=dave.id)
        await make_issue(db, alice, "Unassigned")

        res = await client.get(ISSUES_URL, params={"assigned_to": str(caretaker.id)}, headers=auth_header(caretaker))
        assert res.status_code == 200
        assert [i["title"] for i in res.json()["items"]] == ["Carol tap"]

        res = await client.get(ISSUES_URL, params={"assigned_to": str(uuid4())}, headers=auth_header(manager))
        assert res.json()["total"] == 0

    async def test_unknown_issue(self, client: AsyncClient, alice):
        res = await client.get(f"{ISSUES_URL}/{uuid4()}", headers=auth_header(alice))
        assert res.status_code == 404
        assert res.json()["kind"] == "not_found"


class TestStatusUpdate:
    """상태 변경 테스트."""

    async def test_full_lifecycle(self, client: AsyncClient, db: AsyncSession, alice, caretaker, manager):
        issue = await make_issue(db, alice)

        res = await set_status(client, issue.id, manager, "Assigned", assigned_to=str(caretaker.id))
        assert res.status_code == 200
        assert res.json()["assigned_to"] == str(caretaker.id)
        assert res.json()["assigned_to_name"] == "Carol"

        assert (await set_status(client, issue.id, caretaker, "In Progress")).status_code == 200
        res = await set_status(client, issue.id, caretaker, "Resolved", resolution_images=["https://img/fixed.jpg"])
        assert res.status_code == 200
        assert res.json()["resolution_images"] == ["https://img/fixed.jpg"]
        res = await set_status(client, issue.id, manager, "Closed")
        assert res.status_code == 200

        history = res.json()["status_history"]
        assert [h["status"] for h in history] == ["Reported", "Assigned", "In Progress", "Resolved", "Closed"]
        assert history[1]["assigned_to"] == str(caretaker.id)

        res = await client.get(f"{ISSUES_URL}/{issue.id}/timeline", headers=auth_header(alice))
        timeline = res.json()
        assert all(step["completed"] for step in timeline["steps"])
        assert timeline["summary"]["current_status"] == "Closed"
        assert timeline["summary"]["total_updates"] == 5

    async def test_disallowed_transition(self, client: AsyncClient, db: AsyncSession, alice, manager):
        issue = await make_issue(db, alice)
        res = await set_status(client, issue.id, manager, "Resolved")
        assert res.status_code == 400
        assert res.json()["kind"] == "invalid_argument"

        closed = await make_issue(db, alice, status="Closed")
        res = await set_status(client, closed.id, manager, "In Progress")
        assert res.status_code == 400

    async def test_remarks_required(self, client: AsyncClient, db: AsyncSession, alice, caretaker):
        issue = await make_issue(db, alice, status="Assigned", assigned_to=caretaker.id)
        res = await set_status(client, issue.id, caretaker, "In Progress", remarks="   ")
        assert res.status_code == 400
        assert res.json()["kind"] == "invalid_argument"

    async def test_student_cannot_update(self, client: AsyncClient, db: AsyncSession, alice):
        issue = await make_issue(db, alice)
        res = await set_status(client, issue.id, alice, "Assigned")
        assert res.status_code == 403
        assert res.json()["kind"] == "forbidden"

    async def test_caretaker_limited_statuses(self, client: AsyncClient, db: AsyncSession, alice, caretaker):
        issue = await make_issue(db, alice, status="Resolved")
        res = await set_status(client, issue.id, caretaker, "Closed")
        assert res.status_code == 403

        assigned = await make_issue(db, alice, status="Assigned", assigned_to=caretaker.id)
        res = await set_status(client, assigned.id, caretaker, "In Progress")
        assert res.status_code == 200

    async def test_other_caretaker_cannot_update(
        self, client: AsyncClient, db: AsyncSession, alice, caretaker, manager,
    ):
        dave = await _make_user(db, "Dave", ROLE_CARETAKER)
        issue = await make_issue(db, alice)
        res = await set_status(client, issue.id, manager, "Assigned", assigned_to=str(caretaker.id))
        assert res.status_code == 200

        res = await set_status(client, issue.id, dave, "In Progress")
        assert res.status_code == 403
        assert res.json()["kind"] == "forbidden"

        res = await client.get(f"{ISSUES_URL}/{issue.id}", headers=auth_header(manager))
        assert res.json()["status"] == "Assigned"
        assert len(res.json()["status_history"]) == 2

    async def test_back_to_reported_clears_assignee(
        self, client: AsyncClient, db: AsyncSession, alice, caretaker, manager,
    ):
        issue = await make_issue(db, alice)
        await set_status(client, issue.id, manager, "Assigned", assigned_to=str(caretaker.id))

        res = await set_status(client, issue.id, manager, "Reported", remarks="Wrong trade, reassigning")
        assert res.status_code == 200
        assert res.json()["status"] == "Reported"
        assert res.json()["assigned_to"] is None
        assert res.json()["assigned_to_name"] is None

        res = await client.get(ISSUES_URL, params={"assigned_to": str(caretaker.id)}, headers=auth_header(manager))
        assert res.json()["total"] == 0

    async def test_assign_requires_caretaker(self, client: AsyncClient, db: AsyncSession, alice, bob, manager):
        issue = await make_issue(db, alice)

        res = await set_status(client, issue.id, manager, "Assigned")
        assert res.status_code == 400

        res = await set_status(client, issue.id, manager, "Assigned", assigned_to=str(bob.id))
        assert res.status_code == 400

        res = await set_status(client, issue.id, manager, "Assigned", assigned_to=str(uuid4()))
        assert res.status_code == 404

        res = await client.get(f"{ISSUES_URL}/{issue.id}", headers=auth_header(manager))
        assert res.json()["status"] == "Reported"

    async def test_merged_issue_cannot_be_updated(self, client: AsyncClient, db: AsyncSession, alice, bob, manager):
        p = await make_issue(db, alice)
        d = await make_issue(db, bob)
        await merge_service.merge_issues(db, p.id, [d.id], manager.id)
        await db.commit()

        res = await set_status(client, d.id, manager, "Assigned")
        assert res.status_code == 409
        assert res.json()["kind"] == "conflict"

    async def test_unknown_target_status(self, client: AsyncClient, db: AsyncSession, alice, manager):
        issue = await make_issue(db, alice)
        res = await set_status(client, issue.id, manager, "Merged")
        assert res.status_code == 422


class TestStatusNotifications:
    """상태 변경 알림 테스트."""

    async def test_standalone_issue_notifies_reporter(
        self, client: AsyncClient, db: AsyncSession, alice, caretaker, manager,
    ):
        issue = await make_issue(db, alice)
        await set_status(client, issue.id, manager, "Assigned", assigned_to=str(caretaker.id))

        res = await client.get("/api/v1/my/notifications", headers=auth_header(alice))
        items = res.json()["items"]
        assert len(items) == 1
        assert items[0]["type"] == "status_changed"
        assert items[0]["reference_id"] == str(issue.id)

    async def test_primary_change_notifies_all_reporters(
        self, client: AsyncClient, db: AsyncSession, alice, bob, caretaker, manager,
    ):
        p = await make_issue(db, alice, status="Assigned", assigned_to=caretaker.id)
        d = await make_issue(db, bob)
        await merge_service.merge_issues(db, p.id, [d.id], manager.id)
        await db.commit()

        res = await set_status(client, p.id, caretaker, "In Progress")
        assert res.status_code == 200

        recipients = (await db.execute(
            select(Notification.user_id).where(Notification.type == "status_changed")
        )).scalars().all()
        assert sorted(map(str, recipients)) == sorted([str(alice.id), str(bob.id)])

    async def test_actor_is_not_notified(self, client: AsyncClient, db: AsyncSession, manager, caretaker):
        issue = await make_issue(db, manager)
        await set_status(client, issue.id, manager, "Assigned", assigned_to=str(caretaker.id))

        res = await client.get("/api/v1/my/notifications/unread-count", headers=auth_header(manager))
        assert res.json() == {"unread_count": 0}


class TestRemarks:
    """이슈 코멘트 테스트."""

    async def test_add_and_list_remarks(self, client: AsyncClient, db: AsyncSession, alice, caretaker):
        issue = await make_issue(db, alice)
        url = f"{ISSUES_URL}/{issue.id}/remarks"

        res = await client.post(url, json={"text": "Will check tomorrow"}, headers=auth_header(caretaker))
        assert res.status_code == 201
        assert res.json()["author_name"] == "Carol"

        await client.post(url, json={"text": "Thanks!"}, headers=auth_header(alice))

        res = await client.get(url, headers=auth_header(alice))
        assert res.status_code == 200
        assert [r["text"] for r in res.json()] == ["Will check tomorrow", "Thanks!"]

    async def test_blank_remark_rejected(self, client: AsyncClient, db: AsyncSession, alice):
        issue = await make_issue(db, alice)
        res = await client.post(
            f"{ISSUES_URL}/{issue.id}/remarks", json={"text": "  "}, headers=auth_header(alice),
        )
        assert res.status_code == 400

    async def test_private_issue_remarks_hidden_from_other_students(
        self, client: AsyncClient, db: AsyncSession, alice, bob,
    ):
        issue = await make_issue(db, alice, visibility="Private")
        res = await client.get(f"{ISSUES_URL}/{issue.id}/remarks", headers=auth_header(bob))
        assert res.status_code == 404


class TestCaretakers:
    """배정 가능한 관리인 목록 테스트."""

    async def test_management_lists_active_caretakers(
        self, client: AsyncClient, db: AsyncSession, alice, caretaker, manager,
    ):
        retired = await _make_user(db, "Abe", ROLE_CARETAKER)
        retired.is_active = False
        await db.commit()
        await _make_user(db, "Dave", ROLE_CARETAKER)

        res = await client.get("/api/v1/caretakers", headers=auth_header(manager))
        assert res.status_code == 200
        data = res.json()
        assert [c["name"] for c in data] == ["Carol", "Dave"]
        assert data[0] == {"id": str(caretaker.id), "name": "Carol", "email": "carol@hostel.test"}

    async def test_students_cannot_list_caretakers(self, client: AsyncClient, alice, caretaker):
        res = await client.get("/api/v1/caretakers", headers=auth_header(alice))
        assert res.status_code == 403
        assert res.json()["kind"] == "forbidden"

        res = await client.get("/api/v1/caretakers", headers=auth_header(caretaker))
        assert res.status_code == 403
