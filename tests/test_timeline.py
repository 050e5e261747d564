"""상태 타임라인 테스트.

Status timeline tests — The builder is pure, so most cases run without a
database; the last class checks the HTTP endpoint end to end.
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.schemas.issue import StatusHistoryEntry
from app.services.timeline_service import status_timeline_service
from tests.conftest import auth_header, make_issue

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def entry(status: str, hours: float = 0, **fields) -> StatusHistoryEntry:
    return StatusHistoryEntry(status=status, timestamp=T0 + timedelta(hours=hours), **fields)


def steps_by_status(timeline) -> dict:
    return {step.status: step for step in timeline.steps}


class TestTimelineBuilder:
    """타임라인 빌더 단위 테스트."""

    def test_reported_assigned_resolved(self):
        """Reported/Assigned/Resolved 이력 — 5시간, 3건."""
        history = [entry("Reported", 0), entry("Assigned", 2), entry("Resolved", 5)]
        timeline = status_timeline_service.build(history)

        steps = steps_by_status(timeline)
        assert [s.status for s in timeline.steps] == [
            "Reported", "Assigned", "In Progress", "Resolved", "Closed",
        ]
        assert steps["Reported"].completed
        assert steps["Assigned"].completed
        assert steps["Resolved"].completed
        assert not steps["In Progress"].completed
        assert not steps["Closed"].completed
        assert timeline.summary.current_status == "Resolved"
        assert timeline.summary.duration_hours == 5
        assert timeline.summary.total_updates == 3

    def test_empty_history(self):
        """빈 이력 — 모든 단계 미완료, 요약 없음."""
        timeline = status_timeline_service.build([])
        assert all(not step.completed for step in timeline.steps)
        assert all(step.timestamp is None for step in timeline.steps)
        assert timeline.summary is None

    def test_single_entry_has_no_duration(self):
        timeline = status_timeline_service.build([entry("Reported")])
        assert timeline.summary.total_updates == 1
        assert timeline.summary.current_status == "Reported"
        assert timeline.summary.duration_hours is None

    def test_duration_rounds_up(self):
        """90분 → 2시간 (올림)."""
        timeline = status_timeline_service.build([entry("Reported", 0), entry("Assigned", 1.5)])
        assert timeline.summary.duration_hours == 2

    def test_order_independent(self):
        """입력 순서와 무관하게 같은 결과."""
        history = [entry("Reported", 0), entry("Assigned", 2), entry("In Progress", 3), entry("Resolved", 5)]
        shuffled = [history[2], history[0], history[3], history[1]]

        first = status_timeline_service.build(history)
        second = status_timeline_service.build(shuffled)
        assert first == second
        assert second.summary.current_status == "Resolved"
        assert status_timeline_service.build(shuffled) == second

    def test_current_status_is_latest_timestamp(self):
        history = [entry("Resolved", 5), entry("Reported", 0), entry("Assigned", 2)]
        assert status_timeline_service.current_status(history) == "Resolved"
        assert status_timeline_service.current_status([]) is None

    def test_completion_is_membership_not_progression(self):
        """건너뛴 단계는 미완료, 이후 단계는 완료."""
        timeline = status_timeline_service.build([entry("Reported", 0), entry("Closed", 1)])
        steps = steps_by_status(timeline)
        assert steps["Closed"].completed
        assert not steps["Assigned"].completed
        assert not steps["In Progress"].completed

    def test_repeated_status_uses_latest_entry(self):
        """같은 상태가 반복되면 가장 최근 항목의 메타데이터 사용."""
        first_caretaker, second_caretaker = uuid4(), uuid4()
        history = [
            entry("Reported", 0),
            entry("Assigned", 1, assigned_to=first_caretaker, remarks="first"),
            entry("Reported", 2, remarks="unassigned"),
            entry("Assigned", 3, assigned_to=second_caretaker, remarks="second"),
        ]
        steps = steps_by_status(status_timeline_service.build(history))
        assert steps["Assigned"].assigned_to == second_caretaker
        assert steps["Assigned"].remarks == "second"
        assert steps["Assigned"].timestamp == T0 + timedelta(hours=3)
        assert steps["Reported"].remarks == "unassigned"

    def test_merged_is_current_but_not_a_step(self):
        timeline = status_timeline_service.build([entry("Reported", 0), entry("Merged", 1)])
        assert timeline.summary.current_status == "Merged"
        assert "Merged" not in steps_by_status(timeline)
        assert sum(step.completed for step in timeline.steps) == 1

    def test_naive_timestamps_are_utc(self):
        naive = StatusHistoryEntry(status="Assigned", timestamp=datetime(2026, 3, 1, 12, 0))
        timeline = status_timeline_service.build([entry("Reported", 0), naive])
        assert timeline.summary.current_status == "Assigned"
        assert timeline.summary.duration_hours == 3


class TestTimelineEndpoint:
    """타임라인 API 테스트."""

    async def test_timeline_for_new_issue(self, client: AsyncClient, db: AsyncSession, alice):
        issue = await make_issue(db, alice)
        res = await client.get(f"/api/v1/issues/{issue.id}/timeline", headers=auth_header(alice))
        assert res.status_code == 200
        data = res.json()
        assert data["steps"][0] == {
            "status": "Reported",
            "completed": True,
            "timestamp": data["steps"][0]["timestamp"],
            "assigned_to": None,
            "remarks": None,
        }
        assert data["summary"]["current_status"] == "Reported"
        assert data["summary"]["total_updates"] == 1
        assert data["summary"]["duration_hours"] is None

    async def test_timeline_unknown_issue(self, client: AsyncClient, alice):
        res = await client.get(f"/api/v1/issues/{uuid4()}/timeline", headers=auth_header(alice))
        assert res.status_code == 404
        assert res.json()["kind"] == "not_found"
