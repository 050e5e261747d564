"""상태 타임라인 서비스.

Status timeline service — Derives a display timeline from an issue's status
history. Pure function of its input: no database access, no side effects,
so repeated calls on the same history return equal results.
"""

import math
from datetime import datetime, timezone
from typing import Iterable

from app.models.issue import CANONICAL_STATUSES
from app.schemas.issue import (
    StatusHistoryEntry,
    StatusTimeline,
    TimelineStep,
    TimelineSummary,
)


def _as_utc(value: datetime) -> datetime:
    # 타임존 없는 값은 UTC로 간주 (Naive timestamps are UTC)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class StatusTimelineService:
    """상태 타임라인 빌더.

    Builds the canonical five-step progression
    ``Reported → Assigned → In Progress → Resolved → Closed``.

    A step is completed when its status appears anywhere in the history,
    regardless of where it sits relative to the other steps, so a history
    that skipped "In Progress" shows "Closed" completed and "In Progress"
    pending. Statuses outside the canonical list (e.g. "Merged") never
    complete a step but can still be the current status.
    """

    canonical_statuses: tuple[str, ...] = CANONICAL_STATUSES

    def sort_history(self, history: Iterable[StatusHistoryEntry]) -> list[StatusHistoryEntry]:
        """시간순 정렬 (동률 시 입력 순서 유지) — Ascending by timestamp, stable on ties."""
        return sorted(history, key=lambda entry: _as_utc(entry.timestamp))

    def build(self, history: Iterable[StatusHistoryEntry]) -> StatusTimeline:
        """상태 이력으로부터 타임라인을 생성합니다.

        Build the timeline for a status history.

        Args:
            history: 상태 이력 항목, 순서 무관 (History entries in any order, possibly empty)

        Returns:
            StatusTimeline: 정규 단계 목록과 요약 (Canonical steps plus summary;
                            summary is None for an empty history)
        """
        ordered = self.sort_history(history)

        # 상태별 가장 최근 항목 — Later entries overwrite earlier ones
        latest_by_status: dict[str, StatusHistoryEntry] = {}
        for entry in ordered:
            latest_by_status[entry.status] = entry

        steps: list[TimelineStep] = []
        for status in self.canonical_statuses:
            match = latest_by_status.get(status)
            if match is None:
                steps.append(TimelineStep(status=status, completed=False))
                continue
            steps.append(
                TimelineStep(
                    status=status,
                    completed=True,
                    timestamp=match.timestamp,
                    assigned_to=match.assigned_to,
                    remarks=match.remarks,
                )
            )

        if not ordered:
            return StatusTimeline(steps=steps, summary=None)

        duration_hours: int | None = None
        if len(ordered) > 1:
            elapsed = _as_utc(ordered[-1].timestamp) - _as_utc(ordered[0].timestamp)
            duration_hours = math.ceil(elapsed.total_seconds() / 3600)

        summary = TimelineSummary(
            total_updates=len(ordered),
            current_status=ordered[-1].status,
            duration_hours=duration_hours,
        )
        return StatusTimeline(steps=steps, summary=summary)

    def current_status(self, history: Iterable[StatusHistoryEntry]) -> str | None:
        """가장 최근 항목의 상태 — Status of the chronologically last entry, None if empty."""
        ordered = self.sort_history(history)
        return ordered[-1].status if ordered else None


status_timeline_service: StatusTimelineService = StatusTimelineService()
