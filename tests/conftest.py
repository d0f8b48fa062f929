from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from src.lecture_settlement.lecture_settlement.container import build_container
from src.lecture_settlement.lecture_settlement.core.actor import Actor
from src.lecture_settlement.lecture_settlement.core.enums import Role

ADMIN = Actor("admin-1", Role.ADMIN)
TEACHER = Actor("t1", Role.TEACHER)


class TickingClock:
    """Each call is one minute after the previous one, so ordering by time is stable."""

    def __init__(self, start: datetime):
        self._now = start

    def __call__(self) -> datetime:
        current = self._now
        self._now += timedelta(minutes=1)
        return current


@pytest.fixture
def admin() -> Actor:
    return ADMIN


@pytest.fixture
def teacher() -> Actor:
    return TEACHER


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock(datetime(2025, 3, 1, 9, 0, 0))


@pytest.fixture
def container(clock):
    c = build_container(backend="memory", clock=clock)
    roster = c.roster_repo
    roster.add_teacher("t1", "Asha Iyer")
    roster.add_teacher("t2", "Ravi Kumar")
    roster.add_class("c-phy", "Physics XI", 28)
    roster.add_class("c-chem", "Chemistry XI", 10)
    roster.add_class("c-club", "Weekend Club", 0)
    roster.assign("t1", "c-phy", "28000", subject="Physics")
    roster.assign("t1", "c-chem", "12000", subject="Chemistry")
    roster.assign("t2", "c-phy", "28000", subject="Physics")
    return c


@pytest.fixture
def engine(container):
    return container.engine


@pytest.fixture
def mark_verified(engine):
    """Create `count` VERIFIED lectures on consecutive days via admin toggles."""

    def _mark(teacher_id: str, class_id: str, count: int, start: date = date(2025, 3, 1)):
        return [
            engine.toggle_attendance(ADMIN, teacher_id, class_id, start + timedelta(days=i))
            for i in range(count)
        ]

    return _mark
