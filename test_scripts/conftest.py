# Shared fixtures: a throwaway SQLite task/user store and helpers to seed it
from __future__ import annotations

import os

# The engine in scorecards.db.session is created on import; keep it off Postgres.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from datetime import datetime, timezone
from typing import Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from scorecards.db.base import Base
from scorecards.db.models import Department, Task, TaskStatus, User
from scorecards.services.scorecard_service import ScorecardService


def utc(year: int, month: int, day: int, hour: int = 0) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


@pytest.fixture()
def session_factory(tmp_path):
    """File-backed SQLite so worker threads each get their own connection."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'store.db'}",
        future=True,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    try:
        yield sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    finally:
        engine.dispose()


def add_task(
    db,
    user: User,
    status: TaskStatus,
    completed_at: Optional[datetime] = None,
    due_date: Optional[datetime] = None,
) -> Task:
    task = Task(
        title=f"{user.username}-{status.value}",
        assignee_id=user.id,
        status=status.value,
        completed_at=completed_at,
        due_date=due_date,
    )
    db.add(task)
    return task


@pytest.fixture()
def seeded_store(session_factory):
    """
    Window used by the tests: 2025-03-01 .. 2025-03-29 (28 days, 4 weeks).

    alice (Engineering): completed 3 in window (2 due, both on time), 1 outside;
                         open: 1 overdue, 1 due later -> pending 2, overdue 1
    bob   (Engineering): completed 2 (both due, 1 on time), nothing open
    carol (Sales):       no tasks
    dave  (Sales):       inactive, has completed tasks (never in a cohort)
    """
    with session_factory() as db:
        eng = Department(name="Engineering")
        sales = Department(name="Sales")
        db.add_all([eng, sales])
        db.flush()

        alice = User(username="alice", email="alice@example.com", department_id=eng.id)
        bob = User(username="bob", email="bob@example.com", department_id=eng.id)
        carol = User(username="carol", email="carol@example.com", department_id=sales.id)
        dave = User(username="dave", email="dave@example.com", department_id=sales.id, is_active=False)
        db.add_all([alice, bob, carol, dave])
        db.flush()

        add_task(db, alice, TaskStatus.COMPLETED, completed_at=utc(2025, 3, 10), due_date=utc(2025, 3, 12))
        add_task(db, alice, TaskStatus.COMPLETED, completed_at=utc(2025, 3, 15, 9), due_date=utc(2025, 3, 15, 12))
        add_task(db, alice, TaskStatus.COMPLETED, completed_at=utc(2025, 3, 20))
        add_task(db, alice, TaskStatus.COMPLETED, completed_at=utc(2025, 2, 20))
        add_task(db, alice, TaskStatus.TODO, due_date=utc(2025, 3, 20))
        add_task(db, alice, TaskStatus.IN_PROGRESS, due_date=utc(2025, 4, 10))

        add_task(db, bob, TaskStatus.COMPLETED, completed_at=utc(2025, 3, 5), due_date=utc(2025, 3, 5))
        add_task(db, bob, TaskStatus.COMPLETED, completed_at=utc(2025, 3, 8), due_date=utc(2025, 3, 6))

        add_task(db, dave, TaskStatus.COMPLETED, completed_at=utc(2025, 3, 9), due_date=utc(2025, 3, 10))

        db.commit()
        ids = {u.username: u.id for u in (alice, bob, carol, dave)}
        ids["engineering"] = eng.id
        ids["sales"] = sales.id
    return ids


@pytest.fixture()
def service(session_factory) -> ScorecardService:
    return ScorecardService.from_session_factory(session_factory, max_concurrency=2)
