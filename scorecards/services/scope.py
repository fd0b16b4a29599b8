# performance_scorecards/scorecards/services/scope.py
"""
Scope resolution: which employees make up a cohort.

A request asks for the whole company, one department or one employee. Each
case is an explicit ScopeQuery variant that maps onto one directory call.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol, Union

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from scorecards.db.models import User
from scorecards.services.errors import ScopeResolutionError, SubjectNotFoundError
from scorecards.services.scoring.interfaces import Subject

logger = logging.getLogger("scorecards.services.scope")


@dataclass(frozen=True)
class CompanyScope:
    def describe(self) -> str:
        return "company"


@dataclass(frozen=True)
class DepartmentScope:
    department_id: int

    def describe(self) -> str:
        return f"department:{self.department_id}"


@dataclass(frozen=True)
class EmployeeScope:
    employee_id: int

    def describe(self) -> str:
        return f"employee:{self.employee_id}"


ScopeQuery = Union[CompanyScope, DepartmentScope, EmployeeScope]


def _parse_id(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    text = str(raw).strip()
    if not text.isdigit():
        return None
    return int(text)


def parse_scope(department: Optional[str] = None, employee: Optional[str] = None) -> ScopeQuery:
    """
    Build a ScopeQuery from request parameters.

    An employee id wins over a department id. Ids that are not valid
    identifiers are ignored, which widens the scope to the company.
    """
    employee_id = _parse_id(employee)
    if employee_id is not None:
        return EmployeeScope(employee_id)
    department_id = _parse_id(department)
    if department_id is not None:
        return DepartmentScope(department_id)
    return CompanyScope()


class SubjectDirectory(Protocol):
    """User/department directory consumed by the engine."""

    def list_active(self, department_id: Optional[int] = None) -> List[Subject]:  # pragma: no cover - interface only
        ...

    def get(self, employee_id: int) -> Optional[Subject]:  # pragma: no cover - interface only
        ...


def _to_subject(user: User) -> Subject:
    return Subject(
        id=user.id,  # type: ignore[arg-type]
        username=user.username,  # type: ignore[arg-type]
        email=user.email,  # type: ignore[arg-type]
        department_id=user.department_id,  # type: ignore[arg-type]
        department_name=user.department.name if user.department is not None else None,
        department_archived=bool(user.department is not None and user.department.archived),
    )


class SqlSubjectDirectory:
    """SubjectDirectory over the users/departments tables (read-only)."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def list_active(self, department_id: Optional[int] = None) -> List[Subject]:
        stmt = (
            select(User)
            .options(selectinload(User.department))
            .where(User.is_active.is_(True))
            .order_by(User.id)
        )
        if department_id is not None:
            stmt = stmt.where(User.department_id == department_id)

        try:
            with self.session_factory() as db:
                users = db.execute(stmt).scalars().all()
                return [_to_subject(u) for u in users]
        except SQLAlchemyError as e:
            raise ScopeResolutionError(f"Failed to list users: {e}") from e

    def get(self, employee_id: int) -> Optional[Subject]:
        stmt = select(User).options(selectinload(User.department)).where(User.id == employee_id)
        try:
            with self.session_factory() as db:
                user = db.execute(stmt).scalars().one_or_none()
                return _to_subject(user) if user is not None else None
        except SQLAlchemyError as e:
            raise ScopeResolutionError(f"Failed to load user {employee_id}: {e}") from e


class ScopeResolver:
    """Resolves a ScopeQuery into the concrete list of subjects (ordered by id)."""

    def __init__(self, directory: SubjectDirectory):
        self.directory = directory

    def resolve(self, scope: ScopeQuery) -> List[Subject]:
        if isinstance(scope, CompanyScope):
            subjects = self.directory.list_active()
        elif isinstance(scope, DepartmentScope):
            subjects = self.directory.list_active(department_id=scope.department_id)
        elif isinstance(scope, EmployeeScope):
            subject = self.directory.get(scope.employee_id)
            if subject is None:
                raise SubjectNotFoundError(scope.employee_id)
            subjects = [subject]
        else:
            raise ScopeResolutionError(f"Unsupported scope: {scope!r}")

        logger.debug("scorecards.scope.resolved", extra={"scope": scope.describe(), "count": len(subjects)})
        return subjects


__all__ = [
    "CompanyScope",
    "DepartmentScope",
    "EmployeeScope",
    "ScopeQuery",
    "parse_scope",
    "SubjectDirectory",
    "SqlSubjectDirectory",
    "ScopeResolver",
]
