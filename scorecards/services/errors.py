# performance_scorecards/scorecards/services/errors.py

from __future__ import annotations


class ScorecardError(Exception):
    """Base class for scorecard engine errors."""


class ScopeResolutionError(ScorecardError):
    """The directory could not be queried, so the cohort is unknown."""


class SubjectNotFoundError(ScorecardError):
    """An employee scope referenced an employee the directory does not know."""

    def __init__(self, employee_id: int):
        super().__init__(f"Employee {employee_id} not found")
        self.employee_id = employee_id


__all__ = ["ScorecardError", "ScopeResolutionError", "SubjectNotFoundError"]
