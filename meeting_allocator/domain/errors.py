"""
Outcome taxonomy for a scheduling run.

Three severities are kept apart:
  FATAL    abort the whole run (DataIntegrityError, ScheduleIntegrityViolation)
  ATTEMPT  one strategy attempt failed, try the next (AttemptFailure)
  SOFT     report and continue (Issue values, never raised)
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class Severity(Enum):
    FATAL = "fatal"
    ATTEMPT = "attempt"
    SOFT = "soft"


class IssueKind(Enum):
    UNASSIGNED_MEETING = "unassigned_meeting"
    UNASSIGNED_LOCATION = "unassigned_location"
    UNKNOWN_ROSTER_MEETING = "unknown_roster_meeting"
    EMPTY_MEETING = "empty_meeting"


class SchedulingError(Exception):
    severity = Severity.FATAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class DataIntegrityError(SchedulingError):
    """Inconsistent input detected before any strategy runs."""
    severity = Severity.FATAL

    def __init__(self, message: str, meeting_names: Tuple[str, ...] = (), participants: Tuple[str, ...] = ()):
        super().__init__(message)
        self.meeting_names = tuple(meeting_names)
        self.participants = tuple(participants)


class AttemptFailure(SchedulingError):
    """A forced placement failed inside one scheduler attempt."""
    severity = Severity.ATTEMPT

    def __init__(self, message: str, meeting_name: str = "", participants: Tuple[str, ...] = ()):
        super().__init__(message)
        self.meeting_name = meeting_name
        self.participants = tuple(participants)


class ScheduleIntegrityViolation(SchedulingError):
    """Two assignments of the winning result double-book a participant."""
    severity = Severity.FATAL

    def __init__(self, message: str, participant: str, meeting_names: Tuple[str, str]):
        super().__init__(message)
        self.participant = participant
        self.meeting_names = meeting_names


@dataclass(frozen=True)
class Issue:
    kind: IssueKind
    subject: str
    message: str
    severity: Severity = Severity.SOFT
