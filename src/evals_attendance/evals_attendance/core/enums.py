from __future__ import annotations

from enum import Enum


class Group(str, Enum):
    """Upstream groups used for endpoint gating."""

    MEMBER = "member"
    EBOARD = "eboard"
    EVALS = "eboard-evaluations"


class EventKind(str, Enum):
    HOUSE = "house"
    SEMINAR = "seminar"
    COMMITTEE = "committee"


class AttendanceStatus(str, Enum):
    """Attendance status as stored in the attendance tables.

    New statuses only need a member here and in the schema's ENUM column.
    """

    ATTENDED = "Attended"
    EXCUSED = "Excused"
    ABSENT = "Absent"


class StatusPredicate(str, Enum):
    """Which attendance rows count for a per-attendee report."""

    ABSENT = "absent"
    NOT_ATTENDED = "not_attended"
    ATTENDED = "attended"


class CommitteeType(str, Enum):
    EVALS = "Evaluations"
    FINANCIAL = "Financial"
    HISTORY = "History"
    HOUSE_IMPROVEMENTS = "House Improvements"
    OPCOMM = "OpComm"
    RESEARCH_AND_DEVELOPMENT = "Research and Development"
    SOCIAL = "Social"
    PUBLIC_RELATIONS = "Public Relations"
    CHAIRMAN = "Chairman"
    AD_HOC = "Ad-Hoc"
