from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from ..core.constants import FROSH_ID_MAX, FROSH_ID_MIN, MEMBER_HANDLE_MAX_LENGTH
from ..core.exceptions import InvalidIdentifier


@dataclass(frozen=True)
class Frosh:
    """First-year attendee, keyed by numeric id."""

    fid: int

    def __str__(self) -> str:
        return str(self.fid)


@dataclass(frozen=True)
class Member:
    """Full member, keyed by handle."""

    uid: str

    def __str__(self) -> str:
        return self.uid


Attendee = Union[Frosh, Member]


class Population(str, Enum):
    FROSH = "frosh"
    MEMBER = "member"


def population_of(attendee: Attendee) -> Population:
    if isinstance(attendee, Frosh):
        return Population.FROSH
    if isinstance(attendee, Member):
        return Population.MEMBER
    raise TypeError(f"Not an attendee: {attendee!r}")


def attendee_key(attendee: Attendee) -> int | str:
    """Value stored in the ``fid``/``uid`` column."""
    return attendee.fid if isinstance(attendee, Frosh) else attendee.uid


def classify(identifier: str) -> Attendee:
    """Route an identifier to its population.

    A leading digit means a frosh id, which must then parse as a 32-bit int.
    Anything else is a member handle. Write and read paths both go through
    here so rows stay reachable.
    """

    if not isinstance(identifier, str):
        raise InvalidIdentifier("Invalid id")

    value = identifier.strip()
    if not value:
        raise InvalidIdentifier("No name found")

    if not value[0].isdigit():
        if len(value) > MEMBER_HANDLE_MAX_LENGTH:
            raise InvalidIdentifier("Handle too long")
        return Member(uid=value)

    try:
        fid = int(value)
    except ValueError:
        raise InvalidIdentifier("Invalid id")
    if not FROSH_ID_MIN <= fid <= FROSH_ID_MAX:
        raise InvalidIdentifier("Invalid id")
    return Frosh(fid=fid)


def frosh_id(value: object) -> Frosh:
    """Validate a frosh id coming from a JSON body (int or numeric string)."""

    if isinstance(value, bool):
        raise InvalidIdentifier(f"Invalid frosh id: {value!r}")
    if isinstance(value, int):
        value = str(value)
    attendee = classify(value) if isinstance(value, str) else None
    if not isinstance(attendee, Frosh):
        raise InvalidIdentifier(f"Invalid frosh id: {value!r}")
    return attendee


def member_handle(value: object) -> Member:
    """Validate a member handle coming from a JSON body."""

    attendee = classify(value) if isinstance(value, str) else None
    if not isinstance(attendee, Member):
        raise InvalidIdentifier(f"Invalid member handle: {value!r}")
    return attendee
