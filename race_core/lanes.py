"""Lane assignment: sequential lane numbers and per-race registration rules."""
from __future__ import annotations

import logging
from typing import Iterable, List

from .errors import DuplicateRegistrationError, InvalidStateError
from .types import OPEN, Lane, Race, Student

logger = logging.getLogger(__name__)

DUPLICATE_STUDENT_MESSAGE = "Student can only be assigned to one lane per race"


def next_lane_number(race: Race) -> int:
    """Highest lane number in the race plus one (1 for an empty race).

    Gaps are never filled; numbering continues from the maximum.
    """
    return max((lane.lane_number for lane in race.lanes), default=0) + 1


def assign(race: Race, student_id: int) -> Lane:
    """
    Register a student into the next lane of an open race.

    Appends the new lane to ``race.lanes``; existing lanes are untouched.

    Raises:
        InvalidStateError: race is not OPEN
        DuplicateRegistrationError: student already has a lane in this race
    """
    if race.status != OPEN:
        raise InvalidStateError(
            f"Cannot add students as the race status is currently in '{race.status.lower()}'."
        )
    if student_id in race.student_ids():
        raise DuplicateRegistrationError(DUPLICATE_STUDENT_MESSAGE)

    lane = Lane(race_id=race.id, student_id=student_id, lane_number=next_lane_number(race))
    race.lanes.append(lane)
    logger.debug(f"race={race.id} student={student_id} -> lane {lane.lane_number}")
    return lane


def available_students(race: Race, students: Iterable[Student]) -> List[Student]:
    """Students without a lane in this race, ordered by name."""
    taken = race.student_ids()
    return sorted(
        (student for student in students if student.id not in taken),
        key=lambda student: (student.name, student.id),
    )


__all__ = ["next_lane_number", "assign", "available_students"]
