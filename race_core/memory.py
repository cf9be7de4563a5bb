"""In-memory implementations of the race repository and student directory.

Rows are kept in the persisted shapes from ``race_core.types``. Aggregates are
rebuilt on every load, so callers never hold references into the store and a
failed ``save_race`` leaves stored state unchanged.
"""
from __future__ import annotations

import itertools
import logging
from typing import Dict, List, Optional

from .errors import DuplicateRegistrationError, InvalidStateError, NotFoundError
from .lanes import DUPLICATE_STUDENT_MESSAGE
from .types import LaneRow, Race, RaceRow, Student, StudentRow
from .validation import parse_student_input

logger = logging.getLogger(__name__)


class InMemoryStudentDirectory:
    def __init__(self) -> None:
        self._rows: Dict[int, StudentRow] = {}
        self._ids = itertools.count(1)

    def add_student(self, name: str) -> Student:
        data = parse_student_input(name)
        student = Student(id=next(self._ids), name=data.name)
        self._rows[student.id] = student.to_row()
        return student

    def find_student(self, student_id: int) -> Optional[Student]:
        row = self._rows.get(student_id)
        return Student.from_row(row) if row is not None else None

    def list_students(self) -> List[Student]:
        return [Student.from_row(row) for row in self._rows.values()]


class InMemoryRaceRepository:
    """
    Race + lane tables with the constraints a relational store would enforce:
    - lanes reference an existing race and (when a directory is given) student
    - (race_id, student_id) and (race_id, lane_number) are unique
    - deleting a race deletes its lanes
    """

    def __init__(self, students: Optional[InMemoryStudentDirectory] = None) -> None:
        self._students = students
        self._races: Dict[int, RaceRow] = {}
        self._lanes: Dict[int, LaneRow] = {}
        self._race_ids = itertools.count(1)
        self._lane_ids = itertools.count(1)

    def load_race(self, race_id: int) -> Optional[Race]:
        row = self._races.get(race_id)
        if row is None:
            return None
        return Race.from_rows(dict(row), self._lane_rows_for(race_id))

    def list_races(self) -> List[Race]:
        return [self.load_race(race_id) for race_id in sorted(self._races)]

    def save_race(self, race: Race) -> Race:
        """Persist a race and all its lanes atomically, assigning missing ids."""
        if race.id is not None and race.id not in self._races:
            raise NotFoundError(f"Race {race.id} not found")
        self._check_constraints(race)

        # All checks passed; nothing below can fail.
        if race.id is None:
            race.id = next(self._race_ids)
        self._races[race.id] = race.to_row()
        for lane in race.lanes:
            if lane.id is None:
                lane.id = next(self._lane_ids)
            lane.race_id = race.id
            self._lanes[lane.id] = lane.to_row()
        logger.debug(f"Saved race {race.id} ({race.status}) with {len(race.lanes)} lanes")
        return race

    def delete_race(self, race_id: int) -> bool:
        if self._races.pop(race_id, None) is None:
            return False
        for lane_id in [lid for lid, row in self._lanes.items() if row["race_id"] == race_id]:
            del self._lanes[lane_id]
        logger.info(f"Deleted race {race_id} and its lanes")
        return True

    def _lane_rows_for(self, race_id: int) -> List[LaneRow]:
        return [
            dict(row)  # type: ignore[misc]
            for _, row in sorted(self._lanes.items())
            if row["race_id"] == race_id
        ]

    def _check_constraints(self, race: Race) -> None:
        # Stored lanes count too: another writer may have added lanes since
        # this aggregate was loaded.
        stored = self._lane_rows_for(race.id) if race.id is not None else []
        students = {row["student_id"]: row["id"] for row in stored}
        numbers = {row["lane_number"]: row["id"] for row in stored}

        for index, lane in enumerate(race.lanes):
            if lane.id is not None:
                row = self._lanes.get(lane.id)
                if row is None or row["race_id"] != race.id:
                    raise NotFoundError(f"Lane {lane.id} not found")
            if self._students is not None and self._students.find_student(lane.student_id) is None:
                raise NotFoundError(f"Student {lane.student_id} not found")
            key = lane.id if lane.id is not None else f"new-{index}"
            owner = students.get(lane.student_id)
            if owner is not None and owner != key:
                raise DuplicateRegistrationError(DUPLICATE_STUDENT_MESSAGE)
            taken = numbers.get(lane.lane_number)
            if taken is not None and taken != key:
                raise InvalidStateError(f"Lane number {lane.lane_number} is already taken")
            students[lane.student_id] = key
            numbers[lane.lane_number] = key
