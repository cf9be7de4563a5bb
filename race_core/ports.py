"""Collaborator interfaces consumed by the race core.

The core never talks to a database directly. Embedders provide objects
satisfying these protocols; ``race_core.memory`` ships an in-memory version.
"""
from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .types import Race, Student


class StudentDirectory(Protocol):
    def find_student(self, student_id: int) -> Optional[Student]:
        ...

    def list_students(self) -> Sequence[Student]:
        ...

    def add_student(self, name: str) -> Student:
        ...


class RaceRepository(Protocol):
    """
    Persistence for the Race aggregate.

    ``save_race`` must apply the race row and all of its lanes as one unit and
    enforce the composite uniqueness of (race, student) and
    (race, lane_number), raising ``DuplicateRegistrationError`` or
    ``InvalidStateError`` respectively on conflict. ``delete_race`` cascades to
    lanes.
    """

    def load_race(self, race_id: int) -> Optional[Race]:
        ...

    def save_race(self, race: Race) -> Race:
        ...

    def delete_race(self, race_id: int) -> bool:
        ...

    def list_races(self) -> Sequence[Race]:
        ...
