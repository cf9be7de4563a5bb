"""Type definitions for races, lanes and students."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional, TypedDict


RaceStatus = Literal["OPEN", "LOCKED", "FINALIZED"]

OPEN: RaceStatus = "OPEN"
LOCKED: RaceStatus = "LOCKED"
FINALIZED: RaceStatus = "FINALIZED"

# Lifecycle order; a race only ever moves to the right.
RACE_STATUSES: tuple[RaceStatus, ...] = (OPEN, LOCKED, FINALIZED)


class StudentRow(TypedDict):
    """Persisted shape of a student."""
    id: int
    name: str


class RaceRow(TypedDict):
    """Persisted shape of a race (lanes are stored separately)."""
    id: int
    name: str
    status: str


class LaneRow(TypedDict):
    """
    Persisted shape of a lane.

    Every lane references an existing race and student. ``student_place`` is
    nullable until results are recorded.
    """
    id: int
    race_id: int
    student_id: int
    lane_number: int
    student_place: Optional[int]


@dataclass(frozen=True)
class Student:
    id: int
    name: str

    def to_row(self) -> StudentRow:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_row(cls, row: StudentRow) -> "Student":
        return cls(id=row["id"], name=row["name"])


@dataclass
class Lane:
    race_id: Optional[int]
    student_id: int
    lane_number: int
    student_place: Optional[int] = None
    # Assigned by the repository on first save.
    id: Optional[int] = None

    def to_row(self) -> LaneRow:
        return {
            "id": self.id,
            "race_id": self.race_id,
            "student_id": self.student_id,
            "lane_number": self.lane_number,
            "student_place": self.student_place,
        }

    @classmethod
    def from_row(cls, row: LaneRow) -> "Lane":
        return cls(
            id=row["id"],
            race_id=row["race_id"],
            student_id=row["student_id"],
            lane_number=row["lane_number"],
            student_place=row.get("student_place"),
        )


@dataclass
class Race:
    """
    Race aggregate.

    The race exclusively owns its lanes: saving a race saves its lanes and
    deleting a race deletes them.
    """
    name: str
    status: RaceStatus = OPEN
    lanes: List[Lane] = field(default_factory=list)
    id: Optional[int] = None

    def lane_by_id(self, lane_id: int) -> Optional[Lane]:
        for lane in self.lanes:
            if lane.id == lane_id:
                return lane
        return None

    def student_ids(self) -> set[int]:
        return {lane.student_id for lane in self.lanes}

    def to_row(self) -> RaceRow:
        return {"id": self.id, "name": self.name, "status": self.status}

    @classmethod
    def from_rows(cls, row: RaceRow, lane_rows: List[LaneRow]) -> "Race":
        return cls(
            id=row["id"],
            name=row["name"],
            status=row["status"],  # type: ignore[arg-type]
            lanes=[Lane.from_row(lane_row) for lane_row in lane_rows],
        )


@dataclass(frozen=True)
class StandingRow:
    """One line of a finalized race's standings."""
    lane_id: Optional[int]
    lane_number: int
    student_id: int
    student_name: str
    place: Optional[int]
