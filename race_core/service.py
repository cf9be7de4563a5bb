"""Handler-facing race operations.

Each method loads the Race aggregate through the repository, runs one
lifecycle operation, saves, and reports the result as an ``OperationOutcome``.
Domain failures (``RaceError``) are returned, never raised; a request handler
only has to map ``outcome.notice`` / ``outcome.alert`` onto its response.
Any other exception is a bug or an infrastructure failure and propagates.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from .config import LifecycleConfig, ResultsMode
from .errors import NotFoundError, RaceError
from .lanes import available_students, next_lane_number
from .lifecycle import RaceLifecycle
from .ports import RaceRepository, StudentDirectory
from .types import OPEN, Lane, Race, StandingRow, Student

logger = logging.getLogger(__name__)


@dataclass
class OperationOutcome:
    """Result of a service call: ``value`` on success, ``error`` on failure."""

    ok: bool
    value: Any = None
    error: Optional[RaceError] = None
    notice: Optional[str] = None
    alert: Optional[str] = None

    @property
    def kind(self) -> Optional[str]:
        return self.error.kind if self.error is not None else None


@dataclass
class RaceOverview:
    """Everything needed to show one race."""

    race: Race
    lanes: List[Lane]
    # Only filled while registration is open.
    next_lane_number: Optional[int] = None
    available_students: List[Student] = field(default_factory=list)
    standings: List[StandingRow] = field(default_factory=list)


class RaceService:
    def __init__(
        self,
        races: RaceRepository,
        students: StudentDirectory,
        config: Optional[LifecycleConfig] = None,
    ) -> None:
        self.races = races
        self.students = students
        self.lifecycle = RaceLifecycle(config)

    # ==================== helpers ====================

    def _load(self, race_id: int) -> Race:
        race = self.races.load_race(race_id)
        if race is None:
            raise NotFoundError("Race not found.")
        return race

    def _run(self, action: str, fn: Callable[[], OperationOutcome], alert_prefix: str = "") -> OperationOutcome:
        try:
            return fn()
        except RaceError as e:
            logger.info(f"{action} rejected ({e.kind}): {e.message}")
            return OperationOutcome(ok=False, error=e, alert=f"{alert_prefix}{e.message}")

    def _names(self) -> dict[int, str]:
        return {student.id: student.name for student in self.students.list_students()}

    # ==================== students ====================

    def register_student(self, name: Any) -> OperationOutcome:
        def _do() -> OperationOutcome:
            student = self.students.add_student(name)
            logger.info(f"Registered student {student.id} '{student.name}'")
            return OperationOutcome(
                ok=True, value=student, notice=f"'{student.name}' was successfully registered."
            )

        return self._run("register_student", _do)

    # ==================== races ====================

    def create_race(self, name: Any) -> OperationOutcome:
        def _do() -> OperationOutcome:
            race = self.races.save_race(self.lifecycle.create(name))
            logger.info(f"Created race {race.id} '{race.name}'")
            return OperationOutcome(
                ok=True,
                value=race,
                notice=(
                    f"'{race.name}' was successfully created. "
                    "You can now assign registered students to lanes."
                ),
            )

        return self._run("create_race", _do)

    def list_races(self) -> List[Race]:
        return list(self.races.list_races())

    def delete_race(self, race_id: int) -> OperationOutcome:
        def _do() -> OperationOutcome:
            race = self._load(race_id)
            self.races.delete_race(race_id)
            return OperationOutcome(ok=True, value=race, notice=f"Race '{race.name}' was deleted.")

        return self._run("delete_race", _do)

    def race_overview(self, race_id: int) -> OperationOutcome:
        def _do() -> OperationOutcome:
            race = self._load(race_id)
            overview = RaceOverview(
                race=race, lanes=sorted(race.lanes, key=lambda lane: lane.lane_number)
            )
            if race.status == OPEN:
                overview.next_lane_number = next_lane_number(race)
                overview.available_students = available_students(
                    race, self.students.list_students()
                )
            else:
                overview.standings = self.lifecycle.standings(race, self._names())
            return OperationOutcome(ok=True, value=overview)

        return self._run("race_overview", _do)

    def assign_student_to_lane(self, race_id: int, student_id: int) -> OperationOutcome:
        def _do() -> OperationOutcome:
            race = self._load(race_id)
            student = self.students.find_student(student_id)
            if student is None:
                raise NotFoundError("Student not found.")
            lane = self.lifecycle.register(race, student.id)
            self.races.save_race(race)
            logger.info(f"Race {race.id}: {student.name} -> lane {lane.lane_number}")
            return OperationOutcome(
                ok=True,
                value=lane,
                notice=f"{student.name} has been registered for Lane {lane.lane_number}.",
            )

        return self._run("assign_student_to_lane", _do, alert_prefix="Failed to register student: ")

    def lock_race(self, race_id: int) -> OperationOutcome:
        def _do() -> OperationOutcome:
            race = self._load(race_id)
            self.lifecycle.lock(race)
            self.races.save_race(race)
            return OperationOutcome(
                ok=True, value=race, notice=f"Race '{race.name}' has been confirmed."
            )

        return self._run("lock_race", _do, alert_prefix="Could not confirm race: ")

    def results_sheet(self, race_id: int) -> OperationOutcome:
        def _do() -> OperationOutcome:
            race = self._load(race_id)
            return OperationOutcome(ok=True, value=self.lifecycle.results_sheet(race))

        return self._run("results_sheet", _do)

    def record_results(
        self,
        race_id: int,
        placements: Any,
        *,
        mode: Optional[ResultsMode] = None,
    ) -> OperationOutcome:
        def _do() -> OperationOutcome:
            race = self._load(race_id)
            self.lifecycle.record_results(race, placements, mode=mode)
            self.races.save_race(race)
            return OperationOutcome(
                ok=True, value=race, notice="Race results were successfully updated."
            )

        return self._run("record_results", _do, alert_prefix="Failed to update results: ")


__all__ = ["OperationOutcome", "RaceOverview", "RaceService"]
