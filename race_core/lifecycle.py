"""Race lifecycle state machine (pure, no persistence).

States and transitions:
- OPEN: initial status; students can be registered into lanes.
- OPEN -> LOCKED: ``lock``; needs at least ``minimum_capacity`` lanes.
- any -> FINALIZED: ``record_results``; sets every submitted place at once.

Recording results does not require LOCKED unless
``LifecycleConfig.require_locked_for_results`` is set, so an OPEN race can be
finalized directly. Operations mutate the Race aggregate passed in and only do
so after every check has passed; a raised error leaves the race untouched.
"""
from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from . import lanes as lane_service
from .config import DEFAULT_CONFIG, LifecycleConfig, ResultsMode
from .errors import (
    CapacityError,
    InvalidStateError,
    NotFoundError,
    RankingError,
    ValidationError,
)
from .ranking import validate_placements
from .types import FINALIZED, LOCKED, OPEN, Lane, Race, StandingRow
from .validation import parse_placements, parse_race_input

logger = logging.getLogger(__name__)

NO_LANES_MESSAGE = "This race has no participants assigned to lanes yet."


class RaceLifecycle:
    def __init__(self, config: Optional[LifecycleConfig] = None) -> None:
        self.config = config or DEFAULT_CONFIG

    def create(self, name: Any) -> Race:
        """Build a new OPEN race. Raises ValidationError for a blank name."""
        data = parse_race_input(name)
        return Race(name=data.name, status=OPEN)

    def register(self, race: Race, student_id: int) -> Lane:
        return lane_service.assign(race, student_id)

    def lock(self, race: Race) -> Race:
        """
        Close registration.

        Raises:
            InvalidStateError: race is not OPEN
            CapacityError: fewer lanes than ``minimum_capacity``
        """
        if race.status != OPEN:
            raise InvalidStateError(
                f"Race is not in '{OPEN}' state and cannot be locked at this time."
            )
        minimum = self.config.minimum_capacity
        if len(race.lanes) < minimum:
            raise CapacityError(f"must have at least {minimum} participants to be ready.")
        race.status = LOCKED
        logger.info(f"Race {race.id} locked with {len(race.lanes)} lanes")
        return race

    def record_results(
        self,
        race: Race,
        placements: Any,
        *,
        mode: Optional[ResultsMode] = None,
    ) -> Race:
        """
        Set finishing places for a batch of lanes and finalize the race.

        Args:
            race: aggregate with all of its lanes loaded
            placements: mapping or pairs of lane_id -> place
                (see ``validation.parse_placements``)
            mode: "incremental" or "final"; defaults to ``config.results_mode``

        Raises:
            ValidationError: malformed batch or place
            InvalidStateError: race is not LOCKED while
                ``require_locked_for_results`` is set
            NotFoundError: a lane id does not belong to this race (every id
                does when the race has no lanes)
            RankingError: at least one place breaks competition ranking; carries
                every failure
        """
        batch = parse_placements(placements)
        if all(p.student_place is None for p in batch):
            raise ValidationError("results must set at least one place")
        if self.config.require_locked_for_results and race.status != LOCKED:
            raise InvalidStateError(
                f"Results can only be recorded for a {LOCKED.lower()} race "
                f"(currently '{race.status.lower()}')."
            )

        lanes_by_id = {lane.id: lane for lane in race.lanes}
        missing = [p.lane_id for p in batch if p.lane_id not in lanes_by_id]
        if missing:
            raise NotFoundError(*(f"Lane {lane_id} not found in this race" for lane_id in missing))

        effective_mode = mode or self.config.results_mode
        current = {lane.id: lane.student_place for lane in race.lanes}
        pairs = [(p.lane_id, p.student_place) for p in batch]
        failures = validate_placements(current, pairs, mode=effective_mode)
        if failures:
            logger.warning(
                f"Race {race.id} results rejected ({effective_mode}): "
                f"{[f.message for f in failures]}"
            )
            raise RankingError(*(f.message for f in failures), failures=failures)

        for lane_id, place in pairs:
            lanes_by_id[lane_id].student_place = place
        previous_status = race.status
        race.status = FINALIZED
        logger.info(f"Race {race.id} finalized from {previous_status} with {len(pairs)} places")
        return race

    def results_sheet(self, race: Race) -> List[Lane]:
        """Lanes in lane-number order for entering results."""
        if not race.lanes:
            raise InvalidStateError(NO_LANES_MESSAGE)
        return sorted(race.lanes, key=lambda lane: lane.lane_number)

    def standings(self, race: Race, names: Mapping[int, str]) -> List[StandingRow]:
        """Lanes ordered by place (unplaced last), then lane number."""
        rows = [
            StandingRow(
                lane_id=lane.id,
                lane_number=lane.lane_number,
                student_id=lane.student_id,
                student_name=names.get(lane.student_id, ""),
                place=lane.student_place,
            )
            for lane in race.lanes
        ]
        rows.sort(
            key=lambda row: (
                row.place is None,
                row.place if row.place is not None else 0,
                row.lane_number,
            )
        )
        return rows


__all__ = ["RaceLifecycle", "NO_LANES_MESSAGE"]
