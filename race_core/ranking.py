"""Competition-ranking validator for finishing places.

Standard competition ranking ("1224"): tied entrants share a place and the
place after a group of k ties skips k-1 positions, e.g. 1, 1, 3, 4, 4, 6.

Rule for a candidate place p against the places already held by the other
lanes of the same race (lanes without a place are ignored):
- S = sorted(others + [p]); idx = first index of p in S.
- idx == 0: valid only when p == 1.
- otherwise prev = S[idx - 1]; valid when p == prev or p == idx + 1.

Everything here is pure: callers pass an explicit snapshot of places, nothing
is read from or written to a race.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Literal, Mapping, Optional, Sequence

from .errors import RankingError, ValidationError
from .validation import parse_place

logger = logging.getLogger(__name__)

ValidationMode = Literal["incremental", "final"]


@dataclass(frozen=True)
class RankingCheck:
    place: int
    index: int
    previous: Optional[int]
    valid: bool
    lane_id: Optional[int] = None

    @property
    def accepted(self) -> tuple[int, ...]:
        """Places that would have been valid at this position."""
        if self.previous is None:
            return (1,)
        return (self.previous, self.index + 1)

    @property
    def message(self) -> str:
        prefix = f"lane {self.lane_id}: " if self.lane_id is not None else ""
        if self.valid:
            return f"{prefix}place {self.place} is valid"
        if self.previous is None:
            return f"{prefix}place {self.place} is invalid, the first place must be 1"
        return (
            f"{prefix}place {self.place} is invalid at position {self.index + 1}, "
            f"expected {self.previous} (tie) or {self.index + 1}"
        )


def check_place(
    other_places: Iterable[Optional[int]],
    candidate: Any,
    *,
    lane_id: Optional[int] = None,
) -> RankingCheck:
    """
    Check one candidate place against the other committed places.

    Args:
      other_places: places of the other lanes; None entries are skipped.
      candidate: proposed place, validated as a positive integer first.
      lane_id: only used to label the result.

    Raises:
      ValidationError: candidate is not a positive integer.
    """
    place = parse_place(candidate)
    if place is None:
        raise ValidationError("student_place is required")
    ordered = sorted([p for p in other_places if p is not None] + [place])
    idx = ordered.index(place)
    if idx == 0:
        return RankingCheck(place=place, index=0, previous=None, valid=place == 1, lane_id=lane_id)
    prev = ordered[idx - 1]
    valid = place == prev or place == idx + 1
    return RankingCheck(place=place, index=idx, previous=prev, valid=valid, lane_id=lane_id)


def validate_place(
    other_places: Iterable[Optional[int]],
    candidate: Any,
    *,
    lane_id: Optional[int] = None,
) -> int:
    """Return the validated place or raise ``RankingError``."""
    check = check_place(other_places, candidate, lane_id=lane_id)
    if not check.valid:
        raise RankingError(check.message, failures=(check,))
    return check.place


def validate_placements(
    current: Mapping[int, Optional[int]],
    placements: Sequence[tuple[int, Optional[int]]],
    *,
    mode: ValidationMode = "incremental",
) -> list[RankingCheck]:
    """
    Validate a batch of placements against a snapshot of a race's places.

    Args:
      current: lane_id -> committed place (None when unplaced) for every lane
        of the race.
      placements: (lane_id, place) pairs; place None clears the lane.
      mode: "incremental" checks each pair against ``current`` with the earlier
        accepted pairs of this batch applied (invalid pairs are not applied);
        when a pair clears a place, the places still held afterwards are
        re-checked;
        "final" checks every placed lane of the resulting configuration
        against that configuration.

    Returns:
      The failed checks, empty when the whole batch is acceptable. ``current``
      is never modified.
    """
    if mode == "incremental":
        return _validate_incremental(current, placements)
    if mode == "final":
        return _validate_final(current, placements)
    raise ValidationError(f"unknown validation mode: {mode}")


def _validate_incremental(
    current: Mapping[int, Optional[int]],
    placements: Sequence[tuple[int, Optional[int]]],
) -> list[RankingCheck]:
    snapshot = dict(current)
    failures: list[RankingCheck] = []
    cleared = False
    for lane_id, place in placements:
        if place is None:
            snapshot[lane_id] = None
            cleared = True
            continue
        others = [p for other_id, p in snapshot.items() if other_id != lane_id]
        check = check_place(others, place, lane_id=lane_id)
        logger.debug(f"incremental check lane={lane_id} place={place} -> {check.valid}")
        if check.valid:
            snapshot[lane_id] = check.place
        else:
            failures.append(check)
    if cleared:
        # A cleared place can open a gap below places that are still held.
        failed = {f.lane_id for f in failures}
        failures.extend(
            check
            for check in _check_snapshot(snapshot)
            if check.lane_id not in failed
        )
    return failures


def _validate_final(
    current: Mapping[int, Optional[int]],
    placements: Sequence[tuple[int, Optional[int]]],
) -> list[RankingCheck]:
    target = dict(current)
    for lane_id, place in placements:
        target[lane_id] = parse_place(place) if place is not None else None
    return _check_snapshot(target)


def _check_snapshot(places: Mapping[int, Optional[int]]) -> list[RankingCheck]:
    failures: list[RankingCheck] = []
    for lane_id in sorted(places):
        place = places[lane_id]
        if place is None:
            continue
        others = [p for other_id, p in places.items() if other_id != lane_id]
        check = check_place(others, place, lane_id=lane_id)
        logger.debug(f"snapshot check lane={lane_id} place={place} -> {check.valid}")
        if not check.valid:
            failures.append(check)
    return failures


def is_competition_ranking(places: Iterable[int]) -> bool:
    """True when the places, sorted, form a gap-free competition ranking."""
    ordered = sorted(places)
    for i, place in enumerate(ordered):
        if i == 0:
            if place != 1:
                return False
        elif place != ordered[i - 1] and place != i + 1:
            return False
    return True


__all__ = [
    "RankingCheck",
    "ValidationMode",
    "check_place",
    "validate_place",
    "validate_placements",
    "is_competition_ranking",
]
