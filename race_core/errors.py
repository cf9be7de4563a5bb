"""Domain error taxonomy.

Core operations raise these; ``RaceService`` catches ``RaceError`` and hands it
back to the caller inside an ``OperationOutcome``. Each error carries a stable
``kind`` plus one or more human-readable messages.
"""
from __future__ import annotations

from typing import Iterable


class RaceError(Exception):
    """Base class for every failure the race core reports."""

    kind = "race_error"

    def __init__(self, *messages: str) -> None:
        self.messages: tuple[str, ...] = tuple(messages) or (self.kind,)
        super().__init__(", ".join(self.messages))

    @property
    def message(self) -> str:
        return ", ".join(self.messages)


class ValidationError(RaceError):
    """Malformed input: blank name, non-integer or non-positive number."""

    kind = "validation"


class InvalidStateError(RaceError):
    """Operation not permitted in the race's current lifecycle status."""

    kind = "invalid_state"


class CapacityError(RaceError):
    """Race has fewer lanes than the configured minimum at lock time."""

    kind = "capacity"


class DuplicateRegistrationError(RaceError):
    """Student already holds a lane in this race."""

    kind = "duplicate_registration"


class NotFoundError(RaceError):
    """Referenced race, student or lane does not exist."""

    kind = "not_found"


class RankingError(RaceError):
    """Candidate place(s) break the competition-ranking rule.

    ``failures`` holds one ``RankingCheck`` per rejected place.
    """

    kind = "ranking"

    def __init__(self, *messages: str, failures: Iterable = ()) -> None:
        super().__init__(*messages)
        self.failures = tuple(failures)


__all__ = [
    "RaceError",
    "ValidationError",
    "InvalidStateError",
    "CapacityError",
    "DuplicateRegistrationError",
    "NotFoundError",
    "RankingError",
]
