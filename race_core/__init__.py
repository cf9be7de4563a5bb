from .config import DEFAULT_CONFIG, MINIMUM_CAPACITY, LifecycleConfig
from .errors import (
    CapacityError,
    DuplicateRegistrationError,
    InvalidStateError,
    NotFoundError,
    RaceError,
    RankingError,
    ValidationError,
)
from .lanes import assign, available_students, next_lane_number
from .lifecycle import RaceLifecycle
from .memory import InMemoryRaceRepository, InMemoryStudentDirectory
from .ranking import (
    RankingCheck,
    check_place,
    is_competition_ranking,
    validate_place,
    validate_placements,
)
from .service import OperationOutcome, RaceOverview, RaceService
from .types import FINALIZED, LOCKED, OPEN, Lane, Race, RaceStatus, StandingRow, Student
from .validation import InputSanitizer, PlacementInput, parse_placements

__all__ = [
    "LifecycleConfig",
    "DEFAULT_CONFIG",
    "MINIMUM_CAPACITY",
    "RaceError",
    "ValidationError",
    "InvalidStateError",
    "CapacityError",
    "DuplicateRegistrationError",
    "NotFoundError",
    "RankingError",
    "next_lane_number",
    "assign",
    "available_students",
    "RaceLifecycle",
    "InMemoryRaceRepository",
    "InMemoryStudentDirectory",
    "RankingCheck",
    "check_place",
    "validate_place",
    "validate_placements",
    "is_competition_ranking",
    "OperationOutcome",
    "RaceOverview",
    "RaceService",
    "OPEN",
    "LOCKED",
    "FINALIZED",
    "RaceStatus",
    "Lane",
    "Race",
    "StandingRow",
    "Student",
    "InputSanitizer",
    "PlacementInput",
    "parse_placements",
]
