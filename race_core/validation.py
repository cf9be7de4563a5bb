"""
Input validation schemas using Pydantic v2
Validates race names, student names and result placements
"""

import logging
import re
from typing import Any, Iterable, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError

logger = logging.getLogger(__name__)

_INTEGER_RE = re.compile(r"^[+-]?\d+$")

# ==================== VALIDATOR FUNCTIONS ====================


def _coerce_positive_int(value: Any, field_name: str) -> Optional[int]:
    """Coerce form-style input to a positive int; ``None``/blank means unset."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be an integer")
    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{field_name} must be an integer")
        number = int(value)
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return None
        if not _INTEGER_RE.match(stripped):
            raise ValueError(f"{field_name} is not a number")
        number = int(stripped, 10)
    else:
        raise ValueError(f"{field_name} is not a number")
    if number < 1:
        raise ValueError(f"{field_name} must be greater than 0")
    return number


def _require_name(value: str, field_name: str) -> str:
    cleaned = InputSanitizer.sanitize_name(value)
    if not cleaned:
        raise ValueError(f"{field_name} can't be blank")
    return cleaned


class RaceInput(BaseModel):
    """Validated input for creating a race"""

    name: str = Field(..., max_length=255, description="Race name")

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v: Any) -> str:
        if v is None:
            raise ValueError("name can't be blank")
        return _require_name(str(v), "name")

    model_config = ConfigDict(extra="forbid")


class StudentInput(BaseModel):
    """Validated input for registering a student"""

    name: str = Field(..., max_length=255, description="Student name")

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v: Any) -> str:
        if v is None:
            raise ValueError("name can't be blank")
        return _require_name(str(v), "name")

    model_config = ConfigDict(extra="forbid")


class PlacementInput(BaseModel):
    """One (lane, finishing place) pair submitted with race results"""

    lane_id: int = Field(..., description="Lane id within the race")
    student_place: Optional[int] = Field(
        None, description="Finishing place (1-based), None leaves the lane unplaced"
    )

    @field_validator("lane_id", mode="before")
    @classmethod
    def validate_lane_id(cls, v: Any) -> int:
        lane_id = _coerce_positive_int(v, "lane_id")
        if lane_id is None:
            raise ValueError("lane_id is required")
        return lane_id

    @field_validator("student_place", mode="before")
    @classmethod
    def validate_student_place(cls, v: Any) -> Optional[int]:
        return _coerce_positive_int(v, "student_place")

    model_config = ConfigDict(extra="ignore", frozen=True)


class InputSanitizer:
    """Utility class for input sanitization"""

    @staticmethod
    def sanitize_name(name: str, max_length: int = 255) -> str:
        """Sanitize a race or student name for display, keeping diacritics"""
        name = name.strip()[:max_length].replace("\0", "")

        # Letters (any script), digits, spaces, dashes and apostrophes survive
        dangerous_chars = r'[<>{}[\]\\|;&$`"\*\x00-\x1f\x7f]'
        name = re.sub(dangerous_chars, "", name)

        return name.strip()


# ==================== PARSERS ====================


def _messages(exc: PydanticValidationError) -> List[str]:
    messages = []
    for err in exc.errors():
        msg = str(err.get("msg", "invalid value"))
        # Drop pydantic's "Value error, " prefix from custom validators
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        messages.append(msg)
    return messages or [str(exc)]


def parse_race_input(name: Any) -> RaceInput:
    try:
        return RaceInput(name=name)
    except PydanticValidationError as e:
        logger.warning(f"Race input rejected: {e}")
        raise ValidationError(*_messages(e)) from e


def parse_student_input(name: Any) -> StudentInput:
    try:
        return StudentInput(name=name)
    except PydanticValidationError as e:
        logger.warning(f"Student input rejected: {e}")
        raise ValidationError(*_messages(e)) from e


def parse_place(value: Any) -> Optional[int]:
    """
    Validate a single finishing place.

    Returns:
        The place as int, or None for blank input

    Raises:
        ValidationError: non-integer, non-positive or boolean input
    """
    try:
        return _coerce_positive_int(value, "student_place")
    except ValueError as e:
        logger.warning(f"Place rejected: {value!r}: {e}")
        raise ValidationError(str(e)) from e


def parse_placements(raw: Any) -> List[PlacementInput]:
    """
    Validate a results batch.

    Accepts a mapping ``{lane_id: place}``, an iterable of ``(lane_id, place)``
    pairs, or dicts with ``lane_id``/``id`` and ``student_place`` keys, either
    in a list or as the values of an index-keyed mapping.

    Raises:
        ValidationError: malformed entry, bad place, empty batch or a lane
            listed more than once
    """
    if isinstance(raw, Mapping):
        # {"0": {"id": 1, "student_place": "1"}, ...} comes from nested forms
        if raw and all(isinstance(v, Mapping) for v in raw.values()):
            items: Iterable[Any] = list(raw.values())
        else:
            items = list(raw.items())
    elif raw is None:
        items = []
    else:
        try:
            items = list(raw)
        except TypeError:
            logger.warning(f"Results batch rejected: not iterable: {raw!r}")
            raise ValidationError(
                "results must be a list of (lane_id, student_place) pairs"
            ) from None

    placements: List[PlacementInput] = []
    errors: List[str] = []
    for i, item in enumerate(items):
        if isinstance(item, Mapping):
            data = {
                "lane_id": item.get("lane_id", item.get("id")),
                "student_place": item.get("student_place"),
            }
        elif isinstance(item, (tuple, list)) and len(item) == 2:
            data = {"lane_id": item[0], "student_place": item[1]}
        else:
            errors.append(f"placement {i} must be a (lane_id, student_place) pair")
            continue
        try:
            placements.append(PlacementInput(**data))
        except PydanticValidationError as e:
            errors.extend(f"placement {i}: {msg}" for msg in _messages(e))

    if not errors and not placements:
        errors.append("results must include at least one lane")

    seen: set[int] = set()
    for placement in placements:
        if placement.lane_id in seen:
            errors.append(f"lane {placement.lane_id} is listed more than once")
        seen.add(placement.lane_id)

    if errors:
        logger.warning(f"Results batch rejected: {errors}")
        raise ValidationError(*errors)
    return placements


# ==================== EXPORT ====================

__all__ = [
    "RaceInput",
    "StudentInput",
    "PlacementInput",
    "InputSanitizer",
    "parse_race_input",
    "parse_student_input",
    "parse_place",
    "parse_placements",
]
