"""Lifecycle configuration.

Replaces process-wide constants with an explicit settings object passed to
``RaceLifecycle`` (and ``RaceService``) at construction.
"""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ResultsMode = Literal["incremental", "final"]

MINIMUM_CAPACITY = 2


class LifecycleConfig(BaseModel):
    """Settings for the race lifecycle state machine"""

    minimum_capacity: int = Field(
        MINIMUM_CAPACITY, ge=1, le=1000, description="Lanes required before locking"
    )
    # "incremental": each placement sees the ones accepted before it in the batch.
    # "final": every placed lane is checked against the complete target results.
    results_mode: ResultsMode = "incremental"
    # When False, recording results finalizes a race from any status.
    require_locked_for_results: bool = False

    model_config = ConfigDict(frozen=True, extra="forbid")


DEFAULT_CONFIG = LifecycleConfig()

__all__ = ["LifecycleConfig", "ResultsMode", "MINIMUM_CAPACITY", "DEFAULT_CONFIG"]
