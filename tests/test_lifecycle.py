import pytest

from race_core import (
    FINALIZED,
    LOCKED,
    OPEN,
    CapacityError,
    InvalidStateError,
    LifecycleConfig,
    NotFoundError,
    Race,
    RaceLifecycle,
    RankingError,
    ValidationError,
)


def _race_with_lanes(count: int, status: str = OPEN) -> Race:
    race = Race(name="Relay", id=1)
    lifecycle = RaceLifecycle()
    for i in range(count):
        lane = lifecycle.register(race, 100 + i)
        lane.id = i + 1
    race.status = status
    return race


def _places(race: Race) -> list:
    return [lane.student_place for lane in race.lanes]


def test_create_starts_open():
    race = RaceLifecycle().create("  200m sprint ")
    assert race.name == "200m sprint"
    assert race.status == OPEN
    assert race.lanes == []


@pytest.mark.parametrize("name", ["", "   ", None])
def test_create_rejects_blank_name(name):
    with pytest.raises(ValidationError):
        RaceLifecycle().create(name)


def test_lock_with_one_lane_fails():
    race = _race_with_lanes(1)
    with pytest.raises(CapacityError) as exc:
        RaceLifecycle().lock(race)
    assert exc.value.message == "must have at least 2 participants to be ready."
    assert race.status == OPEN


def test_lock_with_two_lanes_succeeds():
    race = _race_with_lanes(2)
    assert RaceLifecycle().lock(race).status == LOCKED


def test_lock_only_from_open():
    race = _race_with_lanes(3, status=LOCKED)
    with pytest.raises(InvalidStateError):
        RaceLifecycle().lock(race)
    assert race.status == LOCKED

    race.status = FINALIZED
    with pytest.raises(InvalidStateError):
        RaceLifecycle().lock(race)
    assert race.status == FINALIZED


def test_minimum_capacity_comes_from_config():
    lifecycle = RaceLifecycle(LifecycleConfig(minimum_capacity=3))
    race = _race_with_lanes(2)
    with pytest.raises(CapacityError) as exc:
        lifecycle.lock(race)
    assert "at least 3 participants" in exc.value.message
    assert lifecycle.lock(_race_with_lanes(3)).status == LOCKED


def test_register_is_closed_after_lock():
    race = _race_with_lanes(2)
    lifecycle = RaceLifecycle()
    lifecycle.lock(race)
    with pytest.raises(InvalidStateError):
        lifecycle.register(race, 999)


def test_record_results_sets_places_and_finalizes():
    race = _race_with_lanes(3, status=LOCKED)
    RaceLifecycle().record_results(race, {1: 1, 2: 1, 3: 3})
    assert _places(race) == [1, 1, 3]
    assert race.status == FINALIZED


def test_record_results_finalizes_from_open_by_default():
    race = _race_with_lanes(2)
    RaceLifecycle().record_results(race, [(1, 1), (2, 2)])
    assert race.status == FINALIZED


def test_record_results_can_require_locked():
    lifecycle = RaceLifecycle(LifecycleConfig(require_locked_for_results=True))
    race = _race_with_lanes(2)
    with pytest.raises(InvalidStateError):
        lifecycle.record_results(race, [(1, 1), (2, 2)])
    assert _places(race) == [None, None]
    assert race.status == OPEN

    lifecycle.lock(race)
    lifecycle.record_results(race, [(1, 1), (2, 2)])
    assert race.status == FINALIZED


def test_one_bad_place_rejects_the_whole_batch():
    race = _race_with_lanes(4, status=LOCKED)
    with pytest.raises(RankingError) as exc:
        RaceLifecycle().record_results(race, [(1, 1), (2, 2), (3, 3), (4, 5)])
    assert [f.lane_id for f in exc.value.failures] == [4]
    assert _places(race) == [None, None, None, None]
    assert race.status == LOCKED


def test_all_ranking_failures_are_reported():
    race = _race_with_lanes(3, status=LOCKED)
    with pytest.raises(RankingError) as exc:
        RaceLifecycle().record_results(race, [(1, 2), (2, 1), (3, 4)])
    assert len(exc.value.messages) == 2


def test_mode_override_per_call():
    race = _race_with_lanes(3, status=LOCKED)
    lifecycle = RaceLifecycle()
    with pytest.raises(RankingError):
        lifecycle.record_results(race, [(1, 2), (2, 1), (3, 3)])
    lifecycle.record_results(race, [(1, 2), (2, 1), (3, 3)], mode="final")
    assert _places(race) == [2, 1, 3]


def test_config_default_mode_final():
    lifecycle = RaceLifecycle(LifecycleConfig(results_mode="final"))
    race = _race_with_lanes(2, status=LOCKED)
    lifecycle.record_results(race, [(1, 2), (2, 1)])
    assert _places(race) == [2, 1]


def test_invalid_place_is_a_validation_error():
    race = _race_with_lanes(2, status=LOCKED)
    with pytest.raises(ValidationError):
        RaceLifecycle().record_results(race, [(1, 1), (2, "second")])
    assert _places(race) == [None, None]


def test_unknown_lane_is_not_found():
    race = _race_with_lanes(2, status=LOCKED)
    with pytest.raises(NotFoundError):
        RaceLifecycle().record_results(race, [(1, 1), (42, 2)])
    assert race.status == LOCKED


def test_race_without_lanes_has_no_lane_to_place():
    race = Race(name="Empty", id=5)
    with pytest.raises(NotFoundError):
        RaceLifecycle().record_results(race, [(1, 1)])
    assert race.status == OPEN


def test_results_sheet_needs_lanes():
    with pytest.raises(InvalidStateError) as exc:
        RaceLifecycle().results_sheet(Race(name="Empty", id=5))
    assert "no participants" in exc.value.message


def test_batch_that_sets_no_place_is_rejected():
    race = _race_with_lanes(2, status=LOCKED)
    with pytest.raises(ValidationError):
        RaceLifecycle().record_results(race, [(1, None), (2, None)])
    assert _places(race) == [None, None]
    assert race.status == LOCKED


def test_clearing_a_place_cannot_leave_a_gap():
    race = _race_with_lanes(3, status=LOCKED)
    lifecycle = RaceLifecycle()
    lifecycle.record_results(race, [(1, 1), (2, 2), (3, 3)])
    with pytest.raises(RankingError) as exc:
        lifecycle.record_results(race, [(1, None), (2, 1)])
    assert [f.lane_id for f in exc.value.failures] == [3]
    assert _places(race) == [1, 2, 3]


def test_results_sheet_orders_by_lane_number():
    race = _race_with_lanes(3)
    race.lanes.reverse()
    sheet = RaceLifecycle().results_sheet(race)
    assert [lane.lane_number for lane in sheet] == [1, 2, 3]


def test_standings_order_by_place_then_lane():
    race = _race_with_lanes(4, status=LOCKED)
    lifecycle = RaceLifecycle()
    lifecycle.record_results(race, [(1, 3), (2, 1), (3, 1)], mode="final")
    names = {100: "Ana", 101: "Bob", 102: "Cara", 103: "Dan"}
    rows = lifecycle.standings(race, names)
    assert [(row.student_name, row.place) for row in rows] == [
        ("Bob", 1),
        ("Cara", 1),
        ("Ana", 3),
        ("Dan", None),
    ]
