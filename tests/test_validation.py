import pytest
from pydantic import ValidationError as PydanticValidationError

from race_core import InputSanitizer, LifecycleConfig, ValidationError, parse_placements
from race_core.validation import parse_place, parse_race_input


def test_parse_placements_accepts_mapping_pairs_and_dicts():
    expected = [(1, 1), (2, 2)]
    shapes = [
        {1: 1, 2: 2},
        [(1, 1), (2, 2)],
        [{"lane_id": 1, "student_place": 1}, {"id": "2", "student_place": "2"}],
        {"0": {"id": "1", "student_place": "1"}, "1": {"id": "2", "student_place": "2"}},
    ]
    for raw in shapes:
        parsed = parse_placements(raw)
        assert [(p.lane_id, p.student_place) for p in parsed] == expected


def test_blank_place_means_unplaced():
    parsed = parse_placements([(1, ""), (2, None)])
    assert [p.student_place for p in parsed] == [None, None]


def test_bad_places_are_reported_together():
    with pytest.raises(ValidationError) as exc:
        parse_placements([(1, "first"), (2, 0), (3, 1)])
    messages = exc.value.messages
    assert len(messages) == 2
    assert "is not a number" in messages[0]
    assert "must be greater than 0" in messages[1]


def test_duplicate_lane_in_batch():
    with pytest.raises(ValidationError) as exc:
        parse_placements([(1, 1), (1, 2)])
    assert "more than once" in exc.value.message


@pytest.mark.parametrize("raw", [[], {}, None])
def test_empty_batch_is_rejected(raw):
    with pytest.raises(ValidationError):
        parse_placements(raw)


def test_malformed_entry():
    with pytest.raises(ValidationError):
        parse_placements([(1, 1, 1)])


def test_parse_place():
    assert parse_place(3) == 3
    assert parse_place(" 4 ") == 4
    assert parse_place(2.0) == 2
    assert parse_place(None) is None
    for bad in (False, 1.5, "1.5", -3, object()):
        with pytest.raises(ValidationError):
            parse_place(bad)


def test_race_name_is_sanitized():
    assert parse_race_input("  Relay <4x100>\x00 ").name == "Relay 4x100"
    with pytest.raises(ValidationError) as exc:
        parse_race_input("<>")
    assert exc.value.kind == "validation"


def test_sanitize_name_keeps_diacritics():
    assert InputSanitizer.sanitize_name("  Ștefan O'Neil ") == "Ștefan O'Neil"


def test_sanitize_name_truncates_and_drops_null_bytes():
    assert InputSanitizer.sanitize_name(" Ana\0 ") == "Ana"
    assert InputSanitizer.sanitize_name("x" * 300) == "x" * 255
    assert InputSanitizer.sanitize_name("abcdef", max_length=3) == "abc"


def test_lifecycle_config_bounds():
    assert LifecycleConfig().minimum_capacity == 2
    assert LifecycleConfig().results_mode == "incremental"
    with pytest.raises(PydanticValidationError):
        LifecycleConfig(minimum_capacity=0)
    with pytest.raises(PydanticValidationError):
        LifecycleConfig(results_mode="strict")


def test_batch_that_is_not_a_list():
    with pytest.raises(ValidationError) as exc:
        parse_placements(5)
    assert exc.value.message == "results must be a list of (lane_id, student_place) pairs"
