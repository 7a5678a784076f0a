"""
Tests for the declarative request schema validator.
"""

import pytest

from degreeplan.utils.schema_validation import (
    PLAN_PATCH_SCHEMA,
    PLAN_SCHEMA,
    FieldSpec,
    FieldType,
    get_schema_violations,
    sanitize_using_schema,
)


def test_valid_plan_passes():
    record = {"studentId": 1, "planName": "My Plan", "courses": ["CS101"]}
    assert get_schema_violations(record, PLAN_SCHEMA) == ""


def test_non_mapping_input_rejected():
    assert "Invalid input type" in get_schema_violations(["planName"], PLAN_SCHEMA)
    assert "Invalid input type" in get_schema_violations(None, PLAN_SCHEMA)


def test_no_matching_key_rejected():
    message = get_schema_violations({"foo": 1, "bar": 2}, PLAN_SCHEMA)
    assert "no matching key with schema" in message


def test_empty_record_rejected():
    assert "no matching key with schema" in get_schema_violations({}, PLAN_SCHEMA)


def test_strict_mode_requires_required_fields():
    message = get_schema_violations({"planName": "My Plan"}, PLAN_SCHEMA)
    assert 'Property "studentId" not in input' in message
    assert "Invalid plan name" not in message


def test_strict_mode_ignores_unknown_fields():
    record = {"studentId": 1, "planName": "My Plan", "favoriteColor": "green"}
    assert get_schema_violations(record, PLAN_SCHEMA) == ""


def test_strict_mode_skips_absent_optional_fields():
    # status and lastUpdated are optional and absent
    assert get_schema_violations({"studentId": 7, "planName": "Valid name"}, PLAN_SCHEMA) == ""


def test_none_counts_as_missing():
    message = get_schema_violations({"studentId": None, "planName": "My Plan"}, PLAN_SCHEMA)
    assert 'Property "studentId" not in input' in message


def test_every_failing_field_is_reported():
    message = get_schema_violations({"studentId": 0, "planName": "abc"}, PLAN_SCHEMA)
    assert "Invalid user ID" in message
    assert "Invalid plan name" in message
    assert len(message.split("\n\n")) == 2


@pytest.mark.parametrize("name,valid", [
    ("abcd", False),
    ("abcde", True),
    ("x" * 50, True),
    ("x" * 51, False),
])
def test_plan_name_length_bounds_are_inclusive(name, valid):
    message = get_schema_violations({"studentId": 1, "planName": name}, PLAN_SCHEMA)
    assert (message == "") is valid


@pytest.mark.parametrize("student_id,valid", [
    (1, True),
    ("42", True),
    (10**9, True),
    (2**31 - 1, True),
    (2**31, False),
    (10**20, False),
    (0, False),
    (-3, False),
    ("abc", False),
    (True, False),
    (1.5, False),
])
def test_integer_fields(student_id, valid):
    message = get_schema_violations({"studentId": student_id, "planName": "My Plan"}, PLAN_SCHEMA)
    assert (message == "") is valid


def test_string_field_rejects_non_strings():
    message = get_schema_violations({"studentId": 1, "planName": 12345}, PLAN_SCHEMA)
    assert "Invalid plan name" in message


@pytest.mark.parametrize("status,valid", [(0, True), (4, True), (5, False), (-1, False)])
def test_status_range(status, valid):
    record = {"studentId": 1, "planName": "My Plan", "status": status}
    # status is optional, so only partial mode checks it when present
    assert (get_schema_violations(record, PLAN_SCHEMA, partial=True) == "") is valid


@pytest.mark.parametrize("timestamp,valid", [
    ("2020-12-31T23:59:59Z", True),
    ("2020-12-31T23:59:59.123+02:00", True),
    ("2020-12-31", True),
    ("12/31/2020", False),
    ("2020-13-01T00:00:00Z", False),
    ("yesterday", False),
    (1609459199, False),
])
def test_timestamp_must_be_iso_8601(timestamp, valid):
    message = get_schema_violations({"lastUpdated": timestamp}, PLAN_SCHEMA, partial=True)
    assert (message == "") is valid


def test_course_list_bounds():
    too_many = [f"CS{i}" for i in range(13)]
    assert "Invalid course list" in get_schema_violations({"courses": too_many}, PLAN_SCHEMA, partial=True)
    assert "Invalid course list" in get_schema_violations({"courses": "CS101"}, PLAN_SCHEMA, partial=True)
    assert get_schema_violations({"courses": []}, PLAN_SCHEMA, partial=True) == ""


def test_partial_mode_checks_only_present_fields():
    assert get_schema_violations({"planId": 5}, PLAN_PATCH_SCHEMA, partial=True) == ""
    message = get_schema_violations({"planId": 5, "planName": "abc"}, PLAN_PATCH_SCHEMA, partial=True)
    assert "Invalid plan name" in message


def test_partial_mode_still_needs_a_matching_key():
    message = get_schema_violations({"unrelated": True}, PLAN_PATCH_SCHEMA, partial=True)
    assert "no matching key with schema" in message


def test_unbounded_integer_spec():
    schema = {"count": FieldSpec(type=FieldType.INTEGER, required=True, message="bad count")}
    assert get_schema_violations({"count": -(10**12)}, schema) == ""
    assert get_schema_violations({"count": "x"}, schema) == "bad count"


def test_sanitize_keeps_only_present_schema_fields():
    record = {
        "studentId": 1,
        "planName": "My Plan",
        "status": None,
        "courses": ["CS101", None],
        "isAdmin": True,
    }
    assert sanitize_using_schema(record, PLAN_SCHEMA) == {
        "studentId": 1,
        "planName": "My Plan",
        "courses": ["CS101", None],
    }


def test_sanitize_handles_empty_input():
    assert sanitize_using_schema(None, PLAN_SCHEMA) == {}
    assert sanitize_using_schema({}, PLAN_SCHEMA) == {}


def test_patch_plan_id_must_fit_an_integer_key():
    message = get_schema_violations({"planId": 10**20}, PLAN_PATCH_SCHEMA, partial=True)
    assert "Invalid plan ID" in message
