"""
Tests for the FastAPI endpoints in recurrence_engine/main.py.
"""

from unittest import mock

from tests.conftest import post_json
from tests.test_util import make_task


def test_next_occurrence_daily(client):
    """A daily task rolls forward one day and stays open."""
    status, data = post_json(client, "/next-occurrence", make_task())
    assert status == 200
    assert data["status"] == "ok"
    task = data["task"]
    assert task["completed"] is False
    assert task["dueDateTime"] == "2024-01-16T10:30:00.000Z"
    assert task["occurrenceCount"] == 1
    assert task["repeating"] == "daily"
    assert task["result"] == {
        "nextDueDate": "2024-01-16T10:30:00.000Z",
        "shouldTerminate": False,
        "newOccurrenceCount": 1,
    }


def test_next_occurrence_all_day_regression(client):
    """All-day daily task completed mid-afternoon repeats the next day."""
    payload = make_task(
        repeatFrom="COMPLETION_DATE",
        dueDateTime="2026-01-06T00:00:00.000Z",
        completionDate="2026-01-06T14:42:00.000Z",
    )
    _, data = post_json(client, "/next-occurrence", payload)
    assert data["task"]["dueDateTime"] == "2026-01-07T00:00:00.000Z"


def test_next_occurrence_custom_series_ends(client):
    """Reaching the occurrence limit completes the task and clears repetition."""
    payload = make_task(
        repeating="custom",
        occurrenceCount=4,
        repeatingData={
            "type": "custom",
            "unit": "days",
            "interval": 1,
            "endCondition": "after_occurrences",
            "endAfterOccurrences": 5,
        },
    )
    _, data = post_json(client, "/next-occurrence", payload)
    task = data["task"]
    assert task["completed"] is True
    assert task["repeating"] == "never"
    assert task["repeatingData"] is None
    assert task["occurrenceCount"] == 5
    assert task["result"]["shouldTerminate"] is True
    assert task["result"]["nextDueDate"] is None


def test_next_occurrence_malformed_custom_rule_ends_series(client):
    """A custom rule with no unit ends the series instead of failing."""
    payload = make_task(repeating="custom", repeatingData={"type": "custom"})
    status, data = post_json(client, "/next-occurrence", payload)
    assert status == 200
    assert data["task"]["completed"] is True
    assert data["task"]["occurrenceCount"] == 1


def test_next_occurrence_non_repeating(client):
    """Non-repeating tasks are simply completed."""
    _, data = post_json(client, "/next-occurrence", make_task(repeating="never"))
    assert data["task"]["completed"] is True
    assert data["task"]["result"] is None
    assert data["task"]["occurrenceCount"] == 0


def test_next_occurrence_bad_payload(client):
    """Unparseable timestamps are a 400 with the error envelope."""
    payload = make_task(dueDateTime="yesterday")
    status, data = post_json(client, "/next-occurrence", payload)
    assert status == 400
    assert data["status"] == "error"
    assert "dueDateTime" in data["detail"]


def test_next_occurrence_missing_completion(client):
    """completionDate is required."""
    status, data = post_json(client, "/next-occurrence", make_task(completionDate=None))
    assert status == 400
    assert data["detail"] == "completionDate is required"


def test_next_occurrence_unexpected_error(client):
    """Unexpected failures are reported as 500 errors."""
    with mock.patch(
        "recurrence_engine.main.handle_task_completion",
        side_effect=RuntimeError("boom"),
    ):
        status, data = post_json(client, "/next-occurrence", make_task())
    assert status == 500
    assert data == {"status": "error", "detail": "boom"}


def test_validate_valid_rule(client):
    """A complete rule is valid and summarized."""
    status, data = post_json(
        client,
        "/validate",
        {
            "repeatFrom": "DUE_DATE",
            "repeatingData": {
                "unit": "weeks",
                "interval": 1,
                "weekdays": ["monday", "wednesday", "friday"],
            },
        },
    )
    assert status == 200
    assert data["valid"] is True
    assert data["problems"] == []
    assert data["summary"] == (
        "Every 1 weeks on Monday, Wednesday, Friday, from due date"
    )


def test_validate_incomplete_rule(client):
    """Missing unit/interval are reported as problems."""
    _, data = post_json(client, "/validate", {"type": "custom"})
    assert data["valid"] is False
    assert data["problems"] == ["unit is missing", "interval is missing"]


def test_validate_malformed_rule(client):
    """Malformed qualifiers are reported with an empty summary."""
    _, data = post_json(
        client, "/validate", {"unit": "months", "interval": 1, "monthRepeatType": "odd"}
    )
    assert data["valid"] is False
    assert "monthRepeatType" in data["problems"][0]
    assert data["summary"] is None


def test_next_occurrence_interval_out_of_range_ends_series(client):
    """An interval that leaves the calendar range completes the task."""
    payload = make_task(
        repeating="custom",
        repeatingData={"unit": "months", "interval": 10**6},
    )
    status, data = post_json(client, "/next-occurrence", payload)
    assert status == 200
    assert data["task"]["completed"] is True
    assert data["task"]["repeating"] == "never"
    assert data["task"]["result"]["shouldTerminate"] is True
    assert data["task"]["result"]["nextDueDate"] is None
