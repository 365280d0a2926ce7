"""Tests for records module."""

import pytest

from planka_errors import PlankaJSONError
from planka_records import DEFAULT_POSITION, RECORD_FIELDS, to_record, to_record_list


# --- Sample data fixtures ---

FULL_PROJECT = {
    "id": "1357158568008091264",
    "name": "Roadmap",
    "slug": "roadmap",
    "description": None,
    "backgroundType": "gradient",
    "createdAt": "2025-01-01T00:00:00.000Z",
    "updatedAt": None,
}

FULL_LIST = {
    "id": "1357158568008091266",
    "name": "In progress",
    "position": 131070,
    "boardId": "1357158568008091265",
    "color": "berry-red",
    "createdAt": "2025-01-01T00:00:00.000Z",
}

FULL_CARD = {
    "id": "1357158568008091267",
    "name": "Fix login bug",
    "type": "story",
    "description": "Users are logged out on refresh",
    "listId": "1357158568008091266",
    "boardId": "1357158568008091265",
    "position": 65535,
    "dueDate": "2025-03-01T12:00:00.000Z",
    "isDueCompleted": False,
    "stopwatch": {"startedAt": "2025-02-01T09:00:00.000Z", "total": 3600},
    "creatorUserId": "1357158568008091200",
    "coverAttachmentId": None,
    "isSubscribed": True,
}


class TestToRecord:
    def test_project(self):
        assert to_record(FULL_PROJECT, "project") == {
            "id": "1357158568008091264",
            "name": "Roadmap",
            "slug": "roadmap",
        }

    def test_list(self):
        assert to_record(FULL_LIST, "list") == {
            "id": "1357158568008091266",
            "name": "In progress",
            "position": 131070,
            "boardId": "1357158568008091265",
        }

    def test_card_keeps_record_fields_only(self):
        result = to_record(FULL_CARD, "card")

        assert list(result) == RECORD_FIELDS["card"]
        assert result["type"] == "story"
        assert result["stopwatch"] == {"startedAt": "2025-02-01T09:00:00.000Z", "total": 3600}
        assert "creatorUserId" not in result

    def test_absent_optionals_become_none(self):
        result = to_record({"id": "B1", "name": "Main"}, "board")

        assert result == {"id": "B1", "name": "Main", "position": None, "projectId": None}

    def test_stopwatch_total_defaults_to_zero(self):
        card = dict(FULL_CARD, stopwatch={"startedAt": None})

        assert to_record(card, "card")["stopwatch"] == {"startedAt": None, "total": 0}

    @pytest.mark.parametrize("field", ["id", "name", "listId"])
    def test_missing_required_field(self, field):
        card = {k: v for k, v in FULL_CARD.items() if k != field}

        with pytest.raises(PlankaJSONError, match=f"`{field}`"):
            to_record(card, "card")

    def test_null_required_field(self):
        with pytest.raises(PlankaJSONError):
            to_record(dict(FULL_LIST, boardId=None), "list")

    def test_non_object(self):
        with pytest.raises(PlankaJSONError, match="expected card object, got str"):
            to_record("C1", "card")


class TestToRecordList:
    def test_list_of_items(self):
        assert to_record_list([FULL_LIST, FULL_LIST], "list") == [to_record(FULL_LIST, "list")] * 2

    def test_empty(self):
        assert to_record_list([], "card") == []

    def test_not_a_list(self):
        with pytest.raises(PlankaJSONError):
            to_record_list({"items": []}, "project")


def test_default_position_is_end_of_sequence():
    assert DEFAULT_POSITION == 65535.0
