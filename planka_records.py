"""
Record shaping for Planka API responses.

Planka returns far more than tools need (timestamps, creator ids, cover
settings...). These helpers reduce each item to the fields of its record
type, fill absent optional fields with None and reject items that lack a
required field.

Usage:
    from planka_records import to_record_list

    cards = to_record_list(data["included"]["cards"], "card")
"""

from typing import Any, Dict, List

from planka_errors import PlankaJSONError


# Fields kept for each record type, in output order
RECORD_FIELDS = {
    "project": ["id", "name", "slug"],
    "board":   ["id", "name", "position", "projectId"],
    "list":    ["id", "name", "position", "boardId"],
    "card":    ["id", "name", "type", "description", "listId", "boardId",
                "position", "dueDate", "isDueCompleted", "stopwatch"],
}

# Fields that must be present and non-null
REQUIRED_FIELDS = {
    "project": {"id", "name"},
    "board":   {"id", "name"},
    "list":    {"id", "name", "boardId"},
    "card":    {"id", "name", "listId"},
}

# Appended to the end of a parent's ordered sequence
DEFAULT_POSITION = 65535.0

CARD_TYPES = ("project", "story")


def _shape_stopwatch(value: Any) -> Any:
    if not isinstance(value, dict):
        return value
    return {"startedAt": value.get("startedAt"), "total": value.get("total", 0)}


def to_record(item: Any, record_type: str) -> Dict[str, Any]:
    """Reduce a raw API item to its record fields.

    Args:
        item: One object from a Planka response
        record_type: Key into RECORD_FIELDS (e.g. "card", "list")

    Returns:
        Dict with exactly the record's fields

    Raises:
        PlankaJSONError: if the item is not an object or misses a required field
    """
    if not isinstance(item, dict):
        raise PlankaJSONError(f"expected {record_type} object, got {type(item).__name__}")

    for field in sorted(REQUIRED_FIELDS[record_type]):
        if item.get(field) is None:
            raise PlankaJSONError(f"missing field `{field}` in {record_type}")

    record = {field: item.get(field) for field in RECORD_FIELDS[record_type]}
    if record_type == "card":
        record["stopwatch"] = _shape_stopwatch(record["stopwatch"])
    return record


def to_record_list(items: Any, record_type: str) -> List[Dict[str, Any]]:
    """Shape a list of raw API items; a missing collection is an error."""
    if not isinstance(items, list):
        raise PlankaJSONError(f"expected list of {record_type} objects, got {type(items).__name__}")
    return [to_record(item, record_type) for item in items]
