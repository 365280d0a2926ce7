"""
MCP tool definitions for the Planka server.

Pure data: what tools/list advertises. Input schemas are only advertised,
argument decoding happens in planka_tools.py.
"""

from typing import Any, Dict, List

# Caller allowed to invoke non-destructive tools from generated code
PROGRAMMATIC_CALLER = "code_execution_20250825"


def _programmatic() -> Dict[str, Any]:
    return {"allowedCallers": [PROGRAMMATIC_CALLER]}


CARD_TYPE_PROPERTY = {
    "type": "string",
    "enum": ["project", "story"],
}

TOOLS: List[Dict[str, Any]] = [
    {
        "name": "list_projects",
        "description": "List all Planka projects",
        "inputSchema": {
            "type": "object",
            "properties": {},
            "required": []
        },
        "annotations": _programmatic()
    },
    {
        "name": "list_boards",
        "description": "List all boards in a project",
        "inputSchema": {
            "type": "object",
            "properties": {
                "project_id": {"type": "string", "description": "The project ID"}
            },
            "required": ["project_id"]
        },
        "annotations": _programmatic()
    },
    {
        "name": "list_lists",
        "description": "List all lists (columns) on a board",
        "inputSchema": {
            "type": "object",
            "properties": {
                "board_id": {"type": "string", "description": "The board ID"}
            },
            "required": ["board_id"]
        },
        "annotations": _programmatic()
    },
    {
        "name": "list_cards",
        "description": "List all cards on a board",
        "inputSchema": {
            "type": "object",
            "properties": {
                "board_id": {"type": "string", "description": "The board ID"}
            },
            "required": ["board_id"]
        },
        "annotations": _programmatic()
    },
    {
        "name": "create_board",
        "description": "Create a new board in a project",
        "inputSchema": {
            "type": "object",
            "properties": {
                "project_id": {"type": "string", "description": "The project ID to create the board in"},
                "name": {"type": "string", "description": "The board name"}
            },
            "required": ["project_id", "name"]
        },
        "annotations": _programmatic()
    },
    {
        "name": "create_list",
        "description": "Create a new list (column) on a board",
        "inputSchema": {
            "type": "object",
            "properties": {
                "board_id": {"type": "string", "description": "The board ID to create the list on"},
                "name": {"type": "string", "description": "The list name"}
            },
            "required": ["board_id", "name"]
        },
        "annotations": _programmatic()
    },
    {
        "name": "create_card",
        "description": "Create a new card in a list",
        "inputSchema": {
            "type": "object",
            "properties": {
                "list_id": {"type": "string", "description": "The list ID to create the card in"},
                "type": dict(CARD_TYPE_PROPERTY, description="Type of the card (project or story)", default="project"),
                "name": {"type": "string", "description": "The card title"},
                "description": {"type": "string", "description": "Optional card description"},
                "due_date": {"type": "string", "format": "date-time", "description": "Optional due date (ISO 8601 format)"},
                "is_due_completed": {"type": "boolean", "description": "Whether the due date is completed"}
            },
            "required": ["list_id", "name"]
        },
        "annotations": _programmatic()
    },
    {
        "name": "update_card",
        "description": "Update a card's properties (name, description, type, due date, etc.)",
        "inputSchema": {
            "type": "object",
            "properties": {
                "card_id": {"type": "string", "description": "The card ID to update"},
                "name": {"type": "string", "description": "New card title (optional)"},
                "description": {"type": "string", "description": "New card description (optional)"},
                "type": dict(CARD_TYPE_PROPERTY, description="Card type (optional)"),
                "due_date": {"type": "string", "format": "date-time", "description": "Due date in ISO 8601 format (optional)"},
                "is_due_completed": {"type": "boolean", "description": "Whether the due date is completed (optional)"},
                "board_id": {"type": "string", "description": "Move card to different board (optional)"},
                "cover_attachment_id": {"type": "string", "description": "Set cover image attachment ID (optional)"}
            },
            "required": ["card_id"]
        },
        "annotations": _programmatic()
    },
    {
        "name": "move_card",
        "description": "Move a card to a different list",
        "inputSchema": {
            "type": "object",
            "properties": {
                "card_id": {"type": "string", "description": "The card ID to move"},
                "list_id": {"type": "string", "description": "The target list ID"},
                "position": {"type": "number", "description": "Position in the list (optional)"}
            },
            "required": ["card_id", "list_id"]
        },
        "annotations": _programmatic()
    },
    # Destructive tools are never exposed to programmatic callers
    {
        "name": "delete_card",
        "description": "Delete a card",
        "inputSchema": {
            "type": "object",
            "properties": {
                "card_id": {"type": "string", "description": "The card ID to delete"}
            },
            "required": ["card_id"]
        }
    },
    {
        "name": "delete_list",
        "description": "Delete a list and all its cards",
        "inputSchema": {
            "type": "object",
            "properties": {
                "list_id": {"type": "string", "description": "The list ID to delete"}
            },
            "required": ["list_id"]
        }
    },
]
