"""
Tool dispatch for the Planka MCP server.

Each tool has one argument dataclass that decodes the loosely-typed
`arguments` object once, at the boundary. Handlers then call PlankaClient
and render the outcome as an MCP tool result:

    {"content": [{"type": "text", "text": "..."}], "isError": true}

Argument and remote failures become error-flagged results, never
JSON-RPC errors.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from planka_errors import PlankaError
from planka_records import CARD_TYPES

logger = logging.getLogger('planka_tools')


def text_result(text: str) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": text}]}


def error_result(text: str) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": text}], "isError": True}


def _pretty(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Argument decoding
# ---------------------------------------------------------------------------


class ArgumentError(ValueError):
    """Tool arguments do not match the tool's input contract."""

    prefix = "Invalid arguments: "

    def __str__(self):
        return self.prefix + super().__str__()


class MissingArgumentsError(ArgumentError):
    prefix = ""


class CardTypeError(ArgumentError):
    prefix = ""

    def __init__(self):
        super().__init__("Invalid card type. Must be 'project' or 'story'")


def _require_str(arguments: Mapping[str, Any], key: str) -> str:
    if key not in arguments:
        raise ArgumentError(f"missing field `{key}`")
    value = arguments[key]
    if value is None:
        raise ArgumentError(f"invalid type for `{key}`: null, expected a string")
    if not isinstance(value, str):
        raise ArgumentError(f"invalid type for `{key}`: expected a string")
    return value


def _optional_str(arguments: Mapping[str, Any], key: str) -> Optional[str]:
    value = arguments.get(key)
    if value is not None and not isinstance(value, str):
        raise ArgumentError(f"invalid type for `{key}`: expected a string")
    return value


def _optional_bool(arguments: Mapping[str, Any], key: str) -> Optional[bool]:
    value = arguments.get(key)
    if value is not None and not isinstance(value, bool):
        raise ArgumentError(f"invalid type for `{key}`: expected a boolean")
    return value


def _optional_number(arguments: Mapping[str, Any], key: str) -> Optional[float]:
    value = arguments.get(key)
    if value is None:
        return None
    # bool is an int subclass, but true/false is not a position
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ArgumentError(f"invalid type for `{key}`: expected a number")
    return float(value)


def _card_type(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    card_type = value.lower()
    if card_type not in CARD_TYPES:
        raise CardTypeError()
    return card_type


class ToolArgs:
    """Base for per-tool argument structures."""

    REQUIRED: Tuple[str, ...] = ()

    @classmethod
    def parse(cls, arguments: Any):
        if arguments is None:
            if cls.REQUIRED:
                noun = "argument" if len(cls.REQUIRED) == 1 else "arguments"
                raise MissingArgumentsError(f"Missing required {noun}: {', '.join(cls.REQUIRED)}")
            arguments = {}
        if not isinstance(arguments, dict):
            raise ArgumentError(f"expected an object, got {type(arguments).__name__}")
        return cls.from_arguments(arguments)

    @classmethod
    def from_arguments(cls, arguments: Mapping[str, Any]):
        raise NotImplementedError


@dataclass(frozen=True)
class NoArgs(ToolArgs):
    @classmethod
    def parse(cls, arguments: Any):
        return cls()


@dataclass(frozen=True)
class ProjectArgs(ToolArgs):
    project_id: str

    REQUIRED = ("project_id",)

    @classmethod
    def from_arguments(cls, arguments):
        return cls(project_id=_require_str(arguments, "project_id"))


@dataclass(frozen=True)
class BoardArgs(ToolArgs):
    board_id: str

    REQUIRED = ("board_id",)

    @classmethod
    def from_arguments(cls, arguments):
        return cls(board_id=_require_str(arguments, "board_id"))


@dataclass(frozen=True)
class CreateBoardArgs(ToolArgs):
    project_id: str
    name: str

    REQUIRED = ("project_id", "name")

    @classmethod
    def from_arguments(cls, arguments):
        return cls(
            project_id=_require_str(arguments, "project_id"),
            name=_require_str(arguments, "name"),
        )


@dataclass(frozen=True)
class CreateListArgs(ToolArgs):
    board_id: str
    name: str

    REQUIRED = ("board_id", "name")

    @classmethod
    def from_arguments(cls, arguments):
        return cls(
            board_id=_require_str(arguments, "board_id"),
            name=_require_str(arguments, "name"),
        )


@dataclass(frozen=True)
class CreateCardArgs(ToolArgs):
    list_id: str
    name: str
    card_type: str = "project"
    description: Optional[str] = None
    due_date: Optional[str] = None
    is_due_completed: Optional[bool] = None

    REQUIRED = ("list_id", "name")

    @classmethod
    def from_arguments(cls, arguments):
        list_id = _require_str(arguments, "list_id")
        name = _require_str(arguments, "name")
        description = _optional_str(arguments, "description")
        due_date = _optional_str(arguments, "due_date")
        is_due_completed = _optional_bool(arguments, "is_due_completed")
        card_type = _card_type(_optional_str(arguments, "type")) or "project"
        return cls(list_id, name, card_type, description, due_date, is_due_completed)


@dataclass(frozen=True)
class UpdateCardArgs(ToolArgs):
    """Partial update: None means "leave unchanged", never "clear"."""

    card_id: str
    name: Optional[str] = None
    description: Optional[str] = None
    card_type: Optional[str] = None
    due_date: Optional[str] = None
    is_due_completed: Optional[bool] = None
    board_id: Optional[str] = None
    cover_attachment_id: Optional[str] = None

    REQUIRED = ("card_id",)

    @classmethod
    def from_arguments(cls, arguments):
        return cls(
            card_id=_require_str(arguments, "card_id"),
            name=_optional_str(arguments, "name"),
            description=_optional_str(arguments, "description"),
            card_type=_card_type(_optional_str(arguments, "type")),
            due_date=_optional_str(arguments, "due_date"),
            is_due_completed=_optional_bool(arguments, "is_due_completed"),
            board_id=_optional_str(arguments, "board_id"),
            cover_attachment_id=_optional_str(arguments, "cover_attachment_id"),
        )


@dataclass(frozen=True)
class MoveCardArgs(ToolArgs):
    card_id: str
    list_id: str
    position: Optional[float] = None

    REQUIRED = ("card_id", "list_id")

    @classmethod
    def from_arguments(cls, arguments):
        return cls(
            card_id=_require_str(arguments, "card_id"),
            list_id=_require_str(arguments, "list_id"),
            position=_optional_number(arguments, "position"),
        )


@dataclass(frozen=True)
class CardArgs(ToolArgs):
    card_id: str

    REQUIRED = ("card_id",)

    @classmethod
    def from_arguments(cls, arguments):
        return cls(card_id=_require_str(arguments, "card_id"))


@dataclass(frozen=True)
class ListArgs(ToolArgs):
    list_id: str

    REQUIRED = ("list_id",)

    @classmethod
    def from_arguments(cls, arguments):
        return cls(list_id=_require_str(arguments, "list_id"))


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def _list_projects(client, args: NoArgs) -> str:
    return _pretty(client.list_projects())


def _list_boards(client, args: ProjectArgs) -> str:
    return _pretty(client.list_boards(args.project_id))


def _list_lists(client, args: BoardArgs) -> str:
    return _pretty(client.list_lists(args.board_id))


def _list_cards(client, args: BoardArgs) -> str:
    return _pretty(client.list_cards(args.board_id))


def _create_board(client, args: CreateBoardArgs) -> str:
    return _pretty(client.create_board(args.project_id, args.name))


def _create_list(client, args: CreateListArgs) -> str:
    return _pretty(client.create_list(args.board_id, args.name))


def _create_card(client, args: CreateCardArgs) -> str:
    card = client.create_card(
        args.list_id,
        args.name,
        card_type=args.card_type,
        description=args.description,
        due_date=args.due_date,
        is_due_completed=args.is_due_completed,
    )
    return _pretty(card)


def _update_card(client, args: UpdateCardArgs) -> str:
    card = client.update_card(
        args.card_id,
        name=args.name,
        description=args.description,
        card_type=args.card_type,
        due_date=args.due_date,
        is_due_completed=args.is_due_completed,
        board_id=args.board_id,
        cover_attachment_id=args.cover_attachment_id,
    )
    return _pretty(card)


def _move_card(client, args: MoveCardArgs) -> str:
    return _pretty(client.move_card(args.card_id, args.list_id, args.position))


def _delete_card(client, args: CardArgs) -> str:
    client.delete_card(args.card_id)
    return "Card deleted successfully"


def _delete_list(client, args: ListArgs) -> str:
    client.delete_list(args.list_id)
    return "List deleted successfully"


Handler = Callable[[Any, Any], str]

# tool name -> (argument structure, action used in failure messages, handler)
TOOL_HANDLERS: Dict[str, Tuple[type, str, Handler]] = {
    "list_projects": (NoArgs, "list projects", _list_projects),
    "list_boards": (ProjectArgs, "list boards", _list_boards),
    "list_lists": (BoardArgs, "list lists", _list_lists),
    "list_cards": (BoardArgs, "list cards", _list_cards),
    "create_board": (CreateBoardArgs, "create board", _create_board),
    "create_list": (CreateListArgs, "create list", _create_list),
    "create_card": (CreateCardArgs, "create card", _create_card),
    "update_card": (UpdateCardArgs, "update card", _update_card),
    "move_card": (MoveCardArgs, "move card", _move_card),
    "delete_card": (CardArgs, "delete card", _delete_card),
    "delete_list": (ListArgs, "delete list", _delete_list),
}


def call_tool(client, name: str, arguments: Any = None) -> Dict[str, Any]:
    """Run a tool by name and return an MCP tool result."""
    entry = TOOL_HANDLERS.get(name)
    if entry is None:
        logger.error(f"Unknown tool requested: {name}")
        return error_result(f"Unknown tool: {name}")

    args_cls, action, handler = entry
    try:
        args = args_cls.parse(arguments)
    except ArgumentError as e:
        logger.warning(f"Rejected arguments for {name}: {e}")
        return error_result(str(e))

    try:
        text = handler(client, args)
    except PlankaError as e:
        logger.error(f"Failed to {action}: {e}")
        return error_result(f"Failed to {action}: {e}")

    logger.info(f"Tool call succeeded: {name}")
    return text_result(text)
