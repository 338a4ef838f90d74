"""An in-memory todo list exposed as the ``todowrite`` and ``todoread`` tools."""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from mcphost.toolserver import Tool, ToolResult, ToolServer


class TodoStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TodoPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


_CHECKBOXES = {
    TodoStatus.COMPLETED: "[X]",
    TodoStatus.IN_PROGRESS: "[~]",
    TodoStatus.PENDING: "[ ]",
}

_FIELDS = ("content", "status", "priority", "id")


@dataclass(frozen=True)
class TodoInfo:
    """A single todo item."""

    content: str
    status: TodoStatus
    priority: TodoPriority
    id: str

    def to_dict(self) -> dict[str, str]:
        """Return the item as a JSON-ready mapping."""
        return {
            "content": self.content,
            "status": self.status.value,
            "priority": self.priority.value,
            "id": self.id,
        }


class _InvalidTodos(ValueError):
    pass


def _raw_fields(item: Any) -> dict[str, str]:
    """Read the string fields of one list entry; missing fields are empty."""
    if isinstance(item, TodoInfo):
        return item.to_dict()
    if not isinstance(item, Mapping):
        raise _InvalidTodos("invalid todos structure")
    fields: dict[str, str] = {}
    for name in _FIELDS:
        value = item.get(name)
        if value is None:
            value = ""
        elif isinstance(value, Enum):
            value = value.value
        if not isinstance(value, str):
            raise _InvalidTodos("invalid todos structure")
        fields[name] = value
    return fields


def _validate(index: int, fields: dict[str, str]) -> TodoInfo:
    if not fields["content"].strip():
        raise _InvalidTodos(f"todo {index}: content cannot be empty")
    try:
        status = TodoStatus(fields["status"])
    except ValueError:
        raise _InvalidTodos(f"todo {index}: invalid status '{fields['status']}'") from None
    try:
        priority = TodoPriority(fields["priority"])
    except ValueError:
        raise _InvalidTodos(
            f"todo {index}: invalid priority '{fields['priority']}'"
        ) from None
    if not fields["id"].strip():
        raise _InvalidTodos(f"todo {index}: id cannot be empty")
    return TodoInfo(fields["content"], status, priority, fields["id"])


def _parse_todos(raw: Any) -> list[TodoInfo]:
    if isinstance(raw, (str, bytes, Mapping)) or not isinstance(raw, Iterable):
        raise _InvalidTodos("invalid todos structure")
    # Check the shape of every entry before validating any of them.
    entries = [_raw_fields(item) for item in raw]
    return [_validate(index, fields) for index, fields in enumerate(entries)]


def format_todos(todos: Iterable[TodoInfo]) -> str:
    """Render todos as a checkbox list preceded by a blank line."""
    lines = [f"{_CHECKBOXES[todo.status]} {todo.content}" for todo in todos]
    if not lines:
        return "\n\nNo todos"
    return "\n\n" + "\n".join(lines)


class TodoServer:
    """Thread-safe in-memory store behind the todo tools."""

    def __init__(self, todos: Iterable[TodoInfo] | None = None) -> None:
        self._todos: list[TodoInfo] = list(todos or [])
        self._lock = threading.Lock()

    def get_todos(self) -> list[TodoInfo]:
        """Return a copy of the stored todos."""
        with self._lock:
            return list(self._todos)

    def _set_todos(self, todos: Iterable[TodoInfo]) -> None:
        with self._lock:
            self._todos = list(todos)

    def execute_todo_write(self, arguments: Mapping[str, Any]) -> ToolResult:
        """Replace the todo list with ``arguments['todos']`` after validation."""
        raw = arguments.get("todos")
        if raw is None:
            return ToolResult.failure("todos parameter is required")
        try:
            todos = _parse_todos(raw)
        except _InvalidTodos as exc:
            return ToolResult.failure(str(exc))
        self._set_todos(todos)
        return ToolResult.success(format_todos(todos), {"todos": list(todos)})

    def execute_todo_read(self, arguments: Mapping[str, Any] | None = None) -> ToolResult:
        """Return the stored todo list."""
        todos = self.get_todos()
        return ToolResult.success(format_todos(todos), {"todos": todos})


TODO_WRITE_DESCRIPTION = (
    "Use this tool to create and manage a structured task list for your current "
    "coding session. This helps you track progress, organize complex tasks, and "
    "demonstrate thoroughness to the user.\n"
    "It also helps the user understand the progress of the task and overall "
    "progress of their requests.\n\n"
    "Task states: pending (not yet started), in_progress (currently working on; "
    "limit to ONE task at a time), completed (finished successfully).\n\n"
    "Use it for complex multi-step tasks, when the user provides multiple tasks "
    "or asks for a todo list, and update statuses in real time as work "
    "progresses. Skip it for a single, trivial or purely conversational task."
)

_TODO_ITEM_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "content": {
            "type": "string",
            "minLength": 1,
            "description": "Brief description of the task",
        },
        "status": {
            "type": "string",
            "enum": [s.value for s in TodoStatus],
            "description": "Current status of the task",
        },
        "priority": {
            "type": "string",
            "enum": [p.value for p in TodoPriority],
            "description": "Priority level of the task",
        },
        "id": {
            "type": "string",
            "description": "Unique identifier for the todo item",
        },
    },
    "required": list(_FIELDS),
}


def new_todo_server(store: TodoServer | None = None) -> ToolServer:
    """Build a tool server exposing ``todowrite`` and ``todoread``."""
    store = store if store is not None else TodoServer()
    server = ToolServer("todo-server", "1.0.0")
    server.add_tool(
        Tool(
            name="todowrite",
            description=TODO_WRITE_DESCRIPTION,
            handler=store.execute_todo_write,
            input_schema={
                "type": "object",
                "properties": {
                    "todos": {
                        "type": "array",
                        "description": "The updated todo list",
                        "items": _TODO_ITEM_SCHEMA,
                    }
                },
                "required": ["todos"],
            },
        )
    )
    server.add_tool(
        Tool(
            name="todoread",
            description="Use this tool to read your todo list",
            handler=store.execute_todo_read,
        )
    )
    return server