"""A registry of the builtin tool servers, created by name."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from mcphost.bash import new_bash_server
from mcphost.fetch import new_fetch_server
from mcphost.httpfetch import ChatModel, new_http_server
from mcphost.todo import new_todo_server
from mcphost.toolserver import ToolServer

Factory = Callable[[Mapping[str, Any], "ChatModel | None"], ToolServer]


class Registry:
    """Maps builtin server names to factories that build them."""

    def __init__(self) -> None:
        self._factories: dict[str, Factory] = {}
        self.register("bash", lambda options, model: new_bash_server())
        self.register("todo", lambda options, model: new_todo_server())
        self.register("fetch", lambda options, model: new_fetch_server())
        self.register("http", lambda options, model: new_http_server(model))

    def register(self, name: str, factory: Factory) -> None:
        """Make ``factory`` build the server called ``name``."""
        self._factories[name] = factory

    def create_server(
        self,
        name: str,
        options: Mapping[str, Any] | None = None,
        model: ChatModel | None = None,
    ) -> ToolServer:
        """Build a new instance of the builtin server called ``name``."""
        try:
            factory = self._factories[name]
        except KeyError:
            raise LookupError(f"unknown builtin server: {name}") from None
        return factory(dict(options or {}), model)

    def list_servers(self) -> list[str]:
        """Return the names of the available servers."""
        return list(self._factories)