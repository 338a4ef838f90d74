"""The ``fetch`` tool: retrieve a URL as text, markdown or raw HTML."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from mcphost.toolserver import Tool, ToolResult, ToolServer
from mcphost.webcontent import (
    DEFAULT_TIMEOUT,
    MAX_TIMEOUT,
    FetchError,
    extract_text_from_html,
    fetch_url,
    html_to_markdown,
)

FORMATS = ("text", "markdown", "html")

FETCH_DESCRIPTION = (
    "Fetches content from a URL and returns it in the requested format.\n\n"
    "Usage notes:\n"
    "  - The URL must be a fully-formed valid URL; http URLs are upgraded to https.\n"
    "  - The tool is read-only and responses are limited to 5MB.\n"
    "  - Formats: \"text\" extracts plain text from HTML (other content is "
    "returned as is), \"markdown\" converts HTML to markdown (other content is "
    "wrapped in a code block), \"html\" returns the raw content.\n"
    "  - Timeout in seconds: default 30, max 120."
)


def _timeout_seconds(value: Any) -> float | None:
    if isinstance(value, bool):
        seconds = 0.0
    elif isinstance(value, (int, float)):
        seconds = float(value)
    elif isinstance(value, str):
        try:
            seconds = float(value)
        except ValueError:
            seconds = 0.0
    else:
        seconds = 0.0
    if not seconds > 0:
        return DEFAULT_TIMEOUT
    if seconds > MAX_TIMEOUT:
        return MAX_TIMEOUT
    # A fraction of a second truncates to zero, which means no time limit.
    return float(int(seconds)) or None


def execute_fetch(arguments: Mapping[str, Any]) -> ToolResult:
    """Fetch ``arguments['url']`` and render it as ``arguments['format']``."""
    url = arguments.get("url")
    if not isinstance(url, str):
        return ToolResult.failure("url parameter is required and must be a string")
    output_format = arguments.get("format")
    if not isinstance(output_format, str):
        return ToolResult.failure("format parameter is required and must be a string")
    if output_format not in FORMATS:
        return ToolResult.failure("format must be 'text', 'markdown', or 'html'")

    timeout = _timeout_seconds(arguments.get("timeout", 0))
    try:
        page = fetch_url(url, timeout=timeout, upgrade_http=True)
    except FetchError as exc:
        return ToolResult.failure(str(exc))

    content_type = page.content_type or "unknown"
    is_html = "text/html" in content_type
    if output_format == "text":
        output = extract_text_from_html(page.content) if is_html else page.content
    elif output_format == "markdown":
        output = (
            html_to_markdown(page.content)
            if is_html
            else f"```\n{page.content}\n```"
        )
    else:
        output = page.content

    return ToolResult.success(output, {"title": f"{page.url} ({content_type})"})


def new_fetch_server() -> ToolServer:
    """Build a tool server exposing ``fetch``."""
    server = ToolServer("fetch-server", "1.0.0")
    server.add_tool(
        Tool(
            name="fetch",
            description=FETCH_DESCRIPTION,
            handler=execute_fetch,
            input_schema={
                "type": "object",
                "properties": {
                    "url": {
                        "type": "string",
                        "description": "The URL to fetch content from",
                    },
                    "format": {
                        "type": "string",
                        "enum": list(FORMATS),
                        "description": (
                            "The format to return the content in "
                            "(text, markdown, or html)"
                        ),
                    },
                    "timeout": {
                        "type": "number",
                        "description": "Optional timeout in seconds (max 120)",
                        "minimum": 0,
                        "maximum": 120,
                    },
                },
                "required": ["url", "format"],
            },
        )
    )
    return server