"""The ``fetch``, ``fetch_summarize`` and ``fetch_extract`` HTTP tools."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from mcphost.toolserver import Tool, ToolResult, ToolServer
from mcphost.webcontent import (
    DEFAULT_MARKDOWN_REMOVE,
    DEFAULT_TIMEOUT,
    MAX_TIMEOUT,
    FetchError,
    extract_body_content,
    extract_text_from_html,
    fetch_url,
    html_to_markdown,
)

FORMATS = ("html", "markdown")
DEFAULT_SUMMARY_INSTRUCTIONS = "Provide a concise summary of this content."

_MARKDOWN_REMOVE = (*DEFAULT_MARKDOWN_REMOVE, "noscript")
_TRUE_WORDS = {"1", "t", "true"}
_FALSE_WORDS = {"0", "f", "false"}

HTTP_FETCH_DESCRIPTION = (
    "Performs an HTTP GET request and returns the content as HTML or Markdown.\n\n"
    "Usage notes:\n"
    "  - The URL must be a fully-formed valid URL.\n"
    "  - Responses are limited to 5MB.\n"
    "  - Formats: \"html\" returns the raw content, \"markdown\" converts HTML to "
    "markdown (other content is wrapped in a code block).\n"
    "  - Set bodyOnly=true to keep only the content of the <body> tag.\n"
    "  - Timeout in seconds: default 30, max 120."
)

HTTP_SUMMARIZE_DESCRIPTION = (
    "Fetches web content and returns an LLM-generated summary of it.\n\n"
    "Usage notes:\n"
    "  - The URL must be a fully-formed valid URL.\n"
    "  - The content is extracted as text before summarizing.\n"
    "  - Default instruction: \"Provide a concise summary of this content\"."
)

HTTP_EXTRACT_DESCRIPTION = (
    "Fetches web content and extracts specific information from it using an "
    "LLM.\n\n"
    "Usage notes:\n"
    "  - The URL must be a fully-formed valid URL.\n"
    "  - The content is extracted as text before processing.\n"
    "  - Instructions should be specific, e.g. \"Extract all product names and "
    "prices\".\n"
    "  - Answers \"Information not found\" when nothing matches."
)

_EXTRACTION_PROMPT = (
    "Extract the requested information from the following web content.\n\n"
    "Extraction Instructions: {instructions}\n\n"
    "Web Content:\n"
    "{content}\n\n"
    "Please extract only the requested information. If the requested information "
    "is not found, respond with \"Information not found\" and explain what was "
    "searched for."
)


@dataclass(frozen=True)
class Message:
    """One chat message: a role and its text."""

    role: str
    content: str


@runtime_checkable
class ChatModel(Protocol):
    """Anything that turns a list of chat messages into one reply message."""

    def generate(self, messages: Sequence[Message]) -> Message:
        """Return the reply to ``messages``."""
        ...


def _number(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0


def _flag(value: Any, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    return default


def _timeout_seconds(value: Any) -> float | None:
    seconds = _number(value)
    if not seconds > 0:
        return DEFAULT_TIMEOUT
    if seconds > MAX_TIMEOUT:
        return MAX_TIMEOUT
    # Whole seconds only; a fraction below one means no time limit.
    return float(int(seconds)) or None


def fetch_and_extract_text(url: str) -> str:
    """Fetch ``url`` and return its text, stripping markup from HTML pages."""
    page = fetch_url(url, timeout=DEFAULT_TIMEOUT)
    if page.is_html:
        return extract_text_from_html(page.content)
    return page.content


class HTTPTools:
    """Handlers for the HTTP tools, sharing one optional chat model."""

    def __init__(self, model: ChatModel | None = None) -> None:
        self.model = model

    def execute_fetch(self, arguments: Mapping[str, Any]) -> ToolResult:
        """Fetch a URL and return it as HTML or markdown."""
        url = arguments.get("url")
        if not isinstance(url, str):
            return ToolResult.failure("url parameter is required and must be a string")
        output_format = arguments.get("format")
        if not isinstance(output_format, str):
            return ToolResult.failure(
                "format parameter is required and must be a string"
            )
        if output_format not in FORMATS:
            return ToolResult.failure("format must be 'html' or 'markdown'")

        body_only = _flag(arguments.get("bodyOnly"), False)
        timeout = _timeout_seconds(arguments.get("timeout", 0))

        try:
            page = fetch_url(url, timeout=timeout)
        except FetchError as exc:
            return ToolResult.failure(str(exc))

        content_type = page.content_type or "unknown"
        is_html = "text/html" in content_type
        content = page.content
        if body_only and is_html:
            content = extract_body_content(content)

        if output_format == "markdown":
            output = (
                html_to_markdown(content, _MARKDOWN_REMOVE)
                if is_html
                else f"```\n{content}\n```"
            )
        else:
            output = content

        return ToolResult.success(
            output,
            {
                "title": f"{page.url} ({content_type})",
                "url": page.url,
                "contentType": content_type,
                "bodyOnly": body_only,
            },
        )

    def _ask(self, prompt: str, failure: str) -> ToolResult:
        assert self.model is not None
        try:
            response = self.model.generate([Message("user", prompt)])
        except Exception as exc:  # the model may fail in any way
            return ToolResult.failure(f"{failure}: {exc}")
        return ToolResult.success(response.content)

    def execute_fetch_summarize(self, arguments: Mapping[str, Any]) -> ToolResult:
        """Fetch a URL and have the model summarize its text."""
        url = arguments.get("url")
        if not isinstance(url, str):
            return ToolResult.failure("url parameter is required and must be a string")
        instructions = arguments.get("instructions")
        if not isinstance(instructions, str):
            instructions = DEFAULT_SUMMARY_INSTRUCTIONS

        try:
            content = fetch_and_extract_text(url)
        except FetchError as exc:
            return ToolResult.failure(f"Failed to fetch content: {exc}")
        if self.model is None:
            return ToolResult.failure("LLM model not available for summarization")

        prompt = f"{instructions}\n\nContent to summarize:\n{content}"
        return self._ask(prompt, "Summarization failed")

    def execute_fetch_extract(self, arguments: Mapping[str, Any]) -> ToolResult:
        """Fetch a URL and have the model extract what the instructions ask for."""
        url = arguments.get("url")
        if not isinstance(url, str):
            return ToolResult.failure("url parameter is required and must be a string")
        instructions = arguments.get("instructions")
        if not isinstance(instructions, str):
            return ToolResult.failure(
                "instructions parameter is required and must be a string"
            )

        try:
            content = fetch_and_extract_text(url)
        except FetchError as exc:
            return ToolResult.failure(f"Failed to fetch content: {exc}")
        if self.model is None:
            return ToolResult.failure("LLM model not available for extraction")

        prompt = _EXTRACTION_PROMPT.format(instructions=instructions, content=content)
        return self._ask(prompt, "Extraction failed")


def new_http_server(model: ChatModel | None = None) -> ToolServer:
    """Build the HTTP tool server; the model-backed tools need ``model``."""
    tools = HTTPTools(model)
    server = ToolServer("http-server", "1.0.0")
    server.add_tool(
        Tool(
            name="fetch",
            description=HTTP_FETCH_DESCRIPTION,
            handler=tools.execute_fetch,
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
                            "The format to return the content in (html or markdown)"
                        ),
                    },
                    "bodyOnly": {
                        "type": "boolean",
                        "description": (
                            "Extract only the <body> tag content (default: false)"
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
    if model is None:
        return server

    server.add_tool(
        Tool(
            name="fetch_summarize",
            description=HTTP_SUMMARIZE_DESCRIPTION,
            handler=tools.execute_fetch_summarize,
            input_schema={
                "type": "object",
                "properties": {
                    "url": {
                        "type": "string",
                        "description": "The URL to fetch and summarize",
                    },
                    "instructions": {
                        "type": "string",
                        "description": (
                            "Optional summarization instructions "
                            "(default: 'Provide a concise summary')"
                        ),
                    },
                },
                "required": ["url"],
            },
        )
    )
    server.add_tool(
        Tool(
            name="fetch_extract",
            description=HTTP_EXTRACT_DESCRIPTION,
            handler=tools.execute_fetch_extract,
            input_schema={
                "type": "object",
                "properties": {
                    "url": {
                        "type": "string",
                        "description": "The URL to fetch and extract data from",
                    },
                    "instructions": {
                        "type": "string",
                        "description": (
                            "Specific extraction instructions (e.g., 'Extract all "
                            "product names and prices')"
                        ),
                    },
                },
                "required": ["url", "instructions"],
            },
        )
    )
    return server