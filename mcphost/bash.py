"""The ``run_shell_cmd`` tool: run a bash command with limits on time and output."""

from __future__ import annotations

import os
import signal
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from mcphost.toolserver import Tool, ToolResult, ToolServer

MAX_OUTPUT_LENGTH = 30000
DEFAULT_TIMEOUT = 120.0
MAX_TIMEOUT = 600.0

BANNED_COMMANDS = (
    "alias",
    "curl",
    "curlie",
    "wget",
    "axel",
    "aria2c",
    "nc",
    "telnet",
    "lynx",
    "w3m",
    "links",
    "httpie",
    "xh",
    "http-prompt",
    "chrome",
    "firefox",
    "safari",
)

_TRUNCATION_NOTE = "\n... (output truncated)"

BASH_DESCRIPTION = (
    "Executes a bash command with an optional timeout and returns its combined "
    "output.\n\n"
    "Usage notes:\n"
    "  - The command argument is required, as is a short description (5-10 words) "
    "of what the command does.\n"
    "  - An optional timeout may be given in milliseconds (up to 600000ms). "
    "Without it, commands time out after 120000ms.\n"
    "  - Output longer than 30000 characters is truncated.\n"
    "  - Quote paths that contain spaces with double quotes.\n"
    "  - Separate multiple commands with ';' or '&&' rather than newlines.\n"
    "  - Prefer absolute paths over changing directory.\n"
    "  - Network clients such as curl and wget are not allowed."
)


@dataclass(frozen=True)
class _Outcome:
    output: str
    exit_code: int
    start_error: OSError | None = None


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


def _timeout_seconds(value: Any) -> float:
    milliseconds = _number(value)
    if not milliseconds > 0:
        return DEFAULT_TIMEOUT
    if milliseconds / 1000 > MAX_TIMEOUT:
        return MAX_TIMEOUT
    return int(milliseconds) / 1000


def _terminate(proc: subprocess.Popen) -> None:
    killpg = getattr(os, "killpg", None)
    if killpg is None:
        proc.kill()
        return
    try:
        killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


def _run(command: str, timeout: float) -> _Outcome:
    try:
        proc = subprocess.Popen(
            ["bash", "-c", command],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            start_new_session=True,
        )
    except OSError as exc:
        return _Outcome("", 1, exc)
    with proc:
        try:
            raw, _ = proc.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            _terminate(proc)
            raw, _ = proc.communicate()
    code = proc.returncode
    return _Outcome(raw.decode("utf-8", errors="replace"), -1 if code < 0 else code)


def execute_bash(arguments: Mapping[str, Any]) -> ToolResult:
    """Run ``arguments['command']`` under bash and report its output."""
    command = arguments.get("command")
    if not isinstance(command, str):
        return ToolResult.failure("command parameter is required and must be a string")
    description = arguments.get("description")
    if not isinstance(description, str):
        return ToolResult.failure(
            "description parameter is required and must be a string"
        )

    timeout = _timeout_seconds(arguments.get("timeout", 0))

    if command.startswith(BANNED_COMMANDS):
        return ToolResult.failure(f"Command '{command}' is not allowed")

    outcome = _run(command, timeout)
    output = outcome.output
    if len(output) > MAX_OUTPUT_LENGTH:
        output = output[:MAX_OUTPUT_LENGTH] + _TRUNCATION_NOTE

    if outcome.start_error is not None:
        stdout = ""
        stderr = f"Failed to execute command: {outcome.start_error}\n{output}"
    elif outcome.exit_code != 0:
        stdout, stderr = "", output
    else:
        stdout, stderr = output, ""

    text = f"<stdout>\n{stdout}\n</stdout>\n<stderr>\n{stderr}\n</stderr>"
    return ToolResult.success(
        text,
        {
            "stderr": stderr,
            "stdout": stdout,
            "exit": outcome.exit_code,
            "description": description,
            "title": command,
        },
    )


def new_bash_server() -> ToolServer:
    """Build a tool server exposing ``run_shell_cmd``."""
    server = ToolServer("bash-server", "1.0.0")
    server.add_tool(
        Tool(
            name="run_shell_cmd",
            description=BASH_DESCRIPTION,
            handler=execute_bash,
            input_schema={
                "type": "object",
                "properties": {
                    "command": {
                        "type": "string",
                        "description": "The command to execute",
                    },
                    "timeout": {
                        "type": "number",
                        "description": "Optional timeout in milliseconds",
                        "minimum": 0,
                        "maximum": 600000,
                    },
                    "description": {
                        "type": "string",
                        "description": (
                            "Clear, concise description of what this command "
                            "does in 5-10 words."
                        ),
                    },
                },
                "required": ["command", "description"],
            },
        )
    )
    return server