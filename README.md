# mcphost

Built-in tool servers that an LLM host can offer to a model. Each server
is a `mcphost.toolserver.ToolServer` holding a few named tools; calling a
tool with a dictionary of arguments returns a `ToolResult` carrying
`text`, an `is_error` flag and a `meta` dictionary.

## Servers

| Name    | Built by                               | Tools |
|---------|----------------------------------------|-------|
| `bash`  | `mcphost.bash.new_bash_server()`       | `run_shell_cmd`: runs a command under `bash -c` (default timeout 2 minutes, at most 10; `timeout` given in milliseconds), combined output capped at 30000 characters; commands starting with network clients such as `curl` or `wget` are refused |
| `fetch` | `mcphost.fetch.new_fetch_server()`     | `fetch`: gets a URL as `text`, `markdown` or `html` (5 MB limit, default timeout 30 s, at most 120 s; http is upgraded to https except for localhost) |
| `http`  | `mcphost.httpfetch.new_http_server(model)` | `fetch` as `html` or `markdown`, with `bodyOnly` to keep only the `<body>` content; plus `fetch_summarize` and `fetch_extract` when a chat model is supplied |
| `todo`  | `mcphost.todo.new_todo_server(store)`  | `todowrite` and `todoread`: an in-memory task list |

## Installing

```
pip install .
```

## Using the registry

```python
from mcphost.registry import Registry

registry = Registry()
print(sorted(registry.list_servers()))   # ['bash', 'fetch', 'http', 'todo']

server = registry.create_server("todo", {}, None)
result = server.call_tool("todowrite", {"todos": [
    {"content": "Write tests", "status": "in_progress", "priority": "high", "id": "1"},
    {"content": "Ship it", "status": "pending", "priority": "medium", "id": "2"},
]})
print(result.text)
# (blank line)
# [~] Write tests
# [ ] Ship it
```

`Registry.register(name, factory)` adds or replaces a server; the factory
is called with the options mapping and the model.

Tool failures are reported in the result rather than raised:
`result.is_error` is true and `result.text` holds the message. Asking a
server for a tool it does not have raises `UnknownToolError`, and asking
the registry for an unknown server raises `LookupError` naming it.

## Web content helpers

`mcphost.webcontent` holds the pieces the fetch tools are built from:
`normalize_url`, `fetch_url` (returns a `FetchedPage`, raises
`FetchError`), `extract_text_from_html`, `extract_body_content` and
`html_to_markdown`.

## Summaries and extraction

The `http` server takes any object with a `generate(messages)` method
returning a `Message` (see `mcphost.httpfetch.ChatModel`) and uses it to
summarise pages or pull specific data out of them.

## Variable substitution

```python
from mcphost.substitution import ArgsSubstituter, EnvSubstituter, has_script_args

EnvSubstituter().substitute_env_vars("home=${env://HOME:-/tmp}")
ArgsSubstituter({"name": "world"}).substitute_args("hello ${name}, ${greeting:-hi}")
has_script_args("${name}")  # True
```

An environment variable that is empty counts as unset. A variable with no
value and no `:-default` raises `SubstitutionError` listing every missing
name.

## What it does not do

- The servers run in-process only: there is no transport that serves
  them to a client over stdio or the network.
- There is no filesystem server; the registry offers `bash`, `fetch`,
  `http` and `todo` only.
- There is no configuration file loading; substitution works on strings
  you pass in.

## Running the tests

```
pip install ".[test]"
pytest
```