"""Built-in tool servers for an LLM host: shell, web fetching, todo lists and variable substitution."""

__version__ = "0.1.0"