[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mcphost"
version = "0.1.0"
description = "Built-in tool servers for an LLM host: shell commands, web fetching, todo lists and config variable substitution"
requires-python = ">=3.10"
keywords = ["llm", "tools", "mcp", "fetch", "todo", "shell", "substitution"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "requests",
    "beautifulsoup4",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["mcphost"]

[tool.pytest.ini_options]
addopts = "-ra"
