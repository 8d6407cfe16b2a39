"""Tool registry assembly."""

from __future__ import annotations

from typing import TYPE_CHECKING

from scout.tools import filesystem
from scout.tools.base import ToolArgumentError, ToolDefinition, parameters_schema
from scout.tools.memory_tools import get_memory_tools
from scout.tools.registry import ToolRegistry

if TYPE_CHECKING:
    from scout.memory.store import FactStore

__all__ = [
    "ToolArgumentError",
    "ToolDefinition",
    "ToolRegistry",
    "build_registry",
    "get_filesystem_tools",
    "get_memory_tools",
]

_SEARCH_PATH_DOC = "Absolute path of the directory to start from (defaults to the working directory)."


def get_filesystem_tools(*, enable_write: bool = False) -> list[ToolDefinition]:
    """Filesystem tool definitions. ``write_file`` is opt-in."""
    tools = [
        ToolDefinition(
            name="read_file",
            description="Read the file at the given absolute path and return its content.",
            handler=filesystem.read_file,
            args=filesystem.PathArgs,
            parameters=parameters_schema(
                filesystem.PathArgs, {"absolute_path": "Absolute path of the file to read."}
            ),
        ),
        ToolDefinition(
            name="list_directory",
            description="List the entries of the directory at the given absolute path.",
            handler=filesystem.list_directory,
            args=filesystem.PathArgs,
            parameters=parameters_schema(
                filesystem.PathArgs, {"absolute_path": "Absolute path of the directory to list."}
            ),
        ),
        ToolDefinition(
            name="search_file_content",
            description=(
                "Search file contents under a directory for a regular expression. Returns "
                "matching lines with their file path and line number."
            ),
            handler=filesystem.search_file_content,
            args=filesystem.SearchArgs,
            parameters=parameters_schema(
                filesystem.SearchArgs,
                {
                    "pattern": "Regular expression to search for.",
                    "include": "Glob filtering which files are searched (e.g. '*.py', 'src/**').",
                    "search_path": _SEARCH_PATH_DOC,
                },
            ),
        ),
        ToolDefinition(
            name="glob",
            description="Find files matching a glob pattern and return their absolute paths.",
            handler=filesystem.glob_files,
            args=filesystem.GlobArgs,
            parameters=parameters_schema(
                filesystem.GlobArgs,
                {
                    "pattern": "Glob pattern, e.g. '**/*.py' or 'docs/*.md'.",
                    "search_path": _SEARCH_PATH_DOC,
                },
            ),
        ),
        ToolDefinition(
            name="read_many_files",
            description=(
                "Read several files at once and return their contents concatenated. Accepts "
                "file paths or glob patterns."
            ),
            handler=filesystem.read_many_files,
            args=filesystem.ReadManyArgs,
            parameters=parameters_schema(
                filesystem.ReadManyArgs,
                {
                    "paths": "File paths or glob patterns to read.",
                    "search_path": _SEARCH_PATH_DOC,
                    "exclude": "Glob patterns to exclude.",
                    "include": "Extra glob patterns to include.",
                    "recursive": "Whether '**' in patterns descends into subdirectories.",
                    "use_default_excludes": (
                        "Whether to skip node_modules, .git, build output and temp files."
                    ),
                },
            ),
        ),
    ]
    if enable_write:
        tools.append(
            ToolDefinition(
                name="write_file",
                description="Write content to the file at the given absolute path.",
                handler=filesystem.write_file,
                args=filesystem.WriteFileArgs,
                parameters=parameters_schema(
                    filesystem.WriteFileArgs,
                    {
                        "absolute_path": "Absolute path of the file to write.",
                        "content": "Text to write.",
                    },
                ),
            )
        )
    return tools


def build_registry(store: FactStore, *, enable_write: bool = False) -> ToolRegistry:
    """The default capability set: filesystem tools plus fact memory."""
    registry = ToolRegistry()
    for tool in get_filesystem_tools(enable_write=enable_write) + get_memory_tools(store):
        registry.register(tool)
    return registry
