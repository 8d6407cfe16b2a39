"""Filesystem tools: read, list, search and glob.

Every function returns text and never raises: failures come back as strings
starting with ``Error`` so the model can read and react to them.
"""

from __future__ import annotations

import fnmatch
import glob as globlib
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

IGNORED_DIRS = ("node_modules", ".git")
DEFAULT_EXCLUDES = [
    "node_modules/**",
    ".git/**",
    "dist/**",
    "build/**",
    "temp/**",
    "*.log",
    "*.tmp",
    "*.bak",
]


# ── Argument structs ──────────────────────────────────────────


@dataclass(frozen=True)
class PathArgs:
    absolute_path: str


@dataclass(frozen=True)
class WriteFileArgs:
    absolute_path: str
    content: str


@dataclass(frozen=True)
class SearchArgs:
    pattern: str
    include: str | None = None
    search_path: str | None = None


@dataclass(frozen=True)
class GlobArgs:
    pattern: str
    search_path: str | None = None


@dataclass(frozen=True)
class ReadManyArgs:
    paths: list[str]
    search_path: str | None = None
    exclude: list[str] = field(default_factory=list)
    include: list[str] = field(default_factory=list)
    recursive: bool = True
    use_default_excludes: bool = True


# ── Helpers ───────────────────────────────────────────────────


def _check_path(absolute_path: str, *, want_dir: bool) -> str | None:
    """Return an error string when the path is unusable, else None."""
    kind = "Directory" if want_dir else "File"
    if not os.path.isabs(absolute_path):
        return f"Error: Path must be absolute. Received: {absolute_path}"
    path = Path(absolute_path)
    if not path.exists():
        return f"Error: {kind} not found at {absolute_path}"
    if want_dir and not path.is_dir():
        return f"Error: Path is not a directory: {absolute_path}"
    if not want_dir and not path.is_file():
        return f"Error: Path is not a file: {absolute_path}"
    return None


def _root(search_path: str | None) -> tuple[Path, str | None]:
    """Resolved search root (cwd when omitted) and an error string when unusable."""
    if not search_path:
        return Path.cwd().resolve(), None
    error = _check_path(search_path, want_dir=True)
    return Path(search_path).resolve(), error


def _is_ignored(path: Path, root: Path) -> bool:
    try:
        parts = path.relative_to(root).parts
    except ValueError:
        parts = path.parts
    return any(part in IGNORED_DIRS for part in parts[:-1])


def _matches_any(path: Path, root: Path, patterns: list[str]) -> bool:
    try:
        rel = path.relative_to(root).as_posix()
    except ValueError:
        rel = path.as_posix()
    return any(
        fnmatch.fnmatch(rel, p) or fnmatch.fnmatch(path.name, p) or fnmatch.fnmatch(str(path), p)
        for p in patterns
    )


def _glob(pattern: str, root: Path, *, recursive: bool = True) -> list[Path]:
    """Files (not directories) matching ``pattern`` under ``root``, as absolute paths."""
    matches = globlib.glob(pattern, root_dir=str(root), recursive=recursive)
    files = []
    for match in sorted(matches):
        path = Path(match) if os.path.isabs(match) else root / match
        if path.is_file():
            files.append(path.resolve())
    return files


# ── Tools ─────────────────────────────────────────────────────


def read_file(absolute_path: str) -> str:
    """Read the file at an absolute path and return its text."""
    error = _check_path(absolute_path, want_dir=False)
    if error:
        return error
    try:
        return Path(absolute_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return f"Error reading file: {e}"


def list_directory(absolute_path: str) -> str:
    """List the entries of the directory at an absolute path."""
    error = _check_path(absolute_path, want_dir=True)
    if error:
        return error
    try:
        return "\n".join(sorted(os.listdir(absolute_path)))
    except OSError as e:
        return f"Error listing directory: {e}"


def write_file(absolute_path: str, content: str) -> str:
    """Write content to an absolute path, creating or replacing the file."""
    if not os.path.isabs(absolute_path):
        return f"Error: Path must be absolute. Received: {absolute_path}"
    try:
        Path(absolute_path).write_text(content, encoding="utf-8")
    except OSError as e:
        return f"Error writing to file: {e}"
    return f"Successfully wrote to file: {absolute_path}"


def search_file_content(
    pattern: str, include: str | None = None, search_path: str | None = None
) -> str:
    """Regex search, line by line, across files under ``search_path``."""
    root, error = _root(search_path)
    if error:
        return error
    try:
        regex = re.compile(pattern)
        files = _glob(include or "**/*", root)
    except (re.error, OSError, ValueError) as e:
        return f"Error searching file content: {e}"

    results: list[str] = []
    for path in files:
        if _is_ignored(path, root):
            continue
        try:
            lines = path.read_text(encoding="utf-8").split("\n")
        except (OSError, UnicodeDecodeError):
            # Binary or unreadable files are skipped.
            continue
        for lineno, line in enumerate(lines, start=1):
            if regex.search(line):
                results.append(f"{path}:{lineno}: {line}")

    if not results:
        suffix = f" with include '{include}'" if include else ""
        return f"No matches found for pattern '{pattern}' in '{root}'{suffix}."
    return "\n".join(results)


def glob_files(pattern: str, search_path: str | None = None) -> str:
    """Absolute paths of the files matching a glob pattern, one per line."""
    root, error = _root(search_path)
    if error:
        return error
    try:
        files = [p for p in _glob(pattern, root) if not _is_ignored(p, root)]
    except (OSError, ValueError) as e:
        return f"Error performing glob search: {e}"
    if not files:
        return f"No files found matching pattern '{pattern}' in '{root}'."
    return "\n".join(str(p) for p in files)


def read_many_files(
    paths: list[str],
    search_path: str | None = None,
    exclude: list[str] | None = None,
    include: list[str] | None = None,
    recursive: bool = True,
    use_default_excludes: bool = True,
) -> str:
    """Concatenate the contents of every file matched by paths/globs."""
    root, error = _root(search_path)
    if error:
        return error
    excludes = (DEFAULT_EXCLUDES if use_default_excludes else []) + list(exclude or [])

    found: list[Path] = []
    seen: set[Path] = set()
    try:
        for pattern in list(paths) + list(include or []):
            for path in _glob(pattern, root, recursive=recursive):
                if path in seen or _matches_any(path, root, excludes):
                    continue
                seen.add(path)
                found.append(path)
    except (OSError, ValueError) as e:
        return f"Error in read_many_files: {e}"

    if not found:
        return "No files found matching the provided patterns."

    chunks: list[str] = []
    for path in found:
        try:
            chunks.append(f"--- {path} ---\n{path.read_text(encoding='utf-8')}\n\n")
        except (OSError, UnicodeDecodeError) as e:
            chunks.append(f"--- Error reading {path}: {e} ---\n\n")
    return "".join(chunks)
