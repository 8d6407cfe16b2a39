"""Tests for tool definitions, the registry and the built-in tools."""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass, field

import pytest
from pathlib import Path

from scout.memory.store import FactStore
from scout.tools import build_registry, filesystem
from scout.tools.base import NoArgs, ToolArgumentError, ToolDefinition, parameters_schema
from scout.tools.registry import ToolRegistry


@dataclass(frozen=True)
class EchoArgs:
    text: str
    times: int = 1
    tags: list[str] = field(default_factory=list)
    prefix: str | None = None


def _echo(text: str, times: int, tags: list[str], prefix: str | None) -> str:
    return (prefix or "") + text * times + ("#" + ",".join(tags) if tags else "")


@pytest.fixture
def echo() -> ToolDefinition:
    return ToolDefinition(name="echo", description="Echo text", handler=_echo, args=EchoArgs)


@pytest.fixture
def store(tmp_path: Path) -> FactStore:
    return FactStore(tmp_path / "llm_memory.json").open()


@pytest.fixture
def registry(store: FactStore) -> ToolRegistry:
    return build_registry(store)


# ── ToolDefinition ────────────────────────────────────────────


class TestParametersSchema:
    def test_required_and_types(self):
        schema = parameters_schema(EchoArgs, {"text": "What to echo"})
        assert schema["type"] == "object"
        assert schema["required"] == ["text"]
        assert schema["properties"]["text"] == {"type": "string", "description": "What to echo"}
        assert schema["properties"]["times"] == {"type": "integer", "default": 1}
        assert schema["properties"]["tags"] == {"type": "array", "items": {"type": "string"}}
        assert schema["properties"]["prefix"] == {"type": "string"}

    def test_no_args(self):
        assert parameters_schema(NoArgs) == {"type": "object", "properties": {}, "required": []}

    def test_schema_descriptor(self, echo: ToolDefinition):
        descriptor = echo.schema()
        assert descriptor["type"] == "function"
        assert descriptor["function"]["name"] == "echo"
        assert descriptor["function"]["parameters"]["required"] == ["text"]

    def test_definition_is_immutable(self, echo: ToolDefinition):
        with pytest.raises(dataclasses.FrozenInstanceError):
            echo.name = "renamed"
        assert echo.parameters == parameters_schema(EchoArgs)


class TestBindAndExecute:
    def test_defaults_optional_arguments(self, echo: ToolDefinition):
        assert echo.execute({"text": "hi"}) == "hi"

    def test_all_arguments(self, echo: ToolDefinition):
        assert echo.execute({"text": "a", "times": 3, "tags": ["x"], "prefix": ">"}) == ">aaa#x"

    def test_none_treated_as_missing(self, echo: ToolDefinition):
        assert echo.execute({"text": "a", "prefix": None}) == "a"

    def test_unknown_arguments_ignored(self, echo: ToolDefinition):
        assert echo.execute({"text": "a", "colour": "red"}) == "a"

    def test_json_string_arguments(self, echo: ToolDefinition):
        assert echo.execute('{"text": "b", "times": 2}') == "bb"

    def test_missing_required(self, echo: ToolDefinition):
        with pytest.raises(ToolArgumentError, match="text"):
            echo.bind({})
        result = echo.execute({})
        assert result.startswith("Error: Invalid arguments for tool 'echo'")

    def test_bad_json(self, echo: ToolDefinition):
        assert echo.execute("{oops").startswith("Error: Invalid arguments")

    def test_handler_exception_becomes_text(self):
        def boom() -> str:
            raise RuntimeError("kaput")

        tool = ToolDefinition(name="boom", description="", handler=boom)
        assert tool.execute(None) == "Error executing boom: kaput"


# ── Registry ──────────────────────────────────────────────────


class TestRegistry:
    def test_register_and_resolve(self, echo: ToolDefinition):
        reg = ToolRegistry()
        reg.register(echo)
        assert reg.resolve("echo") is echo
        assert reg.resolve("missing") is None
        assert "echo" in reg
        assert len(reg) == 1

    def test_duplicate_rejected(self, echo: ToolDefinition):
        reg = ToolRegistry()
        reg.register(echo)
        with pytest.raises(ValueError, match="already registered"):
            reg.register(ToolDefinition(name="echo", description="other", handler=_echo, args=EchoArgs))
        assert reg.resolve("echo") is echo

    def test_default_capability_set(self, registry: ToolRegistry):
        assert registry.names == [
            "read_file",
            "list_directory",
            "search_file_content",
            "glob",
            "read_many_files",
            "save_memory",
            "search_memory",
            "list_all_memory",
            "retrieve_memory",
        ]
        manifest = registry.schema_manifest()
        assert [m["function"]["name"] for m in manifest] == registry.names
        read_file = manifest[0]["function"]
        assert read_file["parameters"]["required"] == ["absolute_path"]

    def test_write_file_is_opt_in(self, store: FactStore):
        assert "write_file" not in build_registry(store)
        assert "write_file" in build_registry(store, enable_write=True)


# ── Filesystem tools ──────────────────────────────────────────


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    (root / "sub_dir").mkdir(parents=True)
    (root / "node_modules" / "pkg").mkdir(parents=True)
    (root / "file1.txt").write_text("Hello World!\nThis is a test file.\nAnother line with World.")
    (root / "file2.js").write_text("function greet() {\n  console.log('Hello from JS!');\n}\n")
    (root / "sub_dir" / "sub_file.md").write_text("# Sub Directory File\n")
    (root / "node_modules" / "pkg" / "index.js").write_text("Hello World from a dependency")
    (root / "debug.log").write_text("World log line")
    return root.resolve()


class TestReadFile:
    def test_reads_content_verbatim(self, tmp_path: Path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        assert filesystem.read_file(str(path)) == "hello"

    def test_relative_path(self):
        result = filesystem.read_file("notes.txt")
        assert result.startswith("Error")
        assert "absolute" in result

    def test_missing(self, tmp_path: Path):
        assert filesystem.read_file(str(tmp_path / "nope")).startswith("Error: File not found")

    def test_directory(self, tmp_path: Path):
        assert filesystem.read_file(str(tmp_path)).startswith("Error: Path is not a file")


class TestListDirectory:
    def test_lists_entries(self, tree: Path):
        entries = filesystem.list_directory(str(tree)).split("\n")
        assert entries == sorted(["debug.log", "file1.txt", "file2.js", "node_modules", "sub_dir"])

    def test_file_is_not_directory(self, tree: Path):
        result = filesystem.list_directory(str(tree / "file1.txt"))
        assert result.startswith("Error: Path is not a directory")

    def test_relative(self):
        assert "absolute" in filesystem.list_directory("some/dir")


class TestSearchFileContent:
    def test_finds_lines(self, tree: Path):
        result = filesystem.search_file_content("World", search_path=str(tree))
        lines = result.split("\n")
        assert f"{tree / 'file1.txt'}:1: Hello World!" in lines
        assert f"{tree / 'file1.txt'}:3: Another line with World." in lines
        assert not any("node_modules" in line for line in lines)

    def test_include_filter(self, tree: Path):
        result = filesystem.search_file_content("Hello", include="*.js", search_path=str(tree))
        assert result == f"{tree / 'file2.js'}:2:   console.log('Hello from JS!');"

    def test_no_matches(self, tree: Path):
        result = filesystem.search_file_content("zebra", include="*.txt", search_path=str(tree))
        assert result == f"No matches found for pattern 'zebra' in '{tree}' with include '*.txt'."

    def test_invalid_regex(self, tree: Path):
        assert filesystem.search_file_content("(", search_path=str(tree)).startswith(
            "Error searching file content"
        )


class TestGlob:
    def test_recursive_pattern(self, tree: Path):
        result = filesystem.glob_files("**/*.md", search_path=str(tree))
        assert result == str(tree / "sub_dir" / "sub_file.md")

    def test_ignores_dependency_dirs(self, tree: Path):
        result = filesystem.glob_files("**/*.js", search_path=str(tree))
        assert result == str(tree / "file2.js")

    def test_no_files(self, tree: Path):
        result = filesystem.glob_files("*.rs", search_path=str(tree))
        assert result == f"No files found matching pattern '*.rs' in '{tree}'."


class TestSearchPathValidation:
    def test_relative_search_path(self):
        assert filesystem.glob_files("*.md", search_path="docs") == (
            "Error: Path must be absolute. Received: docs"
        )

    def test_missing_search_path(self, tmp_path: Path):
        missing = str(tmp_path / "nowhere")
        expected = f"Error: Directory not found at {missing}"
        assert filesystem.search_file_content("x", search_path=missing) == expected
        assert filesystem.glob_files("*", search_path=missing) == expected
        assert filesystem.read_many_files(["*"], search_path=missing) == expected

    def test_file_as_search_path(self, tree: Path):
        target = str(tree / "file1.txt")
        assert filesystem.glob_files("*", search_path=target) == (
            f"Error: Path is not a directory: {target}"
        )


class TestReadManyFiles:
    def test_concatenates_with_headers(self, tree: Path):
        result = filesystem.read_many_files(["*.txt", "**/*.md"], search_path=str(tree))
        assert result.startswith(f"--- {tree / 'file1.txt'} ---\nHello World!")
        assert f"--- {tree / 'sub_dir' / 'sub_file.md'} ---\n# Sub Directory File\n" in result

    def test_deduplicates(self, tree: Path):
        result = filesystem.read_many_files(["*.txt"], include=["file1.*"], search_path=str(tree))
        assert result.count("--- ") == 1

    def test_default_excludes(self, tree: Path):
        result = filesystem.read_many_files(["**/*"], search_path=str(tree))
        assert "debug.log" not in result
        assert "node_modules" not in result

        unfiltered = filesystem.read_many_files(
            ["**/*"], search_path=str(tree), use_default_excludes=False
        )
        assert "debug.log" in unfiltered
        assert "node_modules" in unfiltered

    def test_user_excludes(self, tree: Path):
        result = filesystem.read_many_files(["**/*"], exclude=["*.js"], search_path=str(tree))
        assert "file2.js" not in result
        assert "file1.txt" in result

    def test_absolute_paths(self, tree: Path):
        result = filesystem.read_many_files([str(tree / "file2.js")])
        assert "function greet()" in result

    def test_nothing_found(self, tree: Path):
        assert (
            filesystem.read_many_files(["*.nothing"], search_path=str(tree))
            == "No files found matching the provided patterns."
        )


def test_write_file(tmp_path: Path):
    target = tmp_path / "out.txt"
    assert filesystem.write_file(str(target), "data") == f"Successfully wrote to file: {target}"
    assert target.read_text() == "data"
    assert "absolute" in filesystem.write_file("out.txt", "data")


# ── Memory tools ──────────────────────────────────────────────


class TestMemoryTools:
    def test_save_then_list(self, registry: ToolRegistry):
        saved = registry.resolve("save_memory").execute({"fact": "user likes blue"})
        match = re.match(r"Fact saved to memory with key: (fact_\S+)\. Total facts: 1$", saved)
        assert match
        assert re.match(r"fact_\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$", match.group(1))

        listed = registry.resolve("list_all_memory").execute({})
        assert "user likes blue" in listed
        assert listed.startswith("Stored facts:\n")

    def test_empty_memory(self, registry: ToolRegistry):
        assert registry.resolve("list_all_memory").execute(None) == (
            "No facts currently stored in memory."
        )

    def test_search_and_retrieve(self, registry: ToolRegistry, store: FactStore):
        key = store.save("my name is Kim").key
        store.save("favourite colour: blue")

        found = registry.resolve("search_memory").execute({"query": "name"})
        assert found == f"Found 1 fact(s) matching 'name':\n- {key}: my name is Kim\n"
        assert registry.resolve("search_memory").execute({"query": "Name"}) == (
            "No facts found matching 'Name'."
        )

        assert registry.resolve("retrieve_memory").execute({"key": key}) == (
            f"Retrieved fact for key '{key}': my name is Kim"
        )
        assert registry.resolve("retrieve_memory").execute({"key": "fact_x"}) == (
            "No fact found for key: fact_x"
        )

    def test_save_failure_is_text(self, registry: ToolRegistry, monkeypatch):
        def fail(self):
            raise OSError("read-only file system")

        monkeypatch.setattr(FactStore, "flush", fail)
        result = registry.resolve("save_memory").execute({"fact": "x"})
        assert result == "Error: Failed to save fact: read-only file system"

    def test_non_string_fact_keeps_earlier_facts(self, registry: ToolRegistry, store: FactStore):
        registry.resolve("save_memory").execute({"fact": "user likes blue"})
        saved = registry.resolve("save_memory").execute({"fact": 42})
        assert saved.startswith("Fact saved to memory with key: ")
        assert saved.endswith("Total facts: 2")

        assert registry.resolve("search_memory").execute({"query": "blue"}).startswith(
            "Found 1 fact(s) matching 'blue':"
        )

        reopened = FactStore(store.path).open()
        assert [fact for _, fact in reopened.list_all()] == ["user likes blue", "42"]
