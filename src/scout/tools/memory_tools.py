"""Tools for agent fact-memory access.

These functions are exposed as tools to the model, letting it save facts
about the user and recall them in later sessions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from scout.tools.base import NoArgs, ToolDefinition, parameters_schema

if TYPE_CHECKING:
    from scout.memory.store import FactStore


@dataclass(frozen=True)
class FactArgs:
    fact: str


@dataclass(frozen=True)
class QueryArgs:
    query: str


@dataclass(frozen=True)
class KeyArgs:
    key: str


def _format_facts(facts: list[tuple[str, str]]) -> str:
    return "".join(f"- {key}: {fact}\n" for key, fact in facts)


def get_memory_tools(store: FactStore) -> list[ToolDefinition]:
    """Return the memory tool definitions bound to ``store``."""

    def save_memory(fact: str) -> str:
        result = store.save(fact)
        if not result.ok:
            return f"Error: Failed to save fact: {result.error}"
        return f"Fact saved to memory with key: {result.key}. Total facts: {result.total}"

    def search_memory(query: str) -> str:
        matches = store.search(query)
        if not matches:
            return f"No facts found matching '{query}'."
        return f"Found {len(matches)} fact(s) matching '{query}':\n" + _format_facts(matches)

    def list_all_memory() -> str:
        facts = store.list_all()
        if not facts:
            return "No facts currently stored in memory."
        return "Stored facts:\n" + _format_facts(facts)

    def retrieve_memory(key: str) -> str:
        fact = store.get(key)
        if fact is None:
            return f"No fact found for key: {key}"
        return f"Retrieved fact for key '{key}': {fact}"

    return [
        ToolDefinition(
            name="save_memory",
            description=(
                "Save a specific piece of information to long-term memory, such as the "
                "user's name, preferences, or an important fact mentioned in conversation."
            ),
            handler=save_memory,
            args=FactArgs,
            parameters=parameters_schema(
                FactArgs,
                {"fact": "The fact to remember, e.g. 'My favourite colour is blue'."},
            ),
        ),
        ToolDefinition(
            name="search_memory",
            description="Search long-term memory for facts containing a keyword (case-sensitive).",
            handler=search_memory,
            args=QueryArgs,
            parameters=parameters_schema(
                QueryArgs, {"query": "Keyword to look for, e.g. 'name' or 'colour'."}
            ),
        ),
        ToolDefinition(
            name="list_all_memory",
            description=(
                "List every fact stored in long-term memory. Useful when the user asks "
                "vaguely what you remember about them."
            ),
            handler=list_all_memory,
            args=NoArgs,
        ),
        ToolDefinition(
            name="retrieve_memory",
            description="Fetch one stored fact by its key (as returned by save_memory).",
            handler=retrieve_memory,
            args=KeyArgs,
            parameters=parameters_schema(KeyArgs, {"key": "Key of the fact, e.g. fact_<timestamp>."}),
        ),
    ]
