"""Fact memory: durable key → fact log.

Layout:
    ./llm_memory.json      # {"fact_<ISO timestamp>": "<fact>", ...}

The file location is configurable (``memory_file`` in scout.toml or
``SCOUT_MEMORY_FILE``).
"""

from scout.memory.store import FactStore, SaveResult

__all__ = ["FactStore", "SaveResult"]
