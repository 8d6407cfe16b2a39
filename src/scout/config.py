"""Configuration loading from environment variables and scout.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_CONFIG_FILENAME = "scout.toml"
_TRUTHY = {"1", "true", "yes", "on"}

# Model used when none is configured, per backend.
DEFAULT_MODELS = {
    "ollama": "qwen3",
    "anthropic_api": "claude-sonnet-4-5-20250929",
}


@dataclass
class BackendConfig:
    """Configuration for the model backend."""

    name: str = "ollama"
    model: str = "qwen3"
    host: str | None = None
    timeout: int = 120
    max_tokens: int = 4096


@dataclass
class ToolsConfig:
    """Which optional tools are advertised to the model."""

    enable_write: bool = False


@dataclass
class ScoutConfig:
    """Top-level Scout configuration."""

    backend: BackendConfig = field(default_factory=BackendConfig)
    tools: ToolsConfig = field(default_factory=ToolsConfig)
    memory_file: Path = field(default_factory=lambda: Path.cwd() / "llm_memory.json")
    history_dir: Path = field(default_factory=lambda: Path.cwd() / "chat_history")
    log_level: str = "INFO"
    system_prompt: str | None = None


def _flag(value: str | bool | None, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return value.strip().lower() in _TRUTHY


def load_config(config_path: Path | None = None) -> ScoutConfig:
    """Load configuration from environment variables and optional scout.toml.

    Priority: environment variables > scout.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.scout/
        for candidate in [Path.cwd() / _CONFIG_FILENAME, Path.home() / ".scout" / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    backend_data = file_data.get("backend", {})
    backend_name = os.getenv("SCOUT_BACKEND", backend_data.get("name", "ollama"))
    tools_data = file_data.get("tools", {})
    defaults = ScoutConfig()

    config = ScoutConfig(
        backend=BackendConfig(
            name=backend_name,
            model=os.getenv(
                "SCOUT_MODEL",
                backend_data.get("model", DEFAULT_MODELS.get(backend_name, "qwen3")),
            ),
            host=os.getenv(
                "SCOUT_OLLAMA_HOST", os.getenv("OLLAMA_HOST", backend_data.get("host"))
            ),
            timeout=int(os.getenv("SCOUT_TIMEOUT", backend_data.get("timeout", 120))),
            max_tokens=int(backend_data.get("max_tokens", 4096)),
        ),
        tools=ToolsConfig(
            enable_write=_flag(
                os.getenv("SCOUT_ENABLE_WRITE"), _flag(tools_data.get("enable_write"))
            ),
        ),
        memory_file=Path(
            os.getenv("SCOUT_MEMORY_FILE", file_data.get("memory_file", str(defaults.memory_file)))
        ).expanduser(),
        history_dir=Path(
            os.getenv("SCOUT_HISTORY_DIR", file_data.get("history_dir", str(defaults.history_dir)))
        ).expanduser(),
        log_level=os.getenv("SCOUT_LOG_LEVEL", file_data.get("log_level", "INFO")),
        system_prompt=file_data.get("system_prompt"),
    )
    return config
