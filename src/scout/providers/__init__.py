"""Model backends."""

from __future__ import annotations

from typing import TYPE_CHECKING

from scout.providers.base import ModelBackend, ModelBackendError, ModelResponse

if TYPE_CHECKING:
    from scout.config import BackendConfig

__all__ = ["ModelBackend", "ModelBackendError", "ModelResponse", "build_backend"]


def build_backend(config: BackendConfig) -> ModelBackend:
    """Instantiate the backend named in the configuration."""
    if config.name == "ollama":
        from scout.providers.ollama import OllamaBackend

        return OllamaBackend(model=config.model, host=config.host, timeout=config.timeout)
    if config.name == "anthropic_api":
        from scout.providers.anthropic_api import AnthropicBackend

        return AnthropicBackend(
            model=config.model, max_tokens=config.max_tokens, timeout=config.timeout
        )
    raise ValueError(f"Unknown backend: {config.name}")
