"""Model backend protocol and shared types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence, runtime_checkable

from scout.conversation import Message


class ModelBackendError(RuntimeError):
    """The model backend could not be reached or returned an unusable reply."""


@dataclass
class ModelResponse:
    """One assistant turn returned by a backend."""

    message: Message
    model: str | None = None
    metadata: dict = field(default_factory=dict)


@runtime_checkable
class ModelBackend(Protocol):
    """Protocol that all model backends must implement."""

    @property
    def name(self) -> str: ...

    async def chat(
        self,
        messages: Sequence[Message],
        tools: list[dict[str, Any]],
    ) -> ModelResponse:
        """Send the transcript plus tool manifest, return the assistant's reply (non-streamed)."""
        ...

    async def health_check(self) -> bool:
        """Check if the backend is available. Returns True if healthy."""
        ...
