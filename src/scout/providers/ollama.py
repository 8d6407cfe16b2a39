"""Ollama backend: local models through the `ollama` Python client."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Sequence

import httpx
import ollama

from scout.conversation import Message, Role, ToolCallRequest
from scout.providers.base import ModelBackendError, ModelResponse

logger = logging.getLogger(__name__)


def to_ollama_message(message: Message) -> dict[str, Any]:
    """Transcript message → Ollama chat message."""
    data: dict[str, Any] = {"role": message.role.value, "content": message.content}
    if message.tool_calls:
        data["tool_calls"] = [
            {"function": {"name": call.name, "arguments": call.arguments}}
            for call in message.tool_calls
        ]
    if message.role is Role.TOOL and message.tool_name:
        data["tool_name"] = message.tool_name
    return data


def from_ollama_message(raw: Any) -> Message:
    """Ollama reply message → assistant Message, synthesizing call ids Ollama omits."""
    calls: list[ToolCallRequest] = []
    for index, call in enumerate(raw.tool_calls or []):
        call_id = getattr(call, "id", None) or f"call_{index}"
        calls.append(
            ToolCallRequest(
                id=call_id,
                name=call.function.name,
                arguments=dict(call.function.arguments or {}),
            )
        )
    return Message.assistant(raw.content or "", calls)


@dataclass
class OllamaBackend:
    """Chat with a model served by a local (or remote) Ollama server."""

    model: str = "qwen3"
    host: str | None = None
    timeout: int = 120

    def __post_init__(self) -> None:
        self._client = ollama.Client(host=self.host, timeout=self.timeout)

    @property
    def name(self) -> str:
        return "ollama"

    async def chat(
        self,
        messages: Sequence[Message],
        tools: list[dict[str, Any]],
    ) -> ModelResponse:
        payload = [to_ollama_message(m) for m in messages]
        try:
            response = await asyncio.to_thread(
                self._client.chat,
                model=self.model,
                messages=payload,
                tools=tools or None,
                stream=False,
            )
        except ollama.ResponseError as e:
            logger.error("Ollama error (status=%s): %s", e.status_code, e.error)
            raise ModelBackendError(f"Ollama error: {e.error}") from e
        except (ConnectionError, httpx.HTTPError) as e:
            logger.error("Ollama unreachable: %s", e)
            raise ModelBackendError(
                f"Could not reach Ollama at {self.host or 'the default host'}: {e}"
            ) from e

        return ModelResponse(
            message=from_ollama_message(response.message),
            model=response.model,
            metadata={
                "prompt_eval_count": getattr(response, "prompt_eval_count", None),
                "eval_count": getattr(response, "eval_count", None),
            },
        )

    async def health_check(self) -> bool:
        try:
            await asyncio.to_thread(self._client.list)
            return True
        except Exception:
            return False
