"""Anthropic API backend: hosted Claude models with tool use."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Sequence

from scout.conversation import Message, Role, ToolCallRequest
from scout.providers.base import ModelBackendError, ModelResponse

logger = logging.getLogger(__name__)


def to_anthropic_request(
    messages: Sequence[Message], tools: list[dict[str, Any]]
) -> dict[str, Any]:
    """Build Messages API kwargs from the transcript and tool manifest.

    The system directive moves to ``system``; consecutive tool results are
    folded into one user turn of ``tool_result`` blocks.
    """
    system: str | None = None
    converted: list[dict[str, Any]] = []
    for message in messages:
        if message.role is Role.SYSTEM:
            system = message.content
        elif message.role is Role.USER:
            converted.append({"role": "user", "content": message.content})
        elif message.role is Role.ASSISTANT:
            blocks: list[dict[str, Any]] = []
            if message.content:
                blocks.append({"type": "text", "text": message.content})
            for call in message.tool_calls:
                blocks.append(
                    {"type": "tool_use", "id": call.id, "name": call.name, "input": call.arguments}
                )
            converted.append({"role": "assistant", "content": blocks})
        else:
            block = {
                "type": "tool_result",
                "tool_use_id": message.tool_call_id,
                "content": message.content,
            }
            previous = converted[-1] if converted else None
            if (
                previous
                and previous["role"] == "user"
                and isinstance(previous["content"], list)
            ):
                previous["content"].append(block)
            else:
                converted.append({"role": "user", "content": [block]})

    request: dict[str, Any] = {"messages": converted}
    if system:
        request["system"] = system
    if tools:
        request["tools"] = [
            {
                "name": t["function"]["name"],
                "description": t["function"]["description"],
                "input_schema": t["function"]["parameters"],
            }
            for t in tools
        ]
    return request


def from_anthropic_content(content: list[Any]) -> Message:
    text_parts: list[str] = []
    calls: list[ToolCallRequest] = []
    for block in content:
        if block.type == "text":
            text_parts.append(block.text)
        elif block.type == "tool_use":
            calls.append(ToolCallRequest(id=block.id, name=block.name, arguments=dict(block.input)))
    return Message.assistant("".join(text_parts), calls)


@dataclass
class AnthropicBackend:
    """Direct Anthropic API via the `anthropic` SDK."""

    model: str = "claude-sonnet-4-5-20250929"
    max_tokens: int = 4096
    timeout: int = 120

    def __post_init__(self) -> None:
        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "anthropic package required. Install with: pip install 'scout[api]'"
            )
        self._anthropic = anthropic
        self._client = anthropic.Anthropic(timeout=self.timeout)

    @property
    def name(self) -> str:
        return "anthropic_api"

    async def chat(
        self,
        messages: Sequence[Message],
        tools: list[dict[str, Any]],
    ) -> ModelResponse:
        kwargs = to_anthropic_request(messages, tools)
        kwargs.update(model=self.model, max_tokens=self.max_tokens)

        try:
            response = await asyncio.to_thread(self._client.messages.create, **kwargs)
        except self._anthropic.APIError as e:
            logger.error("Anthropic API error: %s", e)
            raise ModelBackendError(f"Anthropic API error: {e}") from e

        metadata: dict = {"stop_reason": response.stop_reason}
        if response.usage:
            metadata["input_tokens"] = response.usage.input_tokens
            metadata["output_tokens"] = response.usage.output_tokens

        return ModelResponse(
            message=from_anthropic_content(response.content or []),
            model=response.model,
            metadata=metadata,
        )

    async def health_check(self) -> bool:
        try:
            response = await asyncio.to_thread(
                self._client.messages.create,
                model=self.model,
                max_tokens=10,
                messages=[{"role": "user", "content": "ping"}],
            )
            return bool(response.content)
        except Exception:
            return False
