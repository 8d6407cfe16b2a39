"""Conversation data model: messages, tool-call requests and the transcript.

The transcript is append-only. Every tool-role message answers exactly one
request of the assistant message right before it, so the model always sees a
result for each id it emitted.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


@dataclass(frozen=True)
class ToolCallRequest:
    """One tool invocation requested by the model."""

    id: str
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "function": {"name": self.name, "arguments": self.arguments}}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ToolCallRequest:
        function = data.get("function", {})
        arguments = function.get("arguments") or {}
        if isinstance(arguments, str):
            arguments = json.loads(arguments) if arguments.strip() else {}
        return cls(id=data.get("id", ""), name=function.get("name", ""), arguments=arguments)


@dataclass(frozen=True)
class Message:
    """One conversational turn."""

    role: Role
    content: str = ""
    tool_calls: tuple[ToolCallRequest, ...] = ()
    tool_call_id: str | None = None
    tool_name: str | None = None

    # ── Constructors ─────────────────────────────────────────

    @classmethod
    def system(cls, content: str) -> Message:
        return cls(role=Role.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> Message:
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(
        cls, content: str = "", tool_calls: list[ToolCallRequest] | tuple = ()
    ) -> Message:
        return cls(role=Role.ASSISTANT, content=content or "", tool_calls=tuple(tool_calls))

    @classmethod
    def tool_result(cls, request: ToolCallRequest, content: str) -> Message:
        return cls(
            role=Role.TOOL,
            content=content,
            tool_call_id=request.id,
            tool_name=request.name,
        )

    # ── Serialization (chat-history export shape) ────────────

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"role": self.role.value, "content": self.content}
        if self.tool_calls:
            data["tool_calls"] = [call.to_dict() for call in self.tool_calls]
        if self.role is Role.TOOL:
            data["tool_call_id"] = self.tool_call_id
            data["name"] = self.tool_name
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Message:
        return cls(
            role=Role(data["role"]),
            content=data.get("content") or "",
            tool_calls=tuple(ToolCallRequest.from_dict(c) for c in data.get("tool_calls") or []),
            tool_call_id=data.get("tool_call_id"),
            tool_name=data.get("name") or data.get("tool_name"),
        )


class Conversation:
    """Ordered, append-only transcript exchanged with the model backend."""

    def __init__(self, system_prompt: str | None = None) -> None:
        self._messages: list[Message] = []
        if system_prompt is not None:
            self._messages.append(Message.system(system_prompt))

    @classmethod
    def from_messages(cls, messages: list[Message] | tuple[Message, ...]) -> Conversation:
        conversation = cls()
        for message in messages:
            conversation.append(message)
        return conversation

    def append(self, message: Message) -> None:
        if message.role is Role.SYSTEM and self._messages:
            raise ValueError("The system directive is set once, at the start of the transcript")
        if message.role is Role.TOOL:
            pending = self.pending_tool_call_ids()
            if message.tool_call_id not in pending:
                raise ValueError(
                    f"Tool result '{message.tool_call_id}' does not answer a pending "
                    f"request of the preceding assistant message (pending: {pending})"
                )
        self._messages.append(message)

    def snapshot(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def copy(self) -> Conversation:
        clone = Conversation()
        clone._messages = list(self._messages)
        return clone

    def pending_tool_call_ids(self) -> list[str]:
        """Request ids of the latest assistant message that still lack a result."""
        answered: set[str] = set()
        for message in reversed(self._messages):
            if message.role is Role.TOOL:
                answered.add(message.tool_call_id or "")
                continue
            if message.role is Role.ASSISTANT:
                return [c.id for c in message.tool_calls if c.id not in answered]
            break
        return []

    @property
    def last(self) -> Message | None:
        return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))
