"""Tool dispatch loop: the core of Scout.

Responsibilities:
1. Send the transcript plus tool manifest to the model backend
2. Append the assistant reply
3. Execute every requested tool, in emission order, one result per call id
4. Repeat until the model answers without tool requests
5. Honor cancellation between rounds, never mid-tool
"""

from __future__ import annotations

import json
import logging
import os
from enum import Enum
from typing import TYPE_CHECKING

from scout.conversation import Conversation, Message, Role, ToolCallRequest

if TYPE_CHECKING:
    from scout.providers.base import ModelBackend
    from scout.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are a helpful assistant. The user's current working directory is '{cwd}'. \
When you use tools that require a path, use this path as the default unless the user \
specifies a different one."""


def default_system_prompt(cwd: str | None = None) -> str:
    return SYSTEM_PROMPT.format(cwd=cwd or os.getcwd())


class LoopState(Enum):
    AWAITING_MODEL = "awaiting_model"
    EXECUTING_TOOLS = "executing_tools"
    DONE = "done"


class DispatchCancelled(Exception):
    """Cancellation was requested; carries the transcript up to the last full round."""

    def __init__(self, conversation: Conversation) -> None:
        super().__init__("Tool dispatch cancelled between rounds")
        self.conversation = conversation


class ToolDispatchLoop:
    """Drives rounds of ask model → execute tools → ask again."""

    def __init__(self, backend: ModelBackend, registry: ToolRegistry) -> None:
        self.backend = backend
        self.registry = registry
        self.state = LoopState.DONE
        self._cancel_requested = False

    def cancel(self) -> None:
        """Stop after the round in progress has appended all of its tool results."""
        self._cancel_requested = True

    # ── Main loop ─────────────────────────────────────────────

    async def run(self, conversation: Conversation) -> Conversation:
        """Run rounds until the model stops requesting tools.

        Works on a copy: the caller's transcript is left as it was if the
        backend fails. Returns the updated transcript.
        """
        snapshot = conversation.snapshot()
        if not snapshot or snapshot[0].role is not Role.SYSTEM:
            raise ValueError("Transcript must start with the system directive")
        if snapshot[-1].role is not Role.USER:
            raise ValueError("Transcript must end with the newest user message")

        working = conversation.copy()
        self._cancel_requested = False
        self.state = LoopState.AWAITING_MODEL
        round_no = 0

        try:
            while self.state is not LoopState.DONE:
                round_no += 1
                response = await self.backend.chat(
                    working.snapshot(), self.registry.schema_manifest()
                )
                assistant = response.message
                working.append(assistant)

                if not assistant.tool_calls:
                    self.state = LoopState.DONE
                    break

                self.state = LoopState.EXECUTING_TOOLS
                logger.info(
                    "Round %d: model requested %d tool call(s)", round_no, len(assistant.tool_calls)
                )
                for request in assistant.tool_calls:
                    working.append(Message.tool_result(request, self._execute(request)))

                self.state = LoopState.AWAITING_MODEL
                if self._cancel_requested:
                    logger.info("Cancellation honored after round %d", round_no)
                    raise DispatchCancelled(working)
        finally:
            self.state = LoopState.DONE

        return working

    # ── Tool execution ────────────────────────────────────────

    def _execute(self, request: ToolCallRequest) -> str:
        tool = self.registry.resolve(request.name)
        if tool is None:
            logger.error("Unknown tool: %s", request.name)
            return f"Error: Tool '{request.name}' not found."

        logger.info(
            "Running tool '%s' (args: %s)",
            request.name,
            json.dumps(request.arguments, ensure_ascii=False, default=str),
        )
        result = tool.execute(request.arguments)
        logger.debug("Tool '%s' returned %d chars", request.name, len(result))
        return result


class ChatSession:
    """One conversation with the user: the transcript plus the loop that extends it."""

    def __init__(
        self,
        backend: ModelBackend,
        registry: ToolRegistry,
        system_prompt: str | None = None,
    ) -> None:
        self.loop = ToolDispatchLoop(backend, registry)
        self.conversation = Conversation(system_prompt or default_system_prompt())

    async def ask(self, text: str) -> str:
        """Send one user utterance and return the model's final answer.

        On a backend failure the user message stays in the transcript, the
        rounds of this turn are discarded and the error propagates.
        """
        self.conversation.append(Message.user(text))
        try:
            self.conversation = await self.loop.run(self.conversation)
        except DispatchCancelled as e:
            self.conversation = e.conversation
            raise
        final = self.conversation.last
        return final.content if final else ""

    def cancel(self) -> None:
        self.loop.cancel()

    def messages(self) -> tuple[Message, ...]:
        return self.conversation.snapshot()
