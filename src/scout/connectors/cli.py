"""Local CLI REPL: one user utterance per line."""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from scout.agent import DispatchCancelled
from scout.history import export_history
from scout.providers.base import ModelBackendError

if TYPE_CHECKING:
    from scout.agent import ChatSession

logger = logging.getLogger(__name__)

_EXIT_COMMANDS = ("exit", "quit")


class CLIConnector:
    """Interactive REPL reading from stdin and writing to stdout.

    ``exit``, end of input and Ctrl+C all end the session through the same
    path: the transcript is exported to ``history_dir`` first. Ctrl+C during
    a reply lets the current round finish its tool calls before stopping.
    """

    def __init__(self, session: ChatSession, history_dir: Path) -> None:
        self.session = session
        self.history_dir = history_dir
        self.saved_to: Path | None = None
        self._running = False
        self._interrupted = asyncio.Event()

    @property
    def name(self) -> str:
        return "cli"

    async def start(self) -> None:
        self._running = True
        self._install_signal_handler()

        print("Scout (type 'exit' or Ctrl+C to quit)")
        print("-" * 40)

        try:
            while self._running:
                line = await self._next_line()
                if line is None:
                    break

                text = line.strip()
                if text.lower() in _EXIT_COMMANDS:
                    break
                if not text:
                    continue

                await self._handle(text)
                if self._interrupted.is_set():
                    break
        finally:
            self._remove_signal_handler()
            self.shutdown()

    async def _handle(self, text: str) -> None:
        print("Thinking...", file=sys.stderr)
        try:
            answer = await self.session.ask(text)
        except DispatchCancelled:
            print("\nInterrupted.")
            return
        except ModelBackendError as e:
            print(f"\nError: {e}", file=sys.stderr)
            return
        except Exception as e:
            logger.exception("Unexpected error while answering")
            print(f"\nError: {e}", file=sys.stderr)
            return
        await self.reply(answer)

    async def reply(self, text: str) -> None:
        print(f"\nScout: {text}")

    def shutdown(self) -> None:
        """Export the transcript. Safe to call more than once."""
        if not self._running:
            return
        self._running = False
        self.saved_to = export_history(self.session.messages(), self.history_dir)
        if self.saved_to:
            print(f"\nChat history saved to {self.saved_to}")
        else:
            print("\nNo conversation to save.")

    async def stop(self) -> None:
        self._running = False

    # ── Input ────────────────────────────────────────────────

    async def _next_line(self) -> str | None:
        """Next input line, or None on end of input or interrupt."""
        line_future = self._read_line_async()
        interrupt = asyncio.ensure_future(self._interrupted.wait())
        done, _ = await asyncio.wait(
            {line_future, interrupt}, return_when=asyncio.FIRST_COMPLETED
        )
        if interrupt in done:
            print("\nCtrl+C detected.")
            return None
        interrupt.cancel()
        return line_future.result()

    def _read_line_async(self) -> asyncio.Future:
        # A daemon thread so a pending read never blocks interpreter exit.
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()

        def reader() -> None:
            line = self._read_input()
            loop.call_soon_threadsafe(lambda: future.done() or future.set_result(line))

        threading.Thread(target=reader, name="scout-stdin", daemon=True).start()
        return future

    def _read_input(self) -> str | None:
        try:
            sys.stdout.write("\nYou: ")
            sys.stdout.flush()
            raw = sys.stdin.buffer.readline()
            if not raw:
                return None
            return raw.decode("utf-8", errors="replace").rstrip("\n")
        except (EOFError, ValueError, OSError):
            return None

    # ── Signal handling ──────────────────────────────────────

    def _install_signal_handler(self) -> None:
        try:
            asyncio.get_running_loop().add_signal_handler(signal.SIGINT, self.interrupt)
        except (NotImplementedError, RuntimeError):
            logger.debug("SIGINT handler unavailable on this platform")

    def _remove_signal_handler(self) -> None:
        try:
            asyncio.get_running_loop().remove_signal_handler(signal.SIGINT)
        except (NotImplementedError, RuntimeError):
            pass

    def interrupt(self) -> None:
        """Request shutdown; a reply in progress stops between rounds."""
        logger.info("Interrupt received")
        self._interrupted.set()
        self.session.cancel()
