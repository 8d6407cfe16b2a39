"""Chat-history export: one JSON file per session."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from scout.conversation import Message, Role

logger = logging.getLogger(__name__)


def _file_timestamp() -> str:
    now = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return now.replace(":", "-").replace(".", "-")


def export_history(messages: Iterable[Message], history_dir: Path) -> Path | None:
    """Write the transcript to ``history_dir/chat_<timestamp>.json``.

    Returns the written path, or None when there was nothing to save or the
    write failed.
    """
    messages = list(messages)
    if not any(m.role is not Role.SYSTEM for m in messages):
        logger.info("No conversation to save.")
        return None

    path = history_dir / f"chat_{_file_timestamp()}.json"
    try:
        history_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps([m.to_dict() for m in messages], ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
    except OSError as e:
        logger.error("Error saving chat history to %s: %s", path, e)
        return None
    logger.info("Chat history saved to %s", path)
    return path


def load_history(path: Path) -> list[Message]:
    data = json.loads(path.read_text(encoding="utf-8"))
    return [Message.from_dict(item) for item in data]
