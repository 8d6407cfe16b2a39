"""Entry point: python -m scout [chat|health]

- No args / "chat": Interactive CLI REPL
- "health":         Check that the configured model backend answers
"""

from __future__ import annotations

import asyncio
import logging
import sys

from scout.config import ScoutConfig, load_config


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def build_session(config: ScoutConfig):
    """Wire store, registry and backend into a chat session."""
    from scout.agent import ChatSession
    from scout.memory import FactStore
    from scout.providers import build_backend
    from scout.tools import build_registry

    store = FactStore(config.memory_file).open()
    registry = build_registry(store, enable_write=config.tools.enable_write)
    backend = build_backend(config.backend)
    return ChatSession(backend, registry, system_prompt=config.system_prompt)


def _run_cli() -> None:
    """Interactive CLI REPL mode."""
    config = load_config()
    _setup_logging(config.log_level)

    from scout.connectors.cli import CLIConnector

    session = build_session(config)
    cli = CLIConnector(session, config.history_dir)

    try:
        asyncio.run(cli.start())
    except KeyboardInterrupt:
        cli.shutdown()


def _run_health() -> None:
    config = load_config()
    _setup_logging(config.log_level)

    from scout.providers import build_backend

    backend = build_backend(config.backend)
    healthy = asyncio.run(backend.health_check())
    print(f"{backend.name}: {'ok' if healthy else 'unavailable'}")
    sys.exit(0 if healthy else 1)


def main() -> None:
    cmd = sys.argv[1] if len(sys.argv) > 1 else "chat"

    if cmd in ("chat", "repl"):
        _run_cli()
    elif cmd == "health":
        _run_health()
    else:
        print("Usage: python -m scout [chat|health]")
        print("  chat    Interactive CLI REPL (default)")
        print("  health  Check the configured model backend")
        sys.exit(1)


if __name__ == "__main__":
    main()
