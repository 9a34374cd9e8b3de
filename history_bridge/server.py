#!/usr/bin/env python3
"""CLI entrypoint for running the history bridge over stdin/stdout."""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from typing import List, Optional

from .config import Settings, get_settings
from .logging_config import configure_logging, logger
from .protocol import ProtocolDispatcher
from .services import ConversationPoller, ConversationStoreReader, HistoryReader, HistoryWriter, Watermark

STDIN_LIMIT_BYTES = 1024 * 1024


def build_dispatcher(settings: Settings) -> ProtocolDispatcher:
    reader = ConversationStoreReader(
        settings.db_path,
        batch_size=settings.batch_size,
        table=settings.store_table,
        id_column=settings.id_column,
        updated_column=settings.updated_column,
        messages_column=settings.messages_column,
    )
    writer = HistoryWriter(settings.history_dir)
    writer.ensure_directory()
    poller = ConversationPoller(
        reader,
        writer,
        watermark=Watermark(),
        poll_interval_seconds=settings.poll_interval_seconds,
    )
    return ProtocolDispatcher.from_settings(settings, poller, HistoryReader(settings.history_dir))


async def _open_stdin(limit: int = STDIN_LIMIT_BYTES) -> asyncio.StreamReader:
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader(limit=limit)
    protocol = asyncio.StreamReaderProtocol(reader)
    await loop.connect_read_pipe(lambda: protocol, sys.stdin)
    return reader


async def run(settings: Settings) -> int:
    dispatcher = build_dispatcher(settings)
    loop = asyncio.get_running_loop()
    shutdown = asyncio.Event()
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, shutdown.set)
        except (NotImplementedError, RuntimeError):  # pragma: no cover - platform specific
            logger.debug("signal handler unavailable", extra={"signal": signum})

    logger.info("History bridge started")
    logger.info("Monitoring: %s", settings.db_path)
    logger.info("Saving to: %s", settings.history_dir)

    stdin = await _open_stdin()
    serve_task = loop.create_task(dispatcher.serve(stdin), name="protocol-dispatcher")
    shutdown_task = loop.create_task(shutdown.wait(), name="shutdown-signal")
    try:
        await asyncio.wait({serve_task, shutdown_task}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in (serve_task, shutdown_task):
            if not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        await dispatcher.poller.stop()
        logger.info("History bridge stopped")
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Conversation history bridge (JSON-RPC over stdio)")
    parser.add_argument("--db-path", default=None, help=f"Conversation database (default: {settings.db_path})")
    parser.add_argument(
        "--history-dir", default=None, help=f"History output directory (default: {settings.history_dir})"
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=settings.poll_interval_seconds,
        help=f"Seconds between polls (default: {settings.poll_interval_seconds})",
    )
    args = parser.parse_args(argv)

    settings = settings.model_copy(
        update={
            "db_path_override": args.db_path or settings.db_path_override,
            "history_dir_override": args.history_dir or settings.history_dir_override,
            "poll_interval_seconds": args.poll_interval,
        }
    )

    configure_logging(settings.log_level)
    sys.exit(asyncio.run(run(settings)))


if __name__ == "__main__":  # pragma: no cover - CLI invocation guard
    main()
