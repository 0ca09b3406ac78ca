"""Turning termination signals into a shutdown event."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import Optional

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGTERM, signal.SIGINT, signal.SIGQUIT)


def setup(loop: Optional[asyncio.AbstractEventLoop] = None) -> asyncio.Event:
    """Install signal handlers on *loop*; the returned event is set on shutdown."""
    if loop is None:
        loop = asyncio.get_running_loop()
    event = asyncio.Event()

    def _handle(signum: int) -> None:
        logger.debug("Caught signal %d", signum)
        logger.info("Received a shutdown signal")
        event.set()

    logger.debug("Waiting for signals")
    for signum in SHUTDOWN_SIGNALS:
        loop.add_signal_handler(signum, _handle, signum)
    return event