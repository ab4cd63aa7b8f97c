"""
Graceful shutdown handling for the bot.
"""
import asyncio
import signal

import discord

from .utils.logging import get_logger

logger = get_logger(__name__)

_shutdown_timeout = 30  # seconds


class GracefulShutdown:
    """Closes the gateway client (and with it the background tasks) once per process."""

    def __init__(self, bot: discord.Client):
        self.bot = bot
        self.shutdown_in_progress = False

    async def shutdown_with_timeout(self, timeout: float = _shutdown_timeout) -> None:
        if self.shutdown_in_progress:
            return
        self.shutdown_in_progress = True
        logger.info(f"Starting graceful shutdown with {timeout}s timeout", extra={"subsys": "shutdown"})
        try:
            if not self.bot.is_closed():
                await asyncio.wait_for(self.bot.close(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Shutdown timed out after {timeout}s", extra={"subsys": "shutdown"})
        logger.info("Graceful shutdown complete", extra={"subsys": "shutdown"})


def setup_signal_handlers(bot: discord.Client) -> GracefulShutdown:
    """Route SIGINT/SIGTERM to a graceful close of the running client."""
    handler = GracefulShutdown(bot)
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, lambda: asyncio.ensure_future(handler.shutdown_with_timeout()))
    logger.info("Signal handlers configured for graceful shutdown", extra={"subsys": "shutdown"})
    return handler
