"""
Link embedder entry point - BOOTSTRAP ONLY
Wires configuration, logging and the gateway client together; no message handling lives here.
"""
import asyncio
import logging
import sys
import traceback
from argparse import Namespace
from typing import NoReturn

import aiohttp
import discord

from embedder.config import load_config
from embedder.core.bot import LinkEmbedBot
from embedder.core.cli import parse_arguments, show_version_info, validate_configuration_only
from embedder.core.startup import create_bot_intents, run_pre_flight_checks
from embedder.exceptions import ConfigurationError
from embedder.shutdown import setup_signal_handlers
from embedder.utils.logging import get_logger, init_logging, shutdown_logging_and_exit

LOGIN_ATTEMPTS = 3
LOGIN_BASE_DELAY_S = 5


def run_cli_actions(args: Namespace) -> None:
    """Handle the flags that exit before the client is built."""
    if args.version:
        show_version_info()
        shutdown_logging_and_exit(0)
    if args.config_check:
        shutdown_logging_and_exit(0 if validate_configuration_only() else 1)


async def start_with_retries(bot: discord.Client, token: str, logger: logging.Logger) -> bool:
    """
    Log in and run the client until it closes.

    Transient connection failures are retried with exponential backoff.
    Returns False when login was rejected or every attempt failed.
    """
    for attempt in range(1, LOGIN_ATTEMPTS + 1):
        try:
            logger.info(
                f"Connecting to Discord (attempt {attempt}/{LOGIN_ATTEMPTS})",
                extra={"subsys": "core", "event": "connect"},
            )
            await bot.start(token)
            return True
        except discord.LoginFailure as e:
            logger.critical(f"Discord rejected the token: {e}", extra={"subsys": "core", "event": "login_failed"})
            return False
        except (discord.HTTPException, aiohttp.ClientConnectorError) as e:
            if attempt == LOGIN_ATTEMPTS:
                logger.error(
                    f"Giving up after {attempt} connection attempts: {e}",
                    extra={"subsys": "core", "event": "connect_failed"},
                )
                return False
            delay = LOGIN_BASE_DELAY_S * (2 ** (attempt - 1))
            logger.warning(f"Connection failed ({e}), retrying in {delay}s", extra={"subsys": "core"})
            await asyncio.sleep(delay)
    return False


async def main() -> NoReturn:
    args = parse_arguments()
    init_logging(level="DEBUG" if args.debug else None)
    logger = get_logger(__name__)

    run_cli_actions(args)

    try:
        config = load_config()
        run_pre_flight_checks(config)
    except ConfigurationError as e:
        logger.critical(f"Configuration error during startup: {e}", extra={"subsys": "core", "event": "config_fail"})
        shutdown_logging_and_exit(1)

    bot = LinkEmbedBot(config=config, intents=create_bot_intents())
    try:
        setup_signal_handlers(bot)
    except (NotImplementedError, RuntimeError) as e:
        # add_signal_handler is unavailable on Windows event loops
        logger.warning(f"Signal handlers not installed: {e}", extra={"subsys": "core"})

    ok = await start_with_retries(bot, config["DISCORD_TOKEN"], logger)
    if not bot.is_closed():
        await bot.close()
    logger.info("Gateway client closed", extra={"subsys": "core", "event": "stopped"})
    shutdown_logging_and_exit(0 if ok else 1)


def run_bot() -> None:
    """Console-script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nShutdown requested by user.")
        shutdown_logging_and_exit(0)
    except Exception as e:
        print(f"FATAL ERROR: {e}", file=sys.stderr)
        traceback.print_exc()
        shutdown_logging_and_exit(1)


if __name__ == "__main__":
    run_bot()
