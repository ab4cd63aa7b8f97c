"""
Contains bot startup and pre-flight check logic.
"""
import hashlib
import shutil
from typing import Any, Dict

import discord

from embedder.exceptions import ConfigurationError
from embedder.utils.logging import get_logger


def create_bot_intents() -> discord.Intents:
    """Only the intents needed to read message text in guild channels."""
    intents = discord.Intents.none()
    intents.guilds = True
    intents.guild_messages = True
    intents.message_content = True
    return intents


def check_media_extractor(binary: str, logger) -> bool:
    """Warn if the yt-dlp binary cannot be resolved; Rumble links then yield no card."""
    path = shutil.which(binary)
    if path:
        logger.info(f"✅ Media extractor found: {path}")
        return True
    logger.warning(f"❌ Media extractor '{binary}' not found on PATH. Rumble links will be skipped.")
    return False


def run_pre_flight_checks(config: Dict[str, Any]) -> None:
    """Runs all mandatory startup checks."""
    logger = get_logger(__name__)
    logger.info("--- Running Pre-Flight Checklist ---")

    # 1. Bot token
    token = config.get("DISCORD_TOKEN")
    if not token:
        logger.critical("DISCORD_TOKEN is missing. Bot cannot start.")
        raise ConfigurationError("DISCORD_TOKEN not found in environment.")
    token_hash = hashlib.sha256(token.encode()).hexdigest()
    logger.info(f"[INIT] Token hash={token_hash} validated")

    # 2. Intents
    intents = create_bot_intents()
    required_intents = {
        "guilds": intents.guilds,
        "guild_messages": intents.guild_messages,
        "message_content": intents.message_content,
    }
    for intent_name, is_enabled in required_intents.items():
        if not is_enabled:
            logger.error(f"Required intent '{intent_name}' is disabled.")
    logger.info("[INIT] Intents verified")
    logger.info(f"[INIT] discord.py version: {discord.__version__}")

    # 3. External media extractor
    check_media_extractor(config.get("YTDLP_BINARY", "yt-dlp"), logger)

    logger.info("--- Pre-Flight Checklist Complete ---")
