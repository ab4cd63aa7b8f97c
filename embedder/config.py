"""Configuration loading and environment setup."""
import os
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv

from .exceptions import ConfigurationError
from .utils.env import clean_env_value, get_float, get_int, get_str
from .utils.logging import get_logger

logger = get_logger(__name__)

# Load environment variables from .env in the working directory
load_dotenv(dotenv_path=Path.cwd() / ".env", verbose=False)

# Also try the project root in case we're running from a subdirectory
load_dotenv(dotenv_path=Path(__file__).parent.parent / ".env", verbose=False)

REQUIRED_VARS = ("DISCORD_TOKEN",)
SECRET_KEYS = ("DISCORD_TOKEN",)


def validate_required_env() -> None:
    """Raise ConfigurationError if any required environment variable is missing."""
    missing_vars = [var for var in REQUIRED_VARS if not clean_env_value(os.getenv(var))]
    if missing_vars:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing_vars)}"
        )


def load_config() -> Dict[str, Any]:
    """
    Load configuration from environment variables.

    Values are read fresh on every call so tests can adjust the environment
    between calls.
    """
    config = {
        # DISCORD
        "DISCORD_TOKEN": clean_env_value(os.getenv("DISCORD_TOKEN")),

        # LOGGING
        "LOG_LEVEL": get_str("LOG_LEVEL", "INFO").upper(),
        "LOG_JSONL_PATH": get_str("LOG_JSONL_PATH", "logs/embedder.jsonl"),

        # AVATAR CACHE
        "AVATAR_CACHE_DIR": Path(get_str("AVATAR_CACHE_DIR", "avatar_cache")),
        "AVATAR_CACHE_MAX_AGE_DAYS": get_int("AVATAR_CACHE_MAX_AGE_DAYS", 7),
        "CACHE_SWEEP_INTERVAL_HOURS": get_float("CACHE_SWEEP_INTERVAL_HOURS", 24.0),

        # FETCHING
        "FETCH_TIMEOUT_S": get_float("FETCH_TIMEOUT_S", 15.0),
        "YTDLP_BINARY": get_str("YTDLP_BINARY", "yt-dlp"),
        "YTDLP_METADATA_TIMEOUT_S": get_float("YTDLP_METADATA_TIMEOUT_S", 30.0),

        # REPOSTING
        "WEBHOOK_NAME": get_str("WEBHOOK_NAME", "LinkEmbedder"),
        "WEBHOOK_REASON": get_str("WEBHOOK_REASON", "Used for seamless link embedding"),
        "FOLLOWUP_IMAGE_LIMIT": get_int("FOLLOWUP_IMAGE_LIMIT", 2),
    }
    logger.debug("Configuration loaded", extra={"subsys": "config", "event": "config_loaded"})
    return config


def redacted(config: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of the config that is safe to print."""
    return {
        key: ("********" if key in SECRET_KEYS and value else value)
        for key, value in config.items()
    }
