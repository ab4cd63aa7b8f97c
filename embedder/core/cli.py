"""
Handles command-line interface parsing and actions.
"""
import argparse
import sys

from embedder import __version__
from embedder.config import load_config, redacted, validate_required_env
from embedder.exceptions import ConfigurationError
from embedder.utils.logging import get_logger


def parse_arguments(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Discord link embedder")
    parser.add_argument('--debug', action='store_true', help='Enable debug logging.')
    parser.add_argument('--config-check', action='store_true', help='Validate configuration and exit.')
    parser.add_argument('--version', action='store_true', help='Show version info and exit.')
    return parser.parse_args(argv)


def show_version_info():
    print(f"Discord Link Embedder - Version {__version__}")
    print(f"Python Version: {sys.version}")


def validate_configuration_only() -> bool:
    """Validate configuration and log a redacted summary. Returns False on failure."""
    logger = get_logger(__name__)
    try:
        logger.info("--- Running Configuration-Only Validation ---", extra={'subsys': 'core', 'event': 'config_check_start'})
        validate_required_env()
        config = load_config()
    except ConfigurationError as e:
        logger.critical(f"Configuration error: {e}", extra={'subsys': 'core', 'event': 'config_fail'})
        return False

    logger.info("Configuration validation successful. The following settings are active:", extra={'subsys': 'core', 'event': 'config_valid_start'})
    for key, value in redacted(config).items():
        logger.info(f"  • {key}: {value}", extra={'subsys': 'core', 'event': 'config_valid'})
    return True
