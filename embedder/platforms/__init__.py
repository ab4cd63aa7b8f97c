"""
Platform adapter registry.

Order matters: the dispatcher tries adapters in this order and the first
pattern that matches a message wins.
"""
from typing import Any, Dict, List, Optional

from .base import PlatformAdapter
from .rumble import RumbleAdapter
from .truth_social import TruthSocialAdapter


def default_adapters(config: Optional[Dict[str, Any]] = None) -> List[PlatformAdapter]:
    config = config or {}
    return [
        RumbleAdapter(
            binary=config.get("YTDLP_BINARY", "yt-dlp"),
            timeout=config.get("YTDLP_METADATA_TIMEOUT_S", 30.0),
        ),
        TruthSocialAdapter(timeout=config.get("FETCH_TIMEOUT_S", 15.0)),
    ]


__all__ = ["PlatformAdapter", "RumbleAdapter", "TruthSocialAdapter", "default_adapters"]
