"""Application context shared by the dispatcher and the reposter."""
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .avatar_cache import AvatarCache
from .platforms.base import PlatformAdapter


@dataclass
class AppContext:
    """
    Explicit bundle of the process-wide collaborators.

    ``client`` is the gateway client; only ``client.user`` is read, so tests
    can pass any object exposing it.
    """

    client: Any
    avatar_cache: AvatarCache
    adapters: List[PlatformAdapter]
    config: Dict[str, Any] = field(default_factory=dict)
