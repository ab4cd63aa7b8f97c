"""
On-disk cache of author avatars, one PNG per user id.

Writes go to a uniquely named partial file that is renamed into place, so a
failed write never leaves a truncated avatar behind. Writes for the same
user are not serialized; concurrent writers store the same bytes and the
last rename wins.
"""
import asyncio
import time
import uuid
from pathlib import Path
from typing import Awaitable, Callable, Optional

import aiofiles
import aiofiles.os

from .exceptions import TransportError
from .utils.logging import get_logger
from .web import fetch_bytes

logger = get_logger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60
AVATAR_EXTENSION = ".png"
PARTIAL_EXTENSION = ".part"


class AvatarCache:
    """Keyed by user id; entries expire by modification time."""

    def __init__(
        self,
        directory: Path,
        max_age_days: float = 7,
        fetch: Callable[[str], Awaitable[bytes]] = fetch_bytes,
    ):
        self.directory = Path(directory)
        self.max_age_seconds = max_age_days * SECONDS_PER_DAY
        self.fetch = fetch

    def ensure_directory(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        logger.info(f"Avatar cache directory ready: {self.directory}", extra={"subsys": "cache"})

    def path_for(self, user_id: int) -> Path:
        return self.directory / f"{user_id}{AVATAR_EXTENSION}"

    async def ensure(self, user_id: int, avatar_url: Optional[str]) -> Optional[Path]:
        """
        Make sure the user's avatar is cached and return its path.

        A hit refreshes the file's modification time so active users are not
        swept. Download or write failures are logged and yield None.
        """
        path = self.path_for(user_id)
        if await aiofiles.os.path.exists(path):
            try:
                await asyncio.to_thread(path.touch)
            except OSError as e:
                logger.debug(f"Could not refresh {path}: {e}", extra={"subsys": "cache"})
            return path

        if not avatar_url:
            return None

        # Only complete files ever appear under the final name
        partial = path.with_name(f"{path.name}.{uuid.uuid4().hex}{PARTIAL_EXTENSION}")
        try:
            data = await self.fetch(avatar_url)
            async with aiofiles.open(partial, "wb") as f:
                await f.write(data)
            await aiofiles.os.replace(partial, path)
        except (TransportError, OSError) as e:
            logger.warning(
                f"Failed to cache avatar for user {user_id}: {e}",
                extra={"subsys": "cache", "event": "avatar_cache_failed", "user_id": user_id},
            )
            await self._discard(partial)
            return None

        logger.debug(f"Cached avatar for user {user_id}", extra={"subsys": "cache", "user_id": user_id})
        return path

    async def _discard(self, path: Path) -> None:
        try:
            if await aiofiles.os.path.exists(path):
                await aiofiles.os.remove(path)
        except OSError as e:
            logger.warning(f"Could not remove partial file {path}: {e}", extra={"subsys": "cache"})

    async def sweep(self, now: Optional[float] = None) -> int:
        """Delete entries whose modification time is older than the max age. Returns the count removed."""
        now = time.time() if now is None else now
        cutoff = now - self.max_age_seconds
        removed = 0

        try:
            names = await aiofiles.os.listdir(self.directory)
        except OSError as e:
            logger.error(f"Cache cleanup error: {e}", extra={"subsys": "cache", "event": "sweep_failed"})
            return 0

        for name in names:
            path = self.directory / name
            try:
                stats = await aiofiles.os.stat(path)
                if stats.st_mtime < cutoff:
                    await aiofiles.os.remove(path)
                    removed += 1
            except OSError as e:
                logger.warning(f"Error deleting cache file {path}: {e}", extra={"subsys": "cache"})

        logger.info(
            f"Avatar cache sweep removed {removed} file(s)",
            extra={"subsys": "cache", "event": "sweep_done"},
        )
        return removed
