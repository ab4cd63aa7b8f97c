"""
Rumble adapter: video metadata comes from yt-dlp run as a subprocess.
"""
import asyncio
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..exceptions import ExternalToolError, ParseError
from ..formatting import format_duration, truncate
from ..types import CardField, Post, PreviewCard
from ..utils.logging import get_logger
from .base import PlatformAdapter, compile_url_pattern

logger = get_logger(__name__)

TITLE_LIMIT = 256
UPLOADER_LIMIT = 256


@dataclass(frozen=True)
class MediaMetadata:
    """The subset of yt-dlp's info JSON this adapter uses."""

    title: Optional[str]
    thumbnail: Optional[str]
    duration: Optional[float]
    uploader: Optional[str]


def _optional_str(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ParseError(f"{key} should be a string, got {type(value).__name__}")
    return value or None


def decode_media_metadata(data: Any) -> MediaMetadata:
    """Validate yt-dlp's JSON output. Raises ParseError on shape mismatch."""
    if not isinstance(data, dict):
        raise ParseError(f"expected a JSON object, got {type(data).__name__}")
    duration = data.get("duration")
    if duration is not None and (isinstance(duration, bool) or not isinstance(duration, (int, float))):
        raise ParseError(f"duration should be numeric, got {type(duration).__name__}")
    return MediaMetadata(
        title=_optional_str(data, "title"),
        thumbnail=_optional_str(data, "thumbnail"),
        duration=float(duration) if duration is not None else None,
        uploader=_optional_str(data, "uploader"),
    )


class RumbleAdapter(PlatformAdapter):
    id = "rumble"
    display_name = "Rumble"
    accent_color = 0xFFA500
    url_pattern = compile_url_pattern(r"https?://(?:www\.)?rumble\.com/(?:embed/)?v[\w-]+[^\s]*")

    def __init__(self, binary: str = "yt-dlp", timeout: float = 30.0):
        self.binary = binary
        self.timeout = timeout

    def build_command(self, url: str) -> List[str]:
        # Single JSON object, no playlist expansion, no warnings on stderr
        return [self.binary, "-j", "--no-playlist", "--no-warnings", url]

    async def fetch_metadata(self, url: str) -> Dict[str, Any]:
        """
        Run yt-dlp against the URL and return its decoded JSON output.

        Raises:
            ExternalToolError: binary missing, timeout, nonzero exit or non-JSON output
        """
        cmd = self.build_command(url)
        logger.debug("yt-dlp metadata cmd: %s", " ".join(cmd[:-1] + ["<URL>"]))
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ExternalToolError(f"could not start {self.binary}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
            raise ExternalToolError(f"yt-dlp timed out after {self.timeout:.0f}s")

        if proc.returncode != 0:
            error_msg = stderr.decode(errors="replace").strip() if stderr else "unknown error"
            raise ExternalToolError(f"yt-dlp exited with {proc.returncode}: {error_msg}")

        try:
            return json.loads(stdout.decode(errors="replace"))
        except json.JSONDecodeError as e:
            raise ExternalToolError(f"yt-dlp printed malformed JSON: {e}") from e

    async def normalize(self, url: str) -> Optional[Post]:
        try:
            metadata = decode_media_metadata(await self.fetch_metadata(url))
        except (ExternalToolError, ParseError) as e:
            logger.warning(
                f"Rumble metadata unavailable for {url}: {e}",
                extra={"subsys": "platforms", "event": "not_found", "platform": self.id},
            )
            return None

        return Post(
            platform_id=self.id,
            accent_color=self.accent_color,
            url=url,
            title=metadata.title,
            author=metadata.uploader,
            duration_seconds=metadata.duration,
            images=(metadata.thumbnail,) if metadata.thumbnail else (),
        )

    def render(self, post: Post) -> PreviewCard:
        fields = []
        if post.duration_seconds:
            fields.append(CardField("Duration", format_duration(post.duration_seconds)))
        if post.author:
            fields.append(CardField("Uploader", truncate(post.author, UPLOADER_LIMIT)))

        return PreviewCard(
            color=post.accent_color,
            source_url=post.url,
            title=truncate(post.title, TITLE_LIMIT) if post.title else "Untitled",
            thumbnail=post.images[0] if post.images else None,
            fields=tuple(fields),
            footer=self.display_name,
        )
