"""
Base contract for platform adapters.
"""
import re
from abc import ABC, abstractmethod
from typing import ClassVar, Optional, Pattern

from ..types import Post, PreviewCard


class PlatformAdapter(ABC):
    """
    Matcher, normalizer and renderer for one content platform.

    Adapters are stateless apart from their injected collaborators and are
    registered once at startup; registration order decides which adapter
    wins when several patterns match the same message.
    """

    id: ClassVar[str]
    display_name: ClassVar[str]
    accent_color: ClassVar[int]
    url_pattern: ClassVar[Pattern[str]]
    # Extra post images the reposter may send as follow-up cards
    supports_followup_images: ClassVar[bool] = False

    def match(self, text: str) -> Optional[str]:
        """Return the first URL in ``text`` this adapter handles, if any."""
        found = self.url_pattern.search(text)
        return found.group(0) if found else None

    @abstractmethod
    async def normalize(self, url: str) -> Optional[Post]:
        """
        Fetch the post behind ``url`` and normalize it.

        Returns None (NotFound) when no post could be produced; the
        dispatcher then moves on to the next adapter.
        """

    @abstractmethod
    def render(self, post: Post) -> PreviewCard:
        """Project a Post into a preview card. Must be pure."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r}>"


def compile_url_pattern(pattern: str) -> Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)
