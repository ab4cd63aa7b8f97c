"""
Data model shared by the adapters, the dispatcher and the reposter.

All records are frozen dataclasses. Optional fields use ``None`` for
"could not extract"; empty strings are never used as a sentinel.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Tuple

if TYPE_CHECKING:
    from .platforms.base import PlatformAdapter


@dataclass(frozen=True)
class IncomingMessage:
    """Immutable snapshot of one gateway message-create event."""

    text: str
    author_id: int
    author_display_name: str
    author_avatar_url: Optional[str]
    channel: Any
    is_bot: bool
    is_deletable: bool
    message_id: Optional[int] = None
    guild_id: Optional[int] = None
    # The live gateway object, needed to delete the original message
    source: Any = field(default=None, compare=False, repr=False)

    @classmethod
    def from_discord(cls, message: Any) -> "IncomingMessage":
        author = message.author
        nickname = getattr(author, "nick", None)
        avatar = getattr(author, "display_avatar", None)
        guild = getattr(message, "guild", None)
        return cls(
            text=message.content or "",
            author_id=author.id,
            author_display_name=nickname or author.name,
            author_avatar_url=str(avatar.url) if avatar is not None else None,
            channel=message.channel,
            is_bot=bool(author.bot) or getattr(message, "webhook_id", None) is not None,
            is_deletable=_can_delete(message),
            message_id=getattr(message, "id", None),
            guild_id=getattr(guild, "id", None),
            source=message,
        )


def _can_delete(message: Any) -> bool:
    """Mirror of the gateway's notion of a deletable message."""
    guild = getattr(message, "guild", None)
    if guild is None:
        return False
    me = getattr(guild, "me", None)
    if me is not None and message.author.id == me.id:
        return True
    try:
        return bool(message.channel.permissions_for(me).manage_messages)
    except (AttributeError, TypeError):
        return False


@dataclass(frozen=True)
class Post:
    """Normalized, platform-agnostic record of one fetched post."""

    platform_id: str
    accent_color: int
    url: str
    title: Optional[str] = None
    text: Optional[str] = None
    author: Optional[str] = None
    author_handle: Optional[str] = None
    author_avatar_url: Optional[str] = None
    published_display: Optional[str] = None
    duration_seconds: Optional[float] = None
    images: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CardField:
    name: str
    value: str
    inline: bool = True


@dataclass(frozen=True)
class CardAuthor:
    name: str
    icon_url: Optional[str] = None


@dataclass(frozen=True)
class PreviewCard:
    """Chat-facing projection of a Post. Built by an adapter's render step."""

    color: int
    source_url: str
    title: Optional[str] = None
    description: Optional[str] = None
    author: Optional[CardAuthor] = None
    thumbnail: Optional[str] = None
    images: Tuple[str, ...] = ()
    fields: Tuple[CardField, ...] = ()
    footer: Optional[str] = None

    @property
    def image(self) -> Optional[str]:
        """The image shown inside the card itself."""
        return self.images[0] if self.images else None


@dataclass(frozen=True)
class RepostContext:
    """Everything the reposter needs for one matched message."""

    adapter: "PlatformAdapter"
    url: str
    caption: str
    post: Post
    card: PreviewCard
    message: IncomingMessage

    @property
    def adapter_id(self) -> str:
        return self.adapter.id

    @property
    def body(self) -> str:
        """Repost message body: caption and URL, or the URL alone."""
        return f"{self.caption}\n{self.url}" if self.caption else self.url
