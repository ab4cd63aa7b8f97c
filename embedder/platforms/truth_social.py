"""
Truth Social adapter: scrapes the public post page.

Any failure while fetching or parsing degrades to a placeholder Post
instead of propagating, so this adapter never yields NotFound.
"""
from typing import Awaitable, Callable, Dict, Optional
from urllib.parse import urljoin, urlparse

from ..extraction import (
    extract_images,
    extract_text,
    first_image_source,
    meta_content,
    parse_document,
)
from ..formatting import format_post_date, truncate
from ..types import CardAuthor, CardField, Post, PreviewCard
from ..utils.logging import get_logger
from ..web import fetch_html
from .base import PlatformAdapter, compile_url_pattern

logger = get_logger(__name__)

HOSTNAME = "truthsocial.com"
ORIGIN = f"https://{HOSTNAME}/"
PLACEHOLDER_TEXT = "Could not fetch post content."
UNKNOWN_HANDLE = "unknown"

DESCRIPTION_LIMIT = 1000
CARD_IMAGE_LIMIT = 3

CONTENT_SELECTORS = (
    ".post-content",
    ".truth-content",
    ".status__content",
    "article .content",
    ".truth-body",
)
TIME_SELECTORS = (".post-date", ".truth-date", "time", ".status__time")
AUTHOR_SELECTORS = (".post-author", ".truth-author", ".author-name")
AVATAR_SELECTOR = ".avatar img, .profile-image img"

Fetcher = Callable[..., Awaitable[str]]


def handle_from_url(url: str) -> str:
    """The ``@handle`` path segment following the hostname, without the ``@``."""
    try:
        segments = [s for s in urlparse(url).path.split("/") if s]
    except ValueError:
        return UNKNOWN_HANDLE
    if not segments:
        return UNKNOWN_HANDLE
    handle = segments[0]
    handle = handle[1:] if handle.startswith("@") else handle
    return handle or UNKNOWN_HANDLE


class TruthSocialAdapter(PlatformAdapter):
    id = "truth_social"
    display_name = "Truth Social"
    accent_color = 0xFF4500
    url_pattern = compile_url_pattern(r"https?://(?:www\.)?truthsocial\.com/@[\w.]+/posts/\d+[^\s]*")
    supports_followup_images = True

    def __init__(self, fetch: Fetcher = fetch_html, timeout: float = 15.0):
        self.fetch = fetch
        self.timeout = timeout

    def request_headers(self) -> Dict[str, str]:
        return {"Referer": ORIGIN}

    async def normalize(self, url: str) -> Optional[Post]:
        handle = handle_from_url(url)
        try:
            html = await self.fetch(url, headers=self.request_headers(), timeout=self.timeout)
            return self._parse(url, handle, html)
        except Exception as e:
            logger.warning(
                f"Truth Social post degraded for {url}: {e}",
                extra={"subsys": "platforms", "event": "degraded", "platform": self.id},
            )
            return Post(
                platform_id=self.id,
                accent_color=self.accent_color,
                url=url,
                text=PLACEHOLDER_TEXT,
                author_handle=handle,
            )

    def _parse(self, url: str, handle: str, html: str) -> Post:
        doc = parse_document(html)

        text = extract_text(doc, CONTENT_SELECTORS) or meta_content(doc, prop="og:description")
        timestamp = extract_text(doc, TIME_SELECTORS) or meta_content(doc, prop="article:published_time")
        author = extract_text(doc, AUTHOR_SELECTORS) or handle
        avatar = first_image_source(doc, AVATAR_SELECTOR)
        if avatar:
            avatar = urljoin(url, avatar)

        return Post(
            platform_id=self.id,
            accent_color=self.accent_color,
            url=url,
            text=text or None,
            author=author,
            author_handle=handle,
            author_avatar_url=avatar,
            published_display=format_post_date(timestamp) or None,
            images=tuple(extract_images(doc, base_url=url)),
        )

    def render(self, post: Post) -> PreviewCard:
        handle = post.author_handle or UNKNOWN_HANDLE
        fields = ()
        if post.published_display:
            fields = (CardField("Posted", post.published_display),)

        return PreviewCard(
            color=post.accent_color,
            source_url=post.url,
            title=f"Truth by @{handle}",
            description=truncate(post.text, DESCRIPTION_LIMIT, "...") if post.text else None,
            author=CardAuthor(name=post.author or f"@{handle}", icon_url=post.author_avatar_url),
            images=post.images[:CARD_IMAGE_LIMIT],
            fields=fields,
            footer=self.display_name,
        )
