"""
Message dispatch: match a link, normalize it, render it, hand it to the reposter.
"""
from typing import Optional

import discord

from .context import AppContext
from .exceptions import DispatchError
from .platforms.base import PlatformAdapter
from .reposter import Reposter
from .types import IncomingMessage, Post, PreviewCard, RepostContext
from .utils.logging import get_logger

logger = get_logger(__name__)

URL_PREFILTER = "http"


class Dispatcher:
    """
    Routes one message to at most one adapter.

    Adapters are tried in registration order. An adapter returning NotFound
    lets the next one try; an adapter raising aborts the whole message.
    """

    def __init__(self, context: AppContext, reposter: Reposter):
        self.context = context
        self.reposter = reposter

    async def handle(self, message: IncomingMessage) -> Optional[RepostContext]:
        if message.is_bot:
            return None
        # Cheap check before running any pattern
        if URL_PREFILTER not in message.text:
            return None

        for adapter in self.context.adapters:
            url = adapter.match(message.text)
            if url is None:
                continue

            logger.info(
                f"Processing {adapter.id} URL: {url}",
                extra={"subsys": "dispatch", "event": "match", "platform": adapter.id, "msg_id": message.message_id},
            )
            try:
                ctx = await self._process(adapter, url, message)
            except DispatchError as e:
                logger.error(
                    f"Error processing URL: {e}",
                    exc_info=e.cause,
                    extra={"subsys": "dispatch", "event": "dispatch_failed", "platform": adapter.id},
                )
                await self._notify_error(message, url)
                return None

            if ctx is None:
                continue
            return ctx

        return None

    async def _process(self, adapter: PlatformAdapter, url: str, message: IncomingMessage) -> Optional[RepostContext]:
        post = await self._normalize(adapter, url)
        if post is None:
            logger.info(
                f"No post for {url}; trying remaining adapters",
                extra={"subsys": "dispatch", "event": "not_found", "platform": adapter.id},
            )
            return None

        card = self._render(adapter, url, post)
        ctx = RepostContext(
            adapter=adapter,
            url=url,
            caption=message.text.replace(url, "", 1).strip(),
            post=post,
            card=card,
            message=message,
        )
        await self._deliver(adapter, ctx)
        return ctx

    async def _normalize(self, adapter: PlatformAdapter, url: str) -> Optional[Post]:
        try:
            return await adapter.normalize(url)
        except Exception as e:
            raise DispatchError(adapter.id, url, e) from e

    def _render(self, adapter: PlatformAdapter, url: str, post: Post) -> PreviewCard:
        try:
            return adapter.render(post)
        except Exception as e:
            raise DispatchError(adapter.id, url, e) from e

    async def _deliver(self, adapter: PlatformAdapter, ctx: RepostContext) -> None:
        try:
            await self.reposter.repost(ctx)
        except Exception as e:
            raise DispatchError(adapter.id, ctx.url, e) from e

    async def _notify_error(self, message: IncomingMessage, url: str) -> None:
        try:
            await message.channel.send(content=f"⚠️ Error processing link: {url}")
        except discord.HTTPException as e:
            logger.error(f"Could not post error notice: {e}", extra={"subsys": "dispatch", "event": "notice_failed"})
