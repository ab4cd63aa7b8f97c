"""
Reposting of rendered preview cards under the original author's identity.
"""
from typing import Any, Optional

import discord

from .context import AppContext
from .embeds import image_embeds, to_discord_embed
from .types import IncomingMessage, RepostContext
from .utils.logging import get_logger

logger = get_logger(__name__)


def _log_extra(message: IncomingMessage, event: str, **kwargs: Any) -> dict:
    extra = {
        "subsys": "repost",
        "event": event,
        "guild_id": message.guild_id,
        "channel_id": getattr(message.channel, "id", None),
        "user_id": message.author_id,
        "msg_id": message.message_id,
    }
    extra.update(kwargs)
    return extra


class Reposter:
    """Posts cards through a per-channel webhook, falling back to a plain bot message."""

    def __init__(self, context: AppContext):
        self.context = context
        config = context.config
        self.webhook_name = config.get("WEBHOOK_NAME", "LinkEmbedder")
        self.webhook_reason = config.get("WEBHOOK_REASON", "Used for seamless link embedding")
        self.followup_image_limit = config.get("FOLLOWUP_IMAGE_LIMIT", 2)

    async def _bot_avatar_bytes(self) -> Optional[bytes]:
        user = self.context.client.user
        try:
            return await user.display_avatar.read()
        except (AttributeError, discord.HTTPException) as e:
            logger.debug(f"Could not read bot avatar for webhook: {e}", extra={"subsys": "repost"})
            return None

    async def get_channel_webhook(self, channel: Any) -> Optional[discord.Webhook]:
        """
        Find this bot's webhook in the channel, creating one if absent.

        Threads use their parent channel's webhook. Returns None when the
        channel does not support webhooks or the bot lacks permission.

        Lookup-then-create is not atomic; two first messages racing in the
        same channel can each create a webhook.
        """
        target = channel.parent if isinstance(channel, discord.Thread) else channel
        if target is None or not hasattr(target, "webhooks"):
            return None

        bot_user = self.context.client.user
        try:
            webhooks = await target.webhooks()
            for webhook in webhooks:
                if webhook.user is not None and webhook.user.id == bot_user.id:
                    return webhook

            webhook = await target.create_webhook(
                name=self.webhook_name,
                avatar=await self._bot_avatar_bytes(),
                reason=self.webhook_reason,
            )
            logger.info(
                f"Created webhook in channel {target.id}",
                extra={"subsys": "repost", "event": "webhook_created", "channel_id": target.id},
            )
            return webhook
        except discord.HTTPException as e:
            logger.error(f"Webhook error: {e}", extra={"subsys": "repost", "event": "webhook_failed"})
            return None

    async def repost(self, ctx: RepostContext) -> bool:
        """
        Deliver the card and remove the original message.

        Returns True when the card was posted by either path. The original
        message is only deleted after a successful post.
        """
        message = ctx.message
        embed = to_discord_embed(ctx.card)
        webhook = await self.get_channel_webhook(message.channel)

        posted = False
        if webhook is not None:
            await self.context.avatar_cache.ensure(message.author_id, message.author_avatar_url)
            posted = await self._send_as_author(webhook, message, content=ctx.body, embeds=[embed])

        if not posted:
            posted = await self._send_as_bot(message, ctx.body, embed)

        if posted:
            await self._delete_original(message)

        if webhook is not None and ctx.adapter.supports_followup_images:
            await self._send_followup_images(webhook, ctx)

        return posted

    async def _send_as_author(self, webhook: discord.Webhook, message: IncomingMessage, **kwargs: Any) -> bool:
        thread = message.channel if isinstance(message.channel, discord.Thread) else discord.utils.MISSING
        try:
            await webhook.send(
                username=message.author_display_name,
                avatar_url=message.author_avatar_url,
                thread=thread,
                **kwargs,
            )
            return True
        except discord.HTTPException as e:
            logger.error(f"Webhook send failed: {e}", extra=_log_extra(message, "webhook_send_failed"))
            return False

    async def _send_as_bot(self, message: IncomingMessage, body: str, embed: discord.Embed) -> bool:
        try:
            await message.channel.send(content=body, embeds=[embed])
            logger.info("Reposted as bot (no webhook)", extra=_log_extra(message, "fallback_send"))
            return True
        except discord.HTTPException as e:
            logger.error(f"Fallback send failed: {e}", extra=_log_extra(message, "fallback_send_failed"))
            return False

    async def _delete_original(self, message: IncomingMessage) -> None:
        if not message.is_deletable or message.source is None:
            return
        try:
            await message.source.delete()
        except discord.HTTPException as e:
            logger.error(f"Failed to delete message: {e}", extra=_log_extra(message, "delete_failed"))

    async def _send_followup_images(self, webhook: discord.Webhook, ctx: RepostContext) -> None:
        # images[0] is inside the card itself
        extra_images = ctx.post.images[1:1 + self.followup_image_limit]
        if not extra_images:
            return
        sent = await self._send_as_author(
            webhook,
            ctx.message,
            embeds=image_embeds(extra_images, ctx.card.color),
        )
        if not sent:
            logger.error(
                "Failed to send additional images",
                extra=_log_extra(ctx.message, "followup_failed", platform=ctx.adapter_id),
            )
