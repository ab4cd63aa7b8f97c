"""
Tests for the shared data model and gateway message snapshotting.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

from embedder.types import IncomingMessage, PreviewCard


def gateway_message(author_id=1, nick=None, bot=False, webhook_id=None, guild=True, manage_messages=False):
    author = SimpleNamespace(
        id=author_id,
        name="user_name",
        nick=nick,
        bot=bot,
        display_avatar=SimpleNamespace(url="https://cdn.discordapp.com/avatars/1/a.png"),
    )
    channel = MagicMock()
    channel.permissions_for.return_value = SimpleNamespace(manage_messages=manage_messages)
    return SimpleNamespace(
        id=555,
        content="hello https://rumble.com/v1",
        author=author,
        channel=channel,
        guild=SimpleNamespace(id=777, me=SimpleNamespace(id=99999)) if guild else None,
        webhook_id=webhook_id,
    )


class TestFromDiscord:
    def test_snapshot_fields(self):
        raw = gateway_message(nick="Nick")
        message = IncomingMessage.from_discord(raw)

        assert message.text == "hello https://rumble.com/v1"
        assert message.author_id == 1
        assert message.author_display_name == "Nick"
        assert message.author_avatar_url == "https://cdn.discordapp.com/avatars/1/a.png"
        assert message.message_id == 555
        assert message.guild_id == 777
        assert message.is_bot is False
        assert message.source is raw

    def test_name_used_without_nickname(self):
        assert IncomingMessage.from_discord(gateway_message()).author_display_name == "user_name"

    def test_bots_and_webhooks_count_as_bots(self):
        assert IncomingMessage.from_discord(gateway_message(bot=True)).is_bot
        assert IncomingMessage.from_discord(gateway_message(webhook_id=123)).is_bot

    def test_deletable_with_manage_messages(self):
        assert IncomingMessage.from_discord(gateway_message(manage_messages=True)).is_deletable
        assert not IncomingMessage.from_discord(gateway_message(manage_messages=False)).is_deletable

    def test_own_messages_are_deletable(self):
        assert IncomingMessage.from_discord(gateway_message(author_id=99999)).is_deletable

    def test_direct_messages_are_not_deletable(self):
        message = IncomingMessage.from_discord(gateway_message(guild=False, manage_messages=True))
        assert not message.is_deletable
        assert message.guild_id is None


class TestPreviewCard:
    def test_image_is_first_of_images(self):
        card = PreviewCard(color=1, source_url="u", images=("a", "b"))
        assert card.image == "a"
        assert PreviewCard(color=1, source_url="u").image is None
