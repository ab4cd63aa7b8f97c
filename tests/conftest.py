"""
Shared fixtures: gateway doubles and a ready-made application context.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from embedder.context import AppContext
from embedder.types import IncomingMessage

BOT_USER_ID = 99999


class MockTextChannel:
    def __init__(self, channel_id=456):
        self.id = channel_id
        self.name = "general"
        self.send = AsyncMock()
        self.webhooks = AsyncMock(return_value=[])
        self.create_webhook = AsyncMock()


def make_webhook(owner_id=BOT_USER_ID):
    webhook = MagicMock()
    webhook.user = SimpleNamespace(id=owner_id)
    webhook.send = AsyncMock()
    return webhook


def make_message(text, channel=None, is_bot=False, is_deletable=True):
    return IncomingMessage(
        text=text,
        author_id=12345,
        author_display_name="TestUser",
        author_avatar_url="https://cdn.discordapp.com/avatars/12345/abc.png",
        channel=channel or MockTextChannel(),
        is_bot=is_bot,
        is_deletable=is_deletable,
        message_id=112233,
        guild_id=789,
        source=SimpleNamespace(delete=AsyncMock()),
    )


@pytest.fixture
def bot_client():
    client = MagicMock()
    client.user = SimpleNamespace(
        id=BOT_USER_ID,
        display_avatar=SimpleNamespace(read=AsyncMock(return_value=b"bot-avatar")),
    )
    return client


@pytest.fixture
def avatar_cache():
    cache = MagicMock()
    cache.ensure = AsyncMock(return_value=None)
    return cache


@pytest.fixture
def app_context(bot_client, avatar_cache):
    return AppContext(client=bot_client, avatar_cache=avatar_cache, adapters=[], config={})
