"""Gateway client for the link embedder."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import discord

from embedder.avatar_cache import AvatarCache
from embedder.context import AppContext
from embedder.dispatcher import Dispatcher
from embedder.platforms import PlatformAdapter, default_adapters
from embedder.reposter import Reposter
from embedder.tasks import TaskManager
from embedder.types import IncomingMessage
from embedder.utils.logging import get_logger


class LinkEmbedBot(discord.Client):
    """Discord client that wires gateway events into the dispatcher."""

    def __init__(
        self,
        *args: Any,
        config: Optional[Dict[str, Any]] = None,
        adapters: Optional[List[PlatformAdapter]] = None,
        **kwargs: Any,
    ):
        if "intents" not in kwargs:
            kwargs["intents"] = discord.Intents.none()
        super().__init__(*args, **kwargs)
        self.config = config or {}
        self.logger = get_logger(__name__)

        avatar_cache = AvatarCache(
            self.config.get("AVATAR_CACHE_DIR", "avatar_cache"),
            max_age_days=self.config.get("AVATAR_CACHE_MAX_AGE_DAYS", 7),
        )
        self.context = AppContext(
            client=self,
            avatar_cache=avatar_cache,
            adapters=adapters if adapters is not None else default_adapters(self.config),
            config=self.config,
        )
        self.reposter = Reposter(self.context)
        self.dispatcher = Dispatcher(self.context, self.reposter)
        self.task_manager = TaskManager(
            avatar_cache,
            sweep_interval_hours=self.config.get("CACHE_SWEEP_INTERVAL_HOURS", 24.0),
        )

    async def setup_hook(self) -> None:
        try:
            self.context.avatar_cache.ensure_directory()
        except OSError as e:
            self.logger.error(f"Failed to create cache directory: {e}", extra={"subsys": "core"})
        await self.task_manager.start_all_tasks()

    async def on_ready(self) -> None:
        adapters = ", ".join(adapter.id for adapter in self.context.adapters)
        self.logger.info(
            f"Bot running as {self.user} (adapters: {adapters})",
            extra={"subsys": "core", "event": "ready"},
        )

    async def on_message(self, message: discord.Message) -> None:
        await self.dispatcher.handle(IncomingMessage.from_discord(message))

    async def on_error(self, event_method: str, *args: Any, **kwargs: Any) -> None:
        self.logger.exception(
            f"Discord client error in {event_method}",
            extra={"subsys": "core", "event": "client_error"},
        )

    async def close(self) -> None:
        await self.task_manager.stop_all_tasks()
        await super().close()
