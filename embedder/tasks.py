"""
Background task management for the bot.
"""
from typing import Any, Dict

from discord.ext import tasks

from .avatar_cache import AvatarCache
from .utils.logging import get_logger

logger = get_logger(__name__)


class TaskManager:
    """Owns the periodic jobs that run independently of message handling."""

    def __init__(self, avatar_cache: AvatarCache, sweep_interval_hours: float = 24.0):
        self.avatar_cache = avatar_cache
        self.sweep_interval_hours = sweep_interval_hours
        self.tasks: Dict[str, tasks.Loop] = {}
        self.running = False

    async def start_all_tasks(self) -> None:
        if self.running:
            logger.warning("Tasks are already running")
            return
        self._start_cache_sweep()
        self.running = True
        logger.info("All background tasks started successfully", extra={"subsys": "tasks"})

    async def stop_all_tasks(self) -> None:
        if not self.running:
            return
        for task_name, task in self.tasks.items():
            task.cancel()
            logger.debug(f"Cancelled task: {task_name}")
        self.tasks.clear()
        self.running = False
        logger.info("All background tasks stopped", extra={"subsys": "tasks"})

    def _start_cache_sweep(self) -> None:
        cache = self.avatar_cache

        @tasks.loop(hours=self.sweep_interval_hours)
        async def avatar_cache_sweep():
            try:
                await cache.sweep()
            except Exception as e:
                logger.error(f"Cache cleanup error: {e}", exc_info=True, extra={"subsys": "tasks"})

        avatar_cache_sweep.start()
        self.tasks["avatar_cache_sweep"] = avatar_cache_sweep
        logger.info(
            f"Avatar cache sweep scheduled every {self.sweep_interval_hours}h",
            extra={"subsys": "tasks", "event": "sweep_scheduled"},
        )

    def status(self) -> Dict[str, Any]:
        return {
            name: {
                "running": task.is_running(),
                "failed": task.failed(),
                "next_iteration": task.next_iteration.isoformat() if task.next_iteration else None,
            }
            for name, task in self.tasks.items()
        }
