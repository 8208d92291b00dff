"""Scheduled refreshes of the sanctions document.

Runs an UpdateCoordinator periodically on an asyncio loop. The refresh
itself is blocking (fetch plus file I/O) and runs in a worker thread.
"""

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import BaseModel, Field

from sanctionwatch.config.settings import UpdateFrequency, get_settings
from sanctionwatch.core.logging import get_logger

from .updater import RefreshResult, UpdateCoordinator

logger = get_logger(__name__)


class RefreshSchedulerConfig(BaseModel):
    """Configuration for the refresh scheduler.

    Attributes:
        enabled: Whether the scheduler is enabled.
        frequency: How often to refresh (default from settings).
        retry_attempts: Number of retry attempts on failure.
        retry_delay_seconds: Delay between retries.
    """

    enabled: bool = True
    frequency: UpdateFrequency = Field(default_factory=lambda: get_settings().refresh_frequency)
    retry_attempts: int = Field(ge=0, default=3)
    retry_delay_seconds: int = Field(ge=0, default=60)


class RefreshScheduler:
    """Scheduler for sanctions document refreshes.

    Usage:
        scheduler = RefreshScheduler(coordinator)
        scheduler.set_on_error_callback(alert_operator)

        await scheduler.start()
        ...
        await scheduler.stop()
    """

    def __init__(
        self,
        coordinator: UpdateCoordinator,
        config: RefreshSchedulerConfig | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            coordinator: Coordinator performing each refresh.
            config: Optional scheduler configuration.
        """
        self._coordinator = coordinator
        self._config = config or RefreshSchedulerConfig()
        self._running = False
        self._task: asyncio.Task[None] | None = None
        self._lock: asyncio.Lock | None = None
        self._last_refresh: datetime | None = None
        self._last_result: RefreshResult | None = None
        self._last_error: str | None = None
        self._on_refresh_callback: Callable[[RefreshResult], Any] | None = None
        self._on_error_callback: Callable[[Exception], Any] | None = None

        logger.info(
            "refresh_scheduler_initialized",
            enabled=self._config.enabled,
            frequency=self._config.frequency.value,
        )

    @property
    def is_running(self) -> bool:
        """Check if the scheduler is running."""
        return self._running

    @property
    def config(self) -> RefreshSchedulerConfig:
        """Get the scheduler configuration."""
        return self._config

    @property
    def last_result(self) -> RefreshResult | None:
        return self._last_result

    def set_on_refresh_callback(self, callback: Callable[[RefreshResult], Any]) -> None:
        """Set callback for successful refreshes."""
        self._on_refresh_callback = callback

    def set_on_error_callback(self, callback: Callable[[Exception], Any]) -> None:
        """Set callback for refreshes that failed after all retries."""
        self._on_error_callback = callback

    async def start(self) -> None:
        """Start periodic refreshes."""
        if not self._config.enabled:
            logger.warning("refresh_scheduler_disabled")
            return

        if self._running:
            logger.warning("refresh_scheduler_already_running")
            return

        self._running = True
        self._task = asyncio.create_task(self._refresh_loop(), name="sanctions_refresh")
        logger.info("refresh_scheduler_started")

    async def stop(self) -> None:
        """Stop the scheduler and cancel the pending refresh."""
        if not self._running:
            return

        self._running = False
        if self._task is not None:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None

        logger.info("refresh_scheduler_stopped")

    async def trigger_refresh(self, *, force: bool = False) -> RefreshResult | None:
        """Run a refresh now.

        Args:
            force: Refresh even if the last one was recent (within a quarter
                of the configured interval).

        Returns:
            The refresh result, the previous result if skipped, or None if
            every attempt failed.
        """
        if not force and self._last_refresh is not None:
            min_interval = timedelta(seconds=self._config.frequency.to_seconds() // 4)
            if datetime.now(UTC) - self._last_refresh < min_interval:
                logger.info("refresh_skipped_recent")
                return self._last_result

        return await self._execute_refresh()

    def get_status(self) -> dict[str, Any]:
        """Get scheduler status summary."""
        return {
            "running": self._running,
            "enabled": self._config.enabled,
            "frequency": self._config.frequency.value,
            "last_refresh": self._last_refresh.isoformat() if self._last_refresh else None,
            "last_changed": self._last_result.changed if self._last_result else None,
            "last_error": self._last_error,
        }

    async def _refresh_loop(self) -> None:
        interval_seconds = self._config.frequency.to_seconds()
        logger.info("refresh_loop_started", interval_seconds=interval_seconds)

        while self._running:
            try:
                await self._execute_refresh()
                await asyncio.sleep(interval_seconds)
            except asyncio.CancelledError:
                break

    async def _execute_refresh(self) -> RefreshResult | None:
        """Refresh with retries; failures are reported, not raised."""
        if self._lock is None:
            self._lock = asyncio.Lock()

        async with self._lock:
            last_error: Exception | None = None
            for attempt in range(self._config.retry_attempts + 1):
                try:
                    result = await asyncio.to_thread(self._coordinator.refresh)
                except Exception as e:
                    last_error = e
                    if attempt < self._config.retry_attempts:
                        logger.warning(
                            "refresh_retry",
                            attempt=attempt + 1,
                            max_attempts=self._config.retry_attempts + 1,
                            error=str(e),
                        )
                        await asyncio.sleep(self._config.retry_delay_seconds)
                    continue

                self._last_refresh = result.completed_at
                self._last_result = result
                self._last_error = None
                await self._invoke_callback(self._on_refresh_callback, result)
                return result

            self._last_error = str(last_error) if last_error else "Unknown error"
            logger.error(
                "refresh_failed",
                attempts=self._config.retry_attempts + 1,
                error=self._last_error,
            )
            if last_error is not None:
                await self._invoke_callback(self._on_error_callback, last_error)
            return None

    async def _invoke_callback(self, callback: Callable[..., Any] | None, arg: Any) -> None:
        if callback is None:
            return
        try:
            callback_result = callback(arg)
            if asyncio.iscoroutine(callback_result):
                await callback_result
        except Exception as cb_error:
            logger.warning("refresh_callback_error", error=str(cb_error))
