"""Task log adapter backed by structlog."""

import structlog

from onegeo_connector.domain.ports import TaskLogPort
from onegeo_connector.domain.types import JsonValue


class StructlogTaskLog(TaskLogPort):
    """Forwards host task log calls to structlog."""

    def __init__(self, **context: JsonValue) -> None:
        """Initialize task log with context bound to every entry."""
        self.logger = structlog.get_logger().bind(**context)
        self.totals: dict[str, int | None] = {}

    async def step(self, message: str) -> None:
        self.logger.info("step", message=message)

    async def info(self, message: str, **context: JsonValue) -> None:
        self.logger.info("info", message=message, **context)

    async def warning(self, message: str, **context: JsonValue) -> None:
        self.logger.warning("warning", message=message, **context)

    async def error(self, message: str, **context: JsonValue) -> None:
        self.logger.error("error", message=message, **context)

    async def task(self, key: str, message: str, total: int | None = None) -> None:
        self.totals[key] = total
        self.logger.info("task_started", key=key, message=message, total=total)

    async def progress(self, key: str, value: int) -> None:
        total = self.totals.get(key)
        percent = round(100 * value / total, 1) if total else None
        self.logger.debug("task_progress", key=key, value=value, total=total, percent=percent)
