"""
Log retrieval by date and asynchronous log export tasks.

Log lines start with a ``YYYY-MM-DD HH:MM:SS`` timestamp (plain and JSON
formats alike), so filtering by date is a substring match on the line.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Sequence

from ordertracker.core.error_handler import GracefulShutdown, safe_background_task
from ordertracker.core.result import NotFoundError, Result, ValidationError, failure, success

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
DEFAULT_MAX_FINISHED_TASKS = 100


class LogTaskStatus(str, Enum):
    CREATED = "CREATED"
    PROCESSING = "PROCESSING"
    READY = "READY"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


FINISHED_STATUSES = frozenset(
    {LogTaskStatus.READY, LogTaskStatus.FAILED, LogTaskStatus.CANCELLED}
)


@dataclass
class LogTask:
    day: date
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: LogTaskStatus = LogTaskStatus.CREATED
    file_path: Optional[Path] = None
    error: Optional[str] = None


def parse_date(raw: str) -> Result[date, ValidationError]:
    try:
        return success(datetime.strptime(raw, DATE_FORMAT).date())
    except (TypeError, ValueError):
        return failure(
            ValidationError(field="date", message=f"Invalid date '{raw}', expected YYYY-MM-DD")
        )


class LogService:
    """
    Args:
        log_files: Returns the log files to search, newest first
        export_dir: Where export tasks write their files
        shutdown: Registry for export tasks, cancelled on application shutdown
        export_delay_seconds: Pause before an export starts writing
        max_finished_tasks: Finished tasks kept for status and download; older ones
            are dropped together with their export files
    """

    def __init__(
        self,
        log_files: Callable[[], Sequence[Path]],
        export_dir: Path,
        *,
        shutdown: Optional[GracefulShutdown] = None,
        export_delay_seconds: float = 0.0,
        max_finished_tasks: int = DEFAULT_MAX_FINISHED_TASKS,
    ) -> None:
        self._log_files = log_files
        self.export_dir = Path(export_dir)
        self._shutdown = shutdown
        self.export_delay_seconds = export_delay_seconds
        self.max_finished_tasks = max_finished_tasks
        self._tasks: dict[str, LogTask] = {}
        self._lock = threading.Lock()

    def lines_for(self, day: date) -> list[str]:
        stamp = day.strftime(DATE_FORMAT)
        lines: list[str] = []
        # Rotated backups hold older lines; read them first.
        for path in reversed(list(self._log_files())):
            try:
                with path.open("r", encoding="utf-8", errors="replace") as handle:
                    lines.extend(line.rstrip("\n") for line in handle if stamp in line)
            except FileNotFoundError:
                continue
        return lines

    def view_logs(self, raw_date: str) -> Result[str, ValidationError | NotFoundError]:
        parsed = parse_date(raw_date)
        if parsed.is_failure():
            return parsed
        if not list(self._log_files()):
            return failure(
                NotFoundError(entity_type="LogFile", entity_id=raw_date, message="Log file not found")
            )

        lines = self.lines_for(parsed.unwrap())
        if not lines:
            return failure(
                NotFoundError(
                    entity_type="LogEntry",
                    entity_id=raw_date,
                    message=f"No logs found for {raw_date}",
                )
            )
        return success("\n".join(lines))

    def create_task(self, raw_date: str) -> Result[LogTask, ValidationError]:
        """Register an export task and start it on the running loop."""
        parsed = parse_date(raw_date)
        if parsed.is_failure():
            return parsed

        task = LogTask(day=parsed.unwrap())
        with self._lock:
            expired = self._prune_finished()
            self._tasks[task.id] = task
        for old in expired:
            self._remove_export(old)
        safe_background_task(f"log_export:{task.id}", self._process(task), shutdown=self._shutdown)
        logger.info("Log export task %s created for %s", task.id, raw_date)
        return success(task)

    def get_task(self, task_id: str) -> Optional[LogTask]:
        with self._lock:
            return self._tasks.get(task_id)

    def _prune_finished(self) -> list[LogTask]:
        # Caller holds self._lock. Dict order is creation order.
        finished = [task for task in self._tasks.values() if task.status in FINISHED_STATUSES]
        expired = finished[: max(len(finished) - self.max_finished_tasks, 0)]
        for task in expired:
            del self._tasks[task.id]
        return expired

    def _remove_export(self, task: LogTask) -> None:
        if task.file_path is None:
            return
        try:
            task.file_path.unlink(missing_ok=True)
        except OSError:
            logger.warning("Cannot remove expired log export %s", task.file_path, exc_info=True)

    async def _process(self, task: LogTask) -> None:
        task.status = LogTaskStatus.PROCESSING
        try:
            if self.export_delay_seconds > 0:
                await asyncio.sleep(self.export_delay_seconds)
            task.file_path = await asyncio.to_thread(self._write_export, task)
        except asyncio.CancelledError:
            task.status = LogTaskStatus.CANCELLED
            raise
        except OSError as exc:
            task.status = LogTaskStatus.FAILED
            task.error = str(exc)
            logger.error("Log export task %s failed", task.id, exc_info=True)
            return
        task.status = LogTaskStatus.READY
        logger.info("Log export task %s ready: %s", task.id, task.file_path)

    def _write_export(self, task: LogTask) -> Path:
        self.export_dir.mkdir(parents=True, exist_ok=True)
        path = self.export_dir / f"logs-{task.day.strftime(DATE_FORMAT)}-{task.id}.log"
        lines = self.lines_for(task.day)
        path.write_text("\n".join(lines) + ("\n" if lines else ""), encoding="utf-8")
        return path


__all__ = ["DATE_FORMAT", "FINISHED_STATUSES", "LogService", "LogTask", "LogTaskStatus", "parse_date"]
