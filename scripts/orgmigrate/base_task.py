"""Abstract base class for migration tasks."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod

from scripts.orgmigrate.config import MigrationConfig

logger = logging.getLogger("orgmigrate.task")


class BaseTask(ABC):
    """Each task overrides run() and declares TASK_NAME."""

    TASK_NAME: str = ""

    def __init__(self, config: MigrationConfig) -> None:
        self.config = config

    @abstractmethod
    def run(self) -> dict[str, int]:
        """Run the task. Returns {counter_name: value}."""

    def run_with_tracking(self) -> dict[str, int]:
        """Wrap run() with timing and failure logging. Failures are re-raised."""
        started = time.monotonic()
        logger.info("Starting %s", self.TASK_NAME, extra={"task": self.TASK_NAME})
        try:
            results = self.run()
        except Exception as exc:
            logger.error(
                "Task %s failed: %s",
                self.TASK_NAME,
                exc,
                exc_info=True,
                extra={
                    "task": self.TASK_NAME,
                    "duration_s": round(time.monotonic() - started, 3),
                },
            )
            raise
        logger.info(
            "Task %s complete: %s",
            self.TASK_NAME,
            results,
            extra={
                "task": self.TASK_NAME,
                "records": sum(results.values()),
                "duration_s": round(time.monotonic() - started, 3),
            },
        )
        return results
