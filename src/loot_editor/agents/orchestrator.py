"""
Thread pool facade that runs agent tasks off the caller's thread.
"""

import logging
import os
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Generic, Optional, Protocol, TypeVar, TYPE_CHECKING

from ..loot_tables.models import DescriptorList
from ..loot_tables.scanner import ModpackScanner

if TYPE_CHECKING:
    from ..settings import ScanSettings

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class AgentTask(Protocol[T_co]):
    """A named unit of work."""

    @property
    def name(self) -> str: ...

    def run(self) -> T_co: ...


@dataclass(frozen=True)
class AgentResult(Generic[T]):
    """Payload of a finished task with its wall-clock duration in seconds."""

    agent_name: str
    payload: T
    duration: float


class ScannerAgentTask:
    """Scans a modpack root and returns its descriptors."""

    name = "modpack-scan"

    def __init__(self, modpack_root: Path, scanner: Optional[ModpackScanner] = None):
        self.modpack_root = Path(modpack_root)
        self.scanner = scanner or ModpackScanner()

    def run(self) -> DescriptorList:
        return self.scanner.scan(self.modpack_root)


def default_worker_count() -> int:
    return max(2, (os.cpu_count() or 1) // 2)


class AgentOrchestrator:
    """Runs agent tasks on a shared thread pool.

    Failures raised by a task are delivered through the returned future.
    """

    def __init__(self, settings: Optional["ScanSettings"] = None):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        workers = settings.max_workers if settings is not None else 0
        self.max_workers = max(2, workers) if workers > 0 else default_worker_count()
        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="agent-worker"
        )
        self.logger.debug(f"Agent pool started with {self.max_workers} workers")

    def submit(self, task: "AgentTask[T]") -> "Future[AgentResult[T]]":
        if task is None:
            raise ValueError("task is required")
        return self._executor.submit(self._execute, task)

    def _execute(self, task: "AgentTask[T]") -> AgentResult[T]:
        start = time.perf_counter()
        try:
            payload = task.run()
        except Exception as e:
            self.logger.error(f"Agent {task.name} failed: {e}")
            raise
        duration = time.perf_counter() - start
        self.logger.debug(f"Agent {task.name} finished in {duration:.3f}s")
        return AgentResult(task.name, payload, duration)

    def shutdown(self, wait: bool = False) -> None:
        """Stop the pool; queued tasks are cancelled."""
        self._executor.shutdown(wait=wait, cancel_futures=True)

    def __enter__(self) -> "AgentOrchestrator":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown(wait=True)
