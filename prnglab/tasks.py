"""Background execution of long generation and test jobs.

The engine itself is synchronous.  :class:`TaskRunner` runs jobs on a bounded
thread pool and hands each job its own :class:`threading.Event`; generators
poll that event between steps, so cancelling a handle stops a run early with
:class:`~prnglab.errors.GenerationCancelledError`.
"""

from __future__ import annotations

import os
import threading
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Mapping, Optional, Set, Tuple

from .errors import GenerationCancelledError, InvalidParameterError
from .generators import GeneratedSequence, GeneratorParameters, generate

DEFAULT_MAX_WORKERS = 4

Job = Callable[[threading.Event], Any]

COMPLETED = "completed"
FAILED = "failed"
CANCELLED = "cancelled"


@dataclass(frozen=True)
class TaskOutcome:
    """Final state of a submitted job."""

    name: str
    status: str
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.status == COMPLETED


class TaskHandle:
    """Reference to a running job and its cancellation event."""

    def __init__(self, name: str, future: "Future[Any]", event: threading.Event) -> None:
        self.name = name
        self._future = future
        self._event = event

    @property
    def cancel_event(self) -> threading.Event:
        return self._event

    def cancel(self) -> None:
        """Ask the job to stop; a job that has not started yet never runs."""

        self._event.set()
        self._future.cancel()

    def done(self) -> bool:
        return self._future.done()

    def outcome(self, timeout: float | None = None) -> TaskOutcome:
        """Wait for the job and describe how it ended."""

        try:
            error = self._future.exception(timeout=timeout)
        except CancelledError:
            return TaskOutcome(name=self.name, status=CANCELLED)
        if error is None:
            return TaskOutcome(name=self.name, status=COMPLETED, value=self._future.result())
        if isinstance(error, GenerationCancelledError):
            return TaskOutcome(name=self.name, status=CANCELLED, error=error)
        return TaskOutcome(name=self.name, status=FAILED, error=error)


class TaskRunner:
    """Bounded thread pool for generation and battery jobs."""

    def __init__(self, max_workers: int | None = None) -> None:
        if max_workers is None:
            max_workers = min(os.cpu_count() or 1, DEFAULT_MAX_WORKERS)
        if max_workers <= 0:
            raise InvalidParameterError("max_workers must be greater than zero.")
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="prnglab")
        self._handles: Set[TaskHandle] = set()
        self._lock = threading.Lock()

    def __enter__(self) -> "TaskRunner":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown(cancel_pending=exc_info[0] is not None)

    def submit(self, name: str, job: Job) -> TaskHandle:
        """Run ``job(cancel_event)`` in the pool."""

        event = threading.Event()
        future = self._executor.submit(job, event)
        handle = TaskHandle(name, future, event)
        with self._lock:
            self._handles.add(handle)
        # Finished jobs are forgotten; callers keep their own handles.
        future.add_done_callback(lambda _: self._forget(handle))
        return handle

    @property
    def pending(self) -> int:
        """Number of submitted jobs that have not finished yet."""

        with self._lock:
            return len(self._handles)

    def _forget(self, handle: TaskHandle) -> None:
        with self._lock:
            self._handles.discard(handle)

    def submit_generation(
        self,
        algorithm: str,
        params: GeneratorParameters,
        *,
        name: str | None = None,
        **options: Any,
    ) -> TaskHandle:
        """Schedule :func:`~prnglab.generators.generate` with a fresh cancel event."""

        def job(event: threading.Event) -> GeneratedSequence:
            return generate(algorithm, params, cancel_event=event, **options)

        return self.submit(name or algorithm, job)

    def run_all(self, jobs: Mapping[str, Job] | Iterable[Tuple[str, Job]]) -> List[TaskOutcome]:
        """Run ``jobs`` concurrently and return their outcomes in submission order."""

        items = jobs.items() if isinstance(jobs, Mapping) else jobs
        handles = [self.submit(name, job) for name, job in items]
        return [handle.outcome() for handle in handles]

    def cancel_all(self) -> None:
        with self._lock:
            handles = list(self._handles)
        for handle in handles:
            handle.cancel()

    def shutdown(self, *, cancel_pending: bool = False) -> None:
        if cancel_pending:
            self.cancel_all()
        self._executor.shutdown(wait=True, cancel_futures=cancel_pending)


__all__ = [
    "CANCELLED",
    "COMPLETED",
    "DEFAULT_MAX_WORKERS",
    "FAILED",
    "TaskHandle",
    "TaskOutcome",
    "TaskRunner",
]
