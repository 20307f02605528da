"""Background tasks used for network and decode work."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from typing import Any

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal, Slot

__all__ = ["TaskRunner", "TaskWorker", "TaskWorkerSignals"]

logger = logging.getLogger(__name__)

ResultCallback = Callable[[Any], None]
ErrorCallback = Callable[[BaseException], None]


class TaskWorkerSignals(QObject):
    """Signals emitted by :class:`TaskWorker`."""

    result = Signal(int, object)
    error = Signal(int, object)


class TaskWorker(QRunnable):
    """Run *func* on the thread pool and report the outcome via signals."""

    def __init__(self, token: int, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        super().__init__()
        self._token = token
        self._func = func
        self._args = args
        self._kwargs = kwargs
        self.signals = TaskWorkerSignals()

    @property
    def token(self) -> int:
        return self._token

    def run(self) -> None:  # pragma: no cover - executed via Qt threads
        try:
            value = self._func(*self._args, **self._kwargs)
        except Exception as exc:  # noqa: BLE001 - forwarded to the UI thread
            logger.debug("Background task %s failed: %s", self._token, exc)
            self.signals.error.emit(self._token, exc)
        else:
            self.signals.result.emit(self._token, value)


class TaskRunner(QObject):
    """Start :class:`TaskWorker` instances and keep them alive until they finish.

    Completion callbacks run on the thread owning the runner, so handlers may
    mutate widget and catalog state directly.
    """

    def __init__(self, parent: QObject | None = None, *, thread_pool: QThreadPool | None = None) -> None:
        super().__init__(parent)
        self._thread_pool = thread_pool or QThreadPool.globalInstance()
        self._counter = itertools.count(1)
        self._workers: dict[int, TaskWorker] = {}
        self._callbacks: dict[int, tuple[ResultCallback | None, ErrorCallback | None]] = {}

    def submit(
        self,
        func: Callable[..., Any],
        *args: Any,
        on_result: ResultCallback | None = None,
        on_error: ErrorCallback | None = None,
        **kwargs: Any,
    ) -> int:
        """Run ``func(*args, **kwargs)`` in the background and return its token."""

        token = next(self._counter)
        worker = TaskWorker(token, func, *args, **kwargs)
        worker.signals.result.connect(self._handle_result)
        worker.signals.error.connect(self._handle_error)
        self._workers[token] = worker
        self._callbacks[token] = (on_result, on_error)
        self._thread_pool.start(worker)
        return token

    def pending(self) -> int:
        return len(self._workers)

    @Slot(int, object)
    def _handle_result(self, token: int, value: Any) -> None:
        self._workers.pop(token, None)
        on_result, _ = self._callbacks.pop(token, (None, None))
        if on_result is not None:
            on_result(value)

    @Slot(int, object)
    def _handle_error(self, token: int, exc: Any) -> None:
        self._workers.pop(token, None)
        _, on_error = self._callbacks.pop(token, (None, None))
        if on_error is not None:
            on_error(exc)
        else:
            logger.error("Unhandled background failure: %s", exc)
