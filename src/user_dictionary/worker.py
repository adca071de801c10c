"""Single-flight background worker with cooperative cancellation."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)


class Cancelled(Exception):
    """Raised inside a job that noticed its token was cancelled."""


class CancellationToken:
    """A flag a running job polls to learn it has been superseded."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise Cancelled()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"


Job = Callable[[CancellationToken], None]


class SuggestionWorker:
    """Runs at most one job at a time on a dedicated thread.

    The queue holds a single slot: submitting a job cancels the token of
    the previous submission and replaces any job still waiting to start.
    A job that is already running keeps running until its next
    cancellation check.
    """

    def __init__(self, name: str = "suggestion-worker") -> None:
        self._name = name
        self._cond = threading.Condition()
        self._pending: tuple[Job, CancellationToken] | None = None
        self._latest: CancellationToken | None = None
        self._running = False
        self._closed = False
        self._thread: threading.Thread | None = None

    def submit(self, job: Job) -> CancellationToken:
        """Queue ``job``, superseding every earlier submission."""
        token = CancellationToken()
        with self._cond:
            if self._closed:
                raise RuntimeError("Worker is closed")
            if self._latest is not None:
                self._latest.cancel()
            self._latest = token
            self._pending = (job, token)
            self._ensure_thread()
            self._cond.notify_all()
        return token

    def cancel_all(self) -> None:
        """Cancel the latest submission and drop any waiting job."""
        with self._cond:
            if self._latest is not None:
                self._latest.cancel()
            self._pending = None
            self._cond.notify_all()

    def idle(self, timeout: float | None = None) -> bool:
        """Block until no job is waiting or running. Returns False on timeout."""
        with self._cond:
            return self._cond.wait_for(
                lambda: self._pending is None and not self._running,
                timeout=timeout,
            )

    def close(self, timeout: float | None = 1.0) -> None:
        with self._cond:
            self._closed = True
            if self._latest is not None:
                self._latest.cancel()
            self._pending = None
            self._cond.notify_all()
            thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _ensure_thread(self) -> None:
        if self._thread is None or not self._thread.is_alive():
            self._thread = threading.Thread(
                target=self._run, name=self._name, daemon=True
            )
            self._thread.start()

    def _run(self) -> None:
        while True:
            with self._cond:
                self._cond.wait_for(lambda: self._pending is not None or self._closed)
                if self._closed:
                    return
                job, token = self._pending
                self._pending = None
                self._running = True
            try:
                if not token.cancelled:
                    job(token)
            except Cancelled:
                logger.debug("Suggestion job cancelled")
            except Exception:
                logger.exception("Suggestion job failed")
            finally:
                with self._cond:
                    self._running = False
                    self._cond.notify_all()
