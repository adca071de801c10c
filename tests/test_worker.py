"""Tests for the single-flight suggestion worker."""

import threading

import pytest

from user_dictionary.worker import Cancelled, CancellationToken, SuggestionWorker


@pytest.fixture
def worker():
    w = SuggestionWorker()
    yield w
    w.close()


class TestCancellationToken:

    def test_starts_active(self):
        token = CancellationToken()
        assert not token.cancelled
        token.raise_if_cancelled()

    def test_cancel(self):
        token = CancellationToken()
        token.cancel()
        assert token.cancelled
        with pytest.raises(Cancelled):
            token.raise_if_cancelled()


class TestSuggestionWorker:

    def test_runs_job(self, worker):
        ran = threading.Event()
        worker.submit(lambda token: ran.set())
        assert ran.wait(5)

    def test_runs_off_the_calling_thread(self, worker):
        threads = []
        worker.submit(lambda token: threads.append(threading.current_thread()))
        assert worker.idle(5)
        assert threads and threads[0] is not threading.current_thread()

    def test_new_submission_cancels_previous(self, worker):
        first = worker.submit(lambda token: None)
        second = worker.submit(lambda token: None)
        assert first.cancelled
        assert not second.cancelled

    def test_waiting_job_is_replaced(self, worker):
        started = threading.Event()
        release = threading.Event()
        ran = []

        def blocker(token):
            started.set()
            release.wait(5)

        worker.submit(blocker)
        assert started.wait(5)
        worker.submit(lambda token: ran.append("second"))
        worker.submit(lambda token: ran.append("third"))
        release.set()
        assert worker.idle(5)
        assert ran == ["third"]

    def test_one_job_at_a_time(self, worker):
        lock = threading.Lock()
        active = []
        peak = []

        def job(token):
            with lock:
                active.append(1)
                peak.append(len(active))
            threading.Event().wait(0.01)
            with lock:
                active.pop()

        for _ in range(5):
            worker.submit(job)
            threading.Event().wait(0.005)
        assert worker.idle(5)
        assert max(peak) == 1

    def test_failing_job_does_not_stop_worker(self, worker):
        def boom(token):
            raise RuntimeError("boom")

        worker.submit(boom)
        assert worker.idle(5)
        ran = threading.Event()
        worker.submit(lambda token: ran.set())
        assert ran.wait(5)

    def test_cancel_all_drops_waiting_job(self, worker):
        started = threading.Event()
        release = threading.Event()
        ran = []

        def blocker(token):
            started.set()
            release.wait(5)
            token.raise_if_cancelled()
            ran.append("blocker")

        worker.submit(blocker)
        assert started.wait(5)
        worker.submit(lambda token: ran.append("waiting"))
        worker.cancel_all()
        release.set()
        assert worker.idle(5)
        assert ran == []

    def test_submit_after_close(self):
        worker = SuggestionWorker()
        worker.close()
        with pytest.raises(RuntimeError):
            worker.submit(lambda token: None)
