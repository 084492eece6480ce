import threading
import time

from freeplay.core.scheduler import Scheduler


class TestScheduler:

    def test_unique_job_replaces_pending_one(self):
        scheduler = Scheduler()
        calls = []

        scheduler.add_job("save", calls.append, 60, args=(1,), unique=True)
        scheduler.add_job("save", calls.append, 60, args=(2,), unique=True)

        assert len(scheduler.pending("save")) == 1
        scheduler.flush()
        assert calls == [2]

    def test_non_unique_jobs_stack(self):
        scheduler = Scheduler()
        scheduler.add_job("log", print, 60)
        scheduler.add_job("log", print, 60)
        assert len(scheduler.pending()) == 2

    def test_remove_job_by_name(self):
        scheduler = Scheduler()
        calls = []
        scheduler.add_job("a", calls.append, 60, args=("a",))
        scheduler.add_job("b", calls.append, 60, args=("b",))

        scheduler.remove_job_by_name("a")
        scheduler.flush()

        assert calls == ["b"]

    def test_flush_survives_failing_job(self):
        scheduler = Scheduler()
        calls = []

        def broken():
            raise ValueError("boom")

        scheduler.add_job("broken", broken, 60)
        scheduler.add_job("ok", calls.append, 60, args=("ok",))
        scheduler.flush()

        assert calls == ["ok"]
        assert scheduler.pending() == []

    def test_loop_runs_due_jobs(self):
        scheduler = Scheduler(delay=0.01)
        done = threading.Event()

        scheduler.add_job("signal", done.set, 0.02)
        scheduler.start_loop()
        try:
            assert done.wait(2)
        finally:
            scheduler.stop()

        assert scheduler.pending() == []

    def test_job_not_due_stays_pending(self):
        scheduler = Scheduler(delay=0.01)
        scheduler.add_job("later", print, 60)
        scheduler.start_loop()
        try:
            time.sleep(0.05)
            assert len(scheduler.pending("later")) == 1
        finally:
            scheduler.stop()
