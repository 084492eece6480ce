import threading
import time
from dataclasses import dataclass, field
from typing import Callable, List

from freeplay.core import logger


@dataclass
class Job:
    name: str
    func: Callable
    due: float  # time.monotonic() deadline
    args: tuple = field(default_factory=tuple)

    def run(self):
        self.func(*self.args)


class Scheduler:
    """
    Runs deferred jobs on worker threads. Used for fire and forget work
    such as persisting playback settings, never for queue transitions.
    """
    def __init__(self, delay: float = 0.05):
        self.jobs: List[Job] = []
        self.running = False
        self.delay = delay
        self._lock = threading.RLock()
        self._wakeup = threading.Event()
        self._thread = None

    def start_loop(self):
        """
        Starts the scheduler
        :return:
        """
        if self.running:
            return
        self.running = True
        self._wakeup.clear()
        self._thread = threading.Thread(target=self._run_loop, daemon=True, name="AppScheduler")
        self._thread.start()

    def _run_loop(self):
        while self.running:
            for job in self._take_due_jobs(time.monotonic()):
                try:
                    self._execute_job(job)
                    logger.debug(f"[Scheduler] Dispatched job: {job.name}")
                except RuntimeError as e:
                    logger.error(f"[Scheduler] Failed to dispatch {job.name}: {e}")

            self._wakeup.wait(self.delay)

    def _take_due_jobs(self, now: float) -> List[Job]:
        with self._lock:
            due = [job for job in self.jobs if job.due <= now]
            self.jobs = [job for job in self.jobs if job.due > now]
        return due

    @staticmethod
    def _execute_job(job: Job):
        t = threading.Thread(target=Scheduler._run_logged, args=(job,), name=f"Job-{job.name}", daemon=True)
        t.start()

    @staticmethod
    def _run_logged(job: Job):
        try:
            job.run()
        except Exception as e:
            logger.error(f"[Scheduler] Job {job.name} failed: {e}")

    def add_job(self, name: str, func: Callable, delay_seconds: float, args: tuple = (), unique: bool = False) -> Job:
        """
        Adds a job. If unique=True, replaces any existing job with the same name (Debounce).

        :param name:
        :param func:
        :param delay_seconds:
        :param args:
        :param unique:
        :return: job
        """
        job = Job(name=name, func=func, due=time.monotonic() + delay_seconds, args=tuple(args))

        with self._lock:
            if unique:
                self.jobs = [j for j in self.jobs if j.name != name]
            self.jobs.append(job)

        return job

    def remove_job_by_name(self, name: str):
        with self._lock:
            self.jobs = [j for j in self.jobs if j.name != name]

    def pending(self, name: str | None = None) -> List[Job]:
        with self._lock:
            return [j for j in self.jobs if name is None or j.name == name]

    def flush(self):
        """
        Run every pending job on the calling thread, due or not.
        Called on shutdown so debounced saves are not lost.
        :return:
        """
        with self._lock:
            jobs, self.jobs = self.jobs, []

        for job in jobs:
            self._run_logged(job)

    def stop(self, timeout: float | None = 1.0):
        """
        Stops the scheduler loop, pending jobs stay queued for flush()
        :param timeout: how long to wait for the loop thread
        :return:
        """
        self.running = False
        self._wakeup.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
        self._thread = None
