"""
Worker pool module.

Runs a fixed number of workers over a shared job queue, reschedules
rate-limited jobs after a random delay, and hands findings to the
result writer.
"""

import concurrent.futures
import queue
import random
import threading

from colorama import Fore

from scanners.reflection import ReflectionScanner
from utils.config import JOB_QUEUE_SIZE, REQUEUE_JITTER

_STOP = object()


class ScanStats:
    """Thread-safe counters for the end-of-scan summary."""

    FIELDS = ('jobs', 'skipped', 'probes', 'rate_limited', 'transport_errors', 'findings', 'requeues')

    def __init__(self):
        self.lock = threading.Lock()
        for field in self.FIELDS:
            setattr(self, field, 0)

    def increment(self, field, amount=1):
        with self.lock:
            setattr(self, field, getattr(self, field) + amount)

    def as_dict(self):
        with self.lock:
            return {field: getattr(self, field) for field in self.FIELDS}


class WorkTracker:
    """Counts outstanding work: submitted jobs plus scheduled requeues.

    The pool is finished only once input has ended and the count is zero,
    so a requeue still sitting in its delay keeps the workers alive.
    """

    def __init__(self):
        self._cond = threading.Condition()
        self._outstanding = 0
        self._input_closed = False

    @property
    def outstanding(self):
        with self._cond:
            return self._outstanding

    def add(self):
        with self._cond:
            self._outstanding += 1

    def done(self):
        with self._cond:
            self._outstanding -= 1
            if self._outstanding <= 0:
                self._cond.notify_all()

    def close_input(self):
        with self._cond:
            self._input_closed = True
            self._cond.notify_all()

    def wait_drained(self, timeout=None):
        with self._cond:
            return self._cond.wait_for(
                lambda: self._input_closed and self._outstanding <= 0,
                timeout=timeout
            )


class ScanPool:
    """Fixed-size pool of workers scanning URLs from a shared queue."""

    def __init__(self, executor, breaker, sink, threads=20, queue_size=JOB_QUEUE_SIZE,
                 requeue_jitter=REQUEUE_JITTER, logger=None):
        """
        Initialize the worker pool.

        Args:
            executor (ProbeExecutor): Issues probe requests
            breaker (CircuitBreaker): Shared pause gate
            sink: Object with a ``submit(finding)`` method
            threads (int): Number of workers
            queue_size (int): Job queue capacity
            requeue_jitter (float): Upper bound in seconds of the requeue delay
            logger: Logger instance
        """
        self.executor = executor
        self.breaker = breaker
        self.sink = sink
        self.threads = threads
        self.requeue_jitter = requeue_jitter
        self.logger = logger

        self.jobs = queue.Queue(maxsize=queue_size)
        self.tracker = WorkTracker()
        self.stats = ScanStats()
        self.scanner = ReflectionScanner(executor, breaker, stats=self.stats, logger=logger)

    def submit(self, url):
        """Add one job from the input source."""
        self.tracker.add()
        self.stats.increment('jobs')
        self.jobs.put(url)

    def requeue(self, url):
        """
        Schedule the original job URL for another attempt after a random delay.

        Does not block the calling worker. The pending requeue is counted as
        outstanding work until the retried job has been processed.
        """
        delay = random.uniform(0, self.requeue_jitter)
        self.tracker.add()
        self.stats.increment('requeues')

        timer = threading.Timer(delay, self._deliver, args=(url,))
        timer.daemon = True
        timer.start()

        if self.logger:
            self.logger.debug(f"Requeueing {url} in {delay * 1000:.0f} ms")

    def _deliver(self, url):
        try:
            self.jobs.put(url)
        except Exception:
            # The job never reached a worker, so release its slot here
            self.tracker.done()
            if self.logger:
                self.logger.exception(f"Dropped requeue for {url}")

    def _worker(self):
        session = self.executor.new_session()
        try:
            while True:
                url = self.jobs.get()
                if url is _STOP:
                    return

                try:
                    self.scanner.scan(session, url, self.requeue, self.sink.submit)
                except Exception as e:
                    print(f"{Fore.RED}[ERROR] Scanning {url} failed: {str(e)}")
                    if self.logger:
                        self.logger.exception(f"Unexpected error while scanning {url}")
                finally:
                    self.tracker.done()
        finally:
            session.close()

    def run(self, urls):
        """
        Scan every URL from ``urls`` and wait for all work to finish.

        Args:
            urls (iterable): Job source

        Returns:
            ScanStats: Counters for the finished scan
        """
        pool = concurrent.futures.ThreadPoolExecutor(max_workers=self.threads,
                                                     thread_name_prefix='worker')
        workers = [pool.submit(self._worker) for _ in range(self.threads)]

        try:
            for url in urls:
                self.submit(url)
            self.tracker.close_input()
            self.tracker.wait_drained()
        except BaseException:
            # Stop the workers once the queued jobs are gone so the interpreter can exit
            for _ in workers:
                self.jobs.put(_STOP)
            pool.shutdown(wait=False)
            raise

        for _ in workers:
            self.jobs.put(_STOP)
        pool.shutdown(wait=True)

        for future in concurrent.futures.as_completed(workers):
            future.result()

        if self.logger:
            self.logger.info(f"Worker pool drained: {self.stats.as_dict()}")

        return self.stats
