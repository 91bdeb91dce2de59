"""
Circuit breaker module.

Pauses every worker once too many consecutive 403 responses have been
seen across the pool, then resumes them all after a fixed cooldown.
"""

import threading
import time

from colorama import Fore

from utils.config import BACKOFF_SECONDS, ERROR_THRESHOLD


class CircuitBreaker:
    """Process-wide pause gate driven by consecutive rate-limit responses.

    The counter is global rather than per host, so a 403 storm from one
    target also pauses probes to every other target in the run.
    """

    def __init__(self, threshold=ERROR_THRESHOLD, cooldown=BACKOFF_SECONDS, logger=None):
        """
        Initialize the circuit breaker.

        Args:
            threshold (int): Consecutive 403s that trigger a pause
            cooldown (float): Pause length in seconds
            logger: Logger instance
        """
        self.threshold = threshold
        self.cooldown = cooldown
        self.logger = logger
        self._cond = threading.Condition()
        self._consecutive_errors = 0
        self._paused = False
        self._cooldowns_started = 0

    @property
    def consecutive_errors(self):
        with self._cond:
            return self._consecutive_errors

    @property
    def paused(self):
        with self._cond:
            return self._paused

    @property
    def cooldowns_started(self):
        with self._cond:
            return self._cooldowns_started

    def report_success(self):
        """Clear the consecutive error count after any non-403 response."""
        with self._cond:
            self._consecutive_errors = 0

    def report_rate_limited(self):
        """
        Record a 403 and start a cooldown if the threshold is reached.

        Returns:
            bool: True if this call started the cooldown
        """
        with self._cond:
            self._consecutive_errors += 1
            if self._consecutive_errors < self.threshold or self._paused:
                return False

            self._paused = True
            self._cooldowns_started += 1
            count = self._consecutive_errors

        print(f"\n{Fore.RED}[!] High 403 Error Rate detected ({count} consecutive). "
              f"Pausing for {self.cooldown} seconds...")
        if self.logger:
            self.logger.warning(f"{count} consecutive 403 responses, pausing for {self.cooldown}s")

        threading.Thread(target=self._cool_down, name='breaker-cooldown', daemon=True).start()
        return True

    def await_running(self, timeout=None):
        """
        Block while the breaker is paused.

        Args:
            timeout (float): Maximum seconds to wait, None to wait indefinitely

        Returns:
            bool: True if running on return, False if the wait timed out
        """
        with self._cond:
            return self._cond.wait_for(lambda: not self._paused, timeout=timeout)

    def _cool_down(self):
        time.sleep(self.cooldown)

        with self._cond:
            self._consecutive_errors = 0
            self._paused = False
            self._cond.notify_all()

        print(f"{Fore.BLUE}[INFO] Resuming operations...")
        if self.logger:
            self.logger.info("Cooldown finished, resuming workers")
