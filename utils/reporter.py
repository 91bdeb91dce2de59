"""
Reporter utility for Reflex.

Drains findings from the worker pool and appends them to the output file.
"""

import queue
import threading

from colorama import Fore

_CLOSE = object()


class ResultWriter:
    """Single writer thread that appends each finding to the output file."""

    def __init__(self, output_file='xss_results.txt', logger=None):
        """
        Initialize the writer.

        Args:
            output_file (str): Path to the output file, opened in append mode
            logger: Logger instance
        """
        self.output_file = output_file
        self.logger = logger
        # Capacity of one: a finding is handed over before the worker moves on
        self.results = queue.Queue(maxsize=1)
        self.written = 0
        self.failed = 0
        self._thread = None

    def start(self):
        """Start the writer thread."""
        self._thread = threading.Thread(target=self._run, name='result-writer', daemon=True)
        self._thread.start()
        return self

    def submit(self, finding):
        """Hand one finding to the writer, blocking until it is accepted."""
        self.results.put(finding)

    def close(self):
        """Signal end of results and wait for pending writes to land."""
        self.results.put(_CLOSE)
        if self._thread is not None:
            self._thread.join()

    def _report_error(self, message):
        print(f"{Fore.RED}[!] {message}")
        if self.logger:
            self.logger.error(message)

    def _drain(self):
        while self.results.get() is not _CLOSE:
            pass

    def _run(self):
        try:
            handle = open(self.output_file, 'a', encoding='utf-8')
        except OSError as e:
            self._report_error(f"Error creating output file: {e}")
            # Keep draining so workers never block on a dead sink
            self._drain()
            return

        with handle:
            while True:
                finding = self.results.get()
                if finding is _CLOSE:
                    break

                try:
                    handle.write(finding + "\n")
                    handle.flush()
                    self.written += 1
                except OSError as e:
                    self.failed += 1
                    self._report_error(f"Error writing to file: {e}")
