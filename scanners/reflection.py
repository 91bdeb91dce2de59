"""
Reflected parameter scanner module.

Injects a canary value into each query parameter of a URL, one parameter
at a time, and flags parameters whose canary comes back verbatim in the
response body.
"""

from collections import OrderedDict
from urllib.parse import unquote_plus, urlsplit

from colorama import Fore

from scanners.probe import RateLimited, TransportError
from utils.config import CANARY_VALUE, PAYLOAD_MARKER


class ParsedTarget:
    """A URL split into its base and its ordered query parameters."""

    def __init__(self, url, base, segments, fragment):
        self.url = url
        self.base = base
        self.fragment = fragment
        # (decoded name, raw name, raw value or None for a bare flag)
        self.segments = segments

    @property
    def params(self):
        """Ordered mapping of parameter name to its raw values."""
        params = OrderedDict()
        for name, _, raw_value in self.segments:
            params.setdefault(name, []).append(raw_value if raw_value is not None else '')
        return params

    def with_value(self, param, value):
        """
        Rebuild the URL with one parameter set to ``value``.

        Every other segment is copied byte for byte. Repeated occurrences of
        ``param`` collapse into one, at the position of the first.
        """
        parts = []
        placed = False
        for name, raw_name, raw_value in self.segments:
            if name == param:
                if not placed:
                    parts.append(f"{raw_name}={value}")
                    placed = True
            elif raw_value is None:
                parts.append(raw_name)
            else:
                parts.append(f"{raw_name}={raw_value}")

        url = f"{self.base}?{'&'.join(parts)}"
        if self.fragment is not None:
            url += f"#{self.fragment}"
        return url


def _has_control_chars(url):
    return any(ord(c) < 0x20 or ord(c) == 0x7f for c in url)


def parse_target(url):
    """
    Decompose a URL into a ParsedTarget.

    Args:
        url (str): Raw job URL

    Returns:
        ParsedTarget: The decomposed URL, or None if it is not a valid URI
    """
    if _has_control_chars(url):
        return None

    try:
        parts = urlsplit(url)
        # Accessing the port validates it
        parts.port
    except ValueError:
        return None

    head, hash_sign, fragment = url.partition('#')
    base, _, query = head.partition('?')

    segments = []
    for segment in query.split('&'):
        if not segment:
            continue
        if '=' in segment:
            raw_name, raw_value = segment.split('=', 1)
        else:
            raw_name, raw_value = segment, None
        segments.append((unquote_plus(raw_name), raw_name, raw_value))

    return ParsedTarget(url, base, segments, fragment if hash_sign else None)


def candidate_probes(target):
    """
    Build one probe URL per distinct parameter, in first-appearance order.

    Args:
        target (ParsedTarget): The decomposed job URL

    Returns:
        list: (parameter name, probe URL) tuples
    """
    return [(param, target.with_value(param, CANARY_VALUE)) for param in target.params]


def is_reflected(body):
    """Check whether the canary appears verbatim in a response body."""
    if isinstance(body, str):
        return CANARY_VALUE in body
    return CANARY_VALUE.encode() in body


def finding_url(target, param):
    """Build the shareable finding URL with the payload placeholder in place."""
    return target.with_value(param, PAYLOAD_MARKER)


class ReflectionScanner:
    """Scanner that probes every parameter of a single job URL."""

    def __init__(self, executor, breaker, stats=None, logger=None):
        """
        Initialize the reflection scanner.

        Args:
            executor (ProbeExecutor): Issues the HTTP requests
            breaker (CircuitBreaker): Shared pause gate
            stats (ScanStats): Optional shared counters
            logger: Logger instance
        """
        self.executor = executor
        self.breaker = breaker
        self.stats = stats
        self.logger = logger

    def _count(self, name):
        if self.stats:
            self.stats.increment(name)

    def scan(self, session, url, on_rate_limited, on_finding):
        """
        Probe each parameter of ``url``.

        Args:
            session (requests.Session): The calling worker's session
            url (str): Job URL
            on_rate_limited (callable): Called with the job URL after each 403
            on_finding (callable): Called with each finding URL

        Returns:
            list: Finding URLs produced for this job
        """
        target = parse_target(url)
        if target is None:
            if self.logger:
                self.logger.debug(f"Skipping malformed URL: {url}")
            self._count('skipped')
            return []

        probes = candidate_probes(target)
        if not probes:
            if self.logger:
                self.logger.debug(f"Skipping URL without parameters: {url}")
            self._count('skipped')
            return []

        findings = []
        for param, probe_url in probes:
            self.breaker.await_running()

            self._count('probes')
            outcome = self.executor.execute(session, probe_url)

            if isinstance(outcome, RateLimited):
                self._count('rate_limited')
                self.breaker.report_rate_limited()
                on_rate_limited(url)
                continue

            if isinstance(outcome, TransportError):
                self._count('transport_errors')
                continue

            self.breaker.report_success()

            if is_reflected(outcome.body):
                result = finding_url(target, param)
                self._count('findings')
                print(f"{Fore.GREEN}[+] Reflection found: {result}")
                if self.logger:
                    self.logger.warning(f"Reflection found in parameter '{param}': {result}")
                on_finding(result)
                findings.append(result)

        return findings
