"""
Probe executor module.

Sends a single GET request for a candidate probe URL and classifies the
outcome as a success, a rate-limit rejection, or a transport failure.
"""

import requests
from colorama import Fore

from utils.config import USER_AGENT
from utils.http_utils import create_session


class Success:
    """Any non-403 response, carrying the full body."""

    def __init__(self, body, status_code=200):
        self.body = body
        self.status_code = status_code

    def __repr__(self):
        return f"Success(status_code={self.status_code}, body={len(self.body)} bytes)"


class RateLimited:
    """The server answered 403."""

    def __repr__(self):
        return "RateLimited()"


class TransportError:
    """The request could not be completed."""

    def __init__(self, cause):
        self.cause = cause

    def __repr__(self):
        return f"TransportError({self.cause!r})"


class ProbeExecutor:
    """Issues probe requests with the configured headers and timeout."""

    def __init__(self, timeout=10, headers=None, user_agent=USER_AGENT, logger=None, verbose=False):
        """
        Initialize the probe executor.

        Args:
            timeout (int): Request timeout in seconds
            headers (dict): Custom headers applied after the default User-Agent
            user_agent (str): Default User-Agent string
            logger: Logger instance
            verbose (bool): Print transport errors to the console
        """
        self.timeout = timeout
        self.headers = dict(headers or {})
        self.user_agent = user_agent
        self.logger = logger
        self.verbose = verbose

    def new_session(self):
        """Create the session a single worker uses for all of its probes."""
        return create_session(self.user_agent, self.headers)

    def execute(self, session, url):
        """
        Send one GET request and classify the response.

        Args:
            session (requests.Session): Session to send the request on
            url (str): Materialized probe URL

        Returns:
            Success, RateLimited or TransportError
        """
        try:
            with session.get(url, timeout=self.timeout, allow_redirects=True) as response:
                if response.status_code == 403:
                    return RateLimited()
                return Success(response.content, response.status_code)

        except requests.exceptions.RequestException as e:
            if self.logger:
                self.logger.debug(f"Transport error for {url}: {str(e)}")
            if self.verbose:
                print(f"{Fore.RED}[!] Error: {str(e)}")
            return TransportError(e)
