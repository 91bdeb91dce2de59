"""
HTTP utility functions for Reflex.

Provides header parsing and session construction shared by the probe
executor and the command line front end.
"""

import requests
from requests.structures import CaseInsensitiveDict


def parse_header_args(header_args, logger=None):
    """
    Parse "Name: Value" strings into a header dictionary.

    Entries without a colon are skipped. Later entries override earlier
    ones with the same name (case-insensitive).

    Args:
        header_args (list): Raw header strings from the command line
        logger: Optional logger instance

    Returns:
        dict: Header name to value mapping
    """
    headers = CaseInsensitiveDict()
    for raw in header_args:
        if ':' not in raw:
            if logger:
                logger.warning(f"Ignoring malformed header (expected 'Name: Value'): {raw}")
            continue

        name, value = raw.split(':', 1)
        name = name.strip()
        if not name:
            if logger:
                logger.warning(f"Ignoring header with empty name: {raw}")
            continue

        headers[name] = value.strip()

    return dict(headers.items())


def create_session(user_agent, custom_headers=None):
    """
    Create a requests session with the default User-Agent and any
    caller-supplied headers applied on top of it.

    Args:
        user_agent (str): Default User-Agent string
        custom_headers (dict): Headers that override the defaults

    Returns:
        requests.Session: Configured session
    """
    session = requests.Session()
    session.headers['User-Agent'] = user_agent

    # Session headers are a CaseInsensitiveDict, so "user-agent" replaces the default
    for name, value in (custom_headers or {}).items():
        session.headers[name] = value

    return session
