"""
Input reader for Reflex.

Feeds candidate URLs to the scanner from a file or from standard input.
"""

import io
import sys


class InputError(Exception):
    """Raised when the URL source cannot be opened. Fatal at startup."""


USAGE_HINT = "Usage: cat urls.txt | reflex -H 'X-Bug-Bounty: Me'  or  reflex -f urls.txt"


def _iter_lines(stream, close=False):
    try:
        for line in stream:
            url = line.strip()
            if url:
                yield url
    finally:
        if close:
            stream.close()


def open_job_source(input_file=None, stdin=None):
    """
    Open the URL source.

    The file is opened immediately so that a bad path fails before any
    worker starts; lines are read lazily afterwards.

    Args:
        input_file (str): Path to a file of URLs, or None for standard input
        stdin: Stream to read when no file is given (defaults to sys.stdin)

    Returns:
        iterator: Stripped, non-empty URL strings

    Raises:
        InputError: If the file cannot be opened or stdin is an interactive terminal
    """
    if input_file:
        try:
            handle = open(input_file, 'r', encoding='utf-8', errors='replace')
        except OSError as e:
            raise InputError(f"Error opening file: {e}") from e
        return _iter_lines(handle, close=True)

    stream = stdin if stdin is not None else sys.stdin
    if stream is None or stream.isatty():
        raise InputError(USAGE_HINT)

    # Decode like the file path so a stray byte cannot abort the scan
    if hasattr(stream, 'buffer'):
        stream = io.TextIOWrapper(stream.buffer, encoding='utf-8', errors='replace')

    return _iter_lines(stream)
