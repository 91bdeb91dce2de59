"""
Utility modules for Reflex.

This package contains configuration, logging, HTTP helpers, input reading
and result output used by the scanner.
"""

__all__ = [
    'config',
    'logger',
    'reporter',
    'http_utils',
    'input_reader'
]
