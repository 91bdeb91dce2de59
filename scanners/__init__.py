"""
Scanning engine modules for Reflex.

This package contains the marker injection and reflection detection logic,
the probe executor, the shared circuit breaker, and the worker pool.
"""

__all__ = [
    'reflection',
    'probe',
    'breaker',
    'pool'
]
