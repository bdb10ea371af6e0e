# -*- coding: utf-8 -*-
"""
Logging Decorators and Context Managers
=======================================

``log_execution`` wraps a callable with entry/exit/timing records;
``log_context`` and ``timed_operation`` scope annotations and timings
to a ``with`` block.
"""

from __future__ import annotations

import time
import logging
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Generator, Optional

from .context import LogContext

_DEFAULT_LOGGER = 'pattern_ensemble'


def log_execution(
    logger: Optional[logging.Logger] = None,
    level: int = logging.DEBUG,
    show_result: bool = False,
) -> Callable:
    """Decorator that logs function entry, exit, and timing."""

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            log = logger or logging.getLogger(_DEFAULT_LOGGER)
            func_name = func.__qualname__
            log.log(level, 'Calling %s', func_name)

            start = time.time()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                log.error('%s failed after %.3fs: %s', func_name, time.time() - start, exc)
                raise
            elapsed = time.time() - start
            if show_result:
                log.log(level, '%s returned %s (%.3fs)', func_name, repr(result)[:100], elapsed)
            else:
                log.log(level, '%s completed (%.3fs)', func_name, elapsed)
            return result

        return wrapper
    return decorator


@contextmanager
def log_context(**kwargs: Any) -> Generator[None, None, None]:
    """Temporarily inject key/value pairs into the thread-local log context."""
    for key, value in kwargs.items():
        LogContext.set(key, value)
    try:
        yield
    finally:
        for key in kwargs:
            LogContext.remove(key)


@contextmanager
def timed_operation(
    logger: logging.Logger,
    operation: str,
    level: int = logging.INFO,
) -> Generator[None, None, None]:
    """Log start and finish of a block with the elapsed time."""
    start = time.time()
    logger.log(level, 'Starting: %s', operation)
    try:
        yield
    finally:
        logger.log(level, 'Finished: %s (%.3fs)', operation, time.time() - start)


__all__ = [
    'log_execution',
    'log_context',
    'timed_operation',
]
