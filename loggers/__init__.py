# -*- coding: utf-8 -*-
"""
Pattern Ensemble Logging Package
================================

Two-channel logging system:
  * **ConsoleLogger**: concise, colour-coded monitoring output
  * **DebugLogger**: exhaustive structured JSON for post-hoc inspection

Usage::

    from pattern_ensemble.loggers import setup_logging
    console, debug = setup_logging('result')
"""

from typing import Tuple

from .context import Colors, LogContext, PhaseMetrics
from .console_logger import ConsoleLogger
from .debug_logger import DebugLogger
from .decorators import log_execution, log_context, timed_operation


def setup_logging(
    output_dir: str = 'result',
    use_color: bool = None,
) -> Tuple[ConsoleLogger, DebugLogger]:
    """Create and return both loggers.

    Parameters
    ----------
    output_dir : str
        Root output directory; debug JSON goes to ``<output_dir>/logs/``.
    use_color : bool, optional
        Force colour on or off (auto-detected by default).

    Returns
    -------
    tuple[ConsoleLogger, DebugLogger]
    """
    console = ConsoleLogger(use_color=use_color)
    debug = DebugLogger(output_dir=f'{output_dir}/logs')
    return console, debug


__all__ = [
    'setup_logging',
    'ConsoleLogger',
    'DebugLogger',
    'Colors',
    'LogContext',
    'PhaseMetrics',
    'log_execution',
    'log_context',
    'timed_operation',
]
