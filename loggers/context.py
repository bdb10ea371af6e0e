# -*- coding: utf-8 -*-
"""
Shared Context, Metrics, and Colour Utilities
=============================================

Thread-local context annotations, per-phase timing, and ANSI colour
helpers used by both the console and the debug logger.
"""

import os
import re
import sys
import time
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


class Colors:
    """ANSI escape sequences for terminal styling."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"
    BRIGHT_GREEN = "\033[92m"
    BRIGHT_WHITE = "\033[97m"

    ANSI_PATTERN = re.compile(r'\033\[[0-9;]*m')

    @classmethod
    def strip(cls, text: str) -> str:
        """Remove all ANSI codes from *text*."""
        return cls.ANSI_PATTERN.sub('', text)

    @classmethod
    def supports_color(cls) -> bool:
        """``NO_COLOR`` wins, then ``FORCE_COLOR``, then whether stdout is a tty."""
        if os.getenv("NO_COLOR"):
            return False
        if os.getenv("FORCE_COLOR"):
            return True
        return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


class LogContext:
    """Thread-local key/value store for contextual log annotations."""

    _local = threading.local()

    @classmethod
    def get(cls) -> Dict[str, Any]:
        if not hasattr(cls._local, 'context'):
            cls._local.context = {}
        return cls._local.context

    @classmethod
    def set(cls, key: str, value: Any) -> None:
        cls.get()[key] = value

    @classmethod
    def remove(cls, key: str) -> None:
        cls.get().pop(key, None)

    @classmethod
    def clear(cls) -> None:
        cls._local.context = {}


@dataclass
class PhaseMetrics:
    """Timing and outcome of one pipeline phase."""

    name: str
    start_time: float
    end_time: Optional[float] = None
    status: str = "running"
    sub_metrics: Dict[str, Any] = field(default_factory=dict)

    @property
    def elapsed(self) -> float:
        end = self.end_time or time.time()
        return end - self.start_time

    def finish(self, status: str) -> None:
        self.end_time = time.time()
        self.status = status


__all__ = [
    'Colors',
    'LogContext',
    'PhaseMetrics',
]
