# -*- coding: utf-8 -*-
"""
Structured Debug Logger
=======================

Records every detail of a pipeline run into one JSON array file
(``<output>/logs/debug_<timestamp>.json``) for post-hoc inspection.

Each entry carries: timestamp, level, module, function, line, phase,
message, any other active ``log_context`` keys, and an optional
structured *data* payload.  Records emitted through stdlib ``logging``
by the engine modules are captured as well.
"""

from __future__ import annotations

import json
import logging
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from .context import Colors, LogContext

# Top-level logger names of the project's modules (flat checkout and installed package)
BRIDGED_LOGGERS = (
    'pattern_ensemble',
    'forecasting',
    'pipeline',
    'data_loader',
    'output',
    'visualization',
)


class DebugLogger:
    """Accumulates structured log entries and flushes them to a JSON file."""

    def __init__(self, output_dir: str = 'result/logs',
                 bridged: Sequence[str] = BRIDGED_LOGGERS):
        self._dir = Path(output_dir)
        self._dir.mkdir(parents=True, exist_ok=True)
        ts = datetime.now().strftime('%Y%m%d_%H%M%S')
        self._path = self._dir / f'debug_{ts}.json'
        self._entries: List[Dict[str, Any]] = []

        self._handler = _InterceptHandler(self)
        self._bridged: List[tuple] = []
        for name in bridged:
            std_logger = logging.getLogger(name)
            self._bridged.append((std_logger, std_logger.level))
            std_logger.setLevel(logging.DEBUG)
            std_logger.addHandler(self._handler)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def debug(self, message: str, *, data: Any = None, module: str = '',
              function: str = '') -> None:
        self._add('DEBUG', message, data=data, module=module, function=function)

    def info(self, message: str, *, data: Any = None, module: str = '',
             function: str = '') -> None:
        self._add('INFO', message, data=data, module=module, function=function)

    def warning(self, message: str, *, data: Any = None, module: str = '',
                function: str = '') -> None:
        self._add('WARNING', message, data=data, module=module, function=function)

    def error(self, message: str, *, data: Any = None, module: str = '',
              function: str = '') -> None:
        self._add('ERROR', message, data=data, module=module, function=function)

    def exception(self, message: str, exc: Optional[BaseException] = None) -> None:
        tb = traceback.format_exc() if exc is None else traceback.format_exception(
            type(exc), exc, exc.__traceback__)
        self._add('ERROR', message, data={'traceback': tb})

    def log_data(self, label: str, payload: Any, *, module: str = '') -> None:
        """Store an arbitrary structured payload (arrays, dicts, frames)."""
        self._add('DATA', label, data=payload, module=module)

    # ------------------------------------------------------------------
    # Flush / close
    # ------------------------------------------------------------------

    def flush(self) -> str:
        """Write accumulated entries to disk and return the file path."""
        with open(self._path, 'w', encoding='utf-8') as fh:
            json.dump(self._entries, fh, indent=2, default=_json_default,
                      ensure_ascii=False)
        return str(self._path)

    def close(self) -> str:
        """Flush and detach from the bridged stdlib loggers."""
        path = self.flush()
        for std_logger, level in self._bridged:
            std_logger.removeHandler(self._handler)
            std_logger.setLevel(level)
        self._bridged = []
        return path

    @property
    def path(self) -> str:
        return str(self._path)

    @property
    def entries(self) -> List[Dict[str, Any]]:
        return list(self._entries)

    @property
    def entry_count(self) -> int:
        return len(self._entries)

    def _add(self, level: str, message: str, *, data: Any = None,
             module: str = '', function: str = '', line: int = 0) -> None:
        context = LogContext.get()
        entry: Dict[str, Any] = {
            'timestamp': datetime.now().isoformat(),
            'level': level,
            'module': module,
            'function': function,
            'line': line,
            'phase': context.get('phase', ''),
            'message': Colors.strip(str(message)),
        }
        extra = {k: v for k, v in context.items() if k != 'phase'}
        if extra:
            entry['context'] = extra
        if data is not None:
            entry['data'] = data
        self._entries.append(entry)


class _InterceptHandler(logging.Handler):
    """Bridges stdlib ``logging`` records into :class:`DebugLogger`."""

    def __init__(self, debug_logger: DebugLogger):
        super().__init__(level=logging.DEBUG)
        self._dl = debug_logger

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._dl._add(
                level=record.levelname,
                message=record.getMessage(),
                module=record.module,
                function=record.funcName,
                line=record.lineno,
            )
        except Exception:
            self.handleError(record)


def _json_default(obj: Any) -> Any:
    """Fallback serialiser for numpy / pandas objects."""
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, pd.DataFrame):
        return obj.to_dict(orient='list')
    if isinstance(obj, pd.Series):
        return obj.to_dict()
    return str(obj)


__all__ = ['DebugLogger', 'BRIDGED_LOGGERS']
