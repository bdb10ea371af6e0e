# -*- coding: utf-8 -*-
"""
Console Logger for the Prediction Pipeline
==========================================

Concise, colour-coded output for following a pipeline run: phase
banners with timing, one-line steps, compact metrics and tables, and a
final summary of the predictions.
"""

from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from typing import Any, Dict, Generator, List, Optional, Sequence

from .context import Colors, LogContext, PhaseMetrics


# Width of the banner / separator lines
_LINE_W = 70


class ConsoleLogger:
    """Single route for all console output of a pipeline run."""

    def __init__(self, use_color: Optional[bool] = None, stream=None):
        self._color = Colors.supports_color() if use_color is None else use_color
        self._stream = stream
        self._phase_stack: List[PhaseMetrics] = []
        self._all_phases: List[PhaseMetrics] = []

    @property
    def phases(self) -> List[PhaseMetrics]:
        return list(self._all_phases)

    def _c(self, text: str, *codes: str) -> str:
        if not self._color:
            return text
        return ''.join(codes) + text + Colors.RESET

    def _write(self, msg: str) -> None:
        stream = self._stream or sys.stdout
        stream.write(msg + '\n')
        stream.flush()

    # ------------------------------------------------------------------
    # Banners & separators
    # ------------------------------------------------------------------

    def banner(self, title: str, subtitle: str = '') -> None:
        self._write('')
        self._write(self._c('=' * _LINE_W, Colors.BOLD, Colors.BLUE))
        self._write(self._c(f'  {title}', Colors.BOLD, Colors.BRIGHT_WHITE))
        if subtitle:
            self._write(self._c(f'  {subtitle}', Colors.DIM))
        self._write(self._c('=' * _LINE_W, Colors.BOLD, Colors.BLUE))

    def separator(self, char: str = '-') -> None:
        self._write(self._c(char * _LINE_W, Colors.DIM))

    # ------------------------------------------------------------------
    # Phase management
    # ------------------------------------------------------------------

    @contextmanager
    def phase(self, name: str, number: int = None,
              total_phases: int = 5) -> Generator[_PhaseCtx, None, None]:
        """Print phase start and end with timing; failures are reported and re-raised.

        Example::

            with console.phase('Sample Loading') as p:
                samples = loader.load(path)
                p.detail(f'{len(samples)} samples loaded')
        """
        if number is None:
            number = len(self._all_phases) + 1
        label = f'[{number}/{total_phases}] {name}'
        metrics = PhaseMetrics(name=name, start_time=time.time())
        self._phase_stack.append(metrics)
        self._all_phases.append(metrics)
        LogContext.set('phase', name)

        self._write('')
        self._write(self._c(f'>> {label}', Colors.BOLD, Colors.CYAN))

        try:
            yield _PhaseCtx(self, metrics)
        except Exception as exc:
            metrics.finish('failed')
            self._write(self._c(
                f'   FAIL  {label}  ({metrics.elapsed:.2f}s): {type(exc).__name__}: {exc}',
                Colors.RED, Colors.BOLD,
            ))
            raise
        else:
            metrics.finish('completed')
            self._write(self._c(f'   OK    {label}  ({metrics.elapsed:.2f}s)', Colors.GREEN))
        finally:
            LogContext.remove('phase')
            self._phase_stack.pop()

    # ------------------------------------------------------------------
    # Step / metric / table helpers
    # ------------------------------------------------------------------

    def step(self, message: str) -> None:
        self._write(self._c(f'   . {message}', Colors.WHITE))

    def metric(self, label: str, value: Any, unit: str = '') -> None:
        val_str = f'{value:.4f}' if isinstance(value, float) else str(value)
        suffix = f' {unit}' if unit else ''
        self._write(self._c(f'     {label}: ', Colors.DIM) + f'{val_str}{suffix}')

    def metrics(self, data: Dict[str, Any]) -> None:
        """All metrics on one comma-separated line."""
        parts = [f'{k}={v:.4f}' if isinstance(v, float) else f'{k}={v}'
                 for k, v in data.items()]
        self._write(self._c('     ', Colors.DIM) + ', '.join(parts))

    def table(self, headers: Sequence[str], rows: Sequence[Sequence[str]],
              col_widths: Optional[Sequence[int]] = None, indent: int = 6) -> None:
        """Fixed-width table; numeric cells are right-aligned."""
        if col_widths is None:
            col_widths = [max(len(h) + 2, 12) for h in headers]
        pad = ' ' * indent
        self._write(self._c(pad + '  '.join(f'{h:^{w}}' for h, w in zip(headers, col_widths)),
                            Colors.BOLD))
        self._write(pad + '  '.join('-' * w for w in col_widths))
        for row in rows:
            cells = []
            for c, w in zip(row, col_widths):
                try:
                    float(str(c))
                    cells.append(f'{c:>{w}}')
                except ValueError:
                    cells.append(f'{c:<{w}}')
            self._write(pad + '  '.join(cells))

    # ------------------------------------------------------------------
    # Informational / warning / error
    # ------------------------------------------------------------------

    def info(self, message: str) -> None:
        self._write(self._c(f'  i {message}', Colors.GREEN))

    def success(self, message: str) -> None:
        self._write(self._c(f'  OK {message}', Colors.BRIGHT_GREEN, Colors.BOLD))

    def warning(self, message: str) -> None:
        self._write(self._c(f'  ! {message}', Colors.YELLOW))

    def error(self, message: str) -> None:
        self._write(self._c(f'  X {message}', Colors.RED, Colors.BOLD))

    # ------------------------------------------------------------------
    # Domain summaries
    # ------------------------------------------------------------------

    def show_predictions(self, queries: Sequence[float], results: Sequence[Any]) -> None:
        """Table of query, prediction, confidence and method."""
        rows = [[f'{q:.4g}', f'{r.prediction:.4f}', f'{r.confidence:.3f}', r.method]
                for q, r in zip(queries, results)]
        self.table(['Input', 'Prediction', 'Confidence', 'Method'], rows,
                   [10, 12, 10, 34])

    def show_analysis(self, analysis: Any) -> None:
        self.metric('Samples', analysis.sample_count)
        self.metric('Mean input', analysis.avg_input)
        self.metric('Mean output', analysis.avg_output)
        self.metric('Correlation', analysis.correlation)
        self.metric('Dominant frequency', analysis.dominant_frequency)

    def show_run_summary(self, result: Any) -> None:
        """End-of-run summary of a :class:`pipeline.PipelineResult`."""
        self._write('')
        self._write(self._c('=' * _LINE_W, Colors.BOLD, Colors.BLUE))
        self._write(self._c('  RESULTS SUMMARY', Colors.BOLD, Colors.BRIGHT_WHITE))
        self._write(self._c('=' * _LINE_W, Colors.BOLD, Colors.BLUE))

        self._write(self._c('\n  PATTERN', Colors.BOLD))
        self.show_analysis(result.analysis)

        if result.predictions:
            self._write(self._c('\n  PREDICTIONS', Colors.BOLD))
            self.show_predictions(result.queries, result.predictions)

        self._write(self._c(f'\n  RUNTIME : {result.execution_time:.2f}s', Colors.BOLD))
        self._write(self._c('=' * _LINE_W, Colors.BOLD, Colors.BLUE))

    def show_completion(self, output_dir: str = 'result') -> None:
        self._write('')
        self._write(self._c('=' * _LINE_W, Colors.BOLD, Colors.GREEN))
        self._write(self._c('  RUN COMPLETE', Colors.BOLD, Colors.BRIGHT_GREEN))
        self._write(self._c('=' * _LINE_W, Colors.BOLD, Colors.GREEN))
        self._write(f'  All outputs saved to {output_dir}/:')
        self._write('    results/  samples, predictions (JSON / CSV)')
        self._write('    figures/  prediction curve and spectrum')
        self._write('    logs/     structured debug log')
        self._write(self._c('=' * _LINE_W, Colors.BOLD, Colors.GREEN))


class _PhaseCtx:
    """Proxy returned by :meth:`ConsoleLogger.phase` for in-phase output."""

    def __init__(self, logger: ConsoleLogger, metrics: PhaseMetrics):
        self._logger = logger
        self.metrics = metrics

    def detail(self, message: str) -> None:
        self._logger.step(message)

    def metric(self, label: str, value: Any, unit: str = '') -> None:
        self.metrics.sub_metrics[label] = value
        self._logger.metric(label, value, unit)

    def warning(self, message: str) -> None:
        self._logger.warning(message)


__all__ = ['ConsoleLogger']
