# -*- coding: utf-8 -*-
"""
Sample & Prediction Writer
==========================

All structured output of a run (sample exports, prediction history,
pattern statistics, run summary) is persisted through this single
writer class.  Every file lands in ``<base_dir>/results/``.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
import pandas as pd
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence
import logging

_logger = logging.getLogger(__name__)

SAMPLE_COLUMNS = ['input', 'output', 'inserted_at']


class SampleWriter:
    """Write CSV / JSON result files into ``<base_dir>/results/``."""

    def __init__(self, base_output_dir: str = 'result'):
        self.results_dir = Path(base_output_dir) / 'results'
        self.results_dir.mkdir(parents=True, exist_ok=True)
        self._saved_files: List[str] = []

    def _record(self, path: Path) -> str:
        s = str(path)
        self._saved_files.append(s)
        return s

    def _save_csv(self, df: pd.DataFrame, name: str,
                  float_fmt: Optional[str] = None, **kwargs) -> str:
        path = self.results_dir / name
        df.to_csv(path, float_format=float_fmt, **kwargs)
        return self._record(path)

    def _save_json(self, obj: Any, name: str) -> str:
        path = self.results_dir / name
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(obj, f, indent=2, ensure_ascii=False)
        return self._record(path)

    def get_saved_files(self) -> List[str]:
        return list(self._saved_files)

    # ==================================================================
    #  1. SAMPLES
    # ==================================================================

    def save_samples_json(self, payload: Dict[str, Any],
                          name: str = 'samples.json') -> str:
        """Write an ``export_samples()`` payload verbatim."""
        return self._save_json(payload, name)

    def save_samples_csv(self, samples: Sequence[Any],
                         name: str = 'samples.csv') -> str:
        """One row per sample in insertion order.

        Floats are written with full precision so the file reloads losslessly.
        """
        df = pd.DataFrame([s.to_record() for s in samples], columns=SAMPLE_COLUMNS)
        return self._save_csv(df, name, index=False)

    # ==================================================================
    #  2. PREDICTIONS
    # ==================================================================

    def save_predictions(self, queries: Sequence[float], results: Sequence[Any],
                         name: str = 'predictions.csv') -> str:
        """Prediction history: one row per query with each sub-model's value and share."""
        rows = []
        for q, r in zip(queries, results):
            row = {
                'input': float(q),
                'prediction': r.prediction,
                'confidence': r.confidence,
                'method': r.method,
            }
            for c in r.per_model:
                row[f'{c.method}_value'] = c.value
                row[f'{c.method}_confidence'] = c.confidence
                row[f'{c.method}_weight'] = c.effective_weight
            rows.append(row)
        df = pd.DataFrame(rows)
        return self._save_csv(df, name, float_fmt='%.6f', index=False)

    # ==================================================================
    #  3. ANALYSIS / SUMMARY
    # ==================================================================

    def save_analysis(self, analysis: Any, spectrum: Any = None) -> str:
        data: Dict[str, Any] = {'pattern': analysis.to_dict()}
        if spectrum is not None and spectrum.size:
            data['spectrum'] = spectrum.to_dict()
        return self._save_json(data, 'pattern_analysis.json')

    def save_execution_summary(self, n_samples: int, n_queries: int,
                               execution_time: float = 0.0,
                               model_info: Optional[Dict[str, Any]] = None) -> str:
        summary: Dict[str, Any] = {
            'generated_at': datetime.now(timezone.utc).isoformat(),
            'execution_time_seconds': round(float(execution_time), 3),
            'n_samples': int(n_samples),
            'n_queries': int(n_queries),
        }
        if model_info is not None:
            summary['models'] = model_info
        return self._save_json(summary, 'execution_summary.json')

    def save_config_snapshot(self, config: Any) -> str:
        return self._save_json(config.to_dict(), 'config_snapshot.json')


__all__ = ['SampleWriter', 'SAMPLE_COLUMNS']
