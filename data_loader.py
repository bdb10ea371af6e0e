# -*- coding: utf-8 -*-
"""Sample file loading for the prediction pipeline.

This module handles:
1. JSON exports written by ``EnsemblePredictor.export_samples`` (current
   layout, bare record lists and the legacy ``data``/``metadata`` layout)
2. CSV tables with ``input`` and ``output`` columns and an optional
   ``inserted_at`` column
3. Query lists (one input per line, or a CSV ``input`` column)

Notes
-----
Rows with a missing ``input`` or ``output`` are dropped with a warning
rather than imputed.  CSV files without ``inserted_at`` get consecutive
timestamps starting at the loader's clock, so file order is kept as the
recency order.
"""

import json
import logging
import time
import numpy as np
import pandas as pd
from pathlib import Path
from typing import Callable, List, Optional, Union

try:
    from .forecasting.samples import Sample, SampleStore
except ImportError:
    from forecasting.samples import Sample, SampleStore

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Spacing of synthesised timestamps for CSV rows without one (seconds)
_SYNTHETIC_STEP = 1e-3


class SampleLoader:
    """Loads sample sequences and query inputs from JSON or CSV files."""

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self.clock = clock or time.time

    def load(self, path: PathLike) -> List[Sample]:
        """Load samples, dispatching on the file suffix."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Sample file not found: {path}")

        suffix = path.suffix.lower()
        if suffix == '.json':
            samples = self._load_json(path)
        elif suffix == '.csv':
            samples = self._load_csv(path)
        else:
            raise ValueError(f"Unsupported sample file type '{suffix}' ({path})")

        logger.info("[OK] Loaded %d samples from %s", len(samples), path)
        return samples

    def load_payload(self, path: PathLike):
        """Raw JSON payload, suitable for ``EnsemblePredictor.import_samples``."""
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def _load_json(self, path: Path) -> List[Sample]:
        return SampleStore.parse_records(self.load_payload(path))

    def load_frame(self, path: PathLike) -> pd.DataFrame:
        """CSV sample table with validated, cleaned columns."""
        df = pd.read_csv(path)
        missing = {'input', 'output'} - set(df.columns)
        if missing:
            raise ValueError(f"Columns {sorted(missing)} not found in {path}")

        df['input'] = pd.to_numeric(df['input'], errors='coerce')
        df['output'] = pd.to_numeric(df['output'], errors='coerce')
        valid = df['input'].notna() & df['output'].notna()
        valid &= np.isfinite(df['input']) & np.isfinite(df['output'])
        if not valid.all():
            logger.warning("%s: dropping %d row(s) with missing or non-finite values",
                           path, int((~valid).sum()))
            df = df.loc[valid].reset_index(drop=True)

        if 'inserted_at' not in df.columns:
            start = float(self.clock())
            df['inserted_at'] = start + _SYNTHETIC_STEP * np.arange(len(df))
        return df[['input', 'output', 'inserted_at']]

    def _load_csv(self, path: Path) -> List[Sample]:
        df = self.load_frame(path)
        return [Sample.from_record(rec) for rec in df.to_dict(orient='records')]

    def load_queries(self, path: PathLike) -> List[float]:
        """Query inputs from a CSV ``input`` column or a plain one-per-line file."""
        path = Path(path)
        if path.suffix.lower() == '.csv':
            df = pd.read_csv(path)
            if 'input' not in df.columns:
                raise ValueError(f"'input' column not found in {path}")
            values = pd.to_numeric(df['input'], errors='coerce').dropna()
            return [float(v) for v in values]

        queries = []
        with open(path, 'r', encoding='utf-8') as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith('#'):
                    queries.append(float(line))
        return queries


def load_samples(path: PathLike) -> List[Sample]:
    """Convenience function to load samples from a file."""
    return SampleLoader().load(path)


__all__ = ['SampleLoader', 'load_samples']
