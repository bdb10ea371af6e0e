# -*- coding: utf-8 -*-
"""
Sample Store
============

Append-only, insertion-ordered collection of observed ``(input, output)``
pairs.  Every model in the ensemble is derived from a snapshot of this
store; listeners registered with :meth:`SampleStore.subscribe` are notified
after each mutation so derived models never lag behind the data.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

SAMPLE_FORMAT_VERSION = '1.0.0'


def _as_finite_float(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
        raise TypeError(f'{name} must be a real number, got {type(value).__name__}')
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f'{name} must be finite, got {value}')
    return value


@dataclass(frozen=True)
class Sample:
    """One observed pair.  Immutable once created."""
    input: float
    output: float
    inserted_at: float

    def to_record(self) -> Dict[str, float]:
        return {
            'input': self.input,
            'output': self.output,
            'inserted_at': self.inserted_at,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'Sample':
        """Build a sample from an exported record.

        Accepts ``inserted_at`` and ``insertedAt`` keys; the legacy
        ``timestamp`` key holds milliseconds and is converted to seconds.
        """
        if not isinstance(record, dict):
            raise ValueError(f'Sample record must be a mapping, got {type(record).__name__}')
        try:
            x = record['input']
            y = record['output']
        except KeyError as exc:
            raise ValueError(f'Sample record is missing {exc.args[0]!r}') from exc

        if 'inserted_at' in record:
            stamp = record['inserted_at']
        elif 'insertedAt' in record:
            stamp = record['insertedAt']
        elif 'timestamp' in record:
            stamp = _as_finite_float(record['timestamp'], 'timestamp') / 1000.0
        else:
            raise ValueError('Sample record is missing a timestamp')

        return cls(
            input=_as_finite_float(x, 'input'),
            output=_as_finite_float(y, 'output'),
            inserted_at=_as_finite_float(stamp, 'inserted_at'),
        )


class SampleStore:
    """
    Ordered sample collection, the ground truth every model trains on.

    Parameters
    ----------
    clock : callable, optional
        Zero-argument callable returning the current time in seconds.
        Defaults to :func:`time.time`.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self.clock = clock or time.time
        self._samples: List[Sample] = []
        self._listeners: List[Callable[['SampleStore'], None]] = []

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(self, x: float, y: float) -> Sample:
        """Append a sample stamped with the current clock value."""
        sample = Sample(
            input=_as_finite_float(x, 'input'),
            output=_as_finite_float(y, 'output'),
            inserted_at=float(self.clock()),
        )
        self._samples.append(sample)
        self._notify()
        return sample

    def clear(self) -> None:
        self._samples = []
        self._notify()

    def replace(self, samples: Iterable[Sample]) -> None:
        """Swap the whole sequence in one step (single notification)."""
        new_samples = list(samples)
        for s in new_samples:
            if not isinstance(s, Sample):
                raise TypeError(f'Expected Sample, got {type(s).__name__}')
        self._samples = new_samples
        self._notify()

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def all(self) -> Tuple[Sample, ...]:
        """Samples in insertion order."""
        return tuple(self._samples)

    def by_recency(self) -> List[Sample]:
        """Derived view, most recent first.  Ties keep insertion order."""
        return sorted(self._samples, key=lambda s: s.inserted_at, reverse=True)

    def arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return ``(inputs, outputs)`` as float arrays in insertion order."""
        x = np.array([s.input for s in self._samples], dtype=float)
        y = np.array([s.output for s in self._samples], dtype=float)
        return x, y

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self):
        return iter(tuple(self._samples))

    # ------------------------------------------------------------------
    # Export / import
    # ------------------------------------------------------------------

    def export_records(self) -> Dict[str, Any]:
        """Serialisable snapshot of the raw sample sequence."""
        return {
            'version': SAMPLE_FORMAT_VERSION,
            'created': datetime.now(timezone.utc).isoformat(),
            'samples': [s.to_record() for s in self._samples],
        }

    @staticmethod
    def parse_records(payload: Any) -> List[Sample]:
        """Decode an exported payload (or a bare record list) into samples."""
        if isinstance(payload, dict):
            if 'samples' in payload:
                version = payload.get('version', SAMPLE_FORMAT_VERSION)
                records = payload['samples']
            elif 'data' in payload:
                version = payload.get('metadata', {}).get('version', SAMPLE_FORMAT_VERSION)
                records = payload['data']
            else:
                raise ValueError("Payload has neither 'samples' nor 'data'")
            _check_version(version)
        elif isinstance(payload, Sequence) and not isinstance(payload, (str, bytes)):
            records = payload
        else:
            raise ValueError(f'Unsupported sample payload type: {type(payload).__name__}')

        if not isinstance(records, Sequence) or isinstance(records, (str, bytes)):
            raise ValueError('Sample records must be a list')
        return [Sample.from_record(r) for r in records]

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def subscribe(self, listener: Callable[['SampleStore'], None]) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[['SampleStore'], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)


def _check_version(version: Any) -> None:
    major = str(version).split('.', 1)[0]
    if major != SAMPLE_FORMAT_VERSION.split('.', 1)[0]:
        raise ValueError(f'Unsupported sample format version: {version}')


__all__ = ['Sample', 'SampleStore', 'SAMPLE_FORMAT_VERSION']
