# -*- coding: utf-8 -*-
"""
Output Package
==============

Centralises all persistence of run results: sample exports and
prediction history as CSV/JSON.

Quick start::

    from output import SampleWriter
    writer = SampleWriter('result')
    writer.save_samples_json(ensemble.export_samples())
"""

from .sample_writer import SampleWriter, SAMPLE_COLUMNS

__all__ = ['SampleWriter', 'SAMPLE_COLUMNS']
