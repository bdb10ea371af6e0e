# -*- coding: utf-8 -*-
"""Pattern Ensemble: multi-model numeric pattern prediction over sparse samples."""

from .config import Config, get_config, get_default_config
from .loggers import setup_logging, log_execution, log_context, timed_operation
from .forecasting import (
    Sample,
    SampleStore,
    EnsemblePredictor,
    PredictionResult,
    PatternAnalysis,
    TrainableRegressor,
    FrequencyAnalyzer,
    NeighborRegressor,
)
from .data_loader import SampleLoader, load_samples
from .output import SampleWriter
from .pipeline import PredictionPipeline, PipelineResult, run_pipeline

__version__ = '1.0.0'

__all__ = [
    'Config', 'get_config', 'get_default_config',
    'setup_logging', 'log_execution', 'log_context', 'timed_operation',
    'Sample', 'SampleStore',
    'EnsemblePredictor', 'PredictionResult', 'PatternAnalysis',
    'TrainableRegressor', 'FrequencyAnalyzer', 'NeighborRegressor',
    'SampleLoader', 'load_samples',
    'SampleWriter',
    'PredictionPipeline', 'PipelineResult', 'run_pipeline',
]
