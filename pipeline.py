# -*- coding: utf-8 -*-
"""
Pattern Prediction Pipeline
===========================

Five-phase batch run over a sample file:

  Phase 1  Sample Loading      (JSON export or CSV table)
  Phase 2  Training            (eager retrain of all three sub-models)
  Phase 3  Prediction          (query inputs + pattern statistics)
  Phase 4  Visualization       (prediction curve, amplitude spectrum)
  Phase 5  Result Export       (samples, prediction history, summary)
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

# Internal imports (support both package and direct execution)
try:
    from .config import Config, get_default_config
    from .loggers import setup_logging, log_context, log_execution, timed_operation
    from .data_loader import SampleLoader
    from .forecasting import EnsemblePredictor, PatternAnalysis, PredictionResult, Sample
    from .forecasting.spectral import SpectralResult
    from .visualization import PredictionPlotter
    from .output import SampleWriter
except ImportError:
    from config import Config, get_default_config
    from loggers import setup_logging, log_context, log_execution, timed_operation
    from data_loader import SampleLoader
    from forecasting import EnsemblePredictor, PatternAnalysis, PredictionResult, Sample
    from forecasting.spectral import SpectralResult
    from visualization import PredictionPlotter
    from output import SampleWriter

logger = logging.getLogger(__name__)

_N_PHASES = 5


# =========================================================================
# Result container
# =========================================================================

@dataclass
class PipelineResult:
    """Container for everything one run produced."""
    samples: List[Sample]
    analysis: PatternAnalysis
    spectrum: SpectralResult
    queries: List[float] = field(default_factory=list)
    predictions: List[PredictionResult] = field(default_factory=list)
    model_info: Dict[str, Any] = field(default_factory=dict)
    figure_paths: List[str] = field(default_factory=list)
    saved_files: List[str] = field(default_factory=list)
    execution_time: float = 0.0
    config: Optional[Config] = None

    def prediction_table(self) -> List[Dict[str, Any]]:
        """One flat dict per query."""
        return [dict(input=q, **r.to_dict()) for q, r in zip(self.queries, self.predictions)]


# =========================================================================
# Pipeline
# =========================================================================

class PredictionPipeline:
    """
    Batch driver around :class:`EnsemblePredictor`.

    Loads samples, retrains the ensemble once, answers a list of queries,
    and writes figures and result files under ``config.paths.output_dir``.
    """

    def __init__(self, config: Optional[Config] = None, use_color: Optional[bool] = None):
        self.config = config or get_default_config()
        self.config.paths.ensure_directories()

        self.console, self.debug_log = setup_logging(self.config.output_dir,
                                                     use_color=use_color)
        self.ensemble = EnsemblePredictor.from_config(self.config)
        self.loader = SampleLoader(clock=self.ensemble.store.clock)
        self.writer = SampleWriter(base_output_dir=self.config.output_dir)
        self.plotter = PredictionPlotter(
            output_dir=str(self.config.paths.figures_dir),
            dpi=self.config.visualization.dpi,
            figsize=self.config.visualization.figsize,
            curve_points=self.config.visualization.curve_points,
            curve_margin=self.config.visualization.curve_margin,
        )

    def _resolve_data_path(self, data_path: Optional[str]) -> Path:
        if data_path is not None:
            return Path(data_path)
        for name in ('samples.json', 'samples.csv'):
            candidate = self.config.paths.data_dir / name
            if candidate.exists():
                return candidate
        raise FileNotFoundError(
            f"No sample file given and none found in {self.config.paths.data_dir}")

    # -----------------------------------------------------------------
    # Main entry point
    # -----------------------------------------------------------------

    def run(self, data_path: Optional[str] = None,
            queries: Sequence[float] = (),
            samples: Optional[Sequence[Sample]] = None) -> PipelineResult:
        """Execute the full pipeline and return its results.

        Args:
            data_path: Sample file (JSON or CSV); ignored when *samples* is given
            queries: Inputs to predict
            samples: Pre-built samples, bypassing file loading
        """
        source = 'memory' if samples is not None else str(data_path or 'default')
        try:
            with log_context(source=source):
                return self._run(data_path, queries, samples)
        finally:
            # Always flush & close the debug log, even if a phase raises
            self.debug_log.close()

    def _run(self, data_path: Optional[str], queries: Sequence[float],
             samples: Optional[Sequence[Sample]]) -> PipelineResult:
        start_time = time.time()
        queries = [float(q) for q in queries]

        self.console.banner('Pattern Ensemble Prediction',
                            subtitle='neural + fourier + k-NN')

        with self.console.phase('Sample Loading', total_phases=_N_PHASES) as ph:
            if samples is None:
                path = self._resolve_data_path(data_path)
                samples = self.loader.load(path)
                ph.detail(f'{path.name}: {len(samples)} samples')
            else:
                samples = list(samples)
                ph.detail(f'{len(samples)} samples supplied')

        with self.console.phase('Training', total_phases=_N_PHASES) as ph:
            self._train(samples)
            info = self.ensemble.get_info()
            reg = info['regressor']
            ph.metric('Network epochs', reg['epochs_run'])
            ph.metric('Network fit R2', reg['fit_r2'])
            if len(samples) >= 2 and not self.ensemble.regressor.is_usable:
                ph.warning('Network unusable, least-squares fallback active')

        with self.console.phase('Prediction', total_phases=_N_PHASES) as ph:
            analysis = self.ensemble.analyze_pattern()
            predictions = [self.ensemble.predict(q) for q in queries]
            self.console.show_analysis(analysis)
            ph.detail(f'{len(predictions)} queries answered')
            self.debug_log.log_data('predictions',
                                    [p.to_dict() for p in predictions])

        figure_paths: List[str] = []
        with self.console.phase('Generating Figures', total_phases=_N_PHASES) as ph:
            if not self.config.visualization.enabled:
                ph.detail('disabled')
            else:
                try:
                    figure_paths = self.plotter.generate_all(self.ensemble, queries)
                    ph.metric('Figures', len(figure_paths))
                except Exception as e:
                    ph.warning(f'Visualization failed: {e}')
                    logger.debug('Visualization failure', exc_info=True)

        execution_time = time.time() - start_time
        spectrum = self.ensemble.analyzer.get_spectrum()

        with self.console.phase('Saving Results', total_phases=_N_PHASES) as ph:
            self._save(analysis, spectrum, queries, predictions, execution_time)
            ph.metric('Files', len(self.writer.get_saved_files()))

        self.console.separator()
        self.console.info(f'Pipeline completed in {execution_time:.2f}s')
        self.console.info(f'Outputs -> {self.config.output_dir}')
        self.console.separator()

        return PipelineResult(
            samples=self.ensemble.samples(),
            analysis=analysis,
            spectrum=spectrum,
            queries=queries,
            predictions=predictions,
            model_info=self.ensemble.get_info(),
            figure_paths=figure_paths,
            saved_files=self.writer.get_saved_files(),
            execution_time=execution_time,
            config=self.config,
        )

    # -----------------------------------------------------------------
    # Phases
    # -----------------------------------------------------------------

    @log_execution(logger=logger)
    def _train(self, samples: Sequence[Sample]) -> None:
        # One store replacement, so one retrain
        self.ensemble.replace_samples(samples)

    def _save(self, analysis: PatternAnalysis, spectrum: SpectralResult,
              queries: List[float], predictions: List[PredictionResult],
              execution_time: float) -> None:
        with timed_operation(logger, 'Saving results', level=logging.DEBUG):
            self.writer.save_samples_json(self.ensemble.export_samples())
            self.writer.save_samples_csv(self.ensemble.samples())
            if predictions:
                self.writer.save_predictions(queries, predictions)
            self.writer.save_analysis(analysis, spectrum)
            self.writer.save_execution_summary(
                n_samples=analysis.sample_count,
                n_queries=len(queries),
                execution_time=execution_time,
                model_info=self.ensemble.get_info(),
            )
            self.writer.save_config_snapshot(self.config)


# =========================================================================
# Convenience function
# =========================================================================

def run_pipeline(
    data_path: Optional[str] = None,
    queries: Sequence[float] = (),
    config: Optional[Config] = None,
) -> PipelineResult:
    """Run the full pipeline. Returns PipelineResult."""
    pipeline = PredictionPipeline(config)
    return pipeline.run(data_path, queries)


__all__ = ['PipelineResult', 'PredictionPipeline', 'run_pipeline']
