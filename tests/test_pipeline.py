# -*- coding: utf-8 -*-
"""
End-to-end tests for the prediction pipeline and the command line.

Run with:
    pytest tests/test_pipeline.py -v
"""

import json
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from config import Config, PathConfig
from forecasting.samples import Sample
from main import build_parser, main
from pipeline import PipelineResult, PredictionPipeline


def _config(tmp_path, figures=False):
    config = Config(paths=PathConfig(base_dir=tmp_path))
    config.regressor.max_epochs = 40
    config.visualization.enabled = figures
    config.visualization.curve_points = 25
    config.visualization.dpi = 50
    return config


@pytest.fixture
def sample_csv(tmp_path):
    data_dir = tmp_path / 'data'
    data_dir.mkdir()
    path = data_dir / 'samples.csv'
    x = np.arange(1, 9, dtype=float)
    pd.DataFrame({'input': x, 'output': 2 * x + np.sin(x)}).to_csv(path, index=False)
    return path


class TestPredictionPipeline:

    def test_run_from_file(self, tmp_path, sample_csv):
        config = _config(tmp_path)
        result = PredictionPipeline(config, use_color=False).run(str(sample_csv), [9.0, 10.5])

        assert isinstance(result, PipelineResult)
        assert len(result.samples) == 8
        assert result.analysis.sample_count == 8
        assert result.analysis.correlation > 0.9
        assert len(result.predictions) == 2
        for p in result.predictions:
            assert np.isfinite(p.prediction)
            assert 0.0 <= p.confidence <= 0.95
            assert p.method.startswith('ensemble')
        assert result.figure_paths == []
        assert result.execution_time >= 0.0

        results_dir = tmp_path / 'result' / 'results'
        for name in ('samples.json', 'samples.csv', 'predictions.csv',
                     'pattern_analysis.json', 'execution_summary.json',
                     'config_snapshot.json'):
            assert (results_dir / name).exists(), name

        with open(results_dir / 'config_snapshot.json', encoding='utf-8') as f:
            assert json.load(f)['regressor']['max_epochs'] == 40

    def test_default_data_path(self, tmp_path, sample_csv):
        result = PredictionPipeline(_config(tmp_path), use_color=False).run(queries=[1.0])
        assert len(result.samples) == 8

    def test_missing_data_raises(self, tmp_path):
        pipeline = PredictionPipeline(_config(tmp_path), use_color=False)
        with pytest.raises(FileNotFoundError):
            pipeline.run()
        assert pipeline.console.phases[0].status == 'failed'

    def test_in_memory_samples(self, tmp_path):
        samples = [Sample(float(i), float(3 * i), float(i)) for i in range(5)]
        result = PredictionPipeline(_config(tmp_path), use_color=False).run(
            samples=samples, queries=[5.0])
        assert result.samples == samples
        assert result.model_info['retrain_count'] == 1

    def test_single_sample_run(self, tmp_path):
        result = PredictionPipeline(_config(tmp_path), use_color=False).run(
            samples=[Sample(5.0, 9.0, 0.0)], queries=[1.0])
        assert result.predictions[0].prediction == 9.0
        assert result.predictions[0].method == 'single point'

    def test_prediction_table(self, tmp_path, sample_csv):
        result = PredictionPipeline(_config(tmp_path), use_color=False).run(
            str(sample_csv), [3.5])
        row = result.prediction_table()[0]
        assert row['input'] == 3.5
        assert set(row) >= {'prediction', 'confidence', 'method', 'per_model'}

    def test_figures(self, tmp_path, sample_csv):
        result = PredictionPipeline(_config(tmp_path, figures=True), use_color=False).run(
            str(sample_csv), [9.0])
        names = sorted(Path(p).name for p in result.figure_paths)
        assert names == ['amplitude_spectrum.png', 'prediction_curve.png']

    def test_figures_when_a_model_is_dropped(self, tmp_path, sample_csv, monkeypatch):
        pipeline = PredictionPipeline(_config(tmp_path, figures=True), use_color=False)
        monkeypatch.setattr(pipeline.ensemble.analyzer, 'predict', lambda x: float('nan'))
        result = pipeline.run(str(sample_csv), [9.0])
        methods = [c.method for c in result.predictions[0].per_model]
        assert len(methods) == 2 and 'fourier' not in methods
        assert len(result.figure_paths) == 2

    def test_debug_log_written(self, tmp_path, sample_csv):
        pipeline = PredictionPipeline(_config(tmp_path), use_color=False)
        pipeline.run(str(sample_csv), [1.0])
        with open(pipeline.debug_log.path, encoding='utf-8') as f:
            entries = json.load(f)
        assert any(e['level'] == 'DATA' and e['message'] == 'predictions' for e in entries)
        assert any('Retrain' in e['message'] for e in entries)

        saved = [e for e in entries if e['message'].startswith('Finished: Saving results')]
        assert len(saved) == 1
        assert saved[0]['phase'] == 'Saving Results'
        retrains = [e for e in entries if 'Retrain' in e['message']]
        assert all(e['context'] == {'source': str(sample_csv)} for e in retrains)

    def test_in_memory_source_recorded(self, tmp_path):
        pipeline = PredictionPipeline(_config(tmp_path), use_color=False)
        pipeline.run(samples=[Sample(1.0, 2.0, 0.0), Sample(2.0, 4.0, 1.0)], queries=[3.0])
        assert any(e.get('context') == {'source': 'memory'} for e in pipeline.debug_log.entries)


class TestCommandLine:

    def test_parser(self):
        args = build_parser().parse_args(['s.csv', '-q', '1', '--query', '2.5',
                                          '--seed', '3', '--no-figures'])
        assert args.data == 's.csv'
        assert args.query == [1.0, 2.5]
        assert args.seed == 3
        assert args.no_figures

    def test_main_runs(self, tmp_path, sample_csv, capsys):
        queries = tmp_path / 'queries.txt'
        queries.write_text('11\n12\n')
        main([str(sample_csv), '-q', '9', '--queries', str(queries),
              '--output', str(tmp_path), '--epochs', '30', '--no-figures'])

        out = capsys.readouterr().out
        assert 'RESULTS SUMMARY' in out
        df = pd.read_csv(tmp_path / 'result' / 'results' / 'predictions.csv')
        assert list(df['input']) == [9.0, 11.0, 12.0]

    def test_main_failure_exits(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main([str(tmp_path / 'missing.csv'), '--output', str(tmp_path),
                  '--no-figures'])
        assert exc.value.code == 1
