# -*- coding: utf-8 -*-
"""
Tests for configuration and the two-channel logging system.

Run with:
    pytest tests/test_config_logging.py -v
"""

import io
import json
import logging

import pytest

import config as config_module
from config import Config, PathConfig
from loggers import (
    ConsoleLogger,
    DebugLogger,
    LogContext,
    log_context,
    log_execution,
    setup_logging,
    timed_operation,
)
from loggers.context import Colors


# =========================================================================
# Configuration
# =========================================================================

class TestConfig:

    def test_defaults(self):
        cfg = Config()
        assert cfg.ensemble.model_weights == {'neural': 0.4, 'fourier': 0.3, 'neighbor': 0.3}
        assert cfg.neighbor.k == 3
        assert cfg.regressor.hidden_layers == (16, 8)
        assert cfg.regressor.max_epochs == 1000

    def test_paths_derive_from_base(self, tmp_path):
        paths = PathConfig(base_dir=tmp_path)
        assert paths.output_dir == tmp_path / 'result'
        assert paths.logs_dir == tmp_path / 'result' / 'logs'
        paths.ensure_directories()
        assert paths.figures_dir.is_dir()
        assert paths.results_dir.is_dir()

    def test_to_dict_and_save(self, tmp_path):
        cfg = Config(paths=PathConfig(base_dir=tmp_path))
        data = cfg.to_dict()
        assert data['paths']['base_dir'] == str(tmp_path)
        assert data['regressor']['hidden_layers'] == [16, 8]

        path = tmp_path / 'config.json'
        cfg.save(path)
        with open(path) as f:
            assert json.load(f) == data

    def test_summary_mentions_weights(self):
        text = Config().summary()
        assert 'neural 0.4' in text
        assert 'k               : 3' in text

    def test_global_singleton(self):
        try:
            custom = Config()
            custom.neighbor.k = 9
            config_module.set_config(custom)
            assert config_module.get_config() is custom
            assert config_module.get_default_config() is not custom
        finally:
            config_module.reset_config()
        assert config_module.get_config().neighbor.k == 3


# =========================================================================
# Console logger
# =========================================================================

class TestConsoleLogger:

    def test_phase_success(self):
        stream = io.StringIO()
        console = ConsoleLogger(use_color=False, stream=stream)
        with console.phase('Training', total_phases=2) as ph:
            ph.metric('Epochs', 12)
        out = stream.getvalue()
        assert '[1/2] Training' in out
        assert 'OK' in out
        assert console.phases[0].status == 'completed'
        assert console.phases[0].sub_metrics == {'Epochs': 12}

    def test_phase_failure_reraises(self):
        stream = io.StringIO()
        console = ConsoleLogger(use_color=False, stream=stream)
        with pytest.raises(RuntimeError):
            with console.phase('Loading'):
                raise RuntimeError('boom')
        assert console.phases[0].status == 'failed'
        assert 'FAIL' in stream.getvalue()
        assert 'phase' not in LogContext.get()

    def test_colour_codes(self):
        stream = io.StringIO()
        ConsoleLogger(use_color=True, stream=stream).info('hello')
        text = stream.getvalue()
        assert '\033[' in text
        assert Colors.strip(text).strip() == 'i hello'

    def test_table_alignment(self):
        stream = io.StringIO()
        console = ConsoleLogger(use_color=False, stream=stream)
        console.table(['A', 'B'], [['1.5', 'x']], col_widths=[5, 5], indent=0)
        last = stream.getvalue().splitlines()[-1]
        assert last == '  1.5  x    '


# =========================================================================
# Debug logger
# =========================================================================

class TestDebugLogger:

    def test_entries_and_flush(self, tmp_path):
        dl = DebugLogger(str(tmp_path), bridged=())
        dl.info('started')
        dl.log_data('weights', {'w': [1, 2]})
        path = dl.close()
        with open(path, encoding='utf-8') as f:
            entries = json.load(f)
        assert [e['level'] for e in entries] == ['INFO', 'DATA']
        assert entries[1]['data'] == {'w': [1, 2]}

    def test_numpy_payload(self, tmp_path):
        import numpy as np
        dl = DebugLogger(str(tmp_path), bridged=())
        dl.log_data('arr', {'a': np.arange(3), 'f': np.float64(0.5)})
        with open(dl.close(), encoding='utf-8') as f:
            assert json.load(f)[0]['data'] == {'a': [0, 1, 2], 'f': 0.5}

    def test_bridges_stdlib_logging(self, tmp_path):
        std = logging.getLogger('forecasting.bridge_test')
        parent = logging.getLogger('forecasting')
        level_before = parent.level

        dl = DebugLogger(str(tmp_path), bridged=('forecasting',))
        std.debug('retrained %d models', 3)
        assert dl.entries[-1]['message'] == 'retrained 3 models'
        assert dl.entries[-1]['level'] == 'DEBUG'
        dl.close()

        assert parent.level == level_before
        count = dl.entry_count
        std.warning('after close')
        assert dl.entry_count == count

    def test_phase_annotation(self, tmp_path):
        dl = DebugLogger(str(tmp_path), bridged=())
        with log_context(phase='Prediction'):
            dl.debug('inside')
        dl.debug('outside')
        assert [e['phase'] for e in dl.entries] == ['Prediction', '']
        dl.close()

    def test_extra_context_keys(self, tmp_path):
        dl = DebugLogger(str(tmp_path), bridged=())
        with log_context(phase='Training', source='samples.csv'):
            dl.debug('inside')
        dl.debug('outside')
        inside, outside = dl.entries
        assert inside['phase'] == 'Training'
        assert inside['context'] == {'source': 'samples.csv'}
        assert 'context' not in outside
        dl.close()

    def test_setup_logging(self, tmp_path):
        console, debug = setup_logging(str(tmp_path), use_color=False)
        assert isinstance(console, ConsoleLogger)
        assert debug.path.startswith(str(tmp_path / 'logs'))
        debug.close()


# =========================================================================
# Decorators
# =========================================================================

class TestDecorators:

    def test_log_execution(self, caplog):
        log = logging.getLogger('pattern_ensemble.test')

        @log_execution(logger=log, show_result=True)
        def add(a, b):
            return a + b

        with caplog.at_level(logging.DEBUG, logger='pattern_ensemble.test'):
            assert add(2, 3) == 5
        messages = [r.getMessage() for r in caplog.records]
        assert any('Calling' in m and 'add' in m for m in messages)
        assert any('returned 5' in m for m in messages)

    def test_log_execution_reraises(self, caplog):
        log = logging.getLogger('pattern_ensemble.test')

        @log_execution(logger=log)
        def broken():
            raise ValueError('bad')

        with caplog.at_level(logging.DEBUG, logger='pattern_ensemble.test'):
            with pytest.raises(ValueError):
                broken()
        assert any(r.levelno == logging.ERROR for r in caplog.records)

    def test_timed_operation(self, caplog):
        log = logging.getLogger('pattern_ensemble.test')
        with caplog.at_level(logging.INFO, logger='pattern_ensemble.test'):
            with timed_operation(log, 'export'):
                pass
        messages = [r.getMessage() for r in caplog.records]
        assert messages[0] == 'Starting: export'
        assert messages[1].startswith('Finished: export')
