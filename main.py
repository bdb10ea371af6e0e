#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Pattern Ensemble: Main Entry Point
==================================

Usage
-----
    python main.py data/samples.json --query 4 --query 5.5
    python main.py data/samples.csv --queries data/queries.txt --seed 7

Pipeline Phases
---------------
1. Sample Loading  : JSON export or CSV table
2. Training        : neural network, spectral analysis, k-NN index
3. Prediction      : query inputs and pattern statistics
4. Visualisation   : prediction curve and amplitude spectrum PNGs
5. Result Export   : samples, prediction history, run summary
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Predict outputs for new inputs from sparse (input, output) samples.')
    parser.add_argument('data', nargs='?', default=None,
                        help='Sample file (.json or .csv); defaults to data/samples.*')
    parser.add_argument('-q', '--query', type=float, action='append', default=[],
                        help='Input to predict (repeatable)')
    parser.add_argument('--queries', default=None,
                        help='File of query inputs (one per line, or CSV with an input column)')
    parser.add_argument('--output', default=None,
                        help='Base directory for result/ (default: current directory)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for network training')
    parser.add_argument('--epochs', type=int, default=None,
                        help='Epoch bound per retrain')
    parser.add_argument('--no-figures', action='store_true',
                        help='Skip figure generation')
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Configure and execute the prediction pipeline."""
    args = build_parser().parse_args(argv)

    # Lazy imports (avoids heavy loading on --help)
    try:
        from pattern_ensemble.pipeline import PredictionPipeline
        from pattern_ensemble.config import get_default_config
    except ImportError:
        from pipeline import PredictionPipeline
        from config import get_default_config

    config = get_default_config()
    if args.output is not None:
        config.paths.base_dir = Path(args.output)
    if args.seed is not None:
        config.random.seed = args.seed
    if args.epochs is not None:
        config.regressor.max_epochs = args.epochs
    if args.no_figures:
        config.visualization.enabled = False

    pipeline = PredictionPipeline(config)

    try:
        queries = list(args.query)
        if args.queries:
            queries.extend(pipeline.loader.load_queries(args.queries))

        result = pipeline.run(args.data, queries)

        pipeline.console.show_run_summary(result)
        pipeline.console.show_completion(config.output_dir)

    except Exception as e:
        pipeline.console.error(f'{type(e).__name__}: {e}')
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    main()
