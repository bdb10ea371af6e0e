# -*- coding: utf-8 -*-
"""
Centralised Configuration for the Pattern Ensemble
==================================================

All configurable parameters are defined here as typed dataclasses.
The master ``Config`` class composes every sub-config and provides
serialisation, summary printing, and global singleton management.

Configuration Groups
--------------------
- PathConfig           : directory structure
- RandomConfig         : reproducibility seed
- SpectralConfig       : frequency-domain extrapolator
- NeighborConfig       : weighted k-NN regressor
- RegressorConfig      : trainable network
- EnsembleConfig       : model weights and combination
- VisualizationConfig  : figure appearance defaults
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Dict, Optional, Tuple
import json


# =========================================================================
# Path Configuration
# =========================================================================

@dataclass
class PathConfig:
    """File and directory paths, all derived from *base_dir*."""
    base_dir: Path = field(default_factory=lambda: Path.cwd())

    @property
    def data_dir(self) -> Path:
        return self.base_dir / "data"

    @property
    def output_dir(self) -> Path:
        return self.base_dir / "result"

    @property
    def figures_dir(self) -> Path:
        return self.output_dir / "figures"

    @property
    def results_dir(self) -> Path:
        return self.output_dir / "results"

    @property
    def logs_dir(self) -> Path:
        return self.output_dir / "logs"

    def ensure_directories(self) -> None:
        """Create every output directory if missing."""
        for d in [self.output_dir, self.figures_dir,
                  self.results_dir, self.logs_dir]:
            d.mkdir(parents=True, exist_ok=True)


# =========================================================================
# Reproducibility
# =========================================================================

@dataclass
class RandomConfig:
    """Seed for network initialisation and epoch shuffling."""
    seed: Optional[int] = 42


# =========================================================================
# Sub-model Parameters
# =========================================================================

@dataclass
class SpectralConfig:
    """Frequency-domain extrapolator blend (weights sum to 1)."""
    sinusoid_weight: float = 0.4
    interpolation_weight: float = 0.4
    phase_weight: float = 0.2
    pad_to_power_of_two: bool = True


@dataclass
class NeighborConfig:
    """Weighted k-NN regressor.

    Parameters
    ----------
    k : int
        Neighbours per query (clamped to the sample count).
    distance_weight, recency_weight, similarity_weight : float
        Relevance factors, renormalised to sum to 1.
    """
    k: int = 3
    distance_weight: float = 0.6
    recency_weight: float = 0.3
    similarity_weight: float = 0.1


@dataclass
class RegressorConfig:
    """Trainable network and its SGD schedule."""
    hidden_layers: Tuple[int, ...] = (16, 8)
    learning_rate: float = 0.01
    momentum: float = 0.9
    max_epochs: int = 1000          # hard bound per retrain
    tolerance: float = 1e-3         # early stop on epoch MSE
    lr_decay: float = 0.95
    decay_every: int = 100
    leaky_slope: float = 0.01


@dataclass
class EnsembleConfig:
    """Base model weights and confidence weighting."""
    model_weights: Dict[str, float] = field(default_factory=lambda: {
        'neural': 0.4,
        'fourier': 0.3,
        'neighbor': 0.3,
    })
    confidence_weighting: bool = True


# =========================================================================
# Visualisation
# =========================================================================

@dataclass
class VisualizationConfig:
    """Figure appearance defaults."""
    enabled: bool = True
    figsize: tuple = (10, 6)
    dpi: int = 150
    curve_points: int = 200     # ensemble curve resolution
    curve_margin: float = 0.25  # extend the curve past the data by this share of the range
    save_formats: List[str] = field(default_factory=lambda: ["png"])


# =========================================================================
# Master Configuration
# =========================================================================

@dataclass
class Config:
    """Master configuration composing every sub-config."""
    paths: PathConfig = field(default_factory=PathConfig)
    random: RandomConfig = field(default_factory=RandomConfig)

    # Sub-models
    spectral: SpectralConfig = field(default_factory=SpectralConfig)
    neighbor: NeighborConfig = field(default_factory=NeighborConfig)
    regressor: RegressorConfig = field(default_factory=RegressorConfig)
    ensemble: EnsembleConfig = field(default_factory=EnsembleConfig)

    visualization: VisualizationConfig = field(default_factory=VisualizationConfig)

    # --- convenience properties ---

    @property
    def output_dir(self) -> str:
        return str(self.paths.output_dir)

    # --- serialisation ---

    def to_dict(self) -> Dict:
        def _cvt(obj):
            if hasattr(obj, '__dataclass_fields__'):
                return {k: _cvt(v) for k, v in obj.__dict__.items()}
            if isinstance(obj, Path):
                return str(obj)
            if isinstance(obj, (list, tuple)):
                return [_cvt(i) for i in obj]
            if isinstance(obj, dict):
                return {k: _cvt(v) for k, v in obj.items()}
            return obj
        return _cvt(self)

    def save(self, filepath: Path) -> None:
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    def summary(self) -> str:
        weights = self.ensemble.model_weights
        return (
            f"\n{'='*72}\n"
            f"  Pattern Ensemble Configuration Summary\n"
            f"{'='*72}\n\n"
            f"  ENSEMBLE\n"
            f"    Weights         : neural {weights.get('neural')}"
            f" / fourier {weights.get('fourier')}"
            f" / neighbor {weights.get('neighbor')}\n"
            f"    Conf. weighting : {self.ensemble.confidence_weighting}\n"
            f"    Seed            : {self.random.seed}\n\n"
            f"  TRAINABLE REGRESSOR\n"
            f"    Hidden layers   : {list(self.regressor.hidden_layers)}\n"
            f"    Learning rate   : {self.regressor.learning_rate}"
            f"  (x{self.regressor.lr_decay} every {self.regressor.decay_every})\n"
            f"    Momentum        : {self.regressor.momentum}\n"
            f"    Max epochs      : {self.regressor.max_epochs}\n"
            f"    Tolerance       : {self.regressor.tolerance}\n\n"
            f"  FREQUENCY ANALYZER\n"
            f"    Blend           : {self.spectral.sinusoid_weight}"
            f" / {self.spectral.interpolation_weight}"
            f" / {self.spectral.phase_weight}\n"
            f"    Pad to 2^k      : {self.spectral.pad_to_power_of_two}\n\n"
            f"  NEIGHBOR REGRESSOR\n"
            f"    k               : {self.neighbor.k}\n"
            f"    Factors         : distance {self.neighbor.distance_weight}"
            f" / recency {self.neighbor.recency_weight}"
            f" / similarity {self.neighbor.similarity_weight}\n"
            f"{'='*72}\n"
        )


# =========================================================================
# Global Config Singleton
# =========================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """Return global config (create default on first call)."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def get_default_config() -> Config:
    """Return a *fresh* default Config instance."""
    return Config()


def set_config(config: Config) -> None:
    """Replace the global config singleton."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset to a fresh default Config."""
    global _config
    _config = Config()
