import importlib.metadata
from typing import Final

try:
    _version = importlib.metadata.version(__name__)
except importlib.metadata.PackageNotFoundError:
    _version = "0.0.0"  # Fallback for development mode
__version__: Final[str] = _version

from corrsketch.aggregations import AggregateFunction
from corrsketch.column import Column, ColumnPair, ColumnType
from corrsketch.errors import (
    EmptySynopsisError,
    InvalidInputError,
    SketchStateError,
    UnsupportedCombinationError,
)
from corrsketch.estimate import BootstrapEstimate, Estimate, MIEstimate
from corrsketch.estimators import CorrelationType, Estimator
from corrsketch.hashfunc import sha1_hash32
from corrsketch.join import PairedSample
from corrsketch.kmv import MinValueSketch
from corrsketch.sketch import (
    CorrelationSketch,
    FrozenCorrelationSketch,
    SketchConfig,
    SketchType,
)

__all__ = [
    "AggregateFunction",
    "BootstrapEstimate",
    "Column",
    "ColumnPair",
    "ColumnType",
    "CorrelationSketch",
    "CorrelationType",
    "EmptySynopsisError",
    "Estimate",
    "Estimator",
    "FrozenCorrelationSketch",
    "InvalidInputError",
    "MIEstimate",
    "MinValueSketch",
    "PairedSample",
    "SketchConfig",
    "SketchStateError",
    "SketchType",
    "UnsupportedCombinationError",
    "sha1_hash32",
]
