"""
spirometry - predicted and percent-of-predicted spirometry values.

A unification of published reference equations:
- knudson: Knudson (1983), sex/age-stratified linear fits (height in cm)
- wang: Wang (1993), race/sex/age-stratified log-linear fits for ages 6-18 (height in m)

Results are pandas Float64 Series; <NA> marks elements without a prediction.
"""

__version__ = "0.2.0"

from .coefficients import CoefficientTable, KnudsonCoefficients, WangCoefficients
from .exceptions import (
    CoefficientTableError,
    ConfigurationError,
    ImplausibleHeightWarning,
    SpirometryError,
    UsageError,
)
from .knudson import KnudsonEquation, pct_knudson, predicted_knudson
from .records import KnudsonMeasure, Observation, SpirometryValues, WangMeasure
from .tables import KNUDSON_TABLE, WANG_TABLE
from .wang import WangEquation, pct_wang, predicted_wang

__all__ = [
    "CoefficientTable",
    "CoefficientTableError",
    "ConfigurationError",
    "ImplausibleHeightWarning",
    "KNUDSON_TABLE",
    "KnudsonCoefficients",
    "KnudsonEquation",
    "KnudsonMeasure",
    "Observation",
    "SpirometryError",
    "SpirometryValues",
    "UsageError",
    "WANG_TABLE",
    "WangCoefficients",
    "WangEquation",
    "WangMeasure",
    "pct_knudson",
    "pct_wang",
    "predicted_knudson",
    "predicted_wang",
]
