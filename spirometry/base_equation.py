"""
base_equation.py
================
Base Class for spirometry reference equations

Handles all common functionality:
- Input normalization and call-level validation
- Measure resolution (single value or uniform vector)
- Coefficient lookup (left merge against the coefficient table)
- Percent-of-predicted and the implausible-height warning
- DataFrame and record batch helpers

Child classes implement:
- _prepare_frame(frame, **options) -> frame with typed columns and age_lb
- _predict_core(merged) -> predicted values (NaN = missing)
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Type

import numpy as np
import pandas as pd

from .coefficients import CoefficientTable
from .exceptions import UsageError
from .records import Observation, SpirometryValues
from .validation import (
    as_series,
    check_lengths,
    resolve_measure,
    to_float,
    to_nullable,
    warn_implausible_height,
)

logger = logging.getLogger(__name__)


class BaseReferenceEquation(ABC):
    """
    Base class for published spirometry reference equations.

    A call flows: validation -> age band -> coefficient lookup -> formula
    -> optional ratio against observed values. Call-level problems raise
    UsageError before anything is evaluated; per-element problems come back
    as <NA> in a Float64 Series.
    """

    # Set by child classes
    measure_type: Type[Enum]
    input_names: Sequence[str] = ('sex', 'age', 'height')

    def __init__(self, config: Dict[str, Any], table: CoefficientTable):
        """
        Args:
            config: equation settings (see config.py)
            table: coefficient table the equation reads from
        """
        self.config = config
        self.name = config['name']
        self.table = table
        self.lookup_keys = list(table.key_fields)
        self.height_range = tuple(config['height_range'])
        self.height_unit = config['height_unit']

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, rows={len(self.table)})"

    # ========================================================================
    # ABSTRACT METHODS - Child classes must implement
    # ========================================================================

    @abstractmethod
    def _prepare_frame(self, frame: pd.DataFrame, **options) -> pd.DataFrame:
        """Coerce input columns and add the age_lb lookup column"""
        pass

    @abstractmethod
    def _predict_core(self, merged: pd.DataFrame) -> np.ndarray:
        """Evaluate the regression on inputs joined with coefficients"""
        pass

    # ========================================================================
    # TEMPLATE METHODS
    # ========================================================================

    def _collect(self, inputs: Dict[str, Any], extra: Optional[Dict[str, Any]] = None):
        """Wrap inputs as Series and check they share one length"""
        vectors = {name: as_series(values, name) for name, values in inputs.items()}
        checked = dict(vectors)
        if extra:
            checked.update({name: as_series(values, name) for name, values in extra.items()})
        n = check_lengths(checked)

        sex = inputs.get('sex')
        index = sex.index if isinstance(sex, pd.Series) else pd.RangeIndex(n)
        return vectors, n, index

    def _predict(self, measure: Any, inputs: Dict[str, Any], **options) -> pd.Series:
        """Predicted values for already-named inputs (template method)"""
        vectors, n, index = self._collect(inputs)
        measure = resolve_measure(measure, self.measure_type, n)

        frame = pd.DataFrame({name: series.to_numpy() for name, series in vectors.items()})
        frame['measure'] = measure.value
        frame = self._prepare_frame(frame, **options)

        merged = frame.merge(self.table.frame_view, how='left', on=self.lookup_keys,
                             validate='many_to_one')
        predicted = self._predict_core(merged)

        n_missing = int(np.count_nonzero(np.isnan(predicted)))
        logger.debug(f"{self.name} {measure.value}: n={n}, missing predictions={n_missing}")

        return to_nullable(predicted, index, f"predicted_{measure.value}")

    def _percent_of_predicted(self, observed: SpirometryValues, inputs: Dict[str, Any],
                              **options) -> pd.Series:
        """observed / predicted * 100 with the height plausibility warning"""
        vectors, n, index = self._collect(inputs, extra={observed.name: observed.values})
        predicted = self._predict(observed.measure, inputs, **options)

        warn_implausible_height(to_float(vectors['height']), self.height_range,
                                self.height_unit, self.name)

        raw = to_float(as_series(observed.values, observed.name))
        with np.errstate(divide='ignore', invalid='ignore'):
            pct = raw / predicted.to_numpy(dtype=float, na_value=np.nan) * 100

        return to_nullable(pct, index, f"pct_predicted_{observed.name}")

    # ========================================================================
    # BATCH HELPERS
    # ========================================================================

    def evaluate_frame(self, frame: pd.DataFrame, measure: Any,
                       observed_column: Optional[str] = None,
                       columns: Optional[Dict[str, str]] = None,
                       **options) -> pd.DataFrame:
        """
        Apply the equation to a DataFrame of observations.

        Args:
            frame: one row per observation
            measure: measure name, or a uniform vector of names
            observed_column: column with observed values; adds pct_predicted_<measure>
            columns: input name -> column name overrides (default: same name)
            **options: passed to the equation (e.g. adult=True for Wang)

        Returns:
            Copy of frame with predicted_<measure> (and pct_predicted_<measure>)
        """
        columns = {name: (columns or {}).get(name, name) for name in self.input_names}
        absent = [col for col in columns.values() if col not in frame.columns]
        if observed_column is not None and observed_column not in frame.columns:
            absent.append(observed_column)
        if absent:
            raise UsageError(f"Columns not found in input: {absent}")

        measure = resolve_measure(measure, self.measure_type, len(frame))
        inputs = {name: frame[col] for name, col in columns.items()}

        result = frame.copy()
        predicted = self._predict(measure, inputs, **options)
        result[predicted.name] = predicted

        if observed_column is not None:
            observed = SpirometryValues(measure=measure, values=frame[observed_column])
            pct = self._percent_of_predicted(observed, inputs, **options)
            result[pct.name] = pct

        logger.info(f"{self.name}: evaluated {len(result):,} rows for {measure.value}, "
                    f"{int(predicted.isna().sum()):,} without a prediction")
        return result

    def evaluate_observations(self, records: List[Observation], **options) -> pd.DataFrame:
        """Evaluate a list of Observation records sharing one measure"""
        if not records:
            raise UsageError("No observations supplied")

        frame = pd.DataFrame([asdict(record) for record in records])
        observed_column = 'raw_value' if frame['raw_value'].notna().any() else None
        return self.evaluate_frame(frame, measure=frame['measure'].tolist(),
                                   observed_column=observed_column, **options)
