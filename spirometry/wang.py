"""
wang.py
=======
Wang (1993) spirometry reference equations

Based on the Harvard Six Cities Study, derived for black and white children
aged 6 to 18. One log-linear fit per measure, sex, race and year of age:

    ln(predicted) = alpha + beta * ln(height)
    predicted     = exp(alpha) * height ^ beta

Key features:
- age_lb = floor(age), no sex-specific strata
- adult mode reuses the 18 year old equations for ages 19 and over;
  otherwise those ages have no coefficients and return <NA>
- race other than 'white'/'black' has no coefficients and returns <NA>
- FEF25-75 was not fitted for ages 6 and 7, so those return <NA>
- sex outside {'m', 'f', missing} is a usage error for the whole call

Height in meters.
Reference: doi:10.1002/ppul.1950150204
"""

import logging
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd

from .base_equation import BaseReferenceEquation
from .coefficients import CoefficientTable
from .config import WANG_CONFIG
from .exceptions import UsageError
from .records import SpirometryValues, WangMeasure
from .tables import WANG_TABLE
from .validation import to_float

logger = logging.getLogger(__name__)


class WangEquation(BaseReferenceEquation):
    """
    Wang (1993): race/sex/age-stratified log-linear regression on height

    Measures: fev, fvc, fev_fvc, fef2575
    """

    measure_type = WangMeasure
    input_names = ('sex', 'age', 'race', 'height')

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 table: Optional[CoefficientTable] = None):
        super().__init__(config or WANG_CONFIG, table or WANG_TABLE)
        self.sex_codes = tuple(self.config['sex_codes'])
        self.max_age = self.config['max_age']
        self.adult_age = self.config['adult_age']

    # ========================================================================
    # AGE STRATIFICATION
    # ========================================================================

    def clamp_adult_age(self, age: np.ndarray) -> np.ndarray:
        """Map ages at or above the adult cut-off onto the oldest fitted year"""
        with np.errstate(invalid='ignore'):
            return np.where(age >= self.adult_age, float(self.max_age), age)

    def age_lower_bound(self, age: Any, adult: bool = False) -> np.ndarray:
        """Whole year of age used for the lookup (after the optional adult clamp)"""
        age = to_float(age)
        if adult:
            age = self.clamp_adult_age(age)
        return np.floor(age)

    # ========================================================================
    # CORE
    # ========================================================================

    def _check_sex(self, sex: pd.Series) -> None:
        missing = sex.isna()
        invalid = ~missing & ~sex.isin(self.sex_codes)
        if invalid.any():
            examples = sorted({str(value) for value in sex[invalid]})[:5]
            raise UsageError(f"invalid input for sex (must be 'm', 'f' or missing), got {examples}")

    def _prepare_frame(self, frame: pd.DataFrame, adult: bool = False, **options) -> pd.DataFrame:
        sex = frame['sex'].astype(object)
        self._check_sex(sex)

        # object keys so all-missing columns still merge against the string table keys
        frame['sex'] = sex
        frame['race'] = frame['race'].astype(object)

        frame['age_lb'] = self.age_lower_bound(frame['age'], adult=adult)
        frame['height'] = to_float(frame['height'])
        return frame

    def _predict_core(self, merged: pd.DataFrame) -> np.ndarray:
        alpha = merged['alpha'].to_numpy(dtype=float)
        beta = merged['beta'].to_numpy(dtype=float)
        height = merged['height'].to_numpy(dtype=float)
        with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
            return np.exp(alpha) * np.power(height, beta)

    # ========================================================================
    # PUBLIC API
    # ========================================================================

    def predicted(self, sex: Any, age: Any, race: Any, height: Any, measure: Any,
                  adult: bool = False) -> pd.Series:
        """
        Predicted spirometry from Wang (1993).

        Args:
            sex: 'm' = male, 'f' = female (or missing)
            age: age at the spirometry observation (years, may be fractional)
            race: 'white' or 'black'; anything else yields <NA>
            height: height (m)
            measure: 'fev', 'fvc', 'fev_fvc' or 'fef2575', single or uniform vector
            adult: if False, ages 19 and over return <NA>; if True, the 18 year
                old equations are applied to adults

        Returns:
            Float64 Series, <NA> where inputs or the coefficient lookup are missing

        Raises:
            UsageError: bad measure, mismatched lengths, or invalid sex codes
        """
        return self._predict(measure, {'sex': sex, 'age': age, 'race': race, 'height': height},
                             adult=adult)

    def pct_predicted(self, sex: Any, race: Any, age: Any, height: Any,
                      observed: SpirometryValues, adult: bool = False) -> pd.Series:
        """Percentage of predicted: observed / predicted * 100"""
        return self._percent_of_predicted(
            observed, {'sex': sex, 'age': age, 'race': race, 'height': height}, adult=adult
        )


_EQUATION = WangEquation()


def predicted_wang(sex: Any, age: Any, race: Any, height: Any, measure: Any,
                   adult: bool = False) -> pd.Series:
    """Predicted spirometry based on Wang (1993); see WangEquation.predicted"""
    return _EQUATION.predicted(sex, age, race, height, measure, adult=adult)


def pct_wang(sex: Any, race: Any, age: Any, height: Any,
             fev: Any = None, fvc: Any = None, fev_fvc: Any = None,
             fef2575: Any = None, adult: bool = False) -> pd.Series:
    """
    Percentage of predicted based on Wang (1993).

    Exactly one of fev, fvc, fev_fvc or fef2575 must be given.

    Args:
        sex: 'm' = male, 'f' = female
        race: 'white', 'black' or other
        age: age (years)
        height: height (m); values outside 0.5-2.5 m trigger an
            ImplausibleHeightWarning but are still evaluated
        fev: forced expiratory volume in one second (L)
        fvc: forced vital capacity (L)
        fev_fvc: FEV1/FVC ratio
        fef2575: forced expiratory flow during the middle half of FVC (L/s)
        adult: apply the 18 year old equations to ages 19 and over
    """
    observed = SpirometryValues.from_keywords(
        WangMeasure, fev=fev, fvc=fvc, fev_fvc=fev_fvc, fef2575=fef2575
    )
    return _EQUATION.pct_predicted(sex, race, age, height, observed, adult=adult)
