"""
knudson.py
==========
Knudson (1983) spirometry reference equations

RJ Knudson, MD Lebowitz, CJ Holberg and B Burrows published equations that
account for sex, age and height, but not race. Each sex has three age
strata with a separate linear fit:

    predicted = const + b_height * height + b_age * age + b_age_sq * age^2

Stratum lower bounds (age_lb):
- male (sex=1):   6-11 -> 6, 12-24 -> 12, 25+ -> 25
- female (sex=2): 6-10 -> 6, 11-19 -> 11, 20+ -> 20
- under 6, or sex/age missing or not 1/2 -> no stratum, prediction is <NA>

The female fit is the one without a break at 70, the usual choice in cystic
fibrosis research (Stanojevic et al. 2014, Table 1).

Height in centimeters.
"""

import logging
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from .base_equation import BaseReferenceEquation
from .coefficients import CoefficientTable
from .config import KNUDSON_CONFIG
from .records import KnudsonMeasure, SpirometryValues
from .tables import KNUDSON_TABLE
from .validation import to_float

logger = logging.getLogger(__name__)


class KnudsonEquation(BaseReferenceEquation):
    """
    Knudson (1983): age/sex-stratified linear regression on height and age

    Measures: fev, fvc, fef2575, vmax50, vmax75
    """

    measure_type = KnudsonMeasure
    input_names = ('sex', 'age', 'height')

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 table: Optional[CoefficientTable] = None):
        super().__init__(config or KNUDSON_CONFIG, table or KNUDSON_TABLE)
        self.age_bins: Dict[int, List[float]] = self.config['age_bins']

    # ========================================================================
    # AGE STRATIFICATION
    # ========================================================================

    def age_lower_bound(self, sex: Any, age: Any) -> np.ndarray:
        """
        Stratum lower bound for each (sex, age) pair.

        Returns:
            Float array of age_lb values, NaN where no stratum applies
        """
        sex = to_float(sex)
        age = to_float(age)
        age_lb = np.full(len(age), np.nan)

        for sex_code, edges in self.age_bins.items():
            mask = sex == sex_code
            if not mask.any():
                continue
            bands = pd.cut(age[mask], bins=edges, right=False, labels=edges[:-1])
            age_lb[mask] = np.asarray(bands.astype(float))

        return age_lb

    # ========================================================================
    # CORE
    # ========================================================================

    def _prepare_frame(self, frame: pd.DataFrame, **options) -> pd.DataFrame:
        frame['sex'] = to_float(frame['sex'])
        frame['age'] = to_float(frame['age'])
        frame['height'] = to_float(frame['height'])
        frame['age_lb'] = self.age_lower_bound(frame['sex'], frame['age'])
        return frame

    def _predict_core(self, merged: pd.DataFrame) -> np.ndarray:
        age = merged['age']
        predicted = (merged['coef_const']
                     + merged['coef_height'] * merged['height']
                     + merged['coef_age'] * age
                     + merged['coef_age_sq'] * age ** 2)
        return predicted.to_numpy(dtype=float)

    # ========================================================================
    # PUBLIC API
    # ========================================================================

    def predicted(self, sex: Any, age: Any, height: Any, measure: Any) -> pd.Series:
        """
        Predicted spirometry from Knudson (1983).

        Args:
            sex: 1 = male, 2 = female
            age: age at the spirometry observation (years)
            height: height (cm)
            measure: 'fev', 'fvc', 'fef2575', 'vmax50' or 'vmax75', either a
                single value or a vector of identical values

        Returns:
            Float64 Series, <NA> where inputs or the coefficient lookup are missing
        """
        return self._predict(measure, {'sex': sex, 'age': age, 'height': height})

    def pct_predicted(self, sex: Any, age: Any, height: Any,
                      observed: SpirometryValues) -> pd.Series:
        """Percentage of predicted: observed / predicted * 100"""
        return self._percent_of_predicted(observed, {'sex': sex, 'age': age, 'height': height})


_EQUATION = KnudsonEquation()


def predicted_knudson(sex: Any, age: Any, height: Any, measure: Any) -> pd.Series:
    """Predicted spirometry based on Knudson (1983); see KnudsonEquation.predicted"""
    return _EQUATION.predicted(sex, age, height, measure)


def pct_knudson(sex: Any, age: Any, height: Any,
                fev: Any = None, fvc: Any = None, vmax50: Any = None,
                vmax75: Any = None, fef2575: Any = None,
                race: Any = None) -> pd.Series:
    """
    Percentage of predicted based on Knudson (1983).

    Exactly one of fev, fvc, vmax50, vmax75 or fef2575 must be given; it
    selects the measure and supplies the observed values.

    Args:
        sex: 1 = male, 2 = female
        age: age (years)
        height: height (cm); values outside 100-250 cm trigger an
            ImplausibleHeightWarning but are still evaluated
        fev: forced expiratory volume in one second (L)
        fvc: forced vital capacity (L)
        vmax50: maximal flow after exhalation of 50% of FVC
        vmax75: maximal flow after exhalation of 75% of FVC
        fef2575: forced expiratory flow during the middle half of FVC
        race: ignored; accepted so calls can share a signature with pct_wang

    Raises:
        UsageError: zero or several measures, or vectors of different lengths
    """
    observed = SpirometryValues.from_keywords(
        KnudsonMeasure, fev=fev, fvc=fvc, vmax50=vmax50, vmax75=vmax75, fef2575=fef2575
    )
    return _EQUATION.pct_predicted(sex, age, height, observed)
