"""
coefficients.py
===============
Coefficient rows and the immutable lookup table

Each reference equation stores one row per (measure, sex[, race], age_lb).
The table is built once from literal data (see tables.py) and only read
afterwards: the equations merge against `CoefficientTable.frame_view`, the
scalar helpers use `lookup()`.
"""

import logging
import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from enum import Enum
from types import MappingProxyType
from typing import ClassVar, Iterable, Iterator, List, Optional, Tuple, Union

import pandas as pd

from .exceptions import CoefficientTableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KnudsonCoefficients:
    """Linear regression in height (cm), age and age squared"""
    measure: str
    sex: int
    age_lb: int
    coef_const: float
    coef_height: float
    coef_age: float = 0.0
    coef_age_sq: float = 0.0

    KEY_FIELDS: ClassVar[Tuple[str, ...]] = ('measure', 'sex', 'age_lb')

    @property
    def key(self) -> tuple:
        return (self.measure, self.sex, self.age_lb)

    def evaluate(self, age: float, height: float) -> float:
        """Predicted value for one person in this stratum"""
        return (self.coef_const + self.coef_height * height
                + self.coef_age * age + self.coef_age_sq * age ** 2)


@dataclass(frozen=True)
class WangCoefficients:
    """Log-linear regression: ln(y) = alpha + beta * ln(height in m)"""
    measure: str
    race: str
    sex: str
    age_lb: int
    alpha: float
    beta: float

    KEY_FIELDS: ClassVar[Tuple[str, ...]] = ('measure', 'sex', 'race', 'age_lb')

    @property
    def key(self) -> tuple:
        return (self.measure, self.sex, self.race, self.age_lb)

    def evaluate(self, height: float) -> float:
        return math.exp(self.alpha) * height ** self.beta


CoefficientRow = Union[KnudsonCoefficients, WangCoefficients]


class CoefficientTable(Mapping):
    """
    Read-only mapping from lookup key to coefficient row.

    Keys are tuples ordered as the row type's KEY_FIELDS. Numeric key
    columns are stored as float in the tabular form so they merge cleanly
    against float inputs (ages, sex codes) that may contain NaN.
    """

    def __init__(self, name: str, rows: Iterable[CoefficientRow]):
        rows = list(rows)
        if not rows:
            raise CoefficientTableError(f"Coefficient table '{name}' has no rows")

        row_type = type(rows[0])
        if any(type(row) is not row_type for row in rows):
            raise CoefficientTableError(f"Coefficient table '{name}' mixes row types")

        data = {}
        for row in rows:
            if row.key in data:
                raise CoefficientTableError(f"Duplicate key {row.key} in coefficient table '{name}'")
            data[row.key] = row

        self.name = name
        self.row_type = row_type
        self.key_fields = row_type.KEY_FIELDS
        self._rows = MappingProxyType(data)

        frame = pd.DataFrame([asdict(row) for row in rows])
        for field in self.key_fields:
            if pd.api.types.is_numeric_dtype(frame[field]):
                frame[field] = frame[field].astype(float)
        self._frame = frame

        logger.info(f"Built coefficient table '{name}': {len(rows)} rows, "
                    f"measures={self.measures}")

    # ------------------------------------------------------------------
    # Mapping protocol
    # ------------------------------------------------------------------

    def __getitem__(self, key: tuple) -> CoefficientRow:
        return self._rows[self._normalize_key(key)]

    def __iter__(self) -> Iterator[tuple]:
        return iter(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __repr__(self) -> str:
        return f"CoefficientTable(name={self.name!r}, rows={len(self)})"

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @staticmethod
    def _normalize_key(key: tuple) -> tuple:
        # Enum members hash by name, so compare on their values
        return tuple(part.value if isinstance(part, Enum) else part for part in key)

    def lookup(self, *key) -> Optional[CoefficientRow]:
        """Row for the key, or None when the table has no such cell"""
        return self._rows.get(self._normalize_key(key))

    def keys_for(self, measure: Union[str, Enum]) -> List[tuple]:
        """All keys for one measure, in table order"""
        measure = measure.value if isinstance(measure, Enum) else measure
        return [key for key in self._rows if key[0] == measure]

    @property
    def measures(self) -> List[str]:
        return list(dict.fromkeys(key[0] for key in self._rows))

    @property
    def frame(self) -> pd.DataFrame:
        """Copy of the table as a DataFrame (one row per coefficient row)"""
        return self._frame.copy()

    @property
    def frame_view(self) -> pd.DataFrame:
        """The shared DataFrame; callers must not modify it"""
        return self._frame
