"""
records.py
==========
Measures, observed values and per-request observation records

The percent-of-predicted entry points take exactly one spirometry measure.
SpirometryValues pairs that measure with its observed values so the
"which measure was supplied" question is answered once, at the edge.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Type

from .exceptions import UsageError


class KnudsonMeasure(str, Enum):
    """Measures with published Knudson (1983) coefficients"""
    FEV = 'fev'
    FVC = 'fvc'
    FEF2575 = 'fef2575'
    VMAX50 = 'vmax50'
    VMAX75 = 'vmax75'


class WangMeasure(str, Enum):
    """Measures with published Wang (1993) coefficients"""
    FEV = 'fev'
    FVC = 'fvc'
    FEV_FVC = 'fev_fvc'
    FEF2575 = 'fef2575'


@dataclass(frozen=True)
class SpirometryValues:
    """
    One spirometry measure and its observed values.

    `values` is a scalar or a 1-d array-like; missing entries (None, NaN,
    pd.NA) propagate to missing percentages.
    """
    measure: Enum
    values: Any

    @classmethod
    def from_keywords(cls, measure_type: Type[Enum], **measures: Any) -> 'SpirometryValues':
        """
        Build from keyword arguments where exactly one is not None.

        Args:
            measure_type: KnudsonMeasure or WangMeasure
            **measures: measure name -> observed values (None = not supplied)

        Raises:
            UsageError: zero or more than one measure supplied
        """
        supplied = {name: values for name, values in measures.items() if values is not None}
        if len(supplied) != 1:
            names = ', '.join(m.value for m in measure_type)
            raise UsageError(
                f"Exactly one spirometric variable ({names}) must be supplied, "
                f"got {len(supplied)}: {sorted(supplied) or 'none'}"
            )

        name, values = next(iter(supplied.items()))
        try:
            measure = measure_type(name)
        except ValueError:
            raise UsageError(f"Unsupported measure '{name}' for {measure_type.__name__}") from None
        return cls(measure=measure, values=values)

    @property
    def name(self) -> str:
        return self.measure.value


@dataclass
class Observation:
    """A single spirometry request (race is only used by Wang)"""
    sex: Any
    age: Optional[float]
    height: Optional[float]
    measure: str
    race: Optional[str] = None
    raw_value: Optional[float] = None

    def __post_init__(self):
        """Store enum measures by their string value"""
        if isinstance(self.measure, Enum):
            self.measure = self.measure.value
