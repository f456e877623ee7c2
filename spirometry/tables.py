"""
tables.py
=========
Literal coefficient tables for Knudson (1983) and Wang (1993)

Data entry only. Values are typed in the order of the published tables and
turned into CoefficientTable objects once, at import.

Knudson: Table 1 of the publication, the fit without a female break at 70.
Heights in cm, ages in years. The FEV1 rows are the ones exercised by the
hand-computed regressions in tests/test_knudson.py; the remaining measures
must be checked against Table 1 before clinical use.

Wang: Tables 2-5 (white male, white female, black male, black female).
Heights in m. Thirteen (alpha, beta) pairs per measure, ages 6 to 18. The
paper did not fit FEF25-75 for ages 6 and 7; those cells are entered as
None and left out of the table.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from .coefficients import CoefficientTable, KnudsonCoefficients, WangCoefficients
from .config import WANG_CONFIG
from .exceptions import CoefficientTableError

logger = logging.getLogger(__name__)

# ============================================================================
# KNUDSON (1983)
# ============================================================================

# measure, sex, age_lb, const, height, age, age^2
_KNUDSON_ROWS = [
    # males 6-11
    ('fvc',     1,  6, -3.3756, 0.0409,  0.0,    0.0),
    ('fev',     1,  6, -2.8142, 0.0348,  0.0,    0.0),
    ('fef2575', 1,  6, -2.3197, 0.0338,  0.0,    0.0),
    ('vmax50',  1,  6, -2.5454, 0.0392,  0.0,    0.0),
    ('vmax75',  1,  6, -1.2024, 0.0203,  0.0,    0.0),
    # males 12-24
    ('fvc',     1, 12, -6.8865, 0.0590,  0.0739, 0.0),
    ('fev',     1, 12, -6.1181, 0.0519,  0.0636, 0.0),
    ('fef2575', 1, 12, -5.2230, 0.0465,  0.0766, 0.0),
    ('vmax50',  1, 12, -6.1264, 0.0500,  0.1024, 0.0),
    ('vmax75',  1, 12, -3.3520, 0.0246,  0.0422, 0.0),
    # males 25+
    ('fvc',     1, 25, -8.7818, 0.0844, -0.0298, 0.0),
    ('fev',     1, 25, -6.5147, 0.0665, -0.0292, 0.0),
    ('fef2575', 1, 25, -2.8111, 0.0445, -0.0359, 0.0),
    ('vmax50',  1, 25, -3.2430, 0.0575, -0.0396, 0.0),
    ('vmax75',  1, 25, -0.5680, 0.0205, -0.0364, 0.0),
    # females 6-10
    ('fvc',     2,  6, -3.7486, 0.0430,  0.0,    0.0),
    ('fev',     2,  6, -2.7578, 0.0336,  0.0,    0.0),
    ('fef2575', 2,  6, -2.6322, 0.0334,  0.0,    0.0),
    ('vmax50',  2,  6, -2.6548, 0.0360,  0.0,    0.0),
    ('vmax75',  2,  6, -1.4220, 0.0213,  0.0,    0.0),
    # females 11-19
    ('fvc',     2, 11, -4.4470, 0.0416,  0.0699, 0.0),
    ('fev',     2, 11, -3.7622, 0.0351,  0.0694, 0.0),
    ('fef2575', 2, 11, -2.5810, 0.0268,  0.0879, 0.0),
    ('vmax50',  2, 11, -2.1360, 0.0280,  0.0860, 0.0),
    ('vmax75',  2, 11, -1.5590, 0.0122,  0.0600, 0.0),
    # females 20+
    ('fvc',     2, 20, -3.1947, 0.0444, -0.0169, 0.0),
    ('fev',     2, 20, -1.4050, 0.0309, -0.0201, 0.0),
    ('fef2575', 2, 20, -0.8170, 0.0270, -0.0313, 0.0),
    ('vmax50',  2, 20, -1.1850, 0.0320, -0.0310, 0.0),
    ('vmax75',  2, 20,  0.2250, 0.0100, -0.0260, 0.0),
]

# ============================================================================
# WANG (1993)
# ============================================================================

# Order of the measure blocks inside each published table
_WANG_MEASURE_ORDER = ['fvc', 'fev', 'fev_fvc', 'fef2575']

# wm = white male, Table 2
_WANG_WM = [
    # fvc
    (-0.024, 2.470), (-0.018, 2.489), (0.005, 2.443), (0.017, 2.426), (0.030, 2.407),
    (0.009, 2.468), (-0.061, 2.649), (-0.175, 2.924), (-0.219, 3.060), (-0.079, 2.859),
    (0.104, 2.591), (0.253, 2.374), (0.296, 2.316),
    # fev
    (-0.109, 2.252), (-0.104, 2.270), (-0.089, 2.257), (-0.063, 2.197), (-0.057, 2.212),
    (-0.093, 2.324), (-0.161, 2.512), (-0.292, 2.843), (-0.329, 2.983), (-0.141, 2.709),
    (0.062, 2.409), (0.262, 2.099), (0.251, 2.129),
    # fev/fvc
    (-0.078, -0.248), (-0.086, -0.220), (-0.091, -0.199), (-0.086, -0.206), (-0.081, -0.209),
    (-0.101, -0.147), (-0.101, -0.133), (-0.116, -0.085), (-0.106, -0.087), (-0.060, -0.155),
    (-0.045, -0.178), (0.008, -0.272), (-0.054, -0.170),
    # fef2575
    (None, None), (None, None), (0.264, 1.505), (0.308, 1.443), (0.290, 1.557),
    (0.242, 1.738), (0.165, 1.982), (0.007, 2.396), (0.014, 2.483), (0.241, 2.163),
    (0.503, 1.764), (0.762, 1.368), (0.678, 1.528),
]

# wf = white female, Table 3
_WANG_WF = [
    # fvc
    (-0.013, 2.007), (-0.062, 2.385), (-0.055, 2.381), (-0.039, 2.351), (-0.068, 2.458),
    (-0.120, 2.617), (-0.174, 2.776), (-0.061, 2.576), (0.139, 2.208), (0.210, 2.099),
    (0.226, 2.097), (0.214, 2.146), (0.195, 2.179),
    # fev
    (-0.109, 1.949), (-0.144, 2.243), (-0.137, 2.239), (-0.123, 2.222), (-0.161, 2.364),
    (-0.223, 2.558), (-0.264, 2.709), (-0.153, 2.535), (0.046, 2.178), (0.148, 2.008),
    (0.181, 1.972), (0.176, 1.992), (0.152, 2.031),
    # fev/fvc
    (-0.097, -0.055), (-0.084, -0.132), (-0.079, -0.152), (-0.084, -0.128), (-0.092, -0.097),
    (-0.102, -0.061), (-0.090, -0.067), (-0.093, -0.040), (-0.096, -0.026), (-0.062, -0.093),
    (-0.048, -0.120), (-0.038, -0.154), (-0.069, -0.096),
    # fef2575
    (None, None), (None, None), (0.247, 1.668), (0.254, 1.710), (0.195, 1.933),
    (0.161, 2.091), (0.185, 2.120), (0.294, 1.976), (0.450, 1.711), (0.581, 1.486),
    (0.654, 1.366), (0.688, 1.290), (0.520, 1.622),
]

# bm = black male, Table 4
_WANG_BM = [
    # fvc
    (-0.088, 1.961), (-0.040, 2.040), (-0.094, 2.323), (-0.074, 2.308), (-0.110, 2.417),
    (-0.138, 2.453), (-0.224, 2.710), (-0.342, 2.975), (-0.337, 3.035), (-0.226, 2.889),
    (0.058, 2.425), (0.148, 2.310), (0.152, 2.341),
    # fev
    (-0.166, 1.723), (-0.122, 1.846), (-0.225, 2.271), (-0.142, 2.059), (-0.157, 2.117),
    (-0.176, 2.166), (-0.307, 2.548), (-0.486, 2.962), (-0.472, 3.010), (-0.318, 2.789),
    (0.074, 2.140), (0.053, 2.223), (0.130, 2.121),
    # fev/fvc
    (-0.091, -0.152), (-0.091, -0.153), (-0.118, -0.104), (-0.079, -0.218), (-0.047, -0.303),
    (-0.048, -0.263), (-0.084, -0.162), (-0.141, -0.018), (-0.123, -0.050), (-0.070, -0.140),
    (0.018, -0.289), (-0.095, -0.087), (-0.041, -0.190),
    # fef2575
    (None, None), (None, None), (0.097, 1.544), (0.255, 1.248), (0.230, 1.428),
    (0.256, 1.438), (0.085, 1.936), (-0.121, 2.476), (-0.115, 2.536), (0.170, 2.120),
    (0.663, 1.299), (0.505, 1.618), (0.859, 1.053),
]

# bf = black female, Table 5
_WANG_BF = [
    # fvc
    (-0.172, 2.117), (-0.135, 2.132), (-0.176, 2.362), (-0.200, 2.452), (-0.230, 2.571),
    (-0.204, 2.526), (-0.107, 2.342), (-0.042, 2.294), (0.105, 2.021), (0.253, 1.787),
    (0.111, 2.098), (0.205, 1.930), (-0.042, 2.423),
    # fev
    (-0.288, 2.182), (-0.250, 2.158), (-0.276, 2.295), (-0.294, 2.330), (-0.344, 2.507),
    (-0.308, 2.460), (-0.219, 2.312), (-0.117, 2.196), (0.041, 1.920), (0.203, 1.662),
    (0.129, 1.824), (0.273, 1.547), (-0.084, 2.259),
    # fev/fvc
    (-0.109, 0.059), (-0.104, -0.030), (-0.103, -0.066), (-0.097, -0.104), (-0.120, -0.043),
    (-0.089, -0.105), (-0.115, -0.021), (-0.051, -0.148), (-0.063, -0.103), (-0.043, -0.139),
    (-0.022, -0.188), (0.048, -0.342), (-0.197, 0.145),
    # fef2575
    (None, None), (None, None), (-0.283, 2.990), (0.025, 2.062), (0.051, 2.028),
    (0.078, 2.006), (0.225, 1.804), (0.418, 1.504), (0.574, 1.257), (0.599, 1.281),
    (0.653, 1.175), (0.713, 1.067), (-0.209, 2.896),
]

_WANG_BLOCKS = [
    ('white', 'm', _WANG_WM),
    ('white', 'f', _WANG_WF),
    ('black', 'm', _WANG_BM),
    ('black', 'f', _WANG_BF),
]


def _wang_block(race: str, sex: str,
                pairs: Sequence[Tuple[Optional[float], Optional[float]]]) -> List[WangCoefficients]:
    """Expand one published table into rows, skipping the unfitted cells"""
    ages = list(range(WANG_CONFIG['min_age'], WANG_CONFIG['max_age'] + 1))
    expected = len(ages) * len(_WANG_MEASURE_ORDER)
    if len(pairs) != expected:
        raise CoefficientTableError(
            f"Wang {race}/{sex} block has {len(pairs)} entries, expected {expected}"
        )

    rows = []
    for m_idx, measure in enumerate(_WANG_MEASURE_ORDER):
        for a_idx, age in enumerate(ages):
            alpha, beta = pairs[m_idx * len(ages) + a_idx]
            if alpha is None or beta is None:
                continue
            rows.append(WangCoefficients(measure=measure, race=race, sex=sex,
                                         age_lb=age, alpha=alpha, beta=beta))
    return rows


def build_knudson_table() -> CoefficientTable:
    return CoefficientTable('knudson', [KnudsonCoefficients(*row) for row in _KNUDSON_ROWS])


def build_wang_table() -> CoefficientTable:
    rows = []
    for race, sex, pairs in _WANG_BLOCKS:
        rows.extend(_wang_block(race, sex, pairs))
    return CoefficientTable('wang', rows)


KNUDSON_TABLE = build_knudson_table()
WANG_TABLE = build_wang_table()
