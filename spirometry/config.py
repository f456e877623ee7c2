"""
config.py
=========
Single place to modify equation settings

Design Principles:
- Configuration dictionary approach, one entry per reference equation
- Values here are read by the equation classes at construction time
- Environment only controls logging
"""

import os
from typing import Dict, Any

import numpy as np

# ============================================================================
# EQUATION CONFIGURATIONS
# ============================================================================

# Knudson RJ, Lebowitz MD, Holberg CJ, Burrows B (1983).
# Am Rev Respir Dis 127(6):725-734. doi:10.1164/arrd.1983.127.6.725
KNUDSON_CONFIG: Dict[str, Any] = {
    'name': 'Knudson (1983)',
    'measures': ['fev', 'fvc', 'fef2575', 'vmax50', 'vmax75'],
    'sex_codes': {1: 'male', 2: 'female'},
    # Lower edges of each age stratum; the last band is open ended.
    # Female fit without the extra break at 70.
    'age_bins': {
        1: [6, 12, 25, np.inf],
        2: [6, 11, 20, np.inf],
    },
    'height_unit': 'cm',
    'height_range': (100.0, 250.0),
}

# Wang X, Dockery DW, Wypij D, Fay ME, Ferris BG (1993).
# Pediatr Pulmonol 15(2):75-88. doi:10.1002/ppul.1950150204
WANG_CONFIG: Dict[str, Any] = {
    'name': 'Wang (1993)',
    'measures': ['fev', 'fvc', 'fev_fvc', 'fef2575'],
    'sex_codes': ('m', 'f'),
    'races': ('white', 'black'),
    'min_age': 6,
    'max_age': 18,
    # adult mode reuses the 18 year old equations from this age on
    'adult_age': 19,
    'height_unit': 'm',
    'height_range': (0.5, 2.5),
}

EQUATION_CONFIGS: Dict[str, Dict[str, Any]] = {
    'knudson': KNUDSON_CONFIG,
    'wang': WANG_CONFIG,
}

# ============================================================================
# LOGGING
# ============================================================================

LOG_LEVEL = os.getenv('SPIROMETRY_LOG_LEVEL', 'WARNING')
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Required fields of a JSON batch configuration (see cli.py)
BATCH_REQUIRED_FIELDS = ['equation', 'measure', 'input', 'output']
