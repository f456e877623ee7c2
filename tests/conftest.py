import logging

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402
import pytest  # noqa: E402


@pytest.fixture(autouse=True)
def reset_package_logging():
    """The CLI installs handlers on the package logger; drop them after each test."""
    yield
    package_logger = logging.getLogger("spirometry")
    for handler in list(package_logger.handlers):
        handler.close()
        package_logger.removeHandler(handler)
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)
    plt.close("all")


@pytest.fixture
def knudson_cases() -> pd.DataFrame:
    """Two cases per sex/age stratum, heights from the middle of the CDC tables."""
    return pd.DataFrame(
        [
            (1, 8.3, 130), (1, 11.0, 140),
            (1, 13.7, 155), (1, 17.1, 175),
            (1, 29.2, 180), (1, 45.2, 170),
            (2, 7.1, 115), (2, 10.9, 137),
            (2, 11.2, 135), (2, 19.6, 165),
            (2, 20.3, 160), (2, 65.2, 155),
        ],
        columns=["sex", "age", "height"],
    )


@pytest.fixture
def wang_cases() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "sex": ["m", "f", "m", "f"],
            "race": ["white", "white", "black", "black"],
            "age": [8.5, 12.0, 15.2, 17.9],
            "height": [1.30, 1.52, 1.70, 1.62],
            "fvc": [2.0, 2.9, 4.1, 3.3],
        }
    )
