import logging

import numpy as np
import pandas as pd
import pytest

from spirometry import (
    ImplausibleHeightWarning,
    KnudsonMeasure,
    Observation,
    SpirometryError,
    SpirometryValues,
    UsageError,
    WangMeasure,
)
from spirometry.validation import (
    as_series,
    check_lengths,
    resolve_measure,
    to_float,
    to_nullable,
    warn_implausible_height,
)


class TestAsSeries:
    @pytest.mark.parametrize("value", [5, 2.5, "m", None, np.nan, KnudsonMeasure.FEV])
    def test_scalars_become_length_one(self, value) -> None:
        assert len(as_series(value, "x")) == 1

    def test_series_passes_through(self) -> None:
        series = pd.Series([1, 2], index=["a", "b"])
        assert as_series(series, "x") is series

    def test_array_like(self) -> None:
        assert as_series((1, 2, 3), "x").tolist() == [1, 2, 3]
        assert len(as_series(np.arange(4), "x")) == 4

    def test_rejects_matrices(self) -> None:
        with pytest.raises(UsageError, match="one-dimensional"):
            as_series(np.zeros((2, 2)), "height")


class TestCheckLengths:
    def test_common_length(self) -> None:
        assert check_lengths({"a": pd.Series([1, 2]), "b": pd.Series([3, 4])}) == 2

    def test_mismatch_names_every_input(self) -> None:
        with pytest.raises(UsageError, match="sex=2, age=3"):
            check_lengths({"sex": pd.Series([1, 2]), "age": pd.Series([1, 2, 3])})


class TestResolveMeasure:
    def test_name(self) -> None:
        assert resolve_measure("fev", KnudsonMeasure, 3) is KnudsonMeasure.FEV

    def test_enum_member(self) -> None:
        assert resolve_measure(WangMeasure.FEV_FVC, WangMeasure, 1) is WangMeasure.FEV_FVC

    def test_uniform_vector(self) -> None:
        assert resolve_measure(pd.Series(["fvc"] * 3), WangMeasure, 3) is WangMeasure.FVC

    def test_vector_of_length_one(self) -> None:
        assert resolve_measure(["vmax75"], KnudsonMeasure, 10) is KnudsonMeasure.VMAX75

    @pytest.mark.parametrize(
        "measure, n",
        [
            (None, 1),
            ("FEV", 1),
            ("fev_fvc", 1),
            (["fev", "fvc"], 2),
            (["fev", "fev"], 3),
            ([], 0),
        ],
    )
    def test_rejected(self, measure, n) -> None:
        with pytest.raises(UsageError):
            resolve_measure(measure, KnudsonMeasure, n)

    def test_mixed_vector_message(self) -> None:
        with pytest.raises(UsageError, match="only supported if all are equal"):
            resolve_measure(["fev", "fvc", "fev"], WangMeasure, 3)


class TestConversions:
    def test_to_float_coerces_garbage_to_nan(self) -> None:
        result = to_float(["1.5", "x", None, 3])
        assert result[0] == 1.5
        assert np.isnan(result[1]) and np.isnan(result[2])
        assert result[3] == 3.0

    def test_to_float_nullable_input(self) -> None:
        result = to_float(pd.array([1.0, None], dtype="Float64"))
        assert result[0] == 1.0
        assert np.isnan(result[1])

    def test_to_nullable(self) -> None:
        result = to_nullable(np.array([1.0, np.nan]), pd.RangeIndex(2), "predicted_fev")
        assert result.dtype == "Float64"
        assert result.name == "predicted_fev"
        assert result.isna().tolist() == [False, True]


class TestHeightWarning:
    def test_counts_and_warns(self) -> None:
        with pytest.warns(ImplausibleHeightWarning, match="2 height value"):
            n = warn_implausible_height(np.array([99.0, 150.0, 251.0]), (100.0, 250.0), "cm", "Knudson (1983)")
        assert n == 2

    def test_bounds_are_inclusive_and_missing_ignored(self) -> None:
        assert warn_implausible_height(np.array([0.5, 2.5, np.nan]), (0.5, 2.5), "m", "Wang (1993)") == 0

    def test_logs_warning(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="spirometry"):
            with pytest.warns(ImplausibleHeightWarning):
                warn_implausible_height(np.array([180.0]), (0.5, 2.5), "m", "Wang (1993)")
        assert "wrong unit" in caplog.text


class TestSpirometryValues:
    def test_from_keywords_selects_the_supplied_measure(self) -> None:
        observed = SpirometryValues.from_keywords(KnudsonMeasure, fev=None, fvc=[3.2, 4.1])
        assert observed.measure is KnudsonMeasure.FVC
        assert observed.name == "fvc"
        assert observed.values == [3.2, 4.1]

    def test_zero_measures(self) -> None:
        with pytest.raises(UsageError, match="Exactly one"):
            SpirometryValues.from_keywords(WangMeasure, fev=None, fvc=None)

    def test_two_measures(self) -> None:
        with pytest.raises(UsageError, match="got 2"):
            SpirometryValues.from_keywords(WangMeasure, fev=1.0, fvc=2.0)

    def test_unsupported_keyword(self) -> None:
        with pytest.raises(UsageError):
            SpirometryValues.from_keywords(WangMeasure, vmax50=1.0)

    def test_nan_counts_as_supplied(self) -> None:
        observed = SpirometryValues.from_keywords(WangMeasure, fev=np.nan)
        assert observed.measure is WangMeasure.FEV


class TestObservation:
    def test_enum_measure_stored_as_name(self) -> None:
        record = Observation(sex=1, age=30, height=180, measure=KnudsonMeasure.FEV)
        assert record.measure == "fev"
        assert record.race is None

    def test_string_measure_untouched(self) -> None:
        record = Observation(sex="f", age=12, height=1.5, measure="fev_fvc", race="white", raw_value=0.9)
        assert record.measure == "fev_fvc"


class TestExceptions:
    def test_usage_error_is_a_value_error(self) -> None:
        assert issubclass(UsageError, ValueError)
        assert issubclass(UsageError, SpirometryError)

    def test_height_warning_is_a_user_warning(self) -> None:
        assert issubclass(ImplausibleHeightWarning, UserWarning)
