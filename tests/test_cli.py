import json

import pandas as pd
import pytest

from spirometry import ConfigurationError, pct_knudson, predicted_wang
from spirometry.cli import build_parser, load_batch_config, main, run_batch, validate_batch_config


@pytest.fixture
def knudson_csv(tmp_path, knudson_cases):
    path = tmp_path / "knudson.csv"
    knudson_cases.assign(fev=2.5).to_csv(path, index=False)
    return path


@pytest.fixture
def wang_csv(tmp_path):
    path = tmp_path / "wang.csv"
    pd.DataFrame(
        {
            "gender": ["m", "f", "m"],
            "race": ["white", "black", "other"],
            "age": [10, 35, 12],
            "height": [1.40, 1.62, 1.50],
        }
    ).to_csv(path, index=False)
    return path


class TestEquationCommands:
    def test_knudson(self, tmp_path, knudson_csv, knudson_cases) -> None:
        output = tmp_path / "out" / "knudson_pct.csv"
        code = main(["knudson", "--input", str(knudson_csv), "--output", str(output),
                     "--measure", "fev", "--observed-column", "fev"])

        assert code == 0
        result = pd.read_csv(output)
        expected = pct_knudson(knudson_cases["sex"], knudson_cases["age"],
                               knudson_cases["height"], fev=[2.5] * len(knudson_cases))
        assert result["pct_predicted_fev"].tolist() == pytest.approx(expected.tolist())

    def test_wang_adult_with_renamed_sex_column(self, tmp_path, wang_csv) -> None:
        output = tmp_path / "wang_out.csv"
        code = main(["wang", "--input", str(wang_csv), "--output", str(output),
                     "--measure", "fev", "--sex-column", "gender", "--adult"])

        assert code == 0
        result = pd.read_csv(output)
        assert result["predicted_fev"].iloc[1] == pytest.approx(
            predicted_wang("f", 18, "black", 1.62, "fev").iloc[0]
        )
        assert pd.isna(result["predicted_fev"].iloc[2])

    def test_invalid_sex_returns_error_code(self, tmp_path, knudson_csv) -> None:
        code = main(["wang", "--input", str(knudson_csv), "--output", str(tmp_path / "x.csv"),
                     "--measure", "fev", "--race-column", "age"])
        assert code == 1

    def test_missing_input_file(self, tmp_path) -> None:
        code = main(["knudson", "--input", str(tmp_path / "absent.csv"),
                     "--output", str(tmp_path / "out.csv"), "--measure", "fev"])
        assert code == 1

    def test_measure_choices_are_per_equation(self, tmp_path, knudson_csv) -> None:
        with pytest.raises(SystemExit):
            main(["knudson", "--input", str(knudson_csv), "--output", str(tmp_path / "o.csv"),
                  "--measure", "fev_fvc"])

    def test_log_file(self, tmp_path, knudson_csv) -> None:
        log_file = tmp_path / "run.log"
        code = main(["--log-level", "info", "--log-file", str(log_file),
                     "knudson", "--input", str(knudson_csv), "--output", str(tmp_path / "o.csv"),
                     "--measure", "fvc"])
        assert code == 0
        assert "Saved 12 rows" in log_file.read_text(encoding="utf-8")


class TestBatchConfig:
    def write_config(self, tmp_path, settings):
        path = tmp_path / "batch.json"
        path.write_text(json.dumps(settings), encoding="utf-8")
        return path

    def test_run_from_config(self, tmp_path, wang_csv) -> None:
        output = tmp_path / "batch_out.csv"
        config = self.write_config(tmp_path, {
            "equation": "wang",
            "measure": "fvc",
            "input": str(wang_csv),
            "output": str(output),
            "columns": {"sex": "gender"},
        })

        assert main(["run", "--config", str(config)]) == 0
        result = pd.read_csv(output)
        assert result["predicted_fvc"].notna().tolist() == [True, False, False]

    def test_missing_field(self, tmp_path, wang_csv) -> None:
        config = self.write_config(tmp_path, {"equation": "wang", "measure": "fvc",
                                               "input": str(wang_csv)})
        assert main(["run", "--config", str(config)]) == 1
        with pytest.raises(ConfigurationError, match="output"):
            load_batch_config(str(config))

    def test_missing_config_file(self, tmp_path) -> None:
        assert main(["run", "--config", str(tmp_path / "nope.json")]) == 1

    def test_unparseable_config(self, tmp_path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Could not parse"):
            load_batch_config(str(path))

    @pytest.mark.parametrize(
        "changes, message",
        [
            ({"equation": "gli"}, "Unknown equation"),
            ({"measure": ["fev", "fev"]}, "single measure"),
            ({"adult": True}, "only applies to the wang"),
        ],
    )
    def test_invalid_settings(self, changes, message) -> None:
        settings = {"equation": "knudson", "measure": "fev", "input": "in.csv", "output": "out.csv"}
        settings.update(changes)
        with pytest.raises(ConfigurationError, match=message):
            validate_batch_config(settings)

    def test_run_batch_returns_frame(self, tmp_path, knudson_csv) -> None:
        result = run_batch({"equation": "knudson", "measure": "fev", "input": str(knudson_csv),
                            "output": str(tmp_path / "o.csv"), "observed_column": "fev"})
        assert {"predicted_fev", "pct_predicted_fev"} <= set(result.columns)


class TestPlotCommand:
    def test_writes_image(self, tmp_path) -> None:
        output = tmp_path / "figures" / "wang.png"
        assert main(["plot-coefficients", "--output", str(output)]) == 0
        assert output.exists()


def test_version(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        build_parser().parse_args(["--version"])
    assert excinfo.value.code == 0
    assert "spirometry" in capsys.readouterr().out
