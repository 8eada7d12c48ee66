from pathlib import Path

import pandas as pd
import pytest
from typer.testing import CliRunner

from cytokine_stats.cli import app
from cytokine_stats.cli.utils import parse_sheet_name
from cytokine_stats.config import DEFAULT_CONFIG_PATH
from cytokine_stats.utils.io import load_results

runner = CliRunner()


@pytest.fixture
def input_file(tmp_path: Path) -> Path:
    path = tmp_path / "cytokines.xlsx"
    result = runner.invoke(app, ["example-data", "--output", str(path), "--n-per-cohort", "12"])
    assert result.exit_code == 0, result.output
    return path


def test_example_data(input_file: Path):
    df = pd.read_excel(input_file)
    assert len(df) == 36
    assert {"cohort", "sex", "age", "IL-6"} <= set(df.columns)


def test_walkthrough_command(input_file: Path, tmp_path: Path):
    out = tmp_path / "reports"
    result = runner.invoke(app, ["walkthrough", str(input_file), "--output-dir", str(out)])
    assert result.exit_code == 0, result.output
    assert len(list((out / "figures").glob("*.png"))) == 10
    assert (out / "tables" / "summary_by_group.csv").exists()


def test_summarize_command(input_file: Path, tmp_path: Path):
    out = tmp_path / "summary.csv"
    result = runner.invoke(app, ["summarize", str(input_file), "--columns", "IL-6,TNF", "-o", str(out)])
    assert result.exit_code == 0, result.output
    summary = pd.read_csv(out)
    assert set(summary["variable"]) == {"IL-6", "TNF"}
    assert len(summary) == 6


@pytest.mark.parametrize(
    "args",
    [
        ["histogram", "--column", "IL-6", "--group", "cohort"],
        ["boxplot", "--value", "TNF"],
        ["scatter", "--x", "IL-6", "--y", "TNF", "--hue", "cohort"],
        ["contingency"],
        ["pca"],
        ["scree"],
        ["clustered-heatmap", "--columns", "IL-2,IL-6,TNF"],
        ["correlation", "--method", "pearson"],
        ["forest", "--response", "IL-6"],
        ["regression", "--x", "TNF", "--y", "IL-6", "--hue", "cohort"],
    ],
)
def test_plot_commands(input_file: Path, tmp_path: Path, args):
    out = tmp_path / f"{args[0]}.png"
    result = runner.invoke(app, ["plot", args[0], str(input_file), *args[1:], "-o", str(out)])
    assert result.exit_code == 0, result.output
    assert out.exists()


def test_plot_all(input_file: Path, tmp_path: Path):
    out = tmp_path / "all"
    result = runner.invoke(app, ["plot", "all", str(input_file), "--output-dir", str(out)])
    assert result.exit_code == 0, result.output
    assert len(list((out / "figures").glob("*.png"))) == 10


def test_analyze_commands(input_file: Path, tmp_path: Path):
    out = tmp_path / "tables"
    for args in (
        ["pca", "--n-components", "3"],
        ["correlation"],
        ["regression", "--response", "IL-6", "--predictors", "cohort,age"],
        ["contingency"],
        ["groups"],
    ):
        result = runner.invoke(app, ["analyze", args[0], str(input_file), *args[1:], "--output-dir", str(out)])
        assert result.exit_code == 0, result.output

    scores = pd.read_csv(out / "pca_scores.csv", index_col=0)
    assert scores.columns.tolist() == ["PC1", "PC2", "PC3"]
    assert load_results(out / "pca_result.pkl").n_components == 3
    coefs = pd.read_csv(out / "linear_model_coefficients.csv")
    assert "age" in coefs["term"].tolist()
    assert (out / "correlation_spearman_pvalues.csv").exists()
    assert (out / "contingency_cohort_sex.csv").exists()
    assert (out / "group_difference_tests_cohort.csv").exists()


def test_analyze_regression_with_formula(input_file: Path, tmp_path: Path):
    out = tmp_path / "tables"
    result = runner.invoke(
        app,
        ["analyze", "regression", str(input_file), "--formula", 'Q("IL-6") ~ Q("TNF")', "--output-dir", str(out)],
    )
    assert result.exit_code == 0, result.output
    coefs = pd.read_csv(out / "linear_model_coefficients.csv")
    assert coefs["label"].tolist() == ["Intercept", "TNF"]


def test_analyze_regression_requires_response(input_file: Path, tmp_path: Path):
    result = runner.invoke(app, ["analyze", "regression", str(input_file), "--output-dir", str(tmp_path)])
    assert result.exit_code != 0


def test_missing_input_fails(tmp_path: Path):
    result = runner.invoke(app, ["summarize", str(tmp_path / "missing.xlsx")])
    assert result.exit_code != 0
    assert isinstance(result.exception, FileNotFoundError)


def _custom_config(tmp_path: Path, *replacements: tuple[str, str]) -> Path:
    text = DEFAULT_CONFIG_PATH.read_text(encoding="utf-8")
    for old, new in replacements:
        assert old in text
        text = text.replace(old, new)
    path = tmp_path / "custom.toml"
    path.write_text(text, encoding="utf-8")
    return path


@pytest.mark.parametrize("value, expected", [("0", 0), (0, 0), ("2", 2), ("Sheet1", "Sheet1")])
def test_parse_sheet_name(value, expected):
    assert parse_sheet_name(value) == expected


def test_sheet_index_from_environment(input_file: Path, tmp_path: Path, monkeypatch):
    monkeypatch.setenv("CYTOKINE_STATS_SHEET_NAME", "0")
    config_path = _custom_config(tmp_path)
    result = runner.invoke(app, ["summarize", str(input_file), "--config", str(config_path)])
    assert result.exit_code == 0, result.output


def test_analyze_defaults_come_from_config(input_file: Path, tmp_path: Path):
    config_path = _custom_config(
        tmp_path,
        ('method = "spearman"', 'method = "kendall"'),
        ("n_components = 0", "n_components = 2"),
    )
    out = tmp_path / "tables"
    for command in ("correlation", "pca"):
        result = runner.invoke(
            app,
            ["analyze", command, str(input_file), "--config", str(config_path), "--output-dir", str(out)],
        )
        assert result.exit_code == 0, result.output

    assert (out / "correlation_kendall.csv").exists()
    scores = pd.read_csv(out / "pca_scores.csv", index_col=0)
    assert scores.columns.tolist() == ["PC1", "PC2"]


def test_plot_correlation_method_from_config(input_file: Path, tmp_path: Path):
    figures = tmp_path / "figs"
    config_path = _custom_config(
        tmp_path,
        ('method = "spearman"', 'method = "pearson"'),
        ('figures_dir = "figures"', f'figures_dir = "{figures.as_posix()}"'),
    )
    result = runner.invoke(app, ["plot", "correlation", str(input_file), "--config", str(config_path)])
    assert result.exit_code == 0, result.output
    assert (figures / "correlation_pearson.png").exists()
