from pathlib import Path

import pandas as pd
import pytest

from cytokine_stats.config import get_config
from cytokine_stats.walkthrough import SECTIONS, run_walkthrough


def test_run_walkthrough_writes_every_section(df, tmp_path: Path):
    before = df.copy()
    written = run_walkthrough(df, tmp_path, config=get_config())

    assert list(written) == list(SECTIONS)
    for section, paths in written.items():
        assert paths, f"section {section} wrote nothing"
        for path in paths:
            assert path.exists(), path

    figures = sorted(p.name for p in (tmp_path / "figures").iterdir())
    assert figures == [
        "01_histogram.png",
        "02_boxplot.png",
        "03_scatter.png",
        "04_contingency_heatmap.png",
        "05_pca_scores.png",
        "06_pca_scree.png",
        "07_clustered_heatmap.png",
        "08_correlation_matrix.png",
        "09_forest.png",
        "10_regression_overlay.png",
    ]

    coefs = pd.read_csv(tmp_path / "tables" / "linear_model_coefficients.csv")
    assert "Intercept" in coefs["term"].tolist()

    # sections never modify the table
    pd.testing.assert_frame_equal(df, before)


def test_run_walkthrough_subset(df, tmp_path: Path):
    written = run_walkthrough(df, tmp_path, config=get_config(), sections=["pca", "correlation"])
    assert list(written) == ["pca", "correlation"]
    assert (tmp_path / "tables" / "pca_loadings.csv").exists()
    assert (tmp_path / "tables" / "correlation_spearman.csv").exists()
    assert not (tmp_path / "figures" / "01_histogram.png").exists()


def test_run_walkthrough_unknown_section(df, tmp_path: Path):
    with pytest.raises(ValueError, match="Unknown sections"):
        run_walkthrough(df, tmp_path, sections=["violin"])


def test_run_walkthrough_skips_missing_contingency_column(df, tmp_path: Path):
    written = run_walkthrough(df.drop(columns=["sex"]), tmp_path, sections=["contingency"])
    assert written["contingency"] == []


def test_run_walkthrough_needs_two_cytokines(df, tmp_path: Path):
    narrow = df[["sample_id", "cohort", "sex", "age", "IL-6"]]
    with pytest.raises(ValueError, match="at least two cytokine"):
        run_walkthrough(narrow, tmp_path)


def test_run_walkthrough_falls_back_when_configured_cytokines_missing(df, tmp_path: Path):
    renamed = df.rename(columns={"IL-6": "IL6", "TNF": "TNFa"})
    sections = ["histogram", "boxplot", "scatter", "forest", "regression_overlay"]
    written = run_walkthrough(renamed, tmp_path, config=get_config(), sections=sections)

    for section in sections:
        assert written[section], f"section {section} wrote nothing"
        assert all(path.exists() for path in written[section])
