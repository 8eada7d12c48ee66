from pathlib import Path

import pandas as pd
import pytest

from cytokine_stats.utils.io import load_results, save_results, save_table


def test_save_table_creates_parents(tmp_path: Path):
    path = save_table(pd.DataFrame({"a": [1, 2]}), tmp_path / "x" / "y" / "t.csv")
    assert path.exists()
    assert pd.read_csv(path)["a"].tolist() == [1, 2]


def test_results_pickle(tmp_path: Path):
    results = {"pca": [0.5, 0.3], "cohorts": ("HC", "DA")}
    save_results(results, tmp_path / "r" / "results.pkl")
    assert load_results(tmp_path / "r" / "results.pkl") == results


def test_load_results_missing(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_results(tmp_path / "missing.pkl")
