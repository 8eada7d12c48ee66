from pathlib import Path

import pytest

from cytokine_stats.config import DATA_DIR, REPORTS_DIR, get_config, load_config


def test_default_config_sections():
    config = get_config()
    for section in ["paths", "data", "pca", "correlation", "regression", "plot", "example"]:
        assert section in config
    assert config["data"]["cohort_order"] == [
        "Healthy Controls",
        "Disease Active",
        "Disease Remission",
    ]
    assert get_config() is config


def test_default_paths_resolved():
    config = get_config()
    assert Path(config["paths"]["input_file"]) == DATA_DIR / "raw" / "cytokines.xlsx"
    assert Path(config["paths"]["figures_dir"]) == REPORTS_DIR / "figures"
    assert config["paths"]["sheet_name"] == 0


def test_missing_config_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.toml")


def test_env_overrides_path(tmp_path: Path, monkeypatch):
    cfg = tmp_path / "custom.toml"
    cfg.write_text('[paths]\ninput_file = "raw/a.csv"\n\n[pca]\nscale = false\n', encoding="utf-8")
    monkeypatch.setenv("CYTOKINE_STATS_INPUT_FILE", "/abs/override.csv")

    config = load_config(cfg)
    assert config["paths"]["input_file"] == "/abs/override.csv"
    assert config["pca"]["scale"] is False
