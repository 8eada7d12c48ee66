"""Shared utilities for CLI commands."""

from pathlib import Path
from typing import Any

import pandas as pd
import typer

from cytokine_stats.config import FIGURES_DIR, TABLES_DIR, get_config, load_config
from cytokine_stats.data.load import load_cytokine_table
from cytokine_stats.data.preprocessing import cytokine_columns_from_config, prepare_table

InputArgument = typer.Argument(
    None, help="Cytokine spreadsheet (.xlsx or .csv); defaults to paths.input_file"
)
SheetOption = typer.Option(None, "--sheet", help="Excel sheet name or index")
ConfigOption = typer.Option(None, "--config", help="TOML config file (defaults to the bundled one)")


def resolve_config(config_path: Path | None) -> dict[str, Any]:
    return load_config(config_path) if config_path is not None else get_config()


def figures_dir(config: dict[str, Any]) -> Path:
    return Path(config.get("paths", {}).get("figures_dir", FIGURES_DIR))


def tables_dir(config: dict[str, Any]) -> Path:
    return Path(config.get("paths", {}).get("tables_dir", TABLES_DIR))


def option_or_config(value: Any, config: dict[str, Any], section: str, key: str, default: Any) -> Any:
    """Return the CLI ``value`` if given, else ``config[section][key]``, else ``default``."""
    if value is not None:
        return value
    return config.get(section, {}).get(key, default)


def parse_sheet_name(value: str | int) -> str | int:
    """Sheet index as ``int`` when given as digits (CLI or env), else the sheet name."""
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    return value


def load_prepared_table(
    input_path: Path | None, sheet: str | None, config: dict[str, Any]
) -> tuple[pd.DataFrame, list[str]]:
    """Load the spreadsheet, coerce categoricals, and find the cytokine columns.

    Returns:
        Tuple of (prepared table, cytokine column names).
    """
    if input_path is None:
        input_path = Path(config["paths"]["input_file"])

    sheet_name = parse_sheet_name(sheet if sheet is not None else config.get("paths", {}).get("sheet_name", 0))

    df = prepare_table(load_cytokine_table(input_path, sheet_name=sheet_name), config)
    return df, cytokine_columns_from_config(df, config)


def parse_columns(value: str | None, default: list[str]) -> list[str]:
    """Split a comma-separated column list, falling back to ``default``."""
    if not value:
        return default
    return [c.strip() for c in value.split(",") if c.strip()]
