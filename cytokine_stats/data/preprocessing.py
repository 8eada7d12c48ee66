"""Data preprocessing functions."""

from collections.abc import Iterable, Mapping
from typing import Any

from loguru import logger
import numpy as np
import pandas as pd

from cytokine_stats.config import get_config


def coerce_categoricals(
    df: pd.DataFrame,
    columns: Iterable[str],
    orders: Mapping[str, list] | None = None,
) -> pd.DataFrame:
    """Convert columns to pandas categoricals (R's ``factor``).

    Args:
        df: Cytokine table.
        columns: Columns to convert.
        orders: Optional mapping of column -> level order. Columns with an
            order become ordered categoricals with exactly those levels.

    Returns:
        Copy of ``df`` with the columns converted.

    Raises:
        KeyError: If a column is missing from ``df``.
    """
    orders = orders or {}
    out = df.copy()
    for col in columns:
        if col not in out.columns:
            raise KeyError(f"Column '{col}' not found in table")

        levels = orders.get(col)
        if levels is None:
            out[col] = out[col].astype("category")
            continue

        unknown = set(out[col].dropna().unique()) - set(levels)
        if unknown:
            logger.warning(f"Values {sorted(map(str, unknown))} in '{col}' not in levels; set to NaN")
        out[col] = pd.Categorical(out[col], categories=list(levels), ordered=True)

    return out


def infer_cytokine_columns(df: pd.DataFrame, exclude: Iterable[str] | None = None) -> list[str]:
    """Return the numeric columns that are not covariates."""
    exclude = set(exclude or [])
    return [
        c
        for c in df.columns
        if c not in exclude and pd.api.types.is_numeric_dtype(df[c]) and not pd.api.types.is_bool_dtype(df[c])
    ]


def log_transform(
    df: pd.DataFrame, columns: Iterable[str], base: float = 10, pseudocount: float = 1.0
) -> pd.DataFrame:
    """Log-transform concentration columns as log(x + pseudocount).

    Raises:
        ValueError: If a column contains negative values.
    """
    out = df.copy()
    for col in columns:
        values = out[col].astype(float)
        if (values < 0).any():
            raise ValueError(f"Column '{col}' contains negative values; cannot log-transform")
        out[col] = np.log(values + pseudocount) / np.log(base)
    return out


def prepare_table(df: pd.DataFrame, config: dict[str, Any] | None = None) -> pd.DataFrame:
    """Apply the configured categorical coercion and optional log transform.

    Args:
        df: Raw cytokine table as loaded from disk.
        config: Configuration dictionary. If None, uses the default config.

    Returns:
        Prepared copy of the table.
    """
    if config is None:
        config = get_config()
    data_config = config.get("data", {})

    group_column = data_config.get("group_column", "cohort")
    categorical = [c for c in data_config.get("categorical_columns", []) if c in df.columns]
    orders = {}
    if data_config.get("cohort_order") and group_column in df.columns:
        orders[group_column] = data_config["cohort_order"]

    out = coerce_categoricals(df, categorical, orders=orders)

    if data_config.get("log_transform", False):
        exclude = data_config.get("covariates", []) + data_config.get("id_columns", [])
        cytokines = infer_cytokine_columns(out, exclude=exclude)
        logger.info(f"Log-transforming {len(cytokines)} cytokine columns")
        out = log_transform(
            out,
            cytokines,
            base=data_config.get("log_base", 10),
            pseudocount=data_config.get("pseudocount", 1.0),
        )

    return out


def cytokine_columns_from_config(df: pd.DataFrame, config: dict[str, Any] | None = None) -> list[str]:
    """Cytokine columns of ``df`` given the covariates and id columns in config."""
    if config is None:
        config = get_config()
    data_config = config.get("data", {})
    exclude = data_config.get("covariates", []) + data_config.get("id_columns", [])
    return infer_cytokine_columns(df, exclude=exclude)
