"""Descriptive statistics and simple group comparisons."""

from typing import Any

from loguru import logger
import pandas as pd
from scipy import stats


def summarize_by_group(df: pd.DataFrame, value_columns: list[str], group: str) -> pd.DataFrame:
    """Per-group summary statistics in long format.

    Args:
        df: Cytokine table.
        value_columns: Numeric columns to summarize.
        group: Grouping column (e.g. cohort).

    Returns:
        DataFrame with columns ``variable, <group>, n, mean, std, median, q1, q3, iqr``.
    """
    long = df.melt(id_vars=[group], value_vars=value_columns, var_name="variable")
    grouped = long.groupby(["variable", group], observed=True)["value"]
    summary = grouped.agg(
        n="count",
        mean="mean",
        std="std",
        median="median",
        q1=lambda s: s.quantile(0.25),
        q3=lambda s: s.quantile(0.75),
    ).reset_index()
    summary["iqr"] = summary["q3"] - summary["q1"]
    return summary


def contingency_table(df: pd.DataFrame, row: str, col: str) -> pd.DataFrame:
    """Cross-tabulate two categorical columns (counts)."""
    for c in (row, col):
        if c not in df.columns:
            raise KeyError(f"Column '{c}' not found in table")
    return pd.crosstab(df[row], df[col])


def chi_square_test(table: pd.DataFrame) -> dict[str, Any]:
    """Pearson chi-square test of independence on a contingency table."""
    statistic, p_value, dof, expected = stats.chi2_contingency(table.to_numpy())
    if (expected < 5).any():
        logger.warning("Some expected counts are below 5; chi-square approximation may be poor")
    return {
        "statistic": float(statistic),
        "p_value": float(p_value),
        "dof": int(dof),
        "expected": pd.DataFrame(expected, index=table.index, columns=table.columns),
    }


def group_difference_test(df: pd.DataFrame, value: str, group: str) -> dict[str, Any]:
    """Non-parametric test for a difference in ``value`` across groups.

    Uses Mann-Whitney U for two groups and Kruskal-Wallis otherwise.
    """
    samples = [
        s.dropna().to_numpy()
        for _, s in df.groupby(group, observed=True)[value]
        if s.notna().any()
    ]
    if len(samples) < 2:
        raise ValueError(f"Need at least two non-empty groups in '{group}' to compare '{value}'")

    if len(samples) == 2:
        result = stats.mannwhitneyu(samples[0], samples[1], alternative="two-sided")
        test = "mann-whitney"
    else:
        result = stats.kruskal(*samples)
        test = "kruskal-wallis"

    return {
        "variable": value,
        "test": test,
        "n_groups": len(samples),
        "statistic": float(result.statistic),
        "p_value": float(result.pvalue),
    }
