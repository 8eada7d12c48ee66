"""Run every section of the walkthrough against one prepared cytokine table.

Each section reads a column subset, computes a statistic, and hands the result
to a plotting call. Sections never modify the table.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any

from loguru import logger
import pandas as pd
from tqdm import tqdm

from cytokine_stats.analysis.correlation import correlation_matrix, correlation_pvalues
from cytokine_stats.analysis.descriptive import (
    chi_square_test,
    contingency_table,
    group_difference_test,
    summarize_by_group,
)
from cytokine_stats.analysis.pca import run_pca
from cytokine_stats.analysis.regression import fit_linear_model, tidy_coefficients
from cytokine_stats.config import get_config
from cytokine_stats.data.preprocessing import cytokine_columns_from_config
from cytokine_stats.plots import (
    plot_boxplot,
    plot_clustered_heatmap,
    plot_contingency_heatmap,
    plot_correlation_matrix,
    plot_forest,
    plot_histogram,
    plot_pca_scores,
    plot_pca_variance,
    plot_regression,
    plot_scatter,
)
from cytokine_stats.utils.io import save_table

Section = Callable[[pd.DataFrame, list[str], dict[str, Any], Path, Path], list[Path]]


def _figure_path(fig_dir: Path, name: str, config: dict[str, Any]) -> Path:
    return fig_dir / f"{name}.{config.get('plot', {}).get('format', 'png')}"


def _cytokine_option(section: dict[str, Any], key: str, cytokines: list[str], fallback: int) -> str:
    """Configured cytokine for ``key``, or ``cytokines[fallback]`` if unset or absent from the table."""
    column = section.get(key)
    if column in cytokines:
        return column
    if column:
        logger.warning(f"Configured {key}='{column}' is not a cytokine column; using '{cytokines[fallback]}'")
    return cytokines[fallback]


def section_summary(df, cytokines, config, fig_dir, tab_dir) -> list[Path]:
    group = config["data"]["group_column"]
    summary = summarize_by_group(df, cytokines, group)
    tests = pd.DataFrame([group_difference_test(df, c, group) for c in cytokines])
    return [
        save_table(summary, tab_dir / "summary_by_group.csv"),
        save_table(tests, tab_dir / "group_difference_tests.csv"),
    ]


def section_histogram(df, cytokines, config, fig_dir, tab_dir) -> list[Path]:
    plot_config = config.get("plot", {})
    column = _cytokine_option(plot_config, "histogram_column", cytokines, 0)
    path = _figure_path(fig_dir, "01_histogram", config)
    plot_histogram(
        df,
        column,
        group=config["data"]["group_column"],
        bins=plot_config.get("histogram_bins", 20),
        output_path=path,
    )
    return [path]


def section_boxplot(df, cytokines, config, fig_dir, tab_dir) -> list[Path]:
    value = _cytokine_option(config.get("plot", {}), "boxplot_value", cytokines, 0)
    path = _figure_path(fig_dir, "02_boxplot", config)
    plot_boxplot(df, value, config["data"]["group_column"], output_path=path)
    return [path]


def section_scatter(df, cytokines, config, fig_dir, tab_dir) -> list[Path]:
    plot_config = config.get("plot", {})
    path = _figure_path(fig_dir, "03_scatter", config)
    plot_scatter(
        df,
        _cytokine_option(plot_config, "scatter_x", cytokines, 0),
        _cytokine_option(plot_config, "scatter_y", cytokines, 1),
        hue=config["data"]["group_column"],
        output_path=path,
    )
    return [path]


def section_contingency(df, cytokines, config, fig_dir, tab_dir) -> list[Path]:
    plot_config = config.get("plot", {})
    row = plot_config.get("contingency_row", config["data"]["group_column"])
    col = plot_config.get("contingency_col", "sex")
    if col not in df.columns:
        logger.warning(f"Column '{col}' not in table; skipping contingency section")
        return []

    table = contingency_table(df, row, col)
    test = chi_square_test(table)
    logger.info(f"Chi-square {row} x {col}: X2={test['statistic']:.3f}, p={test['p_value']:.4g}")
    path = _figure_path(fig_dir, "04_contingency_heatmap", config)
    plot_contingency_heatmap(table, output_path=path)
    return [save_table(table, tab_dir / "contingency_table.csv", index=True), path]


def section_pca(df, cytokines, config, fig_dir, tab_dir) -> list[Path]:
    pca_config = config.get("pca", {})
    result = run_pca(
        df,
        cytokines,
        n_components=pca_config.get("n_components") or None,
        scale=pca_config.get("scale", True),
    )
    scores_path = _figure_path(fig_dir, "05_pca_scores", config)
    scree_path = _figure_path(fig_dir, "06_pca_scree", config)
    plot_pca_scores(result, groups=df[config["data"]["group_column"]], output_path=scores_path)
    plot_pca_variance(result, output_path=scree_path)
    return [
        save_table(result.loadings, tab_dir / "pca_loadings.csv", index=True),
        save_table(
            result.explained_variance_ratio.rename("explained_variance_ratio").to_frame(),
            tab_dir / "pca_explained_variance.csv",
            index=True,
        ),
        scores_path,
        scree_path,
    ]


def section_clustered_heatmap(df, cytokines, config, fig_dir, tab_dir) -> list[Path]:
    path = _figure_path(fig_dir, "07_clustered_heatmap", config)
    plot_clustered_heatmap(
        df, cytokines, row_groups=df[config["data"]["group_column"]], output_path=path
    )
    return [path]


def section_correlation(df, cytokines, config, fig_dir, tab_dir) -> list[Path]:
    method = config.get("correlation", {}).get("method", "pearson")
    corr = correlation_matrix(df, cytokines, method=method)
    pvals = correlation_pvalues(df, cytokines, method=method)
    path = _figure_path(fig_dir, "08_correlation_matrix", config)
    plot_correlation_matrix(corr, pvals, output_path=path)
    return [
        save_table(corr, tab_dir / f"correlation_{method}.csv", index=True),
        save_table(pvals, tab_dir / f"correlation_{method}_pvalues.csv", index=True),
        path,
    ]


def section_forest(df, cytokines, config, fig_dir, tab_dir) -> list[Path]:
    reg_config = config.get("regression", {})
    response = _cytokine_option(reg_config, "response", cytokines, 0)
    predictors = [p for p in reg_config.get("predictors", []) if p in df.columns]
    if not predictors:
        logger.warning("No configured predictors present in table; skipping regression section")
        return []

    result = fit_linear_model(df, response, predictors)
    alpha = reg_config.get("alpha", 0.05)
    coefs = tidy_coefficients(result, alpha=alpha)
    path = _figure_path(fig_dir, "09_forest", config)
    plot_forest(
        coefs[coefs["term"] != "Intercept"],
        alpha=alpha,
        title=f"{response} ~ {' + '.join(predictors)}",
        output_path=path,
    )
    return [save_table(coefs, tab_dir / "linear_model_coefficients.csv"), path]


def section_regression_overlay(df, cytokines, config, fig_dir, tab_dir) -> list[Path]:
    reg_config = config.get("regression", {})
    path = _figure_path(fig_dir, "10_regression_overlay", config)
    plot_regression(
        df,
        _cytokine_option(reg_config, "overlay_x", cytokines, 0),
        _cytokine_option(reg_config, "overlay_y", cytokines, 1),
        hue=config["data"]["group_column"],
        output_path=path,
    )
    return [path]


SECTIONS: dict[str, Section] = {
    "summary": section_summary,
    "histogram": section_histogram,
    "boxplot": section_boxplot,
    "scatter": section_scatter,
    "contingency": section_contingency,
    "pca": section_pca,
    "clustered_heatmap": section_clustered_heatmap,
    "correlation": section_correlation,
    "forest": section_forest,
    "regression_overlay": section_regression_overlay,
}


def run_walkthrough(
    df: pd.DataFrame,
    output_dir: Path | str,
    config: dict[str, Any] | None = None,
    sections: list[str] | None = None,
) -> dict[str, list[Path]]:
    """Run the walkthrough sections in order.

    Args:
        df: Prepared cytokine table (see ``prepare_table``).
        output_dir: Directory receiving ``figures/`` and ``tables/``.
        config: Configuration dictionary. If None, uses the default config.
        sections: Subset of section names to run. If None, runs all.

    Returns:
        Mapping of section name to the files it wrote.
    """
    if config is None:
        config = get_config()
    if sections is None:
        sections = list(SECTIONS)
    unknown = [s for s in sections if s not in SECTIONS]
    if unknown:
        raise ValueError(f"Unknown sections {unknown}; expected any of {list(SECTIONS)}")

    output_dir = Path(output_dir)
    fig_dir = output_dir / "figures"
    tab_dir = output_dir / "tables"
    fig_dir.mkdir(parents=True, exist_ok=True)
    tab_dir.mkdir(parents=True, exist_ok=True)

    cytokines = cytokine_columns_from_config(df, config)
    if len(cytokines) < 2:
        raise ValueError(f"Need at least two cytokine columns, found {cytokines}")
    logger.info(f"Cytokine columns: {cytokines}")

    written = {}
    for name in tqdm(sections, desc="Walkthrough"):
        logger.info(f"[{name}]")
        written[name] = SECTIONS[name](df, cytokines, config, fig_dir, tab_dir)

    logger.success(f"Walkthrough complete; outputs in {output_dir}")
    return written
