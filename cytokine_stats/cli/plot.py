"""Plotting commands."""

from pathlib import Path

from loguru import logger
import typer

from cytokine_stats.analysis.correlation import correlation_matrix, correlation_pvalues
from cytokine_stats.analysis.descriptive import contingency_table
from cytokine_stats.analysis.pca import run_pca
from cytokine_stats.analysis.regression import fit_linear_model, tidy_coefficients
from cytokine_stats.cli.utils import (
    ConfigOption,
    InputArgument,
    SheetOption,
    figures_dir,
    load_prepared_table,
    option_or_config,
    parse_columns,
    resolve_config,
)
from cytokine_stats.config import REPORTS_DIR
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
from cytokine_stats.walkthrough import SECTIONS, run_walkthrough

app = typer.Typer(help="Plotting commands")


def _output(output: Path | None, config: dict, name: str) -> Path:
    if output is not None:
        return Path(output)
    return figures_dir(config) / f"{name}.{config.get('plot', {}).get('format', 'png')}"


@app.command("histogram")
def histogram(
    input_path: Path | None = InputArgument,
    column: str = typer.Option(..., help="Cytokine to plot"),
    group: str | None = typer.Option(None, help="Column to split by"),
    bins: int | None = typer.Option(None, help="Number of bins (default: plot.histogram_bins)"),
    output: Path | None = typer.Option(None, "--output", "-o"),
    sheet: str | None = SheetOption,
    config_path: Path | None = ConfigOption,
) -> None:
    """Histogram of one cytokine."""
    config = resolve_config(config_path)
    df, _ = load_prepared_table(input_path, sheet, config)
    bins = option_or_config(bins, config, "plot", "histogram_bins", 20)
    output = _output(output, config, f"histogram_{column}")
    plot_histogram(df, column, group=group, bins=bins, output_path=output)
    logger.success(f"Saved histogram to {output}")


@app.command("boxplot")
def boxplot(
    input_path: Path | None = InputArgument,
    value: str = typer.Option(..., help="Cytokine to plot"),
    group: str = typer.Option("cohort", help="Grouping column"),
    output: Path | None = typer.Option(None, "--output", "-o"),
    sheet: str | None = SheetOption,
    config_path: Path | None = ConfigOption,
) -> None:
    """Boxplot of one cytokine per group."""
    config = resolve_config(config_path)
    df, _ = load_prepared_table(input_path, sheet, config)
    output = _output(output, config, f"boxplot_{value}")
    plot_boxplot(df, value, group, output_path=output)
    logger.success(f"Saved boxplot to {output}")


@app.command("scatter")
def scatter(
    input_path: Path | None = InputArgument,
    x: str = typer.Option(..., "--x"),
    y: str = typer.Option(..., "--y"),
    hue: str | None = typer.Option(None, help="Column to colour points by"),
    log_scale: bool = typer.Option(False, "--log-scale", help="Log-scale both axes"),
    output: Path | None = typer.Option(None, "--output", "-o"),
    sheet: str | None = SheetOption,
    config_path: Path | None = ConfigOption,
) -> None:
    """Scatter plot of two cytokines."""
    config = resolve_config(config_path)
    df, _ = load_prepared_table(input_path, sheet, config)
    output = _output(output, config, f"scatter_{x}_{y}")
    plot_scatter(df, x, y, hue=hue, log_scale=log_scale, output_path=output)
    logger.success(f"Saved scatter plot to {output}")


@app.command("contingency")
def contingency(
    input_path: Path | None = InputArgument,
    row: str = typer.Option("cohort"),
    col: str = typer.Option("sex"),
    output: Path | None = typer.Option(None, "--output", "-o"),
    sheet: str | None = SheetOption,
    config_path: Path | None = ConfigOption,
) -> None:
    """Heatmap of a contingency table of two categorical columns."""
    config = resolve_config(config_path)
    df, _ = load_prepared_table(input_path, sheet, config)
    output = _output(output, config, f"contingency_{row}_{col}")
    plot_contingency_heatmap(contingency_table(df, row, col), output_path=output)
    logger.success(f"Saved contingency heatmap to {output}")


@app.command("pca")
def pca(
    input_path: Path | None = InputArgument,
    columns: str | None = typer.Option(None, help="Comma-separated cytokines (default: all)"),
    group: str | None = typer.Option("cohort", help="Column to colour samples by"),
    no_scale: bool = typer.Option(False, "--no-scale", help="Center only, do not scale"),
    output: Path | None = typer.Option(None, "--output", "-o"),
    sheet: str | None = SheetOption,
    config_path: Path | None = ConfigOption,
) -> None:
    """PCA score plot."""
    config = resolve_config(config_path)
    df, cytokines = load_prepared_table(input_path, sheet, config)
    result = run_pca(
        df,
        parse_columns(columns, cytokines),
        scale=False if no_scale else config.get("pca", {}).get("scale", True),
    )
    output = _output(output, config, "pca_scores")
    plot_pca_scores(result, groups=df[group] if group else None, output_path=output)
    logger.success(f"Saved PCA plot to {output}")


@app.command("scree")
def scree(
    input_path: Path | None = InputArgument,
    columns: str | None = typer.Option(None, help="Comma-separated cytokines (default: all)"),
    no_scale: bool = typer.Option(False, "--no-scale", help="Center only, do not scale"),
    output: Path | None = typer.Option(None, "--output", "-o"),
    sheet: str | None = SheetOption,
    config_path: Path | None = ConfigOption,
) -> None:
    """PCA scree plot."""
    config = resolve_config(config_path)
    df, cytokines = load_prepared_table(input_path, sheet, config)
    result = run_pca(
        df,
        parse_columns(columns, cytokines),
        scale=False if no_scale else config.get("pca", {}).get("scale", True),
    )
    output = _output(output, config, "pca_scree")
    plot_pca_variance(result, output_path=output)
    logger.success(f"Saved scree plot to {output}")


@app.command("clustered-heatmap")
def clustered_heatmap(
    input_path: Path | None = InputArgument,
    columns: str | None = typer.Option(None, help="Comma-separated cytokines (default: all)"),
    group: str | None = typer.Option("cohort", help="Column for the row colour bar"),
    no_z_score: bool = typer.Option(False, "--no-z-score", help="Plot raw values"),
    output: Path | None = typer.Option(None, "--output", "-o"),
    sheet: str | None = SheetOption,
    config_path: Path | None = ConfigOption,
) -> None:
    """Hierarchically clustered heatmap of samples x cytokines."""
    config = resolve_config(config_path)
    df, cytokines = load_prepared_table(input_path, sheet, config)
    output = _output(output, config, "clustered_heatmap")
    plot_clustered_heatmap(
        df,
        parse_columns(columns, cytokines),
        row_groups=df[group] if group else None,
        z_score=not no_z_score,
        output_path=output,
    )
    logger.success(f"Saved clustered heatmap to {output}")


@app.command("correlation")
def correlation(
    input_path: Path | None = InputArgument,
    columns: str | None = typer.Option(None, help="Comma-separated cytokines (default: all)"),
    method: str | None = typer.Option(None, help="pearson, spearman or kendall (default: correlation.method)"),
    output: Path | None = typer.Option(None, "--output", "-o"),
    sheet: str | None = SheetOption,
    config_path: Path | None = ConfigOption,
) -> None:
    """Correlation matrix heatmap."""
    config = resolve_config(config_path)
    df, cytokines = load_prepared_table(input_path, sheet, config)
    method = option_or_config(method, config, "correlation", "method", "spearman")
    cols = parse_columns(columns, cytokines)
    output = _output(output, config, f"correlation_{method}")
    plot_correlation_matrix(
        correlation_matrix(df, cols, method=method),
        correlation_pvalues(df, cols, method=method),
        output_path=output,
    )
    logger.success(f"Saved correlation matrix to {output}")


@app.command("forest")
def forest(
    input_path: Path | None = InputArgument,
    response: str = typer.Option(..., help="Outcome cytokine"),
    predictors: str = typer.Option("cohort,age,sex", help="Comma-separated predictors"),
    alpha: float | None = typer.Option(None, help="1 - confidence level (default: regression.alpha)"),
    output: Path | None = typer.Option(None, "--output", "-o"),
    sheet: str | None = SheetOption,
    config_path: Path | None = ConfigOption,
) -> None:
    """Forest plot of linear model coefficients."""
    config = resolve_config(config_path)
    df, _ = load_prepared_table(input_path, sheet, config)
    alpha = option_or_config(alpha, config, "regression", "alpha", 0.05)
    terms = parse_columns(predictors, [])
    coefs = tidy_coefficients(fit_linear_model(df, response, terms), alpha=alpha, drop_intercept=True)
    output = _output(output, config, f"forest_{response}")
    plot_forest(coefs, alpha=alpha, title=f"{response} ~ {' + '.join(terms)}", output_path=output)
    logger.success(f"Saved forest plot to {output}")


@app.command("regression")
def regression(
    input_path: Path | None = InputArgument,
    x: str = typer.Option(..., "--x"),
    y: str = typer.Option(..., "--y"),
    hue: str | None = typer.Option(None, help="Fit one line per level of this column"),
    output: Path | None = typer.Option(None, "--output", "-o"),
    sheet: str | None = SheetOption,
    config_path: Path | None = ConfigOption,
) -> None:
    """Scatter plot with fitted regression line."""
    config = resolve_config(config_path)
    df, _ = load_prepared_table(input_path, sheet, config)
    output = _output(output, config, f"regression_{y}_{x}")
    plot_regression(df, x, y, hue=hue, output_path=output)
    logger.success(f"Saved regression plot to {output}")


@app.command("all")
def plot_all(
    input_path: Path | None = InputArgument,
    output_dir: Path | None = typer.Option(None, "--output-dir", help="Output directory"),
    sheet: str | None = SheetOption,
    config_path: Path | None = ConfigOption,
) -> None:
    """Render every chart of the walkthrough with the configured columns."""
    config = resolve_config(config_path)
    df, _ = load_prepared_table(input_path, sheet, config)
    output_dir = Path(output_dir) if output_dir is not None else REPORTS_DIR
    sections = [s for s in SECTIONS if s != "summary"]
    written = run_walkthrough(df, output_dir, config=config, sections=sections)
    n_files = sum(len(paths) for paths in written.values())
    logger.success(f"Wrote {n_files} files to {output_dir}")
