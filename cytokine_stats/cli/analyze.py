"""Analysis commands."""

from pathlib import Path

from loguru import logger
import pandas as pd
import typer

from cytokine_stats.analysis.correlation import correlation_matrix, correlation_pvalues
from cytokine_stats.analysis.descriptive import (
    chi_square_test,
    contingency_table,
    group_difference_test,
)
from cytokine_stats.analysis.pca import run_pca
from cytokine_stats.analysis.regression import fit_formula, fit_linear_model, tidy_coefficients
from cytokine_stats.cli.utils import (
    ConfigOption,
    InputArgument,
    SheetOption,
    load_prepared_table,
    option_or_config,
    parse_columns,
    resolve_config,
    tables_dir,
)
from cytokine_stats.utils.io import save_results, save_table

app = typer.Typer(help="Analysis commands")

OutputDirOption = typer.Option(None, "--output-dir", help="Directory for result tables")


def _output_dir(output_dir: Path | None, config: dict) -> Path:
    output_dir = Path(output_dir) if output_dir is not None else tables_dir(config)
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


@app.command("pca")
def analyze_pca(
    input_path: Path | None = InputArgument,
    columns: str | None = typer.Option(None, help="Comma-separated cytokines (default: all)"),
    n_components: int | None = typer.Option(
        None, help="Components to keep, 0 keeps all (default: pca.n_components)"
    ),
    no_scale: bool = typer.Option(False, "--no-scale", help="Center only, do not scale"),
    output_dir: Path | None = OutputDirOption,
    sheet: str | None = SheetOption,
    config_path: Path | None = ConfigOption,
) -> None:
    """Run PCA and save scores, loadings and explained variance."""
    config = resolve_config(config_path)
    df, cytokines = load_prepared_table(input_path, sheet, config)
    n_components = option_or_config(n_components, config, "pca", "n_components", 0)
    result = run_pca(
        df,
        parse_columns(columns, cytokines),
        n_components=n_components or None,
        scale=False if no_scale else config.get("pca", {}).get("scale", True),
    )
    output_dir = _output_dir(output_dir, config)
    save_table(result.scores, output_dir / "pca_scores.csv", index=True)
    save_table(result.loadings, output_dir / "pca_loadings.csv", index=True)
    save_table(
        result.explained_variance_ratio.rename("explained_variance_ratio").to_frame(),
        output_dir / "pca_explained_variance.csv",
        index=True,
    )
    save_results(result, output_dir / "pca_result.pkl")
    for pc, ratio in result.explained_variance_ratio.items():
        logger.info(f"{pc}: {ratio * 100:.1f}%")
    logger.success(f"Saved PCA results to {output_dir}")


@app.command("correlation")
def analyze_correlation(
    input_path: Path | None = InputArgument,
    columns: str | None = typer.Option(None, help="Comma-separated cytokines (default: all)"),
    method: str | None = typer.Option(None, help="pearson, spearman or kendall (default: correlation.method)"),
    output_dir: Path | None = OutputDirOption,
    sheet: str | None = SheetOption,
    config_path: Path | None = ConfigOption,
) -> None:
    """Compute a correlation matrix and its p-values."""
    config = resolve_config(config_path)
    df, cytokines = load_prepared_table(input_path, sheet, config)
    method = option_or_config(method, config, "correlation", "method", "spearman")
    cols = parse_columns(columns, cytokines)
    output_dir = _output_dir(output_dir, config)
    save_table(correlation_matrix(df, cols, method=method), output_dir / f"correlation_{method}.csv", index=True)
    save_table(
        correlation_pvalues(df, cols, method=method),
        output_dir / f"correlation_{method}_pvalues.csv",
        index=True,
    )
    logger.success(f"Saved correlation results to {output_dir}")


@app.command("regression")
def analyze_regression(
    input_path: Path | None = InputArgument,
    response: str | None = typer.Option(None, help="Outcome cytokine"),
    predictors: str = typer.Option("cohort,age,sex", help="Comma-separated predictors"),
    formula: str | None = typer.Option(None, help="Full patsy formula; overrides response/predictors"),
    alpha: float | None = typer.Option(None, help="1 - confidence level (default: regression.alpha)"),
    output_dir: Path | None = OutputDirOption,
    sheet: str | None = SheetOption,
    config_path: Path | None = ConfigOption,
) -> None:
    """Fit a linear model and save the coefficient table."""
    config = resolve_config(config_path)
    df, _ = load_prepared_table(input_path, sheet, config)
    if formula is not None:
        result = fit_formula(df, formula)
    elif response is not None:
        result = fit_linear_model(df, response, parse_columns(predictors, []))
    else:
        raise typer.BadParameter("Provide --response or --formula")

    coefs = tidy_coefficients(result, alpha=option_or_config(alpha, config, "regression", "alpha", 0.05))
    output_dir = _output_dir(output_dir, config)
    save_table(coefs, output_dir / "linear_model_coefficients.csv")
    logger.info("\n" + coefs.to_string(index=False))
    logger.success(f"Saved coefficients to {output_dir}")


@app.command("contingency")
def analyze_contingency(
    input_path: Path | None = InputArgument,
    row: str = typer.Option("cohort"),
    col: str = typer.Option("sex"),
    output_dir: Path | None = OutputDirOption,
    sheet: str | None = SheetOption,
    config_path: Path | None = ConfigOption,
) -> None:
    """Cross-tabulate two categorical columns and run a chi-square test."""
    config = resolve_config(config_path)
    df, _ = load_prepared_table(input_path, sheet, config)
    table = contingency_table(df, row, col)
    test = chi_square_test(table)
    output_dir = _output_dir(output_dir, config)
    save_table(table, output_dir / f"contingency_{row}_{col}.csv", index=True)
    logger.info(f"Chi-square: X2={test['statistic']:.3f}, dof={test['dof']}, p={test['p_value']:.4g}")


@app.command("groups")
def analyze_groups(
    input_path: Path | None = InputArgument,
    group: str = typer.Option("cohort", help="Grouping column"),
    columns: str | None = typer.Option(None, help="Comma-separated cytokines (default: all)"),
    output_dir: Path | None = OutputDirOption,
    sheet: str | None = SheetOption,
    config_path: Path | None = ConfigOption,
) -> None:
    """Test each cytokine for a difference across groups."""
    config = resolve_config(config_path)
    df, cytokines = load_prepared_table(input_path, sheet, config)
    tests = pd.DataFrame([group_difference_test(df, c, group) for c in parse_columns(columns, cytokines)])
    output_dir = _output_dir(output_dir, config)
    save_table(tests, output_dir / f"group_difference_tests_{group}.csv")
    logger.info("\n" + tests.to_string(index=False))
