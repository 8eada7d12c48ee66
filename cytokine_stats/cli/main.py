"""Main CLI application and command registration."""

from pathlib import Path

from loguru import logger
import typer

from cytokine_stats.analysis.descriptive import summarize_by_group
from cytokine_stats.cli import analyze, plot
from cytokine_stats.cli.utils import (
    ConfigOption,
    InputArgument,
    SheetOption,
    load_prepared_table,
    parse_columns,
    resolve_config,
)
from cytokine_stats.config import REPORTS_DIR, get_config
from cytokine_stats.data.example import make_example_dataset
from cytokine_stats.data.load import save_cytokine_table
from cytokine_stats.utils.io import save_table
from cytokine_stats.walkthrough import run_walkthrough

app = typer.Typer(help="cytokine-stats CLI")

# Register subcommands
app.add_typer(plot.app, name="plot")
app.add_typer(analyze.app, name="analyze")


@app.command("example-data")
def example_data(
    output: Path | None = typer.Option(None, "--output", "-o", help="Output .xlsx or .csv"),
    n_per_cohort: int | None = typer.Option(None, "--n-per-cohort", help="Samples per cohort"),
    seed: int | None = typer.Option(None, "--seed", help="Random seed"),
) -> None:
    """Write a synthetic cytokine spreadsheet for trying the walkthrough."""
    config = get_config()
    example_config = config.get("example", {})
    if output is None:
        output = Path(config["paths"]["input_file"])
    if n_per_cohort is None:
        n_per_cohort = example_config.get("n_per_cohort", 20)
    if seed is None:
        seed = example_config.get("seed", 0)
    df = make_example_dataset(n_per_cohort=n_per_cohort, seed=seed)
    save_cytokine_table(df, output)
    logger.success(f"Wrote {len(df)} example samples to {output}")


@app.command("summarize")
def summarize(
    input_path: Path | None = InputArgument,
    group: str = typer.Option("cohort", help="Grouping column"),
    columns: str | None = typer.Option(None, help="Comma-separated cytokines (default: all)"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write summary CSV here"),
    sheet: str | None = SheetOption,
    config_path: Path | None = ConfigOption,
) -> None:
    """Per-group descriptive statistics for each cytokine."""
    config = resolve_config(config_path)
    df, cytokines = load_prepared_table(input_path, sheet, config)
    summary = summarize_by_group(df, parse_columns(columns, cytokines), group)
    logger.info("\n" + summary.to_string(index=False, float_format=lambda v: f"{v:.3g}"))
    if output is not None:
        save_table(summary, output)


@app.command("walkthrough")
def walkthrough(
    input_path: Path | None = InputArgument,
    output_dir: Path | None = typer.Option(None, "--output-dir", help="Output directory"),
    sheet: str | None = SheetOption,
    config_path: Path | None = ConfigOption,
) -> None:
    """Run every section of the walkthrough and write figures and tables."""
    config = resolve_config(config_path)
    df, _ = load_prepared_table(input_path, sheet, config)
    output_dir = Path(output_dir) if output_dir is not None else REPORTS_DIR

    logger.info("=" * 80)
    logger.info("Cytokine statistics walkthrough")
    logger.info("=" * 80)
    logger.info(f"Input: {input_path}")
    logger.info(f"Output directory: {output_dir}")
    logger.info("=" * 80)

    written = run_walkthrough(df, output_dir, config=config)
    for section, paths in written.items():
        for path in paths:
            logger.info(f"{section}: {path}")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
