"""Plotting functions for the cytokine walkthrough.

Every function returns the matplotlib Figure. When ``output_path`` is given the
figure is saved and closed.
"""

from pathlib import Path

from loguru import logger
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from cytokine_stats.analysis.pca import PCAResult
from cytokine_stats.config import get_config


def _plot_config() -> dict:
    return get_config().get("plot", {})


def _palette(palette: str | None) -> str:
    return palette or _plot_config().get("palette", "Set2")


def _significance_stars(p: float) -> str:
    if pd.isna(p):
        return ""
    if p < 0.001:
        return "***"
    if p < 0.01:
        return "**"
    if p < 0.05:
        return "*"
    return ""


def _ordered_levels(values: pd.Series) -> list:
    """Levels of ``values`` in category order if categorical, else order of appearance."""
    present = values.dropna()
    if isinstance(values.dtype, pd.CategoricalDtype):
        seen = set(present)
        return [lvl for lvl in values.cat.categories if lvl in seen]
    return list(pd.unique(present))


def _finish(fig: plt.Figure, output_path: Path | str | None, dpi: int | None = None) -> plt.Figure:
    """Save and close ``fig`` if an output path is given."""
    if output_path is not None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output_path, dpi=dpi or _plot_config().get("dpi", 300), bbox_inches="tight")
        plt.close(fig)  # Close figure to free memory
        logger.debug(f"Saved figure to {output_path}")
    return fig


def plot_histogram(
    df: pd.DataFrame,
    column: str,
    group: str | None = None,
    bins: int = 20,
    palette: str | None = None,
    output_path: Path | None = None,
) -> plt.Figure:
    """Distribution of one cytokine, optionally split by group."""
    fig, ax = plt.subplots(figsize=(7, 5))
    sns.histplot(
        data=df,
        x=column,
        hue=group,
        bins=bins,
        kde=True,
        element="step" if group else "bars",
        palette=_palette(palette) if group else None,
        ax=ax,
    )
    ax.set_xlabel(column)
    ax.set_ylabel("Count")
    ax.set_title(f"Distribution of {column}")
    plt.tight_layout()
    return _finish(fig, output_path)


def plot_boxplot(
    df: pd.DataFrame,
    value: str,
    group: str,
    palette: str | None = None,
    show_points: bool = True,
    output_path: Path | None = None,
) -> plt.Figure:
    """Boxplot of a cytokine per group with the individual samples overlaid."""
    fig, ax = plt.subplots(figsize=(7, 5))
    sns.boxplot(
        data=df,
        x=group,
        y=value,
        hue=group,
        palette=_palette(palette),
        showfliers=not show_points,
        legend=False,
        ax=ax,
    )
    if show_points:
        sns.stripplot(data=df, x=group, y=value, color="black", size=3, alpha=0.6, ax=ax)
    ax.set_xlabel("")
    ax.set_ylabel(value)
    ax.set_title(f"{value} by {group}")
    plt.setp(ax.get_xticklabels(), rotation=15, ha="right")
    plt.tight_layout()
    return _finish(fig, output_path)


def plot_scatter(
    df: pd.DataFrame,
    x: str,
    y: str,
    hue: str | None = None,
    palette: str | None = None,
    log_scale: bool = False,
    output_path: Path | None = None,
) -> plt.Figure:
    """Scatter plot of two cytokines."""
    fig, ax = plt.subplots(figsize=(7, 6))
    sns.scatterplot(
        data=df,
        x=x,
        y=y,
        hue=hue,
        palette=_palette(palette) if hue else None,
        alpha=0.8,
        ax=ax,
    )
    if log_scale:
        ax.set_xscale("log")
        ax.set_yscale("log")
    ax.set_title(f"{y} vs {x}")
    plt.tight_layout()
    return _finish(fig, output_path)


def plot_contingency_heatmap(
    table: pd.DataFrame,
    cmap: str = "Blues",
    output_path: Path | None = None,
) -> plt.Figure:
    """Annotated heatmap of a contingency table of counts."""
    fig, ax = plt.subplots(figsize=(1.5 * table.shape[1] + 3, 0.8 * table.shape[0] + 2))
    sns.heatmap(table, annot=True, fmt="d", cmap=cmap, cbar_kws={"label": "Count"}, ax=ax)
    ax.set_xlabel(table.columns.name or "")
    ax.set_ylabel(table.index.name or "")
    ax.set_title("Contingency table")
    plt.tight_layout()
    return _finish(fig, output_path)


def plot_pca_scores(
    pca_result: PCAResult,
    groups: pd.Series | None = None,
    components: tuple[str, str] = ("PC1", "PC2"),
    palette: str | None = None,
    output_path: Path | None = None,
) -> plt.Figure:
    """Samples projected onto two principal components.

    Args:
        pca_result: Result of :func:`cytokine_stats.analysis.pca.run_pca`.
        groups: Optional labels indexed like the original table; aligned to
            the rows used by the PCA.
        components: Pair of component names for the x and y axes.
        palette: Seaborn palette name.
        output_path: Optional path to save the figure.
    """
    pc_x, pc_y = components
    scores = pca_result.scores.copy()
    hue = None
    if groups is not None:
        hue = groups.name or "group"
        scores[hue] = groups.reindex(scores.index)

    fig, ax = plt.subplots(figsize=(7, 6))
    sns.scatterplot(
        data=scores,
        x=pc_x,
        y=pc_y,
        hue=hue,
        palette=_palette(palette) if hue else None,
        s=50,
        alpha=0.8,
        ax=ax,
    )
    ax.axhline(0, color="grey", linewidth=0.5, alpha=0.5)
    ax.axvline(0, color="grey", linewidth=0.5, alpha=0.5)
    ax.set_xlabel(pca_result.axis_label(pc_x))
    ax.set_ylabel(pca_result.axis_label(pc_y))
    ax.set_title("PCA of cytokine profiles")
    plt.tight_layout()
    return _finish(fig, output_path)


def plot_pca_variance(pca_result: PCAResult, output_path: Path | None = None) -> plt.Figure:
    """Scree plot: variance explained per component and cumulative."""
    ratio = pca_result.explained_variance_ratio
    x = np.arange(len(ratio))

    fig, ax = plt.subplots(figsize=(7, 5))
    ax.bar(x, ratio.to_numpy() * 100, color=sns.color_palette("Set2", 1)[0], edgecolor="black")
    ax.plot(x, ratio.cumsum().to_numpy() * 100, marker="o", color="black", label="Cumulative")
    ax.set_xticks(x)
    ax.set_xticklabels(ratio.index)
    ax.set_ylabel("Variance explained (%)")
    ax.set_ylim(0, 105)
    ax.legend(loc="center right")
    ax.set_title("Scree plot")
    plt.tight_layout()
    return _finish(fig, output_path)


def plot_clustered_heatmap(
    df: pd.DataFrame,
    columns: list[str],
    row_groups: pd.Series | None = None,
    z_score: bool = True,
    method: str = "average",
    metric: str = "euclidean",
    cmap: str = "RdBu_r",
    palette: str | None = None,
    output_path: Path | None = None,
) -> plt.Figure:
    """Hierarchically clustered heatmap of samples x cytokines (``pheatmap``).

    Args:
        df: Cytokine table.
        columns: Cytokine columns to show.
        row_groups: Optional labels indexed like ``df``, drawn as a colour bar.
        z_score: Standardize each cytokine before clustering.
        method: Linkage method.
        metric: Distance metric.
        cmap: Colour map.
        palette: Seaborn palette for the group colour bar.
        output_path: Optional path to save the figure.
    """
    data = df[columns].astype(float).dropna()
    if z_score:
        constant = data.columns[data.std() == 0].tolist()
        if constant:
            logger.warning(f"Dropping zero-variance columns before z-scoring: {constant}")
            data = data.drop(columns=constant)
        if data.shape[1] < 2:
            raise ValueError("Clustered heatmap needs at least two non-constant columns")

    row_colors = None
    handles = []
    if row_groups is not None:
        labels = row_groups.reindex(data.index)
        levels = _ordered_levels(labels)
        colors = dict(zip(levels, sns.color_palette(_palette(palette), len(levels))))
        row_colors = labels.astype(object).map(colors).fillna("white").rename(row_groups.name or "group")
        handles = [plt.Rectangle((0, 0), 1, 1, color=colors[lvl]) for lvl in levels]

    grid = sns.clustermap(
        data,
        z_score=1 if z_score else None,
        method=method,
        metric=metric,
        cmap=cmap,
        center=0 if z_score else None,
        row_colors=row_colors,
        yticklabels=len(data) <= 60,
        figsize=(max(6, data.shape[1] * 0.8 + 3), 8),
    )
    if handles:
        grid.ax_heatmap.legend(
            handles,
            [str(lvl) for lvl in colors],
            title=row_colors.name,
            loc="upper left",
            bbox_to_anchor=(1.15, 1.0),
            fontsize=8,
        )
    grid.figure.suptitle("Clustered heatmap" + (" (z-scored)" if z_score else ""), y=1.02)
    return _finish(grid.figure, output_path)


def plot_correlation_matrix(
    corr: pd.DataFrame,
    pvalues: pd.DataFrame | None = None,
    cmap: str = "vlag",
    output_path: Path | None = None,
) -> plt.Figure:
    """Lower-triangle correlation heatmap; stars mark p < 0.05, 0.01, 0.001."""
    mask = np.triu(np.ones_like(corr, dtype=bool), k=1)

    n = corr.shape[0]
    values = corr.to_numpy()
    pvals = pvalues.reindex_like(corr).to_numpy() if pvalues is not None else None
    annot = np.empty(corr.shape, dtype=object)
    for i in range(n):
        for j in range(n):
            text = f"{values[i, j]:.2f}"
            if pvals is not None and i != j:
                text += _significance_stars(pvals[i, j])
            annot[i, j] = text

    fig, ax = plt.subplots(figsize=(0.9 * n + 3, 0.8 * n + 2))
    sns.heatmap(
        corr,
        mask=mask,
        annot=annot,
        fmt="",
        cmap=cmap,
        vmin=-1,
        vmax=1,
        center=0,
        square=True,
        linewidths=0.5,
        cbar_kws={"label": "Correlation", "shrink": 0.8},
        ax=ax,
    )
    ax.set_title("Correlation matrix")
    plt.tight_layout()
    return _finish(fig, output_path)


def plot_forest(
    coef_table: pd.DataFrame,
    label_column: str = "label",
    alpha: float = 0.05,
    title: str | None = None,
    output_path: Path | None = None,
) -> plt.Figure:
    """Forest plot of model terms: estimates with confidence interval whiskers.

    Args:
        coef_table: Output of :func:`cytokine_stats.analysis.regression.tidy_coefficients`.
        label_column: Column holding term labels.
        alpha: Significance level the intervals were computed at (see
            ``tidy_coefficients``); only used for the axis label.
        title: Optional plot title.
        output_path: Optional path to save the figure.
    """
    table = coef_table.iloc[::-1].reset_index(drop=True)
    y = np.arange(len(table))
    significant = (table["conf_low"] > 0) | (table["conf_high"] < 0)
    colors = np.where(significant, "C3", "C0")

    fig, ax = plt.subplots(figsize=(7, 0.5 * len(table) + 1.5))
    ax.errorbar(
        table["estimate"],
        y,
        xerr=[table["estimate"] - table["conf_low"], table["conf_high"] - table["estimate"]],
        fmt="none",
        ecolor="black",
        elinewidth=1,
        capsize=3,
    )
    ax.scatter(table["estimate"], y, c=colors, s=40, zorder=3)
    ax.axvline(0, color="black", linestyle="--", linewidth=1, alpha=0.7)
    ax.set_yticks(y)
    ax.set_yticklabels(table[label_column])
    ax.set_xlabel(f"Estimate ({(1 - alpha) * 100:g}% CI)")
    ax.set_title(title or "Linear model coefficients")
    plt.tight_layout()
    return _finish(fig, output_path)


def plot_regression(
    df: pd.DataFrame,
    x: str,
    y: str,
    hue: str | None = None,
    palette: str | None = None,
    ci: int = 95,
    output_path: Path | None = None,
) -> plt.Figure:
    """Scatter with fitted least-squares line(s) and confidence band."""
    fig, ax = plt.subplots(figsize=(7, 6))
    if hue is None:
        sns.regplot(data=df, x=x, y=y, ci=ci, scatter_kws={"alpha": 0.7}, ax=ax)
    else:
        groups = _ordered_levels(df[hue])
        colors = sns.color_palette(_palette(palette), len(groups))
        for color, level in zip(colors, groups):
            subset = df[df[hue] == level]
            if len(subset) < 2:
                continue
            sns.regplot(
                data=subset,
                x=x,
                y=y,
                ci=ci,
                color=color,
                label=str(level),
                scatter_kws={"alpha": 0.7},
                ax=ax,
            )
        ax.legend(title=hue)
    ax.set_title(f"{y} ~ {x}")
    plt.tight_layout()
    return _finish(fig, output_path)

