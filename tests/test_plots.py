from pathlib import Path

import matplotlib.pyplot as plt
import pytest

from cytokine_stats.analysis.correlation import correlation_matrix, correlation_pvalues
from cytokine_stats.analysis.descriptive import contingency_table
from cytokine_stats.analysis.pca import run_pca
from cytokine_stats.analysis.regression import fit_linear_model, tidy_coefficients
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


def _assert_saved(fig, path: Path):
    assert isinstance(fig, plt.Figure)
    assert path.exists()
    assert path.stat().st_size > 0
    # saved figures are closed
    assert not plt.fignum_exists(fig.number)


@pytest.mark.parametrize("group", [None, "cohort"])
def test_histogram(df, tmp_path: Path, group):
    path = tmp_path / "hist.png"
    fig = plot_histogram(df, "IL-6", group=group, bins=10, output_path=path)
    _assert_saved(fig, path)


def test_histogram_without_output_keeps_figure_open(df):
    fig = plot_histogram(df, "TNF")
    assert plt.fignum_exists(fig.number)
    assert fig.axes[0].get_title() == "Distribution of TNF"


def test_boxplot(df, tmp_path: Path):
    path = tmp_path / "nested" / "box.png"
    fig = plot_boxplot(df, "IL-6", "cohort", output_path=path)
    _assert_saved(fig, path)


def test_boxplot_category_order(df):
    fig = plot_boxplot(df, "IL-6", "cohort")
    fig.canvas.draw()
    labels = [t.get_text() for t in fig.axes[0].get_xticklabels()]
    assert labels == ["Healthy Controls", "Disease Active", "Disease Remission"]


def test_scatter(df, tmp_path: Path):
    path = tmp_path / "scatter.png"
    fig = plot_scatter(df, "IL-6", "TNF", hue="cohort", log_scale=True, output_path=path)
    _assert_saved(fig, path)


def test_contingency_heatmap(df, tmp_path: Path):
    path = tmp_path / "contingency.png"
    fig = plot_contingency_heatmap(contingency_table(df, "cohort", "sex"), output_path=path)
    _assert_saved(fig, path)


def test_pca_plots(df, cytokines, tmp_path: Path):
    result = run_pca(df, cytokines)

    scores_path = tmp_path / "pca.png"
    fig = plot_pca_scores(result, groups=df["cohort"], output_path=scores_path)
    _assert_saved(fig, scores_path)
    assert fig.axes[0].get_xlabel().startswith("PC1 (")

    scree_path = tmp_path / "scree.png"
    fig = plot_pca_variance(result, output_path=scree_path)
    _assert_saved(fig, scree_path)


def test_clustered_heatmap(df, cytokines, tmp_path: Path):
    path = tmp_path / "clustermap.png"
    fig = plot_clustered_heatmap(df, cytokines, row_groups=df["cohort"], output_path=path)
    _assert_saved(fig, path)


def test_clustered_heatmap_raw_values(df, cytokines, tmp_path: Path):
    path = tmp_path / "clustermap_raw.pdf"
    fig = plot_clustered_heatmap(df, cytokines, z_score=False, output_path=path)
    _assert_saved(fig, path)


def test_correlation_matrix_plot(df, cytokines, tmp_path: Path):
    path = tmp_path / "corr.png"
    corr = correlation_matrix(df, cytokines, method="spearman")
    pvals = correlation_pvalues(df, cytokines, method="spearman")
    fig = plot_correlation_matrix(corr, pvals, output_path=path)
    _assert_saved(fig, path)


def test_correlation_matrix_annotations_mark_significance(df):
    cols = ["IL-6", "TNF"]
    corr = correlation_matrix(df, cols, method="spearman")
    fig = plot_correlation_matrix(corr, correlation_pvalues(df, cols, method="spearman"))
    texts = [t.get_text() for t in fig.axes[0].texts]
    assert any(t.endswith("*") for t in texts)
    assert "1.00" in texts


def test_forest_plot(df, tmp_path: Path):
    path = tmp_path / "forest.png"
    coefs = tidy_coefficients(fit_linear_model(df, "IL-6", ["cohort", "age", "sex"]), drop_intercept=True)
    fig = plot_forest(coefs, output_path=path)
    _assert_saved(fig, path)


def test_forest_plot_labels(df):
    coefs = tidy_coefficients(fit_linear_model(df, "IL-6", ["cohort"]), drop_intercept=True)
    fig = plot_forest(coefs)
    labels = [t.get_text() for t in fig.axes[0].get_yticklabels()]
    # first term is drawn at the top
    assert labels == list(reversed(coefs["label"].tolist()))


@pytest.mark.parametrize("hue", [None, "cohort"])
def test_regression_plot(df, tmp_path: Path, hue):
    path = tmp_path / "regression.png"
    fig = plot_regression(df, "TNF", "IL-6", hue=hue, output_path=path)
    _assert_saved(fig, path)


def test_clustered_heatmap_drops_constant_column(df, cytokines, tmp_path: Path):
    path = tmp_path / "clustermap_constant.png"
    flat = df.assign(**{"IL-10": 5.0})
    fig = plot_clustered_heatmap(flat, cytokines, row_groups=flat["cohort"], output_path=path)
    _assert_saved(fig, path)


def test_clustered_heatmap_needs_two_varying_columns(df):
    flat = df.assign(**{"IL-10": 5.0})
    with pytest.raises(ValueError, match="non-constant"):
        plot_clustered_heatmap(flat, ["IL-6", "IL-10"])


@pytest.mark.parametrize("alpha, label", [(0.05, "Estimate (95% CI)"), (0.2, "Estimate (80% CI)")])
def test_forest_plot_axis_label_follows_alpha(df, alpha, label):
    coefs = tidy_coefficients(fit_linear_model(df, "IL-6", ["cohort", "age"]), alpha=alpha, drop_intercept=True)
    fig = plot_forest(coefs, alpha=alpha)
    assert fig.axes[0].get_xlabel() == label
