"""Statistical analyses for the cytokine walkthrough."""

from cytokine_stats.analysis.correlation import correlation_matrix, correlation_pvalues
from cytokine_stats.analysis.descriptive import (
    chi_square_test,
    contingency_table,
    group_difference_test,
    summarize_by_group,
)
from cytokine_stats.analysis.pca import PCAResult, run_pca
from cytokine_stats.analysis.regression import (
    build_formula,
    fit_formula,
    fit_linear_model,
    tidy_coefficients,
)

__all__ = [
    "PCAResult",
    "build_formula",
    "chi_square_test",
    "contingency_table",
    "correlation_matrix",
    "correlation_pvalues",
    "fit_formula",
    "fit_linear_model",
    "group_difference_test",
    "run_pca",
    "summarize_by_group",
    "tidy_coefficients",
]
