"""Pairwise correlation between cytokines."""

import numpy as np
import pandas as pd
from scipy import stats

CORRELATION_TESTS = {
    "pearson": stats.pearsonr,
    "spearman": stats.spearmanr,
    "kendall": stats.kendalltau,
}


def _check_method(method: str) -> None:
    if method not in CORRELATION_TESTS:
        raise ValueError(
            f"Unknown correlation method '{method}'; expected one of {sorted(CORRELATION_TESTS)}"
        )


def correlation_matrix(df: pd.DataFrame, columns: list[str], method: str = "pearson") -> pd.DataFrame:
    """Pairwise-complete correlation matrix (R's ``cor(..., use="pairwise")``)."""
    _check_method(method)
    return df[columns].astype(float).corr(method=method)


def correlation_pvalues(df: pd.DataFrame, columns: list[str], method: str = "pearson") -> pd.DataFrame:
    """P-values matching :func:`correlation_matrix`.

    Each pair uses only rows where both values are present. Pairs with fewer
    than three complete rows get NaN. The diagonal is 0.
    """
    _check_method(method)
    test = CORRELATION_TESTS[method]
    data = df[columns].astype(float)

    pvals = pd.DataFrame(np.nan, index=columns, columns=columns)
    for i, a in enumerate(columns):
        pvals.loc[a, a] = 0.0
        for b in columns[i + 1 :]:
            pair = data[[a, b]].dropna()
            if len(pair) < 3:
                continue
            p = float(test(pair[a], pair[b])[1])
            pvals.loc[a, b] = p
            pvals.loc[b, a] = p
    return pvals
