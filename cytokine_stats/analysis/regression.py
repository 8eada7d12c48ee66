"""Linear models (R's ``lm``) and tidy coefficient tables for forest plots."""

import re

from loguru import logger
import pandas as pd
import statsmodels.formula.api as smf
from statsmodels.regression.linear_model import RegressionResultsWrapper

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_CATEGORICAL_TERM = re.compile(r'^C\((?:Q\(")?(?P<var>.+?)(?:"\))?\)\[T\.(?P<level>.+)\]$')
_QUOTED_TERM = re.compile(r'^Q\("(?P<var>.+)"\)$')


def _quote(name: str) -> str:
    return name if _IDENTIFIER.match(name) else f'Q("{name}")'


def build_formula(response: str, predictors: list[str], categorical: list[str] | None = None) -> str:
    """Build a patsy formula, quoting names such as ``IL-6`` that are not identifiers.

    Args:
        response: Outcome column.
        predictors: Predictor columns.
        categorical: Predictors to wrap in ``C()`` (dummy coding, first level
            as reference).

    Returns:
        Formula string such as ``Q("IL-6") ~ C(cohort) + age``.
    """
    if not predictors:
        raise ValueError("At least one predictor is required")
    categorical = set(categorical or [])
    terms = [f"C({_quote(p)})" if p in categorical else _quote(p) for p in predictors]
    return f"{_quote(response)} ~ " + " + ".join(terms)


def fit_formula(df: pd.DataFrame, formula: str) -> RegressionResultsWrapper:
    """Fit an ordinary least squares model from a formula."""
    result = smf.ols(formula, data=df).fit()
    logger.info(
        f"Fitted {formula} on {int(result.nobs)} samples "
        f"(R^2={result.rsquared:.3f}, adj. R^2={result.rsquared_adj:.3f})"
    )
    return result


def fit_linear_model(
    df: pd.DataFrame, response: str, predictors: list[str]
) -> RegressionResultsWrapper:
    """Fit ``response ~ predictors``; categorical columns are dummy-coded.

    Raises:
        KeyError: If a column is missing from ``df``.
    """
    missing = [c for c in [response, *predictors] if c not in df.columns]
    if missing:
        raise KeyError(f"Columns not found in table: {missing}")

    categorical = [
        p
        for p in predictors
        if isinstance(df[p].dtype, pd.CategoricalDtype)
        or pd.api.types.is_object_dtype(df[p])
        or pd.api.types.is_bool_dtype(df[p])
    ]
    return fit_formula(df, build_formula(response, predictors, categorical=categorical))


def term_label(term: str) -> str:
    """Human-readable label for a patsy term name, e.g. ``cohort: Disease Active``."""
    match = _CATEGORICAL_TERM.match(term)
    if match:
        return f"{match.group('var')}: {match.group('level')}"
    match = _QUOTED_TERM.match(term)
    if match:
        return match.group("var")
    return term


def tidy_coefficients(
    result: RegressionResultsWrapper, alpha: float = 0.05, drop_intercept: bool = False
) -> pd.DataFrame:
    """Coefficient table with confidence intervals (R's ``broom::tidy``).

    Returns:
        DataFrame with columns ``term, label, estimate, std_error, statistic,
        p_value, conf_low, conf_high``.
    """
    ci = result.conf_int(alpha=alpha)
    table = pd.DataFrame(
        {
            "term": result.params.index,
            "estimate": result.params.to_numpy(),
            "std_error": result.bse.to_numpy(),
            "statistic": result.tvalues.to_numpy(),
            "p_value": result.pvalues.to_numpy(),
            "conf_low": ci.iloc[:, 0].to_numpy(),
            "conf_high": ci.iloc[:, 1].to_numpy(),
        }
    )
    table.insert(1, "label", table["term"].map(term_label))
    if drop_intercept:
        table = table[table["term"] != "Intercept"].reset_index(drop=True)
    return table
