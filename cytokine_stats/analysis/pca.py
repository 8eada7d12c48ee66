"""Principal component analysis of the cytokine panel."""

from dataclasses import dataclass

from loguru import logger
import numpy as np
import pandas as pd
from sklearn.decomposition import PCA
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler


@dataclass
class PCAResult:
    """Fitted PCA with sample scores and feature loadings."""

    scores: pd.DataFrame
    loadings: pd.DataFrame
    explained_variance_ratio: pd.Series
    pipeline: Pipeline

    @property
    def n_components(self) -> int:
        return self.scores.shape[1]

    def axis_label(self, component: str) -> str:
        return f"{component} ({self.explained_variance_ratio[component] * 100:.1f}%)"


def run_pca(
    df: pd.DataFrame,
    columns: list[str],
    n_components: int | None = None,
    scale: bool = True,
) -> PCAResult:
    """Run PCA on the given columns after centering and unit-variance scaling.

    Rows with a missing value in any of ``columns`` are dropped. Scaling uses
    ``StandardScaler``, which divides by the population standard deviation
    (ddof=0). Loadings and explained variance ratios therefore match R's
    ``prcomp(x, scale. = TRUE)``, but scores are ``sqrt(n / (n - 1))`` times
    larger than prcomp's.

    Args:
        df: Cytokine table.
        columns: Numeric columns to decompose.
        n_components: Number of components to keep. None (or 0) keeps all.
        scale: Scale columns to unit variance after centering.

    Returns:
        PCAResult indexed like the rows that were used.

    Raises:
        ValueError: If fewer than two complete rows or columns are available.
    """
    if len(columns) < 2:
        raise ValueError("PCA needs at least two columns")

    X = df[columns].dropna()
    dropped = len(df) - len(X)
    if dropped:
        logger.warning(f"Dropped {dropped} rows with missing values before PCA")
    if len(X) < 2:
        raise ValueError("PCA needs at least two complete rows")

    max_components = min(X.shape)
    if not n_components:
        n_components = max_components
    n_components = min(n_components, max_components)

    pipe = Pipeline(
        [
            ("scaler", StandardScaler(with_mean=True, with_std=scale)),
            ("pca", PCA(n_components=n_components)),
        ]
    )
    scores = pipe.fit_transform(X.to_numpy(dtype=float))

    pc_names = [f"PC{i + 1}" for i in range(n_components)]
    pca = pipe.named_steps["pca"]
    result = PCAResult(
        scores=pd.DataFrame(scores, index=X.index, columns=pc_names),
        loadings=pd.DataFrame(pca.components_.T, index=columns, columns=pc_names),
        explained_variance_ratio=pd.Series(pca.explained_variance_ratio_, index=pc_names),
        pipeline=pipe,
    )
    logger.info(
        f"PCA on {X.shape[0]} samples x {X.shape[1]} features; "
        f"explained variance: {np.round(pca.explained_variance_ratio_, 3).tolist()}"
    )
    return result
