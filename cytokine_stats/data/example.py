"""Synthetic cytokine dataset for running the walkthrough without patient data."""

import numpy as np
import pandas as pd

from cytokine_stats.data.constants import (
    AGE_COLUMN,
    COHORT_COLUMN,
    COHORT_GEOMEANS,
    COHORTS,
    CYTOKINES,
    SAMPLE_ID_COLUMN,
    SEX_COLUMN,
    SEXES,
)


def make_example_dataset(n_per_cohort: int = 20, seed: int = 0, sigma: float = 0.5) -> pd.DataFrame:
    """Generate a log-normal cytokine panel for three cohorts.

    Concentrations are drawn around the cohort geometric means in
    ``COHORT_GEOMEANS``; IL-6 and TNF share a latent inflammation score so the
    pair is positively correlated, and IL-6 rises slightly with age.

    Args:
        n_per_cohort: Number of samples per cohort.
        seed: Random seed.
        sigma: Standard deviation on the natural-log scale.

    Returns:
        DataFrame with ``sample_id``, ``cohort``, ``sex``, ``age`` and one
        column per cytokine. Cohort and sex are plain strings, as they would
        be when read from a spreadsheet.
    """
    if n_per_cohort < 1:
        raise ValueError("n_per_cohort must be at least 1")

    rng = np.random.default_rng(seed)
    rows = []
    for cohort in COHORTS:
        means = COHORT_GEOMEANS[cohort]
        for i in range(n_per_cohort):
            age = float(np.round(rng.uniform(20, 75), 1))
            latent = rng.normal(0.0, sigma)
            row = {
                SAMPLE_ID_COLUMN: f"{cohort.split()[0][0]}{cohort.split()[1][0]}{i + 1:03d}",
                COHORT_COLUMN: cohort,
                SEX_COLUMN: SEXES[int(rng.integers(0, len(SEXES)))],
                AGE_COLUMN: age,
            }
            for cytokine in CYTOKINES:
                log_value = np.log(means[cytokine]) + rng.normal(0.0, sigma)
                if cytokine in ("IL-6", "TNF"):
                    log_value += latent
                if cytokine == "IL-6":
                    log_value += 0.01 * (age - 45)
                row[cytokine] = float(np.round(np.exp(log_value), 2))
            rows.append(row)

    return pd.DataFrame(rows)
