import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pytest  # noqa: E402

from cytokine_stats.config import get_config  # noqa: E402
from cytokine_stats.data.constants import CYTOKINES  # noqa: E402
from cytokine_stats.data.example import make_example_dataset  # noqa: E402
from cytokine_stats.data.preprocessing import prepare_table  # noqa: E402


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


@pytest.fixture
def raw_df():
    return make_example_dataset(n_per_cohort=15, seed=1)


@pytest.fixture
def df(raw_df):
    return prepare_table(raw_df, get_config())


@pytest.fixture
def cytokines():
    return list(CYTOKINES)
