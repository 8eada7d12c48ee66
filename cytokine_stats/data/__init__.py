"""Data loading and preparation."""

from cytokine_stats.data.example import make_example_dataset
from cytokine_stats.data.load import load_cytokine_table, save_cytokine_table
from cytokine_stats.data.preprocessing import (
    coerce_categoricals,
    cytokine_columns_from_config,
    infer_cytokine_columns,
    log_transform,
    prepare_table,
)

__all__ = [
    "load_cytokine_table",
    "save_cytokine_table",
    "make_example_dataset",
    "coerce_categoricals",
    "cytokine_columns_from_config",
    "infer_cytokine_columns",
    "log_transform",
    "prepare_table",
]
