"""Configuration module for cytokine-stats."""

from cytokine_stats.config.config import (
    DATA_DIR,
    DATA_ROOT,
    DEFAULT_CONFIG_PATH,
    FIGURES_DIR,
    PROCESSED_DATA_DIR,
    PROJ_ROOT,
    RAW_DATA_DIR,
    REPORTS_DIR,
    REPORTS_ROOT,
    TABLES_DIR,
    get_config,
    load_config,
)

__all__ = [
    "DATA_DIR",
    "DATA_ROOT",
    "DEFAULT_CONFIG_PATH",
    "FIGURES_DIR",
    "PROCESSED_DATA_DIR",
    "PROJ_ROOT",
    "RAW_DATA_DIR",
    "REPORTS_DIR",
    "REPORTS_ROOT",
    "TABLES_DIR",
    "get_config",
    "load_config",
]
