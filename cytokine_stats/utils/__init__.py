"""Utility functions."""

from cytokine_stats.utils.io import load_results, save_results, save_table

__all__ = ["save_table", "save_results", "load_results"]
