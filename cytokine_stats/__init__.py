"""Basic statistics and standard charts for a small cytokine dataset."""

__version__ = "0.1.0"
