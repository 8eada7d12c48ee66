"""Data loading functions."""

from pathlib import Path

from loguru import logger
import pandas as pd

from cytokine_stats.data.constants import DELIMITED_SUFFIXES, EXCEL_SUFFIXES


def load_cytokine_table(path: str | Path, sheet_name: str | int = 0) -> pd.DataFrame:
    """Read the cytokine spreadsheet into a DataFrame.

    Args:
        path: Excel (.xlsx/.xls) or delimited (.csv/.tsv) file.
        sheet_name: Sheet to read for Excel workbooks.

    Returns:
        DataFrame with one row per sample and stripped column names.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file extension is not supported.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    suffix = path.suffix.lower()
    if suffix in EXCEL_SUFFIXES:
        df = pd.read_excel(path, sheet_name=sheet_name)
    elif suffix in DELIMITED_SUFFIXES:
        df = pd.read_csv(path, sep=DELIMITED_SUFFIXES[suffix])
    else:
        raise ValueError(f"Unsupported file type '{suffix}' for {path}")

    df.columns = [str(c).strip() for c in df.columns]
    logger.info(f"Loaded {len(df)} samples x {df.shape[1]} columns from {path}")
    return df


def save_cytokine_table(df: pd.DataFrame, path: str | Path, sheet_name: str = "Sheet1") -> Path:
    """Write a cytokine table to Excel or CSV depending on the extension."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    suffix = path.suffix.lower()
    if suffix in EXCEL_SUFFIXES:
        df.to_excel(path, sheet_name=sheet_name, index=False)
    elif suffix in DELIMITED_SUFFIXES:
        df.to_csv(path, sep=DELIMITED_SUFFIXES[suffix], index=False)
    else:
        raise ValueError(f"Unsupported file type '{suffix}' for {path}")

    logger.info(f"Saved {len(df)} samples to {path}")
    return path
