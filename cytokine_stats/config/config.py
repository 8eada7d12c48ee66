"""Configuration loading and management."""

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from loguru import logger

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # Python < 3.11

# config/config.py is at cytokine_stats/config/config.py
PROJ_ROOT = Path(__file__).resolve().parents[2]

# Load environment variables from .env file if it exists
env_path = PROJ_ROOT / ".env"
if env_path.exists():
    load_dotenv(dotenv_path=env_path, override=False)
    logger.debug(f"Loaded environment variables from {env_path}")
else:
    load_dotenv(override=False)

# DATA_ROOT and REPORTS_ROOT are configurable via environment variables
DATA_ROOT = Path(os.environ.get("CYTOKINE_STATS_DATA_ROOT", PROJ_ROOT / "data"))
REPORTS_ROOT = Path(os.environ.get("CYTOKINE_STATS_REPORTS_ROOT", PROJ_ROOT / "reports"))

logger.debug(f"PROJ_ROOT path is: {PROJ_ROOT}")
logger.debug(f"DATA_ROOT path is: {DATA_ROOT}")
logger.debug(f"REPORTS_ROOT path is: {REPORTS_ROOT}")

DATA_DIR = DATA_ROOT
RAW_DATA_DIR = DATA_DIR / "raw"
PROCESSED_DATA_DIR = DATA_DIR / "processed"

REPORTS_DIR = REPORTS_ROOT
FIGURES_DIR = REPORTS_DIR / "figures"
TABLES_DIR = REPORTS_DIR / "tables"

# Configure loguru to work with tqdm if available
# https://github.com/Delgan/loguru/issues/135
try:
    from tqdm import tqdm

    logger.remove()
    logger.add(lambda msg: tqdm.write(msg, end=""), colorize=True, level="INFO")
except ModuleNotFoundError:
    pass

DEFAULT_CONFIG_PATH = Path(__file__).parent / "default.toml"

_config_cache: dict[str, Any] | None = None


def load_config(config_path: Path | str | None = None) -> dict[str, Any]:
    """Load configuration from TOML file.

    Args:
        config_path: Path to config file. If None, uses default.toml.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file does not exist.
    """
    global _config_cache

    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    if config_path == DEFAULT_CONFIG_PATH and _config_cache is not None:
        return _config_cache

    logger.info(f"Loading config from {config_path}")
    with config_path.open("rb") as f:
        config = tomllib.load(f)

    # Override paths with environment variables if set
    if "paths" in config:
        for key in config["paths"]:
            env_key = f"CYTOKINE_STATS_{key.upper()}"
            if env_key in os.environ:
                config["paths"][key] = os.environ[env_key]
                logger.info(f"Overriding {key} from environment: {config['paths'][key]}")

    # Resolve relative paths
    if "paths" in config:
        for key, value in config["paths"].items():
            if not isinstance(value, str) or Path(value).is_absolute():
                continue
            if key.endswith("_file") or key.endswith("_data_dir"):
                config["paths"][key] = str(DATA_DIR / value)
            elif key.endswith("_dir"):
                config["paths"][key] = str(REPORTS_DIR / value)

    if config_path == DEFAULT_CONFIG_PATH:
        _config_cache = config

    return config


def get_config() -> dict[str, Any]:
    """Get cached configuration or load default.

    Returns:
        Configuration dictionary. If cache is empty, loads default config.
    """
    if _config_cache is None:
        return load_config()
    return _config_cache
