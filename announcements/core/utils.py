"""Configuration helpers shared across the package."""
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def get_config_value(key: str, default: str = "") -> str:
    """Get a configuration value from Streamlit secrets or environment variables.

    Streamlit secrets win when the dashboard is deployed; the CLI and tests
    fall back to the process environment.
    """
    try:
        import streamlit as st

        if key in st.secrets:
            return str(st.secrets[key])
    except (ImportError, FileNotFoundError, KeyError):
        pass
    except Exception as exc:  # streamlit raises its own error when no secrets.toml exists
        logger.debug("Streamlit secrets unavailable for %s: %s", key, exc)

    return os.getenv(key, default)


def get_int_setting(key: str, default: int) -> int:
    """Read an integer setting, raising ``ValueError`` for non-numeric values."""

    raw = get_config_value(key, "")
    if raw.strip() == "":
        return default
    return int(raw.strip())


def get_float_setting(key: str, default: float) -> float:
    """Read a numeric setting, raising ``ValueError`` for non-numeric values."""

    raw = get_config_value(key, "")
    if raw.strip() == "":
        return default
    return float(raw.strip())


def load_env_file(path: Path) -> None:
    """Load ``KEY=VALUE`` lines into the environment without overriding it."""
    if not path.exists():
        return

    try:
        with path.open(encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, value = line.split("=", 1)
                key = key.strip()
                if not key or key in os.environ:
                    continue
                os.environ[key] = value.strip().strip('"').strip("'")
    except OSError as exc:
        logger.debug("Could not load env file %s: %s", path, exc)
