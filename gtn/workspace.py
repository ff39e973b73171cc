"""Workspace root, settings, path helpers and logging setup for GTN Manager."""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

import yaml

from gtn.fileio import read_yaml, write_yaml_atomic
from gtn.models import Settings

logger = logging.getLogger(__name__)

LOG_MAX_BYTES = 2_000_000
LOG_BACKUPS = 2


def workspace_root() -> Path:
    """Get the workspace root directory (holds config.yaml and the data file)."""
    return Path(
        os.environ.get("GTN_ROOT", str(Path.home() / "gtn"))
    ).expanduser().resolve()


def config_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "config.yaml"


def load_settings(root: Path | None = None) -> Settings:
    """Load config.yaml into Settings, defaulting when missing or unreadable."""
    path = config_path(root)
    try:
        return Settings.from_dict(read_yaml(path))
    except (OSError, yaml.YAMLError, TypeError, ValueError) as e:
        logger.warning("Could not load %s, using defaults: %s", path, e)
    return Settings()


def data_path(root: Path | None = None, settings: Settings | None = None) -> Path:
    if root is None:
        root = workspace_root()
    if settings is None:
        settings = load_settings(root)
    return root / settings.data_file


def log_path(root: Path | None = None, settings: Settings | None = None) -> Path:
    if root is None:
        root = workspace_root()
    if settings is None:
        settings = load_settings(root)
    return root / settings.log_file


def init_workspace(root: Path | None = None) -> Path:
    """Create the workspace root and a default config.yaml if missing."""
    if root is None:
        root = workspace_root()
    root.mkdir(parents=True, exist_ok=True)
    path = config_path(root)
    if not path.exists():
        write_yaml_atomic(path, Settings().to_dict())
    return root


def setup_logging(settings: Settings, root: Path | None = None) -> logging.Logger:
    """Attach a rotating file handler to the ``gtn`` logger.

    The terminal UI owns the screen, so records go to a file in the
    workspace. The handler level follows ``settings.log_level``.
    """
    gtn_logger = logging.getLogger("gtn")
    gtn_logger.setLevel(logging.DEBUG)
    path = log_path(root, settings)
    for handler in gtn_logger.handlers:
        if isinstance(handler, RotatingFileHandler) and Path(handler.baseFilename) == path:
            return gtn_logger
    path.parent.mkdir(parents=True, exist_ok=True)
    fh = RotatingFileHandler(path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8")
    fh.setLevel(getattr(logging, settings.log_level.upper(), logging.WARNING))
    fh.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    gtn_logger.addHandler(fh)
    return gtn_logger
