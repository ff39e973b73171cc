"""File access for the workspace: config.yaml and the line-delimited data file.

A save replaces the target file whole, through a temp file in the same
directory; readers see either the old catalog or the new one.
"""

from __future__ import annotations

import fcntl
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml


def read_text(path: Path) -> str:
    """Contents of *path*, or "" when it does not exist yet (fresh workspace)."""
    if not path.exists():
        return ""
    return path.read_text(encoding="utf-8")


def read_yaml(path: Path) -> dict[str, Any]:
    """Parse config.yaml. A missing, empty or non-mapping document gives {}."""
    text = read_text(path)
    if not text.strip():
        return {}
    result = yaml.safe_load(text)
    return result if isinstance(result, dict) else {}


def _atomic_write(path: Path, content: str, suffix: str = ".tmp") -> None:
    """Replace *path* with *content*: flock-guarded temp file, fsync, rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_", suffix=suffix)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            try:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        os.replace(temp_path, path)
    except Exception:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise


def write_lines_atomic(path: Path, lines: list[str]) -> None:
    """Save data-file records, one per line."""
    _atomic_write(path, "".join(line + "\n" for line in lines), suffix=".txt")


def write_yaml_atomic(path: Path, data: dict[str, Any]) -> None:
    """Save a settings mapping as config.yaml, keys in insertion order."""
    content = yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)
    _atomic_write(path, content, suffix=".yaml")
