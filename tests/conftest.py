"""Shared test fixtures for GTN Manager tests."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
import yaml


DATA = """# sample catalog
Task,Write report,Quarterly numbers,2024-06-30,3
RecurringTask,Water plants,Balcony,2024-06-01,1,weekly
OneTimeTask,Renew passport,Bring photos,2024-05-15,5
Note,Daily Standup,notes about Project Apollo,work,urgent
ProtectedNote,Bank,PIN is in the drawer,finance,s3cret
PublicNote,Reading list,Dune and Hyperion,books
Goal,Learn Spanish,Duolingo every day,0.5
NonQuantifiableGoal,Be kinder,Listen more,0
QuantifiableGoal,Run a marathon,Train four times a week,0.9
"""


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary workspace with a config and sample data file."""
    root = tmp_path / "workspace"
    root.mkdir(parents=True)

    config = {
        "data_file": "data.txt",
        "password_attempts": 3,
        "log_level": "INFO",
        "log_file": "gtn.log",
    }
    (root / "config.yaml").write_text(
        yaml.dump(config, default_flow_style=False), encoding="utf-8"
    )
    (root / "data.txt").write_text(DATA, encoding="utf-8")

    # Set env var
    os.environ["GTN_ROOT"] = str(root)
    yield root
    # Cleanup
    if "GTN_ROOT" in os.environ:
        del os.environ["GTN_ROOT"]
