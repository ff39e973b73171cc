"""Tests for gtn/workspace.py and gtn/fileio.py: paths, config, logging."""

import logging
from logging.handlers import RotatingFileHandler

import yaml

from gtn.fileio import read_yaml, write_lines_atomic
from gtn.models import Settings
from gtn.workspace import (
    config_path,
    data_path,
    init_workspace,
    load_settings,
    log_path,
    setup_logging,
    workspace_root,
)


def test_workspace_root_from_env(workspace):
    assert workspace_root() == workspace.resolve()
    assert config_path() == workspace.resolve() / "config.yaml"


def test_load_settings(workspace):
    s = load_settings(workspace)
    assert s.data_file == "data.txt"
    assert s.log_level == "INFO"
    assert data_path(workspace, s) == workspace / "data.txt"
    assert log_path(workspace, s) == workspace / "gtn.log"


def test_load_settings_defaults_when_missing(tmp_path):
    assert load_settings(tmp_path) == Settings()


def test_load_settings_defaults_when_broken(tmp_path):
    (tmp_path / "config.yaml").write_text("data_file: [unclosed\n", encoding="utf-8")
    assert load_settings(tmp_path) == Settings()
    (tmp_path / "config.yaml").write_text("password_attempts: many\n", encoding="utf-8")
    assert load_settings(tmp_path) == Settings()


def test_init_workspace_writes_default_config(tmp_path):
    root = tmp_path / "fresh"
    init_workspace(root)
    assert read_yaml(root / "config.yaml") == Settings().to_dict()


def test_init_workspace_keeps_existing_config(workspace):
    init_workspace(workspace)
    assert yaml.safe_load((workspace / "config.yaml").read_text())["log_level"] == "INFO"


def test_write_lines_atomic(tmp_path):
    path = tmp_path / "sub" / "data.txt"
    write_lines_atomic(path, ["a", "b"])
    assert path.read_text(encoding="utf-8") == "a\nb\n"


def test_setup_logging_adds_one_file_handler(workspace):
    settings = load_settings(workspace)
    logger = setup_logging(settings, workspace)
    try:
        setup_logging(settings, workspace)
        handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
        assert len(handlers) == 1
        assert handlers[0].level == logging.INFO
        logging.getLogger("gtn.test").info("hello")
        handlers[0].flush()
        assert "gtn.test hello" in (workspace / "gtn.log").read_text(encoding="utf-8")
    finally:
        for h in list(logger.handlers):
            if isinstance(h, RotatingFileHandler):
                logger.removeHandler(h)
                h.close()
