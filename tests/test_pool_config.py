import logging

import pytest

from jobpool.config import PoolConfig, load_pool_config, pool_config_from_env
from jobpool.utils.logging_config import resolve_level, setup_logging


def test_load_pool_config(tmp_path):
    yaml_text = """
max_at_once: 4
log_level: DEBUG
progress_interval: 25
label: nightly
"""
    cfg_path = tmp_path / "pool.yaml"
    cfg_path.write_text(yaml_text)
    cfg = load_pool_config(cfg_path)
    assert cfg.max_at_once == 4
    assert cfg.log_level == "DEBUG"
    assert cfg.log_file is None
    assert cfg.progress_interval == 25
    assert cfg.extra["label"] == "nightly"


def test_load_empty_config_uses_defaults(tmp_path):
    cfg_path = tmp_path / "empty.yaml"
    cfg_path.write_text("")
    cfg = load_pool_config(cfg_path)
    assert cfg == PoolConfig()


def test_invalid_max_at_once(tmp_path):
    cfg_path = tmp_path / "bad.yaml"
    cfg_path.write_text("max_at_once: 0\n")
    with pytest.raises(ValueError):
        load_pool_config(cfg_path)


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("JOBPOOL_MAX_AT_ONCE", "7")
    monkeypatch.setenv("JOBPOOL_LOG_LEVEL", "WARNING")
    monkeypatch.delenv("JOBPOOL_LOG_FILE", raising=False)
    monkeypatch.delenv("JOBPOOL_PROGRESS_INTERVAL", raising=False)
    base = PoolConfig(max_at_once=2, progress_interval=3)
    cfg = pool_config_from_env(base)
    assert cfg.max_at_once == 7
    assert cfg.log_level == "WARNING"
    assert cfg.progress_interval == 3
    # base is left untouched
    assert base.max_at_once == 2


def test_resolve_level():
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level(logging.ERROR) == logging.ERROR
    with pytest.raises(ValueError):
        resolve_level("chatty")


def test_setup_logging_to_file(tmp_path):
    log_file = tmp_path / "logs" / "pool.log"
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        level = setup_logging("debug", str(log_file), force=True)
        logging.getLogger("jobpool.test").debug("hello %s", "file")
        assert level == logging.DEBUG
        assert "[DEBUG] jobpool.test - hello file" in log_file.read_text()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = saved_handlers
        root.setLevel(saved_level)
