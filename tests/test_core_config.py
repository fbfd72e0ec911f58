# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from pathlib import Path

import pytest

from qdispatch_lib.core.config import Config, MonitorSettings


def test_config_defaults():
    config = Config()

    assert config.monitor.initial_wait == 0.1
    assert config.monitor.growth_factor == 1.2
    assert config.monitor.max_wait == 3.0
    assert config.monitor.liveness_check_period == 10
    assert config.monitor.vanished_job_waits == [3.0, 7.0, 60.0]
    assert config.aggregator.tail_lines == 10
    assert config.aggregator.status_waits == [
        0.1, 0.2, 0.2, 0.3, 0.5, 0.5, 1.0, 2.0, 5.0, 5.0, 5.0, 10.0, 25.0
    ]
    assert config.wrapper.killed_status == 137
    assert config.wrapper.retryable_status == 100
    assert config.layout.default_queue_config == "conf/queue.conf"
    assert config.exit_codes.default == 1
    assert config.binary_name == "qdispatch"


def test_config_load_from_toml(tmp_path):
    config_file = tmp_path / "config.toml"
    config_file.write_text(
        """
binary_name = "qd"

[monitor]
max_wait = 5.0
vanished_job_waits = [1.0, 2.0]

[layout]
queue_dir_settle_wait = 0.0
"""
    )

    config = Config.load(config_file)

    assert config.binary_name == "qd"
    assert isinstance(config.monitor, MonitorSettings)
    assert config.monitor.max_wait == 5.0
    assert config.monitor.vanished_job_waits == [1.0, 2.0]
    # untouched values keep their defaults
    assert config.monitor.initial_wait == 0.1
    assert config.layout.queue_dir_settle_wait == 0.0
    assert config.layout.queue_dir == "q"


def test_config_load_missing_file_uses_defaults(tmp_path):
    config = Config.load(tmp_path / "missing.toml")

    assert config == Config()


def test_config_load_invalid_file_raises(tmp_path):
    config_file = tmp_path / "config.toml"
    config_file.write_text("this is = = not toml")

    with pytest.raises(ValueError, match="Could not read qdispatch config"):
        Config.load(config_file)


def test_config_path_from_environment_variable(tmp_path, monkeypatch):
    config_file = tmp_path / "custom.toml"
    config_file.write_text("[wrapper]\nshell = '/bin/zsh'\n")
    monkeypatch.setenv("QDISPATCH_CONFIG", str(config_file))

    assert Config._get_config_path() == config_file
    assert Config.load().wrapper.shell == "/bin/zsh"


def test_config_path_in_working_directory(tmp_path, monkeypatch):
    monkeypatch.delenv("QDISPATCH_CONFIG", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)
    (tmp_path / "qdispatch_config.toml").write_text("")

    assert Config._get_config_path() == Path.cwd() / "qdispatch_config.toml"
