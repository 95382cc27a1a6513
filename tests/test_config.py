"""Tests for configuration loading."""

import pytest

from lighthouse_batch.core.config import (
    DEFAULT_CONFIG_PATH,
    ConfigError,
    env_overrides,
    load_config,
    load_yaml,
    merge_configs,
)
from lighthouse_batch.core.types import BatchConfig, Category


def test_merge_configs():
    """Test configuration merging."""
    base = {
        "run": {"retries": 2, "timeout_seconds": 45},
        "report": {"output": "lighthouse-results"},
    }

    override = {
        "run": {"retries": 0},
        "browser": {"headless": False},
    }

    merged = merge_configs(base, override)

    assert merged["run"]["retries"] == 0  # Overridden
    assert merged["run"]["timeout_seconds"] == 45  # Preserved
    assert merged["report"]["output"] == "lighthouse-results"
    assert merged["browser"]["headless"] is False  # Added
    assert base["run"]["retries"] == 2


def test_default_config_file_exists(configs_dir):
    assert DEFAULT_CONFIG_PATH.resolve() == (configs_dir / "default.yaml").resolve()
    assert DEFAULT_CONFIG_PATH.exists()


def test_load_default_config():
    """Defaults from configs/default.yaml."""
    config = load_config()

    assert config.run.retries == 2
    assert config.run.timeout_seconds == 45
    assert config.run.concurrency == 1
    assert config.run.retry_backoff_seconds == 3.0
    assert config.run.sequential_delay_seconds == 2.0
    assert config.run.batch_delay_seconds == 0.5
    assert config.browser.headless is True
    assert "--no-sandbox" in config.browser.chrome_flags
    assert config.lighthouse.categories == list(Category)
    assert config.lighthouse.form_factor == "desktop"
    assert config.lighthouse.screen_emulation.width == 1366
    assert config.lighthouse.throttling.throughput_kbps == 10240
    assert config.report.summary_path == "lighthouse-results.csv"
    assert config.report.reports_dir == "reports"
    assert config.urls_file == "urls.txt"
    assert config.default_urls == [
        "https://ascenten.net/culture.html",
        "https://ascenten.net/affirmative-action-policy.html",
    ]


def test_default_file_matches_model_defaults():
    assert load_config() == BatchConfig()


def test_user_config_and_overrides_precedence(tmp_path):
    user = tmp_path / "user.yaml"
    user.write_text("run:\n  retries: 5\n  concurrency: 3\nreport:\n  output: weekly\n")

    config = load_config(config_path=user, overrides={"run": {"retries": 1}})

    assert config.run.retries == 1
    assert config.run.concurrency == 3
    assert config.run.timeout_seconds == 45
    assert config.report.output == "weekly"


def test_missing_user_config(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(config_path=tmp_path / "absent.yaml")


def test_invalid_yaml(tmp_path):
    user = tmp_path / "broken.yaml"
    user.write_text("run: [unclosed\n")

    with pytest.raises(ConfigError):
        load_config(config_path=user)


@pytest.mark.parametrize(
    "overrides",
    [
        {"run": {"retries": -1}},
        {"run": {"timeout_seconds": 0}},
        {"run": {"concurrency": 0}},
        {"lighthouse": {"categories": ["Speed"]}},
    ],
)
def test_invalid_values_rejected(overrides):
    with pytest.raises(ConfigError, match="Invalid configuration"):
        load_config(overrides=overrides)


def test_missing_base_file_uses_model_defaults(tmp_path):
    config = load_config(base_path=tmp_path / "absent.yaml")
    assert config == BatchConfig()


def test_load_yaml_empty_file(tmp_path):
    empty = tmp_path / "empty.yaml"
    empty.write_text("")

    assert load_yaml(empty) == {}


def test_null_default_urls_means_none(tmp_path):
    user = tmp_path / "user.yaml"
    user.write_text("default_urls:\n")

    assert load_config(config_path=user).default_urls == []


def test_env_overrides():
    environ = {"LIGHTHOUSE_BIN": "/opt/lh/cli.js", "CHROME_PATH": "/usr/bin/chromium", "X": "y"}

    assert env_overrides(environ) == {
        "lighthouse": {"binary": "/opt/lh/cli.js"},
        "browser": {"executable_path": "/usr/bin/chromium"},
    }


def test_env_overrides_ignores_empty_values():
    assert env_overrides({"LIGHTHOUSE_BIN": ""}) == {}
