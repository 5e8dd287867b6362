"""Tests for YAML configuration loading."""

import pytest

from cli.config import load_config_model
from cli.config_models import AppConfig
from shared_types import ExperienceLevel


def _write(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return path


def test_defaults_without_file(tmp_path, monkeypatch):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    config = load_config_model(tmp_path / "missing.yaml")

    assert config.github.api_base == "https://api.github.com"
    assert config.github.user_agent == "ContriBuddy-App"
    assert config.github.token is None
    assert config.rate_limit.burst == 10
    assert config.recommendations.experience_level == ExperienceLevel.BEGINNER


def test_values_from_yaml(tmp_path, monkeypatch):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    path = _write(
        tmp_path,
        "recommendations:\n  experience_level: advanced\n  trending_limit: 25\n"
        "logging:\n  level: debug\n",
    )
    config = load_config_model(path)

    assert config.recommendations.experience_level == ExperienceLevel.ADVANCED
    assert config.recommendations.trending_limit == 25
    assert config.logging.level == "DEBUG"


def test_token_placeholder_expanded(tmp_path, monkeypatch):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.setenv("MY_GH_TOKEN", "ghp_fromplaceholder")
    config = load_config_model(_write(tmp_path, "github:\n  token: '${MY_GH_TOKEN}'\n"))
    assert config.github.token == "ghp_fromplaceholder"


def test_env_token_wins(tmp_path, monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_fromenv")
    config = load_config_model(_write(tmp_path, "github:\n  token: ghp_fromfile\n"))
    assert config.github.token == "ghp_fromenv"


def test_invalid_yaml(tmp_path):
    with pytest.raises(ValueError, match="Invalid YAML"):
        load_config_model(_write(tmp_path, "github: [unclosed\n"))


@pytest.mark.parametrize(
    "text",
    [
        "logging:\n  level: chatty\n",
        "rate_limit:\n  requests_per_second: -1\n",
        "recommendations:\n  experience_level: guru\n",
    ],
)
def test_validation_errors(tmp_path, text):
    with pytest.raises(ValueError, match="Config validation failed"):
        load_config_model(_write(tmp_path, text))


def test_empty_file_is_defaults(tmp_path):
    assert load_config_model(_write(tmp_path, "")).rate_limit == AppConfig().rate_limit
