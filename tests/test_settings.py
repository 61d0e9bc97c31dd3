import json
from pathlib import Path

import pytest

from argocd_locator.errors import ConfigurationError
from argocd_locator.settings import Settings

ENV_VARS = (
    "ARGOCD_CONFIG_FILE",
    "ARGOCD_USERNAME",
    "ARGOCD_PASSWORD",
    "API_TIMEOUT",
    "INSTANCE_TIMEOUT",
    "MCP_SSE_PORT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    # Keep a developer's .env out of the picture.
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("argocd_locator.settings.load_dotenv", lambda: False)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_load_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ARGOCD_CONFIG_FILE", "argocd.json")
    settings = Settings.load()
    assert settings.config_file == Path("argocd.json")
    assert settings.username == ""
    assert settings.password == ""
    assert settings.api_timeout == 30.0
    assert settings.instance_timeout == 60.0
    assert settings.mcp_sse_port == 8000


def test_load_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ARGOCD_CONFIG_FILE", "argocd.json")
    monkeypatch.setenv("ARGOCD_USERNAME", "admin")
    monkeypatch.setenv("ARGOCD_PASSWORD", "s3cret")
    monkeypatch.setenv("API_TIMEOUT", "5")
    monkeypatch.setenv("INSTANCE_TIMEOUT", "none")
    monkeypatch.setenv("MCP_SSE_PORT", "9000")
    settings = Settings.load()
    assert (settings.username, settings.password) == ("admin", "s3cret")
    assert settings.api_timeout == 5.0
    assert settings.instance_timeout is None
    assert settings.mcp_sse_port == 9000


def test_config_file_is_required() -> None:
    with pytest.raises(ValueError, match="ARGOCD_CONFIG_FILE"):
        Settings.load()


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("API_TIMEOUT", "abc"),
        ("API_TIMEOUT", "-1"),
        ("INSTANCE_TIMEOUT", "soon"),
        ("INSTANCE_TIMEOUT", "-3"),
        ("MCP_SSE_PORT", "http"),
        ("MCP_SSE_PORT", "0"),
    ],
)
def test_invalid_values_are_rejected(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv("ARGOCD_CONFIG_FILE", "argocd.json")
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=name):
        Settings.load()


def test_load_locator_config(tmp_path: Path) -> None:
    config = {"argocd": {"appLocatorMethods": []}}
    path = tmp_path / "argocd.json"
    path.write_text(json.dumps(config), encoding="utf-8")
    assert Settings(config_file=path).load_locator_config() == config


def test_load_locator_config_errors(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        Settings(config_file=tmp_path / "missing.json").load_locator_config()

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        Settings(config_file=broken).load_locator_config()

    listing = tmp_path / "list.json"
    listing.write_text("[]", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        Settings(config_file=listing).load_locator_config()
