from __future__ import annotations

from pathlib import Path

import pytest

from gmail_cleaner.app.run import load_gmail_config
from gmail_cleaner.config.paths import resolve_config_dir
from gmail_cleaner.errors import ConfigError
from gmail_cleaner.gmail.client import FULL_SCOPE, MODIFY_SCOPE


def test_cli_value_overrides_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("GMAIL_CLEANER_CONFIG_DIR", str(tmp_path / "from-env"))

    assert resolve_config_dir(str(tmp_path / "from-cli")) == (tmp_path / "from-cli").resolve()


def test_env_used_when_no_override(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("GMAIL_CLEANER_CONFIG_DIR", str(tmp_path))

    assert resolve_config_dir() == tmp_path.resolve()


def test_missing_config_dir_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GMAIL_CLEANER_CONFIG_DIR", raising=False)

    with pytest.raises(ConfigError):
        resolve_config_dir()


def test_load_gmail_config_requires_credentials(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="credentials.json"):
        load_gmail_config(tmp_path)


def test_load_gmail_config_defaults_to_modify_scope(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("GMAIL_REQUEST_DANGEROUS_FULL_AUTH_SCOPE", raising=False)
    (tmp_path / "credentials.json").write_text("{}", encoding="utf-8")

    cfg = load_gmail_config(tmp_path)

    assert cfg.credentials_path == tmp_path / "credentials.json"
    assert cfg.token_path == tmp_path / "token.json"
    assert cfg.scopes == [MODIFY_SCOPE]


def test_load_gmail_config_full_scope_opt_in(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("GMAIL_REQUEST_DANGEROUS_FULL_AUTH_SCOPE", "true")
    (tmp_path / "credentials.json").write_text("{}", encoding="utf-8")

    assert load_gmail_config(tmp_path).scopes == [FULL_SCOPE]
