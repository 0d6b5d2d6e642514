"""Unit tests for the YAML config loader and env var resolution."""

from __future__ import annotations

from pathlib import Path

import pytest

from stitch_client.config.loader import (
    load_client_config,
    load_yaml,
    resolve_env_vars,
)
from stitch_client.config.models import DEFAULT_PUSH_URL

EXAMPLE_CONFIG = Path(__file__).resolve().parents[2] / "examples" / "client.yaml"


class TestResolveEnvVars:
    def test_plain_string_unchanged(self):
        assert resolve_env_vars("hello") == "hello"

    def test_substitutes_env_var(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("STITCH_TOKEN", "abc")
        assert resolve_env_vars("${STITCH_TOKEN}") == "abc"

    def test_default_when_var_missing(self):
        assert resolve_env_vars("${MISSING_VAR:-fallback}") == "fallback"

    def test_env_var_overrides_default(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("BUF", "9999")
        assert resolve_env_vars("${BUF:-4096}") == "9999"

    def test_escaped_brace_in_default(self):
        assert resolve_env_vars("${MISSING_VAR:-a\\}b}") == "a}b"

    def test_missing_var_no_default_raises(self):
        with pytest.raises(ValueError, match="UNDEFINED_VAR"):
            resolve_env_vars("${UNDEFINED_VAR}")

    def test_embedded_in_string(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("GW_HOST", "gw.internal")
        result = resolve_env_vars("https://${GW_HOST}/push")
        assert result == "https://gw.internal/push"

    def test_recursive(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("NS", "eventslog")
        data = {"namespace": "${NS}", "key_names": ["${KEY:-id}"], "buffer_size": 10}
        assert resolve_env_vars(data) == {
            "namespace": "eventslog",
            "key_names": ["id"],
            "buffer_size": 10,
        }


class TestLoadYaml:
    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError, match="not found"):
            load_yaml(tmp_path / "nope.yaml")

    def test_invalid_yaml_reports_position(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("namespace: [unclosed\n")
        with pytest.raises(ValueError, match="line"):
            load_yaml(path)

    def test_non_mapping_raises(self, tmp_path: Path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(TypeError, match="mapping"):
            load_yaml(path)


class TestLoadClientConfig:
    def test_unset_fields_take_model_defaults(self, tmp_path: Path):
        path = tmp_path / "client.yaml"
        path.write_text(
            "client_id: 12\ntoken: tok\nnamespace: ns\ntable_name: events\n"
            "key_names: [id]\nbuffer_size: 100\n"
        )
        cfg = load_client_config(path)
        assert cfg.client_id == 12
        assert cfg.table_name == "events"
        assert cfg.key_names == ["id"]
        assert cfg.buffer_size == 100
        assert cfg.flush_interval_ms == 60000
        assert cfg.url == DEFAULT_PUSH_URL
        assert cfg.read_timeout_seconds == 60.0

    def test_keyword_overrides_win(self, tmp_path: Path):
        path = tmp_path / "client.yaml"
        path.write_text("client_id: 12\ntoken: tok\nnamespace: ns\nbuffer_size: 100\n")
        cfg = load_client_config(path, buffer_size=1, namespace="other")
        assert cfg.buffer_size == 1
        assert cfg.namespace == "other"

    def test_empty_file_reports_missing_fields(self, tmp_path: Path):
        path = tmp_path / "client.yaml"
        path.write_text("")
        with pytest.raises(ValueError, match="client_id"):
            load_client_config(path)

    def test_invalid_config_wrapped(self, tmp_path: Path):
        path = tmp_path / "client.yaml"
        path.write_text("client_id: 12\nnamespace: ns\n")
        with pytest.raises(ValueError, match="Invalid client config"):
            load_client_config(path)

    def test_example_config(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("STITCH_CLIENT_ID", "4321")
        monkeypatch.setenv("STITCH_TOKEN", "example-token")
        cfg = load_client_config(EXAMPLE_CONFIG)
        assert cfg.client_id == 4321
        assert cfg.token.get_secret_value() == "example-token"
        assert cfg.table_name == "events"
        assert cfg.flush_interval_ms == 10000
