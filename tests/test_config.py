"""Tests for Conduit config loading and saving."""

import pytest
import yaml

import conduit.config as config_mod
from conduit.config import AuthSession, ConduitConfig, ServerSettings, load_config, save_config


class TestModels:
    def test_defaults(self):
        cfg = ConduitConfig()
        assert cfg.server.base_url == "http://localhost:3000"
        assert cfg.server.api_key == ""
        assert cfg.auth.token == ""
        assert not cfg.auth.is_signed_in

    def test_sign_out_keeps_email(self):
        auth = AuthSession(token="t", email="a@b.c")
        assert auth.is_signed_in
        auth.sign_out()
        assert auth.token == ""
        assert auth.email == "a@b.c"


class TestLoadConfig:
    def test_explicit_missing_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_defaults_when_nothing_found(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(config_mod, "DEFAULT_CONFIG_PATH", tmp_path / "home" / "conduit.yaml")
        cfg, path = load_config()
        assert path is None
        assert cfg == ConduitConfig()

    def test_cwd_file_found(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(config_mod, "DEFAULT_CONFIG_PATH", tmp_path / "home" / "conduit.yaml")
        (tmp_path / "conduit.yaml").write_text(yaml.safe_dump({
            "server": {"base_url": "https://owui.example.com", "selected_model": "llama3"},
        }))
        cfg, path = load_config()
        assert path == (tmp_path / "conduit.yaml").resolve()
        assert cfg.server.base_url == "https://owui.example.com"
        assert cfg.server.selected_model == "llama3"
        assert cfg.auth.token == ""

    def test_empty_file(self, tmp_path):
        p = tmp_path / "conduit.yaml"
        p.write_text("")
        cfg, _ = load_config(p)
        assert cfg == ConduitConfig()


class TestSaveConfig:
    def test_round_trip(self, tmp_path):
        cfg = ConduitConfig(
            server=ServerSettings(base_url="10.0.0.2:3001", api_key="sk"),
            auth=AuthSession(token="jwt", email="me@example.com"),
        )
        path = save_config(cfg, tmp_path / "nested" / "conduit.yaml")
        assert path.exists()
        loaded, _ = load_config(path)
        assert loaded == cfg
