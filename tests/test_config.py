"""
Tests for matrixquiz.config and matrixquiz.preferences.
"""

import logging

from matrixquiz.config import header_defaults, load_config, save_api_key_to_env, setup_logging
from matrixquiz.preferences import DEFAULT_THEME, resolve_theme


class TestLoadConfig:
    def test_missing_file_uses_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv("LLM_PROVIDER", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        config = load_config(str(tmp_path / "absent.yaml"), env_path=str(tmp_path / "absent.env"))
        assert config["llm"]["provider"] == "mock"
        assert config["figures"] == {"width": 500, "height": 300, "max_sessions": 200}

    def test_yaml_merged_over_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv("LLM_PROVIDER", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text("llm:\n  model_name: gemini-pro\nfigures:\n  width: 640\n", encoding="utf-8")
        config = load_config(str(path), env_path=str(tmp_path / "absent.env"))
        assert config["llm"] == {"provider": "mock", "model_name": "gemini-pro"}
        assert config["figures"] == {"width": 640, "height": 300, "max_sessions": 200}

    def test_env_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "gemini")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        config = load_config(str(tmp_path / "absent.yaml"), env_path=str(tmp_path / "absent.env"))
        assert config["llm"]["provider"] == "gemini"
        assert config["logging"]["level"] == "DEBUG"

    def test_setup_logging(self):
        setup_logging({"logging": {"level": "warning"}})
        assert logging.getLogger().level == logging.WARNING


class TestHeaderDefaults:
    def test_combines_generation_and_export(self, mock_config):
        defaults = header_defaults(mock_config)
        assert defaults == {"subject": "Mathematics", "grade": "7", "school": "Riverside High"}


class TestSaveApiKey:
    def test_appends_then_updates(self, tmp_path, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        env = tmp_path / ".env"
        env.write_text("SECRET_KEY=abc\n", encoding="utf-8")
        save_api_key_to_env("GEMINI_API_KEY", "first", str(env))
        save_api_key_to_env("GEMINI_API_KEY", "second", str(env))
        assert env.read_text(encoding="utf-8") == "SECRET_KEY=abc\nGEMINI_API_KEY=second\n"


class TestTheme:
    def test_known_theme(self):
        assert resolve_theme("Dark") == "dark"

    def test_unknown_falls_back(self):
        assert resolve_theme("neon") == DEFAULT_THEME
        assert resolve_theme(None) == DEFAULT_THEME
