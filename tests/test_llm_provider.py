"""
Tests for matrixquiz.llm_provider: provider factory and the mock provider.
"""

import json
from unittest.mock import MagicMock, patch

import pytest

from matrixquiz.llm_provider import GeminiProvider, MockLLMProvider, get_provider


class TestGetProvider:
    def test_mock_is_default(self, monkeypatch):
        monkeypatch.delenv("LLM_PROVIDER", raising=False)
        assert isinstance(get_provider({}), MockLLMProvider)

    def test_env_overrides_config(self, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "mock")
        assert isinstance(get_provider({"llm": {"provider": "gemini"}}), MockLLMProvider)

    def test_gemini_requires_key(self, monkeypatch):
        monkeypatch.delenv("LLM_PROVIDER", raising=False)
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        with pytest.raises(ValueError, match="GEMINI_API_KEY"):
            get_provider({"llm": {"provider": "gemini"}})

    def test_gemini_with_key(self, monkeypatch):
        monkeypatch.delenv("LLM_PROVIDER", raising=False)
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        with patch("matrixquiz.llm_provider.genai") as genai:
            provider = get_provider({"llm": {"provider": "gemini", "model_name": "gemini-x"}})
        assert isinstance(provider, GeminiProvider)
        genai.configure.assert_called_once_with(api_key="test-key")
        genai.GenerativeModel.assert_called_once_with("gemini-x")

    def test_unknown_provider(self, monkeypatch):
        monkeypatch.delenv("LLM_PROVIDER", raising=False)
        with pytest.raises(ValueError, match="Unsupported"):
            get_provider({"llm": {"provider": "nope"}})


class TestGeminiProvider:
    def test_json_mode_and_errors_propagate(self):
        with patch("matrixquiz.llm_provider.genai") as genai:
            model = MagicMock()
            model.generate_content.return_value.text = "[]"
            genai.GenerativeModel.return_value = model
            provider = GeminiProvider(api_key="k")
            assert provider.generate(["hi"], json_mode=True) == "[]"
            _, kwargs = model.generate_content.call_args
            assert kwargs["generation_config"] == {"response_mime_type": "application/json"}

            model.generate_content.side_effect = RuntimeError("API key not valid")
            with pytest.raises(RuntimeError):
                provider.generate(["hi"])

    def test_prepare_image_context_uploads_file(self):
        with patch("matrixquiz.llm_provider.genai") as genai:
            genai.upload_file.return_value = "uploaded"
            provider = GeminiProvider(api_key="k")
            assert provider.prepare_image_context("/tmp/page.png") == "uploaded"
            genai.upload_file.assert_called_once_with("/tmp/page.png")

            genai.upload_file.side_effect = RuntimeError("permission denied")
            with pytest.raises(RuntimeError):
                provider.prepare_image_context("/tmp/page.png")


class TestMockProvider:
    def test_unknown_request_returns_empty_list(self):
        assert json.loads(MockLLMProvider().generate(["hello"])) == []

    def test_records_calls(self):
        provider = MockLLMProvider()
        provider.generate(["QUESTIONS\n<payload>{\"specification\": []}</payload>"])
        assert len(provider.calls) == 1

    def test_file_context_names_the_file(self):
        assert MockLLMProvider().prepare_image_context("/tmp/uploads/page.png") == "[Mock file context: page.png]"

    def test_similar_request_returns_three_exercises(self):
        data = json.loads(MockLLMProvider().generate(["SIMILAR\nWrite exercises.\n<payload>{}</payload>"]))
        assert [q["question_type"] for q in data] == ["Multiple choice", "Short answer", "Essay"]
