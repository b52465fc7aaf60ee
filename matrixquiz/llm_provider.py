import json
import logging
import os
import re
from abc import ABC, abstractmethod
from typing import Any

import google.generativeai as genai

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"


class LLMProvider(ABC):
    """
    Abstract base class for the content-generation service.
    This defines the interface that all concrete providers must implement.
    """

    @abstractmethod
    def generate(self, prompt_parts: list, json_mode: bool = False) -> str:
        """
        Generates content from a list of prompt parts.

        Args:
            prompt_parts (list): A list of prompt strings.
            json_mode (bool): Whether to force JSON output.

        Returns:
            str: The generated text.

        Raises:
            Exception: whatever the underlying client raises; callers
                classify it with ``matrixquiz.errors.classify_error``.
        """
        pass

    @abstractmethod
    def prepare_image_context(self, image_path: str) -> Any:
        """
        Prepares a source file (image or PDF) for the generate method.

        Args:
            image_path (str): The path to the file.

        Returns:
            Any: A prompt part the provider's generate method understands.
        """
        pass


class GeminiProvider(LLMProvider):
    """
    Concrete implementation of the LLMProvider for Google's Gemini models.
    """

    def __init__(self, api_key: str, model_name: str = DEFAULT_GEMINI_MODEL):
        genai.configure(api_key=api_key)
        self.model_name = model_name
        self.model = genai.GenerativeModel(model_name)

    def generate(self, prompt_parts: list, json_mode: bool = False) -> str:
        generation_config = {}
        if json_mode:
            generation_config = {"response_mime_type": "application/json"}
        try:
            response = self.model.generate_content(prompt_parts, generation_config=generation_config)
        except Exception as e:
            logger.error("Gemini request to %s failed: %s", self.model_name, e)
            raise
        return response.text

    def prepare_image_context(self, image_path: str) -> Any:
        try:
            return genai.upload_file(image_path)
        except Exception as e:
            logger.error("Gemini upload of %s failed: %s", image_path, e)
            raise


# Canned content used by the mock provider, keyed by the request kind the
# prompt announces on its first line.
_MOCK_QUESTIONS = {
    "Multiple choice": {
        "prompt": "What is the value of $\\frac{1}{2} + \\frac{1}{4}$?\nA. $\\frac{3}{4}$  B. $\\frac{2}{6}$  C. $\\frac{1}{6}$  D. $1$",
        "answer": "A",
    },
    "True/False": {
        "prompt": "True or false: $\\sqrt{16} = 4$.",
        "answer": "True",
    },
    "Short answer": {
        "prompt": "Compute $3^2 + 4^2$.",
        "answer": "25",
    },
    "Essay": {
        "prompt": "Triangle $ABC$ is right-angled at $A$ with $AB = 3$ cm and $AC = 4$ cm. Find $BC$.",
        "answer": "$BC = 5$ cm",
        "rubric": "Apply Pythagoras: $BC^2 = AB^2 + AC^2 = 25$ (1 point). Conclude $BC = 5$ cm (1 point).",
        "drawing": "stroke #1f2937\nwidth 2\npolygon 80 240 320 240 80 60\npoint 80 240 A\npoint 320 240 B\npoint 80 60 C",
    },
}

_PAYLOAD = re.compile(r"<payload>([\s\S]*?)</payload>")


class MockLLMProvider(LLMProvider):
    """Deterministic, offline provider for development and tests.

    Reads the JSON payload embedded in the prompt between ``<payload>`` tags
    and answers with well-formed content derived from it.
    """

    def __init__(self):
        self.calls = []

    def generate(self, prompt_parts: list, json_mode: bool = False) -> str:
        prompt = "\n".join(str(p) for p in prompt_parts)
        self.calls.append(prompt)
        found = _PAYLOAD.search(prompt)
        payload = json.loads(found.group(1)) if found else {}
        kind = prompt.splitlines()[0].strip() if prompt else ""

        if kind == "SPECIFICATION":
            return json.dumps(self._specification(payload))
        if kind == "QUESTIONS":
            return json.dumps(self._questions(payload.get("specification", [])))
        if kind == "REGENERATE":
            question = payload.get("question", {})
            q_type = question.get("question_type", "Multiple choice")
            return json.dumps(self._question(q_type, question.get("topic", ""), question.get("cognitive_level", "")))
        if kind == "SIMILAR":
            return json.dumps(
                [self._question(q_type, "Similar exercises", "") for q_type in ("Multiple choice", "Short answer", "Essay")]
            )
        return "[]"

    def prepare_image_context(self, image_path: str) -> Any:
        return f"[Mock file context: {os.path.basename(image_path)}]"

    @staticmethod
    def _specification(payload):
        items = []
        for row in payload.get("matrix", []):
            outcome = row.get("learning_outcome") or f"Understands {row.get('knowledge_unit', '')}"
            for q_type, levels in row.get("counts", {}).items():
                for level, quantity in levels.items():
                    if quantity:
                        items.append(
                            {
                                "topic": row.get("topic", ""),
                                "knowledge_unit": row.get("knowledge_unit", ""),
                                "learning_outcome": outcome,
                                "question_type": q_type,
                                "cognitive_level": level,
                                "quantity": quantity,
                            }
                        )
        return items

    @staticmethod
    def _question(q_type, topic, level):
        canned = _MOCK_QUESTIONS.get(q_type, _MOCK_QUESTIONS["Multiple choice"])
        return dict(canned, question_type=q_type, topic=topic, cognitive_level=level)

    def _questions(self, specification):
        questions = []
        for item in specification:
            for _ in range(int(item.get("quantity", 0))):
                questions.append(
                    self._question(item.get("question_type"), item.get("topic", ""), item.get("cognitive_level", ""))
                )
        return questions


def get_provider(config):
    """
    Factory function to instantiate the configured provider.

    ``LLM_PROVIDER`` in the environment overrides ``llm.provider`` in config.
    """
    llm_config = config.get("llm", {})
    provider_name = os.getenv("LLM_PROVIDER") or llm_config.get("provider", "mock")

    if provider_name == "mock":
        return MockLLMProvider()
    elif provider_name == "gemini":
        api_key = os.getenv("GEMINI_API_KEY")
        if not api_key:
            raise ValueError("GEMINI_API_KEY is not set in the environment for Gemini provider.")
        return GeminiProvider(api_key=api_key, model_name=llm_config.get("model_name", DEFAULT_GEMINI_MODEL))
    else:
        raise ValueError(f"Unsupported LLM provider: {provider_name}")
