"""
Configuration loading for MatrixQuiz.

Settings live in ``config.yaml``; secrets live in ``.env`` (loaded with
python-dotenv) and never in the YAML file.
"""

import copy
import logging
import os

import yaml
from dotenv import load_dotenv

from matrixquiz.figures import CANVAS_HEIGHT, CANVAS_WIDTH, DEFAULT_MAX_BOARDS

DEFAULT_CONFIG_PATH = "config.yaml"

DEFAULTS = {
    "llm": {"provider": "mock", "model_name": "gemini-1.5-flash"},
    "generation": {"default_grade": "", "default_subject": "Mathematics"},
    "export": {"header": {}, "figure_width": 350},
    "figures": {"width": CANVAS_WIDTH, "height": CANVAS_HEIGHT, "max_sessions": DEFAULT_MAX_BOARDS},
    "logging": {"level": "INFO"},
}

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _merge(base, override):
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path=DEFAULT_CONFIG_PATH, env_path=None):
    """
    Load config.yaml over the built-in defaults and apply env overrides.

    A missing config file is not an error; the defaults are used.

    Env overrides:
        LLM_PROVIDER -> llm.provider
        LOG_LEVEL    -> logging.level
    """
    load_dotenv(env_path)
    data = {}
    if config_path and os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    config = _merge(DEFAULTS, data)

    if os.getenv("LLM_PROVIDER"):
        config["llm"]["provider"] = os.getenv("LLM_PROVIDER")
    if os.getenv("LOG_LEVEL"):
        config["logging"]["level"] = os.getenv("LOG_LEVEL")
    return config


def setup_logging(config):
    """Configure root logging once from ``logging.level``."""
    level_name = str(config.get("logging", {}).get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)


def save_api_key_to_env(key_name, value, env_path=".env"):
    """Write an API key to the .env file, never to config.yaml.

    Updates the existing key or appends a new one, and sets it in the
    current process so the next provider picks it up.
    """
    lines = []
    found = False
    if os.path.exists(env_path):
        with open(env_path, encoding="utf-8") as f:
            lines = f.readlines()
        for i, line in enumerate(lines):
            if line.strip().startswith(f"{key_name}="):
                lines[i] = f"{key_name}={value}\n"
                found = True
                break

    if not found:
        lines.append(f"{key_name}={value}\n")

    with open(env_path, "w", encoding="utf-8") as f:
        f.writelines(lines)
    os.environ[key_name] = value


def header_defaults(config):
    """Exam header defaults from ``export.header`` plus the generation defaults."""
    defaults = {"subject": config.get("generation", {}).get("default_subject", "")}
    if config.get("generation", {}).get("default_grade"):
        defaults["grade"] = config["generation"]["default_grade"]
    defaults.update(config.get("export", {}).get("header") or {})
    return {k: v for k, v in defaults.items() if v not in (None, "")}
