"""
Configuration loading for the workout generator.
"""

import copy
import os

import yaml
from dotenv import load_dotenv


DEFAULT_CONFIG = {
    "claude": {
        "api_key_env": "ANTHROPIC_API_KEY",
        "model": "claude-sonnet-4-20250514",
        "max_tokens": 4000,
        "timeout": 60,
        "temperature": 0.7,
        "prefill_json": True,
    },
    "generation": {
        "max_attempts": 3,
    },
    "quota": {
        "exempt_admins": True,
    },
    "database": {
        "path": "data/workouts.db",
    },
    "focus_instructions": {},
}


def _merge(base, overrides):
    merged = copy.deepcopy(base)
    for key, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path=None):
    """
    Load configuration from config.yaml, layered over DEFAULT_CONFIG.

    A missing file is not an error: the defaults are returned unchanged.
    """
    if config_path is None:
        config_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "config.yaml")

    if not os.path.exists(config_path):
        return copy.deepcopy(DEFAULT_CONFIG)

    with open(config_path, "r") as f:
        loaded = yaml.safe_load(f) or {}

    if not isinstance(loaded, dict):
        raise ValueError(f"{config_path} must contain a mapping at the top level")

    return _merge(DEFAULT_CONFIG, loaded)


def get_api_key(config):
    """Read the Anthropic API key named by claude.api_key_env (after loading .env)."""
    load_dotenv()
    api_key_env = config["claude"]["api_key_env"]
    return os.getenv(api_key_env)
