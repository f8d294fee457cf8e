# config_manager.py
from __future__ import annotations
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

config_json = Path(__file__).resolve().parent / "config.json"

DEFAULT_SETTINGS: dict[str, Any] = {
    "max_depth": 200,
    "max_nesting": 64,
    "max_exponent_bits": 100_000,
    "max_decimal_digits": 1000,
    "prompt": "% ",
    "echo_parsed": False,
    "log_level": "WARNING",
}


def _read_settings() -> dict[str, Any]:
    try:
        with open(config_json, 'r', encoding='utf-8') as f:
            settings_dict = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError):
        return {}
    if not isinstance(settings_dict, dict):
        return {}
    return settings_dict


def load_setting_value(key_value: str) -> Any:
    settings_dict = DEFAULT_SETTINGS | _read_settings()
    if key_value == "all":
        return settings_dict
    return settings_dict.get(key_value)


def save_setting(settings_dict: dict[str, Any]) -> dict[str, Any]:
    with open(config_json, 'w', encoding='utf-8') as f:
        json.dump(settings_dict, f, indent=4)
    return settings_dict


@dataclass(frozen=True)
class Limits:
    """Bounds on how far one line may nest and how large numbers grow."""
    max_depth: int = DEFAULT_SETTINGS["max_depth"]
    max_exponent_bits: int = DEFAULT_SETTINGS["max_exponent_bits"]
    max_nesting: int = DEFAULT_SETTINGS["max_nesting"]

    @classmethod
    def from_settings(
        cls,
        settings_dict: Optional[dict[str, Any]] = None
    ) -> Limits:
        # config.json is only read when no settings are passed in
        if settings_dict is None:
            settings_dict = load_setting_value("all")
        return cls(
            settings_dict["max_depth"],
            settings_dict["max_exponent_bits"],
            settings_dict["max_nesting"]
        )
