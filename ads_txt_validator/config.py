"""
config.py
Checker settings. A JSON file may override any of the defaults; unknown keys are ignored.

Example (data/checker_config.json):
  {"locale": "ja", "help_base_url": "https://example.com", "max_workers": 8}
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields, replace
from typing import Optional

from .messages import is_supported_locale, supported_locales
from .sellers import DEFAULT_USER_AGENT


@dataclass(frozen=True)
class CheckerConfig:
    locale: str = "en"
    help_base_url: Optional[str] = None
    fetch_timeout: float = 20.0
    user_agent: str = DEFAULT_USER_AGENT
    max_workers: int = 4
    sellers_cache_ttl: float = 3600


def load_config(path: Optional[str]) -> CheckerConfig:
    cfg = CheckerConfig()
    if not path or not os.path.exists(path):
        return cfg
    try:
        with open(path, "r", encoding="utf-8") as f:
            user = json.load(f)
    except (OSError, ValueError) as e:
        raise ValueError(f"Failed to read config {path}: {e}") from e
    if not isinstance(user, dict):
        raise ValueError(f"Config {path} must contain a JSON object")

    known = {f.name for f in fields(CheckerConfig)}
    cfg = replace(cfg, **{k: v for k, v in user.items() if k in known})

    if not is_supported_locale(cfg.locale):
        raise ValueError(f"Config {path}: unsupported locale {cfg.locale!r}, must be one of {supported_locales()}")
    if int(cfg.max_workers) < 1:
        raise ValueError(f"Config {path}: max_workers must be >= 1")
    return cfg
