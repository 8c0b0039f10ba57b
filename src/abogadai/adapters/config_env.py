"""Env configuration adapter producing a structured AppConfig."""

from __future__ import annotations

from ..config import config as env_config
from ..core.config_model import AppConfig


def load_app_config() -> AppConfig:
    return AppConfig(
        api_url=env_config.API_URL,
        http_timeout=env_config.HTTP_TIMEOUT,
        autosave_delay=env_config.AUTOSAVE_DELAY,
        usage_poll_interval=env_config.USAGE_POLL_INTERVAL,
        tier_poll_interval=env_config.TIER_POLL_INTERVAL,
        debug=env_config.DEBUG,
    )
