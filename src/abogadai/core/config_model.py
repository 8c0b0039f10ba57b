"""Core configuration model (structured view)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AppConfig:
    api_url: str
    http_timeout: float
    autosave_delay: float
    usage_poll_interval: float
    tier_poll_interval: float
    debug: bool
