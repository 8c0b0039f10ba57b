"""Explicit success/failure values for best-effort operations.

Autosave and abandon-delete must never block the user, but the attempt
still has to be observable. They return an Outcome instead of swallowing
the exception; callers that do not care call ``log_if_failed``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Generic, TypeVar

from ..api_client import ApiError

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    value: T | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def log_if_failed(self, logger: logging.Logger, action: str) -> "Outcome[T]":
        if self.error is not None:
            logger.warning("%s failed: %s", action, self.error)
        return self


async def attempt(awaitable: Awaitable[T], *errors: type[Exception]) -> Outcome[T]:
    """Await and capture the listed exception types into an Outcome.

    Anything not listed propagates.
    """
    caught: tuple[type[Exception], ...] = errors or (ApiError,)
    try:
        value: Any = await awaitable
    except caught as exc:
        return Outcome(error=exc)
    return Outcome(value=value)
