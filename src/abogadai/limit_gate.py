"""Pre-flight check deciding whether a new session may start today."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .api_client import ApiError
from .core.ports import SessionsApi
from .usage import SEVERITY_OK, percentage, severity

logger = logging.getLogger(__name__)

LIMIT_REACHED_MESSAGE = "Has alcanzado el límite de sesiones diarias"
GATE_ERROR_MESSAGE = "No se pudo verificar el límite de sesiones"


@dataclass(frozen=True)
class Allowed:
    sessions_used: int
    sessions_available: int
    minutes_used: int
    minutes_available: int
    max_session_duration_minutes: int

    @property
    def sessions_remaining(self) -> int:
        return max(self.sessions_available - self.sessions_used, 0)

    @property
    def minutes_remaining(self) -> int:
        return max(self.minutes_available - self.minutes_used, 0)

    @property
    def sessions_severity(self) -> str:
        return severity(percentage(self.sessions_used, self.sessions_available))

    @property
    def minutes_severity(self) -> str:
        return severity(percentage(self.minutes_used, self.minutes_available))

    @property
    def warn_sessions(self) -> bool:
        return self.sessions_severity != SEVERITY_OK

    @property
    def warn_minutes(self) -> bool:
        return self.minutes_severity != SEVERITY_OK


@dataclass(frozen=True)
class BlockedByLimit:
    message: str
    sessions_used: int | None = None
    sessions_maximum: int | None = None


@dataclass(frozen=True)
class BlockedByError:
    message: str = GATE_ERROR_MESSAGE


LimitGateResult = Allowed | BlockedByLimit | BlockedByError


def _blocked_from(body: dict, message: str | None) -> BlockedByLimit:
    return BlockedByLimit(
        message=message or LIMIT_REACHED_MESSAGE,
        sessions_used=body.get("sesiones_usadas"),
        sessions_maximum=body.get("sesiones_maximas"),
    )


class LimitGate:
    """Single-shot gate check. Never raises; never retries on its own."""

    def __init__(self, sessions: SessionsApi):
        self._sessions = sessions

    async def check(self) -> LimitGateResult:
        try:
            body = await self._sessions.validate_limit()
        except ApiError as exc:
            if exc.status_code == 429:
                payload = exc.payload if isinstance(exc.payload, dict) else {}
                logger.info("Session gate blocked: %s", exc.detail)
                return _blocked_from(payload, exc.detail)
            logger.error("Session gate check failed: %s", exc)
            return BlockedByError()

        try:
            if not body.get("permitido"):
                return _blocked_from(body, body.get("mensaje") or body.get("detail"))
            return Allowed(
                sessions_used=int(body.get("sesiones_usadas") or 0),
                sessions_available=int(body.get("sesiones_disponibles") or 0),
                minutes_used=int(body.get("minutos_usados") or 0),
                minutes_available=int(body.get("minutos_disponibles") or 0),
                max_session_duration_minutes=int(body.get("duracion_maxima_sesion") or 0),
            )
        except (AttributeError, TypeError, ValueError) as exc:
            logger.error("Unexpected session gate response %r: %s", body, exc)
            return BlockedByError()
