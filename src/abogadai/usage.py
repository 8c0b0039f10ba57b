"""Daily usage and tier snapshots, and the poller that keeps them fresh.

The same percentage/severity rules drive every quota display (daily usage
panel, tier card, session confirmation prompt), so they live here once.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, TypeVar

from .api_client import MALFORMED_BODY_ERRORS, ApiClient, ApiError, decode
from .core.outcome import Outcome, attempt

logger = logging.getLogger(__name__)

T = TypeVar("T")

USAGE_ERROR = "No se pudo cargar el uso de sesiones"
TIER_ERROR = "No se pudo cargar el nivel del usuario"
EXTRA_SESSIONS_TIP = "Paga un documento para obtener +2 sesiones extra hoy mismo"

SEVERITY_OK = "ok"
SEVERITY_WARNING = "warning"
SEVERITY_CRITICAL = "critical"


def percentage(used: float, available: float) -> float:
    """Share of quota used, clamped to [0, 100]; 0 when nothing is available."""
    if available <= 0:
        return 0.0
    return max(0.0, min(used / available * 100, 100.0))


def severity(pct: float) -> str:
    if pct >= 90:
        return SEVERITY_CRITICAL
    if pct >= 75:
        return SEVERITY_WARNING
    return SEVERITY_OK


def _int(data: dict, key: str) -> int:
    return int(data.get(key) or 0)


@dataclass(frozen=True)
class UsageSnapshot:
    sessions_used: int
    sessions_available: int
    minutes_used: int
    minutes_available: int

    @classmethod
    def from_dict(cls, data: dict) -> "UsageSnapshot":
        return cls(
            sessions_used=_int(data, "sesiones_usadas"),
            sessions_available=_int(data, "sesiones_disponibles"),
            minutes_used=_int(data, "minutos_usados"),
            minutes_available=_int(data, "minutos_disponibles"),
        )

    @property
    def sessions_percentage(self) -> float:
        return percentage(self.sessions_used, self.sessions_available)

    @property
    def minutes_percentage(self) -> float:
        return percentage(self.minutes_used, self.minutes_available)

    @property
    def sessions_remaining(self) -> int:
        return max(self.sessions_available - self.sessions_used, 0)

    @property
    def minutes_remaining(self) -> int:
        return max(self.minutes_available - self.minutes_used, 0)

    def warnings(self) -> list[str]:
        """Independent session/minute warnings, once past the warning mark."""
        warnings = []
        if severity(self.sessions_percentage) != SEVERITY_OK:
            warnings.append("Quedan pocas sesiones")
        if severity(self.minutes_percentage) != SEVERITY_OK:
            warnings.append("Quedan pocos minutos")
        return warnings


@dataclass(frozen=True)
class TierInfo:
    name: str
    icon: str


TIER_LEVELS: dict[str, TierInfo] = {
    "FREE": TierInfo("Free", "🆓"),
    "BRONCE": TierInfo("Bronce", "🥉"),
    "PLATA": TierInfo("Plata", "🥈"),
    "ORO": TierInfo("Oro", "🥇"),
}


@dataclass(frozen=True)
class TierSnapshot:
    current_level: str
    next_level: str | None
    payments_in_level: int
    payments_to_next: int
    max_sessions: int
    max_minutes: int
    max_unpaid_documents: int
    document_price: float

    @classmethod
    def from_dict(cls, data: dict) -> "TierSnapshot":
        return cls(
            current_level=data.get("nivel_actual") or "FREE",
            next_level=data.get("siguiente_nivel"),
            payments_in_level=_int(data, "pagos_en_nivel"),
            payments_to_next=_int(data, "pagos_hasta_siguiente"),
            max_sessions=_int(data, "sesiones_maximas"),
            max_minutes=_int(data, "minutos_maximos"),
            max_unpaid_documents=_int(data, "max_docs_sin_pagar"),
            document_price=float(data.get("precio_documento") or 0),
        )

    @property
    def info(self) -> TierInfo:
        return TIER_LEVELS.get(self.current_level, TIER_LEVELS["FREE"])

    @property
    def progress(self) -> float:
        """Progress toward the next level; top level reads as complete."""
        if self.payments_to_next <= 0:
            return 100.0
        return percentage(self.payments_in_level, self.payments_to_next)


class UsageSnapshotReader(Generic[T]):
    """Polls a snapshot endpoint and exposes ``snapshot``/``loading``/``error``.

    A failed fetch sets ``error`` but keeps the last good snapshot; the next
    tick retries. ``stop()`` must be called on teardown.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[T]],
        poll_interval: float,
        error_message: str = USAGE_ERROR,
    ):
        if poll_interval <= 0:
            raise ValueError("poll_interval must be > 0")
        self._fetch = fetch
        self.poll_interval = poll_interval
        self.error_message = error_message
        self.snapshot: T | None = None
        self.loading = False
        self.error: str | None = None
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def refresh(self) -> Outcome[T]:
        self.loading = True
        try:
            outcome = await attempt(self._fetch(), ApiError, *MALFORMED_BODY_ERRORS)
        finally:
            self.loading = False
        if outcome.ok:
            self.snapshot = outcome.value
            self.error = None
        else:
            self.error = self.error_message
        return outcome.log_if_failed(logger, "Usage poll")

    def start(self) -> None:
        """Fetch now, then every ``poll_interval`` seconds. No-op if running."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._poll())

    def stop(self) -> None:
        """Cancel the poll timer. Idempotent."""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _poll(self) -> None:
        while True:
            await self.refresh()
            await asyncio.sleep(self.poll_interval)


def daily_usage_reader(client: ApiClient, poll_interval: float = 30) -> UsageSnapshotReader[UsageSnapshot]:
    async def fetch() -> UsageSnapshot:
        return decode(UsageSnapshot.from_dict, await client.get("/sesiones/uso-diario"))

    return UsageSnapshotReader(fetch, poll_interval, USAGE_ERROR)


def tier_reader(client: ApiClient, poll_interval: float = 10) -> UsageSnapshotReader[TierSnapshot]:
    async def fetch() -> TierSnapshot:
        return decode(TierSnapshot.from_dict, await client.get("/usuarios/mi-nivel"))

    return UsageSnapshotReader(fetch, poll_interval, TIER_ERROR)
