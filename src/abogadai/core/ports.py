"""Core ports (interfaces) for the session lifecycle.

These protocols define the boundaries between the core orchestration and
the backend/front-end adapters. Every method may raise ``ApiError``.
"""

from __future__ import annotations

from typing import Protocol, TYPE_CHECKING, runtime_checkable

if TYPE_CHECKING:
    from .models import Case, CriticalFieldsStatus, Message, RoomCredentials


@runtime_checkable
class SessionsApi(Protocol):
    """Avatar session endpoints (``/sesiones``)."""

    async def validate_limit(self) -> dict:
        """Ask whether a new session may start today; returns the raw body."""

    async def start(self) -> int:
        """Create the case backing a new session; returns its id."""

    async def connect(self, case_id: int) -> "RoomCredentials":
        """Obtain real-time room credentials for an existing case."""

    async def finish(self, case_id: int) -> None:
        """Tell the backend the session ended."""


@runtime_checkable
class CasesApi(Protocol):
    """Case endpoints used during processing and review."""

    async def process_transcription(self, case_id: int) -> "Case":
        """Run AI extraction over the session transcript."""

    async def messages(self, case_id: int) -> list["Message"]:
        """Conversation turns, in order."""

    async def critical_fields(self, case_id: int) -> "CriticalFieldsStatus":
        """Server judgment on whether the document can be generated."""

    async def update(self, case_id: int, fields: dict) -> "Case":
        """Persist edited fields."""

    async def generate(self, case_id: int) -> "Case":
        """Generate the legal document."""

    async def delete(self, case_id: int) -> None:
        """Remove the case server-side."""


@runtime_checkable
class Navigator(Protocol):
    """Moves the front-end to another screen."""

    def navigate(self, destination: str) -> None:
        """Show ``destination`` (an app route such as ``/app/casos``)."""
