"""Core orchestration for an avatar intake session.

Keeps the start -> talk -> process -> review pipeline in one place,
decoupled from the HTTP backend and the front-end via ports.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..api_client import ApiError
from .cancel_token import CancelToken
from .debounce import Debouncer
from .models import Case, Message
from .outcome import Outcome, attempt
from .ports import CasesApi, Navigator, SessionsApi
from .revision import GENERATION_BLOCKED_MESSAGE, ConfirmationSummary, RevisionStep
from .state_machine import SessionEvent, SessionPhase, SessionStateMachine

logger = logging.getLogger(__name__)

START_ERROR = "Error al iniciar sesión. Por favor intenta de nuevo."
END_ERROR = "Error procesando la conversación."
CASES_ROUTE = "/app/casos"


@dataclass
class SessionLifecycleState:
    """Everything one session screen shows. ``error`` wins over ``phase``."""

    phase: SessionPhase = SessionPhase.PRE_CALL
    case_id: int | None = None
    room_token: str | None = None
    room_url: str | None = None
    case_data: Case | None = None
    error: str | None = None
    conversation: list[Message] = field(default_factory=list)


class SessionLifecycleController:
    """Owns the lifecycle of a single session screen."""

    def __init__(
        self,
        sessions: SessionsApi,
        cases: CasesApi,
        navigator: Navigator | None = None,
        autosave_delay: float = 3.0,
    ):
        self._sessions = sessions
        self._cases = cases
        self._navigator = navigator
        self._autosave_delay = autosave_delay
        self._machine = SessionStateMachine()
        self._token = CancelToken()
        self._busy = False
        self._revision: RevisionStep | None = None
        self._autosave: Debouncer | None = None
        self._pending_confirmation: ConfirmationSummary | None = None
        self.state = SessionLifecycleState()
        self.last_autosave: Outcome[Case] | None = None

    @property
    def phase(self) -> SessionPhase:
        return self._machine.phase

    @property
    def history(self) -> list[SessionPhase]:
        return list(self._machine.history)

    @property
    def revision(self) -> RevisionStep | None:
        return self._revision

    @property
    def pending_confirmation(self) -> ConfirmationSummary | None:
        return self._pending_confirmation

    def _enter(self, event: SessionEvent) -> None:
        self.state.phase = self._machine.transition(event)

    def _allowed(self, event: SessionEvent) -> bool:
        if self._busy:
            logger.warning("Ignoring %s: another transition is in flight", event.name)
            return False
        if not self._machine.can(event):
            logger.warning("Cannot %s from %s", event.name, self.phase.name)
            return False
        return True

    async def start_session(self) -> bool:
        """Create the case, then fetch room credentials for it."""
        if not self._allowed(SessionEvent.START):
            return False

        token = self._token
        self._busy = True
        try:
            case_id = await self._sessions.start()
            logger.info("Case %s created", case_id)
            credentials = await self._sessions.connect(case_id)
        except ApiError as exc:
            if not token.cancelled:
                logger.error("Starting session failed: %s", exc)
                self.state.error = START_ERROR
            return False
        finally:
            self._busy = False

        if token.cancelled:
            return False

        self.state.case_id = case_id
        self.state.room_token = credentials.access_token
        self.state.room_url = credentials.url
        self.state.error = None
        self._enter(SessionEvent.START)
        return True

    async def end_session(self) -> bool:
        """Finish the call, run transcript extraction, load the conversation."""
        if not self._allowed(SessionEvent.END):
            return False

        token = self._token
        case_id = self.state.case_id
        self.state.error = None
        self._enter(SessionEvent.END)
        self._busy = True
        try:
            await self._sessions.finish(case_id)
            case = await self._cases.process_transcription(case_id)
            messages = await self._cases.messages(case_id)
        except ApiError as exc:
            if not token.cancelled:
                # The backend already marked the session ended; nothing is rolled back.
                logger.error("Processing session for case %s failed: %s", case_id, exc)
                self._enter(SessionEvent.PROCESS_FAILED)
                self.state.error = END_ERROR
            return False
        finally:
            self._busy = False

        if token.cancelled:
            return False

        self.state.conversation = list(messages)
        self.state.case_data = case
        self._revision = RevisionStep(self._cases, case)
        self._autosave = Debouncer(self._save, self._autosave_delay)
        self._enter(SessionEvent.PROCESS_DONE)
        await self._revision.refresh_validation()
        return True

    async def abandon(self, destination: str = CASES_ROUTE) -> Outcome[None]:
        """Leave mid-session: delete the case (best effort) and navigate away."""
        if self.phase is not SessionPhase.IN_SESSION:
            logger.warning("Abandon ignored in phase %s", self.phase)
            return Outcome(error=RuntimeError(f"cannot abandon from {self.phase.name}"))

        case_id = self.state.case_id
        self._machine.transition(SessionEvent.ABANDON)
        outcome = await attempt(self._cases.delete(case_id))
        outcome.log_if_failed(logger, f"Deleting abandoned case {case_id}")
        self.reset()
        if self._navigator is not None:
            self._navigator.navigate(destination)
        return outcome

    def edit(self, **changes) -> None:
        """Apply form edits and restart the autosave timer."""
        if self.phase is not SessionPhase.REVIEW or self._revision is None:
            logger.warning("Edit ignored in phase %s", self.phase)
            return
        self._revision.update_form(changes)
        self._autosave.schedule()

    async def flush_autosave(self) -> None:
        if self._autosave is not None:
            await self._autosave.flush()

    async def _save(self) -> None:
        token = self._token
        revision = self._revision
        if revision is None:
            return
        outcome = await revision.save()
        if token.cancelled:
            logger.debug("Dropping autosave result for case %s after reset", revision.case.id)
            return
        self.last_autosave = outcome
        if outcome.ok:
            self.state.case_data = revision.case

    def request_generation(self) -> ConfirmationSummary | None:
        """Guard + confirmation step. Returns the data to confirm, or None."""
        if self.phase is not SessionPhase.REVIEW or self._revision is None:
            logger.warning("Generation requested in phase %s", self.phase)
            return None
        if not self._revision.can_generate():
            self._revision.error = GENERATION_BLOCKED_MESSAGE
            return None
        self._pending_confirmation = self._revision.confirmation_summary()
        return self._pending_confirmation

    def cancel_generation(self) -> None:
        self._pending_confirmation = None

    async def confirm_generation(self) -> bool:
        """Generate after the user confirmed the summary."""
        if self._pending_confirmation is None or self._revision is None:
            logger.warning("confirm_generation() without a pending confirmation")
            return False
        self._pending_confirmation = None

        # Unsaved edits go to the server first so the document matches the form.
        await self.flush_autosave()
        if not self._revision.can_generate():
            self._revision.error = GENERATION_BLOCKED_MESSAGE
            return False

        outcome = await self._revision.generate()
        if not outcome.ok:
            return False

        self.state.case_data = outcome.value
        if self._navigator is not None:
            self._navigator.navigate(f"{CASES_ROUTE}/{outcome.value.id}")
        return True

    def reset(self) -> None:
        """Discard everything and return to PRE_CALL."""
        self._token.cancel()
        self._token = CancelToken()
        if self._autosave is not None:
            self._autosave.cancel()
        self._autosave = None
        self._revision = None
        self._pending_confirmation = None
        if self.phase is not SessionPhase.PRE_CALL:
            self._machine.transition(SessionEvent.RESET)
        self.state = SessionLifecycleState()

    async def close(self) -> None:
        """Screen teardown: stop the autosave timer and let a running save finish."""
        if self._autosave is not None:
            self._autosave.cancel()
            await self._autosave.wait_idle()
