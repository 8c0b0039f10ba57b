"""Session lifecycle state machine for the avatar intake flow."""

from __future__ import annotations

from enum import Enum, auto
import logging


class SessionPhase(Enum):
    PRE_CALL = auto()
    IN_SESSION = auto()
    PROCESSING = auto()
    REVIEW = auto()


class SessionEvent(Enum):
    START = auto()
    END = auto()
    PROCESS_DONE = auto()
    PROCESS_FAILED = auto()
    ABANDON = auto()
    RESET = auto()


_TRANSITIONS = {
    SessionPhase.PRE_CALL: {
        SessionEvent.START: SessionPhase.IN_SESSION,
    },
    SessionPhase.IN_SESSION: {
        SessionEvent.END: SessionPhase.PROCESSING,
        SessionEvent.ABANDON: SessionPhase.PRE_CALL,
    },
    SessionPhase.PROCESSING: {
        SessionEvent.PROCESS_DONE: SessionPhase.REVIEW,
        SessionEvent.PROCESS_FAILED: SessionPhase.IN_SESSION,
    },
    SessionPhase.REVIEW: {},
}


class SessionStateMachine:
    def __init__(self):
        self.phase = SessionPhase.PRE_CALL
        self.history: list[SessionPhase] = [self.phase]

    def can(self, event: SessionEvent) -> bool:
        return event is SessionEvent.RESET or event in _TRANSITIONS.get(self.phase, {})

    def transition(self, event: SessionEvent) -> SessionPhase:
        if event is SessionEvent.RESET:
            next_phase = SessionPhase.PRE_CALL
        else:
            next_phase = _TRANSITIONS.get(self.phase, {}).get(event, self.phase)
            if event not in _TRANSITIONS.get(self.phase, {}):
                logging.getLogger(__name__).warning(
                    "Invalid state transition: %s --%s--> %s", self.phase, event, next_phase
                )
                return self.phase
        self.phase = next_phase
        self.history.append(next_phase)
        return self.phase
