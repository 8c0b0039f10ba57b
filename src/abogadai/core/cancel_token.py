"""Cancellation token for in-flight session transitions."""

from __future__ import annotations


class CancelToken:
    """Marks async work started before a reset/abandon as stale.

    A transition takes the current token before awaiting the network and
    checks ``cancelled`` afterwards; ``reset()`` on the owner cancels the old
    token and hands out a fresh one.
    """

    def __init__(self):
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
