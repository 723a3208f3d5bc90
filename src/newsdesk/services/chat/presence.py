"""Presence / typing signal.

A boolean busy flag owned by whichever request acquired it last. Only the
owner can clear it, so a superseded round trip that finishes late never
hides the indicator of the request that replaced it.
"""
from typing import Callable, List, Optional

from newsdesk.core.logging import logger

PresenceListener = Callable[[bool], None]


class PresenceSignal:
    """Busy indicator for the assistant surface."""

    def __init__(self):
        self._busy = False
        self._owner: Optional[int] = None
        self._listeners: List[PresenceListener] = []

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def owner(self) -> Optional[int]:
        """Request id that last turned the indicator on."""
        return self._owner

    def subscribe(self, listener: PresenceListener) -> None:
        """Register a callback invoked with the new busy value on every change."""
        self._listeners.append(listener)

    def acquire(self, request_id: int) -> None:
        """Turn the indicator on for ``request_id``."""
        self._owner = request_id
        if not self._busy:
            self._busy = True
            self._notify()

    def release(self, request_id: int) -> bool:
        """
        Turn the indicator off if ``request_id`` still owns it.

        Returns:
            True if the indicator was cleared
        """
        if self._owner != request_id:
            logger.debug(f"[Presence] Ignoring release from request {request_id} (owner {self._owner})")
            return False
        self._owner = None
        if self._busy:
            self._busy = False
            self._notify()
        return True

    def reset(self) -> None:
        """Drop ownership and clear the indicator (session close)."""
        self._owner = None
        if self._busy:
            self._busy = False
            self._notify()

    def _notify(self) -> None:
        for listener in self._listeners:
            try:
                listener(self._busy)
            except Exception as e:
                logger.error(f"[Presence] Listener {getattr(listener, '__name__', listener)} failed: {e}")
