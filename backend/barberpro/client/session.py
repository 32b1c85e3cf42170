# Overview: Client-side session credentials and the boundary-change notifier.

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

SessionListener = Callable[["SessionCredentials | None"], Awaitable[None]]


@dataclass(frozen=True)
class SessionCredentials:
    """Who is signed in on this device, as returned by the login endpoint."""
    tenant_id: str
    token: str
    staff_id: str | None = None
    role: str | None = None

    @classmethod
    def from_login(cls, payload: dict) -> "SessionCredentials":
        return cls(
            tenant_id=payload["business_id"],
            token=payload["token"],
            staff_id=(payload.get("user") or {}).get("id"),
            role=payload.get("role"),
        )


class SessionProvider:
    """
    Holds the current credentials and announces session boundaries.

    Listeners are awaited in subscription order on every begin/end, so by
    the time begin() returns the data layer has already switched tenants.
    """

    def __init__(self, credentials: SessionCredentials | None = None):
        self._current = credentials
        self._listeners: list[SessionListener] = []

    @property
    def current(self) -> SessionCredentials | None:
        return self._current

    @property
    def tenant_id(self) -> str | None:
        return self._current.tenant_id if self._current else None

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def begin(self, credentials: SessionCredentials) -> None:
        self._current = credentials
        logger.info("Session started for business %s", credentials.tenant_id)
        await self._notify()

    async def end(self) -> None:
        if self._current is None:
            return
        logger.info("Session ended for business %s", self._current.tenant_id)
        self._current = None
        await self._notify()

    async def _notify(self) -> None:
        for listener in list(self._listeners):
            await listener(self._current)
