"""Authentication state consumed by guards.

Guards never read an ambient "current user". They receive an
``AuthSnapshot``: an immutable value that is either LOADING (the principal
is still being resolved) or RESOLVED (with a principal, or with none for a
visitor). Loading gates every guard decision.

``AuthSession`` is the scoped provider that owns the current snapshot for
one session lifetime. It is created at session start, replaced wholesale on
login/logout/refresh, and torn down at logout:

    with AuthSession() as session:
        session.subscribe(router.on_auth_change)
        session.resolve(principal)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from src.access.models.principal import Principal
from src.lib.logging_utils import user_id_prefix

logger = logging.getLogger(__name__)


class AuthStatus(StrEnum):
    """Whether the principal is known yet."""

    LOADING = "loading"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class AuthSnapshot:
    """Immutable view of authentication state for one evaluation.

    Attributes:
        status: LOADING until the auth layer has answered
        principal: The principal once RESOLVED, None for visitors
    """

    status: AuthStatus
    principal: Principal | None = None

    def __post_init__(self) -> None:
        if self.status is AuthStatus.LOADING and self.principal is not None:
            raise ValueError("A loading snapshot cannot carry a principal")

    @classmethod
    def loading(cls) -> AuthSnapshot:
        return cls(AuthStatus.LOADING)

    @classmethod
    def resolved(cls, principal: Principal | None) -> AuthSnapshot:
        return cls(AuthStatus.RESOLVED, principal)

    @classmethod
    def coerce(cls, subject: AuthSnapshot | Principal | None) -> AuthSnapshot:
        """Accept a snapshot, a bare principal, or None (a resolved visitor)."""
        if isinstance(subject, AuthSnapshot):
            return subject
        return cls.resolved(subject)

    @property
    def is_loading(self) -> bool:
        return self.status is AuthStatus.LOADING

    @property
    def is_authenticated(self) -> bool:
        return self.status is AuthStatus.RESOLVED and self.principal is not None

    @property
    def role_id(self) -> int | str | None:
        return self.principal.role_id if self.principal is not None else None

    @property
    def user_id(self) -> str | None:
        return self.principal.user_id if self.principal is not None else None


SnapshotListener = Callable[[AuthSnapshot], object]


class AuthSession:
    """Scoped owner of the current AuthSnapshot.

    Listeners are called synchronously, in subscription order, each time the
    snapshot is replaced. Replacing a snapshot with an equal one is a no-op.
    """

    def __init__(self, initial: AuthSnapshot | None = None) -> None:
        self._snapshot = initial or AuthSnapshot.loading()
        self._listeners: list[SnapshotListener] = []
        self._closed = False

    def __enter__(self) -> AuthSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def snapshot(self) -> AuthSnapshot:
        return self._snapshot

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a listener; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def begin_loading(self) -> None:
        """Mark the principal as being (re)resolved, e.g. during a refresh."""
        self._replace(AuthSnapshot.loading())

    def resolve(self, principal: Principal | None) -> None:
        """Publish the resolved principal (None for a visitor)."""
        self._replace(AuthSnapshot.resolved(principal))

    def logout(self) -> None:
        """Drop the principal; the session stays usable for the next login."""
        self._replace(AuthSnapshot.resolved(None))

    def close(self) -> None:
        """Tear the session down: log out, then detach every listener."""
        if self._closed:
            return
        self.logout()
        self._listeners.clear()
        self._closed = True

    def _replace(self, snapshot: AuthSnapshot) -> None:
        if self._closed:
            raise RuntimeError("AuthSession is closed")
        if snapshot == self._snapshot:
            return
        self._snapshot = snapshot
        logger.debug(
            "Auth snapshot replaced",
            extra={
                "auth_status": snapshot.status.value,
                "user_id_prefix": user_id_prefix(snapshot.user_id),
            },
        )
        for listener in list(self._listeners):
            listener(snapshot)
