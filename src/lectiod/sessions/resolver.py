"""Session resolution strategies.

A session only selects which configuration bundle governs a request.
Resolvers are pluggable so a real session store can replace the
simulated one without touching the classification pipeline.
"""

from dataclasses import dataclass
from typing import Mapping, Protocol

from lectiod.core.constants import DEFAULT_BUNDLE_NAME, SIMULATED_SESSION_ID
from lectiod.core.exceptions import SessionNotFoundError, UnsupportedOperationError


@dataclass(frozen=True)
class Session:
    """Opaque session id bound to a bundle name."""
    session_id: str
    bundle_name: str
    privileged: bool = False


class SessionResolver(Protocol):
    """Session operations required by the service."""

    def resolve(self, session_id: str) -> Session:
        ...

    def establish(self, bundle_name: str) -> Session:
        ...

    def destroy(self, session_id: str) -> bool:
        ...

    def refresh(self, session_id: str) -> Session:
        ...

    def destroy_all(self) -> int:
        ...


class MappedSessionResolver:
    """Resolves sessions from a fixed mapping.

    Several sessions may be bound to the same bundle. Lifecycle mutations
    are not implemented.
    """

    def __init__(self, sessions: Mapping[str, Session]):
        self._sessions = dict(sessions)

    def resolve(self, session_id: str) -> Session:
        """Return the session for session_id.

        Raises:
            SessionNotFoundError: If session_id is unknown
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(
                f"Session '{session_id}' is invalid, {len(self._sessions)} available"
            )
        return session

    def establish(self, bundle_name: str) -> Session:
        raise UnsupportedOperationError("Mutation establishSession not implemented yet")

    def destroy(self, session_id: str) -> bool:
        raise UnsupportedOperationError("Mutation destroySession not implemented yet")

    def refresh(self, session_id: str) -> Session:
        raise UnsupportedOperationError("Mutation refreshSession not implemented yet")

    def destroy_all(self) -> int:
        raise UnsupportedOperationError("Mutation destroyAllSessions not implemented yet")

    def __len__(self) -> int:
        return len(self._sessions)


class SimulatedSessionResolver(MappedSessionResolver):
    """Single static, privileged session bound to one bundle."""

    def __init__(
        self,
        bundle_name: str = DEFAULT_BUNDLE_NAME,
        session_id: str = SIMULATED_SESSION_ID,
    ):
        self.session = Session(session_id=session_id, bundle_name=bundle_name, privileged=True)
        super().__init__({session_id: self.session})

    def establish(self, bundle_name: str) -> Session:
        """Return the simulated session if it is bound to bundle_name.

        Raises:
            UnsupportedOperationError: For any other bundle
        """
        if bundle_name != self.session.bundle_name:
            raise UnsupportedOperationError(
                f"Simulated sessions are bound to bundle '{self.session.bundle_name}', "
                f"cannot establish a session for '{bundle_name}'"
            )
        return self.session
