"""Session resolution: maps a session id to the bundle that governs it."""

from lectiod.sessions.resolver import (
    MappedSessionResolver,
    Session,
    SessionResolver,
    SimulatedSessionResolver,
)

__all__ = [
    "MappedSessionResolver",
    "Session",
    "SessionResolver",
    "SimulatedSessionResolver",
]
