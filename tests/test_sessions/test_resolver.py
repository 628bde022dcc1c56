"""Unit tests for session resolvers."""

import unittest

from lectiod.core.constants import DEFAULT_BUNDLE_NAME, SIMULATED_SESSION_ID
from lectiod.core.exceptions import SessionNotFoundError, UnsupportedOperationError
from lectiod.sessions.resolver import MappedSessionResolver, Session, SimulatedSessionResolver


class TestSimulatedSessionResolver(unittest.TestCase):
    """Test the simulated session."""

    def setUp(self):
        self.resolver = SimulatedSessionResolver()

    def test_resolves_simulated_session(self):
        session = self.resolver.resolve(SIMULATED_SESSION_ID)

        self.assertEqual(session.bundle_name, DEFAULT_BUNDLE_NAME)
        self.assertTrue(session.privileged)
        self.assertIs(session, self.resolver.session)

    def test_unknown_session(self):
        with self.assertRaises(SessionNotFoundError) as ctx:
            self.resolver.resolve("other")
        self.assertIn("other", str(ctx.exception))

    def test_establish_same_bundle(self):
        self.assertIs(self.resolver.establish(DEFAULT_BUNDLE_NAME), self.resolver.session)

    def test_establish_other_bundle_unsupported(self):
        with self.assertRaises(UnsupportedOperationError):
            self.resolver.establish("TENANT")

    def test_lifecycle_mutations_unsupported(self):
        with self.assertRaises(UnsupportedOperationError):
            self.resolver.destroy(SIMULATED_SESSION_ID)
        with self.assertRaises(UnsupportedOperationError):
            self.resolver.refresh(SIMULATED_SESSION_ID)
        with self.assertRaises(UnsupportedOperationError):
            self.resolver.destroy_all()

    def test_custom_binding(self):
        resolver = SimulatedSessionResolver("TENANT", session_id="s1")
        self.assertEqual(resolver.resolve("s1").bundle_name, "TENANT")


class TestMappedSessionResolver(unittest.TestCase):
    """Test mapping-backed resolution."""

    def test_many_sessions_share_a_bundle(self):
        resolver = MappedSessionResolver({
            "a": Session("a", "TENANT"),
            "b": Session("b", "TENANT"),
        })

        self.assertEqual(resolver.resolve("a").bundle_name, "TENANT")
        self.assertEqual(resolver.resolve("b").bundle_name, "TENANT")
        self.assertFalse(resolver.resolve("a").privileged)
        self.assertEqual(len(resolver), 2)

    def test_establish_unsupported(self):
        with self.assertRaises(UnsupportedOperationError):
            MappedSessionResolver({}).establish("TENANT")


if __name__ == "__main__":
    unittest.main()
