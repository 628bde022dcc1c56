class LectiodError(Exception):
    pass

class ConfigError(LectiodError):
    pass

class NotFoundError(LectiodError):
    pass

class BundleNotFoundError(NotFoundError):
    pass

class SessionNotFoundError(NotFoundError):
    pass

class AuthorizationError(LectiodError):
    """Capability check failed for a session-scoped or privileged operation."""
    pass

class UnsupportedOperationError(LectiodError):
    """Operation is part of the interface but not implemented yet."""
    pass

class UnknownDestinationError(LectiodError):
    pass

class StorageError(LectiodError):
    pass

class KeyNotFoundError(StorageError):
    pass

class HarvestError(LectiodError):
    pass

class HarvestTimeoutError(HarvestError):
    """Harvesting engine did not answer within the configured timeout."""
    pass
