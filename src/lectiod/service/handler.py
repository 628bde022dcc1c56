"""Service handler exposing lectiod operations to transports.

ServiceHandler is the single top-level object owning the configuration
registry, the session resolver, the classification pipeline and the
result writer. Transports (CLI, API servers) call its async operations
and map the lectiod exceptions to their own error representations.
"""

import logging
from typing import Optional

from lectiod.bundles.bundle import ConfigurationBundle
from lectiod.bundles.registry import ConfigurationRegistry
from lectiod.classifier.pipeline import ClassificationPipeline
from lectiod.core.config import ConfigPathProvider, default_config_paths
from lectiod.core.constants import (
    DEFAULT_BUNDLE_NAME,
    DEFAULTS,
    StorageDestinationCollection,
)
from lectiod.core.exceptions import AuthorizationError, UnknownDestinationError
from lectiod.core.models import (
    AuthorizationInput,
    BundleSettings,
    BundleSummary,
    HarvestedResourceSet,
    PrivilegedAuthorizationInput,
    StorageDestination,
)
from lectiod.harvester.base import HarvestingEngine
from lectiod.sessions.resolver import Session, SessionResolver, SimulatedSessionResolver
from lectiod.storage.results import ResultWriter


logger = logging.getLogger(__name__)


class ServiceHandler:
    """Entry point for every lectiod operation.

    Example:
        >>> handler = ServiceHandler.create(OfflineHarvester())
        >>> auth = AuthorizationInput(session_id="SIMULATED")
        >>> result = await handler.classify_urls_in_text(auth, "see https://example.com")
    """

    def __init__(
        self,
        registry: ConfigurationRegistry,
        engine: HarvestingEngine,
        sessions: Optional[SessionResolver] = None,
        *,
        config_path_provider: Optional[ConfigPathProvider] = None,
        harvest_timeout: Optional[float] = DEFAULTS["harvest_timeout"],
        result_writer: Optional[ResultWriter] = None,
    ):
        """Initialize service handler.

        Args:
            registry: Configuration registry with its default bundle
            engine: Harvesting engine used by the classification pipeline
            sessions: Session resolver (simulated session bound to the
                default bundle if None)
            config_path_provider: Search locations for load_bundle
            harvest_timeout: Seconds allowed per engine call, None for no limit
            result_writer: Persists saved results (creates default if None)
        """
        self.registry = registry
        if sessions is None:
            sessions = SimulatedSessionResolver(registry.default_name)
        self.sessions = sessions
        self.config_path_provider = config_path_provider or default_config_paths
        self.pipeline = ClassificationPipeline(engine, harvest_timeout=harvest_timeout)
        self.result_writer = result_writer or ResultWriter()

    @classmethod
    def create(
        cls,
        engine: HarvestingEngine,
        config_path_provider: Optional[ConfigPathProvider] = None,
        *,
        default_settings: Optional[BundleSettings] = None,
        sessions: Optional[SessionResolver] = None,
        harvest_timeout: Optional[float] = DEFAULTS["harvest_timeout"],
    ) -> "ServiceHandler":
        """Bring up a service with its default bundle.

        The default bundle is loaded from the configuration sources, falling
        back to default_settings (or the compiled-in defaults).

        Args:
            engine: Harvesting engine
            config_path_provider: Yields configuration search locations
            default_settings: Fallback settings for the default bundle
            sessions: Session resolver
            harvest_timeout: Seconds allowed per engine call

        Returns:
            Ready-to-use ServiceHandler
        """
        default_bundle = ConfigurationBundle.load(
            DEFAULT_BUNDLE_NAME,
            config_path_provider,
            fallback=default_settings,
        )
        registry = ConfigurationRegistry(default_bundle)
        return cls(
            registry,
            engine,
            sessions,
            config_path_provider=config_path_provider,
            harvest_timeout=harvest_timeout,
        )

    # ========================================================================
    # Bundle Management
    # ========================================================================

    def load_bundle(
        self,
        name: str,
        *,
        fallback: Optional[BundleSettings] = None,
    ) -> ConfigurationBundle:
        """Build a bundle from configuration sources and register it.

        The bundle becomes visible to requests only after it is fully built.
        """
        bundle = ConfigurationBundle.load(name, self.config_path_provider, fallback=fallback)
        self.registry.register(bundle)
        return bundle

    def close(self) -> None:
        self.registry.close()

    # ========================================================================
    # Capability Checks
    # ========================================================================

    def validate_authorization(self, authorization: AuthorizationInput) -> Session:
        """Resolve the caller's session.

        Raises:
            AuthorizationError: If no session id was presented
            SessionNotFoundError: If the session id is unknown
        """
        if not authorization.session_id:
            raise AuthorizationError("Authorization requires a session id")
        return self.sessions.resolve(authorization.session_id)

    def validate_privileged_authorization(
        self,
        authorization: PrivilegedAuthorizationInput,
    ) -> Session:
        """Resolve the caller's session and require privileges.

        Raises:
            AuthorizationError: If no session id was presented or the
                session is not privileged
            SessionNotFoundError: If the session id is unknown
        """
        if not authorization.session_id:
            raise AuthorizationError("Privileged authorization requires a session id")
        session = self.sessions.resolve(authorization.session_id)
        if not session.privileged:
            raise AuthorizationError(
                f"Session '{session.session_id}' is not authorized for privileged operations"
            )
        return session

    # ========================================================================
    # Queries
    # ========================================================================

    async def list_configuration_bundles(
        self,
        authorization: PrivilegedAuthorizationInput,
    ) -> list[BundleSummary]:
        """Summaries of every registered bundle, in no particular order."""
        self.validate_privileged_authorization(authorization)
        return [bundle.summary() for bundle in self.registry.list()]

    async def get_configuration_bundle(
        self,
        authorization: PrivilegedAuthorizationInput,
        name: str,
    ) -> Optional[BundleSummary]:
        """Summary of the named bundle, or None if it does not exist."""
        self.validate_privileged_authorization(authorization)
        bundle = self.registry.get(name)
        return bundle.summary() if bundle is not None else None

    async def classify_urls_in_text(
        self,
        authorization: AuthorizationInput,
        text: str,
    ) -> HarvestedResourceSet:
        """Classify the URLs in text under the caller's bundle.

        Raises:
            AuthorizationError: If the capability check fails
            SessionNotFoundError: If the session id is unknown
            BundleNotFoundError: If the session's bundle is not registered
            HarvestTimeoutError: If the engine exceeds the timeout
        """
        session = self.validate_authorization(authorization)
        bundle = self.registry.resolve(session.bundle_name)
        return await self.pipeline.run(bundle, text)

    # ========================================================================
    # Mutations
    # ========================================================================

    async def save_classified_urls(
        self,
        authorization: AuthorizationInput,
        destination: StorageDestination,
        text: str,
    ) -> HarvestedResourceSet:
        """Classify text and persist the result against destination.

        Raises:
            UnknownDestinationError: If destination.collection is not a
                StorageDestinationCollection value
            StorageError: If the bundle's datastore rejects the write
            (plus everything classify_urls_in_text raises)
        """
        try:
            collection = StorageDestinationCollection(destination.collection)
        except ValueError:
            logger.warning(f"Unknown destination collection '{destination.collection}'")
            raise UnknownDestinationError(
                f"Unknown destination.collection: '{destination.collection}'"
            ) from None

        session = self.validate_authorization(authorization)
        bundle = self.registry.resolve(session.bundle_name)
        resources = await self.pipeline.run(bundle, text)
        self.result_writer.write(bundle, session, collection, resources)
        return resources

    async def establish_session(
        self,
        authorization: PrivilegedAuthorizationInput,
        bundle_name: str,
    ) -> Session:
        """Establish a session bound to bundle_name.

        Raises:
            BundleNotFoundError: If bundle_name is not registered
            UnsupportedOperationError: If the resolver cannot establish it
        """
        self.validate_privileged_authorization(authorization)
        self.registry.resolve(bundle_name)
        return self.sessions.establish(bundle_name)

    async def destroy_session(
        self,
        privileged: PrivilegedAuthorizationInput,
        authorization: AuthorizationInput,
    ) -> bool:
        self.validate_privileged_authorization(privileged)
        session = self.validate_authorization(authorization)
        return self.sessions.destroy(session.session_id)

    async def refresh_session(
        self,
        privileged: PrivilegedAuthorizationInput,
        authorization: AuthorizationInput,
    ) -> Session:
        self.validate_privileged_authorization(privileged)
        session = self.validate_authorization(authorization)
        return self.sessions.refresh(session.session_id)

    async def destroy_all_sessions(self, authorization: PrivilegedAuthorizationInput) -> int:
        self.validate_privileged_authorization(authorization)
        return self.sessions.destroy_all()
