"""Configuration bundles.

A bundle is one named tenant policy: its compiled ignore and clean
filter chains, the redirect-following flag passed to the harvesting
engine, and the datastore its results are persisted to.
"""

import logging
from typing import Iterable, Optional

from lectiod.core.config import ConfigPathProvider, load_bundle_settings
from lectiod.core.models import (
    BundleSettings,
    BundleSummary,
    HarvestDirectives,
    StorageSettings,
)
from lectiod.policy.filters import CleanFilterChain, IgnoreFilterChain
from lectiod.storage.datastore import Datastore


logger = logging.getLogger(__name__)


class ConfigurationBundle:
    """Named, immutable-after-construction harvest policy.

    Construction compiles both filter chains and opens the storage target.
    Problems (bad regex, unreadable config file) are appended to errors
    and never abort construction.
    """

    def __init__(
        self,
        name: str,
        harvest: HarvestDirectives,
        storage: StorageSettings,
        *,
        errors: Iterable[str] = (),
    ):
        """Build a bundle.

        Args:
            name: Unique name within a registry
            harvest: Authored harvest directives
            storage: Storage target descriptor
            errors: Configuration errors already found while loading
        """
        self.name = name
        self.harvest = harvest
        self.storage_target = storage
        self._errors: list[str] = []
        for message in errors:
            self.record_error(message)

        self.ignore_chain = IgnoreFilterChain.build(harvest.ignore_urls_regexprs, self.record_error)
        self.clean_chain = CleanFilterChain.build(
            harvest.remove_params_from_urls_regexprs, self.record_error
        )
        self.store = Datastore.open(storage)

        if self._errors:
            logger.warning(f"Bundle '{name}' built with {len(self._errors)} configuration error(s)")

    @classmethod
    def from_settings(cls, settings: BundleSettings, *, errors: Iterable[str] = ()) -> "ConfigurationBundle":
        return cls(settings.name, settings.harvest, settings.storage, errors=errors)

    @classmethod
    def load(
        cls,
        name: str,
        provider: Optional[ConfigPathProvider] = None,
        *,
        fallback: Optional[BundleSettings] = None,
    ) -> "ConfigurationBundle":
        """Build a bundle from its external configuration sources.

        Args:
            name: Bundle name, also the configuration file stem
            provider: Yields configuration search locations
            fallback: Settings used when no usable file exists

        Returns:
            Fully constructed bundle
        """
        settings, errors = load_bundle_settings(name, provider, fallback=fallback)
        return cls.from_settings(settings, errors=errors)

    def record_error(self, message: str) -> None:
        """Append a configuration error. Errors are never cleared."""
        self._errors.append(message)

    @property
    def errors(self) -> tuple[str, ...]:
        return tuple(self._errors)

    @property
    def follow_html_redirects(self) -> bool:
        return self.harvest.follow_html_redirects

    def summary(self) -> BundleSummary:
        """Read-only view returned to API consumers."""
        return BundleSummary(
            name=self.name,
            ignore_patterns=tuple(self.harvest.ignore_urls_regexprs),
            clean_patterns=tuple(self.harvest.remove_params_from_urls_regexprs),
            follow_html_redirects=self.follow_html_redirects,
            storage=self.storage_target,
            storage_valid=self.store.is_valid,
            errors=self.errors,
        )

    def close(self) -> None:
        self.store.close()

    def __repr__(self) -> str:
        return f"ConfigurationBundle(name={self.name!r}, errors={len(self._errors)})"
