"""Name-keyed registry of configuration bundles.

Readers never take a lock: registration builds a new mapping and swaps
the reference, so a bundle becomes visible only once it is fully built.
"""

import logging
import threading
from types import MappingProxyType
from typing import Mapping, Optional

from lectiod.bundles.bundle import ConfigurationBundle
from lectiod.core.exceptions import BundleNotFoundError


logger = logging.getLogger(__name__)


class ConfigurationRegistry:
    """Collection of bundles with exactly one default."""

    def __init__(self, default_bundle: ConfigurationBundle):
        """Initialize registry.

        Args:
            default_bundle: First bundle registered, designated default
        """
        self._write_lock = threading.Lock()
        self._default_name = default_bundle.name
        self._bundles: Mapping[str, ConfigurationBundle] = MappingProxyType(
            {default_bundle.name: default_bundle}
        )
        logger.info(f"Registered default bundle '{default_bundle.name}'")

    @property
    def default_name(self) -> str:
        return self._default_name

    @property
    def default(self) -> ConfigurationBundle:
        return self._bundles[self._default_name]

    def register(self, bundle: ConfigurationBundle) -> None:
        """Insert or overwrite a bundle by name."""
        with self._write_lock:
            bundles = dict(self._bundles)
            replaced = bundle.name in bundles
            bundles[bundle.name] = bundle
            self._bundles = MappingProxyType(bundles)
        logger.info(f"{'Replaced' if replaced else 'Registered'} bundle '{bundle.name}'")

    def get(self, name: str) -> Optional[ConfigurationBundle]:
        """Return the bundle or None if name is unknown."""
        return self._bundles.get(name)

    def resolve(self, name: str) -> ConfigurationBundle:
        """Return the bundle registered under name.

        Raises:
            BundleNotFoundError: If name is unknown
        """
        bundle = self._bundles.get(name)
        if bundle is None:
            available = ", ".join(sorted(self._bundles))
            raise BundleNotFoundError(
                f"Configuration bundle '{name}' not found. Available bundles: {available}"
            )
        return bundle

    def list(self) -> list[ConfigurationBundle]:
        """All registered bundles, in no particular order."""
        return list(self._bundles.values())

    def __contains__(self, name: object) -> bool:
        return name in self._bundles

    def __len__(self) -> int:
        return len(self._bundles)

    def close(self) -> None:
        """Close every bundle's datastore."""
        for bundle in self._bundles.values():
            bundle.close()
