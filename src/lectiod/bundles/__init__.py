"""Configuration bundles and the registry that owns them."""

from lectiod.bundles.bundle import ConfigurationBundle
from lectiod.bundles.registry import ConfigurationRegistry

__all__ = [
    "ConfigurationBundle",
    "ConfigurationRegistry",
]
