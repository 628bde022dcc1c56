"""Constants used throughout lectiod.

This module contains enums, default values, and static configurations
to ensure consistency across the application.
"""

from enum import Enum


class FilterKind(Enum):
    """Policy kind of a filter chain."""
    IGNORE = "ignore"
    CLEAN = "clean"


class StorageType(Enum):
    """Backends a bundle storage target can select."""
    FILE_SYSTEM = "filesys"
    MEMORY = "memory"


class StorageDestinationCollection(Enum):
    """Collections a classified result can be saved against."""
    SESSION_PRINCIPAL = "SESSION_PRINCIPAL"
    SESSION_TENANT = "SESSION_TENANT"


class ResourceCategory(Enum):
    """Terminal classification categories."""
    INVALID = "invalid"
    IGNORED = "ignored"
    HARVESTED = "harvested"


DEFAULT_BUNDLE_NAME = "DEFAULT"
SIMULATED_SESSION_ID = "SIMULATED"

# Environment variables override bundle settings, e.g.
# LECTIOD_CONF_HARVEST_FOLLOW_HTML_REDIRECTS=false
ENV_PREFIX = "LECTIOD_CONF"

CONFIG_FILE_EXTENSIONS = (".yaml", ".yml", ".json")


# Built-in harvest policy
DEFAULT_IGNORE_PATTERNS = [
    r"^https://twitter.com/(.*?)/status/(.*)$",
    r"https://t.co",
]

DEFAULT_CLEAN_PATTERNS = [
    r"^utm_",
]


# Application-wide defaults
DEFAULTS = {
    "follow_html_redirects": True,
    "storage_type": StorageType.FILE_SYSTEM.value,
    "storage_base_path": "./tmp/lectiod_data",
    "harvest_timeout": 30.0,
}
