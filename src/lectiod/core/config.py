"""Configuration loader for lectiod.

This module locates and parses the YAML files that define configuration
bundles, applies environment overrides, and falls back to the compiled-in
default policy when no external configuration exists.

Loading never aborts: every problem is returned as a human-readable message
so the bundle can record it and keep serving with its fallback settings.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

import yaml

from lectiod.core.constants import (
    CONFIG_FILE_EXTENSIONS,
    DEFAULT_BUNDLE_NAME,
    DEFAULTS,
    ENV_PREFIX,
    StorageType,
)
from lectiod.core.exceptions import ConfigError
from lectiod.core.models import (
    BundleSettings,
    FileStorageSettings,
    HarvestDirectives,
    StorageSettings,
)


logger = logging.getLogger(__name__)

# Yields the directories searched for a bundle's configuration file.
ConfigPathProvider = Callable[[str], list[str]]


# ============================================================================
# Configuration Paths
# ============================================================================

def get_config_dir() -> Path:
    """Get the project configuration directory path.

    Returns:
        Path to configs directory (./configs relative to project root)
    """
    # core/ -> lectiod/ -> src/ -> root
    project_root = Path(__file__).parent.parent.parent.parent
    return project_root / "configs"


def default_config_paths(bundle_name: str) -> list[str]:
    """Default ConfigPathProvider.

    Args:
        bundle_name: Bundle being configured (unused, every bundle shares
            the same search locations)

    Returns:
        Search locations in priority order
    """
    candidates = [
        Path.cwd() / "configs",
        get_config_dir(),
        Path.home() / ".config" / "lectiod",
    ]
    paths: list[str] = []
    for candidate in candidates:
        text = str(candidate)
        if text not in paths:
            paths.append(text)
    return paths


def find_config_file(bundle_name: str, search_paths: list[str]) -> Optional[Path]:
    """Return the first `<bundle_name>.<ext>` found in search_paths."""
    for directory in search_paths:
        for ext in CONFIG_FILE_EXTENSIONS:
            path = Path(directory) / f"{bundle_name}{ext}"
            if path.is_file():
                return path
    return None


# ============================================================================
# Default Settings
# ============================================================================

def default_bundle_settings(
    name: str = DEFAULT_BUNDLE_NAME,
    *,
    storage_base_path: Optional[str] = None,
) -> BundleSettings:
    """Create the compiled-in default settings for a bundle.

    Args:
        name: Bundle name
        storage_base_path: Override for the filesystem storage location

    Returns:
        BundleSettings with the default harvest directives
    """
    base_path = storage_base_path or DEFAULTS["storage_base_path"]
    return BundleSettings(
        name=name,
        harvest=HarvestDirectives.defaults(),
        storage=StorageSettings.filesystem(base_path),
    )


# ============================================================================
# Bundle File Parsing
# ============================================================================

def _string_list(value: Any, key: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"'{key}' must be a list")
    for item in value:
        if not isinstance(item, str):
            raise ConfigError(f"'{key}' entries must be strings, got {item!r}")
    return list(value)


def parse_bundle_settings(name: str, data: Any) -> BundleSettings:
    """Build BundleSettings from a parsed configuration document.

    The document replaces the defaults entirely: absent lists are empty,
    an absent redirect flag is false and an absent storage section selects
    in-memory storage.

    Args:
        name: Bundle name
        data: Parsed YAML/JSON document

    Returns:
        BundleSettings

    Raises:
        ConfigError: If the document has the wrong shape
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("Configuration document must be a mapping")

    harvest_data = data.get("harvest") or {}
    if not isinstance(harvest_data, dict):
        raise ConfigError("'harvest' must be a mapping")

    follow = harvest_data.get("follow_html_redirects", False)
    if not isinstance(follow, bool):
        raise ConfigError("'harvest.follow_html_redirects' must be a boolean")

    harvest = HarvestDirectives(
        ignore_urls_regexprs=_string_list(
            harvest_data.get("ignore_urls_regexprs"), "harvest.ignore_urls_regexprs"
        ),
        remove_params_from_urls_regexprs=_string_list(
            harvest_data.get("remove_params_from_urls_regexprs"),
            "harvest.remove_params_from_urls_regexprs",
        ),
        follow_html_redirects=follow,
    )

    storage_data = data.get("storage")
    if storage_data is None:
        storage = StorageSettings(type=StorageType.MEMORY.value)
    elif not isinstance(storage_data, dict):
        raise ConfigError("'storage' must be a mapping")
    else:
        storage_type = str(storage_data.get("type", StorageType.MEMORY.value))
        filesys = None
        filesys_data = storage_data.get("filesys")
        if filesys_data is not None:
            if not isinstance(filesys_data, dict) or "base_path" not in filesys_data:
                raise ConfigError("'storage.filesys' must define 'base_path'")
            filesys = FileStorageSettings(base_path=str(filesys_data["base_path"]))
        if storage_type == StorageType.FILE_SYSTEM.value and filesys is None:
            raise ConfigError("'storage.filesys' is required for filesys storage")
        storage = StorageSettings(type=storage_type, filesys=filesys)

    return BundleSettings(name=name, harvest=harvest, storage=storage)


def read_bundle_file(name: str, path: Path) -> BundleSettings:
    """Read and parse a bundle configuration file.

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse configuration file {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read configuration file {path}: {e}") from e

    try:
        return parse_bundle_settings(name, data)
    except ConfigError as e:
        raise ConfigError(f"Invalid configuration file {path}: {e}") from e


# ============================================================================
# Environment Overrides
# ============================================================================

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _env_key(*parts: str) -> str:
    return "_".join((ENV_PREFIX,) + parts).upper()


def apply_env_overrides(
    settings: BundleSettings,
    environ: Optional[Mapping[str, str]] = None,
) -> list[str]:
    """Apply LECTIOD_CONF_* overrides to settings in place.

    Args:
        settings: Settings to update
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Error messages for overrides that could not be applied
    """
    if environ is None:
        environ = os.environ
    errors: list[str] = []

    key = _env_key("harvest", "follow_html_redirects")
    if key in environ:
        raw = environ[key].strip().lower()
        if raw in _TRUE_VALUES:
            settings.harvest.follow_html_redirects = True
        elif raw in _FALSE_VALUES:
            settings.harvest.follow_html_redirects = False
        else:
            errors.append(f"Invalid boolean '{environ[key]}' in environment variable {key}")

    key = _env_key("storage", "type")
    if key in environ:
        settings.storage.type = environ[key].strip()

    key = _env_key("storage", "filesys", "base_path")
    if key in environ:
        settings.storage.filesys = FileStorageSettings(base_path=environ[key])

    return errors


# ============================================================================
# Bundle Settings Loader
# ============================================================================

def load_bundle_settings(
    name: str,
    provider: Optional[ConfigPathProvider] = None,
    *,
    fallback: Optional[BundleSettings] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> tuple[BundleSettings, list[str]]:
    """Load a bundle's settings from its external configuration sources.

    Args:
        name: Bundle name, also the configuration file stem
        provider: Yields search locations (defaults to default_config_paths)
        fallback: Settings used when no usable file exists
            (defaults to default_bundle_settings(name))
        environ: Environment mapping for overrides

    Returns:
        Tuple of (settings, configuration error messages)
    """
    provider = provider or default_config_paths
    errors: list[str] = []

    search_paths = provider(name)
    logger.debug(f"Searching configuration for bundle '{name}' in {search_paths}")

    settings: Optional[BundleSettings] = None
    path = find_config_file(name, search_paths)
    if path is not None:
        try:
            settings = read_bundle_file(name, path)
            logger.info(f"Read configuration for bundle '{name}' from {path}")
        except ConfigError as e:
            errors.append(str(e))

    if settings is None:
        settings = copy.deepcopy(fallback) if fallback else default_bundle_settings(name)

    errors.extend(apply_env_overrides(settings, environ))
    return settings, errors
