"""Core data models for lectiod.

This module defines the data structures shared across the application,
including bundle settings, classified resources, authorization inputs,
and the summaries returned to API consumers.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from lectiod.core.constants import (
    DEFAULT_BUNDLE_NAME,
    DEFAULT_CLEAN_PATTERNS,
    DEFAULT_IGNORE_PATTERNS,
    DEFAULTS,
    StorageType,
)


# ============================================================================
# Bundle Settings Models
# ============================================================================

@dataclass
class HarvestDirectives:
    """Harvest policy as authored, before regex compilation."""
    ignore_urls_regexprs: list[str] = field(default_factory=list)
    remove_params_from_urls_regexprs: list[str] = field(default_factory=list)
    follow_html_redirects: bool = False

    @classmethod
    def defaults(cls) -> "HarvestDirectives":
        """Built-in policy used when no external configuration exists."""
        return cls(
            ignore_urls_regexprs=list(DEFAULT_IGNORE_PATTERNS),
            remove_params_from_urls_regexprs=list(DEFAULT_CLEAN_PATTERNS),
            follow_html_redirects=DEFAULTS["follow_html_redirects"],
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "ignore_urls_regexprs": list(self.ignore_urls_regexprs),
            "remove_params_from_urls_regexprs": list(self.remove_params_from_urls_regexprs),
            "follow_html_redirects": self.follow_html_redirects,
        }


@dataclass
class FileStorageSettings:
    """Filesystem storage target."""
    base_path: str


@dataclass
class StorageSettings:
    """Storage target descriptor; exactly one kind is active."""
    type: str = StorageType.MEMORY.value
    filesys: Optional[FileStorageSettings] = None

    @classmethod
    def filesystem(cls, base_path: str) -> "StorageSettings":
        return cls(type=StorageType.FILE_SYSTEM.value, filesys=FileStorageSettings(base_path=base_path))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        result: dict[str, Any] = {"type": self.type}
        if self.filesys is not None:
            result["filesys"] = {"base_path": self.filesys.base_path}
        return result


@dataclass
class BundleSettings:
    """Everything needed to construct one configuration bundle."""
    name: str = DEFAULT_BUNDLE_NAME
    harvest: HarvestDirectives = field(default_factory=HarvestDirectives)
    storage: StorageSettings = field(default_factory=StorageSettings)


# ============================================================================
# Classified Resource Models
# ============================================================================

@dataclass(frozen=True)
class HarvestedResourceUrls:
    """The four URL variants reported for a valid candidate."""
    original: str
    final: str = ""
    resolved: str = ""
    cleaned: str = ""

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary."""
        return {
            "original": self.original,
            "final": self.final,
            "resolved": self.resolved,
            "cleaned": self.cleaned,
        }


@dataclass(frozen=True)
class InvalidResource:
    """Candidate whose URL or destination could not be resolved."""
    url: str
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url, "reason": self.reason}


@dataclass(frozen=True)
class IgnoredResource:
    """Valid candidate excluded by the ignore policy."""
    urls: HarvestedResourceUrls
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"urls": self.urls.to_dict(), "reason": self.reason}


@dataclass(frozen=True)
class HarvestedResource:
    """Accepted candidate."""
    urls: HarvestedResourceUrls
    is_cleaned: bool
    is_html_redirect: bool
    redirect_url: Optional[str] = None     # Only set when is_html_redirect

    def to_dict(self) -> dict[str, Any]:
        return {
            "urls": self.urls.to_dict(),
            "is_cleaned": self.is_cleaned,
            "is_html_redirect": self.is_html_redirect,
            "redirect_url": self.redirect_url,
        }


ClassifiedResource = Union[InvalidResource, IgnoredResource, HarvestedResource]


@dataclass
class HarvestedResourceSet:
    """Classification output for one block of text.

    Each list keeps the order in which the harvesting engine returned
    its candidates.
    """
    text: str
    invalid: list[InvalidResource] = field(default_factory=list)
    ignored: list[IgnoredResource] = field(default_factory=list)
    harvested: list[HarvestedResource] = field(default_factory=list)

    @property
    def total(self) -> int:
        """Number of classified candidates across all categories."""
        return len(self.invalid) + len(self.ignored) + len(self.harvested)

    def add(self, resource: ClassifiedResource) -> None:
        """Append a resource to the list matching its category."""
        if isinstance(resource, InvalidResource):
            self.invalid.append(resource)
        elif isinstance(resource, IgnoredResource):
            self.ignored.append(resource)
        elif isinstance(resource, HarvestedResource):
            self.harvested.append(resource)
        else:
            raise TypeError(f"Not a classified resource: {resource!r}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "text": self.text,
            "invalid": [r.to_dict() for r in self.invalid],
            "ignored": [r.to_dict() for r in self.ignored],
            "harvested": [r.to_dict() for r in self.harvested],
        }


# ============================================================================
# Authorization and Destination Inputs
# ============================================================================

@dataclass(frozen=True)
class AuthorizationInput:
    """Capability presented by a session-scoped caller."""
    session_id: Optional[str] = None


@dataclass(frozen=True)
class PrivilegedAuthorizationInput:
    """Capability presented by a caller requesting a privileged operation."""
    session_id: Optional[str] = None


@dataclass(frozen=True)
class StorageDestination:
    """Where a classified result should be saved."""
    collection: str


# ============================================================================
# Bundle Summary Model
# ============================================================================

@dataclass(frozen=True)
class BundleSummary:
    """Read-only view of a configuration bundle returned to callers."""
    name: str
    ignore_patterns: tuple[str, ...]
    clean_patterns: tuple[str, ...]
    follow_html_redirects: bool
    storage: StorageSettings
    storage_valid: bool
    errors: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "harvest": {
                "ignore_urls_regexprs": list(self.ignore_patterns),
                "remove_params_from_urls_regexprs": list(self.clean_patterns),
                "follow_html_redirects": self.follow_html_redirects,
            },
            "storage": self.storage.to_dict(),
            "storage_valid": self.storage_valid,
            "errors": list(self.errors),
        }
