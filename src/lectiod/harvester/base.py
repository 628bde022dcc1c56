"""Contract between the classification pipeline and harvesting engines.

The engine discovers URLs in text, resolves them and returns one
candidate per discovered URL. It consults the bundle's filter chains
through the IgnorePolicy and CleanPolicy protocols while doing so.
"""

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, runtime_checkable


@runtime_checkable
class IgnorePolicy(Protocol):
    """Decides whether a discovered URL is excluded."""

    def is_ignored(self, url: str) -> tuple[bool, str]:
        ...


@runtime_checkable
class CleanPolicy(Protocol):
    """Decides which query parameters are stripped from a URL."""

    def should_clean(self, url: str) -> bool:
        ...

    def should_strip_param(self, param_name: str) -> tuple[bool, str]:
        ...


@runtime_checkable
class Candidate(Protocol):
    """One harvested URL as reported by the engine."""

    def is_url_valid(self) -> bool:
        ...

    def is_destination_valid(self) -> bool:
        ...

    def is_ignored(self) -> tuple[bool, str]:
        ...

    def is_html_redirect(self) -> tuple[bool, str]:
        ...

    def is_cleaned(self) -> tuple[bool, str]:
        ...

    def urls(self) -> tuple[Optional[str], Optional[str], Optional[str]]:
        """Return (final, resolved, cleaned); any may be None."""
        ...

    def original_url_text(self) -> str:
        ...


@runtime_checkable
class HarvestingEngine(Protocol):
    """Discovers and resolves the URLs contained in a block of text."""

    async def harvest(
        self,
        text: str,
        ignore_policy: IgnorePolicy,
        clean_policy: CleanPolicy,
        follow_html_redirects: bool,
    ) -> Sequence[Candidate]:
        ...


@dataclass(frozen=True)
class HarvestedCandidate:
    """Plain-data Candidate implementation."""
    original_url: str
    url_valid: bool = True
    destination_valid: bool = True
    ignored: bool = False
    ignore_reason: str = ""
    html_redirect: bool = False
    redirect_url: str = ""
    cleaned: bool = False
    clean_reason: str = ""
    final_url: Optional[str] = None
    resolved_url: Optional[str] = None
    cleaned_url: Optional[str] = None

    def is_url_valid(self) -> bool:
        return self.url_valid

    def is_destination_valid(self) -> bool:
        return self.destination_valid

    def is_ignored(self) -> tuple[bool, str]:
        return self.ignored, self.ignore_reason

    def is_html_redirect(self) -> tuple[bool, str]:
        return self.html_redirect, self.redirect_url

    def is_cleaned(self) -> tuple[bool, str]:
        return self.cleaned, self.clean_reason

    def urls(self) -> tuple[Optional[str], Optional[str], Optional[str]]:
        return self.final_url, self.resolved_url, self.cleaned_url

    def original_url_text(self) -> str:
        return self.original_url
