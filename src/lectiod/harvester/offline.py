"""Offline harvesting engine.

Discovers URLs in text and applies the harvest policy without touching
the network:
- Discovery: http(s):// and www. URLs found by regular expression
- Validation: structural parsing only
- Destination: hosts must look resolvable (dotted name, localhost or IP)
- Cleaning: query parameters selected by the clean policy are removed

Final and resolved URLs equal the discovered URL because nothing is
fetched, so candidates are never HTML redirects.
"""

import ipaddress
import logging
import re
from urllib.parse import unquote_plus, urlsplit, urlunsplit

from lectiod.harvester.base import CleanPolicy, HarvestedCandidate, IgnorePolicy


logger = logging.getLogger(__name__)

URL_PATTERN = re.compile(r"(?:https?://|www\.)[^\s<>\"'`]+", re.IGNORECASE)

_TRAILING_PUNCTUATION = ".,;:!?"
_CLOSING_BRACKETS = {")": "(", "]": "["}


def discover_urls(text: str) -> list[str]:
    """Find URL-looking tokens in text, in order of appearance.

    Trailing sentence punctuation and unbalanced closing brackets are
    not considered part of the URL.
    """
    found = []
    for match in URL_PATTERN.finditer(text):
        url = match.group(0)
        while url:
            last = url[-1]
            if last in _TRAILING_PUNCTUATION:
                url = url[:-1]
            elif last in _CLOSING_BRACKETS and url.count(last) > url.count(_CLOSING_BRACKETS[last]):
                url = url[:-1]
            else:
                break
        if url:
            found.append(url)
    return found


class URLCleaner:
    """Removes query parameters selected by a clean policy."""

    def __init__(self, policy: CleanPolicy):
        self.policy = policy

    def clean(self, url: str) -> tuple[str, bool, str]:
        """Strip matching parameters from url.

        Args:
            url: Absolute URL

        Returns:
            Tuple of (cleaned URL, whether anything was removed, first reason)
        """
        if not self.policy.should_clean(url):
            return url, False, ""

        parts = urlsplit(url)
        if not parts.query:
            return url, False, ""

        kept = []
        first_reason = ""
        removed = False
        # Kept segments are copied verbatim, only names are decoded for matching
        for segment in parts.query.split("&"):
            name = unquote_plus(segment.split("=", 1)[0])
            strip, reason = self.policy.should_strip_param(name) if name else (False, "")
            if strip:
                removed = True
                first_reason = first_reason or reason
                continue
            kept.append(segment)

        if not removed:
            return url, False, ""

        cleaned = urlunsplit((
            parts.scheme,
            parts.netloc,
            parts.path,
            "&".join(kept),
            parts.fragment,
        ))
        return cleaned, True, first_reason


def _is_valid_url(url: str) -> bool:
    try:
        parts = urlsplit(url)
        # Accessing port validates it
        parts.port
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.hostname)


def _is_resolvable_host(url: str) -> bool:
    host = urlsplit(url).hostname or ""
    if host == "localhost" or "." in host.strip("."):
        return True
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


class OfflineHarvester:
    """HarvestingEngine that never performs network requests."""

    async def harvest(
        self,
        text: str,
        ignore_policy: IgnorePolicy,
        clean_policy: CleanPolicy,
        follow_html_redirects: bool,
    ) -> list[HarvestedCandidate]:
        """Discover and evaluate every URL in text.

        Args:
            text: Text to scan
            ignore_policy: Excludes whole URLs
            clean_policy: Selects parameters to strip
            follow_html_redirects: Accepted for interface compatibility;
                nothing is fetched so no redirect is ever followed

        Returns:
            One candidate per discovered URL, in order of appearance
        """
        cleaner = URLCleaner(clean_policy)
        candidates = []
        for original in discover_urls(text):
            candidates.append(self._evaluate(original, ignore_policy, cleaner))
        logger.debug(f"Offline harvest discovered {len(candidates)} URL(s)")
        return candidates

    def _evaluate(
        self,
        original: str,
        ignore_policy: IgnorePolicy,
        cleaner: URLCleaner,
    ) -> HarvestedCandidate:
        url = original
        if url.lower().startswith("www."):
            url = f"http://{url}"

        if not _is_valid_url(url):
            return HarvestedCandidate(original_url=original, url_valid=False)

        ignored, ignore_reason = ignore_policy.is_ignored(url)

        if not _is_resolvable_host(url):
            return HarvestedCandidate(
                original_url=original,
                destination_valid=False,
                ignored=ignored,
                ignore_reason=ignore_reason,
            )

        if ignored:
            cleaned_url, cleaned, clean_reason = url, False, ""
        else:
            cleaned_url, cleaned, clean_reason = cleaner.clean(url)

        return HarvestedCandidate(
            original_url=original,
            ignored=ignored,
            ignore_reason=ignore_reason,
            cleaned=cleaned,
            clean_reason=clean_reason,
            final_url=url,
            resolved_url=url,
            cleaned_url=cleaned_url,
        )
