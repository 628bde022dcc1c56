"""Candidate classification.

This module maps each harvested candidate into exactly one of three
categories (invalid, ignored, harvested) and projects the fields
reported for that category.

Decision order per candidate:
1. URL not valid                -> invalid, "Invalid URL"
2. Destination not valid        -> invalid, reason enriched by the ignore
                                   reason when one exists
3. Ignored by policy            -> ignored
4. Otherwise                    -> harvested
"""

import logging
from typing import Iterable, Optional

from lectiod.core.constants import ResourceCategory
from lectiod.core.models import (
    ClassifiedResource,
    HarvestedResource,
    HarvestedResourceSet,
    HarvestedResourceUrls,
    IgnoredResource,
    InvalidResource,
)
from lectiod.harvester.base import Candidate


logger = logging.getLogger(__name__)


def _url_text(url: Optional[str]) -> str:
    return url or ""


def category_of(resource: ClassifiedResource) -> ResourceCategory:
    """Return the category a classified resource belongs to."""
    if isinstance(resource, InvalidResource):
        return ResourceCategory.INVALID
    if isinstance(resource, IgnoredResource):
        return ResourceCategory.IGNORED
    return ResourceCategory.HARVESTED


class ResourceClassifier:
    """Sort harvested candidates into invalid, ignored and harvested.

    The classifier never re-runs policy matching itself; it only reads
    back the flags the harvesting engine set while consulting the
    bundle's filter chains.
    """

    def classify(self, candidate: Candidate) -> ClassifiedResource:
        """Classify a single candidate.

        Args:
            candidate: Candidate returned by the harvesting engine

        Returns:
            Exactly one InvalidResource, IgnoredResource or HarvestedResource
        """
        original = candidate.original_url_text()

        if not candidate.is_url_valid():
            return InvalidResource(url=original, reason="Invalid URL")

        if not candidate.is_destination_valid():
            # Invalid destinations stay invalid even when also ignored
            is_ignored, ignore_reason = candidate.is_ignored()
            if is_ignored and ignore_reason:
                reason = f"Invalid URL Destination: {ignore_reason}"
            else:
                reason = "Invalid URL Destination: unknown reason"
            return InvalidResource(url=original, reason=reason)

        is_html_redirect, redirect_url = candidate.is_html_redirect()
        is_cleaned, _ = candidate.is_cleaned()
        is_ignored, ignore_reason = candidate.is_ignored()
        final_url, resolved_url, cleaned_url = candidate.urls()

        urls = HarvestedResourceUrls(
            original=original,
            final=_url_text(final_url),
            resolved=_url_text(resolved_url),
            cleaned=_url_text(cleaned_url),
        )

        if is_ignored:
            return IgnoredResource(urls=urls, reason=f"Ignored: {ignore_reason}")

        return HarvestedResource(
            urls=urls,
            is_cleaned=is_cleaned,
            is_html_redirect=is_html_redirect,
            redirect_url=redirect_url if is_html_redirect else None,
        )

    def classify_all(self, text: str, candidates: Iterable[Candidate]) -> HarvestedResourceSet:
        """Classify candidates in the order received.

        No reordering or deduplication is performed.

        Args:
            text: Original input text
            candidates: Candidates returned by the harvesting engine

        Returns:
            HarvestedResourceSet with one entry per candidate
        """
        result = HarvestedResourceSet(text=text)
        for candidate in candidates:
            resource = self.classify(candidate)
            logger.debug(
                f"{candidate.original_url_text()} -> {category_of(resource).value}"
            )
            result.add(resource)
        return result

    def get_statistics(self, result: HarvestedResourceSet) -> dict[str, int]:
        """Get per-category counts for a classification result."""
        return {
            "total_urls": result.total,
            f"{ResourceCategory.INVALID.value}_count": len(result.invalid),
            f"{ResourceCategory.IGNORED.value}_count": len(result.ignored),
            f"{ResourceCategory.HARVESTED.value}_count": len(result.harvested),
        }
