"""Harvesting engine contract and reference engines.

- HarvestingEngine / Candidate: protocols the pipeline depends on
- HarvestedCandidate: plain-data candidate
- OfflineHarvester: regex discovery, no network access
- FixtureHarvester: replays a recorded candidate list
"""

from lectiod.harvester.base import (
    Candidate,
    CleanPolicy,
    HarvestedCandidate,
    HarvestingEngine,
    IgnorePolicy,
)
from lectiod.harvester.fixture import FixtureHarvester
from lectiod.harvester.offline import OfflineHarvester, URLCleaner, discover_urls

__all__ = [
    "Candidate",
    "CleanPolicy",
    "FixtureHarvester",
    "HarvestedCandidate",
    "HarvestingEngine",
    "IgnorePolicy",
    "OfflineHarvester",
    "URLCleaner",
    "discover_urls",
]
