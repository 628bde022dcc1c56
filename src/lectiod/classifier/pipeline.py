"""Classification pipeline.

Runs the harvesting engine with a bundle's policy and classifies what it
returns. The pipeline holds no per-request state; concurrent runs against
the same bundle only read its immutable filter chains.
"""

import asyncio
import logging
from typing import Optional

from lectiod.bundles.bundle import ConfigurationBundle
from lectiod.classifier.classifier import ResourceClassifier
from lectiod.core.exceptions import HarvestTimeoutError
from lectiod.core.models import HarvestedResourceSet
from lectiod.harvester.base import HarvestingEngine


logger = logging.getLogger(__name__)


class ClassificationPipeline:
    """Harvest text with a bundle's policy, then classify the candidates."""

    def __init__(
        self,
        engine: HarvestingEngine,
        *,
        classifier: Optional[ResourceClassifier] = None,
        harvest_timeout: Optional[float] = None,
    ):
        """Initialize pipeline.

        Args:
            engine: Harvesting engine performing discovery and resolution
            classifier: ResourceClassifier (creates default if None)
            harvest_timeout: Seconds allowed for one engine call, None for no limit
        """
        self.engine = engine
        self.classifier = classifier or ResourceClassifier()
        self.harvest_timeout = harvest_timeout

    async def run(self, bundle: ConfigurationBundle, text: str) -> HarvestedResourceSet:
        """Classify the URLs contained in text under bundle's policy.

        Caller cancellation propagates into the engine call.

        Raises:
            HarvestTimeoutError: If the engine exceeds harvest_timeout
        """
        logger.info(f"Harvesting {len(text)} characters with bundle '{bundle.name}'")
        harvest = self.engine.harvest(
            text,
            bundle.ignore_chain,
            bundle.clean_chain,
            bundle.follow_html_redirects,
        )
        try:
            if self.harvest_timeout is None:
                candidates = await harvest
            else:
                candidates = await asyncio.wait_for(harvest, timeout=self.harvest_timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"Harvest with bundle '{bundle.name}' timed out after {self.harvest_timeout}s")
            raise HarvestTimeoutError(
                f"Harvesting engine did not finish within {self.harvest_timeout} seconds"
            ) from e

        result = self.classifier.classify_all(text, candidates)
        stats = self.classifier.get_statistics(result)
        logger.info(
            f"Classified {stats['total_urls']} URL(s) with bundle '{bundle.name}': "
            f"{stats['harvested_count']} harvested, {stats['ignored_count']} ignored, "
            f"{stats['invalid_count']} invalid"
        )
        return result
