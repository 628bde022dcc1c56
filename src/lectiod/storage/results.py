"""Persistence of classified results into a bundle's datastore."""

import hashlib
import json
import logging
import re
from typing import TYPE_CHECKING

from lectiod.core.constants import StorageDestinationCollection
from lectiod.core.models import HarvestedResourceSet

if TYPE_CHECKING:
    from lectiod.bundles.bundle import ConfigurationBundle
    from lectiod.sessions.resolver import Session


logger = logging.getLogger(__name__)

_UNSAFE_SEGMENT_CHARS = re.compile(r"[^A-Za-z0-9_.\-]")


def scope_segment(scope: str) -> str:
    """Turn a session id or bundle name into a storage key segment.

    Names that are already valid segments are used as is. Anything else
    has unsafe characters replaced and a digest of the full name appended
    so distinct names stay distinct.
    """
    if scope and scope not in (".", "..") and not _UNSAFE_SEGMENT_CHARS.search(scope):
        return scope
    digest = hashlib.sha256(scope.encode("utf-8")).hexdigest()[:12]
    readable = _UNSAFE_SEGMENT_CHARS.sub("_", scope).strip(".")
    return f"{readable}-{digest}" if readable else digest


class ResultWriter:
    """Writes HarvestedResourceSet documents as JSON.

    Keys have the form /<collection>/<scope>/<digest>.json where scope is
    the session id for SESSION_PRINCIPAL and the bundle name for
    SESSION_TENANT, and digest identifies the input text.
    """

    def result_key(
        self,
        collection: StorageDestinationCollection,
        session: "Session",
        resources: HarvestedResourceSet,
    ) -> str:
        if collection is StorageDestinationCollection.SESSION_PRINCIPAL:
            scope = session.session_id
        else:
            scope = session.bundle_name
        digest = hashlib.sha256(resources.text.encode("utf-8")).hexdigest()[:16]
        return f"/{collection.value.lower()}/{scope_segment(scope)}/{digest}.json"

    def write(
        self,
        bundle: "ConfigurationBundle",
        session: "Session",
        collection: StorageDestinationCollection,
        resources: HarvestedResourceSet,
    ) -> str:
        """Persist resources into the bundle's datastore.

        Returns:
            Key the document was written under

        Raises:
            StorageError: If the datastore rejects the write
        """
        key = self.result_key(collection, session, resources)
        payload = json.dumps(resources.to_dict(), ensure_ascii=False, indent=2)
        bundle.store.put(key, payload.encode("utf-8"))
        logger.info(f"Saved {resources.total} classified URL(s) to {key} in bundle '{bundle.name}'")
        return key
