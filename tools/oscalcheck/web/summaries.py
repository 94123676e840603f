"""
Pre-generated summary access for the rules documentation UI

Fetches the JSON written by the batch summary commands, for all document types at once.
"""

import asyncio
import json
import logging
from typing import Any, Dict

from ..artifacts import ArtifactSource
from ..documents.types import DocumentType

logger = logging.getLogger(__name__)


class SummaryRepository:
    """Reads assertion views, rule catalogs and scenario summaries keyed by document type"""

    def __init__(self, source: ArtifactSource):
        self.source = source

    async def _fetch_json(self, name: str) -> Any:
        data = await self.source.fetch(name)
        return json.loads(data)

    async def _fetch_all(self, template: str) -> Dict[DocumentType, Any]:
        document_types = list(DocumentType)
        responses = await asyncio.gather(*(
            self._fetch_json(template.format(document_type=t.value)) for t in document_types
        ))
        logger.debug(f"Fetched {len(responses)} summaries matching {template}")
        return dict(zip(document_types, responses))

    async def get_assertion_views(self) -> Dict[DocumentType, Any]:
        return await self._fetch_all("assertion-views-{document_type}.json")

    async def get_schematron_assertions(self) -> Dict[DocumentType, Any]:
        return await self._fetch_all("{document_type}.json")

    async def get_xspec_scenario_summaries(self) -> Dict[DocumentType, Any]:
        return await self._fetch_all("xspec-summary-{document_type}.json")
