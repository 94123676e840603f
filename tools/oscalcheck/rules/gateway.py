"""
Rule engine gateway

Selects and caches compiled rule artifacts per (document type, ruleset) and supplies the
baseline and registry reference datasets each ruleset needs during evaluation.
"""

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional

from lxml import etree

from ..artifacts import ArtifactSource
from ..documents.types import DocumentType, RulesetKey
from .engine import RawAssertion, RuleArtifactKey, RuleEngine

logger = logging.getLogger(__name__)

BASELINES_PARAMETER = "baselines-base-path"
REGISTRY_PARAMETER = "registry-base-path"


class RuleEngineGateway:
    """Session-scoped access to compiled rule artifacts"""

    def __init__(self, engine: RuleEngine, content: ArtifactSource):
        self.engine = engine
        self.content = content
        self._cache: Dict[RuleArtifactKey, "asyncio.Future[Any]"] = {}

    @property
    def loaded_keys(self) -> List[RuleArtifactKey]:
        """Keys whose artifact finished loading successfully"""
        return [
            key for key, task in self._cache.items()
            if task.done() and not task.cancelled() and task.exception() is None
        ]

    def reference_parameters(self, ruleset: RulesetKey) -> Dict[str, str]:
        """Locations of the baseline and registry datasets for a ruleset"""
        baselines = f"{ruleset.value}/baselines/xml"
        registry = f"{ruleset.value}/resources/xml"

        for name in (baselines, registry):
            if self.content.exists(name) is False:
                logger.warning(f"Reference dataset not found: {self.content.resolve(name)}")

        return {
            BASELINES_PARAMETER: self.content.resolve(baselines),
            REGISTRY_PARAMETER: self.content.resolve(registry),
        }

    async def load(self, document_type: DocumentType, ruleset: RulesetKey) -> Any:
        """Compiled artifact for the pair, loading it at most once per session"""
        key = RuleArtifactKey(document_type, ruleset)

        task = self._cache.get(key)
        if task is None:
            task = asyncio.ensure_future(self.engine.load(key))
            task.add_done_callback(lambda done: self._evict_failed(key, done))
            self._cache[key] = task
        else:
            logger.debug(f"Using cached rule artifact for {document_type.value}/{ruleset.value}")

        return await asyncio.shield(task)

    async def preload(self, ruleset: RulesetKey,
                      document_types: Optional[Iterable[DocumentType]] = None) -> None:
        """Load the artifacts for several document types concurrently"""
        document_types = list(document_types or DocumentType)
        await asyncio.gather(*(self.load(t, ruleset) for t in document_types))

    async def evaluate(self, document_type: DocumentType, ruleset: RulesetKey,
                       document: etree._ElementTree) -> List[RawAssertion]:
        """Raw assertion outcomes for `document`; raises RuleEngineError"""
        compiled = await self.load(document_type, ruleset)
        parameters = self.reference_parameters(ruleset)

        assertions = await self.engine.evaluate(compiled, document, parameters)
        logger.info(f"Evaluated {document_type.value} rules ({ruleset.value}): "
                    f"{len(assertions)} assertion outcomes")
        return assertions

    def _evict_failed(self, key: RuleArtifactKey, task: "asyncio.Future[Any]") -> None:
        if not task.cancelled() and task.exception() is None:
            return
        if self._cache.get(key) is task:
            del self._cache[key]
            logger.debug(f"Evicted failed rule artifact load for {key.document_type.value}/"
                         f"{key.ruleset.value}")
