"""
lxml rule engine

Rule artifacts are either compiled XSLT stylesheets that emit SVRL, or ISO Schematron
sources (`.sch`) that are compiled to such a stylesheet on load.
"""

import logging
from typing import List, Mapping

import httpx
from lxml import etree, isoschematron

from ..artifacts import ArtifactSource
from ..errors import RuleEngineError
from .engine import RawAssertion, RuleArtifactKey, RuleEngine
from .svrl import parse_svrl

logger = logging.getLogger(__name__)

DEFAULT_ARTIFACT_PATTERN = "{ruleset}/{document_type}.xsl"


class LxmlRuleEngine(RuleEngine):
    """Rule engine backed by lxml XSLT and ISO Schematron"""

    def __init__(self, source: ArtifactSource, artifact_pattern: str = DEFAULT_ARTIFACT_PATTERN):
        self.source = source
        self.artifact_pattern = artifact_pattern
        self._parser = etree.XMLParser(resolve_entities=False, no_network=True)

    def artifact_name(self, key: RuleArtifactKey) -> str:
        return self.artifact_pattern.format(
            ruleset=key.ruleset.value,
            document_type=key.document_type.value
        )

    async def load(self, key: RuleArtifactKey) -> etree.XSLT:
        name = self.artifact_name(key)
        location = self.source.resolve(name)
        logger.info(f"Loading rule artifact: {location}")

        try:
            data = await self.source.fetch(name)
        except (OSError, httpx.HTTPError) as e:
            raise RuleEngineError(f"Could not load rule artifact {location}: {e}") from e

        try:
            tree = etree.fromstring(data, parser=self._parser, base_url=location)
            if name.endswith(".sch"):
                schematron = isoschematron.Schematron(tree, store_xslt=True)
                return etree.XSLT(schematron.validator_xslt)
            return etree.XSLT(tree)
        except (etree.XMLSyntaxError, etree.XSLTParseError, etree.XSLTApplyError,
                etree.SchematronParseError) as e:
            raise RuleEngineError(f"Could not compile rule artifact {location}: {e}") from e

    async def evaluate(self, compiled: etree.XSLT, document: etree._ElementTree,
                       parameters: Mapping[str, str]) -> List[RawAssertion]:
        params = {name: etree.XSLT.strparam(value) for name, value in parameters.items()}
        try:
            report = compiled(document, **params)
        except etree.XSLTApplyError as e:
            raise RuleEngineError(f"Rule evaluation failed: {e}") from e

        for entry in compiled.error_log:
            logger.debug(f"Rule engine message: {entry.message}")

        return parse_svrl(report)
