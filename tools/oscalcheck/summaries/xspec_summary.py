"""
XSpec scenario summaries

Mines a document type's XSpec test suite for usage examples: every expectation becomes
a ScenarioSummary carrying the scenario labels, the assertion it exercises and the
example document fragment it is checked against. Source order is preserved.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
from lxml import etree

from ..artifacts import ArtifactSource
from ..documents.types import DocumentType
from ..errors import SummaryGenerationError
from ..rules.svrl import normalize_space
from .writer import SummaryWriter

logger = logging.getLogger(__name__)

XSPEC_NAMESPACE = "http://www.jenitennison.com/xslt/xspec"

LABEL_SEPARATOR = " / "

_EXPECTATIONS = (
    "expect-assert", "expect-not-assert",
    "expect-report", "expect-not-report",
    "expect-valid", "expect-rule",
)


def x(name: str) -> str:
    return f"{{{XSPEC_NAMESPACE}}}{name}"


def format_fragment(context: etree._Element) -> Optional[str]:
    """Pretty-printed XML of a scenario context, without XSpec namespace declarations"""
    blank_text_parser = etree.XMLParser(remove_blank_text=True, resolve_entities=False)
    parts = []

    text = (context.text or "").strip()
    if text:
        parts.append(text)

    for child in context:
        if isinstance(child.tag, str):
            serialized = etree.tostring(child, with_tail=False)
            fragment = etree.fromstring(serialized, parser=blank_text_parser)
            etree.cleanup_namespaces(fragment)
            parts.append(etree.tostring(fragment, pretty_print=True, encoding="unicode").rstrip())
        tail = (child.tail or "").strip()
        if tail:
            parts.append(tail)

    return "\n".join(parts) if parts else None


def _label(scenario: etree._Element) -> str:
    label = scenario.get("label")
    if label is None:
        element = scenario.find(x("label"))
        label = "".join(element.itertext()) if element is not None else ""
    return normalize_space(label)


def _is_pending(scenario: etree._Element) -> bool:
    return scenario.get("pending") is not None


def summarize_xspec(description: etree._Element) -> List[Dict[str, Any]]:
    """ScenarioSummary records for every active expectation, in document order"""
    summaries: List[Dict[str, Any]] = []

    def visit(scenario: etree._Element, labels: List[str], context: Optional[etree._Element]):
        if _is_pending(scenario):
            logger.debug(f"Skipping pending scenario: {_label(scenario)}")
            return

        labels = labels + [_label(scenario)]
        own_context = scenario.find(x("context"))
        if own_context is not None:
            context = own_context

        for child in scenario:
            if child.tag == x("scenario"):
                visit(child, labels, context)
            elif isinstance(child.tag, str) and etree.QName(child).localname in _EXPECTATIONS \
                    and etree.QName(child).namespace == XSPEC_NAMESPACE:
                summaries.append(_summary(child, labels, context))

    for child in description:
        if child.tag == x("scenario"):
            visit(child, [], None)

    return summaries


def _summary(expectation: etree._Element, labels: List[str],
             context: Optional[etree._Element]) -> Dict[str, Any]:
    href = context.get("href") if context is not None else None
    return {
        "label": LABEL_SEPARATOR.join(label for label in labels if label),
        "assertion-id": expectation.get("id"),
        "assertion-label": expectation.get("label"),
        "expect": etree.QName(expectation).localname[len("expect-"):],
        "context": format_fragment(context) if context is not None and href is None else None,
        "context-href": href,
    }


class XSpecSummarizer:
    """Generates xspec-summary-<type>.json for one document type"""

    def __init__(self, source: ArtifactSource, output_dir: Path):
        self.source = source
        self.output_dir = Path(output_dir)
        self._parser = etree.XMLParser(resolve_entities=False, no_network=True)

    def artifact_name(self, document_type: DocumentType) -> str:
        return f"{document_type.value}.xspec"

    async def summarize(self, document_type: DocumentType) -> List[Dict[str, Any]]:
        name = self.artifact_name(document_type)
        location = self.source.resolve(name)

        try:
            data = await self.source.fetch(name)
        except (OSError, httpx.HTTPError) as e:
            raise SummaryGenerationError(location, str(e)) from e

        try:
            root = etree.fromstring(data, parser=self._parser)
        except etree.XMLSyntaxError as e:
            raise SummaryGenerationError(location, f"not well-formed XML: {e}") from e

        if root.tag != x("description"):
            raise SummaryGenerationError(location, f"root element is {root.tag}, not x:description")

        summaries = summarize_xspec(root)
        logger.info(f"Summarized {len(summaries)} {document_type.value} XSpec expectations")
        return summaries

    async def generate(self, document_type: DocumentType) -> Path:
        summaries = await self.summarize(document_type)
        writer = SummaryWriter(self.output_dir)
        return writer.write_all({f"xspec-summary-{document_type.value}.json": summaries})[0]
