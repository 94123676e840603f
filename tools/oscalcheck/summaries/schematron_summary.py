"""
Schematron rule catalog summaries

Flattens each document type's Schematron ruleset into a JSON mapping of assertion id to
its descriptive metadata, for the rules documentation UI.
"""

import asyncio
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

SCH_NAMESPACE = "http://purl.oclc.org/dsdl/schematron"

# Assertion attributes that are summarized under their own keys
_CORE_ATTRIBUTES = {"id", "test", "role", "diagnostics"}


def sch(name: str) -> str:
    return f"{{{SCH_NAMESPACE}}}{name}"


class SchematronSource:
    """Loads and parses the Schematron source for each document type"""

    def __init__(self, source: ArtifactSource):
        self.source = source
        self._parser = etree.XMLParser(resolve_entities=False, no_network=True)

    def artifact_name(self, document_type: DocumentType) -> str:
        return f"{document_type.value}.sch"

    async def load(self, document_type: DocumentType) -> etree._Element:
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

        if root.tag != sch("schema"):
            raise SummaryGenerationError(location, f"root element is {root.tag}, not sch:schema")

        logger.debug(f"Parsed Schematron: {location}")
        return root


def schema_title(schema: etree._Element, default: str) -> str:
    title = schema.find(sch("title"))
    if title is not None:
        text = normalize_space("".join(title.itertext()))
        if text:
            return text
    return default


def render_message(node: etree._Element) -> str:
    """Assertion text with sch:value-of and sch:name rendered as {xpath} placeholders"""
    parts = [node.text or ""]
    for child in node:
        if isinstance(child.tag, str):
            if child.tag == sch("value-of"):
                parts.append("{" + child.get("select", "") + "}")
            elif child.tag == sch("name"):
                parts.append("{" + (child.get("path") or "name()") + "}")
            else:
                parts.append("".join(child.itertext()))
        parts.append(child.tail or "")
    return normalize_space("".join(parts))


def _attribute_name(node: etree._Element, name: str) -> str:
    """Attribute name with its in-scope prefix, e.g. 'fedramp:specific'"""
    qname = etree.QName(name)
    if not qname.namespace:
        return qname.localname
    for prefix, uri in node.nsmap.items():
        if uri == qname.namespace and prefix:
            return f"{prefix}:{qname.localname}"
    return name


def _diagnostic_texts(schema: etree._Element) -> Dict[str, str]:
    return {
        diagnostic.get("id"): render_message(diagnostic)
        for diagnostic in schema.iter(sch("diagnostic"))
        if diagnostic.get("id")
    }


def summarize_schematron(schema: etree._Element) -> Dict[str, Dict[str, Any]]:
    """Flatten a Schematron schema into assertion id -> metadata, in document order"""
    diagnostics = _diagnostic_texts(schema)
    summary: Dict[str, Dict[str, Any]] = {}

    for pattern in schema.iter(sch("pattern")):
        for rule in pattern.iter(sch("rule")):
            for node in rule:
                if node.tag not in (sch("assert"), sch("report")):
                    continue

                assertion_id = node.get("id")
                if not assertion_id:
                    logger.warning(f"Skipping assertion without id in rule {rule.get('context')}")
                    continue
                if assertion_id in summary:
                    logger.warning(f"Duplicate assertion id {assertion_id}; keeping first")
                    continue

                summary[assertion_id] = {
                    "kind": etree.QName(node).localname,
                    "message": render_message(node),
                    "role": node.get("role"),
                    "context": rule.get("context"),
                    "test": node.get("test"),
                    "pattern": pattern.get("id"),
                    "diagnostics": [
                        diagnostics[ref] for ref in (node.get("diagnostics") or "").split()
                        if ref in diagnostics
                    ],
                    "properties": {
                        _attribute_name(node, name): value
                        for name, value in node.attrib.items()
                        if name not in _CORE_ATTRIBUTES
                    },
                }

    return summary


class SchematronSummarizer:
    """Generates rule catalog summaries for all document types"""

    def __init__(self, source: ArtifactSource, output_dir: Path):
        self.schematron = SchematronSource(source)
        self.output_dir = Path(output_dir)

    async def summarize(self, document_type: DocumentType) -> Dict[str, Dict[str, Any]]:
        schema = await self.schematron.load(document_type)
        summary = summarize_schematron(schema)
        logger.info(f"Summarized {len(summary)} {document_type.value} assertions")
        return summary

    async def generate_all(self, document_types: Optional[List[DocumentType]] = None) -> List[Path]:
        """Write <type>.json for every document type, or nothing on failure"""
        document_types = list(document_types or DocumentType)
        summaries = await asyncio.gather(*(self.summarize(t) for t in document_types))

        writer = SummaryWriter(self.output_dir)
        return writer.write_all({
            f"{document_type.value}.json": summary
            for document_type, summary in zip(document_types, summaries)
        })
