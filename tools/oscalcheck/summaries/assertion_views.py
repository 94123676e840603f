"""
Assertion views

UI-oriented grouping of each ruleset's assertions, one group per Schematron pattern.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from lxml import etree

from ..artifacts import ArtifactSource
from ..documents.types import DocumentType
from ..rules.svrl import normalize_space
from .schematron_summary import SchematronSource, sch, schema_title
from .writer import SummaryWriter

logger = logging.getLogger(__name__)


def build_assertion_view(schema: etree._Element, default_title: str) -> Dict[str, Any]:
    """Group identified assertions by pattern, keeping document order"""
    groups = []
    for index, pattern in enumerate(schema.iter(sch("pattern")), start=1):
        assertion_ids = []
        for node in pattern.iter(sch("assert"), sch("report")):
            assertion_id = node.get("id")
            if assertion_id and assertion_id not in assertion_ids:
                assertion_ids.append(assertion_id)
        if not assertion_ids:
            continue

        title = pattern.find(sch("title"))
        title_text = normalize_space("".join(title.itertext())) if title is not None else ""
        groups.append({
            "title": title_text or pattern.get("id") or f"Pattern {index}",
            "assertion-ids": assertion_ids,
        })

    return {
        "title": schema_title(schema, default_title),
        "groups": groups,
    }


class AssertionViewGenerator:
    """Writes assertion-views-<type>.json for every document type"""

    def __init__(self, source: ArtifactSource, output_dir: Path):
        self.schematron = SchematronSource(source)
        self.output_dir = Path(output_dir)

    async def generate(self, document_type: DocumentType) -> Dict[str, Any]:
        schema = await self.schematron.load(document_type)
        view = build_assertion_view(schema, document_type.title)
        logger.info(f"Built {document_type.value} assertion view with {len(view['groups'])} groups")
        return view

    async def generate_all(self, document_types: Optional[List[DocumentType]] = None) -> List[Path]:
        document_types = list(document_types or DocumentType)
        views = await asyncio.gather(*(self.generate(t) for t in document_types))

        writer = SummaryWriter(self.output_dir)
        return writer.write_all({
            f"assertion-views-{document_type.value}.json": view
            for document_type, view in zip(document_types, views)
        })
