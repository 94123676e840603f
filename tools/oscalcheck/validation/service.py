"""
OSCAL validation service

Orchestrates the validation of a single document: parse or accept the input, convert
object-serialized documents to XML, evaluate the ruleset for the document type, and fold
the outcomes into a ValidationResult.

Conversion and parse failures become a MALFORMED result without evaluating any rules.
Rule artifact and evaluation failures (RuleEngineError) propagate, because they mean no
trustworthy judgment about the document could be made.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional, Union

from lxml import etree

from ..documents.detect import infer_json_type, infer_xml_type, sniff_representation
from ..documents.registry import DocumentTypeRegistry
from ..documents.types import OSCAL_NAMESPACE, DocumentType, Representation, RulesetKey
from ..errors import ConversionError
from ..rules.gateway import RuleEngineGateway
from .models import Assertion, SeverityPolicy, ValidationResult

logger = logging.getLogger(__name__)

Document = Union[str, bytes, Dict[str, Any], etree._ElementTree, etree._Element]

# Saxon-style EQName location steps, e.g. Q{http://...}metadata[1]
_EQNAME_STEP = re.compile(r"Q\{([^}]*)\}([\w.\-]+)")


class OscalService:
    """Validates OSCAL documents in either representation"""

    def __init__(self,
                 registry: DocumentTypeRegistry,
                 gateway: RuleEngineGateway,
                 default_ruleset: RulesetKey = RulesetKey.REV5,
                 policy: Optional[SeverityPolicy] = None):
        self.registry = registry
        self.gateway = gateway
        self.default_ruleset = default_ruleset
        self.policy = policy or SeverityPolicy()
        self._parser = etree.XMLParser(resolve_entities=False, no_network=True)

    async def validate(self,
                       document: Document,
                       declared_type: Union[DocumentType, str, None] = None,
                       ruleset: Union[RulesetKey, str, None] = None,
                       representation: Optional[Representation] = None) -> ValidationResult:
        """Validate a document given as text, a JSON object or an XML tree"""
        ruleset = RulesetKey.parse(ruleset) if ruleset is not None else self.default_ruleset
        document_type = DocumentType.parse(declared_type) if declared_type is not None else None

        try:
            parsed = self._parse(document, representation)
            document_type = self._resolve_type(parsed, document_type)
            tree = self._to_structural(parsed, document_type)
        except ConversionError as e:
            logger.warning(f"Document is malformed: {e}")
            return ValidationResult.malformed(document_type, ruleset, e.diagnostics or [str(e)])

        raw_assertions = await self.gateway.evaluate(document_type, ruleset, tree)
        assertions = [
            Assertion.from_raw(raw, resolve_line(tree, raw.location))
            for raw in raw_assertions
        ]

        result = ValidationResult.fold(document_type, ruleset, assertions, self.policy)
        logger.info(f"{document_type.title} validation {result.outcome.value}: "
                    f"{len(result.failed_assertions)} of {len(assertions)} assertions failed")
        return result

    async def validate_file(self,
                            path: Union[str, Path],
                            declared_type: Union[DocumentType, str, None] = None,
                            ruleset: Union[RulesetKey, str, None] = None) -> ValidationResult:
        """Read a file and validate it; the representation is detected from content"""
        path = Path(path)
        logger.info(f"Validating OSCAL file: {path}")

        content = path.read_bytes()
        representation = sniff_representation(content)
        logger.debug(f"Detected {representation.value if representation else 'unknown'} "
                     f"representation for {path.name}")
        return await self.validate(content, declared_type, ruleset, representation)

    async def validate_xml(self, text: Union[str, bytes],
                           declared_type: Union[DocumentType, str, None] = None,
                           ruleset: Union[RulesetKey, str, None] = None) -> ValidationResult:
        return await self.validate(text, declared_type, ruleset, Representation.XML)

    async def validate_json(self, text: Union[str, bytes],
                            declared_type: Union[DocumentType, str, None] = None,
                            ruleset: Union[RulesetKey, str, None] = None) -> ValidationResult:
        return await self.validate(text, declared_type, ruleset, Representation.JSON)

    def _parse(self, document: Document, representation: Optional[Representation]) -> Any:
        """Turn text input into a JSON object or XML tree; other input passes through"""
        if isinstance(document, etree._Element):
            return document.getroottree()
        if not isinstance(document, (str, bytes)):
            return document

        representation = representation or sniff_representation(document)
        if representation is Representation.XML:
            data = document.encode("utf-8") if isinstance(document, str) else document
            try:
                return etree.fromstring(data, parser=self._parser).getroottree()
            except etree.XMLSyntaxError as e:
                raise ConversionError("Document is not well-formed XML", [str(e)]) from e

        if representation is Representation.JSON:
            if isinstance(document, str):
                document = document.lstrip("\ufeff")
            try:
                return json.loads(document)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise ConversionError("Document is not valid JSON", [str(e)]) from e

        raise ConversionError("Unrecognized document representation",
                              ["content is neither XML nor JSON"])

    def _resolve_type(self, parsed: Any, declared: Optional[DocumentType]) -> DocumentType:
        if isinstance(parsed, etree._ElementTree):
            inferred = infer_xml_type(parsed)
        else:
            inferred = infer_json_type(parsed)

        if declared and inferred and declared is not inferred:
            raise ConversionError(
                f"Document is not a {declared.title}",
                [f"declared type '{declared.value}' but document root is '{inferred.root}'"]
            )

        document_type = declared or inferred
        if document_type is None:
            raise ConversionError("Could not determine OSCAL document type",
                                  ["document root is not an SSP, SAP, SAR or POA&M"])
        return document_type

    def _to_structural(self, parsed: Any, document_type: DocumentType) -> etree._ElementTree:
        if isinstance(parsed, etree._ElementTree):
            root = etree.QName(parsed.getroot())
            if root.namespace != OSCAL_NAMESPACE or root.localname != document_type.root:
                raise ConversionError(
                    f"Document is not a {document_type.title}",
                    [f"expected root {{{OSCAL_NAMESPACE}}}{document_type.root}, got {root.text}"]
                )
            return parsed

        converter = self.registry.converter_for(document_type)
        return converter.convert(parsed)


def resolve_line(tree: etree._ElementTree, location: Optional[str]) -> Optional[int]:
    """Source line of the node an assertion location points at, when it can be found"""
    if not location:
        return None

    xpath = _EQNAME_STEP.sub(
        lambda m: f"*[namespace-uri()='{m.group(1)}' and local-name()='{m.group(2)}']",
        location
    )
    try:
        nodes = tree.xpath(xpath)
    except etree.XPathError as e:
        logger.debug(f"Could not resolve assertion location {location}: {e}")
        return None

    if not isinstance(nodes, list) or not nodes:
        return None

    node = nodes[0]
    if not isinstance(node, etree._Element):
        getparent = getattr(node, "getparent", None)
        node = getparent() if getparent else None
    return node.sourceline if node is not None else None
