"""
OSCAL JSON to XML converter

Transforms an object-serialized OSCAL document into canonical OSCAL XML, driven by a
declarative conversion artifact per document type. The artifact names:

- root: the OSCAL root element
- schema: JSON schema the object document must conform to
- flags / element-flags: JSON keys emitted as XML attributes (globally / per element)
- groups: plural JSON array keys and the XML element each item becomes
- values: JSON key that carries an element's text content
- markup-multiline: fields whose text is emitted as <p> paragraphs
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, List

from lxml import etree

from ..documents.types import DocumentType
from ..errors import ConversionError
from .base_converter import ARTIFACT_DIR, BaseConverter
from .schema import SchemaValidator

logger = logging.getLogger(__name__)

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


class JsonToXmlConverter(BaseConverter):
    """Converter for one OSCAL document type"""

    def __init__(self, document_type: DocumentType, artifact_dir: Path = ARTIFACT_DIR):
        super().__init__(artifact_dir)
        self.document_type = document_type

        artifact = self._load_artifact(document_type.converter_artifact)
        self.root_name: str = artifact["root"]
        self.flags = set(artifact.get("flags", []))
        self.element_flags = {
            element: set(names) for element, names in artifact.get("element-flags", {}).items()
        }
        self.groups: Dict[str, str] = artifact.get("groups", {})
        self.values: Dict[str, str] = artifact.get("values", {})
        self.markup_multiline = set(artifact.get("markup-multiline", []))
        self.schema = SchemaValidator(self.artifact_dir / artifact["schema"])

        logger.info(f"Loaded {document_type.value} JSON to XML converter")

    def convert(self, document: Dict[str, Any]) -> etree._ElementTree:
        """Convert an OSCAL JSON document to an OSCAL XML tree"""
        if not isinstance(document, dict) or self.root_name not in document:
            raise ConversionError(
                f"Not a {self.document_type.title} document",
                [f"missing root property '{self.root_name}'"]
            )

        self.schema.check(document)

        root = etree.Element(self.qualify(self.root_name), nsmap={None: self.NAMESPACE})
        self._fill(root, self.root_name, document[self.root_name], self.root_name)
        logger.debug(f"Converted {self.document_type.value} document to XML")
        return etree.ElementTree(root)

    def _fill(self, element: etree._Element, name: str, value: Any, where: str) -> None:
        """Populate `element` from a JSON value"""
        if isinstance(value, dict):
            text_key = self.values.get(name)
            for key, child in value.items():
                child_where = f"{where} -> {key}"
                if key == text_key:
                    self._set_text(element, self.scalar_text(child, child_where), child_where)
                elif self._is_flag(name, key):
                    self._set_flag(element, key, self.scalar_text(child, child_where), child_where)
                else:
                    self._append(element, key, child, child_where)
        elif isinstance(value, list):
            raise ConversionError(
                "Unexpected array",
                [f"array at {where} has no element name to group under"]
            )
        elif name in self.markup_multiline:
            self._add_paragraphs(element, self.scalar_text(value, where), where)
        else:
            self._set_text(element, self.scalar_text(value, where), where)

    def _append(self, parent: etree._Element, key: str, value: Any, where: str) -> None:
        if isinstance(value, list):
            item_name = self.groups.get(key) or singular(key)
            for index, item in enumerate(value):
                item_where = f"{where} -> {index}"
                child = self._sub_element(parent, item_name, item_where)
                self._fill(child, item_name, item, item_where)
        else:
            self._fill(self._sub_element(parent, key, where), key, value, where)

    def _is_flag(self, element_name: str, key: str) -> bool:
        return key in self.flags or key in self.element_flags.get(element_name, ())

    def _add_paragraphs(self, element: etree._Element, text: str, where: str) -> None:
        """Emit markup-multiline prose as one <p> per paragraph"""
        for paragraph in _split_paragraphs(text):
            self._set_text(self._sub_element(element, "p", where), paragraph, where)

    # lxml raises ValueError for names that are not XML names and for text with
    # characters XML 1.0 cannot carry

    def _sub_element(self, parent: etree._Element, name: str, where: str) -> etree._Element:
        try:
            return etree.SubElement(parent, self.qualify(name))
        except ValueError as e:
            raise ConversionError(
                f"Property '{name}' cannot be an XML element name",
                [f"{e} at {where}"]
            ) from e

    def _set_flag(self, element: etree._Element, name: str, text: str, where: str) -> None:
        try:
            element.set(name, text)
        except ValueError as e:
            raise ConversionError("Value cannot be represented in XML", [f"{e} at {where}"]) from e

    def _set_text(self, element: etree._Element, text: str, where: str) -> None:
        try:
            element.text = text
        except ValueError as e:
            raise ConversionError("Value cannot be represented in XML", [f"{e} at {where}"]) from e


def _split_paragraphs(text: str) -> List[str]:
    paragraphs = [p.strip() for p in _PARAGRAPH_BREAK.split(text)]
    return [p for p in paragraphs if p] or [text.strip()]


def singular(name: str) -> str:
    """Default XML element name for items of a plural JSON array key"""
    if name.endswith("ies"):
        return name[:-3] + "y"
    if name.endswith(("sses", "xes", "ches", "shes")):
        return name[:-2]
    if name.endswith("s") and not name.endswith("ss"):
        return name[:-1]
    return name
