"""
Document type registry

Maps every DocumentType to the converter that turns its JSON form into XML.
"""

import logging
from pathlib import Path
from typing import Mapping, Union

from ..converters.base_converter import ARTIFACT_DIR, BaseConverter
from ..converters.json_to_xml import JsonToXmlConverter
from ..errors import UnsupportedDocumentType
from .types import DocumentType

logger = logging.getLogger(__name__)


class DocumentTypeRegistry:
    """Exhaustive DocumentType -> converter table"""

    def __init__(self, converters: Mapping[DocumentType, BaseConverter]):
        missing = [t.value for t in DocumentType if t not in converters]
        if missing:
            raise ValueError(f"No converter registered for document types: {', '.join(missing)}")
        self._converters = dict(converters)

    @classmethod
    def from_artifacts(cls, artifact_dir: Path = ARTIFACT_DIR) -> "DocumentTypeRegistry":
        """Build the registry from the conversion artifacts in `artifact_dir`"""
        logger.debug(f"Loading conversion artifacts from {artifact_dir}")
        return cls({
            document_type: JsonToXmlConverter(document_type, artifact_dir)
            for document_type in DocumentType
        })

    def converter_for(self, tag: Union[DocumentType, str]) -> BaseConverter:
        """Converter for a document type tag; raises UnsupportedDocumentType"""
        document_type = DocumentType.parse(tag)
        try:
            return self._converters[document_type]
        except KeyError:
            raise UnsupportedDocumentType(tag)

    def __contains__(self, tag: object) -> bool:
        try:
            DocumentType.parse(tag)
        except UnsupportedDocumentType:
            return False
        return True
