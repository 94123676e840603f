"""
Representation sniffing and document type inference

Both representations may share a file extension, so detection looks at content only.
"""

import logging
from typing import Any, Dict, Optional, Union

from lxml import etree

from .types import DocumentType, Representation

logger = logging.getLogger(__name__)

_BOM = "\ufeff"


def sniff_representation(content: Union[str, bytes]) -> Optional[Representation]:
    """Return XML or JSON based on the first significant character"""
    if isinstance(content, bytes):
        head = content[:1024].decode("utf-8", errors="ignore")
    else:
        head = content[:1024]

    head = head.lstrip(_BOM + " \t\r\n")
    if head.startswith("<"):
        return Representation.XML
    if head.startswith("{") or head.startswith("["):
        return Representation.JSON

    logger.debug("Could not determine document representation from content")
    return None


def infer_json_type(document: Dict[str, Any]) -> Optional[DocumentType]:
    """Detect OSCAL document type from the top-level JSON key"""
    if not isinstance(document, dict):
        return None
    for key in document:
        document_type = DocumentType.from_root(key)
        if document_type:
            logger.debug(f"Detected OSCAL type '{document_type.value}' from JSON root '{key}'")
            return document_type
    return None


def infer_xml_type(tree: Union[etree._ElementTree, etree._Element]) -> Optional[DocumentType]:
    """Detect OSCAL document type from the XML root element name"""
    root = tree.getroot() if isinstance(tree, etree._ElementTree) else tree
    local_name = etree.QName(root).localname
    document_type = DocumentType.from_root(local_name)
    if document_type:
        logger.debug(f"Detected OSCAL type '{document_type.value}' from XML root '{local_name}'")
    return document_type
