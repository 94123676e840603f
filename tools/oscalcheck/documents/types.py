"""
OSCAL document types and ruleset keys
"""

from enum import Enum
from typing import Dict, NamedTuple, Optional, Union

from ..errors import UnsupportedDocumentType, UnsupportedRuleset

OSCAL_NAMESPACE = "http://csrc.nist.gov/ns/oscal/1.0"


class _DocumentInfo(NamedTuple):
    root: str
    slug: str
    title: str
    model: str


class DocumentType(Enum):
    """OSCAL document types that have a ruleset"""

    SSP = "ssp"
    SAP = "sap"
    SAR = "sar"
    POAM = "poam"

    @classmethod
    def parse(cls, tag: Union[str, "DocumentType"]) -> "DocumentType":
        """Resolve a tag such as 'ssp' or 'POAM' to a DocumentType"""
        if isinstance(tag, cls):
            return tag
        if isinstance(tag, str):
            try:
                return cls(tag.strip().lower())
            except ValueError:
                pass
        raise UnsupportedDocumentType(tag)

    @classmethod
    def from_root(cls, root_name: str) -> Optional["DocumentType"]:
        """Find the document type whose OSCAL root element is `root_name`"""
        for document_type in cls:
            if document_type.root == root_name:
                return document_type
        return None

    @property
    def root(self) -> str:
        return _DOCUMENT_INFO[self].root

    @property
    def slug(self) -> str:
        return _DOCUMENT_INFO[self].slug

    @property
    def title(self) -> str:
        return _DOCUMENT_INFO[self].title

    @property
    def converter_artifact(self) -> str:
        """File name of the JSON to XML conversion artifact"""
        return f"oscal_{_DOCUMENT_INFO[self].model}_json-to-xml-converter.json"


_DOCUMENT_INFO: Dict[DocumentType, _DocumentInfo] = {
    DocumentType.SSP: _DocumentInfo(
        "system-security-plan", "system-security-plan",
        "System Security Plan", "ssp"),
    DocumentType.SAP: _DocumentInfo(
        "assessment-plan", "security-assessment-plan",
        "Security Assessment Plan", "assessment-plan"),
    DocumentType.SAR: _DocumentInfo(
        "assessment-results", "security-assessment-report",
        "Security Assessment Report", "assessment-results"),
    DocumentType.POAM: _DocumentInfo(
        "plan-of-action-and-milestones", "plan-of-action-and-milestones",
        "Plan of Action and Milestones", "poam"),
}


class RulesetKey(Enum):
    """Versioned rule catalogs"""

    REV4 = "rev4"
    REV5 = "rev5"

    @classmethod
    def parse(cls, key: Union[str, "RulesetKey"]) -> "RulesetKey":
        if isinstance(key, cls):
            return key
        if isinstance(key, str):
            try:
                return cls(key.strip().lower())
            except ValueError:
                pass
        raise UnsupportedRuleset(key)


class Representation(Enum):
    """Serialization of an incoming document"""

    XML = "xml"
    JSON = "json"
