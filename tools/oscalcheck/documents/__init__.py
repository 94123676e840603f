"""
OSCAL document types and detection

The DocumentTypeRegistry lives in `oscalcheck.documents.registry`; it depends on the
converters, which in turn depend on the types defined here.
"""

from .detect import infer_json_type, infer_xml_type, sniff_representation
from .types import OSCAL_NAMESPACE, DocumentType, Representation, RulesetKey

__all__ = [
    'OSCAL_NAMESPACE',
    'DocumentType',
    'Representation',
    'RulesetKey',
    'infer_json_type',
    'infer_xml_type',
    'sniff_representation'
]
