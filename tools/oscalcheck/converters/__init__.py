"""
OSCAL converters for oscalcheck

Converters turn object-serialized (JSON) OSCAL documents into the canonical structural
(XML) form that rule artifacts are evaluated against.
"""

from .base_converter import BaseConverter
from .json_to_xml import JsonToXmlConverter
from .schema import SchemaValidator

__all__ = [
    'BaseConverter',
    'JsonToXmlConverter',
    'SchemaValidator'
]
