"""
oscalcheck - OSCAL document validation and rules documentation tooling

Validates FedRAMP OSCAL documents (SSP, SAP, SAR, POA&M) in XML or JSON against
Schematron-derived rulesets, and generates the JSON summaries behind the rules
documentation UI.

Key features:
- Representation sniffing and document type inference from the document root
- JSON to XML conversion with structural (JSON Schema) diagnostics
- Compiled rule artifacts cached per (document type, ruleset) across concurrent requests
- Pass/fail/malformed outcomes driven by a configurable assertion severity policy
- Rule catalogs, assertion views and XSpec scenario summaries for the documentation UI

Architecture:
    Document (XML/JSON) → Sniff → Convert → Rule Engine Gateway → SVRL → ValidationResult
"""

__version__ = "1.0.0"
__author__ = "oscalcheck contributors"
__license__ = "Apache-2.0"

from .cli import cli

__all__ = ['cli']
