"""
Rule evaluation for oscalcheck

Provides the rule engine interface, an lxml-backed engine, SVRL parsing and the gateway
that caches compiled rule artifacts per document type and ruleset.
"""

from .engine import RawAssertion, RuleArtifactKey, RuleEngine
from .gateway import RuleEngineGateway
from .lxml_engine import LxmlRuleEngine
from .svrl import parse_svrl

__all__ = [
    'LxmlRuleEngine',
    'RawAssertion',
    'RuleArtifactKey',
    'RuleEngine',
    'RuleEngineGateway',
    'parse_svrl'
]
