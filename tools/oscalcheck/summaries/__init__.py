"""
Rule and scenario summaries

Batch transforms that compile Schematron rulesets and XSpec test suites into flattened,
UI-consumable JSON.
"""

from .assertion_views import AssertionViewGenerator
from .schematron_summary import SchematronSummarizer
from .writer import SummaryWriter
from .xspec_summary import XSpecSummarizer

__all__ = [
    'AssertionViewGenerator',
    'SchematronSummarizer',
    'SummaryWriter',
    'XSpecSummarizer'
]
