"""
OSCAL validation and reporting

Provides the validation service, the result model and console/JSON reporting.
"""

from .models import Assertion, Outcome, SeverityPolicy, ValidationResult
from .reporter import ValidationReporter
from .service import OscalService

__all__ = [
    'Assertion',
    'OscalService',
    'Outcome',
    'SeverityPolicy',
    'ValidationReporter',
    'ValidationResult'
]
