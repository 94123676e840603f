"""
SVRL report parsing

Schematron validation reports list failed asserts and successful reports in document
order; both are kept, in that order.
"""

import re
from typing import List, Union

from lxml import etree

from .engine import RawAssertion

SVRL_NAMESPACE = "http://purl.oclc.org/dsdl/svrl"

_FAILED_ASSERT = f"{{{SVRL_NAMESPACE}}}failed-assert"
_SUCCESSFUL_REPORT = f"{{{SVRL_NAMESPACE}}}successful-report"
_TEXT = f"{{{SVRL_NAMESPACE}}}text"

_WHITESPACE = re.compile(r"\s+")


def normalize_space(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def parse_svrl(report: Union[etree._ElementTree, etree._Element]) -> List[RawAssertion]:
    """Extract assertion outcomes from an SVRL document"""
    root = report.getroot() if isinstance(report, etree._ElementTree) else report
    if root is None:
        return []

    assertions = []
    for element in root.iter(_FAILED_ASSERT, _SUCCESSFUL_REPORT):
        text = element.find(_TEXT)
        message = normalize_space("".join(text.itertext())) if text is not None else ""
        assertions.append(RawAssertion(
            kind="assert" if element.tag == _FAILED_ASSERT else "report",
            id=element.get("id"),
            role=element.get("role"),
            location=element.get("location"),
            test=element.get("test"),
            message=message,
        ))
    return assertions
