"""
Hash-based URL routing for the rules documentation UI

Routes are matched against an ordered table of (pattern, route class) pairs; the first
pattern that matches wins. `get_url` and `get_route` are inverses for every route in the
table, and `get_route` returns NOT_FOUND for anything else.
"""

import re
from dataclasses import dataclass, fields
from typing import Dict, List, Optional, Pattern, Tuple, Type, Union

from ..documents.types import DocumentType, RulesetKey
from ..errors import UnsupportedRuleset

_PARAMETER = re.compile(r":([a-z_]+)")


@dataclass(frozen=True)
class Home:
    pass


@dataclass(frozen=True)
class DocumentSummary:
    ruleset: RulesetKey


@dataclass(frozen=True)
class DocumentPOAM:
    ruleset: RulesetKey


@dataclass(frozen=True)
class DocumentSAP:
    ruleset: RulesetKey


@dataclass(frozen=True)
class DocumentSAR:
    ruleset: RulesetKey


@dataclass(frozen=True)
class DocumentSSP:
    ruleset: RulesetKey


@dataclass(frozen=True)
class Developers:
    pass


@dataclass(frozen=True)
class RouteNotFound:
    """Sentinel for URLs that match no route"""


NOT_FOUND = RouteNotFound()

Route = Union[Home, DocumentSummary, DocumentPOAM, DocumentSAP, DocumentSAR, DocumentSSP, Developers]


class RoutePattern:
    """URL template with :name parameters

    Matching accepts one trailing slash and ignores case.
    """

    def __init__(self, template: str):
        self.template = template
        self.parameters = _PARAMETER.findall(template)

        regex, position = "", 0
        for match in _PARAMETER.finditer(template):
            regex += re.escape(template[position:match.start()]) + f"(?P<{match.group(1)}>[^/]+)"
            position = match.end()
        regex += re.escape(template[position:])
        if not template.endswith("/"):
            regex += "/?"
        self._regex: Pattern[str] = re.compile(regex, re.IGNORECASE)

    def match(self, url: str) -> Optional[Dict[str, str]]:
        found = self._regex.fullmatch(url)
        return found.groupdict() if found else None

    def format(self, **values: str) -> str:
        return _PARAMETER.sub(lambda m: values[m.group(1)], self.template)


ROUTES: List[Tuple[RoutePattern, Type]] = [
    (RoutePattern("#/"), Home),
    (RoutePattern("#/:ruleset/documents"), DocumentSummary),
    (RoutePattern("#/:ruleset/documents/plan-of-action-and-milestones"), DocumentPOAM),
    (RoutePattern("#/:ruleset/documents/security-assessment-plan"), DocumentSAP),
    (RoutePattern("#/:ruleset/documents/security-assessment-report"), DocumentSAR),
    (RoutePattern("#/:ruleset/documents/system-security-plan"), DocumentSSP),
    (RoutePattern("#/developers"), Developers),
]

DOCUMENT_ROUTES: Dict[DocumentType, Type] = {
    DocumentType.POAM: DocumentPOAM,
    DocumentType.SAP: DocumentSAP,
    DocumentType.SAR: DocumentSAR,
    DocumentType.SSP: DocumentSSP,
}


def document_route(document_type: DocumentType, ruleset: RulesetKey) -> Route:
    """Route of the rules page for a document type"""
    return DOCUMENT_ROUTES[document_type](ruleset)


def get_url(route: Route) -> str:
    for pattern, route_class in ROUTES:
        if type(route) is route_class:
            values = {f.name: getattr(route, f.name).value for f in fields(route)}
            return pattern.format(**values)
    raise ValueError(f"No URL for route {route!r}")


def get_route(url: str) -> Union[Route, RouteNotFound]:
    for pattern, route_class in ROUTES:
        params = pattern.match(url)
        if params is None:
            continue
        try:
            values = {name: RulesetKey.parse(value) for name, value in params.items()}
        except UnsupportedRuleset:
            continue
        return route_class(**values)
    return NOT_FOUND
