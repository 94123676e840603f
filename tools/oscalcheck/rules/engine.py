"""
Rule engine interface

The orchestrator only sees this interface. A rule engine compiles a rule artifact once
(`load`) and evaluates structural documents against the compiled form (`evaluate`).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Mapping, NamedTuple, Optional

from lxml import etree

from ..documents.types import DocumentType, RulesetKey


class RuleArtifactKey(NamedTuple):
    """Selects exactly one compiled rule artifact"""

    document_type: DocumentType
    ruleset: RulesetKey


@dataclass(frozen=True)
class RawAssertion:
    """One assertion outcome as reported by the engine"""

    kind: str  # "assert" (failed assert) or "report" (successful report)
    id: Optional[str]
    role: Optional[str]
    location: Optional[str]
    test: Optional[str]
    message: str


class RuleEngine(ABC):
    """Evaluates compiled rule artifacts against OSCAL XML"""

    @abstractmethod
    async def load(self, key: RuleArtifactKey) -> Any:
        """Load and compile the artifact for `key`; raises RuleEngineError"""
        pass

    @abstractmethod
    async def evaluate(self, compiled: Any, document: etree._ElementTree,
                       parameters: Mapping[str, str]) -> List[RawAssertion]:
        """Evaluate `document`; raises RuleEngineError"""
        pass
