"""
Validation result model

A ValidationResult is an ordered sequence of assertions plus an overall outcome folded
from them with a SeverityPolicy.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple

from ..documents.types import DocumentType, RulesetKey
from ..rules.engine import RawAssertion

DEFAULT_BLOCKING_ROLES = frozenset({"error", "fatal", "critical"})


class Outcome(Enum):
    PASS = "pass"
    FAIL = "fail"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class Assertion:
    """One rule check outcome"""

    id: Optional[str]
    message: str
    role: Optional[str]
    location: Optional[str]
    passed: bool
    kind: str = "assert"
    test: Optional[str] = None
    line: Optional[int] = None

    @classmethod
    def from_raw(cls, raw: RawAssertion, line: Optional[int] = None) -> "Assertion":
        # SVRL only lists failed asserts; a successful report is informational
        return cls(
            id=raw.id,
            message=raw.message,
            role=raw.role,
            location=raw.location,
            passed=raw.kind == "report",
            kind=raw.kind,
            test=raw.test,
            line=line,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "message": self.message,
            "role": self.role,
            "location": self.location,
            "line": self.line,
            "kind": self.kind,
            "test": self.test,
            "passed": self.passed,
        }


@dataclass(frozen=True)
class SeverityPolicy:
    """Decides which failing assertions make a document fail

    Roles are compared case-insensitively. A failed assertion without a role is
    blocking, matching Schematron's treatment of an unqualified assert as an error.
    """

    blocking_roles: FrozenSet[str] = DEFAULT_BLOCKING_ROLES
    unroled_blocking: bool = True

    @classmethod
    def from_roles(cls, roles: Iterable[str], unroled_blocking: bool = True) -> "SeverityPolicy":
        return cls(frozenset(r.strip().lower() for r in roles if r.strip()), unroled_blocking)

    def is_blocking(self, assertion: Assertion) -> bool:
        if assertion.passed:
            return False
        if not assertion.role:
            return self.unroled_blocking
        return assertion.role.lower() in self.blocking_roles


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one document against one ruleset"""

    outcome: Outcome
    document_type: Optional[DocumentType]
    ruleset: RulesetKey
    assertions: Tuple[Assertion, ...] = ()
    diagnostics: Tuple[str, ...] = field(default=())

    @classmethod
    def malformed(cls, document_type: Optional[DocumentType], ruleset: RulesetKey,
                  diagnostics: Iterable[str]) -> "ValidationResult":
        """Result for a document that could not be represented structurally"""
        return cls(Outcome.MALFORMED, document_type, ruleset, (), tuple(diagnostics))

    @classmethod
    def fold(cls, document_type: DocumentType, ruleset: RulesetKey,
             assertions: Iterable[Assertion], policy: SeverityPolicy) -> "ValidationResult":
        """Aggregate assertions into a PASS or FAIL result"""
        assertions = tuple(assertions)
        failing = any(policy.is_blocking(a) for a in assertions)
        outcome = Outcome.FAIL if failing else Outcome.PASS
        return cls(outcome, document_type, ruleset, assertions)

    @property
    def failed_assertions(self) -> Tuple[Assertion, ...]:
        return tuple(a for a in self.assertions if not a.passed)

    @property
    def passed(self) -> bool:
        return self.outcome is Outcome.PASS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "document-type": self.document_type.value if self.document_type else None,
            "ruleset": self.ruleset.value,
            "summary": {
                "total": len(self.assertions),
                "failed": len(self.failed_assertions),
                "passed": len(self.assertions) - len(self.failed_assertions),
            },
            "diagnostics": list(self.diagnostics),
            "assertions": [a.to_dict() for a in self.assertions],
        }
