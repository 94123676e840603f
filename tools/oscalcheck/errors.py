"""
Error taxonomy for oscalcheck

Library code raises these; the CLI is the only layer that turns them into exit codes.
"""

from typing import Iterable, List, Optional


class OscalCheckError(Exception):
    """Base class for all oscalcheck errors"""


class UnsupportedDocumentType(OscalCheckError, ValueError):
    """Raised for a document type tag that is not registered"""

    def __init__(self, tag: object):
        self.tag = tag
        super().__init__(f"Unsupported document type: {tag!r}")


class UnsupportedRuleset(OscalCheckError, ValueError):
    """Raised for a ruleset key that is not known"""

    def __init__(self, key: object):
        self.key = key
        super().__init__(f"Unsupported ruleset: {key!r}")


class ConversionError(OscalCheckError):
    """Object document could not be represented as structural markup"""

    def __init__(self, message: str, diagnostics: Optional[Iterable[str]] = None):
        self.diagnostics: List[str] = list(diagnostics or [])
        super().__init__(message)

    def __str__(self) -> str:
        base = super().__str__()
        if not self.diagnostics:
            return base
        return f"{base}: " + "; ".join(self.diagnostics)


class RuleEngineError(OscalCheckError):
    """Rule artifact could not be loaded, or evaluation failed"""


class SummaryGenerationError(OscalCheckError):
    """A rule or scenario artifact could not be parsed during summary generation"""

    def __init__(self, artifact: str, reason: str):
        self.artifact = artifact
        self.reason = reason
        super().__init__(f"Could not generate summary from {artifact}: {reason}")
