"""
oscalcheck configuration

Defaults can be overridden with OSCALCHECK_* environment variables; CLI options take
precedence over both.
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, FrozenSet, Mapping, Optional

from .converters.base_converter import ARTIFACT_DIR
from .documents.types import RulesetKey
from .rules.lxml_engine import DEFAULT_ARTIFACT_PATTERN
from .validation.models import DEFAULT_BLOCKING_ROLES

ENV_PREFIX = "OSCALCHECK_"


@dataclass(frozen=True)
class OscalCheckConfig:
    """Locations of artifacts and outputs, and validation policy"""

    rules_base: str = "dist/rules"
    content_base: str = "dist/content"
    ruleset: RulesetKey = RulesetKey.REV5
    rule_artifact_pattern: str = DEFAULT_ARTIFACT_PATTERN
    conversion_artifact_dir: Path = ARTIFACT_DIR
    schematron_dir: Path = Path("src/rules")
    xspec_dir: Path = Path("test/rules")
    summary_output_dir: Path = Path("dist/rules")
    blocking_roles: FrozenSet[str] = field(default=DEFAULT_BLOCKING_ROLES)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "OscalCheckConfig":
        """Build configuration from OSCALCHECK_* variables"""
        environ = os.environ if environ is None else environ
        values: dict = {}

        def get(name: str) -> Optional[str]:
            value = environ.get(ENV_PREFIX + name)
            return value if value else None

        if get("RULES_BASE"):
            values["rules_base"] = get("RULES_BASE")
        if get("CONTENT_BASE"):
            values["content_base"] = get("CONTENT_BASE")
        if get("RULESET"):
            values["ruleset"] = RulesetKey.parse(get("RULESET"))
        if get("RULE_ARTIFACT_PATTERN"):
            values["rule_artifact_pattern"] = get("RULE_ARTIFACT_PATTERN")
        if get("CONVERSION_ARTIFACT_DIR"):
            values["conversion_artifact_dir"] = Path(get("CONVERSION_ARTIFACT_DIR"))
        if get("SCHEMATRON_DIR"):
            values["schematron_dir"] = Path(get("SCHEMATRON_DIR"))
        if get("XSPEC_DIR"):
            values["xspec_dir"] = Path(get("XSPEC_DIR"))
        if get("SUMMARY_OUTPUT_DIR"):
            values["summary_output_dir"] = Path(get("SUMMARY_OUTPUT_DIR"))
        if get("BLOCKING_ROLES"):
            values["blocking_roles"] = frozenset(
                role.strip().lower() for role in get("BLOCKING_ROLES").split(",") if role.strip()
            )

        return cls(**values)

    def override(self, **changes: Any) -> "OscalCheckConfig":
        """Copy with the non-None values in `changes` applied"""
        changes = {key: value for key, value in changes.items() if value is not None}
        if "ruleset" in changes:
            changes["ruleset"] = RulesetKey.parse(changes["ruleset"])
        return replace(self, **changes)
