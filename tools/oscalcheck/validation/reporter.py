"""
Validation reporter

Renders ValidationResults on the console and writes them as JSON.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .models import Outcome, SeverityPolicy, ValidationResult

logger = logging.getLogger(__name__)

OUTCOME_STYLES = {
    Outcome.PASS: "green",
    Outcome.FAIL: "red",
    Outcome.MALFORMED: "yellow",
}


class ValidationReporter:
    """Reporter for OSCAL validation results"""

    def __init__(self, console: Optional[Console] = None, policy: Optional[SeverityPolicy] = None):
        self.console = console or Console()
        self.policy = policy or SeverityPolicy()

    def build_report(self, result: ValidationResult, source: Optional[str] = None) -> Dict[str, Any]:
        """JSON report for a result, with source and generation time"""
        return {
            "report_metadata": {
                "source": source,
                "generated": datetime.now(timezone.utc).isoformat(),
                "generator": "oscalcheck validation reporter",
            },
            **result.to_dict(),
        }

    def write_json(self, result: ValidationResult, output: Path, source: Optional[str] = None) -> None:
        output = Path(output)
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, 'w', encoding='utf-8') as f:
            json.dump(self.build_report(result, source), f, indent=2, ensure_ascii=False)
        logger.info(f"Validation report written to: {output}")

    def display(self, result: ValidationResult, source: Optional[str] = None) -> None:
        """Display outcome and assertion list"""
        style = OUTCOME_STYLES[result.outcome]
        title = result.document_type.title if result.document_type else "OSCAL document"

        self.console.print()
        self.console.print(Panel.fit(
            f"[bold {style}]{title}: {result.outcome.value.upper()}[/bold {style}]"
            + (f"\n[dim]{source}[/dim]" if source else ""),
            style=style
        ))

        if result.outcome is Outcome.MALFORMED:
            self.console.print("[bold yellow]Document could not be converted for rule evaluation:[/bold yellow]")
            for diagnostic in result.diagnostics:
                self.console.print(f"  • {escape(diagnostic)}")
            return

        if not result.assertions:
            self.console.print("[green]No assertions fired[/green]")
            return

        table = Table(title=f"Assertions ({result.ruleset.value})", style="cyan")
        table.add_column("Status", style="bold")
        table.add_column("Id")
        table.add_column("Role")
        table.add_column("Line", justify="right")
        table.add_column("Message")

        for assertion in result.assertions:
            if assertion.passed:
                status = "[green]report[/green]"
            elif self.policy.is_blocking(assertion):
                status = "[red]FAIL[/red]"
            else:
                status = "[yellow]advisory[/yellow]"
            table.add_row(
                status,
                assertion.id or "",
                assertion.role or "",
                str(assertion.line) if assertion.line is not None else "",
                escape(assertion.message)
            )

        self.console.print(table)
        failed = len(result.failed_assertions)
        self.console.print(f"\n[dim]{failed} failed, {len(result.assertions) - failed} reported[/dim]")
