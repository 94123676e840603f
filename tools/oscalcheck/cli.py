#!/usr/bin/env python3
"""
oscalcheck CLI - OSCAL document validation and rule documentation tooling

Validates SSP, SAP, SAR and POA&M documents (XML or JSON) against Schematron rulesets and
generates the JSON summaries consumed by the rules documentation UI.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from .config import OscalCheckConfig
from .documents.types import DocumentType, RulesetKey
from .errors import OscalCheckError, RuleEngineError, UnsupportedDocumentType
from .session import Session
from .validation.models import Outcome
from .validation.reporter import ValidationReporter

# Set up console and logging
console = Console()
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
    handlers=[RichHandler(console=console, show_time=False, show_path=False)]
)
logger = logging.getLogger("oscalcheck")

EXIT_CODES = {
    Outcome.PASS: 0,
    Outcome.FAIL: 1,
    Outcome.MALFORMED: 2,
}
EXIT_ERROR = 3


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.option('--rules-base', envvar='OSCALCHECK_RULES_BASE',
              help='Directory or URL holding compiled rule artifacts')
@click.option('--content-base', envvar='OSCALCHECK_CONTENT_BASE',
              help='Directory or URL holding baseline and registry content')
@click.option('--ruleset', envvar='OSCALCHECK_RULESET',
              type=click.Choice([k.value for k in RulesetKey], case_sensitive=False),
              help='Ruleset to validate against')
@click.pass_context
def cli(ctx, verbose: bool, quiet: bool, rules_base: Optional[str],
        content_base: Optional[str], ruleset: Optional[str]):
    """oscalcheck - validate OSCAL documents and summarize their rules"""
    ctx.ensure_object(dict)

    if quiet:
        logging.getLogger().setLevel(logging.WARNING)
    elif verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    else:
        logging.getLogger().setLevel(logging.INFO)

    ctx.obj['verbose'] = verbose
    ctx.obj['quiet'] = quiet
    ctx.obj.setdefault('overrides', {}).update(
        rules_base=rules_base, content_base=content_base, ruleset=ruleset
    )


def _session(ctx, **overrides) -> Session:
    """Session for this invocation, honoring global and command options"""
    if 'session' in ctx.obj:
        return ctx.obj['session']

    try:
        base = ctx.obj.get('config') or OscalCheckConfig.from_env()
        config = base.override(**ctx.obj.get('overrides', {}), **overrides)
        ctx.obj['session'] = Session.create(config)
    except OscalCheckError as e:
        _fail(ctx, f"Could not initialize oscalcheck: {e}", e)
    return ctx.obj['session']


def _fail(ctx, message: str, error: Optional[BaseException] = None) -> None:
    logger.error(message)
    if error is not None and ctx.obj.get('verbose'):
        logger.exception(error)
    sys.exit(EXIT_ERROR)


@cli.command()
@click.argument('path', type=click.Path(dir_okay=False, path_type=Path))
@click.option('--type', 'document_type', metavar='[ssp|sap|sar|poam]',
              help='Document type, when it cannot be inferred from the document root')
@click.option('--output', '-o', type=click.Path(path_type=Path),
              help='Also write the validation result as JSON')
@click.pass_context
def validate(ctx, path: Path, document_type: Optional[str], output: Optional[Path]):
    """Validate an OSCAL document (SSP, SAP, SAR, or POA&M) in XML or JSON"""
    if not path.is_file():
        _fail(ctx, f"Input file not found: {path}")

    session = _session(ctx)
    service = session.oscal_service()

    try:
        result = asyncio.run(service.validate_file(path, document_type))
    except RuleEngineError as e:
        _fail(ctx, f"Rule engine unavailable, document was not judged: {e}", e)
    except (OscalCheckError, OSError) as e:
        _fail(ctx, f"Validation of {path} failed: {e}", e)

    reporter = ValidationReporter(console, session.policy)
    if not ctx.obj['quiet']:
        reporter.display(result, str(path))
    if output:
        reporter.write_json(result, output, str(path))

    if result.outcome is not Outcome.PASS:
        logger.error(f"{path} {result.outcome.value}")
    sys.exit(EXIT_CODES[result.outcome])


@cli.command('generate-schematron-summaries')
@click.option('--schematron-dir', type=click.Path(path_type=Path),
              help='Directory containing <type>.sch rulesets')
@click.option('--output', '-o', type=click.Path(path_type=Path),
              help='Output directory for <type>.json summaries')
@click.pass_context
def generate_schematron_summaries(ctx, schematron_dir: Optional[Path], output: Optional[Path]):
    """Parse all Schematron rulesets and write JSON rule catalogs"""
    session = _session(ctx, schematron_dir=schematron_dir, summary_output_dir=output)

    try:
        written = asyncio.run(session.schematron_summarizer().generate_all())
    except (OscalCheckError, OSError) as e:
        _fail(ctx, f"Schematron summary generation failed: {e}", e)

    logger.info(f"Wrote {len(written)} rule catalog summaries")


@cli.command('create-assertion-view')
@click.option('--schematron-dir', type=click.Path(path_type=Path),
              help='Directory containing <type>.sch rulesets')
@click.option('--output', '-o', type=click.Path(path_type=Path),
              help='Output directory for assertion-views-<type>.json')
@click.pass_context
def create_assertion_view(ctx, schematron_dir: Optional[Path], output: Optional[Path]):
    """Write UI-optimized JSON of assertion views"""
    session = _session(ctx, schematron_dir=schematron_dir, summary_output_dir=output)

    try:
        written = asyncio.run(session.assertion_view_generator().generate_all())
    except (OscalCheckError, OSError) as e:
        _fail(ctx, f"Assertion view generation failed: {e}", e)

    logger.info(f"Wrote {len(written)} assertion views")


@cli.command('create-xspec-summaries')
@click.argument('document_type')
@click.option('--xspec-dir', type=click.Path(path_type=Path),
              help='Directory containing <type>.xspec test suites')
@click.option('--output', '-o', type=click.Path(path_type=Path),
              help='Output directory for xspec-summary-<type>.json')
@click.pass_context
def create_xspec_summaries(ctx, document_type: str, xspec_dir: Optional[Path], output: Optional[Path]):
    """Write UI-optimized XSpec scenario summaries, useful as usage examples"""
    try:
        parsed_type = DocumentType.parse(document_type)
    except UnsupportedDocumentType as e:
        _fail(ctx, str(e), e)

    session = _session(ctx, xspec_dir=xspec_dir, summary_output_dir=output)

    try:
        written = asyncio.run(session.xspec_summarizer().generate(parsed_type))
    except (OscalCheckError, OSError) as e:
        _fail(ctx, f"XSpec summary generation failed: {e}", e)

    logger.info(f"Wrote scenario summaries: {written}")


@cli.command()
@click.option('--check-deps', is_flag=True, help='Check required dependencies')
@click.option('--check-rules', is_flag=True, help='Load the rule artifacts for the configured ruleset')
@click.pass_context
def doctor(ctx, check_deps: bool, check_rules: bool):
    """Diagnostic tool for oscalcheck installation"""
    healthy = True
    if check_deps or not (check_deps or check_rules):
        healthy = _check_python_deps() and healthy

    if check_rules or not (check_deps or check_rules):
        healthy = _check_rule_artifacts(_session(ctx)) and healthy

    if not healthy:
        sys.exit(EXIT_ERROR)


def _check_python_deps() -> bool:
    """Check Python dependencies"""
    required = ['lxml', 'jsonschema', 'httpx', 'click', 'rich']
    missing = []

    for pkg in required:
        try:
            __import__(pkg)
        except ImportError:
            missing.append(pkg)

    if missing:
        logger.error(f"Missing Python dependencies: {', '.join(missing)}")
        logger.info("Run: pip install -e .")
        return False

    logger.info("All Python dependencies satisfied")
    return True


def _check_rule_artifacts(session: Session) -> bool:
    """Check that every document type's rule artifact loads"""
    ruleset = session.config.ruleset
    try:
        asyncio.run(session.gateway.preload(ruleset))
    except RuleEngineError as e:
        logger.error(f"Rule artifacts for {ruleset.value} not usable: {e}")
        return False

    logger.info(f"Rule artifacts for {ruleset.value} loaded from {session.config.rules_base}")
    return True


if __name__ == '__main__':
    cli()
