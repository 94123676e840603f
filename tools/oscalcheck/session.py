"""
Validation session

One Session is created per process. It holds the configuration, the rule engine and the
artifact sources, the document type registry and the rule engine gateway (with its cache
of compiled rule artifacts), and hands out the services built on them.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .artifacts import ArtifactSource
from .config import OscalCheckConfig
from .documents.registry import DocumentTypeRegistry
from .rules.engine import RuleEngine
from .rules.gateway import RuleEngineGateway
from .rules.lxml_engine import LxmlRuleEngine
from .summaries.assertion_views import AssertionViewGenerator
from .summaries.schematron_summary import SchematronSummarizer
from .summaries.xspec_summary import XSpecSummarizer
from .validation.models import SeverityPolicy
from .validation.service import OscalService
from .web.summaries import SummaryRepository

logger = logging.getLogger(__name__)


@dataclass
class Session:
    config: OscalCheckConfig
    engine: RuleEngine
    registry: DocumentTypeRegistry
    gateway: RuleEngineGateway
    policy: SeverityPolicy

    @classmethod
    def create(cls, config: Optional[OscalCheckConfig] = None,
               engine: Optional[RuleEngine] = None) -> "Session":
        config = config or OscalCheckConfig.from_env()
        engine = engine or LxmlRuleEngine(ArtifactSource(config.rules_base),
                                          config.rule_artifact_pattern)

        registry = DocumentTypeRegistry.from_artifacts(config.conversion_artifact_dir)
        gateway = RuleEngineGateway(engine, ArtifactSource(config.content_base))
        policy = SeverityPolicy.from_roles(config.blocking_roles)

        logger.debug(f"Session created: rules={config.rules_base} content={config.content_base} "
                     f"ruleset={config.ruleset.value}")
        return cls(config, engine, registry, gateway, policy)

    def oscal_service(self) -> OscalService:
        return OscalService(self.registry, self.gateway, self.config.ruleset, self.policy)

    def schematron_summarizer(self) -> SchematronSummarizer:
        return SchematronSummarizer(ArtifactSource(self.config.schematron_dir),
                                    self.config.summary_output_dir)

    def assertion_view_generator(self) -> AssertionViewGenerator:
        return AssertionViewGenerator(ArtifactSource(self.config.schematron_dir),
                                      self.config.summary_output_dir)

    def xspec_summarizer(self) -> XSpecSummarizer:
        return XSpecSummarizer(ArtifactSource(self.config.xspec_dir),
                               self.config.summary_output_dir)

    def summary_repository(self) -> SummaryRepository:
        return SummaryRepository(ArtifactSource(self.config.summary_output_dir))
