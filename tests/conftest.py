"""Shared fixtures: small OSCAL documents, rule artifacts and XSpec suites."""

import asyncio
import copy
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from oscalcheck.artifacts import ArtifactSource
from oscalcheck.config import OscalCheckConfig
from oscalcheck.documents.registry import DocumentTypeRegistry
from oscalcheck.documents.types import DocumentType
from oscalcheck.errors import RuleEngineError
from oscalcheck.rules.engine import RawAssertion, RuleArtifactKey, RuleEngine
from oscalcheck.rules.gateway import RuleEngineGateway

OSCAL_NS = "http://csrc.nist.gov/ns/oscal/1.0"

SSP_JSON: Dict[str, Any] = {
    "system-security-plan": {
        "uuid": "11111111-2222-4333-8444-555555555555",
        "metadata": {
            "title": "Example Cloud Service SSP",
            "last-modified": "2024-01-01T00:00:00Z",
            "version": "1.0",
            "oscal-version": "1.1.2",
            "props": [{"name": "marking", "value": "cui"}]
        },
        "import-profile": {"href": "#fedramp-moderate"},
        "system-characteristics": {
            "system-ids": [{"identifier-type": "https://fedramp.gov", "id": "F00000000"}],
            "system-name": "Example Cloud Service",
            "description": "An example system.\n\nIt has two paragraphs.",
            "system-information": {
                "information-types": [{
                    "uuid": "21111111-2222-4333-8444-555555555555",
                    "title": "Information Security",
                    "description": "Security information.",
                    "categorizations": [{
                        "system": "https://doi.org/10.6028/NIST.SP.800-60v2r1",
                        "information-type-ids": ["C.3.5.8"]
                    }]
                }]
            },
            "status": {"state": "operational"},
            "authorization-boundary": {"description": "The authorization boundary."}
        },
        "system-implementation": {
            "users": [{"uuid": "31111111-2222-4333-8444-555555555555", "role-ids": ["admin"]}],
            "components": [{
                "uuid": "41111111-2222-4333-8444-555555555555",
                "type": "this-system",
                "title": "This System",
                "description": "The system as a whole.",
                "status": {"state": "operational"}
            }]
        },
        "control-implementation": {
            "description": "Control implementations.",
            "implemented-requirements": [{
                "uuid": "51111111-2222-4333-8444-555555555555",
                "control-id": "ac-1"
            }]
        }
    }
}

METADATA: Dict[str, Any] = {
    "title": "Example Cloud Service",
    "last-modified": "2024-01-01T00:00:00Z",
    "version": "1.0",
    "oscal-version": "1.1.2",
    "roles": [{"id": "assessor", "title": "Assessor"}],
    "parties": [{
        "uuid": "91111111-2222-4333-8444-555555555555",
        "type": "organization",
        "name": "Example Assessment Organization",
        "external-ids": [{"scheme": "https://example.test/ns", "id": "EXT-1"}]
    }],
    "responsible-parties": [{
        "role-id": "assessor",
        "party-uuids": ["91111111-2222-4333-8444-555555555555"]
    }]
}

SAP_JSON: Dict[str, Any] = {
    "assessment-plan": {
        "uuid": "81111111-2222-4333-8444-555555555555",
        "metadata": METADATA,
        "import-ssp": {"href": "ssp.json"},
        "reviewed-controls": {
            "control-selections": [{
                "include-controls": [{"control-id": "ac-1", "statement-ids": ["ac-1_smt.a"]}]
            }]
        },
        "tasks": [{
            "uuid": "a1111111-2222-4333-8444-555555555555",
            "type": "milestone",
            "title": "Kickoff",
            "timing": {"on-date": {"date": "2024-02-01T00:00:00Z"}}
        }]
    }
}

SAR_JSON: Dict[str, Any] = {
    "assessment-results": {
        "uuid": "b1111111-2222-4333-8444-555555555555",
        "metadata": METADATA,
        "import-ap": {"href": "sap.json"},
        "results": [{
            "uuid": "b2111111-2222-4333-8444-555555555555",
            "title": "Annual assessment",
            "description": "Results of the annual assessment.",
            "start": "2024-03-01T00:00:00Z",
            "reviewed-controls": {"control-selections": [{"include-all": {}}]},
            "observations": [{
                "uuid": "b3111111-2222-4333-8444-555555555555",
                "description": "TLS 1.0 is enabled.",
                "methods": ["TEST"],
                "types": ["finding"],
                "subjects": [{
                    "subject-uuid": "41111111-2222-4333-8444-555555555555",
                    "type": "component"
                }],
                "collected": "2024-03-02T00:00:00Z"
            }],
            "risks": [{
                "uuid": "b4111111-2222-4333-8444-555555555555",
                "title": "Weak TLS",
                "description": "Legacy protocols are accepted.",
                "statement": "Traffic could be downgraded.",
                "status": "open",
                "threat-ids": [{"system": "https://fedramp.gov", "href": "#threats", "id": "T-1"}],
                "remediations": [{
                    "uuid": "b5111111-2222-4333-8444-555555555555",
                    "lifecycle": "planned",
                    "title": "Upgrade TLS",
                    "description": "Disable TLS 1.0."
                }]
            }],
            "findings": [{
                "uuid": "b6111111-2222-4333-8444-555555555555",
                "title": "Weak TLS finding",
                "description": "Legacy TLS observed.",
                "target": {
                    "type": "objective-id",
                    "target-id": "sc-8_obj",
                    "status": {"state": "not-satisfied"}
                },
                "related-risks": [{"risk-uuid": "b4111111-2222-4333-8444-555555555555"}]
            }]
        }]
    }
}

POAM_JSON: Dict[str, Any] = {
    "plan-of-action-and-milestones": {
        "uuid": "61111111-2222-4333-8444-555555555555",
        "metadata": METADATA,
        "import-ssp": {"href": "ssp.json"},
        "system-id": {"identifier-type": "https://fedramp.gov", "id": "F00000000"},
        "risks": [{
            "uuid": "62111111-2222-4333-8444-555555555555",
            "title": "Unpatched web tier",
            "description": "The web tier runs an outdated release.",
            "statement": "Known vulnerabilities are exploitable.",
            "status": "open",
            "mitigating-factors": [{
                "uuid": "63111111-2222-4333-8444-555555555555",
                "implementation-uuid": "51111111-2222-4333-8444-555555555555",
                "description": "The web tier sits behind a WAF."
            }],
            "remediations": [{
                "uuid": "64111111-2222-4333-8444-555555555555",
                "lifecycle": "planned",
                "title": "Patch",
                "description": "Apply the vendor release."
            }]
        }],
        "poam-items": [{
            "uuid": "71111111-2222-4333-8444-555555555555",
            "title": "Patch the web tier",
            "description": "Upgrade the web tier.",
            "associated-risks": [{"risk-uuid": "62111111-2222-4333-8444-555555555555"}]
        }]
    }
}

JSON_DOCUMENTS: Dict[DocumentType, Dict[str, Any]] = {
    DocumentType.SSP: SSP_JSON,
    DocumentType.SAP: SAP_JSON,
    DocumentType.SAR: SAR_JSON,
    DocumentType.POAM: POAM_JSON,
}

SSP_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<system-security-plan xmlns="{OSCAL_NS}" uuid="11111111-2222-4333-8444-555555555555">
  <metadata>
    <title>Example Cloud Service SSP</title>
  </metadata>
  <import-profile href="#fedramp-moderate"/>
</system-security-plan>
"""

SSP_XML_WITHOUT_METADATA = f"""<?xml version="1.0" encoding="UTF-8"?>
<system-security-plan xmlns="{OSCAL_NS}" uuid="11111111-2222-4333-8444-555555555555">
  <import-profile href="#fedramp-moderate"/>
</system-security-plan>
"""

POAM_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<plan-of-action-and-milestones xmlns="{OSCAL_NS}" uuid="61111111-2222-4333-8444-555555555555">
  <poam-item uuid="71111111-2222-4333-8444-555555555555">
    <title>Patch the web tier</title>
  </poam-item>
  <poam-item>
    <title>Rotate keys</title>
  </poam-item>
</plan-of-action-and-milestones>
"""

# Rules evaluated by the lxml engine against SSPs
SSP_RULES_SCH = f"""<?xml version="1.0" encoding="UTF-8"?>
<sch:schema xmlns:sch="http://purl.oclc.org/dsdl/schematron">
  <sch:ns prefix="o" uri="{OSCAL_NS}"/>
  <sch:pattern id="document">
    <sch:rule context="o:system-security-plan">
      <sch:assert id="has-metadata" role="error" test="o:metadata">An SSP must have metadata.</sch:assert>
      <sch:assert id="has-back-matter" role="warning" test="o:back-matter">An SSP should have back-matter.</sch:assert>
      <sch:report id="has-import-profile" role="information" test="o:import-profile">The SSP imports a profile.</sch:report>
    </sch:rule>
  </sch:pattern>
</sch:schema>
"""

# Precompiled rules emitting SVRL, with the reference dataset parameters
POAM_RULES_XSL = f"""<?xml version="1.0" encoding="UTF-8"?>
<xsl:stylesheet version="1.0"
    xmlns:xsl="http://www.w3.org/1999/XSL/Transform"
    xmlns:svrl="http://purl.oclc.org/dsdl/svrl"
    xmlns:o="{OSCAL_NS}">
  <xsl:param name="baselines-base-path" select="''"/>
  <xsl:param name="registry-base-path" select="''"/>
  <xsl:template match="/">
    <svrl:schematron-output>
      <xsl:for-each select="o:plan-of-action-and-milestones/o:poam-item">
        <xsl:if test="not(@uuid)">
          <svrl:failed-assert id="poam-item-has-uuid" role="error" test="@uuid">
            <xsl:attribute name="location">
              <xsl:value-of select="concat('/Q{{{OSCAL_NS}}}plan-of-action-and-milestones[1]/Q{{{OSCAL_NS}}}poam-item[', position(), ']')"/>
            </xsl:attribute>
            <svrl:text>A POA&amp;M item must have a   uuid.</svrl:text>
          </svrl:failed-assert>
        </xsl:if>
      </xsl:for-each>
      <svrl:successful-report id="baselines-location" role="information" test="true()">
        <svrl:text>Baselines at <xsl:value-of select="$baselines-base-path"/></svrl:text>
      </svrl:successful-report>
    </svrl:schematron-output>
  </xsl:template>
</xsl:stylesheet>
"""

# Rule catalog source used by the summary generators
CATALOG_SCH = """<?xml version="1.0" encoding="UTF-8"?>
<sch:schema xmlns:sch="http://purl.oclc.org/dsdl/schematron"
            xmlns:fedramp="https://fedramp.gov/ns/oscal">
  <sch:title>FedRAMP Rules</sch:title>
  <sch:ns prefix="o" uri="http://csrc.nist.gov/ns/oscal/1.0"/>
  <sch:pattern id="phase2">
    <sch:title>Phase 2 checks</sch:title>
    <sch:rule context="o:metadata">
      <sch:assert id="has-title" role="error" test="o:title"
                  fedramp:specific="true" diagnostics="has-title-diagnostic">A document
        must have a <sch:name/> title.</sch:assert>
      <sch:assert role="error" test="o:version">Assertion without an id.</sch:assert>
      <sch:report id="party-count" role="information" test="o:party">There are
        <sch:value-of select="count(o:party)"/> parties.</sch:report>
    </sch:rule>
  </sch:pattern>
  <sch:pattern id="resources">
    <sch:rule context="o:back-matter">
      <sch:assert id="has-resource" role="warning" test="o:resource">Back matter has resources.</sch:assert>
      <sch:assert id="has-title" role="warning" test="o:title">Duplicate id.</sch:assert>
    </sch:rule>
  </sch:pattern>
  <sch:diagnostics>
    <sch:diagnostic id="has-title-diagnostic">The <sch:name/> element has no title.</sch:diagnostic>
  </sch:diagnostics>
</sch:schema>
"""

XSPEC = f"""<?xml version="1.0" encoding="UTF-8"?>
<x:description xmlns:x="http://www.jenitennison.com/xslt/xspec"
               xmlns:o="{OSCAL_NS}"
               schematron="../../src/rules/ssp.sch">
  <x:scenario label="metadata">
    <x:context>
      <system-security-plan xmlns="{OSCAL_NS}">
        <metadata/>
      </system-security-plan>
    </x:context>
    <x:expect-not-assert id="has-metadata" label="metadata is present"/>
    <x:scenario label="missing">
      <x:context>
        <system-security-plan xmlns="{OSCAL_NS}"/>
      </x:context>
      <x:expect-assert id="has-metadata" label="metadata is missing"/>
    </x:scenario>
    <x:scenario>
      <x:label>inherits   context</x:label>
      <x:expect-report id="has-import-profile"/>
    </x:scenario>
  </x:scenario>
  <x:scenario label="not ready" pending="rules under review">
    <x:context href="pending.xml"/>
    <x:expect-assert id="pending-assertion"/>
  </x:scenario>
  <x:pending label="wrapped">
    <x:scenario label="also not ready">
      <x:expect-assert id="wrapped-assertion"/>
    </x:scenario>
  </x:pending>
  <x:scenario label="external example">
    <x:context href="examples/ssp.xml"/>
    <x:expect-valid/>
  </x:scenario>
</x:description>
"""


class StubRuleEngine(RuleEngine):
    """Rule engine returning canned assertions and recording its calls"""

    def __init__(self, assertions: Optional[List[RawAssertion]] = None,
                 failures: int = 0, delay: float = 0.0):
        self.assertions = list(assertions or [])
        self.failures = failures
        self.delay = delay
        self.loads: List[RuleArtifactKey] = []
        self.evaluations: List[Dict[str, Any]] = []

    async def load(self, key: RuleArtifactKey) -> Any:
        self.loads.append(key)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.failures:
            self.failures -= 1
            raise RuleEngineError(f"Could not load rule artifact for {key.document_type.value}")
        return ("compiled", key)

    async def evaluate(self, compiled: Any, document: Any, parameters: Any) -> List[RawAssertion]:
        self.evaluations.append({"compiled": compiled, "document": document,
                                 "parameters": dict(parameters)})
        return list(self.assertions)


@pytest.fixture
def ssp_json() -> Dict[str, Any]:
    return copy.deepcopy(SSP_JSON)


@pytest.fixture(scope="session")
def registry() -> DocumentTypeRegistry:
    return DocumentTypeRegistry.from_artifacts()


@pytest.fixture
def stub_engine() -> StubRuleEngine:
    return StubRuleEngine()


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    content = tmp_path / "content"
    for ruleset in ("rev4", "rev5"):
        (content / ruleset / "baselines" / "xml").mkdir(parents=True)
        (content / ruleset / "resources" / "xml").mkdir(parents=True)
    return content


@pytest.fixture
def gateway(stub_engine: StubRuleEngine, content_dir: Path) -> RuleEngineGateway:
    return RuleEngineGateway(stub_engine, ArtifactSource(content_dir))


@pytest.fixture
def rules_dir(tmp_path: Path) -> Path:
    """Rules base with a Schematron source for SSPs and compiled XSLT for POA&Ms"""
    rules = tmp_path / "rules"
    (rules / "rev5").mkdir(parents=True)
    (rules / "rev5" / "ssp.sch").write_text(SSP_RULES_SCH, encoding="utf-8")
    (rules / "rev5" / "poam.xsl").write_text(POAM_RULES_XSL, encoding="utf-8")
    return rules


@pytest.fixture
def schematron_dir(tmp_path: Path) -> Path:
    source = tmp_path / "src" / "rules"
    source.mkdir(parents=True)
    for document_type in DocumentType:
        (source / f"{document_type.value}.sch").write_text(CATALOG_SCH, encoding="utf-8")
    return source


@pytest.fixture
def xspec_dir(tmp_path: Path) -> Path:
    source = tmp_path / "test" / "rules"
    source.mkdir(parents=True)
    (source / "ssp.xspec").write_text(XSPEC, encoding="utf-8")
    return source


@pytest.fixture
def config(rules_dir: Path, content_dir: Path, schematron_dir: Path,
           xspec_dir: Path, tmp_path: Path) -> OscalCheckConfig:
    return OscalCheckConfig(
        rules_base=str(rules_dir),
        content_base=str(content_dir),
        rule_artifact_pattern="{ruleset}/{document_type}.sch",
        schematron_dir=schematron_dir,
        xspec_dir=xspec_dir,
        summary_output_dir=tmp_path / "dist",
    )
