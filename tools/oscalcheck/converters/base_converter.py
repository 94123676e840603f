"""
Base converter class for OSCAL representations

Provides artifact loading and scalar handling shared by all converters.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict

from lxml import etree

from ..documents.types import OSCAL_NAMESPACE
from ..errors import ConversionError

logger = logging.getLogger(__name__)

ARTIFACT_DIR = Path(__file__).parent / "artifacts"


class BaseConverter(ABC):
    """Base class for object to structural converters"""

    OSCAL_VERSION = "1.1.3"
    NAMESPACE = OSCAL_NAMESPACE

    def __init__(self, artifact_dir: Path = ARTIFACT_DIR):
        self.artifact_dir = Path(artifact_dir)

    def qualify(self, name: str) -> str:
        """Qualified element name in the OSCAL namespace"""
        return f"{{{self.NAMESPACE}}}{name}"

    def scalar_text(self, value: Any, where: str) -> str:
        """Render a JSON scalar as XML text"""
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float, str)):
            return str(value)
        raise ConversionError(
            "Value cannot be represented as text",
            [f"expected a string, number or boolean at {where}, got {type(value).__name__}"]
        )

    @abstractmethod
    def convert(self, document: Dict[str, Any]) -> etree._ElementTree:
        """Convert an object document to structural markup"""
        pass

    def _load_artifact(self, artifact_name: str) -> Dict[str, Any]:
        """Load a declarative conversion artifact, following 'include' entries"""
        artifact_path = self.artifact_dir / artifact_name

        try:
            with open(artifact_path, 'r', encoding='utf-8') as f:
                artifact = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConversionError(f"Could not load conversion artifact {artifact_path}", [str(e)]) from e

        for include in artifact.pop("include", []):
            base = self._load_artifact(include)
            artifact = _merge(base, artifact)

        logger.debug(f"Loaded conversion artifact: {artifact_name}")
        return artifact


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge an artifact over the one it includes; lists extend, mappings update"""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, list) and isinstance(base.get(key), list):
            merged[key] = base[key] + [v for v in value if v not in base[key]]
        elif isinstance(value, dict) and isinstance(base.get(key), dict):
            merged[key] = _merge(base[key], value)
        else:
            merged[key] = value
    return merged
