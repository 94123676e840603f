"""
JSON schema conformance checks for object-serialized OSCAL documents

A document that fails these checks cannot be represented as structural markup.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import jsonschema
from jsonschema import Draft7Validator

from ..errors import ConversionError

logger = logging.getLogger(__name__)


class SchemaValidator:
    """Validator for OSCAL JSON documents using a Draft 7 schema"""

    def __init__(self, schema_path: Path):
        self.schema_path = Path(schema_path)
        self.schema = self._load_schema()
        self._validator = Draft7Validator(self.schema)

    def _load_schema(self) -> Dict[str, Any]:
        """Load and check the schema file"""
        try:
            with open(self.schema_path, 'r', encoding='utf-8') as f:
                schema = json.load(f)

            # Validate the schema itself
            Draft7Validator.check_schema(schema)

        except (OSError, json.JSONDecodeError, jsonschema.SchemaError) as e:
            raise ConversionError(f"Invalid schema {self.schema_path}", [str(e)]) from e

        logger.debug(f"Loaded schema: {self.schema_path.name}")
        return schema

    def iter_diagnostics(self, data: Any) -> List[str]:
        """Collect every violation as 'message at path', in path order"""
        errors = sorted(
            self._validator.iter_errors(data),
            key=lambda error: [str(p) for p in error.absolute_path]
        )

        diagnostics = []
        for error in errors:
            path = ' -> '.join(str(p) for p in error.absolute_path) or '<root>'
            diagnostics.append(f"{error.message} at {path}")
        return diagnostics

    def check(self, data: Any) -> None:
        """Raise ConversionError if data does not conform"""
        diagnostics = self.iter_diagnostics(data)
        if diagnostics:
            logger.info(f"Schema validation failed for {self.schema_path.name}: "
                        f"{len(diagnostics)} violations")
            for diagnostic in diagnostics:
                logger.debug(f"  {diagnostic}")
            raise ConversionError(
                f"Document does not conform to {self.schema_path.name}", diagnostics
            )
