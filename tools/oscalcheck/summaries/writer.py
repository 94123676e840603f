"""
Summary output writer

Every summary command writes all of its files or none of them. Content is serialized
before anything touches the output directory, files are staged next to their targets
and then moved into place, replacing earlier versions.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, List, Mapping

logger = logging.getLogger(__name__)


def dump_json(data: Any) -> str:
    """Deterministic JSON text for a summary"""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


class SummaryWriter:
    """Writes a set of named JSON outputs into one directory"""

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)

    def write_all(self, outputs: Mapping[str, Any]) -> List[Path]:
        serialized = {name: dump_json(data) for name, data in outputs.items()}

        self.output_dir.mkdir(parents=True, exist_ok=True)
        staged = []
        try:
            for name, text in serialized.items():
                target = self.output_dir / name
                temp = target.with_name(f".{target.name}.tmp")
                temp.write_text(text, encoding="utf-8")
                staged.append((temp, target))
        except OSError:
            for temp, _ in staged:
                temp.unlink(missing_ok=True)
            raise

        written = []
        for temp, target in staged:
            os.replace(temp, target)
            logger.info(f"Generated: {target}")
            written.append(target)
        return written
