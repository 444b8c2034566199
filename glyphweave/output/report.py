"""
GlyphWeave Report Generator
============================

JSON export of engine reports and individual analysis results. Every
payload is wrapped with the report type, tool version and generation
timestamp so files from different runs can be compared side by side.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from shared.logger import GlyphLogger

from glyphweave import __version__

logger = GlyphLogger("glyphweave.report")


class _GlyphJSONEncoder(json.JSONEncoder):
    """JSON encoder for pydantic models, sets and enums."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, BaseModel):
            return obj.model_dump(mode="json")
        if isinstance(obj, (set, frozenset)):
            return sorted(obj)
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, datetime):
            return obj.isoformat()
        return super().default(obj)


class GlyphWeaveReportGenerator:
    """Serialises GlyphWeave results to JSON.

    Usage::

        generator = GlyphWeaveReportGenerator()
        generator.generate_json(report, "output/report.json")
        text = generator.dumps(analysis, report_type="transition_graph")
    """

    def to_dict(self, payload: Any, report_type: str = "corpus_report") -> dict[str, Any]:
        """Wrap *payload* in the standard report envelope."""
        data = json.loads(json.dumps(payload, cls=_GlyphJSONEncoder))
        return {
            "report_type": report_type,
            "tool": "glyphweave",
            "version": __version__,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "data": data,
        }

    def dumps(self, payload: Any, report_type: str = "corpus_report") -> str:
        return json.dumps(
            self.to_dict(payload, report_type),
            indent=2,
            ensure_ascii=False,
        )

    def generate_json(
        self,
        payload: Any,
        output_path: str | Path,
        report_type: str = "corpus_report",
    ) -> str:
        """Write *payload* as a JSON report.

        Returns:
            Absolute path to the generated report.
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as fh:
            fh.write(self.dumps(payload, report_type))
            fh.write("\n")

        logger.info(f"JSON report generated: {path.resolve()}")
        return str(path.resolve())
