"""
High-level service that exposes the visitor e-pass pipeline to the FastAPI layer.

Responsibilities
----------------
* validate and persist a visitor submission (`RecordStore`)
* render the pass for the persisted record (`PassRenderer`)
* resolve stored passes for download
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Tuple

from .errors import PassNotFoundError
from .records import RecordStore, VisitorRecord
from .renderer import PassArtifact, PassRenderer

logger = logging.getLogger(__name__)


class EPassService:
    def __init__(self, records: RecordStore, renderer: PassRenderer):
        self.records = records
        self.renderer = renderer

    def register_visitor(self, fields: Mapping[str, Any]) -> Tuple[VisitorRecord, PassArtifact]:
        """
        Persist a submission, then render its pass.

        The record is written before rendering starts because its identifier
        names the pass file. A failed render leaves the record in place.
        """
        record = self.records.submit(fields)
        try:
            artifact = self.renderer.render(record)
        except Exception:
            logger.warning("Visitor record %s has no pass; rendering failed", record.id)
            raise
        return record, artifact

    def fetch_pass(self, filename: str) -> Path:
        path = self.renderer.locate(filename)
        if path is None:
            raise PassNotFoundError(f"Pass '{filename}' not found")
        return path
