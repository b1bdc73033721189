"""
Visitor e-pass package: record storage, pass rendering and the pipeline
that ties them together.
"""

from .config import Settings, load_settings
from .errors import (
    ArtifactWriteError,
    EPassError,
    PassNotFoundError,
    StorageError,
    VisitorValidationError,
)
from .records import RecordStore, VisitorRecord
from .renderer import PassArtifact, PassRenderer
from .service import EPassService

__all__ = [
    "ArtifactWriteError",
    "EPassError",
    "EPassService",
    "PassArtifact",
    "PassNotFoundError",
    "PassRenderer",
    "RecordStore",
    "Settings",
    "StorageError",
    "VisitorRecord",
    "VisitorValidationError",
    "load_settings",
]
