"""Exception hierarchy shared by the record store, renderer and HTTP layer."""


class EPassError(RuntimeError):
    """Domain-specific exception for service errors."""


class VisitorValidationError(EPassError):
    """A submission is missing a field or carries a malformed value."""


class StorageError(EPassError):
    """The database or the artifact directory could not be written."""


class ArtifactWriteError(StorageError):
    """The pass PDF could not be written to disk."""


class PassNotFoundError(EPassError):
    """No rendered pass exists under the requested filename."""
