"""Error kinds raised by the store, the importer and the exporter."""


class VisitorLogError(Exception):
    """Base class for every error this package raises on purpose."""


class MalformedInput(VisitorLogError):
    """A row or record is missing required fields. Recovered by skipping it."""


class NotFound(VisitorLogError):
    """A visitor id is not present in the store."""


class NoTargetFile(VisitorLogError):
    """An export was attempted before any CSV file was opened."""


class PersistenceFailure(VisitorLogError):
    """The durable snapshot could not be written."""


class TransactionAborted(VisitorLogError):
    """A batch failed midway and was rolled back."""

    def __init__(self, message, cause=None):
        super().__init__(message)
        self.cause = cause
