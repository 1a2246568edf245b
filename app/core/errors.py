"""ADBOARD — Error Taxonomy.

Core components raise these; the HTTP layer maps them to status codes
in `app.main`.
"""


class AdboardError(Exception):
    """Base class for all application errors."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(AdboardError):
    """Malformed or out-of-range input (negative counters, bad uploads)."""

    status_code = 422


class NotFound(AdboardError):
    """Raised by the record store for unknown ids."""

    status_code = 404

    def __init__(self, table: str, record_id: str):
        self.table = table
        self.record_id = record_id
        super().__init__(f"{table} record '{record_id}' not found")


class AssignmentError(AdboardError):
    """Customer assignment precondition violated."""

    status_code = 400


class AssignmentConflict(AssignmentError):
    """Customer changed since the caller last read it."""

    status_code = 409


class StorageError(AdboardError):
    """Raised when the blob storage backend fails."""

    status_code = 502

    def __init__(self, message: str, upstream_status: int = 0):
        self.upstream_status = upstream_status
        if upstream_status in (404, 409):
            self.status_code = upstream_status
        super().__init__(message)
