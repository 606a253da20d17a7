from typing import Any


class IngestionError(Exception):
    status_code = 500
    message = "Ingestion failed"

    def __init__(self, message: str = None, body: Any = None):
        super().__init__(message or self.message)
        self._body = body

    @property
    def body(self) -> Any:
        if self._body is not None:
            return self._body
        return {"error": self.message}


class InvalidPayload(IngestionError):
    status_code = 400
    message = "Invalid telemetry data"


class DuplicateEvent(IngestionError):
    status_code = 409
    message = "Duplicate telemetry event"


class OwnerLookupFailed(IngestionError):
    status_code = 500
    message = "Failed to fetch owner"


class MutationRejected(IngestionError):
    """The backend answered the mutation with field-level errors.

    The raw GraphQL error list is returned to the caller unchanged.
    """

    status_code = 400
    message = "Telemetry mutation rejected"

    def __init__(self, errors: list):
        super().__init__(body=errors)
        self.errors = errors


class WriteFailed(IngestionError):
    status_code = 500
    message = "Failed to create telemetry"


class GraphQLTransportError(Exception):
    pass


class GraphQLOperationError(Exception):
    def __init__(self, operation: str, errors: list):
        super().__init__(f"{operation} failed: {errors}")
        self.operation = operation
        self.errors = errors
