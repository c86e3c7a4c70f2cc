"""Domain errors raised by the engine and mapped to HTTP responses by the app."""


class TraceGateError(Exception):
    """Base class for engine errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(TraceGateError):
    """Referenced manifest or node does not exist."""

    status_code = 404


class ValidationError(TraceGateError):
    """Missing or malformed required input."""

    status_code = 400


class MissingReasonError(ValidationError):
    def __init__(self, message: str = "Reason is required for rejection"):
        super().__init__(message)


class ConflictError(TraceGateError):
    """Operation conflicts with the current state."""

    status_code = 409


class AlreadyApprovedError(ConflictError):
    def __init__(self, gxp_id: str):
        super().__init__(f"Node {gxp_id} is already approved")
        self.gxp_id = gxp_id
