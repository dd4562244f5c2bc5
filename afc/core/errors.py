"""
Domain errors raised by the contest services.

User-facing errors (NotFound, NotAuthorized, NotEligible, InvalidOperation)
propagate to the caller. ConcurrentFinalizationLost is an
infrastructure race that the finalization service absorbs and logs.
"""


class ContestPlatformError(Exception):
    """Base class for all contest platform errors"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(ContestPlatformError):
    """Referenced contest, entry, comment or user does not exist (or is not visible)"""
    status_code = 404


class NotAuthorized(ContestPlatformError):
    """Actor does not match the user the mutation is scoped to"""
    status_code = 403


class NotEligible(ContestPlatformError):
    """Contest is not in the status the operation requires"""
    status_code = 409


class InvalidOperation(ContestPlatformError):
    """Request violates a business rule (duplicate entry, bad reaction type, ...)"""
    status_code = 400


class PartialWriteFailure(ContestPlatformError):
    """A finalization write failed; the transaction was rolled back and may be retried"""
    status_code = 500


class ConcurrentFinalizationLost(ContestPlatformError):
    """Another caller set finalized_at first"""
    status_code = 200
