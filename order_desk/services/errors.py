"""
Service-level exceptions.

Routes translate these into HTTP responses; the services never build
responses themselves.
"""


class OrderServiceError(Exception):
    """Base class for errors raised by the ordering services."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequest(OrderServiceError):
    """The caller sent something the service cannot act on."""

    status_code = 400


class PersistenceFailure(OrderServiceError):
    """The store rejected or lost the unit of work. Details stay in the logs."""

    status_code = 500
