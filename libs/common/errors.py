"""Base exception types shared by the service and its HTTP layer."""


class ShopError(Exception):
    """Base for domain errors that map onto an HTTP status.

    Raised by the service layer; ``libs.common.error_handler`` renders them as
    ``{"detail": ...}`` responses.
    """

    status_code: int = 400
    default_detail: str = "Request could not be processed"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationFailed(ShopError):
    status_code = 400
    default_detail = "Invalid request"


class NotFound(ShopError):
    status_code = 404
    default_detail = "Not found"


class Conflict(ShopError):
    status_code = 409
    default_detail = "Conflict"
