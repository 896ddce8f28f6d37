class WalletError(Exception):
    """
    Base class for failures surfaced to clients as ``{"success": false, "message": ...}``.
    """

    status_code = 400
    default_message = "Invalid request"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(WalletError):
    default_message = "Invalid input"


class Unauthorized(WalletError):
    status_code = 403
    default_message = "Not authorized"


class NotFound(WalletError):
    status_code = 404
    default_message = "Not found"


class InsufficientBalance(WalletError):
    default_message = "Insufficient balance"


class BelowMinimum(WalletError):
    default_message = "Minimum withdrawal 1000 coins"


class SignatureMismatch(WalletError):
    default_message = "Invalid payment signature"


class ServerError(WalletError):
    status_code = 500
    default_message = "Server error"


class GatewayError(Exception):
    """Raised by the gateway client when an order call fails or is refused."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)
