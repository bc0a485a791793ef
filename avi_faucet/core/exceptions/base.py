from typing import Any, Optional


class FaucetError(Exception):
    def __init__(
        self,
        message: str,
        detail: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class ConfigurationError(FaucetError):
    """A required credential or setting is missing or unusable."""

    def __init__(self, message: str = "Configuration error", detail: Optional[Any] = None):
        super().__init__(message=message, detail=detail)


class InvalidRequestError(FaucetError):
    """Malformed address, unknown network, unsupported token."""

    def __init__(self, message: str = "Invalid request", detail: Optional[Any] = None):
        super().__init__(message=message, detail=detail)
