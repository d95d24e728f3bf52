from __future__ import annotations


class StockDropError(Exception):
    kind = "error"
    http_status = 500

    def __init__(self, message: str, status_code: int = 0, details: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details

    def __str__(self) -> str:
        if self.status_code:
            return f"{self.message} (status {self.status_code})"
        return self.message


class ConfigurationError(StockDropError):
    """A required setting (usually the market-data API key) is absent."""

    kind = "configuration"
    http_status = 503


class FetchError(StockDropError):
    kind = "fetch"
    http_status = 502

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429

    @property
    def is_auth_error(self) -> bool:
        return self.status_code in (401, 403)

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_server_error(self) -> bool:
        return self.status_code >= 500


class ParseError(StockDropError):
    kind = "parse"
    http_status = 502


class AuthenticationError(StockDropError):
    kind = "authentication"
    http_status = 401


def response_status(exc: StockDropError) -> int:
    if isinstance(exc, FetchError) and exc.is_rate_limited:
        return 429
    return exc.http_status
