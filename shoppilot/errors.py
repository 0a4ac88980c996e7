from __future__ import annotations


class ShopPilotError(Exception):
    """Base class for errors rendered as ``{message, error}`` JSON bodies."""

    status_code = 500
    message = "Server error"

    def __init__(self, detail: str = "", *, message: str | None = None) -> None:
        super().__init__(detail or self.message)
        self.detail = detail or self.message
        if message is not None:
            self.message = message


class InvalidQuery(ShopPilotError):
    status_code = 400
    message = "Invalid query"


class ConfigurationError(ShopPilotError):
    status_code = 503
    message = "API configuration error"


class UpstreamError(ShopPilotError):
    status_code = 500
    message = "Failed to get recommendations"


class ParseError(ShopPilotError):
    """Ranking output could not be turned into recommendations.

    Always recovered inside the recommendation pipeline.
    """

    message = "Unparseable ranking response"


class NotFound(ShopPilotError):
    status_code = 404
    message = "Not found"


class Forbidden(ShopPilotError):
    status_code = 403
    message = "Not authorized"


class Conflict(ShopPilotError):
    status_code = 400
    message = "Request conflicts with existing data"
