from .client import LadderApiClient, parse_response
from .errors import (
    ApiError,
    ClientError,
    DecodeError,
    ServerError,
    TransportError,
    error_messages,
    format_user_friendly_error,
    parse_error_message,
)
from .models import ApiResponse, Request, RetryPolicy

__all__ = [
    "LadderApiClient",
    "parse_response",
    "ApiError",
    "ClientError",
    "DecodeError",
    "ServerError",
    "TransportError",
    "error_messages",
    "format_user_friendly_error",
    "parse_error_message",
    "ApiResponse",
    "Request",
    "RetryPolicy",
]
