"""Public shared HTTP API for internal Grove packages."""

from .client import AsyncHttpClient, response_text
from .errors import HttpError, HttpRequestError

__all__ = [
    "AsyncHttpClient",
    "HttpError",
    "HttpRequestError",
    "response_text",
]
