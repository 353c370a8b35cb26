"""HTTP client for link2md."""

from .client import AsyncHttpClient, ContentTooLargeError
from .protocols import HttpClient, HttpResponse

__all__ = [
    "AsyncHttpClient",
    "ContentTooLargeError",
    "HttpClient",
    "HttpResponse",
]
