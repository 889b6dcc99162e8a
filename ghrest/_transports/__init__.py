from ._httpx import AsyncHttpxBackend, AsyncHttpxResponse, HttpxBackend, HttpxResponse
from .base import AsyncBackend, AsyncBackendResponse, Backend, BackendResponse

__all__ = [
    "AsyncBackend",
    "AsyncBackendResponse",
    "AsyncHttpxBackend",
    "AsyncHttpxResponse",
    "Backend",
    "BackendResponse",
    "HttpxBackend",
    "HttpxResponse",
]
