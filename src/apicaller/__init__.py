from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("apicaller")
except PackageNotFoundError:
    __version__ = "unknown"

from .api_client import APIClient
from .exceptions import (
    APIClientError,
    ConfigurationError,
    InvalidMethod,
    InvalidPayload,
    InvalidURL,
    MissingBaseURL,
    ResponseParseError,
    TransportError,
    UnsupportedContentType,
    UnsupportedFormat,
)
from .models import CallOutcome, CallRecord, ClientConfig, ResultKind
from .transport import HttpRequest, HttpTransport, RequestsTransport

__all__ = [
    "APIClient",
    "APIClientError",
    "CallOutcome",
    "CallRecord",
    "ClientConfig",
    "ConfigurationError",
    "HttpRequest",
    "HttpTransport",
    "InvalidMethod",
    "InvalidPayload",
    "InvalidURL",
    "MissingBaseURL",
    "RequestsTransport",
    "ResponseParseError",
    "ResultKind",
    "TransportError",
    "UnsupportedContentType",
    "UnsupportedFormat",
    "__version__",
]
