from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, FrozenSet, Optional, Union

from pydantic import AnyUrl, TypeAdapter, ValidationError

from . import __version__
from .exceptions import InvalidMethod, InvalidURL, UnsupportedContentType, UnsupportedFormat

_URL_ADAPTER = TypeAdapter(AnyUrl)

Scalar = Union[str, int, float, bool]


class APIClientBase(ABC):
    """Abstract base class defining the interface for API clients."""

    VALID_METHODS: ClassVar[FrozenSet[str]] = frozenset({"GET", "POST", "PUT", "DELETE"})
    SUPPORTED_FORMATS: ClassVar[FrozenSet[str]] = frozenset({"none", "json", "xml"})

    # Request content types accepted for raw payloads, with the header sent for each
    CONTENT_TYPE_HEADERS: ClassVar[Dict[str, str]] = {
        "json": "application/json",
        "xml": "text/xml",
    }

    DEFAULT_METHOD: ClassVar[str] = "GET"
    DEFAULT_FORMAT: ClassVar[str] = "json"
    DEFAULT_CONNECT_TIMEOUT: ClassVar[float] = 5
    DEFAULT_READ_TIMEOUT: ClassVar[float] = 30
    DEFAULT_USER_AGENT: ClassVar[str] = f"apicaller/{__version__}"

    DEFAULT_HEADERS: ClassVar[Dict[str, str]] = {
        "Accept": "application/json, text/xml;q=0.9, */*;q=0.8",
        "User-Agent": DEFAULT_USER_AGENT,
    }

    @classmethod
    def validate_method(cls, method: Any) -> str:
        if not isinstance(method, str) or method not in cls.VALID_METHODS:
            raise InvalidMethod(f"Invalid HTTP method: {method!r}")
        return method

    @classmethod
    def validate_url(cls, url: Any) -> str:
        """Check that ``url`` is an absolute URL with a scheme and a host."""
        if not isinstance(url, str) or not url or any(ch.isspace() for ch in url):
            raise InvalidURL(f"Invalid URL: {url!r}")
        try:
            parsed = _URL_ADAPTER.validate_python(url)
        except ValidationError:
            raise InvalidURL(f"Invalid URL: {url!r}") from None
        if not parsed.host:
            raise InvalidURL(f"Invalid URL: {url!r}")
        return url

    @classmethod
    def validate_format(cls, fmt: Any) -> str:
        if not isinstance(fmt, str) or fmt not in cls.SUPPORTED_FORMATS:
            raise UnsupportedFormat(f"Response format not supported: {fmt!r}")
        return fmt

    @classmethod
    def validate_content_type(cls, content_type: Optional[str]) -> Optional[str]:
        """Absent is allowed; anything else must be a known payload type."""
        if content_type is None:
            return None
        if not isinstance(content_type, str) or content_type not in cls.CONTENT_TYPE_HEADERS:
            raise UnsupportedContentType(f"Content type not supported: {content_type!r}")
        return content_type

    @staticmethod
    def validate_timeout(timeout: Any) -> None:
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
            raise ValueError("Timeout must be a number")
        if timeout <= 0:
            raise ValueError("Timeout must be greater than 0")

    @abstractmethod
    def set_method(self, method: str) -> None:
        """Set the HTTP method used by subsequent calls."""
        raise NotImplementedError("set_method must be implemented by subclass")

    @abstractmethod
    def set_url(self, url: str) -> None:
        """Set the base URL every section is appended to."""
        raise NotImplementedError("set_url must be implemented by subclass")

    @abstractmethod
    def set_format(self, fmt: str) -> None:
        """Set the format response bodies are parsed as."""
        raise NotImplementedError("set_format must be implemented by subclass")

    @abstractmethod
    def call(self, section: str, params=None, content_type: Optional[str] = None):
        """Perform one request and return the parsed body."""
        raise NotImplementedError("call must be implemented by subclass")

    @abstractmethod
    def get_last_call(self):
        """Return the record of the most recent call."""
        raise NotImplementedError("get_last_call must be implemented by subclass")
