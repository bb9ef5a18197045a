class APIClientError(Exception):
    """Base exception for API client errors."""

    pass


class ConfigurationError(APIClientError, ValueError):
    """Raised for invalid client configuration, always before any network I/O."""

    pass


class InvalidMethod(ConfigurationError):
    pass


class InvalidURL(ConfigurationError):
    pass


class UnsupportedFormat(ConfigurationError):
    pass


class MissingBaseURL(ConfigurationError):
    pass


class UnsupportedContentType(ConfigurationError):
    pass


class TransportError(APIClientError):
    """Raised by a transport when the HTTP exchange could not complete."""

    pass


class ResponseParseError(APIClientError):
    """Raised by the body parsers; the message is the human-readable category."""

    pass


class InvalidPayload(APIClientError, ValueError):
    """Raised when a request payload cannot be serialized, before any network I/O."""

    pass
