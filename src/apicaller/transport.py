import codecs
from typing import Any, ContextManager, Dict, Optional, Protocol, Tuple, Union, runtime_checkable

import requests
from pydantic import BaseModel, ConfigDict, Field

from .exceptions import TransportError
from .logging import DefaultLogger, Logger


class HttpRequest(BaseModel):
    """A fully built request, ready for a transport to send."""

    model_config = ConfigDict(frozen=True)

    method: str
    url: str
    params: Optional[Dict[str, Any]] = None
    # A mapping is sent form-urlencoded, a string is sent verbatim
    data: Union[Dict[str, Any], str, None] = None
    headers: Dict[str, str] = Field(default_factory=dict)
    timeout: Tuple[float, float]
    verify: bool = True


class HttpResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    status_code: int
    content: bytes = b""
    encoding: Optional[str] = None

    @property
    def text(self) -> str:
        try:
            return self.content.decode(self.encoding or "utf-8", errors="replace")
        except LookupError:
            return self.content.decode("utf-8", errors="replace")


@runtime_checkable
class HttpTransport(Protocol):
    """Protocol for the capability that performs one HTTP exchange."""

    def execute(self, request: HttpRequest) -> HttpResponse:
        """
        Send ``request`` and return the response, whatever its status code.

        Args:
            request: The request to send

        Returns:
            The response status and body

        Raises:
            TransportError: If no response could be obtained
        """
        ...

    def close(self) -> None:
        """Release any resources held by the transport."""
        ...


class RequestsTransport(ContextManager["RequestsTransport"]):
    """Transport backed by a :class:`requests.Session`."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        logger: Optional[Logger] = None,
    ):
        # Only sessions created here are closed by close()
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()
        self.logger = logger or DefaultLogger(name="apicaller.transport")

    def __enter__(self) -> "RequestsTransport":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        if self._owns_session and self.session is not None:
            self.session.close()

    def execute(self, request: HttpRequest) -> HttpResponse:
        body = request.data.encode("utf-8") if isinstance(request.data, str) else request.data
        try:
            response = self.session.request(
                method=request.method,
                url=request.url,
                params=request.params,
                data=body,
                headers=request.headers,
                timeout=request.timeout,
                verify=request.verify,
            )
        except requests.RequestException as e:
            raise TransportError(f"{request.method} {request.url} failed: {e}") from e

        self.logger.debug(
            "Received response",
            status=response.status_code,
            bytes=len(response.content),
        )
        # requests assumes ISO-8859-1 for text/* without a charset; fall back to UTF-8 instead
        declared = "charset" in response.headers.get("Content-Type", "").lower()
        return HttpResponse(
            status_code=response.status_code,
            content=response.content,
            encoding=_known_encoding(response.encoding) if declared else None,
        )


def _known_encoding(name: Optional[str]) -> Optional[str]:
    """Return ``name`` when Python has a codec for it, otherwise None (UTF-8)."""
    if not name:
        return None
    try:
        codecs.lookup(name)
    except LookupError:
        return None
    return name
