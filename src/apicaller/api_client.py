from typing import Any, ContextManager, Dict, Mapping, Optional, Tuple, Union
from urllib.parse import parse_qsl

from .api_client_base import APIClientBase, Scalar
from .exceptions import MissingBaseURL, ResponseParseError, TransportError
from .logging import DefaultLogger, Logger
from .models import CallOutcome, CallRecord, ClientConfig, ResultKind
from .parsers import PARSERS, SERIALIZERS
from .transport import HttpRequest, HttpResponse, HttpTransport, RequestsTransport

Params = Union[Mapping[str, Any], str, None]


class APIClient(APIClientBase, ContextManager["APIClient"]):
    """Base class for wrappers around REST-like web APIs.

    Subclasses configure the base URL, method and response format (usually in
    ``__init__``) and expose API specific methods that delegate to
    :meth:`call`::

        class Weather(APIClient):
            def __init__(self, api_key, **kwargs):
                super().__init__(url="https://api.example.com/v1", **kwargs)
                self.set_default("key", api_key)

            def forecast(self, city):
                return self.call("/forecast", {"q": city})

    Each instance owns its configuration and its last-call record. The record
    is a single slot overwritten by every call without locking, so an instance
    shared between threads reports whichever call wrote last.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        method: str = APIClientBase.DEFAULT_METHOD,
        response_format: str = APIClientBase.DEFAULT_FORMAT,
        default_params: Optional[Mapping[str, Scalar]] = None,
        headers: Optional[Dict[str, str]] = None,
        connect_timeout: float = APIClientBase.DEFAULT_CONNECT_TIMEOUT,
        read_timeout: float = APIClientBase.DEFAULT_READ_TIMEOUT,
        verify_raw_payload_tls: bool = True,
        transport: Optional[HttpTransport] = None,
        logger: Optional[Logger] = None,
    ):
        self.logger = logger or DefaultLogger(name="apicaller")
        self.config = ClientConfig(verify_raw_payload_tls=verify_raw_payload_tls)

        if url is not None:
            self.set_url(url)
        self.set_method(method)
        self.set_format(response_format)
        self.set_timeout(connect_timeout, read_timeout)
        for name, value in (default_params or {}).items():
            self.set_default(name, value)
        if headers:
            self.update_headers(headers)

        # Only transports created here are closed by close()
        self._owns_transport = transport is None
        self.transport = transport if transport is not None else RequestsTransport(logger=self.logger)
        self._last_call = CallRecord()

    def __enter__(self) -> "APIClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        if self._owns_transport:
            self.transport.close()

    # Configuration

    def set_method(self, method: str) -> None:
        self.config.method = self.validate_method(method)

    def set_url(self, url: str) -> None:
        self.config.base_url = self.validate_url(url)

    def set_format(self, fmt: str) -> None:
        self.config.response_format = self.validate_format(fmt)

    def set_default(self, name: str, value: Scalar) -> None:
        """Add or replace a parameter sent with every call."""
        if not isinstance(value, (str, int, float)):
            raise TypeError(f"Default parameter {name!r} must be a scalar, got {type(value).__name__}")
        self.config.default_params[name] = value

    def clear_defaults(self) -> None:
        self.config.default_params = {}

    def set_timeout(self, connect: float, read: Optional[float] = None) -> None:
        """Update the connect timeout and, when given, the read timeout (seconds)."""
        self.validate_timeout(connect)
        if read is not None:
            self.validate_timeout(read)
            self.config.read_timeout = read
        self.config.connect_timeout = connect

    def update_headers(self, headers: Dict[str, str]) -> None:
        self.config.headers.update(headers)
        self.logger.debug("Updated headers", headers=headers)

    # Calls

    def get_last_call(self) -> CallRecord:
        return self._last_call.model_copy(deep=True)

    def call(self, section: str = "", params: Params = None, content_type: Optional[str] = None) -> Any:
        """Call the API and return the parsed response body.

        Args:
            section: Path appended to the base URL
            params: Parameters to send, or a pre-serialized JSON/XML body
                when ``content_type`` is given and the method is POST
            content_type: ``"json"`` or ``"xml"`` to POST a raw payload

        Returns:
            The parsed body (a string for the ``none`` format), an
            ``{"error": message}`` mapping when the body could not be parsed,
            or None when the HTTP exchange failed

        Raises:
            MissingBaseURL: If no base URL has been set
            UnsupportedContentType: If ``content_type`` is not json or xml
            InvalidPayload: If a mapping cannot be serialized as an XML payload
        """
        return self.dispatch(section, params, content_type).value

    def dispatch(
        self, section: str = "", params: Params = None, content_type: Optional[str] = None
    ) -> CallOutcome:
        """Like :meth:`call`, but return the tagged :class:`CallOutcome`."""
        if not self.config.base_url:
            raise MissingBaseURL("A base URL must be set before calling the API")
        self.validate_content_type(content_type)

        request, sent_params = self._build_request(section, params, content_type)
        self._last_call = CallRecord(url=request.url, params=sent_params)
        self.logger.debug(f"Calling {request.method} {request.url}", params=sent_params)
        if not request.verify:
            self.logger.warning("TLS verification disabled for raw payload POST", url=request.url)

        try:
            response = self.transport.execute(request)
        except TransportError as e:
            self.logger.warning(f"Request failed: {e}")
            return CallOutcome(kind=ResultKind.TRANSPORT_ERROR, error=str(e))

        self._last_call.raw_response = response.text
        return self._parse(response)

    def _merge_params(self, params: Params) -> Dict[str, Any]:
        """Merge call parameters with the defaults; defaults win on collision."""
        if params is None:
            params = {}
        elif isinstance(params, str):
            params = dict(parse_qsl(params, keep_blank_values=True))
        return {**params, **self.config.default_params}

    def _build_request(
        self, section: str, params: Params, content_type: Optional[str]
    ) -> Tuple[HttpRequest, Union[Dict[str, Any], str]]:
        """Build the request for the configured method.

        Returns:
            The request and the parameters recorded for it
        """
        method = self.config.method
        request_args = {
            "method": method,
            "url": f"{self.config.base_url}{section}",
            "headers": self.config.headers.copy(),
            "timeout": (self.config.connect_timeout, self.config.read_timeout),
        }

        if method == "POST" and content_type is not None:
            if isinstance(params, str):
                payload = sent = params
            else:
                sent = self._merge_params(params)
                payload = SERIALIZERS[content_type](sent)
            request_args["headers"]["Content-Type"] = self.CONTENT_TYPE_HEADERS[content_type]
            request_args["data"] = payload
            request_args["verify"] = self.config.verify_raw_payload_tls
            return HttpRequest(**request_args), sent

        sent = self._merge_params(params)
        if method == "GET":
            request_args["params"] = sent
        else:
            request_args["data"] = sent
        return HttpRequest(**request_args), sent

    def _parse(self, response: HttpResponse) -> CallOutcome:
        fmt = self.config.response_format
        if fmt == "none":
            return CallOutcome(kind=ResultKind.OK, value=response.text)

        try:
            value = PARSERS[fmt](response.content)
        except ResponseParseError as e:
            self.logger.warning(f"Could not parse {fmt} response: {e}", status=response.status_code)
            return CallOutcome(kind=ResultKind.PARSE_ERROR, value={"error": str(e)}, error=str(e))
        return CallOutcome(kind=ResultKind.OK, value=value)
