from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .api_client_base import APIClientBase, Scalar


class ClientConfig(BaseModel):
    """Configuration owned by one :class:`~apicaller.api_client.APIClient`.

    Field assignments are validated too, so the config cannot be put in a state
    the client setters would reject.
    """

    model_config = ConfigDict(validate_assignment=True)

    base_url: str = ""
    method: str = APIClientBase.DEFAULT_METHOD
    response_format: str = APIClientBase.DEFAULT_FORMAT
    default_params: Dict[str, Scalar] = Field(default_factory=dict)
    headers: Dict[str, str] = Field(default_factory=lambda: APIClientBase.DEFAULT_HEADERS.copy())
    connect_timeout: float = APIClientBase.DEFAULT_CONNECT_TIMEOUT
    read_timeout: float = APIClientBase.DEFAULT_READ_TIMEOUT
    # Raw payload POSTs skip certificate and host checks only when this is False
    verify_raw_payload_tls: bool = True

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        # Empty means "not configured yet"; call() rejects it
        if value == "":
            return value
        return APIClientBase.validate_url(value)

    @field_validator("method")
    @classmethod
    def _check_method(cls, value: str) -> str:
        return APIClientBase.validate_method(value)

    @field_validator("response_format")
    @classmethod
    def _check_response_format(cls, value: str) -> str:
        return APIClientBase.validate_format(value)

    @field_validator("connect_timeout", "read_timeout")
    @classmethod
    def _check_timeout(cls, value: float) -> float:
        APIClientBase.validate_timeout(value)
        return value


class CallRecord(BaseModel):
    """Snapshot of the most recently attempted call."""

    url: str = ""
    params: Union[Dict[str, Any], str] = Field(default_factory=dict)
    raw_response: Optional[str] = None


class ResultKind(str, Enum):
    OK = "ok"
    TRANSPORT_ERROR = "transport_error"
    PARSE_ERROR = "parse_error"


class CallOutcome(BaseModel):
    """Tagged result of one call.

    ``value`` is the parsed body for ``OK``, ``None`` for ``TRANSPORT_ERROR``
    and the ``{"error": message}`` descriptor for ``PARSE_ERROR``.
    """

    model_config = ConfigDict(frozen=True)

    kind: ResultKind
    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.kind is ResultKind.OK
