import pytest
from pydantic import ValidationError

from apicaller.models import CallOutcome, CallRecord, ClientConfig, ResultKind

TEST_URL = "https://api.example.com"


class TestClientConfig:
    def test_defaults(self):
        config = ClientConfig()
        assert config.base_url == ""
        assert config.method == "GET"
        assert config.response_format == "json"
        assert config.default_params == {}
        assert config.connect_timeout == 5
        assert config.read_timeout == 30
        assert config.verify_raw_payload_tls is True

    def test_default_headers_are_not_shared(self):
        first = ClientConfig()
        first.headers["X-Only-Here"] = "1"
        assert "X-Only-Here" not in ClientConfig().headers

    def test_valid_values(self):
        config = ClientConfig(base_url=TEST_URL, method="PUT", response_format="none")
        assert config.base_url == TEST_URL
        assert config.method == "PUT"
        assert config.response_format == "none"

    @pytest.mark.parametrize(
        "field, value",
        [
            ("base_url", "not a url"),
            ("method", "INVALID"),
            ("response_format", "yaml"),
            ("connect_timeout", 0),
            ("read_timeout", -1),
        ],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            ClientConfig(**{field: value})


class TestCallRecord:
    def test_empty_record(self):
        record = CallRecord()
        assert record.url == ""
        assert record.params == {}
        assert record.raw_response is None

    def test_raw_payload_params_stay_a_string(self):
        record = CallRecord(url=TEST_URL, params='{"a": 1}')
        assert record.params == '{"a": 1}'


class TestCallOutcome:
    def test_ok(self):
        outcome = CallOutcome(kind=ResultKind.OK, value={"x": 1})
        assert outcome.ok
        assert outcome.error is None

    @pytest.mark.parametrize("kind", [ResultKind.TRANSPORT_ERROR, ResultKind.PARSE_ERROR])
    def test_failures_are_not_ok(self, kind):
        assert not CallOutcome(kind=kind, error="boom").ok

    def test_is_frozen(self):
        outcome = CallOutcome(kind=ResultKind.OK)
        with pytest.raises(ValidationError):
            outcome.value = "changed"


class TestClientConfigAssignment:
    @pytest.mark.parametrize(
        "field, value",
        [
            ("base_url", "not a url"),
            ("method", "FOO"),
            ("response_format", "yaml"),
            ("connect_timeout", -5),
        ],
    )
    def test_invalid_assignment_is_rejected(self, field, value):
        config = ClientConfig()
        original = getattr(config, field)

        with pytest.raises(ValidationError):
            setattr(config, field, value)

        assert getattr(config, field) == original

    def test_valid_assignment(self):
        config = ClientConfig()
        config.method = "DELETE"
        config.base_url = TEST_URL
        assert config.method == "DELETE"
        assert config.base_url == TEST_URL
