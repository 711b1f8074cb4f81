import pytest

from mwrequest.classify import ExchangeOutcome, Failure, Success, classify
from mwrequest.error import (
    FailureKind,
    HTTPError,
    NoResponseError,
    TransportError,
    UnknownError,
)


def test_transport_failure():
    cause = ConnectionRefusedError("connection refused")
    verdict = classify(ExchangeOutcome(transport_failure=cause))
    assert isinstance(verdict, Failure)
    assert isinstance(verdict.error, TransportError)
    assert verdict.error.cause is cause
    assert verdict.error.kind is FailureKind.TRANSPORT_ERROR
    assert str(verdict.error) == "connection refused"


@pytest.mark.parametrize("status_code", [200, 404, 500])
def test_transport_failure_takes_precedence(status_code):
    cause = OSError("broken pipe")
    outcome = ExchangeOutcome(
        payload=b"ignored", status_code=status_code, transport_failure=cause
    )
    verdict = classify(outcome)
    assert isinstance(verdict, Failure)
    assert isinstance(verdict.error, TransportError)
    assert verdict.error.cause is cause


def test_request_error_is_not_wrapped():
    error = UnknownError()
    verdict = classify(ExchangeOutcome(transport_failure=error))
    assert verdict == Failure(error)

    error = HTTPError(503, "Service Unavailable")
    verdict = classify(ExchangeOutcome(transport_failure=error))
    assert verdict.error is error


def test_no_status_code():
    verdict = classify(ExchangeOutcome(payload=b"data"))
    assert isinstance(verdict, Failure)
    assert isinstance(verdict.error, NoResponseError)
    assert verdict.error.kind is FailureKind.NO_RESPONSE
    assert str(verdict.error) == "No response"


def test_http_error_keeps_payload():
    payload = b'{"error":"not found"}'
    verdict = classify(ExchangeOutcome(payload=payload, status_code=404))
    assert verdict == Failure(HTTPError(404, "Not Found", payload))
    assert verdict.error.body is payload
    assert str(verdict.error) == "Not Found"


def test_http_error_without_payload():
    verdict = classify(ExchangeOutcome(status_code=500))
    assert verdict == Failure(HTTPError(500, "Internal Server Error", b""))


def test_http_error_unknown_status_code():
    verdict = classify(ExchangeOutcome(status_code=499))
    assert verdict.error.status_code == 499
    assert verdict.error.reason == "client error"


@pytest.mark.parametrize("status_code", [200, 201, 204, 304, 399])
def test_success(status_code):
    payload = b"\x00\x01binary"
    verdict = classify(ExchangeOutcome(payload=payload, status_code=status_code))
    assert verdict == Success(payload)
    assert verdict.payload is payload


def test_success_without_payload():
    assert classify(ExchangeOutcome(status_code=204)) == Success(None)
