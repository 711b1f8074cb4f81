"""Typed request helpers for Python HTTP clients."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from mwrequest.classify import ExchangeOutcome, Failure, Success, Verdict, classify
from mwrequest.client import AsyncClient, BaseClient, Client, default_client
from mwrequest.encoding import DEFAULT_FILE_CONTENT_TYPE, JSONEncoder
from mwrequest.error import (
    CancelledError,
    DecodingError,
    FailureKind,
    HTTPError,
    NoResponseError,
    RequestError,
    TransportError,
    UnknownError,
)
from mwrequest.handler import FailureHandler, RequestHandler, SuccessHandler
from mwrequest.output import (
    RAW,
    UNIT,
    Decoded,
    Err,
    JSONDecoder,
    Ok,
    RawBytes,
    Result,
    Unit,
    decode,
    register_decoder,
)
from mwrequest.transport import AsyncTransport, Request, Transport

__all__ = [
    "AsyncClient",
    "AsyncTransport",
    "BaseClient",
    "CancelledError",
    "Client",
    "Decoded",
    "DecodingError",
    "Err",
    "ExchangeOutcome",
    "Failure",
    "FailureKind",
    "HTTPError",
    "JSONDecoder",
    "NoResponseError",
    "Ok",
    "RAW",
    "RawBytes",
    "Request",
    "RequestError",
    "RequestHandler",
    "Result",
    "Success",
    "Transport",
    "TransportError",
    "UNIT",
    "Unit",
    "UnknownError",
    "Verdict",
    "classify",
    "decode",
    "default_client",
    "get",
    "post",
    "post_json",
    "register_decoder",
    "upload",
]


def get(
    url: str,
    parameters: Optional[Mapping[str, str]] = None,
    headers: Optional[Mapping[str, str]] = None,
    output: Any = RAW,
    success: Optional[SuccessHandler] = None,
    failure: Optional[FailureHandler] = None,
    client: Optional[BaseClient] = None,
) -> RequestHandler:
    """Send a GET request with the default client (see Client.get)."""
    return (client or default_client()).get(
        url, parameters, headers, output, success, failure
    )


def post(
    url: str,
    parameters: Optional[Mapping[str, str]] = None,
    headers: Optional[Mapping[str, str]] = None,
    output: Any = RAW,
    success: Optional[SuccessHandler] = None,
    failure: Optional[FailureHandler] = None,
    client: Optional[BaseClient] = None,
) -> RequestHandler:
    """Send a form-encoded POST request with the default client."""
    return (client or default_client()).post(
        url, parameters, headers, output, success, failure
    )


def post_json(
    url: str,
    json: Any,
    encoder: Optional[JSONEncoder] = None,
    headers: Optional[Mapping[str, str]] = None,
    output: Any = RAW,
    success: Optional[SuccessHandler] = None,
    failure: Optional[FailureHandler] = None,
    client: Optional[BaseClient] = None,
) -> RequestHandler:
    """Send a JSON POST request with the default client."""
    return (client or default_client()).post_json(
        url, json, encoder, headers, output, success, failure
    )


def upload(
    url: str,
    data: bytes,
    filename: str,
    key: str = "file",
    parameters: Optional[Mapping[str, str]] = None,
    headers: Optional[Mapping[str, str]] = None,
    content_type: str = DEFAULT_FILE_CONTENT_TYPE,
    output: Any = RAW,
    success: Optional[SuccessHandler] = None,
    failure: Optional[FailureHandler] = None,
    client: Optional[BaseClient] = None,
) -> RequestHandler:
    """Upload a file with the default client (see Client.upload)."""
    return (client or default_client()).upload(
        url,
        data,
        filename,
        key,
        parameters,
        headers,
        content_type,
        output,
        success,
        failure,
    )
