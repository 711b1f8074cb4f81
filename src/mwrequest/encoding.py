"""Construction of the requests sent by the request helpers."""

import uuid
from typing import Any, Callable, Mapping, Optional
from urllib.parse import quote, urlencode

from pydantic_core import to_json

from mwrequest.transport import Request

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json; charset=utf-8"
DEFAULT_FILE_CONTENT_TYPE = "application/octet-stream"

JSONEncoder = Callable[[Any], bytes]


def _disposition_value(value: str) -> str:
    if "\r" in value or "\n" in value:
        raise ValueError(f"line break in multipart header value: {value!r}")
    return value.replace('"', "%22")


def encode_query(parameters: Optional[Mapping[str, str]]) -> str:
    """Percent-encode parameters as key=value pairs joined by '&'."""
    if not parameters:
        return ""
    return urlencode(parameters, quote_via=quote)


def with_query(url: str, parameters: Optional[Mapping[str, str]]) -> str:
    query = encode_query(parameters)
    if not query:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{query}"


def merge_headers(
    generated: Mapping[str, str], headers: Optional[Mapping[str, str]]
) -> dict:
    merged = dict(generated)
    if headers:
        # Header names are case-insensitive, caller values replace ours.
        overridden = {name.lower() for name in headers}
        merged = {k: v for k, v in merged.items() if k.lower() not in overridden}
        merged.update(headers)
    return merged


def get_request(
    url: str,
    parameters: Optional[Mapping[str, str]] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> Request:
    return Request("GET", with_query(url, parameters), merge_headers({}, headers))


def form_request(
    url: str,
    parameters: Optional[Mapping[str, str]] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> Request:
    body = encode_query(parameters).encode("utf-8")
    return Request(
        "POST",
        url,
        merge_headers({"Content-Type": FORM_CONTENT_TYPE}, headers),
        body,
    )


def json_request(
    url: str,
    json: Any,
    encoder: Optional[JSONEncoder] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> Request:
    """Build a POST request with a JSON body.

    Args:
        url: Target URL.

        json: Value to serialize. By default pydantic models, dataclasses
            and builtin types are supported.

        encoder: Function serializing the value to bytes, replacing the
            default serialization.

        headers: Extra headers.
    """
    body = encoder(json) if encoder is not None else to_json(json)
    return Request(
        "POST",
        url,
        merge_headers({"Content-Type": JSON_CONTENT_TYPE}, headers),
        body,
    )


def encode_multipart(
    parameters: Optional[Mapping[str, str]],
    data: bytes,
    key: str,
    filename: str,
    content_type: str = DEFAULT_FILE_CONTENT_TYPE,
    boundary: Optional[str] = None,
) -> tuple[bytes, str]:
    """Encode form fields and one file as a multipart/form-data body.

    Quotes in field names and the filename are percent-encoded.

    Returns:
        The body and the boundary separating its parts.

    Raises:
        ValueError: if a field name or the filename contains a line break.
    """
    if boundary is None:
        boundary = f"Boundary-{str(uuid.uuid4()).upper()}"
    crlf = "\r\n"
    prefix = f"--{boundary}{crlf}".encode("utf-8")
    parts = []

    for name, value in (parameters or {}).items():
        name = _disposition_value(name)
        parts.append(prefix)
        parts.append(
            f'Content-Disposition: form-data; name="{name}"{crlf}{crlf}'.encode("utf-8")
        )
        parts.append(f"{value}{crlf}".encode("utf-8"))

    key = _disposition_value(key)
    filename = _disposition_value(filename)
    parts.append(prefix)
    parts.append(
        f'Content-Disposition: form-data; name="{key}"; filename="{filename}"{crlf}'.encode(
            "utf-8"
        )
    )
    parts.append(f"Content-Type: {content_type}{crlf}{crlf}".encode("utf-8"))
    parts.append(data)
    parts.append(crlf.encode("utf-8"))
    parts.append(f"--{boundary}--".encode("utf-8"))
    return b"".join(parts), boundary


def upload_request(
    url: str,
    data: bytes,
    key: str,
    filename: str,
    parameters: Optional[Mapping[str, str]] = None,
    headers: Optional[Mapping[str, str]] = None,
    content_type: str = DEFAULT_FILE_CONTENT_TYPE,
) -> Request:
    body, boundary = encode_multipart(parameters, data, key, filename, content_type)
    generated = {
        "Content-Length": str(len(body)),
        "Content-Type": f"multipart/form-data; boundary={boundary}",
    }
    return Request("POST", url, merge_headers(generated, headers), body)
