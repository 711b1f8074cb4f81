import os
import threading
from unittest import mock

import pydantic
import pytest

import mwrequest
import mwrequest.client
from mwrequest import (
    AsyncClient,
    CancelledError,
    Client,
    Err,
    ExchangeOutcome,
    FailureKind,
    HTTPError,
    Ok,
    TransportError,
)


class Item(pydantic.BaseModel):
    id: int


class StubTransport:
    def __init__(self, outcome=None, error=None):
        self.outcome = outcome
        self.error = error
        self.requests = []
        self.closed = False

    def perform(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.outcome

    def close(self):
        self.closed = True


class AsyncStubTransport(StubTransport):
    async def perform(self, request):
        return StubTransport.perform(self, request)

    async def close(self):
        self.closed = True


def test_get_decodes_items():
    transport = StubTransport(
        ExchangeOutcome(payload=b'[{"id":1},{"id":2}]', status_code=200)
    )
    with Client(transport) as client:
        handler = client.get(
            "https://api.example.com/items", {"page": "2"}, output=list[Item]
        )
        assert handler.get() == [Item(id=1), Item(id=2)]

    [request] = transport.requests
    assert request.method == "GET"
    assert request.url == "https://api.example.com/items?page=2"
    assert not transport.closed


def test_get_http_error():
    payload = b'{"error":"not found"}'
    transport = StubTransport(ExchangeOutcome(payload=payload, status_code=404))
    with Client(transport) as client:
        handler = client.get(
            "https://api.example.com/items", {"page": "2"}, output=list[Item]
        )
        assert handler.result() == Err(HTTPError(404, "Not Found", payload))
        with pytest.raises(HTTPError) as exc:
            handler.get()
    assert exc.value.body == payload
    assert str(exc.value) == "Not Found"


def test_get_connection_refused():
    cause = ConnectionRefusedError("connection refused")
    with Client(StubTransport(error=cause)) as client:
        result = client.get("https://api.example.com/items").result()
    assert isinstance(result, Err)
    assert result.kind is FailureKind.TRANSPORT_ERROR
    assert result.error.cause is cause


def test_callbacks():
    done = threading.Event()
    values = []

    def success(value):
        values.append(value)
        done.set()

    def failure(error):
        pytest.fail(f"unexpected failure: {error!r}")

    transport = StubTransport(ExchangeOutcome(payload=b"pong", status_code=200))
    with Client(transport) as client:
        client.get("https://example.com/ping", success=success, failure=failure)
        assert done.wait(timeout=5)
    assert values == [b"pong"]


def test_cancel_after_delivery():
    failures = []
    transport = StubTransport(ExchangeOutcome(payload=b"[]", status_code=200))
    with Client(transport) as client:
        handler = client.get(
            "https://example.com/items", output=list[Item], failure=failures.append
        )
        assert handler.get() == []
        handler.cancel()
    assert handler.result() == Ok([])
    assert failures == []


def test_post_form():
    transport = StubTransport(ExchangeOutcome(status_code=204))
    with Client(transport) as client:
        handler = client.post("https://example.com/form", {"a": "1"}, output=None)
        assert handler.get() is None

    [request] = transport.requests
    assert request.method == "POST"
    assert request.body == b"a=1"
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"


def test_post_json():
    transport = StubTransport(ExchangeOutcome(payload=b'{"id":7}', status_code=201))
    with Client(transport) as client:
        item = client.post_json("https://example.com/items", {"id": 7}, output=Item)
        assert item.get() == Item(id=7)

    [request] = transport.requests
    assert request.body == b'{"id":7}'
    assert request.headers["Content-Type"] == "application/json; charset=utf-8"


def test_upload():
    transport = StubTransport(ExchangeOutcome(payload=b"stored", status_code=200))
    with Client(transport) as client:
        handler = client.upload(
            "https://example.com/upload",
            b"hello",
            "hello.txt",
            parameters={"folder": "docs"},
            content_type="text/plain",
        )
        assert handler.get() == b"stored"

    [request] = transport.requests
    assert request.headers["Content-Length"] == str(len(request.body))
    assert b'name="file"; filename="hello.txt"' in request.body
    assert b"Content-Type: text/plain\r\n\r\nhello\r\n" in request.body
    assert b'name="folder"\r\n\r\ndocs\r\n' in request.body


def test_default_headers():
    transport = StubTransport(ExchangeOutcome(status_code=200))
    with Client(transport, headers={"Authorization": "Bearer a"}) as client:
        client.get("https://example.com/").get()
        client.get("https://example.com/", headers={"authorization": "Bearer b"}).get()

    first, second = transport.requests
    assert first.headers == {"Authorization": "Bearer a"}
    assert second.headers == {"authorization": "Bearer b"}


@mock.patch.dict(os.environ, {"MWREQUEST_USER_AGENT": "tests/1.0"})
def test_user_agent_from_envvar():
    transport = StubTransport(ExchangeOutcome(status_code=200))
    with Client(transport) as client:
        client.get("https://example.com/").get()
    assert transport.requests[0].headers == {"User-Agent": "tests/1.0"}


def test_close_owned_transport():
    client = Client()
    transport = client.transport
    client.close()
    assert transport.client.is_closed


def test_module_helpers():
    transport = StubTransport(ExchangeOutcome(payload=b'{"id":3}', status_code=200))
    with Client(transport) as client:
        get = mwrequest.get("https://example.com/3", client=client)
        post = mwrequest.post("https://example.com/", client=client, output=Item)
        post_json = mwrequest.post_json(
            "https://example.com/", [], client=client, output=None
        )
        upload = mwrequest.upload("https://example.com/", b"", "x", client=client)

        assert get.get() == b'{"id":3}'
        assert post.get() == Item(id=3)
        assert post_json.get() is None
        assert upload.get() == b'{"id":3}'
    assert len(transport.requests) == 4


def test_default_client(monkeypatch):
    monkeypatch.setattr(mwrequest.client, "DEFAULT_CLIENT", None)
    client = mwrequest.default_client()
    try:
        assert mwrequest.default_client() is client
    finally:
        client.close()


@pytest.mark.asyncio
async def test_async_client():
    transport = AsyncStubTransport(
        ExchangeOutcome(payload=b'[{"id":1},{"id":2}]', status_code=200)
    )
    async with AsyncClient(transport) as client:
        items = await client.get("https://api.example.com/items", output=list[Item])
    assert items == [Item(id=1), Item(id=2)]
    assert not transport.closed


@pytest.mark.asyncio
async def test_async_client_failure():
    transport = AsyncStubTransport(error=ConnectionRefusedError())
    async with AsyncClient(transport) as client:
        with pytest.raises(TransportError) as exc:
            await client.post_json("https://example.com/", {"a": 1})
    assert isinstance(exc.value.cause, ConnectionRefusedError)


@pytest.mark.asyncio
async def test_async_client_cancel():
    transport = AsyncStubTransport(ExchangeOutcome(status_code=200))
    async with AsyncClient(transport) as client:
        handler = client.get("https://example.com/")
        handler.cancel()
        with pytest.raises(TransportError) as exc:
            await handler
    assert isinstance(exc.value.cause, CancelledError)


@pytest.mark.asyncio
async def test_await_blocking_client():
    transport = StubTransport(ExchangeOutcome(payload=b"data", status_code=200))
    with Client(transport) as client:
        assert await client.get("https://example.com/") == b"data"
