from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from typing import Any, Mapping, Optional

from mwrequest import config
from mwrequest.encoding import (
    DEFAULT_FILE_CONTENT_TYPE,
    JSONEncoder,
    form_request,
    get_request,
    json_request,
    merge_headers,
    upload_request,
)
from mwrequest.handler import (
    FailureHandler,
    RequestHandler,
    SuccessHandler,
    start_async,
    start_blocking,
)
from mwrequest.output import RAW, as_output
from mwrequest.transport import AsyncTransport, Request, Transport

logger = logging.getLogger(__name__)


class BaseClient:
    """Request API shared by blocking and asyncio clients.

    Every method returns a RequestHandler, which delivers the typed result of
    the request through the success/failure callbacks, by blocking on get(),
    or when awaited.

    The output argument selects the type of the result: None to only confirm
    success, bytes (the default) for the raw payload, or any other type to
    decode the JSON payload into (see mwrequest.output.Decoded).
    """

    def __init__(self, headers: Optional[Mapping[str, str]] = None):
        self.headers = dict(headers or {})
        agent = config.user_agent()
        if agent and not any(k.lower() == "user-agent" for k in self.headers):
            self.headers["User-Agent"] = agent

    def _headers(self, headers: Optional[Mapping[str, str]]) -> dict:
        return merge_headers(self.headers, headers)

    def _start(
        self,
        request: Request,
        output: Any,
        success: Optional[SuccessHandler],
        failure: Optional[FailureHandler],
    ) -> RequestHandler:
        raise NotImplementedError

    def get(
        self,
        url: str,
        parameters: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
        output: Any = RAW,
        success: Optional[SuccessHandler] = None,
        failure: Optional[FailureHandler] = None,
    ) -> RequestHandler:
        """Send a GET request, parameters are encoded in the query string."""
        request = get_request(url, parameters, self._headers(headers))
        return self._start(request, output, success, failure)

    def post(
        self,
        url: str,
        parameters: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
        output: Any = RAW,
        success: Optional[SuccessHandler] = None,
        failure: Optional[FailureHandler] = None,
    ) -> RequestHandler:
        """Send a POST request with a form-encoded body."""
        request = form_request(url, parameters, self._headers(headers))
        return self._start(request, output, success, failure)

    def post_json(
        self,
        url: str,
        json: Any,
        encoder: Optional[JSONEncoder] = None,
        headers: Optional[Mapping[str, str]] = None,
        output: Any = RAW,
        success: Optional[SuccessHandler] = None,
        failure: Optional[FailureHandler] = None,
    ) -> RequestHandler:
        """Send a POST request with a JSON body."""
        request = json_request(url, json, encoder, self._headers(headers))
        return self._start(request, output, success, failure)

    def upload(
        self,
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
    ) -> RequestHandler:
        """Upload a file as a multipart/form-data POST request.

        Args:
            url: Target URL.

            data: Content of the file.

            filename: Name of the file reported to the server.

            key: Form field of the file part.

            parameters: Form fields sent along with the file.

            headers: Extra headers.

            content_type: Content type of the file part.
        """
        request = upload_request(
            url, data, key, filename, parameters, self._headers(headers), content_type
        )
        return self._start(request, output, success, failure)


class Client(BaseClient):
    """Client running a blocking transport on a thread pool."""

    def __init__(
        self,
        transport: Optional[Transport] = None,
        executor: Optional[concurrent.futures.Executor] = None,
        headers: Optional[Mapping[str, str]] = None,
        max_workers: Optional[int] = None,
    ):
        """Create a new client.

        Args:
            transport: Transport performing the exchanges. Defaults to an
                httpx transport.

            executor: Executor running the transport. Defaults to a thread
                pool of max_workers threads, owned by the client.

            headers: Headers sent with every request.

            max_workers: Size of the default thread pool. Uses the value of
                the MWREQUEST_MAX_WORKERS environment variable by default.
        """
        super().__init__(headers)
        if transport is None:
            from mwrequest.integrations.httpx import HTTPXTransport

            transport = HTTPXTransport()
            self._owns_transport = True
        else:
            self._owns_transport = False
        self.transport = transport

        self._owns_executor = executor is None
        if executor is None:
            executor = concurrent.futures.ThreadPoolExecutor(
                max_workers=config.max_workers(max_workers),
                thread_name_prefix="mwrequest",
            )
        self.executor = executor

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self):
        """Close resources created by the client. Requests in flight are
        completed first."""
        if self._owns_executor:
            self.executor.shutdown(wait=True)
        if self._owns_transport:
            self.transport.close()

    def _start(self, request, output, success, failure) -> RequestHandler:
        logger.debug("starting %s %s", request.method, request.url)
        handler: RequestHandler = RequestHandler(
            request, as_output(output), success, failure
        )
        return start_blocking(handler, self.transport, self.executor)


class AsyncClient(BaseClient):
    """Client running an asyncio transport on the running event loop.

    Methods must be called from a coroutine, the returned handlers are
    typically awaited:

        items = await client.get(url, output=list[Item])
    """

    def __init__(
        self,
        transport: Optional[AsyncTransport] = None,
        headers: Optional[Mapping[str, str]] = None,
    ):
        super().__init__(headers)
        if transport is None:
            from mwrequest.integrations.httpx import AsyncHTTPXTransport

            transport = AsyncHTTPXTransport()
            self._owns_transport = True
        else:
            self._owns_transport = False
        self.transport = transport

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()

    async def close(self):
        if self._owns_transport:
            await self.transport.close()

    def _start(self, request, output, success, failure) -> RequestHandler:
        logger.debug("starting %s %s", request.method, request.url)
        handler: RequestHandler = RequestHandler(
            request, as_output(output), success, failure
        )
        return start_async(handler, self.transport, asyncio.get_running_loop())


DEFAULT_CLIENT: Optional[Client] = None


def default_client() -> Client:
    """Returns the process-wide client used by the module-level helpers."""
    global DEFAULT_CLIENT
    if DEFAULT_CLIENT is None:
        DEFAULT_CLIENT = Client()
    return DEFAULT_CLIENT
