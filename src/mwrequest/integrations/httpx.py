import logging
from typing import Optional

import httpx

from mwrequest import config
from mwrequest.classify import ExchangeOutcome
from mwrequest.transport import Request

logger = logging.getLogger(__name__)

# See https://www.python-httpx.org/exceptions/
TRANSPORT_ERRORS = (
    httpx.HTTPError,
    httpx.StreamError,
    httpx.InvalidURL,
    httpx.CookieConflict,
)


def _client_options(timeout: Optional[float]) -> dict:
    # Without a configured timeout, httpx defaults apply.
    value = config.timeout(timeout)
    return {} if value is None else {"timeout": httpx.Timeout(value)}


class HTTPXTransport:
    """Blocking transport performing exchanges with an httpx.Client."""

    def __init__(
        self, client: Optional[httpx.Client] = None, timeout: Optional[float] = None
    ):
        """Initialize the transport.

        Args:
            client: Client to send requests with. A new client is created
                (and closed by close()) when omitted.

            timeout: Timeout in seconds of clients created by the transport.
                Uses the value of the MWREQUEST_TIMEOUT environment variable
                by default, the httpx default timeout if unset.
        """
        self._owned = client is None
        self.client = client or httpx.Client(**_client_options(timeout))

    def perform(self, request: Request) -> ExchangeOutcome:
        try:
            response = self.client.request(
                request.method,
                request.url,
                headers=request.headers,
                content=request.body,
            )
        except TRANSPORT_ERRORS as e:
            logger.debug("%s %s failed: %s", request.method, request.url, e)
            return ExchangeOutcome(transport_failure=e)
        return ExchangeOutcome(payload=response.content, status_code=response.status_code)

    def close(self):
        if self._owned:
            self.client.close()


class AsyncHTTPXTransport:
    """Asyncio transport performing exchanges with an httpx.AsyncClient."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self._owned = client is None
        self.client = client or httpx.AsyncClient(**_client_options(timeout))

    async def perform(self, request: Request) -> ExchangeOutcome:
        try:
            response = await self.client.request(
                request.method,
                request.url,
                headers=request.headers,
                content=request.body,
            )
        except TRANSPORT_ERRORS as e:
            logger.debug("%s %s failed: %s", request.method, request.url, e)
            return ExchangeOutcome(transport_failure=e)
        return ExchangeOutcome(payload=response.content, status_code=response.status_code)

    async def close(self):
        if self._owned:
            await self.client.aclose()
