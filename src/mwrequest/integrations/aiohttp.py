import asyncio
import logging
from typing import Optional

import aiohttp

from mwrequest import config
from mwrequest.classify import ExchangeOutcome
from mwrequest.transport import Request

logger = logging.getLogger(__name__)


class AIOHTTPTransport:
    """Asyncio transport performing exchanges with an aiohttp.ClientSession.

    When no session is passed, one is created on first use so that it binds
    to the running event loop.
    """

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: Optional[float] = None,
    ):
        self._owned = session is None
        self._session = session
        self.timeout = config.timeout(timeout)

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None:
            if self.timeout is None:
                self._session = aiohttp.ClientSession()
            else:
                timeout = aiohttp.ClientTimeout(total=self.timeout)
                self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def perform(self, request: Request) -> ExchangeOutcome:
        # https://docs.aiohttp.org/en/stable/client_reference.html
        try:
            async with self.session.request(
                request.method,
                request.url,
                headers=request.headers,
                data=request.body,
            ) as response:
                payload = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.debug("%s %s failed: %r", request.method, request.url, e)
            return ExchangeOutcome(transport_failure=e)
        return ExchangeOutcome(payload=payload, status_code=response.status)

    async def close(self):
        if self._owned and self._session is not None:
            await self._session.close()
            self._session = None
