import logging
from typing import Optional

import requests

from mwrequest import config
from mwrequest.classify import ExchangeOutcome
from mwrequest.transport import Request

logger = logging.getLogger(__name__)


class RequestsTransport:
    """Blocking transport performing exchanges with a requests.Session."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self._owned = session is None
        self.session = session or requests.Session()
        self.timeout = config.timeout(timeout)

    def perform(self, request: Request) -> ExchangeOutcome:
        # See https://requests.readthedocs.io/en/latest/api/#exceptions
        try:
            response = self.session.request(
                request.method,
                request.url,
                headers=request.headers,
                data=request.body,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.debug("%s %s failed: %s", request.method, request.url, e)
            return ExchangeOutcome(transport_failure=e)
        return ExchangeOutcome(payload=response.content, status_code=response.status_code)

    def close(self):
        if self._owned:
            self.session.close()
