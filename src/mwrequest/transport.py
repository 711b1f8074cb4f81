from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol

from mwrequest.classify import ExchangeOutcome


@dataclass
class Request:
    """A request ready to be performed by a transport."""

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None


class Transport(Protocol):
    """Protocol for blocking HTTP transports."""

    def perform(self, request: Request) -> ExchangeOutcome:
        """Perform one exchange.

        Failures of the underlying client are reported in the outcome's
        transport_failure rather than raised.
        """
        ...

    def close(self):
        """Release resources held by the transport."""
        ...


class AsyncTransport(Protocol):
    """Protocol for asyncio HTTP transports."""

    async def perform(self, request: Request) -> ExchangeOutcome:
        """Perform one exchange."""
        ...

    async def close(self):
        """Release resources held by the transport."""
        ...
