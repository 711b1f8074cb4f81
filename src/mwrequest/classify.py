"""Classification of the raw outcome of an HTTP exchange."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from mwrequest.error import HTTPError, NoResponseError, RequestError, TransportError
from mwrequest.status import reason_phrase


@dataclass(frozen=True)
class ExchangeOutcome:
    """What a transport reports after performing one exchange.

    A transport failure precludes a status code, and a status code implies
    that the transport did not fail. Both may be missing when the transport
    completed without a usable response.
    """

    payload: Optional[bytes] = None
    status_code: Optional[int] = None
    transport_failure: Optional[BaseException] = None


@dataclass(frozen=True)
class Success:
    """The exchange produced a response that can be decoded. The payload is
    None when the response had no body."""

    payload: Optional[bytes] = None


@dataclass(frozen=True)
class Failure:
    error: RequestError


Verdict = Union[Success, Failure]


def classify(outcome: ExchangeOutcome) -> Verdict:
    """Decide whether an exchange outcome is usable or which failure it is.

    Rules are applied in order and the first one that matches wins:
    transport failures, then missing status codes, then error status codes.
    """
    failure = outcome.transport_failure
    if failure is not None:
        # Errors already classified (e.g. re-raised by a transport) are
        # passed through as is.
        if isinstance(failure, RequestError):
            return Failure(failure)
        return Failure(TransportError(failure))

    status_code = outcome.status_code
    if status_code is None:
        return Failure(NoResponseError())

    if status_code >= 400:
        return Failure(
            HTTPError(status_code, reason_phrase(status_code), outcome.payload or b"")
        )

    return Success(outcome.payload)
