"""Delivery of request results to callers.

A RequestHandler represents one request in flight. Its result is delivered
exactly once, and can be observed through callbacks, by blocking on get(),
or by awaiting the handler.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
from typing import Any, Callable, Generator, Generic, Optional, TypeVar

from mwrequest.classify import ExchangeOutcome, classify
from mwrequest.error import CancelledError, RequestError, TransportError, UnknownError
from mwrequest.output import Err, Ok, Output, Result, decode
from mwrequest.transport import AsyncTransport, Request, Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")

SuccessHandler = Callable[[Any], None]
FailureHandler = Callable[[RequestError], None]


class RequestHandler(Generic[T]):
    """Handle on a request in flight."""

    __slots__ = (
        "_request",
        "_output",
        "_success",
        "_failure",
        "_future",
        "_lock",
        "_abort",
        "_loop",
    )

    def __init__(
        self,
        request: Request,
        output: Output,
        success: Optional[SuccessHandler] = None,
        failure: Optional[FailureHandler] = None,
    ):
        self._request = request
        self._output = output
        self._success = success
        self._failure = failure
        self._future: concurrent.futures.Future[Result[T]] = (
            concurrent.futures.Future()
        )
        self._lock = threading.Lock()
        self._abort: Optional[Callable[[], Any]] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def __repr__(self):
        state = "done" if self.done() else "pending"
        return (
            f"RequestHandler({self._request.method} {self._request.url}, {state})"
        )

    @property
    def request(self) -> Request:
        return self._request

    def done(self) -> bool:
        """Returns True if the result of the request was delivered."""
        return self._future.done()

    def result(self) -> Result[T]:
        """Block until the request completes and return its result.

        Raises:
            RuntimeError: if called from the event loop running the request
                before it completed.
        """
        if not self.done() and self._loop is not None:
            try:
                running = asyncio.get_running_loop()
            except RuntimeError:
                running = None
            if running is self._loop:
                raise RuntimeError(
                    "blocking on a request from the event loop running it, use await"
                )
        return self._future.result()

    def get(self) -> T:
        """Block until the request completes and return its output.

        Raises:
            RequestError: if the request failed.

            RuntimeError: if called from the event loop running the request
                before it completed.
        """
        return self.result().unwrap()

    async def wait(self) -> T:
        """Wait for the request to complete without blocking the event loop.

        Raises:
            RequestError: if the request failed.
        """
        # Cancelling the waiter must not cancel the delivery of the result.
        result = await asyncio.shield(asyncio.wrap_future(self._future))
        return result.unwrap()

    def __await__(self) -> Generator[Any, None, T]:
        return self.wait().__await__()

    def cancel(self):
        """Cancel the request.

        A request cancelled before completion fails with a TransportError
        caused by CancelledError. Cancelling a completed request does nothing.
        """
        if self.done():
            return
        if self._deliver(Err(TransportError(CancelledError()))):
            logger.debug("cancelled %s %s", self._request.method, self._request.url)
        abort = self._abort
        if abort is not None:
            abort()

    def _complete(self, outcome: ExchangeOutcome) -> bool:
        verdict = classify(outcome)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "%s %s: status=%s verdict=%s",
                self._request.method,
                self._request.url,
                outcome.status_code,
                type(verdict).__name__,
            )
        return self._deliver(decode(verdict, self._output))

    def _deliver(self, result: Result[T]) -> bool:
        with self._lock:
            if self._future.done():
                logger.debug(
                    "dropping late result of %s %s: %r",
                    self._request.method,
                    self._request.url,
                    result,
                )
                return False
            self._future.set_result(result)

        try:
            match result:
                case Ok(value=value):
                    if self._success is not None:
                        self._success(value)
                case Err(error=error):
                    if self._failure is not None:
                        self._failure(error)
        except Exception:
            logger.exception(
                "callback of %s %s raised", self._request.method, self._request.url
            )
        return True

    def _finish(self):
        # Safety net: the request must not leave callers waiting forever.
        if self.done():
            return
        if self._deliver(Err(UnknownError())):
            logger.error(
                "%s %s completed without a result",
                self._request.method,
                self._request.url,
            )


def perform(transport: Transport, request: Request) -> ExchangeOutcome:
    """Run a blocking transport, capturing exceptions into the outcome."""
    try:
        return transport.perform(request)
    except Exception as e:
        return ExchangeOutcome(transport_failure=e)


async def perform_async(transport: AsyncTransport, request: Request) -> ExchangeOutcome:
    """Run an asyncio transport, capturing exceptions into the outcome."""
    try:
        return await transport.perform(request)
    except Exception as e:
        return ExchangeOutcome(transport_failure=e)


def start_blocking(
    handler: RequestHandler[T],
    transport: Transport,
    executor: concurrent.futures.Executor,
) -> RequestHandler[T]:
    """Schedule the request of handler on a thread pool."""

    def run():
        try:
            if not handler.done():
                handler._complete(perform(transport, handler.request))
        finally:
            handler._finish()

    work = executor.submit(run)
    handler._abort = work.cancel
    # Work cancelled before it started never reaches run().
    work.add_done_callback(lambda _: handler._finish())
    return handler


def start_async(
    handler: RequestHandler[T],
    transport: AsyncTransport,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> RequestHandler[T]:
    """Schedule the request of handler as a task of the event loop.

    Raises:
        RuntimeError: if no loop is passed and none is running.
    """
    if loop is None:
        loop = asyncio.get_running_loop()

    async def run():
        try:
            outcome = await perform_async(transport, handler.request)
        except asyncio.CancelledError:
            handler._deliver(Err(TransportError(CancelledError())))
            raise
        handler._complete(outcome)

    def done(task: asyncio.Task):
        # A task cancelled before its first step never enters run().
        if task.cancelled() and not handler.done():
            handler._deliver(Err(TransportError(CancelledError())))
        handler._finish()

    task = loop.create_task(run())
    handler._loop = loop
    handler._abort = lambda: loop.call_soon_threadsafe(task.cancel)
    task.add_done_callback(done)
    return handler
