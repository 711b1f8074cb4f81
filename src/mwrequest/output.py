"""Typed outputs of requests, and decoding of classified responses into them."""

from __future__ import annotations

import collections.abc
import functools
import logging
from dataclasses import dataclass
from typing import (
    Any,
    Dict,
    Generic,
    NoReturn,
    Optional,
    Protocol,
    Type,
    TypeVar,
    Union,
    get_args,
    get_origin,
)

from pydantic import TypeAdapter

from mwrequest.classify import Failure, Success, Verdict
from mwrequest.error import DecodingError, RequestError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Decoder(Protocol):
    """Protocol for objects that decode response payloads."""

    def decode(self, type_: Any, data: bytes) -> Any:
        """Decode data into a value of type_, raising on malformed input."""
        ...


class JSONDecoder:
    """Structural JSON decoder.

    Any type understood by pydantic can be decoded: models, dataclasses,
    TypedDicts, builtin types, and sequences of those. A sequence is only
    decoded if all its elements are.
    """

    __slots__ = ("strict",)

    def __init__(self, strict: bool = False):
        """Initialize a JSON decoder.

        Args:
            strict: Reject values that only match the schema after type
                coercion (e.g. "1" for an int field).
        """
        self.strict = strict

    def decode(self, type_: Any, data: bytes) -> Any:
        return _type_adapter(type_).validate_json(data, strict=self.strict)

    def __repr__(self):
        return f"JSONDecoder(strict={self.strict})"


@functools.lru_cache(maxsize=256)
def _type_adapter(type_: Any) -> TypeAdapter:
    return TypeAdapter(type_)


DEFAULT_DECODER: Decoder = JSONDecoder()

_DECODERS: Dict[Type[Any], Decoder] = {}

_SEQUENCE_TYPES = (
    list,
    tuple,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
)


def register_decoder(type_: Type[Any], decoder: Decoder):
    """Register the decoder used for payloads decoded into type_.

    The decoder also applies to subclasses of type_, and to sequences of
    type_ (e.g. list[type_]), unless a more specific registration exists.
    """
    _DECODERS[type_] = decoder


def decoder_for(type_: Any) -> Decoder:
    """Returns the decoder registered for type_, or the default decoder."""
    origin = get_origin(type_)
    if origin is not None:
        args = get_args(type_)
        if origin in _SEQUENCE_TYPES and args:
            return decoder_for(args[0])
        type_ = origin

    if isinstance(type_, type):
        for cls in type_.__mro__:
            try:
                return _DECODERS[cls]
            except KeyError:
                pass

    return DEFAULT_DECODER


@dataclass(frozen=True)
class Unit:
    """Output of requests that only confirm success."""


@dataclass(frozen=True)
class RawBytes:
    """Output of requests returning the response payload unchanged."""


@dataclass(frozen=True)
class Decoded(Generic[T]):
    """Output of requests decoding the response payload into a value of
    the given type.

    The decoder defaults to the one registered for the type (see
    register_decoder).
    """

    type: Any
    decoder: Optional[Decoder] = None


Output = Union[Unit, RawBytes, Decoded[Any]]

UNIT = Unit()
RAW = RawBytes()


def as_output(value: Any) -> Output:
    """Convert call-site shorthands into an Output.

    None stands for UNIT, bytes for RAW, and any other type is decoded.
    """
    if isinstance(value, (Unit, RawBytes, Decoded)):
        return value
    if value is None:
        return UNIT
    if value is bytes:
        return RAW
    return Decoded(value)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    error: RequestError

    def unwrap(self) -> NoReturn:
        raise self.error

    @property
    def kind(self):
        return self.error.kind


Result = Union[Ok[T], Err]


def decode(verdict: Verdict, output: Output) -> Result[Any]:
    """Produce the typed result of a classified exchange.

    Failed verdicts are returned as is; decoding only runs on successful
    exchanges. Decoding failures are returned as DecodingError, this function
    never raises.
    """
    match verdict:
        case Failure(error=error):
            return Err(error)
        case Success(payload=payload):
            data = payload if payload is not None else b""
        case _:
            raise TypeError(f"not a verdict: {verdict!r}")

    match output:
        case Unit():
            return Ok(None)
        case RawBytes():
            return Ok(data)
        case Decoded(type=type_, decoder=decoder):
            if decoder is None:
                decoder = decoder_for(type_)
            try:
                value = decoder.decode(type_, data)
            except Exception as e:
                logger.debug("decoding %d byte(s) as %r failed: %s", len(data), type_, e)
                return Err(DecodingError(e))
            return Ok(value)

    raise TypeError(f"not an output: {output!r}")
