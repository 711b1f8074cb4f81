import os
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")

TIMEOUT_ENVVAR = "MWREQUEST_TIMEOUT"
MAX_WORKERS_ENVVAR = "MWREQUEST_MAX_WORKERS"
USER_AGENT_ENVVAR = "MWREQUEST_USER_AGENT"


@dataclass
class EnvironmentValue(Generic[T]):
    """A setting that is either passed explicitly, read from an environment
    variable, or left to its default."""

    _envvar: str
    _name: str
    _value: Optional[T]
    _from_envvar: bool

    def __init__(
        self,
        envvar: str,
        name: str,
        value: Optional[T] = None,
        default: Optional[T] = None,
        parse: Callable[[str], T] = str,  # type: ignore[assignment]
    ):
        self._envvar = envvar
        self._name = name
        self._from_envvar = False
        if value is not None:
            self._value = value
            return

        raw = os.environ.get(envvar)
        if not raw:
            self._value = default
            return
        try:
            self._value = parse(raw)
        except ValueError as e:
            raise ValueError(f"invalid value for {envvar}: {raw!r}") from e
        self._from_envvar = True

    def __str__(self):
        return str(self._value)

    @property
    def name(self) -> str:
        return self._envvar if self._from_envvar else self._name

    @property
    def value(self) -> Optional[T]:
        return self._value


def _positive_float(raw: str) -> float:
    value = float(raw)
    if value <= 0:
        raise ValueError("must be positive")
    return value


def _positive_int(raw: str) -> int:
    value = int(raw)
    if value <= 0:
        raise ValueError("must be positive")
    return value


def timeout(value: Optional[float] = None) -> Optional[float]:
    """Transport timeout in seconds, None when unset."""
    return EnvironmentValue(
        TIMEOUT_ENVVAR, "timeout", value, parse=_positive_float
    ).value


def max_workers(value: Optional[int] = None) -> Optional[int]:
    """Number of threads of blocking clients, None for the executor default."""
    return EnvironmentValue(
        MAX_WORKERS_ENVVAR, "max_workers", value, parse=_positive_int
    ).value


def user_agent(value: Optional[str] = None) -> Optional[str]:
    return EnvironmentValue(USER_AGENT_ENVVAR, "user_agent", value).value
