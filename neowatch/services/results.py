"""
Shared service plumbing: structured logging, the Result type and the error
boundary used by callers of backend operations.

Key patterns:
- One structlog configuration for the whole application
- Generic Result type for expected failures
- Errors propagate from services and are captured only at the caller boundary
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Generic, Literal, ParamSpec, TypeVar

import structlog

_SHARED_PROCESSORS: list = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]

# Configure structured logging (JSON by default, see configure_logging)
structlog.configure(
    processors=[*_SHARED_PROCESSORS, structlog.processors.JSONRenderer()],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


def configure_logging(
    level: str = "INFO", log_format: Literal["json", "console"] = "json"
) -> None:
    """Reconfigure structlog and the stdlib root logger for the given level and renderer."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))
    logging.getLogger().setLevel(getattr(logging, level.upper(), logging.INFO))

    renderer = (
        structlog.dev.ConsoleRenderer()
        if log_format == "console"
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[*_SHARED_PROCESSORS, renderer],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


ValueT = TypeVar("ValueT")
P = ParamSpec("P")


class Result(Generic[ValueT]):
    """
    Explicit error handling without exceptions for expected failures.

    Backend calls raise; the caller boundary turns them into a Result so the
    triggering action can show the error and carry on.
    """

    def __init__(self, value: ValueT | None = None, error: Exception | None = None) -> None:
        if value is not None and error is not None:
            raise ValueError("Result cannot have both value and error")
        self._value: ValueT | None = value
        self._error: Exception | None = error

    @classmethod
    def ok(cls, value: ValueT) -> "Result[ValueT]":
        return cls(value=value)

    @classmethod
    def err(cls, error: Exception) -> "Result[ValueT]":
        if error is None:
            raise ValueError("Result.err requires an exception")
        return cls(error=error)

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return self._error is not None

    def unwrap(self) -> ValueT:
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore[return-value]

    def unwrap_or(self, default: ValueT) -> ValueT:
        return self._value if self._error is None else default  # type: ignore[return-value]

    def unwrap_err(self) -> Exception:
        if self._error is None:
            raise ValueError("Called unwrap_err() on an Ok value")
        return self._error


async def capture(
    action: Callable[P, Awaitable[ValueT]], *args: P.args, **kwargs: P.kwargs
) -> Result[ValueT]:
    """
    Await a backend action and capture any failure as Result.err.

    The failure is terminal for this action only; it is logged with the
    action name so the caller can surface it to the user.
    """
    action_name = getattr(action, "__qualname__", repr(action))
    try:
        value = await action(*args, **kwargs)
    except Exception as e:
        logger.warning("action_failed", action=action_name, error=str(e))
        return Result.err(e)
    return Result.ok(value)
