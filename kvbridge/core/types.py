"""
kvbridge shared types.

Commands come in, envelopes go out. Both are short-lived values:
nothing here is retained by the adapter after a call completes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Outcomes
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

# Payload markers used on the wire
UNDEFINED = "undefined"
INVALID_PARAM = "invalid_param"


class Outcome(str, Enum):
    """The `result` field of an envelope."""

    SUCCESS = "success"
    FAILED = "failed"
    INVALID_PARAM = "invalid_param"
    UNAVAILABLE = "unavailable"  # only with the "report" unavailable policy


@dataclass(frozen=True, slots=True)
class ResultEnvelope:
    """
    Uniform `{result, data}` answer to one command.

    `data` is UNDEFINED, the INVALID_PARAM marker, a stored string,
    an int count, or a list of keys depending on the command.
    """

    result: Outcome
    data: Any = UNDEFINED

    @property
    def ok(self) -> bool:
        return self.result is Outcome.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        data = list(self.data) if isinstance(self.data, (list, tuple)) else self.data
        return {"result": self.result.value, "data": data}

    @staticmethod
    def success(data: Any = UNDEFINED) -> ResultEnvelope:
        return ResultEnvelope(result=Outcome.SUCCESS, data=data)

    @staticmethod
    def failed(data: Any = UNDEFINED) -> ResultEnvelope:
        return ResultEnvelope(result=Outcome.FAILED, data=data)

    @staticmethod
    def invalid_param() -> ResultEnvelope:
        return ResultEnvelope(result=Outcome.INVALID_PARAM, data=UNDEFINED)

    @staticmethod
    def unavailable() -> ResultEnvelope:
        return ResultEnvelope(result=Outcome.UNAVAILABLE, data=UNDEFINED)

    @staticmethod
    def from_dict(payload: dict[str, Any]) -> ResultEnvelope:
        return ResultEnvelope(
            result=Outcome(payload["result"]),
            data=payload.get("data", UNDEFINED),
        )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Commands
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


@dataclass(frozen=True, slots=True)
class CommandSpec:
    """Declared arity of a command. The last slot is always the callback."""

    name: str
    args: tuple[str, ...]

    @property
    def arity(self) -> int:
        """Number of positional arguments before the callback id."""
        return len(self.args) - 1

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "args": list(self.args)}


@dataclass(slots=True)
class Command:
    """A single invocation: wire name, positional args, callback id."""

    name: str
    args: tuple[Any, ...] = ()
    callback_id: str = ""

    @staticmethod
    def from_dict(payload: dict[str, Any]) -> Command:
        """Build from the `{method, args, callbackId}` wire shape."""
        return Command(
            name=str(payload.get("method", "")),
            args=tuple(payload.get("args") or ()),
            callback_id=str(payload.get("callbackId", "")),
        )
