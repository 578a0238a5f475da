"""
Command table and router.

Maps wire command names to adapter methods and enforces the declared
arity before anything reaches the adapter. Mismatches are boundary
errors and are raised to the dispatcher.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from kvbridge.bridge.adapter import StorageAdapter
from kvbridge.core.errors import CommandError, UnknownCommandError
from kvbridge.core.types import Command, CommandSpec

logger = logging.getLogger(__name__)

STORAGE_COMMANDS: tuple[CommandSpec, ...] = (
    CommandSpec("setItem", ("string", "string", "function")),
    CommandSpec("getItem", ("string", "function")),
    CommandSpec("removeItem", ("string", "function")),
    CommandSpec("length", ("function",)),
    CommandSpec("getAllKeys", ("function",)),
)


def describe() -> dict[str, list[dict[str, Any]]]:
    """Module metadata in the `{module: [{name, args}]}` shape dispatchers expect."""
    return {"storage": [spec.to_dict() for spec in STORAGE_COMMANDS]}


class CommandRouter:
    """
    Routes Commands to a StorageAdapter.

    Usage:
        router = CommandRouter(adapter)
        router.dispatch(Command("getItem", ("a",), callback_id="cb1"))
    """

    def __init__(self, adapter: StorageAdapter) -> None:
        self._specs = {spec.name: spec for spec in STORAGE_COMMANDS}
        self._handlers: dict[str, Callable[..., None]] = {
            "setItem": adapter.set_item,
            "getItem": adapter.get_item,
            "removeItem": adapter.remove_item,
            "length": adapter.length,
            "getAllKeys": adapter.get_all_keys,
        }

    @property
    def names(self) -> list[str]:
        return list(self._specs)

    def spec(self, name: str) -> CommandSpec:
        spec = self._specs.get(name)
        if spec is None:
            available = ", ".join(self._specs)
            raise UnknownCommandError(
                f"Unknown command '{name}'. Available: {available}",
                command=name,
            )
        return spec

    def dispatch(self, command: Command) -> None:
        spec = self.spec(command.name)

        if len(command.args) != spec.arity:
            raise CommandError(
                f"{spec.name} takes {spec.arity} argument(s), got {len(command.args)}",
                command=spec.name,
            )
        for position, (kind, arg) in enumerate(zip(spec.args, command.args)):
            # None stands for a missing string; the adapter reports it
            if kind == "string" and arg is not None and not isinstance(arg, str):
                raise CommandError(
                    f"{spec.name} argument {position} must be a string, "
                    f"got {type(arg).__name__}",
                    command=spec.name,
                )

        logger.debug(f"Dispatching {spec.name} for {command.callback_id}")
        self._handlers[spec.name](*command.args, command.callback_id)
