"""
Upstream client contract.

The relay never speaks the upstream protocol itself. It drives any client
object that can log in and out; every other public method on the client
is a named operation the routes may relay. The concrete client is chosen
by the ``UPSTREAM_CLIENT_FACTORY`` setting.
"""

from __future__ import annotations

import importlib
import inspect

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeVar, runtime_checkable

from sunsama_relay.core.exceptions import ConfigurationError

T = TypeVar("T")


@runtime_checkable
class UpstreamClient(Protocol):
    """Minimal surface the session manager needs from an upstream client."""

    async def login(self, email: str, password: str) -> Any: ...

    def logout(self) -> Any: ...


#: Zero-argument callable returning a fresh, logged-out client
ClientFactory = Callable[[], UpstreamClient]

#: Operation run against a live client; may be sync or async
Operation = Callable[[Any], Awaitable[T] | T]


async def maybe_await(value: Awaitable[T] | T) -> T:
    """Await *value* if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


def load_client_factory(path: str | None) -> ClientFactory:
    """Resolve a ``'package.module:attribute'`` path to a client factory.

    Raises:
        ConfigurationError: If the path is unset or cannot be imported.
    """
    if not path:
        raise ConfigurationError(
            "UPSTREAM_CLIENT_FACTORY environment variable is required",
            setting="upstream_client_factory",
        )

    module_name, _, attr_path = path.partition(":")
    try:
        target: Any = importlib.import_module(module_name)
        for attr in attr_path.split("."):
            target = getattr(target, attr)
    except (ImportError, AttributeError) as exc:
        raise ConfigurationError(
            f"Cannot load upstream client factory '{path}': {exc}",
            setting="upstream_client_factory",
        ) from exc

    if not callable(target):
        raise ConfigurationError(
            f"Upstream client factory '{path}' is not callable",
            setting="upstream_client_factory",
        )
    return target
