"""
RequestScope — the lifetime boundary of one inbound request.
"""

from __future__ import annotations

import asyncio
import inspect
import secrets
from typing import TYPE_CHECKING, Any, cast

import structlog

from depstore.container._types import (
    Lifetime,
    Registration,
    ScopeError,
    name_of,
)

if TYPE_CHECKING:
    from depstore.container._builder import Container

logger = structlog.get_logger(__name__)


async def build_instance(
    reg: Registration[Any],
    kwargs: dict[str, Any],
) -> Any:
    value = reg.factory(**kwargs)
    if inspect.isawaitable(value):
        value = await value
    return value


async def run_release(reg: Registration[Any], value: Any) -> None:
    if reg.release is None:
        return
    result = reg.release(value)
    if inspect.isawaitable(result):
        await result


def raise_teardown_errors(errors: list[Exception], detail: str) -> None:
    if not errors:
        return
    if len(errors) == 1:
        raise errors[0]
    raise ExceptionGroup(f"errors while closing {detail}", errors)


class RequestScope:
    """
    Owns the scoped instances of one request.

    Scoped instances are built lazily, once per scope, and released in
    reverse creation order when the scope exits, whichever way it exits.
    Transients are built fresh on every resolve; singletons come from the
    container.

        async with container.scope() as scope:
            customers = await scope.resolve(CustomerStore)
    """

    __slots__ = ("_container", "_detail", "_instances", "_locks", "_owned", "_closed")

    def __init__(self, container: Container, detail: str | None = None) -> None:
        self._container = container
        self._detail = detail or secrets.token_hex(4)
        self._instances: dict[Any, Any] = {}
        self._locks: dict[Any, asyncio.Lock] = {}
        self._owned: list[tuple[Registration[Any], Any]] = []
        self._closed = False

    @property
    def detail(self) -> str:
        return self._detail

    @property
    def closed(self) -> bool:
        return self._closed

    async def resolve[T](self, typ: type[T]) -> T:
        if self._closed:
            raise ScopeError(f"Scope {self._detail} is closed; cannot resolve {name_of(typ)}")

        reg = self._container.registration(typ)
        match reg.lifetime:
            case Lifetime.SINGLETON:
                return self._container.get(typ)
            case Lifetime.SCOPED:
                return cast(T, await self._scoped(reg))
            case Lifetime.TRANSIENT:
                return cast(T, await self._build(reg))

    async def _scoped(self, reg: Registration[Any]) -> Any:
        if reg.key in self._instances:
            return self._instances[reg.key]

        lock = self._locks.setdefault(reg.key, asyncio.Lock())
        async with lock:
            if reg.key not in self._instances:
                value = await self._build(reg)
                if self._closed:
                    await run_release(reg, value)
                    raise ScopeError(
                        f"Scope {self._detail} closed while building {reg.name}"
                    )
                self._instances[reg.key] = value
                if reg.release is not None:
                    self._owned.append((reg, value))
                logger.debug("scope.created", scope=self._detail, dependency=reg.name)
        return self._instances[reg.key]

    async def _build(self, reg: Registration[Any]) -> Any:
        kwargs = {pname: await self.resolve(dep) for pname, dep in reg.dependencies}
        return await build_instance(reg, kwargs)

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True

        owned, self._owned = self._owned, []
        self._instances.clear()

        errors: list[Exception] = []
        for reg, value in reversed(owned):
            try:
                await run_release(reg, value)
            except Exception as e:
                logger.error("scope.release_failed", scope=self._detail, dependency=reg.name, error=str(e))
                errors.append(e)

        logger.debug("scope.closed", scope=self._detail, released=len(owned))
        raise_teardown_errors(errors, f"scope {self._detail}")

    async def __aenter__(self) -> RequestScope:
        logger.debug("scope.opened", scope=self._detail)
        return self

    async def __aexit__(self, *args: object) -> None:
        # Release runs to completion even if the request is cancelled again.
        await asyncio.shield(self.aclose())


__all__ = ("RequestScope", "build_instance", "run_release", "raise_teardown_errors")
