"""
Container builder — fluent API, validated at build time.
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, cast

import structlog

from depstore.container._scope import RequestScope, raise_teardown_errors, run_release
from depstore.container._types import (
    ContainerError,
    Factory,
    Lifetime,
    Registration,
    Release,
    ScopeError,
    name_of,
    read_dependencies,
)

logger = structlog.get_logger(__name__)

_MISSING: Any = object()


def _constant[T](value: T) -> Factory[T]:
    # Left unannotated: read_dependencies evaluates hints in module globals.
    def provide():
        return value

    provide.__name__ = f"provide_{type(value).__name__}"
    return provide


# ═══════════════════════════════════════════════════════════════════════════════
# Builder
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True, frozen=True)
class ContainerBuilder:
    """
    Fluent container builder.

    Each registration returns a new builder; the last registration for a
    type wins. Nothing is constructed until build().

    Example:
        c = (
            container()
            .singleton(Settings, instance=settings)
            .singleton(AsyncEngine, create_engine)
            .scoped(Connection, release=Connection.aclose)
            .transient(CustomerStore, CustomerRepository)
            .build()
        )
    """

    _items: tuple[Registration[Any], ...] = ()

    def _with(self, reg: Registration[Any]) -> ContainerBuilder:
        others = tuple(r for r in self._items if r.key is not reg.key)
        return ContainerBuilder(_items=(*others, reg))

    def _register[T](
        self,
        typ: type[T],
        lifetime: Lifetime,
        factory: Factory[T] | None,
        release: Release[T] | None,
    ) -> ContainerBuilder:
        factory = factory if factory is not None else cast(Factory[T], typ)
        return self._with(
            Registration(
                key=typ,
                lifetime=lifetime,
                factory=factory,
                dependencies=read_dependencies(factory),
                release=release,
            )
        )

    def singleton[T](
        self,
        typ: type[T],
        factory: Factory[T] | None = None,
        *,
        instance: T = _MISSING,
        release: Release[T] | None = None,
    ) -> ContainerBuilder:
        """Register a process-wide instance, built once by build()."""
        if instance is not _MISSING:
            if factory is not None:
                raise ContainerError(f"{name_of(typ)}: pass either a factory or an instance")
            factory = _constant(instance)
        return self._register(typ, Lifetime.SINGLETON, factory, release)

    def scoped[T](
        self,
        typ: type[T],
        factory: Factory[T] | None = None,
        *,
        release: Release[T] | None = None,
    ) -> ContainerBuilder:
        """Register a per-request instance, built on first use in a scope."""
        return self._register(typ, Lifetime.SCOPED, factory, release)

    def transient[T](
        self,
        typ: type[T],
        factory: Factory[T] | None = None,
    ) -> ContainerBuilder:
        """Register a type built anew on every resolution."""
        return self._register(typ, Lifetime.TRANSIENT, factory, None)

    def build(self) -> Container:
        """
        Validate the registrations and construct every singleton.

        Raises ContainerError for a missing dependency, a dependency
        cycle, or a registration that outlives something it depends on.
        """
        registry = {r.key: r for r in self._items}
        _validate(registry)
        return Container(registry)


def container() -> ContainerBuilder:
    """Create builder: container().singleton(...).scoped(...).build()"""
    return ContainerBuilder()


# ═══════════════════════════════════════════════════════════════════════════════
# Validation
# ═══════════════════════════════════════════════════════════════════════════════


def _validate(registry: dict[Any, Registration[Any]]) -> None:
    for reg in registry.values():
        for pname, dep in reg.dependencies:
            target = registry.get(dep)
            if target is None:
                raise ContainerError(
                    f"{reg.name} depends on {name_of(dep)} (parameter '{pname}'), "
                    "which is not registered"
                )
            if not reg.lifetime.can_depend_on(target.lifetime):
                raise ContainerError(
                    f"{reg.lifetime.value} {reg.name} cannot depend on "
                    f"{target.lifetime.value} {target.name}"
                )

    _check_cycles(registry)


def _check_cycles(registry: dict[Any, Registration[Any]]) -> None:
    done: set[Any] = set()

    def visit(key: Any, path: tuple[Any, ...]) -> None:
        if key in path:
            chain = " -> ".join(name_of(k) for k in (*path[path.index(key):], key))
            raise ContainerError(f"Dependency cycle: {chain}")
        if key in done:
            return
        for _, dep in registry[key].dependencies:
            visit(dep, (*path, key))
        done.add(key)

    for key in registry:
        visit(key, ())


# ═══════════════════════════════════════════════════════════════════════════════
# Release outside a coroutine
# ═══════════════════════════════════════════════════════════════════════════════

_detached: set[asyncio.Task[None]] = set()


def _forget(task: asyncio.Task[None]) -> None:
    _detached.discard(task)
    if not task.cancelled() and (e := task.exception()) is not None:
        logger.error("container.release_failed", error=str(e))


def _release_now(reg: Registration[Any], value: Any) -> None:
    """
    Release from synchronous code.

    Runs to completion here when no loop is running; otherwise it is
    scheduled on the running loop.
    """
    release = run_release(reg, value)
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        asyncio.run(release)
        return
    task = loop.create_task(release)
    _detached.add(task)
    task.add_done_callback(_forget)


# ═══════════════════════════════════════════════════════════════════════════════
# Container
# ═══════════════════════════════════════════════════════════════════════════════


class Container:
    """
    Built container. Holds singletons, opens request scopes.

    Singletons are constructed here, in dependency order, so a broken
    configuration fails at startup rather than on the first request.
    """

    __slots__ = ("_registry", "_singletons", "_owned", "_closed")

    def __init__(self, registry: dict[Any, Registration[Any]]) -> None:
        self._registry = registry
        self._singletons: dict[Any, Any] = {}
        self._owned: list[tuple[Registration[Any], Any]] = []
        self._closed = False

        for reg in registry.values():
            if reg.lifetime is Lifetime.SINGLETON:
                try:
                    self._construct(reg)
                except Exception:
                    self._abandon()
                    raise

    def _abandon(self) -> None:
        """Release what a failed build already constructed, newest first."""
        self._closed = True
        owned, self._owned = self._owned, []
        self._singletons.clear()
        for reg, value in reversed(owned):
            try:
                _release_now(reg, value)
            except Exception as e:
                logger.error("container.release_failed", dependency=reg.name, error=str(e))

    def _construct(self, reg: Registration[Any]) -> Any:
        if reg.key in self._singletons:
            return self._singletons[reg.key]

        kwargs = {
            pname: self._construct(self._registry[dep])
            for pname, dep in reg.dependencies
        }
        value = reg.factory(**kwargs)
        if inspect.isawaitable(value):
            if inspect.iscoroutine(value):
                value.close()
            raise ContainerError(f"singleton {reg.name} needs a synchronous factory")

        self._singletons[reg.key] = value
        if reg.release is not None:
            self._owned.append((reg, value))
        logger.debug("container.singleton", dependency=reg.name)
        return value

    def __contains__(self, typ: object) -> bool:
        return typ in self._registry

    def registration(self, typ: Any) -> Registration[Any]:
        reg = self._registry.get(typ)
        if reg is None:
            raise ContainerError(f"{name_of(typ)} is not registered")
        return reg

    def lifetime(self, typ: Any) -> Lifetime:
        return self.registration(typ).lifetime

    def get[T](self, typ: type[T]) -> T:
        """Return a singleton. Scoped and transient types need a scope."""
        if self._closed:
            raise ScopeError("Container is closed")
        reg = self.registration(typ)
        if reg.lifetime is not Lifetime.SINGLETON:
            raise ScopeError(
                f"{reg.name} is {reg.lifetime.value}; resolve it from a RequestScope"
            )
        return cast(T, self._singletons[typ])

    def scope(self, detail: str | None = None) -> RequestScope:
        if self._closed:
            raise ScopeError("Container is closed")
        return RequestScope(self, detail)

    async def aclose(self) -> None:
        """Release singletons in reverse construction order."""
        if self._closed:
            return
        self._closed = True

        owned, self._owned = self._owned, []
        errors: list[Exception] = []
        for reg, value in reversed(owned):
            try:
                await run_release(reg, value)
            except Exception as e:
                logger.error("container.release_failed", dependency=reg.name, error=str(e))
                errors.append(e)

        self._singletons.clear()
        raise_teardown_errors(errors, "container")


__all__ = ("ContainerBuilder", "Container", "container")
