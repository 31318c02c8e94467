"""
Container types — lifetimes, registrations, errors.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, get_type_hints

# ═══════════════════════════════════════════════════════════════════════════════
# Lifetime
# ═══════════════════════════════════════════════════════════════════════════════


class Lifetime(Enum):
    """How long a resolved instance lives."""

    SINGLETON = "singleton"
    """One instance per container, built at startup."""

    SCOPED = "scoped"
    """One instance per RequestScope, built on first use."""

    TRANSIENT = "transient"
    """A fresh instance on every resolution."""

    @property
    def rank(self) -> int:
        match self:
            case Lifetime.SINGLETON:
                return 3
            case Lifetime.SCOPED:
                return 2
            case Lifetime.TRANSIENT:
                return 1

    def can_depend_on(self, other: Lifetime) -> bool:
        """A registration must not capture anything that dies before it does."""
        return self is Lifetime.TRANSIENT or other.rank >= self.rank


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class ContainerError(Exception):
    """Container misconfiguration, raised while building."""


class ScopeError(ContainerError):
    """Resolution attempted outside a live scope."""


# ═══════════════════════════════════════════════════════════════════════════════
# Registration
# ═══════════════════════════════════════════════════════════════════════════════

type Factory[T] = Callable[..., T | Awaitable[T]]
"""Builds an instance. Parameters are resolved by their type hints."""

type Release[T] = Callable[[T], Awaitable[None] | None]
"""Releases an instance when its owner (scope or container) closes."""


def name_of(typ: object) -> str:
    return getattr(typ, "__name__", repr(typ))


def read_dependencies(factory: Callable[..., Any]) -> tuple[tuple[str, Any], ...]:
    """
    Read (parameter, type) pairs a factory needs.

    Parameters with defaults are left to the factory.
    """
    target = factory.__init__ if isinstance(factory, type) else factory
    hints = get_type_hints(target)
    deps: list[tuple[str, Any]] = []

    for pname, p in inspect.signature(factory).parameters.items():
        if p.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        if p.default is not inspect.Parameter.empty:
            continue
        ptype = hints.get(pname)
        if ptype is None:
            raise ContainerError(
                f"{name_of(factory)}: parameter '{pname}' has no type annotation"
            )
        deps.append((pname, ptype))

    return tuple(deps)


@dataclass(frozen=True, slots=True)
class Registration[T]:
    key: type[T]
    lifetime: Lifetime
    factory: Factory[T]
    dependencies: tuple[tuple[str, Any], ...]
    release: Release[T] | None = None

    @property
    def name(self) -> str:
        return name_of(self.key)


__all__ = (
    "Lifetime",
    "ContainerError",
    "ScopeError",
    "Factory",
    "Release",
    "Registration",
    "read_dependencies",
    "name_of",
)
