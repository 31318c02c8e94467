"""
Container — dependency lifetimes.

    from depstore import container as DI

    c = (
        DI.container()
        .singleton(Settings, instance=settings)   # one per process
        .scoped(Connection, release=Connection.aclose)  # one per request
        .transient(CustomerStore, CustomerRepository)   # one per resolution
        .build()
    )

    async with c.scope() as scope:
        customers = await scope.resolve(CustomerStore)
"""

from depstore.container._types import (
    Lifetime,
    Registration,
    ContainerError,
    ScopeError,
)
from depstore.container._scope import RequestScope
from depstore.container._builder import ContainerBuilder, Container, container

__all__ = (
    "Lifetime",
    "Registration",
    "ContainerError",
    "ScopeError",
    "RequestScope",
    "ContainerBuilder",
    "Container",
    "container",
)
