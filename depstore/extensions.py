"""
Wiring — the registrations that make up a running store.

Each add_* function takes a builder and returns a new one, so the
composition root reads as a chain:

    c = build_container(settings, TableRateProvider())
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from depstore import container as DI
from depstore.repositories import (
    CustomerRepository,
    CustomerStore,
    ProductRepository,
    ProductStore,
    PromoCodeRepository,
    PromoCodeStore,
)
from depstore.services import DeliveryFeeService, ProductPricer, RateProvider
from depstore.settings import Settings
from depstore.store import Connection, create_engine, dispose_engine


def add_configuration(builder: DI.ContainerBuilder, settings: Settings) -> DI.ContainerBuilder:
    return builder.singleton(Settings, instance=settings)


def add_sql_connection(builder: DI.ContainerBuilder) -> DI.ContainerBuilder:
    """One engine per process, one Connection per request."""
    return (
        builder
        .singleton(AsyncEngine, create_engine, release=dispose_engine)
        .scoped(Connection, release=Connection.aclose)
    )


def add_repositories(builder: DI.ContainerBuilder) -> DI.ContainerBuilder:
    return (
        builder
        .transient(CustomerStore, CustomerRepository)
        .transient(ProductStore, ProductRepository)
        .transient(PromoCodeStore, PromoCodeRepository)
    )


def add_services(builder: DI.ContainerBuilder, rates: RateProvider) -> DI.ContainerBuilder:
    return (
        builder
        .singleton(RateProvider, instance=rates)
        .transient(DeliveryFeeService)
        .transient(ProductPricer)
    )


def build_container(settings: Settings, rates: RateProvider) -> DI.Container:
    """Register everything and build. Fails here if anything is missing."""
    builder = DI.container()
    builder = add_configuration(builder, settings)
    builder = add_sql_connection(builder)
    builder = add_repositories(builder)
    builder = add_services(builder, rates)
    return builder.build()


__all__ = (
    "add_configuration",
    "add_sql_connection",
    "add_repositories",
    "add_services",
    "build_container",
)
