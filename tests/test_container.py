"""Tests for the dependency container."""

import asyncio

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine

from depstore import container as DI
from depstore.container import ContainerError, Lifetime, ScopeError
from depstore.settings import Settings
from depstore.store import Connection


class Clock:
    pass


class Session:
    def __init__(self, clock: Clock) -> None:
        self.clock = clock
        self.released = False


class Handler:
    def __init__(self, session: Session, clock: Clock) -> None:
        self.session = session
        self.clock = clock


class CycleA:
    def __init__(self, b: "CycleB") -> None:
        self.b = b


class CycleB:
    def __init__(self, a: CycleA) -> None:
        self.a = a


class Cache:
    def __init__(self, session: Session) -> None:
        self.session = session


def _release(session: Session) -> None:
    session.released = True


def _container() -> DI.Container:
    return (
        DI.container()
        .singleton(Clock)
        .scoped(Session, release=_release)
        .transient(Handler)
        .build()
    )


class TestLifetimes:
    """Instance identity per lifetime."""

    @pytest.mark.asyncio
    async def test_singleton_shared_across_scopes(self):
        c = _container()
        async with c.scope() as first, c.scope() as second:
            assert await first.resolve(Clock) is await second.resolve(Clock)
        assert c.get(Clock) is c.get(Clock)

    @pytest.mark.asyncio
    async def test_scoped_shared_within_scope_only(self):
        c = _container()
        async with c.scope() as first:
            a = await first.resolve(Session)
            assert await first.resolve(Session) is a
        async with c.scope() as second:
            assert await second.resolve(Session) is not a

    @pytest.mark.asyncio
    async def test_transient_fresh_every_time(self):
        c = _container()
        async with c.scope() as scope:
            one = await scope.resolve(Handler)
            two = await scope.resolve(Handler)
        assert one is not two
        assert one.session is two.session
        assert one.clock is c.get(Clock)

    @pytest.mark.asyncio
    async def test_concurrent_resolution_builds_scoped_once(self):
        c = _container()
        async with c.scope() as scope:
            sessions = await asyncio.gather(*(scope.resolve(Session) for _ in range(5)))
        assert len({id(s) for s in sessions}) == 1

    def test_lifetime_reported(self):
        c = _container()
        assert c.lifetime(Clock) is Lifetime.SINGLETON
        assert c.lifetime(Session) is Lifetime.SCOPED
        assert c.lifetime(Handler) is Lifetime.TRANSIENT
        assert Handler in c

    def test_last_registration_wins(self):
        clock = Clock()
        c = DI.container().singleton(Clock).singleton(Clock, instance=clock).build()
        assert c.get(Clock) is clock


class TestValidation:
    """Misconfiguration fails at build()."""

    def test_missing_dependency(self):
        builder = DI.container().scoped(Connection, release=Connection.aclose)
        with pytest.raises(ContainerError, match="AsyncEngine"):
            builder.build()

    def test_missing_transitive_dependency(self):
        from depstore.store import create_engine

        builder = DI.container().singleton(AsyncEngine, create_engine)
        with pytest.raises(ContainerError, match="Settings"):
            builder.build()

    def test_cycle(self):
        builder = DI.container().transient(CycleA).transient(CycleB)
        with pytest.raises(ContainerError, match="cycle"):
            builder.build()

    def test_singleton_cannot_capture_scoped(self):
        builder = DI.container().singleton(Clock).scoped(Session).singleton(Cache)
        with pytest.raises(ContainerError, match="singleton Cache cannot depend on scoped Session"):
            builder.build()

    def test_async_singleton_factory_rejected(self):
        async def make_clock() -> Clock:
            return Clock()

        with pytest.raises(ContainerError, match="synchronous"):
            DI.container().singleton(Clock, make_clock).build()

    def test_instance_and_factory_exclusive(self):
        with pytest.raises(ContainerError):
            DI.container().singleton(Clock, Clock, instance=Clock())

    def test_singletons_built_eagerly(self):
        built: list[str] = []

        def make_settings() -> Settings:
            built.append("settings")
            return Settings(connection_string="sqlite+aiosqlite://")

        DI.container().singleton(Settings, make_settings).build()
        assert built == ["settings"]


class TestScopeBoundary:
    """Release and misuse of request scopes."""

    @pytest.mark.asyncio
    async def test_scoped_released_on_exit(self):
        c = _container()
        async with c.scope() as scope:
            session = await scope.resolve(Session)
            assert not session.released
        assert session.released

    @pytest.mark.asyncio
    async def test_scoped_released_when_request_fails(self):
        c = _container()
        with pytest.raises(RuntimeError, match="boom"):
            async with c.scope() as scope:
                session = await scope.resolve(Session)
                raise RuntimeError("boom")
        assert session.released

    @pytest.mark.asyncio
    async def test_release_in_reverse_creation_order(self):
        order: list[str] = []
        c = (
            DI.container()
            .singleton(Clock)
            .scoped(Session, release=lambda s: order.append("session"))
            .scoped(Cache, release=lambda s: order.append("cache"))
            .build()
        )
        async with c.scope() as scope:
            await scope.resolve(Cache)
        assert order == ["cache", "session"]

    @pytest.mark.asyncio
    async def test_closed_scope_refuses_resolution(self):
        c = _container()
        async with c.scope() as scope:
            pass
        with pytest.raises(ScopeError):
            await scope.resolve(Session)

    def test_scoped_needs_a_scope(self):
        c = _container()
        with pytest.raises(ScopeError, match="RequestScope"):
            c.get(Session)

    @pytest.mark.asyncio
    async def test_singleton_released_on_container_close(self):
        released: list[Clock] = []
        c = DI.container().singleton(Clock, release=released.append).build()
        clock = c.get(Clock)
        await c.aclose()
        assert released == [clock]
        with pytest.raises(ScopeError):
            c.scope()

    @pytest.mark.asyncio
    async def test_scoped_finished_after_close_is_released(self):
        gate = asyncio.Event()
        released: list[Session] = []

        async def slow_session(clock: Clock) -> Session:
            await gate.wait()
            return Session(clock)

        c = (
            DI.container()
            .singleton(Clock)
            .scoped(Session, slow_session, release=released.append)
            .build()
        )
        scope = c.scope()
        pending = asyncio.create_task(scope.resolve(Session))
        await asyncio.sleep(0)

        await scope.aclose()
        gate.set()

        with pytest.raises(ScopeError, match="closed while building"):
            await pending
        assert len(released) == 1
        assert released[0].clock is c.get(Clock)


def _no_session(clock: Clock) -> Session:
    raise RuntimeError("no session")


class TestFailedBuild:
    """Singletons built before a failing factory are released."""

    def test_sync_release(self):
        released: list[Clock] = []
        builder = (
            DI.container()
            .singleton(Clock, release=released.append)
            .singleton(Session, _no_session)
        )
        with pytest.raises(RuntimeError, match="no session"):
            builder.build()
        assert len(released) == 1
        assert isinstance(released[0], Clock)

    def test_async_release_without_a_loop(self):
        released: list[Clock] = []

        async def close_clock(clock: Clock) -> None:
            await asyncio.sleep(0)
            released.append(clock)

        builder = (
            DI.container()
            .singleton(Clock, release=close_clock)
            .singleton(Session, _no_session)
        )
        with pytest.raises(RuntimeError, match="no session"):
            builder.build()
        assert len(released) == 1

    @pytest.mark.asyncio
    async def test_async_release_inside_a_loop(self):
        released: list[Clock] = []

        async def close_clock(clock: Clock) -> None:
            released.append(clock)

        builder = (
            DI.container()
            .singleton(Clock, release=close_clock)
            .singleton(Session, _no_session)
        )
        with pytest.raises(RuntimeError, match="no session"):
            builder.build()
        for _ in range(3):
            await asyncio.sleep(0)
        assert len(released) == 1

    def test_release_errors_do_not_mask_the_cause(self):
        def refuse(clock: Clock) -> None:
            raise OSError("stuck")

        builder = (
            DI.container()
            .singleton(Clock, release=refuse)
            .singleton(Session, _no_session)
        )
        with pytest.raises(RuntimeError, match="no session"):
            builder.build()
