"""
Compiled graph — the agent is built once, at import; each call runs it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, cast

from kungfu import Nothing, Some
from nodnod import EventLoopAgent, Node, Scope, Value

from depstore.container import RequestScope


@dataclass(slots=True, frozen=True)
class Compiled[T]:
    """
    A placement-style graph ready to execute.

    `requires` lists the collaborators each execution takes from the
    caller's RequestScope, so their lifetimes follow the container.
    Inputs are keyed by their runtime type; requirements by the type they
    were declared under, which may be a protocol.

    Example:
        pipeline = graph(PlaceOrderNode).requiring(CustomerStore, ProductPricer)

        async with container.scope() as scope:
            node = await pipeline.within(scope, request)
    """

    target: type[T]
    agent: EventLoopAgent
    requires: tuple[type[Any], ...] = ()

    def requiring(self, *types: type[Any]) -> Compiled[T]:
        return Compiled(self.target, self.agent, (*self.requires, *types))

    async def within(self, scope: RequestScope, *inputs: object) -> T:
        """Resolve every requirement from `scope`, then execute."""
        bindings = {typ: await scope.resolve(typ) for typ in self.requires}
        return await self.execute(*inputs, bindings=bindings)

    async def execute(
        self,
        *inputs: object,
        bindings: Mapping[type[Any], object] | None = None,
    ) -> T:
        """
        Run the graph over `inputs` and `bindings` and return the target node.

        Independent nodes run concurrently. The first failure cancels the
        nodes still pending and propagates unchanged.
        """
        values = [(type(v), v) for v in inputs]
        values.extend((bindings or {}).items())

        async with Scope(detail=f"graph:{self.target.__name__}") as frame:
            for typ, value in values:
                frame.push(Value(typ, value))
            await self.agent.run(frame, {})

            match frame.retrieve(self.target):
                case Some(found):
                    return cast(T, found.value)
                case Nothing():
                    raise KeyError(f"{self.target.__name__} was not produced by the graph")


def graph[T](target: type[T]) -> Compiled[T]:
    """Compile the graph that ends in `target`."""
    agent = EventLoopAgent.build({cast(type[Node[Any, Any]], target)})
    return Compiled(target, agent)


__all__ = ("Compiled", "graph")
