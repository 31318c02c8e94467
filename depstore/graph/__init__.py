"""
Graph — computation graphs with auto-parallelization.

    from depstore import graph as G

    @G.node
    class CustomerNode:
        @classmethod
        async def __compose__(cls, request: PlaceOrder, customers: CustomerStore) -> "CustomerNode":
            ...

    pipeline = G.graph(PlaceOrderNode).requiring(CustomerStore, ...)
    node = await pipeline.within(scope, request)

Nodes that do not depend on each other run concurrently.
"""

from nodnod import scalar_node as node

from depstore.graph._compiled import Compiled, graph

__all__ = (
    "node",
    "Compiled",
    "graph",
)
