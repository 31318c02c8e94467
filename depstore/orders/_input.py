"""
Input — PlacementNode (entry point to the graph).
"""

from depstore import graph as G
from depstore.domain import PlaceOrder


@G.node
class PlacementNode:
    """Entry point: wraps the PlaceOrder request."""

    def __init__(self, data: PlaceOrder) -> None:
        self.data = data

    @classmethod
    def __compose__(cls, request: PlaceOrder) -> "PlacementNode":
        return cls(request)


__all__ = ("PlacementNode",)
