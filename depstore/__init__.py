"""
depstore — order placement over a lifetime-aware dependency container.

    from depstore import container as DI  # Singleton / scoped / transient
    from depstore import graph as G       # Computation graphs
    from depstore.orders import OrderService
"""

from depstore import container
from depstore import graph
from depstore._types import Lazy, Money, ZERO

__version__ = "0.1.0"

__all__ = (
    "container",
    "graph",
    "Lazy",
    "Money",
    "ZERO",
)
