"""
Core types for depstore.

The aliases the pipeline speaks in.
"""

from __future__ import annotations

from decimal import Decimal

from kungfu import LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Lazy Computation Aliases
# ═══════════════════════════════════════════════════════════════════════════════

type Lazy[T, E] = LazyCoroResult[T, E]
"""Lazy async computation that may fail."""

# ═══════════════════════════════════════════════════════════════════════════════
# Money
# ═══════════════════════════════════════════════════════════════════════════════

type Money = Decimal
"""Amount in the store's single currency. Never a float."""

ZERO: Money = Decimal("0")

__all__ = ("Lazy", "Money", "ZERO")
