"""Utility exports for async fan-out helpers."""

from modelgraph.utils.concurrency import gather_ordered, resolve_awaitable

__all__ = ["gather_ordered", "resolve_awaitable"]
