"""Async helpers for fanning out sibling model operations."""

from __future__ import annotations

import asyncio
import inspect
from contextlib import suppress
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Iterable

T = TypeVar("T")


async def gather_ordered(awaitables: Iterable[Awaitable[T]]) -> list[T]:
    """Run ``awaitables`` concurrently and return their results in input order.

    The first failure cancels every sibling that is still running and is
    re-raised unchanged, so callers never observe a partial result list.
    Sibling failures that finished alongside it are consumed silently.
    """

    tasks: list[asyncio.Future[T]] = [asyncio.ensure_future(item) for item in awaitables]
    if not tasks:
        return []

    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        await _cancel_all(set(tasks))
        raise

    # Mark every finished failure as retrieved; only one is re-raised.
    for task in done:
        if not task.cancelled():
            task.exception()

    for task in tasks:
        if task not in done:
            continue
        if task.cancelled():
            await _cancel_all(pending)
            raise asyncio.CancelledError("sibling task cancelled")
        exc = task.exception()
        if exc is not None:
            await _cancel_all(pending)
            raise exc

    return [task.result() for task in tasks]


async def resolve_awaitable(value: Awaitable[T] | T) -> T:
    """Await ``value`` when a sync-or-async callable handed back an awaitable."""

    if inspect.isawaitable(value):
        return await value
    return value


async def _cancel_all(tasks: set[asyncio.Future[T]]) -> None:
    for task in tasks:
        task.cancel()
    if tasks:
        with suppress(Exception):
            await asyncio.gather(*tasks, return_exceptions=True)


__all__ = ["gather_ordered", "resolve_awaitable"]
