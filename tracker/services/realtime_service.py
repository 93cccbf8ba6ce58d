"""
Live query subscriptions.

A subscription pairs a loader (re-runs a repository query) with a snapshot
callback. Every mutation in a collection calls ``notify`` and each active
subscription on that collection re-runs its loader and receives the new
snapshot.
"""

import asyncio
from itertools import count
from typing import Any, Awaitable, Callable, Optional, Sequence

from tracker.core.logger import setup_logger

logger = setup_logger(__name__)

Loader = Callable[[], Awaitable[Sequence[Any]]]
SnapshotCallback = Callable[[list[Any]], Awaitable[None]]


class Subscription:
    """Handle returned by ``RealtimeManager.subscribe``; call ``cancel`` on scope exit."""

    def __init__(
        self,
        manager: "RealtimeManager",
        subscription_id: int,
        collection: str,
        loader: Loader,
        on_snapshot: SnapshotCallback,
    ) -> None:
        self._manager = manager
        self.id = subscription_id
        self.collection = collection
        self._loader = loader
        self._on_snapshot = on_snapshot
        self._active = True
        self._lock = asyncio.Lock()

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        """Release the listener. Safe to call more than once."""
        if not self._active:
            return
        self._active = False
        self._manager._remove(self)

    async def refresh(self) -> None:
        """Re-run the loader and deliver the snapshot if still active."""
        # Serialised so snapshots for one listener are delivered in order
        async with self._lock:
            if not self._active:
                return
            snapshot = list(await self._loader())
            if not self._active:
                return
            await self._on_snapshot(snapshot)


class RealtimeManager:
    def __init__(self) -> None:
        self._subscriptions: dict[str, dict[int, Subscription]] = {}
        self._ids = count(1)

    async def subscribe(
        self,
        collection: str,
        loader: Loader,
        on_snapshot: SnapshotCallback,
    ) -> Subscription:
        """
        Register a live query and deliver its first snapshot.

        Args:
            collection: Collection whose mutations trigger a refresh
            loader: Coroutine factory returning the current matching records
            on_snapshot: Called with each snapshot

        Returns:
            Subscription handle; the caller must cancel it on scope exit
        """
        subscription = Subscription(self, next(self._ids), collection, loader, on_snapshot)
        self._subscriptions.setdefault(collection, {})[subscription.id] = subscription
        try:
            await subscription.refresh()
        except Exception:
            subscription.cancel()
            raise
        return subscription

    async def notify(self, collection: str) -> None:
        """Refresh every active subscription on a collection."""
        subscriptions = list(self._subscriptions.get(collection, {}).values())
        if not subscriptions:
            return
        results = await asyncio.gather(
            *(subscription.refresh() for subscription in subscriptions),
            return_exceptions=True,
        )
        for subscription, result in zip(subscriptions, results):
            if isinstance(result, Exception):
                logger.error(
                    "Live query %s on %s failed to refresh: %s",
                    subscription.id,
                    collection,
                    result,
                    exc_info=result,
                )

    def active_count(self, collection: Optional[str] = None) -> int:
        """Number of active subscriptions, optionally for one collection."""
        if collection is not None:
            return len(self._subscriptions.get(collection, {}))
        return sum(len(subs) for subs in self._subscriptions.values())

    def _remove(self, subscription: Subscription) -> None:
        subs = self._subscriptions.get(subscription.collection)
        if not subs:
            return
        subs.pop(subscription.id, None)
        if not subs:
            self._subscriptions.pop(subscription.collection, None)


realtime_manager = RealtimeManager()
