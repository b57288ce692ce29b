"""
In-process live feed of transaction snapshots.

Stores publish a full, freshly read snapshot of a church's transactions after
every committed mutation; subscribers receive it through a callback (plain or
async). Delivery follows publication order within the process only.
"""
import inspect
import logging
from collections import defaultdict
from typing import Awaitable, Callable, Sequence, Union

from churchledger.schemas.transaction import TransactionRecord

logger = logging.getLogger(__name__)

Snapshot = Sequence[TransactionRecord]
SnapshotCallback = Callable[[Snapshot], Union[None, Awaitable[None]]]


class Subscription:
    """Handle returned by ``TransactionFeed.subscribe``."""

    def __init__(self, feed: "TransactionFeed", church_id: str, callback: SnapshotCallback):
        self._feed = feed
        self.church_id = church_id
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._feed._remove(self)
            self.active = False


class TransactionFeed:
    """Per-church registry of snapshot subscribers."""

    def __init__(self):
        self._subscribers: dict[str, list[Subscription]] = defaultdict(list)

    def subscribe(self, church_id: str, callback: SnapshotCallback) -> Subscription:
        subscription = Subscription(self, church_id, callback)
        self._subscribers[church_id].append(subscription)
        logger.debug(f"Feed subscriber added for church {church_id}")
        return subscription

    def subscriber_count(self, church_id: str) -> int:
        return len(self._subscribers.get(church_id, ()))

    def _remove(self, subscription: Subscription) -> None:
        subscribers = self._subscribers.get(subscription.church_id, [])
        if subscription in subscribers:
            subscribers.remove(subscription)
        if not subscribers:
            self._subscribers.pop(subscription.church_id, None)

    async def deliver(self, subscription: Subscription, snapshot: Snapshot) -> None:
        """Invoke one subscriber; failures are logged, not raised."""
        try:
            result = subscription.callback(snapshot)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Feed subscriber for church {subscription.church_id} failed: {e}")

    async def publish(self, church_id: str, snapshot: Snapshot) -> int:
        """Send ``snapshot`` to every subscriber of ``church_id``. Returns the count."""
        subscribers = list(self._subscribers.get(church_id, ()))
        for subscription in subscribers:
            await self.deliver(subscription, snapshot)
        return len(subscribers)


transaction_feed = TransactionFeed()
