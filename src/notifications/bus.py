"""Per-ride publish/subscribe bus for user and driver notifications."""

import logging
import threading
from collections import defaultdict
from enum import Enum
from typing import NamedTuple, Protocol

logger = logging.getLogger(__name__)


class SubscriberRole(str, Enum):
    USER = "user"
    DRIVER = "driver"


class Subscriber(Protocol):
    def update(self, message: str) -> None: ...


class Subscription(NamedTuple):
    subscriber: Subscriber
    role: SubscriberRole


class RideEventBus:
    """Maps a ride id to the ordered list of parties listening to it.

    Thread-safe: subscription lists are mutated under a lock and delivery
    iterates over a snapshot, so a subscriber may subscribe or unsubscribe from
    inside ``update`` without deadlocking.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscriptions: dict[int, list[Subscription]] = defaultdict(list)

    def subscribe(self, ride_id: int, subscriber: Subscriber, role: SubscriberRole) -> None:
        with self._lock:
            self._subscriptions[ride_id].append(Subscription(subscriber, SubscriberRole(role)))

    def notify(self, ride_id: int, message_for_user: str, message_for_driver: str) -> None:
        """Deliver the role-specific message to every subscriber of ``ride_id``.

        Delivery follows subscription order. A subscriber that raises is logged
        and skipped; the remaining subscribers still receive their message.
        """
        with self._lock:
            subscriptions = list(self._subscriptions.get(ride_id, ()))

        for subscriber, role in subscriptions:
            message = message_for_user if role == SubscriberRole.USER else message_for_driver
            try:
                subscriber.update(message)
            except Exception:
                logger.exception(
                    f"Notification delivery failed for ride {ride_id} ({role.value} subscriber)"
                )

    def unsubscribe_all(self, ride_id: int) -> None:
        with self._lock:
            self._subscriptions.pop(ride_id, None)

    def subscriber_count(self, ride_id: int) -> int:
        with self._lock:
            return len(self._subscriptions.get(ride_id, ()))
