from .bus import RideEventBus, Subscriber, SubscriberRole

__all__ = ["RideEventBus", "Subscriber", "SubscriberRole"]
