from .fare import FareBreakdown, FareCalculator
from .lifecycle import RideLifecycle
from .ride import Ride, RideStatus

__all__ = ["FareBreakdown", "FareCalculator", "Ride", "RideLifecycle", "RideStatus"]
