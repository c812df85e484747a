"""Driver matching and ride dispatch."""

from .driver_pool import DriverPool
from .ride_service import (
    RideSharingService,
    build_service,
    get_service,
    init_service,
    reset_service,
)

__all__ = [
    "DriverPool",
    "RideSharingService",
    "build_service",
    "get_service",
    "init_service",
    "reset_service",
]
