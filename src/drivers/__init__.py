from .models import Driver, DriverTier, build_driver

__all__ = ["Driver", "DriverTier", "build_driver"]
