from .client import (
    DirectoryClient,
    DirectoryPayloadError,
    DirectoryServiceError,
    DirectoryTimeoutError,
    DriverSource,
    UserSource,
)
from .records import DriverRecord, UserRecord

__all__ = [
    "DirectoryClient",
    "DirectoryPayloadError",
    "DirectoryServiceError",
    "DirectoryTimeoutError",
    "DriverRecord",
    "DriverSource",
    "UserRecord",
    "UserSource",
]
