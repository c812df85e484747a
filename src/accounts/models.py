"""User accounts, tiered regular or premium."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from core.exceptions import InvalidConstructionError

notification_logger = logging.getLogger("notifications")

_construction_allowed: ContextVar[bool] = ContextVar("user_construction_allowed", default=False)


class UserTier(str, Enum):
    REGULAR = "regular"
    PREMIUM = "premium"


@contextmanager
def registry_construction() -> Iterator[None]:
    """Open a window in which ``User`` instances may be built.

    Only ``AccountRegistry`` enters this block; anywhere else construction is
    rejected with ``InvalidConstructionError``.
    """
    token = _construction_allowed.set(True)
    try:
        yield
    finally:
        _construction_allowed.reset(token)


def _require_construction_window(data: Any) -> None:
    if not _construction_allowed.get():
        raise InvalidConstructionError(
            "User instances must be created through AccountRegistry",
            details={"data": data},
        )


class User(BaseModel):
    """Immutable user identity with its current tier."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    name: str
    tier: UserTier = UserTier.REGULAR
    discount_percentage: float = Field(default=0.0, ge=0.0, lt=100.0)

    @model_validator(mode="before")
    @classmethod
    def require_registry(cls, data: Any) -> Any:
        _require_construction_window(data)
        return data

    @classmethod
    def model_construct(cls, _fields_set: set[str] | None = None, **values: Any) -> "User":
        _require_construction_window(values)
        return super().model_construct(_fields_set, **values)

    def model_copy(self, *, update: dict[str, Any] | None = None, deep: bool = False) -> "User":
        _require_construction_window(update)
        return super().model_copy(update=update, deep=deep)

    @model_validator(mode="after")
    def validate_discount(self) -> "User":
        if self.tier == UserTier.REGULAR and self.discount_percentage:
            raise ValueError("Regular users cannot carry a discount")
        return self

    @property
    def is_premium(self) -> bool:
        return self.tier == UserTier.PREMIUM

    @property
    def fare_multiplier(self) -> float:
        return 1.0 - self.discount_percentage / 100.0

    def update(self, message: str) -> None:
        notification_logger.info(
            message, extra={"recipient_id": self.user_id, "role": "user"}
        )
