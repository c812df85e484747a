"""Account registry: the only place users are created or promoted."""

import logging
import threading
from typing import TYPE_CHECKING
from uuid import uuid4

from accounts.models import User, UserTier, registry_construction
from core.exceptions import ValidationError
from settings import AccountSettings, PricingSettings

if TYPE_CHECKING:
    from directory.records import UserRecord

logger = logging.getLogger(__name__)


class AccountRegistry:
    """Creates and tracks users and their lifetime spend.

    Premium promotion replaces the registered ``User`` with a new instance that
    keeps the same id and name. Callers holding the old instance must switch to
    the one returned by ``add_spending``.

    Thread-safe: the user map and spend ledger are guarded by one lock.
    """

    def __init__(
        self,
        account_settings: AccountSettings | None = None,
        pricing_settings: PricingSettings | None = None,
    ) -> None:
        self._account_settings = account_settings or AccountSettings()
        self._pricing_settings = pricing_settings or PricingSettings()
        self._lock = threading.Lock()
        self._users: dict[str, User] = {}
        self._spending: dict[str, float] = {}

    @property
    def premium_threshold(self) -> float:
        return self._account_settings.premium_threshold

    def create_user(self, name: str, user_id: str | None = None) -> User:
        if not name or not name.strip():
            raise ValidationError("User name must not be empty")

        with registry_construction():
            user = User(user_id=user_id or str(uuid4()), name=name.strip())

        with self._lock:
            if user.user_id in self._users:
                raise ValidationError(
                    f"User {user.user_id} is already registered",
                    details={"user_id": user.user_id},
                )
            self._users[user.user_id] = user

        logger.info(f"New user created - {user.name}")
        return user

    def create_user_from_record(self, record: "UserRecord") -> User:
        """Register a user fetched from the remote user directory."""
        return self.create_user(record.full_name, user_id=record.user_id)

    def add_spending(self, user: User, amount: float) -> User:
        """Record ``amount`` against the user and promote them if due.

        Returns the premium replacement when this call crosses the threshold,
        otherwise the registered instance.
        """
        if amount < 0:
            raise ValidationError(
                "Spending amount must be non-negative",
                details={"user_id": user.user_id, "amount": amount},
            )

        with self._lock:
            total = self._spending.get(user.user_id, 0.0) + amount
            self._spending[user.user_id] = total

            current = self._users.get(user.user_id, user)
            if total < self.premium_threshold or current.is_premium:
                return current

            with registry_construction():
                premium = User(
                    user_id=current.user_id,
                    name=current.name,
                    tier=UserTier.PREMIUM,
                    discount_percentage=self._pricing_settings.premium_discount_percentage,
                )
            self._users[premium.user_id] = premium

        logger.info(
            f"{premium.name} has been upgraded to Premium status! They are now eligible "
            f"for a Premium Client discount of {premium.discount_percentage:g}%"
        )
        return premium

    def get_user(self, user_id: str) -> User | None:
        with self._lock:
            return self._users.get(user_id)

    def get_spending(self, user_id: str) -> float:
        with self._lock:
            return self._spending.get(user_id, 0.0)

    def list_users(self) -> list[User]:
        with self._lock:
            return list(self._users.values())

