from .models import User, UserTier
from .registry import AccountRegistry

__all__ = ["AccountRegistry", "User", "UserTier"]
