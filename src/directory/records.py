"""Raw records supplied by the driver and user directories."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from drivers.models import DriverTier


class DriverRecord(BaseModel):
    """A driver as listed by the directory.

    ``tier`` is optional because the public directory knows nothing about
    tiers; the service then decides from its explicit VIP id set.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    driver_id: str = Field(alias="id")
    name: str = Field(min_length=1)
    tier: DriverTier | None = None

    @field_validator("driver_id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v


class UserRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_id: str = Field(alias="id")
    first_name: str = Field(alias="firstName", min_length=1)
    last_name: str = Field(alias="lastName", default="")

    @field_validator("user_id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
