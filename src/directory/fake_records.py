"""Seeded synthetic directory data for offline runs and tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

from faker import Faker
from faker.providers import BaseProvider

from directory.records import DriverRecord
from drivers.models import DriverTier

if TYPE_CHECKING:
    from faker.proxy import Faker as FakerType


class RideLocationProvider(BaseProvider):
    """Pickup and dropoff landmarks for simulated ride requests."""

    LANDMARKS: list[str] = [
        "Downtown",
        "Airport",
        "Home",
        "Office",
        "School",
        "Suburb",
        "City Center",
        "Central Station",
        "Stadium",
        "University",
    ]

    def ride_route(self) -> tuple[str, str]:
        """Two distinct landmarks: (pickup, dropoff)."""
        pickup, dropoff = self.random_sample(self.LANDMARKS, length=2)
        return pickup, dropoff


def create_faker_instance(seed: int | None = None) -> FakerType:
    """Create a Faker instance with the ride providers registered.

    Args:
        seed: Optional seed for reproducible data.
    """
    fake: FakerType = Faker()

    if seed is not None:
        fake.seed_instance(seed)

    fake.add_provider(RideLocationProvider)
    return fake


def generate_driver_records(
    count: int, vip_ratio: float = 0.5, seed: int | None = None
) -> list[DriverRecord]:
    """Generate driver records with an explicit tier each.

    Exactly ``round(count * vip_ratio)`` records are VIP; which ones is decided
    by the seeded generator, so the same seed always yields the same fleet.
    """
    if count < 0:
        raise ValueError("count must be non-negative")
    if not 0.0 <= vip_ratio <= 1.0:
        raise ValueError("vip_ratio must be within [0, 1]")

    fake = create_faker_instance(seed)
    vip_indexes = set(fake.random.sample(range(count), round(count * vip_ratio)))

    return [
        DriverRecord(
            driver_id=f"drv-{index + 1:04d}",
            name=fake.name(),
            tier=DriverTier.VIP if index in vip_indexes else DriverTier.REGULAR,
        )
        for index in range(count)
    ]


def generate_user_names(count: int, seed: int | None = None) -> list[str]:
    """Seeded first names for synthetic users; the same seed repeats the list."""
    fake = create_faker_instance(seed)
    return [fake.first_name() for _ in range(count)]
