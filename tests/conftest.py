import os

# The dispatcher simulates 1-4s of matching latency by default; tests match
# immediately unless they configure a delay explicitly.
os.environ.setdefault("MATCHING_DELAY_MIN_SECONDS", "0")
os.environ.setdefault("MATCHING_DELAY_MAX_SECONDS", "0")

import random
from unittest.mock import Mock

import pytest

from accounts.registry import AccountRegistry
from matching import RideSharingService, reset_service
from notifications.bus import RideEventBus
from rides.fare import FareCalculator
from rides.lifecycle import RideLifecycle
from settings import AccountSettings, MatchingSettings, PricingSettings, Settings
from tests.factories import FleetFactory


@pytest.fixture(autouse=True)
def clean_service():
    """Make sure no test leaks the process-wide dispatcher into another."""
    reset_service()
    yield
    reset_service()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        pricing=PricingSettings(),
        accounts=AccountSettings(),
        matching=MatchingSettings(delay_min_seconds=0, delay_max_seconds=0),
    )


@pytest.fixture
def fixed_rng() -> Mock:
    """RNG whose base fare draw is always 40."""
    rng = Mock(spec=random.Random)
    rng.randint.return_value = 40
    rng.uniform.return_value = 0.0
    return rng


@pytest.fixture
def registry(settings: Settings) -> AccountRegistry:
    return AccountRegistry(settings.accounts, settings.pricing)


@pytest.fixture
def bus() -> RideEventBus:
    return RideEventBus()


@pytest.fixture
def fare_calculator(settings: Settings, fixed_rng: Mock) -> FareCalculator:
    return FareCalculator(settings.pricing, fixed_rng)


@pytest.fixture
def lifecycle(
    registry: AccountRegistry,
    bus: RideEventBus,
    fare_calculator: FareCalculator,
    settings: Settings,
) -> RideLifecycle:
    return RideLifecycle(registry, bus, fare_calculator, settings.pricing)


@pytest.fixture
def service(
    registry: AccountRegistry, lifecycle: RideLifecycle, settings: Settings
) -> RideSharingService:
    return RideSharingService(registry, lifecycle, settings, random.Random(7))


@pytest.fixture
def fleet() -> FleetFactory:
    """Factory for drivers and driver records with seeded Faker."""
    return FleetFactory(seed=42)
