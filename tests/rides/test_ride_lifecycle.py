"""Tests for RideLifecycle."""

import logging

import pytest

from accounts.registry import AccountRegistry
from core.exceptions import InvalidStateTransitionError, NotFoundError, ValidationError
from drivers.models import DriverTier
from rides.ride import RideStatus


@pytest.fixture
def user(registry):
    return registry.create_user("Bobi")


def notifications_for(caplog, recipient_id: str) -> list[str]:
    return [
        r.getMessage()
        for r in caplog.records
        if r.name == "notifications" and getattr(r, "recipient_id", None) == recipient_id
    ]


@pytest.mark.unit
class TestCreate:
    def test_create_pending_ride(self, lifecycle, user):
        ride = lifecycle.create(user, "Downtown", "Airport")

        assert ride.user_id == user.user_id
        assert ride.status == RideStatus.PENDING
        assert ride.fare == 0.0

    def test_requires_locations(self, lifecycle, user):
        with pytest.raises(ValidationError):
            lifecycle.create(user, "", "Airport")

    def test_requires_registered_user(self, lifecycle):
        other_registry_user = AccountRegistry().create_user("Ghost", user_id="ghost")
        with pytest.raises(NotFoundError):
            lifecycle.create(other_registry_user, "Downtown", "Airport")

    def test_user_resolved_through_registry(self, lifecycle, registry, user):
        ride = lifecycle.create(user, "Downtown", "Airport")
        upgraded = registry.add_spending(user, 500)

        assert lifecycle.user_of(ride) is upgraded


@pytest.mark.unit
class TestAssignDriver:
    def test_assign_activates_and_prices(self, lifecycle, user, fleet):
        driver = fleet.driver(name="Leanne Graham")
        ride = lifecycle.create(user, "Downtown", "Airport")

        lifecycle.assign_driver(ride, driver)

        assert ride.status == RideStatus.ACTIVE
        assert ride.driver is driver
        assert ride.fare == 40.0
        assert ride.matched_at is not None

    def test_vip_driver_and_premium_user_fare(self, lifecycle, registry, user, fleet):
        premium = registry.add_spending(user, 150)
        ride = lifecycle.create(premium, "Downtown", "Airport")

        lifecycle.assign_driver(ride, fleet.driver(DriverTier.VIP))

        assert ride.fare == pytest.approx(40 * 0.8 * 1.5)

    def test_subscribes_driver_then_user(self, lifecycle, bus, user, fleet):
        ride = lifecycle.create(user, "Downtown", "Airport")
        lifecycle.assign_driver(ride, fleet.driver())
        assert bus.subscriber_count(ride.ride_id) == 2

    def test_sends_pickup_notifications(self, lifecycle, user, fleet, caplog):
        caplog.set_level(logging.INFO, logger="notifications")
        driver = fleet.driver(name="Leanne Graham")
        ride = lifecycle.create(user, "Downtown", "Airport")

        lifecycle.assign_driver(ride, driver)

        assert notifications_for(caplog, user.user_id) == [
            "Your driver Leanne Graham is on the way to Downtown"
        ]
        assert notifications_for(caplog, driver.driver_id) == [
            "Driver Leanne Graham, client Bobi awaits you at Downtown"
        ]

    def test_cannot_assign_twice(self, lifecycle, user, fleet):
        first, second = fleet.driver(), fleet.driver()
        ride = lifecycle.create(user, "Downtown", "Airport")
        lifecycle.assign_driver(ride, first)

        with pytest.raises(InvalidStateTransitionError):
            lifecycle.assign_driver(ride, second)

        assert ride.driver is first
        assert ride.fare == 40.0


@pytest.mark.unit
class TestComplete:
    @pytest.fixture
    def active_ride(self, lifecycle, user, fleet):
        ride = lifecycle.create(user, "Downtown", "Airport")
        lifecycle.assign_driver(ride, fleet.driver(name="Leanne Graham"))
        return ride

    def test_complete_settles_ride(self, lifecycle, registry, user, active_ride):
        lifecycle.complete(active_ride)

        assert active_ride.status == RideStatus.COMPLETED
        assert active_ride.completed_at is not None
        assert registry.get_spending(user.user_id) == pytest.approx(40.0)
        assert active_ride.driver.balance == pytest.approx(32.0)

    def test_sends_completion_notifications(self, lifecycle, user, active_ride, caplog):
        caplog.set_level(logging.INFO, logger="notifications")

        lifecycle.complete(active_ride)

        assert notifications_for(caplog, user.user_id) == [
            "Your ride has been completed. Fare: $40.00"
        ]
        assert notifications_for(caplog, active_ride.driver.driver_id) == [
            "Ride with client Bobi is completed. Fare: $40.00"
        ]

    def test_subscriptions_pruned_after_completion(self, lifecycle, bus, active_ride):
        lifecycle.complete(active_ride)
        assert bus.subscriber_count(active_ride.ride_id) == 0

    def test_logs_total_spending(self, lifecycle, active_ride, caplog):
        caplog.set_level(logging.INFO, logger="rides.lifecycle")
        lifecycle.complete(active_ride)
        assert "Total spending for Bobi: $40.00" in caplog.text

    def test_returns_upgraded_user(self, lifecycle, registry, user, fleet):
        last = None
        for _ in range(3):
            ride = lifecycle.create(registry.get_user(user.user_id), "A", "B")
            lifecycle.assign_driver(ride, fleet.driver())
            last = lifecycle.complete(ride)

        # 40 + 40 crosses nothing; the third regular-priced ride reaches 120
        assert last.is_premium
        assert last.user_id == user.user_id
        assert registry.get_user(user.user_id) is last
        assert registry.get_spending(user.user_id) == pytest.approx(120.0)

    def test_cannot_complete_pending_ride(self, lifecycle, registry, user):
        ride = lifecycle.create(user, "Downtown", "Airport")

        with pytest.raises(InvalidStateTransitionError):
            lifecycle.complete(ride)

        assert ride.status == RideStatus.PENDING
        assert registry.get_spending(user.user_id) == 0.0

    def test_cannot_complete_twice(self, lifecycle, registry, user, active_ride):
        lifecycle.complete(active_ride)

        with pytest.raises(InvalidStateTransitionError):
            lifecycle.complete(active_ride)

        assert registry.get_spending(user.user_id) == pytest.approx(40.0)
        assert active_ride.driver.balance == pytest.approx(32.0)
