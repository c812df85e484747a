"""Tests for DriverPool."""

import pytest

from drivers.models import DriverTier
from matching.driver_pool import DriverPool


@pytest.fixture
def pool() -> DriverPool:
    return DriverPool(DriverTier.REGULAR)


@pytest.mark.unit
class TestMembership:
    def test_add_and_get(self, pool, fleet):
        driver = fleet.driver()

        assert pool.add(driver)
        assert pool.get(driver.driver_id) is driver
        assert driver.driver_id in pool
        assert len(pool) == 1

    def test_duplicate_id_not_added(self, pool, fleet):
        driver = fleet.driver(driver_id="d1")
        assert pool.add(driver)
        assert not pool.add(fleet.driver(driver_id="d1"))
        assert pool.get("d1") is driver

    def test_rejects_wrong_tier(self, pool, fleet):
        with pytest.raises(ValueError):
            pool.add(fleet.driver(DriverTier.VIP))

    def test_drivers_in_insertion_order(self, pool, fleet):
        drivers = [fleet.driver() for _ in range(4)]
        for d in drivers:
            pool.add(d)
        assert pool.drivers() == drivers


@pytest.mark.unit
class TestClaimAndRelease:
    def test_find_does_not_claim(self, pool, fleet):
        driver = fleet.driver()
        pool.add(driver)

        assert pool.find_first_available() is driver
        assert driver.is_available

    def test_claim_marks_unavailable(self, pool, fleet):
        driver = fleet.driver()
        pool.add(driver)

        assert pool.claim_first_available() is driver
        assert not driver.is_available
        assert pool.claim_first_available() is None

    def test_first_match_in_insertion_order(self, pool, fleet):
        first, second, third = fleet.driver(), fleet.driver(), fleet.driver()
        for d in (first, second, third):
            pool.add(d)
        first.is_available = False

        assert pool.claim_first_available() is second
        assert pool.claim_first_available() is third

    def test_release_makes_driver_claimable(self, pool, fleet):
        driver = fleet.driver()
        pool.add(driver)
        pool.claim_first_available()

        pool.release(driver)

        assert driver.is_available
        assert pool.available_count() == 1
        assert pool.claim_first_available() is driver

    def test_release_unknown_driver(self, pool, fleet):
        with pytest.raises(KeyError):
            pool.release(fleet.driver())

    def test_empty_pool(self, pool):
        assert pool.find_first_available() is None
        assert pool.claim_first_available() is None
        assert pool.available_count() == 0
