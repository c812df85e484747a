import pytest

from core.exceptions import ConfigurationError
from matching import RideSharingService, get_service, init_service, reset_service


def test_get_before_init_raises():
    with pytest.raises(ConfigurationError, match="not initialized"):
        get_service()


def test_init_then_get_returns_same_instance(settings):
    service = init_service(settings)

    assert isinstance(service, RideSharingService)
    assert get_service() is service


def test_double_init_rejected(settings):
    init_service(settings)

    with pytest.raises(ConfigurationError, match="already initialized"):
        init_service(settings)


def test_reset_allows_fresh_service(settings):
    first = init_service(settings)
    first.registry.create_user("Bobi")

    reset_service()
    second = init_service(settings)

    assert second is not first
    assert second.registry.list_users() == []


def test_built_service_shares_one_registry(settings, fleet):
    service = init_service(settings)
    service.load_drivers(fleet.driver_records(regular=1))

    assert service.get_stats()["available_regular_drivers"] == 1
    assert service.registry is get_service().registry
