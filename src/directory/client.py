from typing import Any, Protocol

import httpx
from pydantic import ValidationError as PydanticValidationError

from core.exceptions import (
    NetworkError,
    NotFoundError,
    ServiceUnavailableError,
    ValidationError,
)
from directory.records import DriverRecord, UserRecord
from settings import DirectorySettings


class DirectoryTimeoutError(NetworkError):
    """Directory request timeout. Inherits from NetworkError (retryable)."""

    pass


class DirectoryServiceError(ServiceUnavailableError):
    """Directory unreachable or failing (5xx). Inherits from ServiceUnavailableError (retryable)."""

    pass


class DirectoryPayloadError(ValidationError):
    """Directory answered with data that does not parse. Not retryable."""

    pass


class DriverSource(Protocol):
    async def fetch_drivers(self) -> list[DriverRecord]: ...


class UserSource(Protocol):
    async def fetch_user(self, user_id: str | int) -> UserRecord: ...


class DirectoryClient:
    """Fetches driver and user records from the remote directory."""

    def __init__(
        self,
        drivers_url: str,
        users_url: str,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.drivers_url = drivers_url.rstrip("/")
        self.users_url = users_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: DirectorySettings) -> "DirectoryClient":
        return cls(
            drivers_url=settings.drivers_url,
            users_url=settings.users_url,
            timeout=settings.timeout,
        )

    async def fetch_drivers(self) -> list[DriverRecord]:
        data = await self._get_json(self.drivers_url)
        if not isinstance(data, list):
            raise DirectoryPayloadError(
                "Driver directory must return a list", details={"url": self.drivers_url}
            )
        try:
            return [DriverRecord.model_validate(item) for item in data]
        except PydanticValidationError as e:
            raise DirectoryPayloadError(f"Malformed driver record: {e}") from e

    async def fetch_user(self, user_id: str | int) -> UserRecord:
        data = await self._get_json(f"{self.users_url}/{user_id}")
        try:
            return UserRecord.model_validate(data)
        except PydanticValidationError as e:
            raise DirectoryPayloadError(f"Malformed user record: {e}") from e

    async def _get_json(self, url: str) -> Any:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url)
        except httpx.TimeoutException as e:
            raise DirectoryTimeoutError(f"Request timed out after {self.timeout}s") from e
        except httpx.TransportError as e:
            raise DirectoryServiceError(f"Network error: {e}") from e

        if response.status_code >= 500:
            raise DirectoryServiceError(
                f"Directory server error: {response.status_code}",
                details={"url": url, "status": response.status_code},
            )
        if response.status_code == 404:
            raise NotFoundError(f"Directory entry not found: {url}", details={"url": url})
        if response.status_code >= 400:
            raise DirectoryPayloadError(
                f"Directory rejected request: {response.status_code}",
                details={"url": url, "status": response.status_code},
            )

        try:
            return response.json()
        except ValueError as e:
            raise DirectoryPayloadError(f"Directory returned invalid JSON from {url}") from e
