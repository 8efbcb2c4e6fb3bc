"""Pytest configuration and fixtures."""

from collections.abc import Callable, Generator
from types import SimpleNamespace
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from onvif_provisioning.config import get_settings
from onvif_provisioning.schemas.device import AdvertisedService, Credentials
from onvif_provisioning.services.onvif.client import ClientFactory
from onvif_provisioning.services.onvif.registry import CapabilitySlot

BASE_URI = "http://cam.local/"
ONVIF_NS = "http://www.onvif.org"

SETTINGS_ENV = (
    "ONVIF_URI",
    "ONVIF_USERNAME",
    "ONVIF_PASSWORD",
    "ONVIF_WSDL_DIR",
    "ONVIF_REQUEST_TIMEOUT",
    "ONVIF_DISCOVERY_TIMEOUT",
    "ONVIF_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_settings(
    monkeypatch: pytest.MonkeyPatch, tmp_path
) -> Generator[None, None, None]:
    """Keep the environment and any local .env out of settings."""
    for name in SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(username="admin", password="secret")


@pytest.fixture
def factory(tmp_path) -> ClientFactory:
    """Factory pointed at an empty WSDL directory so no call can reach a device."""
    return ClientFactory(wsdl_dir=tmp_path, timeout=1.0)


@pytest.fixture
def advertised() -> Callable[..., AdvertisedService]:
    """Build an advertised service from a namespace suffix and address."""

    def _advertised(suffix: str, xaddr: Optional[str]) -> AdvertisedService:
        return AdvertisedService(namespace=f"{ONVIF_NS}/{suffix}", xaddr=xaddr)

    return _advertised


@pytest.fixture
def mock_client_for() -> Callable[..., MagicMock]:
    """Create a mock protocol client for a slot."""

    def _mock_client(slot: CapabilitySlot, address: Optional[str] = None) -> MagicMock:
        client = MagicMock()
        client.slot = slot
        client.address = address or f"{BASE_URI}onvif/{slot.value}_service"
        client.call = AsyncMock(return_value=SimpleNamespace(slot=slot.value))
        client.list_services = AsyncMock(return_value=[])
        client.close = AsyncMock()
        return client

    return _mock_client
