"""Pydantic schemas for session inputs and advertised services."""

from onvif_provisioning.schemas.device import (
    AdvertisedService,
    Credentials,
    DeviceTarget,
)

__all__ = [
    "AdvertisedService",
    "Credentials",
    "DeviceTarget",
]
