"""Device operations runnable through the CommandDispatcher.

Each operation is a coroutine function taking a ProtocolClient. Operations
that need parameters are built by a factory returning such a coroutine.
"""

from datetime import timedelta
from typing import Any, Optional

from onvif_provisioning.exceptions import NoVideoSources
from onvif_provisioning.schemas.device import AdvertisedService
from onvif_provisioning.services.onvif.client import ProtocolClient

PAN_DIRECTIONS = ("Left", "Right")


async def get_system_date_and_time(client: ProtocolClient) -> Any:
    return await client.call("GetSystemDateAndTime")


async def get_service_capabilities(client: ProtocolClient) -> Any:
    return await client.call("GetServiceCapabilities")


async def get_services(client: ProtocolClient) -> list[AdvertisedService]:
    return await client.list_services()


def pan_move(direction: str = "Left", timeout: Optional[float] = None):
    """Build an operation panning the first video source of the provisioning service.

    Args:
        direction: "Left" or "Right"
        timeout: Seconds to keep moving, None for the device default
    """
    if direction not in PAN_DIRECTIONS:
        raise ValueError(f"direction must be one of {PAN_DIRECTIONS}, got {direction!r}")

    async def _pan_move(client: ProtocolClient) -> Any:
        capabilities = await client.call("GetServiceCapabilities")
        capabilities = getattr(capabilities, "Capabilities", capabilities)
        sources = getattr(capabilities, "Source", None) or []
        if not sources:
            raise NoVideoSources()

        request: dict[str, Any] = {
            "VideoSource": sources[0].VideoSourceToken,
            "Direction": direction,
        }
        if timeout is not None:
            request["Timeout"] = timedelta(seconds=timeout)
        return await client.call("PanMove", request)

    return _pan_move


def upgrade_system_firmware(content_type: Optional[str] = None):
    """Build an operation sending an UpgradeSystemFirmware request.

    The firmware attachment carries only its content type.
    """

    async def _upgrade_system_firmware(client: ProtocolClient) -> Any:
        firmware: dict[str, Any] = {}
        if content_type:
            firmware["contentType"] = content_type
        return await client.call("UpgradeSystemFirmware", {"Firmware": firmware})

    return _upgrade_system_firmware
