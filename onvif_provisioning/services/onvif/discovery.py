"""Capability discovery for an ONVIF device.

Builds the device management client from the base address, asks the device
which services it advertises, validates each advertised address against the
base address, and builds one client per recognised capability.

Any malformed or untrusted address aborts discovery. Unknown namespaces are
skipped. A failed or cancelled discovery never returns a partial set.
"""

import asyncio
import logging
from typing import Optional

from onvif_provisioning.exceptions import (
    DiscoveryTransportError,
    MissingBaseAddress,
    TransportError,
    UntrustedServiceOrigin,
)
from onvif_provisioning.schemas.device import AdvertisedService, Credentials
from onvif_provisioning.services.onvif.addresses import (
    device_service_address,
    is_trusted,
    parse_address,
)
from onvif_provisioning.services.onvif.capabilities import CapabilitySet
from onvif_provisioning.services.onvif.client import ClientFactory, ProtocolClient
from onvif_provisioning.services.onvif.registry import (
    CapabilitySlot,
    is_mandatory,
    resolve,
)

logger = logging.getLogger(__name__)


async def discover(
    base_uri: Optional[object],
    credentials: Optional[Credentials] = None,
    *,
    factory: Optional[ClientFactory] = None,
    timeout: Optional[float] = None,
) -> CapabilitySet:
    """Discover the capabilities advertised by a device.

    Args:
        base_uri: Device base URI, typically just the HTTP root
        credentials: Shared credentials, or None for anonymous access
        factory: Client factory (defaults to a plain ClientFactory)
        timeout: Bound in seconds on the GetServices call, None for no bound

    Returns:
        The populated CapabilitySet

    Raises:
        MissingBaseAddress: if no base URI was given
        InvalidServiceAddress: if the base or an advertised address is malformed
        UntrustedServiceOrigin: if an advertised address is outside the base URI
        DiscoveryTransportError: if GetServices failed or timed out
    """
    if base_uri is None or not str(base_uri).strip():
        raise MissingBaseAddress()

    base = parse_address(str(base_uri))
    devicemgmt_uri = device_service_address(base)
    factory = factory or ClientFactory()

    devicemgmt = factory.build(CapabilitySlot.DEVICEMGMT, devicemgmt_uri, credentials)
    provisioning = factory.build(CapabilitySlot.PROVISIONING, devicemgmt_uri, credentials)
    built: list[ProtocolClient] = [devicemgmt, provisioning]

    completed = False
    try:
        services = await _list_services(devicemgmt, timeout)

        optional: dict[CapabilitySlot, ProtocolClient] = {}
        for service in services:
            address = _validate(base, service)
            slot = resolve(service.namespace)
            if slot is None:
                logger.debug(f"unknown service: {service!r}")
                continue
            if is_mandatory(slot):
                continue

            previous = optional.get(slot)
            if previous is not None:
                logger.debug(
                    f"{slot.value} advertised again at {address}, "
                    f"replacing {previous.address}"
                )
                built.remove(previous)
                await previous.close()
            client = factory.build(slot, address, credentials)
            built.append(client)
            optional[slot] = client

        capabilities = CapabilitySet(devicemgmt, provisioning, optional)
        completed = True
    finally:
        if not completed:
            await _close_all(built)

    logger.info(
        f"Discovered {len(capabilities.optional)} optional service(s) at {base}: "
        f"{', '.join(s.value for s in capabilities.optional) or 'none'}"
    )
    return capabilities


async def _list_services(
    devicemgmt: ProtocolClient, timeout: Optional[float]
) -> list[AdvertisedService]:
    try:
        return await asyncio.wait_for(devicemgmt.list_services(), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise DiscoveryTransportError(
            f"GetServices timed out after {timeout}s at {devicemgmt.address}"
        ) from e
    except TransportError as e:
        raise DiscoveryTransportError(str(e)) from e


def _validate(base: str, service: AdvertisedService) -> str:
    address = parse_address(service.xaddr)
    if not is_trusted(base, address):
        raise UntrustedServiceOrigin(str(service.xaddr), base)
    return address


async def _close_all(clients: list[ProtocolClient]) -> None:
    for client in clients:
        try:
            await client.close()
        except Exception as e:
            logger.debug(f"Error closing {client!r}: {e}")
