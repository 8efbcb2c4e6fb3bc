"""Static tables mapping ONVIF namespaces to capability slots and WSDL bindings."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CapabilitySlot(str, Enum):
    """Logical capability of a device."""

    DEVICEMGMT = "devicemgmt"
    PROVISIONING = "provisioning"
    EVENTS = "events"
    DEVICEIO = "deviceio"
    MEDIA = "media"
    MEDIA2 = "media2"
    IMAGING = "imaging"
    PTZ = "ptz"
    ANALYTICS = "analytics"


# Always bound to the device management address; never taken from GetServices.
MANDATORY_SLOTS = frozenset({CapabilitySlot.DEVICEMGMT, CapabilitySlot.PROVISIONING})

NAMESPACES: dict[str, CapabilitySlot] = {
    "http://www.onvif.org/ver10/device/wsdl": CapabilitySlot.DEVICEMGMT,
    "http://www.onvif.org/ver10/provisioning/wsdl": CapabilitySlot.PROVISIONING,
    "http://www.onvif.org/ver10/events/wsdl": CapabilitySlot.EVENTS,
    "http://www.onvif.org/ver10/deviceIO/wsdl": CapabilitySlot.DEVICEIO,
    "http://www.onvif.org/ver10/media/wsdl": CapabilitySlot.MEDIA,
    "http://www.onvif.org/ver20/media/wsdl": CapabilitySlot.MEDIA2,
    "http://www.onvif.org/ver20/imaging/wsdl": CapabilitySlot.IMAGING,
    "http://www.onvif.org/ver20/ptz/wsdl": CapabilitySlot.PTZ,
    "http://www.onvif.org/ver20/analytics/wsdl": CapabilitySlot.ANALYTICS,
}


@dataclass(frozen=True)
class ServiceBinding:
    """WSDL file and SOAP binding used to talk to one capability."""

    wsdl: str
    namespace: str
    name: str

    @property
    def qname(self) -> str:
        return f"{{{self.namespace}}}{self.name}"


BINDINGS: dict[CapabilitySlot, ServiceBinding] = {
    CapabilitySlot.DEVICEMGMT: ServiceBinding(
        "devicemgmt.wsdl", "http://www.onvif.org/ver10/device/wsdl", "DeviceBinding"
    ),
    CapabilitySlot.PROVISIONING: ServiceBinding(
        "provisioning.wsdl",
        "http://www.onvif.org/ver10/provisioning/wsdl",
        "ProvisioningBinding",
    ),
    CapabilitySlot.EVENTS: ServiceBinding(
        "events.wsdl", "http://www.onvif.org/ver10/events/wsdl", "EventBinding"
    ),
    CapabilitySlot.DEVICEIO: ServiceBinding(
        "deviceio.wsdl", "http://www.onvif.org/ver10/deviceIO/wsdl", "DeviceIOBinding"
    ),
    CapabilitySlot.MEDIA: ServiceBinding(
        "media.wsdl", "http://www.onvif.org/ver10/media/wsdl", "MediaBinding"
    ),
    CapabilitySlot.MEDIA2: ServiceBinding(
        "media2.wsdl", "http://www.onvif.org/ver20/media/wsdl", "Media2Binding"
    ),
    CapabilitySlot.IMAGING: ServiceBinding(
        "imaging.wsdl", "http://www.onvif.org/ver20/imaging/wsdl", "ImagingBinding"
    ),
    CapabilitySlot.PTZ: ServiceBinding(
        "ptz.wsdl", "http://www.onvif.org/ver20/ptz/wsdl", "PTZBinding"
    ),
    CapabilitySlot.ANALYTICS: ServiceBinding(
        "analytics.wsdl",
        "http://www.onvif.org/ver20/analytics/wsdl",
        "AnalyticsEngineBinding",
    ),
}


def resolve(namespace: str) -> Optional[CapabilitySlot]:
    """Map a service namespace to its slot, or None if unknown."""
    return NAMESPACES.get(namespace)


def is_mandatory(slot: CapabilitySlot) -> bool:
    return slot in MANDATORY_SLOTS
