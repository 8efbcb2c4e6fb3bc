"""ONVIF capability discovery, client construction and dispatch."""

from onvif_provisioning.services.onvif.capabilities import CapabilitySet
from onvif_provisioning.services.onvif.client import ClientFactory, ProtocolClient
from onvif_provisioning.services.onvif.discovery import discover
from onvif_provisioning.services.onvif.dispatcher import (
    CapabilityResult,
    CommandDispatcher,
    ResultStatus,
)
from onvif_provisioning.services.onvif.registry import CapabilitySlot

__all__ = [
    "CapabilityResult",
    "CapabilitySet",
    "CapabilitySlot",
    "ClientFactory",
    "CommandDispatcher",
    "ProtocolClient",
    "ResultStatus",
    "discover",
]
