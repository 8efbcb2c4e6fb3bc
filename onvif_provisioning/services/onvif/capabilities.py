"""The set of capability clients produced by one discovery run."""

import asyncio
import logging
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Optional, Union

from onvif_provisioning.services.onvif.client import ProtocolClient
from onvif_provisioning.services.onvif.registry import CapabilitySlot, is_mandatory

logger = logging.getLogger(__name__)


class CapabilitySet:
    """Mandatory device management clients plus the advertised optional ones.

    Built once by discovery and read-only afterwards, so it can be shared
    between concurrent tasks. Use ``slot in capabilities`` or ``get`` to
    check whether a capability is present.
    """

    def __init__(
        self,
        devicemgmt: ProtocolClient,
        provisioning: ProtocolClient,
        optional: Optional[Mapping[CapabilitySlot, ProtocolClient]] = None,
    ):
        optional = dict(optional or {})
        for slot in optional:
            if is_mandatory(slot):
                raise ValueError(f"{slot.value} is mandatory and cannot be optional")
        self._devicemgmt = devicemgmt
        self._provisioning = provisioning
        self._optional = MappingProxyType(optional)

    @property
    def devicemgmt(self) -> ProtocolClient:
        return self._devicemgmt

    @property
    def provisioning(self) -> ProtocolClient:
        return self._provisioning

    @property
    def optional(self) -> Mapping[CapabilitySlot, ProtocolClient]:
        """Read-only view of the advertised optional clients."""
        return self._optional

    def get(self, slot: Union[CapabilitySlot, str]) -> Optional[ProtocolClient]:
        """Client for a slot or slot value, None if absent or unknown."""
        try:
            slot = CapabilitySlot(slot)
        except ValueError:
            return None
        if slot == CapabilitySlot.DEVICEMGMT:
            return self._devicemgmt
        if slot == CapabilitySlot.PROVISIONING:
            return self._provisioning
        return self._optional.get(slot)

    def __contains__(self, slot: object) -> bool:
        return self.get(slot) is not None

    def __iter__(self) -> Iterator[CapabilitySlot]:
        """Iterate present slots in declaration order."""
        return (slot for slot in CapabilitySlot if slot in self)

    def __len__(self) -> int:
        return 2 + len(self._optional)

    def items(self) -> list[tuple[CapabilitySlot, ProtocolClient]]:
        return [(slot, self.get(slot)) for slot in self]

    async def close(self) -> None:
        """Release every client's transport."""
        results = await asyncio.gather(
            *(client.close() for _, client in self.items()),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, Exception):
                logger.debug(f"Error closing client: {result}")

    async def __aenter__(self) -> "CapabilitySet":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
