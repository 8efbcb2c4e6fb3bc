"""SOAP client handles for ONVIF capability endpoints.

Provides:
- ProtocolClient: one authenticated handle per validated service address
- ClientFactory: builds clients with shared WSDL location and timeouts

Clients are lazy. The onvif service and its HTTP session are created on the
first call, so building a client never touches the network. WSDL documents
are parsed off the event loop and shared between clients by the onvif
package.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional

import onvif
from onvif import ONVIFService
from pydantic import ValidationError

from onvif_provisioning.exceptions import TransportError
from onvif_provisioning.schemas.device import AdvertisedService, Credentials
from onvif_provisioning.services.onvif.registry import (
    BINDINGS,
    CapabilitySlot,
    ServiceBinding,
)

logger = logging.getLogger(__name__)

# WSDL files the onvif package does not ship (media2, provisioning)
BUNDLED_WSDL_DIR = Path(__file__).resolve().parents[2] / "wsdl"


def default_wsdl_dir() -> Path:
    """WSDL files bundled with the onvif package."""
    return Path(onvif.__file__).parent / "wsdl"


def find_wsdl(name: str, wsdl_dir: Optional[Path] = None) -> Optional[Path]:
    """Locate a WSDL file by name.

    An explicit ``wsdl_dir`` is the only place searched. Otherwise the files
    bundled with this package are tried first, then those of the onvif
    package.
    """
    search = [Path(wsdl_dir)] if wsdl_dir else [BUNDLED_WSDL_DIR, default_wsdl_dir()]
    for directory in search:
        path = directory / name
        if path.is_file():
            return path
    return None


class ProtocolClient:
    """Authenticated SOAP client bound to one capability endpoint.

    Credentials are sent as a WS-Security digest token. Without credentials
    the unauthenticated proxy of the service is used.

    Example usage:
        client = ProtocolClient(
            CapabilitySlot.DEVICEMGMT,
            "http://192.168.1.100/onvif/device_service",
            BINDINGS[CapabilitySlot.DEVICEMGMT],
            Credentials(username="admin", password="password"),
        )
        date = await client.call("GetSystemDateAndTime")
        await client.close()
    """

    def __init__(
        self,
        slot: CapabilitySlot,
        address: str,
        binding: ServiceBinding,
        credentials: Optional[Credentials] = None,
        wsdl_dir: Optional[Path] = None,
        timeout: float = 10.0,
    ):
        """Initialize the client without performing any I/O.

        Args:
            slot: Capability this client serves
            address: Validated service address
            binding: WSDL file and binding for the capability
            credentials: Shared credentials, or None for anonymous access
            wsdl_dir: Directory holding the WSDL files (defaults to the bundled ones)
            timeout: Per-request timeout in seconds
        """
        self.slot = slot
        self.address = address
        self.binding = binding
        self.credentials = credentials
        self.wsdl_dir = wsdl_dir
        self.timeout = timeout
        self._service: Optional[ONVIFService] = None

    def __repr__(self) -> str:
        return f"ProtocolClient({self.slot.value!r}, {self.address!r})"

    async def _create_service(self) -> ONVIFService:
        wsdl_path = find_wsdl(self.binding.wsdl, self.wsdl_dir)
        if wsdl_path is None:
            raise TransportError(
                self.binding.name,
                self.address,
                f"WSDL file not found: {self.binding.wsdl}",
            )

        username = self.credentials.username if self.credentials else None
        password = self.credentials.password if self.credentials else None
        service = ONVIFService(
            self.address,
            username,
            password,
            str(wsdl_path),
            no_cache=True,
            binding_name=self.binding.qname,
            read_timeout=self.timeout,
        )
        try:
            await service.setup()
        except BaseException:
            await service.close()
            raise

        logger.debug(f"Created {self.slot.value} service at {self.address}")
        return service

    async def call(self, operation: str, request: Optional[dict] = None) -> Any:
        """Invoke one SOAP operation on this endpoint.

        Args:
            operation: Operation name as declared in the WSDL (e.g. GetServices)
            request: Operation parameters

        Returns:
            The zeep response object

        Raises:
            TransportError: on any transport, SOAP fault or parsing failure
        """
        try:
            if self._service is None:
                self._service = await self._create_service()
            name = operation if self.credentials else f"authless_{operation}"
            method = getattr(self._service, name)
            return await asyncio.wait_for(method(request or {}), timeout=self.timeout)
        except TransportError:
            raise
        except asyncio.TimeoutError as e:
            raise TransportError(
                operation, self.address, f"timed out after {self.timeout}s"
            ) from e
        except Exception as e:
            raise TransportError(operation, self.address, str(e) or type(e).__name__) from e

    async def list_services(self) -> list[AdvertisedService]:
        """Fetch the services advertised by the device.

        Raises:
            TransportError: if the call fails or the response cannot be parsed
        """
        response = await self.call("GetServices", {"IncludeCapability": False})
        try:
            return [_to_advertised_service(s) for s in response or []]
        except (AttributeError, TypeError, ValidationError) as e:
            raise TransportError("GetServices", self.address, f"unparseable response: {e}") from e

    async def close(self) -> None:
        """Release the HTTP session, if one was opened."""
        service, self._service = self._service, None
        if service is not None:
            await service.close()


def _to_advertised_service(service: Any) -> AdvertisedService:
    version = None
    raw_version = getattr(service, "Version", None)
    if raw_version is not None:
        version = f"{raw_version.Major}.{raw_version.Minor}"
    return AdvertisedService(
        namespace=service.Namespace,
        xaddr=getattr(service, "XAddr", None),
        version=version,
    )


class ClientFactory:
    """Builds ProtocolClients that share WSDL location and timeout."""

    def __init__(self, wsdl_dir: Optional[Path] = None, timeout: float = 10.0):
        self.wsdl_dir = wsdl_dir
        self.timeout = timeout

    def build(
        self,
        slot: CapabilitySlot,
        address: str,
        credentials: Optional[Credentials] = None,
    ) -> ProtocolClient:
        """Build a client for an already validated address."""
        return ProtocolClient(
            slot=slot,
            address=address,
            binding=BINDINGS[slot],
            credentials=credentials,
            wsdl_dir=self.wsdl_dir,
            timeout=self.timeout,
        )
