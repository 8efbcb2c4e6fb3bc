"""Parsing and trust checks for device and service addresses.

Addresses are compared in their rendered form after URL parsing. A service
is trusted only if its rendered address starts with the rendered base
address. No DNS resolution or redirect following is done.
"""

from urllib.parse import urljoin

from pydantic import AnyUrl, TypeAdapter, ValidationError

from onvif_provisioning.exceptions import InvalidServiceAddress

DEVICE_SERVICE_PATH = "onvif/device_service"

_url_adapter = TypeAdapter(AnyUrl)


def parse_address(raw: object) -> str:
    """Parse an absolute URL and return its rendered form.

    Raises:
        InvalidServiceAddress: if ``raw`` is not an absolute URL
    """
    try:
        return str(_url_adapter.validate_python(raw))
    except ValidationError as e:
        reason = e.errors()[0]["msg"] if e.errors() else str(e)
        raise InvalidServiceAddress(raw, reason) from e


def is_trusted(base: str, candidate: str) -> bool:
    """Return True if ``candidate`` lives under ``base``."""
    return str(candidate).startswith(str(base))


def device_service_address(base: str) -> str:
    """Device management service address for a base URI."""
    return parse_address(urljoin(str(base), DEVICE_SERVICE_PATH))
