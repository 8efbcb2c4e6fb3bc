"""Exception hierarchy for discovery and capability calls.

Anything raised while building the trusted capability surface is a
``DiscoveryError`` and is fatal to the session. ``TransportError`` is raised
by individual capability calls and is isolated by the dispatcher.
"""


class ONVIFProvisioningError(Exception):
    """Base class for all package errors."""


class DiscoveryError(ONVIFProvisioningError):
    """Discovery could not produce a trusted capability set."""


class MissingBaseAddress(DiscoveryError):
    """No device base address was supplied."""

    def __init__(self, message: str = "--uri must be specified."):
        super().__init__(message)


class DiscoveryTransportError(DiscoveryError):
    """The device management endpoint failed to answer GetServices."""


class InvalidServiceAddress(DiscoveryError):
    """An address could not be parsed as an absolute URL."""

    def __init__(self, address: object, reason: str = "invalid URL"):
        self.address = address
        self.reason = reason
        super().__init__(f"Invalid service URI {address!r}: {reason}")


class UntrustedServiceOrigin(DiscoveryError):
    """An advertised service lives outside the device's base address."""

    def __init__(self, address: str, base: str):
        self.address = address
        self.base = base
        super().__init__(f"Service URI {address} is not within base URI {base}")


class IncompleteCredentials(ONVIFProvisioningError, ValueError):
    """Only one of username and password was supplied."""

    def __init__(self, message: str = "username and password must be specified together"):
        super().__init__(message)


class TransportError(ONVIFProvisioningError):
    """A single SOAP call to a capability endpoint failed."""

    def __init__(self, operation: str, address: str, reason: str):
        self.operation = operation
        self.address = address
        self.reason = reason
        super().__init__(f"{operation} failed at {address}: {reason}")


class NoVideoSources(ONVIFProvisioningError):
    """The provisioning service reported no video sources to act on."""

    def __init__(self, message: str = "No service capabilities"):
        super().__init__(message)
