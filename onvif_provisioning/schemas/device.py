"""Pydantic schemas for the device session and its service list."""

from typing import Optional

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field, model_validator

from onvif_provisioning.exceptions import IncompleteCredentials


class Credentials(BaseModel):
    """Username/password pair shared by every client of a session."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: str = Field(..., repr=False)

    @classmethod
    def from_pair(
        cls, username: Optional[str], password: Optional[str]
    ) -> Optional["Credentials"]:
        """Build credentials from optional parts.

        Returns None when neither part is given. Raises IncompleteCredentials
        when exactly one is.
        """
        if username is None and password is None:
            return None
        if username is None or password is None:
            raise IncompleteCredentials()
        return cls(username=username, password=password)


class DeviceTarget(BaseModel):
    """Validated session inputs: base address and optional credentials."""

    uri: Optional[AnyHttpUrl] = Field(
        None, description="Device base URI, typically just the HTTP root"
    )
    username: Optional[str] = Field(None, description="Device username")
    password: Optional[str] = Field(None, repr=False, description="Device password")

    @model_validator(mode="after")
    def check_credentials_pair(self) -> "DeviceTarget":
        Credentials.from_pair(self.username, self.password)
        return self

    def credentials(self) -> Optional[Credentials]:
        """Return the credential pair, or None for anonymous access."""
        return Credentials.from_pair(self.username, self.password)


class AdvertisedService(BaseModel):
    """One entry of a device's GetServices response."""

    namespace: str = Field(..., description="Service namespace identifier")
    xaddr: Optional[str] = Field(None, description="Advertised service address")
    version: Optional[str] = Field(None, description="Service version (major.minor)")
