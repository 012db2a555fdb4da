"""Data models for the browser descriptor returned by `detect`."""

from enum import Enum, IntEnum, unique

from pydantic import BaseModel, ConfigDict, Field, computed_field

from sniffer.patterns import UNKNOWN


@unique
class MaxVersion(str, Enum):
    """Whether the user agent claims a newer release than the ladders know of."""

    OK = "ok"
    EXCEED = "ex"


@unique
class DeviceType(IntEnum):
    """Device type codes consumed by bid request payloads."""

    DESKTOP = 2
    MOBILE = 4
    TABLET = 5
    OTHER = 6


class Engine(BaseModel):
    """Rendering engine family and version."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    version: int | float = UNKNOWN


class OperatingSystem(BaseModel):
    """Operating system family. The version is a label such as "8.1" or "Vista"."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    version: str = str(UNKNOWN)


class UserAgentVersion(BaseModel):
    """The version the user agent string claims for the detected brand."""

    model_config = ConfigDict(frozen=True)

    version: int | float = UNKNOWN


class FeatureVersion(BaseModel):
    """A version reported directly by a browser API rather than the user agent."""

    model_config = ConfigDict(frozen=True)

    version: int | float = UNKNOWN


class BrowserDetails(BaseModel):
    """Data model for a classified browser.

    `name`: The verified brand, e.g. "Chrome", "Mobile Safari" or "Unknown".
    `trustworthy`: False when the user agent lacks the tokens expected for `name`.
    `desktop`, `mobile`, `tablet`, `console`: The device class. One is normally
        set, but nothing forbids several.
    `max`: `MaxVersion.EXCEED` when `ua.version` is newer than `version`.
    `version`: The version after bounding by the capability ladders.
    """

    model_config = ConfigDict(frozen=True)

    name: str = ""
    trustworthy: bool = True
    desktop: bool = False
    mobile: bool = False
    tablet: bool = False
    console: bool = False
    max: MaxVersion = MaxVersion.OK
    version: int | float = UNKNOWN
    ua: UserAgentVersion = Field(default_factory=UserAgentVersion)
    feature: FeatureVersion = Field(default_factory=FeatureVersion)
    engine: Engine = Field(default_factory=Engine)
    os: OperatingSystem = Field(default_factory=OperatingSystem)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_ie(self) -> bool:
        """Whether this is desktop Internet Explorer."""
        return self.name == "Internet Explorer"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_ff(self) -> bool:
        """Whether this is desktop Firefox."""
        return self.name == "Firefox"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_opera(self) -> bool:
        """Whether this is desktop Opera."""
        return self.name == "Opera"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_chrome(self) -> bool:
        """Whether this is desktop Chrome."""
        return self.name == "Chrome"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_safari(self) -> bool:
        """Whether this is desktop Safari."""
        return self.name == "Safari"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def device_type(self) -> DeviceType:
        """Map the device class flags to a device type code."""
        if self.desktop:
            return DeviceType.DESKTOP
        if self.mobile:
            return DeviceType.MOBILE
        if self.tablet:
            return DeviceType.TABLET
        return DeviceType.OTHER


class Detection(BaseModel):
    """The result of `detect`."""

    model_config = ConfigDict(frozen=True)

    details: BrowserDetails
