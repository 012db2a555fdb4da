"""Feature-based browser identity classification."""

from sniffer.descriptor import BrowserDetails, Detection, DeviceType, MaxVersion
from sniffer.detect import detect
from sniffer.environment import Environment, StaticEnvironment

__all__ = [
    "BrowserDetails",
    "Detection",
    "DeviceType",
    "Environment",
    "MaxVersion",
    "StaticEnvironment",
    "detect",
]
