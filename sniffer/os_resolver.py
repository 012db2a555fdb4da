"""Operating system resolution from the user agent and a few capabilities.

The user agent picks one of five OS families. Each family resolver returns a
partial `BrowserDetails` holding the OS, the device class and whatever the
family reveals about the browser (engine, user agent version, console
browser names).
"""

from typing import Callable

from sniffer.descriptor import BrowserDetails, Engine, OperatingSystem, UserAgentVersion
from sniffer.engines import android_version, kindle_version
from sniffer.environment import Environment
from sniffer.patterns import (
    UNKNOWN,
    extract,
    extract_float,
    extract_int,
    looks_like,
    version_label,
)
from sniffer.probe import lookup, probe

KINDLE_TOKENS = r"Kindle|Silk|KFTT|KFOT|KFJWA|KFJWI|KFSOWI|KFTHWA|KFTHWI|KFAPWA|KFAPWI"
IOS_TOKENS = r"iPhone|iPad|iPod"

# Marketing names for Windows NT kernel versions.
# See http://msdn.microsoft.com/en-us/library/ms537503(v=vs.85).aspx
WINDOWS_NT_RELEASES: dict[float, str] = {
    10.0: "10.0",
    6.3: "8.1",
    6.2: "8",
    6.1: "7",
    6.0: "Vista",
    5.2: "2003",
    5.1: "XP",
    5.01: "2000 SP1",
    5.0: "2000",
    4.0: "NT",
}

OsResolver = Callable[[Environment, str], BrowserDetails]
OtherRule = tuple[Callable[[Environment, str], bool], BrowserDetails]


def _platform(environment: Environment) -> str:
    platform = lookup(environment, "navigator.platform", "")
    return platform if isinstance(platform, str) else ""


def _windows(ua: str) -> BrowserDetails:
    if looks_like(r"IEMobile", ua):
        version = extract(ua, r"Windows.Phone.(?:os)?\s?(\d\d?\.?\d?\d?)") or extract(
            ua, r"WP(\d\d?\.?\d?\d?)"
        )
        return BrowserDetails(
            mobile=True,
            os=OperatingSystem(name="Windows Phone", version=version or str(UNKNOWN)),
        )
    if looks_like(r"Windows.NT.", ua):
        nt_version = extract_float(ua, r"Windows.NT.(\d\d?\.?\d?\d?)")
        return BrowserDetails(
            desktop=True,
            os=OperatingSystem(
                name="Windows", version=WINDOWS_NT_RELEASES.get(nt_version, str(UNKNOWN))
            ),
        )
    if looks_like(r"Windows.9(\d)", ua):
        # 95, 98 and Me are not worth telling apart
        return BrowserDetails(desktop=True, os=OperatingSystem(name="Windows", version="9x"))
    if looks_like(r"Windows.CE", ua):
        return BrowserDetails(mobile=True, os=OperatingSystem(name="Windows", version="CE"))
    return BrowserDetails(desktop=True, os=OperatingSystem(name="Windows"))


def microsoft_os(environment: Environment, ua: str) -> BrowserDetails:
    """Resolve Xbox, Windows Phone and desktop Windows."""
    if looks_like(r"XBox One", ua):
        details = BrowserDetails(
            name="Internet Explorer",
            version=10.0,
            console=True,
            os=OperatingSystem(name="Xbox", version="One"),
        )
    elif looks_like(r"Xbox", ua):
        details = BrowserDetails(
            name="Internet Explorer",
            version=7.0,
            console=True,
            os=OperatingSystem(name="Xbox", version="360"),
        )
    else:
        details = _windows(ua)

    # Surface tablets report touch without being Windows Phone
    if looks_like(r"Touch", ua) and not looks_like(r"IEMobile", ua):
        details = details.model_copy(
            update={"os": details.os.model_copy(update={"name": "Window RT"})}
        )
    return details


def apple_os(environment: Environment, ua: str) -> BrowserDetails:
    """Resolve iOS, including in-app webviews, and macOS.

    Mozilla/5.0 (iPhone; CPU iPhone OS 7_1 like Mac OS X) AppleWebKit/537.51.2
    (KHTML, like Gecko) Version/7.0 Mobile/11D167 Safari/9537.53

    Webviews do not carry Safari in their user agent, so a user agent without
    any browser token is taken to be iOS.
    """
    platform = _platform(environment)
    if (
        looks_like(IOS_TOKENS, ua)
        or looks_like(IOS_TOKENS, platform)
        or not looks_like(r"Safari|Firefox|Chrome", ua)
    ):
        os_token = extract(ua, r".OS.(\d+[._]\d+)")
        ios_version = (
            os_token.replace("_", ".") if os_token else extract(ua, r".Version/(\d+\.\d+)")
        )
        device = platform or ua
        return BrowserDetails(
            tablet=looks_like(r"ipad", device),
            mobile=looks_like(r"iphone|ipod", device),
            ua=UserAgentVersion(version=float(ios_version) if ios_version else UNKNOWN),
            os=OperatingSystem(name="iOS", version=ios_version or str(UNKNOWN)),
        )
    if looks_like(r"Mac", ua) or looks_like(r"Mac", platform):
        # this format was introduced at 3.0+
        minor = extract_int(ua, r"Mac.OS.X.10.(\d+)")
        return BrowserDetails(
            desktop=True,
            os=OperatingSystem(
                name="Mac", version=f"10.{minor}" if minor != UNKNOWN else str(UNKNOWN)
            ),
        )
    return BrowserDetails()


def android_os(environment: Environment, ua: str) -> BrowserDetails:
    """Resolve Android.

    No user agent token reliably gives the OS version, so it comes from the
    stock browser's capability ladder.
    """
    ua_version = extract_float(ua, r"Android\s(\d+\.\d+)")
    if looks_like(r"Chrome", ua):
        # modern Android browsers use the chrome engine
        engine = Engine(name="chrome", version=extract_int(ua, r"Chrome/(\d+)"))
    elif looks_like(r"AppleWebKit", ua):
        engine = Engine(name="webkit", version=extract_int(ua, r"AppleWebKit/(\d+)"))
    else:
        engine = Engine(name="unknown")
    return BrowserDetails(
        mobile=True,
        engine=engine,
        ua=UserAgentVersion(version=ua_version),
        os=OperatingSystem(
            name="Android", version=version_label(android_version(environment, ua_version))
        ),
    )


def kindle_os(environment: Environment, ua: str) -> BrowserDetails:
    """Resolve Kindle tablets and the Silk browser they ship."""
    ua_version: int | float = UNKNOWN
    engine = Engine()
    if looks_like(r"Silk", ua):
        engine = Engine(name="silk", version=extract_int(ua, r"Silk/(\d+)"))
        ua_version = engine.version
    elif looks_like(r"AppleWebKit", ua):
        engine = Engine(name="webkit", version=extract_int(ua, r"AppleWebKit/(\d+)"))
        # a Kindle without Silk in its user agent is something odd
        ua_version = 1

    if looks_like(r"Version", ua):
        ua_version = extract_float(ua, r"Version/(\d+\.\d+)")

    return BrowserDetails(
        tablet=True,
        version=kindle_version(environment, ua_version),
        engine=engine,
        ua=UserAgentVersion(version=ua_version),
        os=OperatingSystem(name="Kindle"),
    )


_OTHER_RULES: tuple[OtherRule, ...] = (
    (
        lambda environment, ua: probe(environment, "wiiu"),
        BrowserDetails(name="NetFront", console=True, os=OperatingSystem(name="Wii", version="U")),
    ),
    (
        lambda environment, ua: looks_like(r"Wii", ua),
        BrowserDetails(name="NetFront", console=True, os=OperatingSystem(name="Wii")),
    ),
    (
        lambda environment, ua: looks_like(r"PlayStation.4", ua),
        BrowserDetails(
            name="NetFront", console=True, os=OperatingSystem(name="PlayStation", version="4")
        ),
    ),
    (
        lambda environment, ua: looks_like(r"PlayStation", ua),
        BrowserDetails(console=True, os=OperatingSystem(name="PlayStation", version="3")),
    ),
    (
        lambda environment, ua: looks_like(r"NokiaN|Symbian", ua),
        BrowserDetails(mobile=True, os=OperatingSystem(name="Symbian")),
    ),
    (
        lambda environment, ua: looks_like(r"blackberry|RIM|BB10", ua),
        BrowserDetails(mobile=True, os=OperatingSystem(name="Blackberry")),
    ),
    (
        lambda environment, ua: _platform(environment) == "X11" or looks_like(r"Linux", ua),
        BrowserDetails(desktop=True, os=OperatingSystem(name="Linux")),
    ),
)


def other_os(environment: Environment, ua: str) -> BrowserDetails:
    """Resolve consoles, legacy mobile platforms and Linux."""
    for matches, details in _OTHER_RULES:
        if matches(environment, ua):
            return details
    return BrowserDetails(os=OperatingSystem(name="Unknown"))


# Checked in order; the first family whose tokens appear in the user agent wins.
OS_FAMILIES: tuple[tuple[str, OsResolver], ...] = (
    (r"Win|IEMobile", microsoft_os),
    (r"Mac|iPhone|iPad|iPod", apple_os),
    (r"Android", android_os),
    (KINDLE_TOKENS, kindle_os),
)


def resolve_os(environment: Environment, ua: str) -> BrowserDetails:
    """Resolve the OS family the user agent belongs to."""
    for tokens, resolver in OS_FAMILIES:
        if looks_like(tokens, ua):
            return resolver(environment, ua)
    return other_os(environment, ua)
