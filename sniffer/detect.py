"""Assemble the browser descriptor for an environment and user agent."""

import logging
from typing import Callable

from sniffer.classifier import BrowserType, classify
from sniffer.descriptor import (
    BrowserDetails,
    Detection,
    Engine,
    FeatureVersion,
    MaxVersion,
    OperatingSystem,
    UserAgentVersion,
)
from sniffer.engines import (
    android_version,
    chromium_version,
    gecko_version,
    opera_version,
    safari_version,
    trident_engine_version,
    trident_version,
)
from sniffer.environment import Environment, StaticEnvironment
from sniffer.os_resolver import android_os, apple_os, kindle_os, microsoft_os, resolve_os
from sniffer.patterns import (
    UNKNOWN,
    extract_float,
    extract_int,
    looks_like,
    version_label,
)
from sniffer.probe import lookup, probe

logger = logging.getLogger(__name__)

# Tokens a genuine user agent of each brand carries. Every pattern must match.
CANONICAL_TOKENS: dict[str, tuple[str, ...]] = {
    "Edge": (r"Edge",),
    "Internet Explorer": (r"MSIE|Trident",),
    "Firefox": (r"Firefox",),
    "Chrome": (r"Chrome",),
    "Opera": (r"Opera|OPR",),
    "Safari": (r"Safari",),
    "Android": (r"Android", r"Mobile"),
    "Mobile Safari": (r"Safari", r"iPhone|iPad"),
    "Chrome Android": (r"Chrome", r"Mobile"),
    "Firefox Android": (r"Firefox", r"Mobile"),
    "Mobile IE": (r"MSIE", r"IEMobile"),
    "iOS Webview": (r"iPhone|iPad|iPod", r"Mobile"),
    "Opera Mini": (r"Opera", r"Mini"),
    "Opera Android": (r"Opera", r"Android"),
}

Assembler = Callable[[Environment, str, bool], BrowserDetails]


def _microsoft(environment: Environment, ua: str, mobile: bool) -> BrowserDetails:
    details = microsoft_os(environment, ua)
    ua_version = extract_int(ua, r"Edge/(\d+)")
    if ua_version == UNKNOWN:
        ua_version = extract_int(ua, r"MSIE[ /](\d+)")
    if ua_version == UNKNOWN:
        ua_version = extract_int(ua, r"Trident/.*rv:(\d+)")
    version = trident_version(environment, ua_version)
    return details.model_copy(
        update={
            "name": "Edge" if version >= 12 else "Internet Explorer",
            "version": version,
            "ua": UserAgentVersion(version=ua_version),
            "engine": Engine(name="trident", version=trident_engine_version(version)),
        }
    )


def _firefox(environment: Environment, ua: str, mobile: bool) -> BrowserDetails:
    details = resolve_os(environment, ua)
    ua_version = extract_int(ua, r"Firefox/(\d+)")
    return details.model_copy(
        update={
            "name": "Firefox",
            "version": gecko_version(environment, ua_version),
            "ua": UserAgentVersion(version=ua_version),
            "engine": Engine(name="gecko", version=extract_int(ua, r"rv:(\d+)")),
        }
    )


def _chrome(environment: Environment, ua: str, mobile: bool) -> BrowserDetails:
    details = resolve_os(environment, ua)
    ua_version = extract_int(ua, r"Chrome/(\d+)")
    # everything from 27 on is Blink, and only Blink exposes CSS
    engine_name = "blink" if probe(environment, "CSS") else "webkit"
    return details.model_copy(
        update={
            "name": "Chrome",
            "version": chromium_version(environment, ua_version),
            "ua": UserAgentVersion(version=ua_version),
            "engine": Engine(name=engine_name, version=ua_version),
        }
    )


def _opera(environment: Environment, ua: str, mobile: bool) -> BrowserDetails:
    details = resolve_os(environment, ua)
    opera = opera_version(environment, ua, details.ua.version)
    return details.model_copy(
        update={
            "name": "Opera",
            "version": opera.version,
            "console": details.console or opera.console,
            "ua": UserAgentVersion(version=opera.ua_version),
            "feature": FeatureVersion(version=opera.feature_version),
            "engine": Engine(name=opera.engine_name, version=opera.engine_version),
        }
    )


def _safari(environment: Environment, ua: str, mobile: bool) -> BrowserDetails:
    details = resolve_os(environment, ua)
    ua_version = extract_float(ua, r"Version/(\d+\.\d+)")
    if ua_version == UNKNOWN:
        ua_version = details.ua.version
    return details.model_copy(
        update={
            "name": "Safari",
            "desktop": details.desktop or not (details.mobile or details.tablet),
            "version": safari_version(environment, ua_version),
            "ua": UserAgentVersion(version=ua_version),
            "engine": Engine(
                name="webkit", version=extract_int(ua, r"AppleWebKit/(\d+)", flags=0)
            ),
        }
    )


def _android(environment: Environment, ua: str, mobile: bool) -> BrowserDetails:
    details = android_os(environment, ua)
    return details.model_copy(
        update={
            "name": "Android",
            "version": android_version(environment, details.ua.version),
        }
    )


def _safari_mobile(environment: Environment, ua: str, mobile: bool) -> BrowserDetails:
    details = apple_os(environment, ua)
    ua_version = extract_float(ua, r"Version/(\d+\.\d+)")
    if ua_version == UNKNOWN:
        ua_version = details.ua.version
    version = safari_version(environment, ua_version)
    # Mobile Safari ships with iOS, so its version stands in for an unknown iOS version
    os_version = details.os.version
    if os_version == str(UNKNOWN):
        os_version = version_label(version)
    return details.model_copy(
        update={
            "name": "Mobile Safari",
            "version": version,
            "ua": UserAgentVersion(version=ua_version),
            "engine": Engine(
                name="webkit", version=extract_int(ua, r"AppleWebKit/(\d+)", flags=0)
            ),
            "os": OperatingSystem(name=details.os.name, version=os_version),
        }
    )


def _trust_ua(
    name: str, resolver: Callable[[Environment, str], BrowserDetails], pattern: str
) -> Assembler:
    """Build an assembler for mobile brands whose user agent version is taken as is."""

    def assemble(environment: Environment, ua: str, mobile: bool) -> BrowserDetails:
        details = resolver(environment, ua)
        ua_version = extract_int(ua, pattern)
        return details.model_copy(
            update={
                "name": name,
                "version": ua_version,
                "ua": UserAgentVersion(version=ua_version),
            }
        )

    return assemble


def _webview(environment: Environment, ua: str, mobile: bool) -> BrowserDetails:
    return apple_os(environment, ua).model_copy(update={"name": "iOS Webview"})


def _blackberry(environment: Environment, ua: str, mobile: bool) -> BrowserDetails:
    details = resolve_os(environment, ua)
    ua_version = extract_float(ua, r"Version/(\d+\.\d+)")
    return details.model_copy(
        update={
            "name": "BlackBerry",
            "mobile": True,
            "version": ua_version,
            "ua": UserAgentVersion(version=ua_version),
        }
    )


def _kindle(environment: Environment, ua: str, mobile: bool) -> BrowserDetails:
    # Kindles are identified by user agent alone, so there is nothing to distrust
    return kindle_os(environment, ua).model_copy(update={"name": "Kindle"})


def _unknown(environment: Environment, ua: str, mobile: bool) -> BrowserDetails:
    if probe(environment, "document.documentElement.style.KhtmlUserInput"):
        return BrowserDetails(
            name="Linux Browser",
            desktop=True,
            mobile=mobile,
            engine=Engine(name="khtml"),
            os=OperatingSystem(name="Linux"),
        )
    # keep whatever the OS family knows, consoles name their own browser
    details = resolve_os(environment, ua)
    return details.model_copy(
        update={
            "name": details.name or "Unknown",
            "engine": details.engine.model_copy(update={"name": "Unknown"}),
        }
    )


ASSEMBLERS: dict[BrowserType, Assembler] = {
    BrowserType.MICROSOFT: _microsoft,
    BrowserType.FIREFOX: _firefox,
    BrowserType.CHROME: _chrome,
    BrowserType.OPERA: _opera,
    BrowserType.SAFARI: _safari,
    BrowserType.ANDROID: _android,
    BrowserType.SAFARI_MOBILE: _safari_mobile,
    BrowserType.CHROME_MOBILE: _trust_ua("Chrome Android", resolve_os, r"Chrome/(\d+)"),
    BrowserType.FIREFOX_MOBILE: _trust_ua("Firefox Android", resolve_os, r"Firefox/(\d+)"),
    BrowserType.MICROSOFT_MOBILE: _trust_ua("Mobile IE", microsoft_os, r"IEMobile/(\d+)"),
    BrowserType.WEBVIEW: _webview,
    BrowserType.OPERA_MINI: _trust_ua("Opera Mini", resolve_os, r"Opera Mini/(\d+)"),
    BrowserType.OPERA_ANDROID: _trust_ua("Opera Android", resolve_os, r"Opera/(\d+)"),
    BrowserType.BLACKBERRY: _blackberry,
    BrowserType.KINDLE: _kindle,
    BrowserType.UNKNOWN: _unknown,
    BrowserType.UNKNOWN_MOBILE: _unknown,
}


def is_trustworthy(name: str, ua: str) -> bool:
    """Return whether `ua` carries every token a genuine `name` user agent has."""
    return all(looks_like(token, ua) for token in CANONICAL_TOKENS.get(name, ()))


def _finalize(details: BrowserDetails, ua: str) -> BrowserDetails:
    name = details.name or "Unknown"
    return details.model_copy(
        update={
            "name": name,
            "trustworthy": is_trustworthy(name, ua),
            "max": MaxVersion.EXCEED if details.ua.version > details.version else MaxVersion.OK,
            "engine": Engine(
                name=details.engine.name or "Unknown", version=details.engine.version
            ),
            "os": OperatingSystem(name=details.os.name or "Unknown", version=details.os.version),
        }
    )


def detect(environment: Environment | None = None, user_agent: str | None = None) -> Detection:
    """Classify the browser behind `environment`.

    Args:
        environment: The capability provider to probe. Defaults to an empty
            snapshot, which has no capabilities at all.
        user_agent: Overrides the environment's `navigator.userAgent`.
    Returns:
        Detection: A freshly built descriptor. Classification never raises;
        anything it cannot place ends up as "Unknown".
    """
    if environment is None:
        environment = StaticEnvironment()
    ua = user_agent or lookup(environment, "navigator.userAgent", "")
    if not isinstance(ua, str):
        ua = ""

    browser_type, mobile = classify(environment, ua)
    details = _finalize(ASSEMBLERS[browser_type](environment, ua, mobile), ua)

    logger.debug(
        f"Detected {details.name} {details.version}",
        extra={"browser_type": browser_type.value, "os": details.os.name},
    )
    if not details.trustworthy:
        logger.info(f"User agent does not look like {details.name}", extra={"ua": ua})
    return Detection(details=details)
