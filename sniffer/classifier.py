"""Decide which browser family an environment belongs to.

Classification runs in two phases. A touch probe first splits mobile from
desktop browsers, then an ordered rule table for that half picks the brand
from capabilities unique to it at the time the rules were written. Kindles
skip both tables and are recognized by their user agent alone.
"""

import logging
from enum import Enum, unique
from typing import Callable

from sniffer.environment import Environment
from sniffer.os_resolver import KINDLE_TOKENS
from sniffer.patterns import looks_like
from sniffer.probe import all_of, any_of, has, lacks, probe, safely

logger = logging.getLogger(__name__)


@unique
class BrowserType(str, Enum):
    """Browser families with their own OS and version resolution."""

    MICROSOFT = "microsoft"
    FIREFOX = "firefox"
    CHROME = "chrome"
    OPERA = "opera"
    SAFARI = "safari"
    ANDROID = "android"
    SAFARI_MOBILE = "safari_mobile"
    OPERA_MINI = "opera_mini"
    OPERA_ANDROID = "opera_android"
    CHROME_MOBILE = "chrome_mobile"
    MICROSOFT_MOBILE = "microsoft_mobile"
    FIREFOX_MOBILE = "firefox_mobile"
    BLACKBERRY = "blackberry"
    KINDLE = "kindle"
    WEBVIEW = "webview"
    UNKNOWN = "unknown"
    UNKNOWN_MOBILE = "unknown_mobile"


Rule = tuple[Callable[[Environment, str], bool], BrowserType]
OPERA_BLINK_TOKEN = r"\sOPR/\d+"


def _capability(check: Callable[[Environment], bool]) -> Callable[[Environment, str], bool]:
    return lambda environment, ua: check(environment)


def _is_surface(environment: Environment, ua: str) -> bool:
    # IE Mobile sometimes carries Touch in its user agent too
    return looks_like(r"Win", ua) and looks_like(r"Touch", ua) and not looks_like(r"IEMobile", ua)


def is_mobile(environment: Environment) -> bool:
    """Perform a simple test to see if we're on mobile or not."""
    if safely(lambda env: env.creates_touch_event(), environment):
        # Surface tablets have touch events but also implement Pointer Lock
        return not (
            probe(environment, "document.exitPointerLock")
            and probe(environment, "document.mozExitPointerLock")
        )
    # Opera Mini and IE10 Mobile have no touch events; execCommand is desktop only
    return not probe(environment, "document.execCommand")


def _android_or_webview(environment: Environment, ua: str) -> BrowserType:
    # The stock Android browser never laid out MathML, webviews claiming Android do
    if safely(lambda env: env.renders_mathml(), environment):
        return BrowserType.WEBVIEW
    return BrowserType.ANDROID


MOBILE_RULES: tuple[Rule, ...] = (
    (_is_surface, BrowserType.MICROSOFT),
    # Chrome is the only mobile browser with permissions
    (_capability(has("navigator.permissions")), BrowserType.CHROME_MOBILE),
    # Only Firefox Mobile has the ambient light API
    (_capability(has("ondevicelight")), BrowserType.FIREFOX_MOBILE),
    # IE is the only mobile browser with setImmediate
    (_capability(has("setImmediate")), BrowserType.MICROSOFT_MOBILE),
    # Only Opera Mini lacks matchMedia
    (_capability(lacks("matchMedia")), BrowserType.OPERA_MINI),
    # iOS has speech synthesis going way back but has never shipped Intl
    (_capability(all_of(has("speechSynthesis"), lacks("Intl"))), BrowserType.SAFARI_MOBILE),
    # Android, old versions included via navigator.connection.type
    (
        _capability(any_of(has("isFinite"), has("navigator.connection.type"))),
        BrowserType.ANDROID,
    ),
    (_capability(lacks("Intl")), BrowserType.BLACKBERRY),
    # Opera is the only one left with a file system API
    (_capability(has("webkitRequestFileSystem")), BrowserType.OPERA_ANDROID),
)

DESKTOP_RULES: tuple[Rule, ...] = (
    (
        _capability(all_of(lacks("Notification"), lacks("EventSource"), has("navigator.onLine"))),
        BrowserType.MICROSOFT,
    ),
    (_capability(has("InstallTrigger")), BrowserType.FIREFOX),
    (
        lambda environment, ua: probe(environment, "chrome")
        and not probe(environment, "opera")
        and not looks_like(OPERA_BLINK_TOKEN, ua),
        BrowserType.CHROME,
    ),
    (
        lambda environment, ua: probe(environment, "opera") or looks_like(OPERA_BLINK_TOKEN, ua),
        BrowserType.OPERA,
    ),
    (_capability(all_of(lacks("webkitRequestFileSystem"), lacks("Intl"))), BrowserType.SAFARI),
)


def _first_match(rules: tuple[Rule, ...], environment: Environment, ua: str) -> BrowserType | None:
    for matches, browser_type in rules:
        if matches(environment, ua):
            return browser_type
    return None


def classify(environment: Environment, ua: str) -> tuple[BrowserType, bool]:
    """Return the browser type and whether the environment looks mobile."""
    mobile = is_mobile(environment)
    # Kindle capabilities vary too much, their user agent is trusted instead
    if looks_like(KINDLE_TOKENS, ua):
        browser_type = BrowserType.KINDLE
    elif mobile:
        browser_type = _first_match(MOBILE_RULES, environment, ua) or BrowserType.UNKNOWN_MOBILE
        if browser_type is BrowserType.ANDROID:
            browser_type = _android_or_webview(environment, ua)
    else:
        browser_type = _first_match(DESKTOP_RULES, environment, ua) or BrowserType.UNKNOWN
    logger.debug(f"Classified environment as {browser_type.value}", extra={"mobile": mobile})
    return browser_type, mobile
