"""Capability ladders mapping feature support to browser versions.

Each ladder lists capabilities newest first. Capabilities accumulate across
releases, so the first rung a browser passes is the most recent milestone it
has reached; the rung's floor and ceiling then bound the version its user
agent claims. Ceilings given as a name refer to `latest.<name>` in settings,
the newest release the ladder was written against.
"""

import logging
import math
from typing import NamedTuple

from sniffer.configs import settings
from sniffer.environment import Environment
from sniffer.patterns import UNKNOWN, Number, bound, extract_float, extract_int, looks_like
from sniffer.probe import Check, all_of, has, lacks, lookup, probe

logger = logging.getLogger(__name__)


class Rung(NamedTuple):
    """A capability milestone and the versions that share it."""

    check: Check
    floor: Number
    ceiling: Number | str = math.inf


class Ladder(NamedTuple):
    """Ordered milestones for one engine family.

    `fallback` is the `(floor, ceiling)` range used when no rung passes, or
    `None` when the version is then unknowable.
    """

    name: str
    rungs: tuple[Rung, ...]
    fallback: tuple[Number, Number] | None


def _ceiling(rung: Rung) -> Number:
    if isinstance(rung.ceiling, str):
        return int(settings.latest[rung.ceiling])
    return rung.ceiling


def climb(ladder: Ladder, environment: Environment, reported: Number) -> Number:
    """Return `reported` bounded by the first rung `environment` passes."""
    for rung in ladder.rungs:
        if rung.check(environment):
            return bound(reported, rung.floor, _ceiling(rung))
    if ladder.fallback is None:
        return UNKNOWN
    return bound(reported, *ladder.fallback)


TRIDENT = Ladder(
    name="trident",
    rungs=(
        Rung(has("document.pointerLockElement"), 13, "edge"),
        Rung(has("Proxy"), 12),
        Rung(has("MutationObserver"), 11),
        Rung(has("atob"), 10),
        Rung(has("addEventListener"), 9),
        Rung(has("localStorage"), 8),
        Rung(
            all_of(
                has("document.all"), has("XMLHttpRequest"), lacks("XDomainRequest"), lacks("opera")
            ),
            7,
        ),
        Rung(all_of(has("document.all"), lacks("XMLHttpRequest")), 6),
    ),
    # IE 3 - 5.5
    fallback=None,
)

GECKO = Ladder(
    name="gecko",
    rungs=(
        Rung(has("PushManager"), 44, "firefox"),
        Rung(has("MessageChannel"), 41, 43),
        Rung(has("fetch"), 39, 40),
        Rung(has("performance.mark"), 38),
        Rung(has("crypto.subtle"), 34, 37),
        Rung(has("navigator.sendBeacon"), 31, 33),
        Rung(has("SharedWorker"), 29, 30),
        Rung(has("AudioContext"), 25, 28),
        Rung(has("requestAnimationFrame"), 23, 24),
        Rung(has("Notification"), 22),
        Rung(has("document.hidden"), 18, 21),
        Rung(has("navigator.mozGetUserMedia"), 17),
        Rung(has("indexedDB"), 16),
        Rung(has("performance.now"), 15),
        Rung(has("MutationObserver"), 14),
        Rung(has("Blob"), 13),
        Rung(has("WebSocket"), 11, 12),
        Rung(has("navigator.mozBattery"), 10),
        Rung(has("performance.timing"), 7, 9),
        Rung(has("matchMedia"), 6),
        Rung(has("Uint32Array"), 4, 5),
        Rung(has("FileReader"), 3.6),
        Rung(has("JSON"), 3.5),
        Rung(has("postMessage"), 3),
    ),
    fallback=(0, 2.9),
)

CHROMIUM = Ladder(
    name="chromium",
    rungs=(
        Rung(has("Proxy"), 49, "chrome"),
        Rung(has("PushManager"), 44, 48),
        Rung(has("navigator.permissions"), 43),
        Rung(has("navigator.sendBeacon"), 39, 42),
        Rung(has("navigator.getBattery"), 38),
        Rung(has("crypto.subtle"), 37),
        Rung(has("elements.img.srcset"), 34, 36),
        Rung(has("document.visibilityState"), 33),
        Rung(has("Promise"), 32),
        Rung(has("navigator.vibrate"), 30, 31),
        Rung(has("MutationObserver"), 27, 29),
        Rung(has("elements.template.content"), 26),
        Rung(has("performance.mark"), 25),
        Rung(has("requestAnimationFrame"), 24),
        Rung(has("URL.createObjectURL"), 23),
        Rung(has("Notification"), 22),
        Rung(has("navigator.webkitGetUserMedia"), 21),
        Rung(has("Blob"), 20),
        Rung(has("document.webkitRequestFullscreen"), 15, 19),
        Rung(has("performance.timing"), 13, 14),
        Rung(has("elements.details.open"), 12),
        Rung(has("webkitIndexedDB"), 11),
        Rung(has("elements.input.checkValidity"), 10),
        Rung(has("matchMedia"), 9),
        Rung(has("elements.div.classList"), 8),
        Rung(has("Uint32Array"), 7),
        Rung(has("FileReader"), 6),
        Rung(has("webkitNotification"), 5),
        Rung(has("history.replaceState"), 4),
    ),
    fallback=(0, 3),
)

SAFARI = Ladder(
    name="safari",
    rungs=(
        Rung(has("CSS.supports"), 9.0),
        Rung(has("indexedDB"), 8.0, 8.4),
        Rung(has("document.execCommand"), 7.0, 7.1),
        Rung(has("requestAnimationFrame"), 6.0, 6.1),
        # Safari 6533.18.5 - iOS 4.3.5
        Rung(has("Uint32Array"), 5.1),
        Rung(has("navigator.geolocation"), 5.0),
        Rung(has("navigator.onLine"), 4.2, 4.3),
        # Safari 6531.22.7 - iOS 4.0.2
        Rung(has("JSON"), 4.0, 4.1),
        # webkit 531.21.10 - iOS 3.2.2, webkit 528.16 - iOS 3.1.3
        Rung(has("postMessage"), 3.2),
    ),
    fallback=(0, 3.1),
)

# The stock Android browser shares its version with the OS it ships in.
ANDROID = Ladder(
    name="android",
    rungs=(
        Rung(has("navigator.sendBeacon"), 5.0),
        Rung(has("performance.now"), 4.4),
        Rung(has("FileList"), 4.0, 4.3),
    ),
    fallback=(2.1, 4.0),
)

KINDLE = Ladder(
    name="kindle",
    rungs=(
        Rung(has("document.pointerLockElement"), 3.0),
        Rung(has("PerformanceTiming"), 2.0),
    ),
    fallback=(1.0, math.inf),
)


def trident_version(environment: Environment, reported: Number) -> Number:
    """Return the Internet Explorer or Edge version."""
    return climb(TRIDENT, environment, reported)


def gecko_version(environment: Environment, reported: Number) -> Number:
    """Return the Firefox version."""
    return climb(GECKO, environment, reported)


def chromium_version(environment: Environment, reported: Number) -> Number:
    """Return the Chrome version, or the Chromium version an Opera build sits on."""
    return climb(CHROMIUM, environment, reported)


def safari_version(environment: Environment, reported: Number) -> Number:
    """Return the Safari version, desktop or mobile."""
    return climb(SAFARI, environment, reported)


def android_version(environment: Environment, reported: Number) -> Number:
    """Return the Android version, used for both the OS and its stock browser."""
    return climb(ANDROID, environment, reported)


def kindle_version(environment: Environment, reported: Number) -> Number:
    """Return the Silk browser version."""
    return climb(KINDLE, environment, reported)


def trident_engine_version(version: Number) -> Number:
    """Map an Internet Explorer version to its Trident engine version.

    See https://en.wikipedia.org/wiki/Trident_(layout_engine)
    """
    if version >= 11:
        return 7
    if version >= 10:
        return 6
    if version >= 9:
        return 5
    if version >= 8:
        return 4
    return 3


# Opera moved to Chromium's release train at 15, when Chromium was at 28.
OPERA_CHROMIUM_OFFSET = 13
OPERA_FIRST_CHROMIUM = 28


class OperaVersion(NamedTuple):
    """Versions resolved for an Opera build, Presto or Blink."""

    version: Number
    engine_name: str
    engine_version: Number
    ua_version: Number
    feature_version: Number = UNKNOWN
    console: bool = False


def _presto_api_version(environment: Environment) -> Number:
    reported = lookup(environment, "opera.version")
    try:
        value = reported() if callable(reported) else reported
    except Exception as exc:
        logger.debug(f"opera.version() could not be read: {exc!r}")
        return UNKNOWN
    # a bare presence flag says Presto is there but not which version
    if isinstance(value, bool):
        return UNKNOWN
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        logger.debug(f"opera.version() could not be read: {exc!r}")
        return UNKNOWN


def opera_version(environment: Environment, ua: str, ua_version: Number) -> OperaVersion:
    """Resolve the Opera version.

    Presto builds reveal their version through `opera.version()`. Blink builds
    are placed on the Chromium ladder and, from Chromium 28 on, translated back
    to Opera's numbering.
    """
    if looks_like(r"Presto/(\d+\.\d+)", ua):
        engine_version = extract_float(ua, r"Presto/(\d+\.\d+)")
    else:
        engine_version = extract_int(ua, r"AppleWebKit/(\d+)")

    if looks_like(r"Nintendo", ua):
        return OperaVersion(
            version=9.0,
            engine_name="presto",
            engine_version=engine_version,
            ua_version=ua_version,
            console=True,
        )

    if probe(environment, "opera.version"):
        feature_version = _presto_api_version(environment)
        return OperaVersion(
            version=feature_version,
            engine_name="presto",
            engine_version=engine_version,
            ua_version=ua_version,
            feature_version=feature_version,
        )

    version = chromium_version(environment, extract_int(ua, r"Chrome/(\d+)"))
    engine_version = version
    if looks_like(r"OPR/\d+\.\d+", ua):
        ua_version = extract_float(ua, r"OPR/(\d+\.\d+)")
    if version >= OPERA_FIRST_CHROMIUM:
        version = bound(
            ua_version, version - OPERA_CHROMIUM_OFFSET, int(settings.latest.opera)
        )
    return OperaVersion(
        version=version,
        engine_name="blink",
        engine_version=engine_version,
        ua_version=ua_version,
    )
