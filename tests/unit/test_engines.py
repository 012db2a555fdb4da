# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

"""Unit tests for the engines.py module."""

import math

import pytest

from sniffer.configs import settings
from sniffer.engines import (
    ANDROID,
    CHROMIUM,
    GECKO,
    KINDLE,
    SAFARI,
    TRIDENT,
    Ladder,
    Rung,
    android_version,
    chromium_version,
    climb,
    gecko_version,
    kindle_version,
    opera_version,
    safari_version,
    trident_engine_version,
    trident_version,
)
from sniffer.environment import StaticEnvironment
from sniffer.patterns import UNKNOWN
from sniffer.probe import has

# Capabilities in the order browsers gained them, oldest first.
MILESTONES: dict[str, tuple[Ladder, list[str]]] = {
    "trident": (
        TRIDENT,
        [
            "document.all",
            "XMLHttpRequest",
            "localStorage",
            "addEventListener",
            "atob",
            "MutationObserver",
            "Proxy",
            "document.pointerLockElement",
        ],
    ),
    "gecko": (
        GECKO,
        [
            "postMessage",
            "JSON",
            "FileReader",
            "Uint32Array",
            "matchMedia",
            "performance.timing",
            "navigator.mozBattery",
            "WebSocket",
            "Blob",
            "MutationObserver",
            "performance.now",
            "indexedDB",
            "navigator.mozGetUserMedia",
            "document.hidden",
            "Notification",
            "requestAnimationFrame",
            "AudioContext",
            "SharedWorker",
            "navigator.sendBeacon",
            "crypto.subtle",
            "performance.mark",
            "fetch",
            "MessageChannel",
            "PushManager",
        ],
    ),
    "chromium": (
        CHROMIUM,
        [
            "history.replaceState",
            "webkitNotification",
            "FileReader",
            "Uint32Array",
            "elements.div.classList",
            "matchMedia",
            "elements.input.checkValidity",
            "webkitIndexedDB",
            "elements.details.open",
            "performance.timing",
            "document.webkitRequestFullscreen",
            "Blob",
            "navigator.webkitGetUserMedia",
            "Notification",
            "URL.createObjectURL",
            "requestAnimationFrame",
            "performance.mark",
            "elements.template.content",
            "MutationObserver",
            "navigator.vibrate",
            "Promise",
            "document.visibilityState",
            "elements.img.srcset",
            "crypto.subtle",
            "navigator.getBattery",
            "navigator.sendBeacon",
            "navigator.permissions",
            "PushManager",
            "Proxy",
        ],
    ),
    "safari": (
        SAFARI,
        [
            "postMessage",
            "JSON",
            "navigator.onLine",
            "navigator.geolocation",
            "Uint32Array",
            "requestAnimationFrame",
            "document.execCommand",
            "indexedDB",
            "CSS.supports",
        ],
    ),
    "android": (ANDROID, ["FileList", "performance.now", "navigator.sendBeacon"]),
    "kindle": (KINDLE, ["PerformanceTiming", "document.pointerLockElement"]),
}


@pytest.mark.parametrize("family", MILESTONES.keys())
def test_versions_never_decrease_as_capabilities_accumulate(family: str) -> None:
    """Test that gaining a capability never makes a browser look older."""
    ladder, milestones = MILESTONES[family]
    versions = [
        climb(ladder, StaticEnvironment.from_paths(milestones[:count]), UNKNOWN)
        for count in range(len(milestones) + 1)
    ]

    assert versions == sorted(versions)
    assert versions[-1] == ladder.rungs[0].floor


def test_climb_uses_first_passing_rung() -> None:
    """Test that rungs are tried newest first and bound the reported version."""
    ladder = Ladder(
        name="test",
        rungs=(Rung(has("Proxy"), 49, 55), Rung(has("Promise"), 32)),
        fallback=(0, 3),
    )
    both = StaticEnvironment.from_paths(["Proxy", "Promise"])

    assert climb(ladder, both, 51) == 51
    assert climb(ladder, both, 70) == 55
    assert climb(ladder, both, 20) == 49
    assert climb(ladder, StaticEnvironment.from_paths(["Promise"]), 70) == 70
    assert climb(ladder, StaticEnvironment(), 70) == 3
    assert climb(ladder._replace(fallback=None), StaticEnvironment(), 70) == UNKNOWN


def test_named_ceilings_come_from_settings() -> None:
    """Test that the newest rung of each ladder is capped by `latest` settings."""
    assert TRIDENT.rungs[0].ceiling == "edge"
    assert GECKO.rungs[0].ceiling == "firefox"
    assert CHROMIUM.rungs[0].ceiling == "chrome"

    environment = StaticEnvironment.from_paths(["Proxy"])
    assert chromium_version(environment, 999) == settings.latest.chrome

    old_chrome = settings.latest.chrome
    settings.latest.chrome = 60
    try:
        assert chromium_version(environment, 999) == 60
    finally:
        settings.latest.chrome = old_chrome


@pytest.mark.parametrize(
    ["paths", "reported", "expected"],
    [
        (["document.pointerLockElement", "Proxy"], 14, 14),
        (["document.pointerLockElement"], UNKNOWN, 13),
        (["Proxy"], 12, 12),
        (["MutationObserver"], 11, 11),
        (["atob"], 7, 10),
        (["localStorage"], 8, 8),
        (["document.all", "XMLHttpRequest"], 7, 7),
        (["document.all", "XMLHttpRequest", "XDomainRequest"], 7, UNKNOWN),
        (["document.all", "XMLHttpRequest", "opera"], 7, UNKNOWN),
        (["document.all"], 6, 6),
        ([], 5, UNKNOWN),
    ],
    ids=[
        "edge-14",
        "edge-unknown-ua",
        "edge-12",
        "ie-11",
        "ie-10-spoofing-7",
        "ie-8",
        "ie-7",
        "ie-8-without-storage",
        "opera-pretending",
        "ie-6",
        "ie-5",
    ],
)
def test_trident_version(paths: list[str], reported: int, expected: int) -> None:
    """Test the Internet Explorer and Edge ladder."""
    assert trident_version(StaticEnvironment.from_paths(paths), reported) == expected


@pytest.mark.parametrize(
    ["paths", "reported", "expected"],
    [
        (["PushManager"], 51, 51),
        (["PushManager"], 60, 51),
        (["MessageChannel"], 45, 43),
        (["fetch"], 39, 39),
        (["performance.mark"], 38, 38),
        (["crypto.subtle"], 30, 34),
        (["FileReader"], 3, 3.6),
        (["JSON"], 3.5, 3.5),
        ([], 2, 2),
        ([], 5, 2.9),
    ],
)
def test_gecko_version(paths: list[str], reported: float, expected: float) -> None:
    """Test the Firefox ladder."""
    assert gecko_version(StaticEnvironment.from_paths(paths), reported) == expected


@pytest.mark.parametrize(
    ["paths", "reported", "expected"],
    [
        (["Proxy"], 55, 55),
        (["PushManager"], 55, 48),
        (["navigator.permissions"], 43, 43),
        (["elements.img.srcset"], 35, 35),
        (["elements.template.content"], 20, 26),
        (["history.replaceState"], UNKNOWN, 4),
        ([], UNKNOWN, 0),
    ],
)
def test_chromium_version(paths: list[str], reported: int, expected: int) -> None:
    """Test the Chrome ladder."""
    assert chromium_version(StaticEnvironment.from_paths(paths), reported) == expected


@pytest.mark.parametrize(
    ["paths", "reported", "expected"],
    [
        (["CSS.supports"], 10.0, 10.0),
        (["indexedDB"], 9.1, 8.4),
        (["document.execCommand"], 7.0, 7.0),
        (["requestAnimationFrame"], 5.0, 6.0),
        (["navigator.geolocation"], UNKNOWN, 5.0),
        ([], 4.0, 3.1),
    ],
)
def test_safari_version(paths: list[str], reported: float, expected: float) -> None:
    """Test the Safari ladder, desktop and mobile."""
    assert safari_version(StaticEnvironment.from_paths(paths), reported) == expected


@pytest.mark.parametrize(
    ["paths", "reported", "expected"],
    [
        (["navigator.sendBeacon"], 5.0, 5.0),
        (["performance.now"], 4.4, 4.4),
        (["FileList"], 4.4, 4.3),
        ([], UNKNOWN, 2.1),
        ([], 6.0, 4.0),
    ],
)
def test_android_version(paths: list[str], reported: float, expected: float) -> None:
    """Test the stock Android ladder."""
    assert android_version(StaticEnvironment.from_paths(paths), reported) == expected


@pytest.mark.parametrize(
    ["paths", "reported", "expected"],
    [
        (["document.pointerLockElement"], 3, 3),
        (["PerformanceTiming"], 1, 2.0),
        ([], UNKNOWN, 1.0),
        ([], 7.2, 7.2),
    ],
)
def test_kindle_version(paths: list[str], reported: float, expected: float) -> None:
    """Test the Silk ladder, which has no ceiling."""
    assert kindle_version(StaticEnvironment.from_paths(paths), reported) == expected
    assert KINDLE.fallback == (1.0, math.inf)


@pytest.mark.parametrize(
    ["version", "expected"],
    [(14, 7), (11, 7), (10, 6), (9, 5), (8, 4), (7, 3), (5.5, 3), (UNKNOWN, 3)],
)
def test_trident_engine_version(version: int | float, expected: int) -> None:
    """Test mapping browser versions to Trident versions."""
    assert trident_engine_version(version) == expected


def test_opera_presto_reports_its_version() -> None:
    """Test that Presto builds are versioned by `opera.version()`."""
    environment = StaticEnvironment(capabilities={"opera": {"version": lambda: "12.16"}})

    opera = opera_version(
        environment, "Opera/9.80 (Windows NT 6.1; WOW64) Presto/2.12.388 Version/12.16", UNKNOWN
    )

    assert opera.version == 12.16
    assert opera.feature_version == 12.16
    assert opera.engine_name == "presto"
    assert opera.engine_version == 2.12
    assert opera.ua_version == UNKNOWN
    assert opera.console is False


def test_opera_presto_version_unreadable() -> None:
    """Test that a throwing `opera.version()` leaves the version unknown."""

    def broken() -> str:
        raise RuntimeError("not today")

    environment = StaticEnvironment(capabilities={"opera": {"version": broken}})

    opera = opera_version(environment, "Opera/9.80 Presto/2.12.388", UNKNOWN)

    assert opera.version == UNKNOWN
    assert opera.engine_name == "presto"


def test_opera_presto_version_present_but_empty() -> None:
    """Test that an `opera.version` known only to exist leaves the version unknown."""
    environment = StaticEnvironment.from_paths(["opera", "opera.version"])

    opera = opera_version(environment, "Opera/9.80 Presto/2.12.388", UNKNOWN)

    assert opera.version == UNKNOWN
    assert opera.feature_version == UNKNOWN
    assert opera.engine_name == "presto"
    assert opera.engine_version == 2.12


def test_opera_nintendo() -> None:
    """Test that the Wii's Opera is a fixed console build."""
    opera = opera_version(StaticEnvironment(), "Opera/9.30 (Nintendo Wii; U; ; 3642; en)", 9.3)

    assert opera.version == 9.0
    assert opera.engine_name == "presto"
    assert opera.console is True
    assert opera.ua_version == 9.3


@pytest.mark.parametrize(
    ["chrome", "opr", "expected"],
    [("53", "40.0", 40), ("53", "45.0", 40), ("53", "30.0", 40), ("49", "36.0", 36)],
    ids=["matching", "claims-newer", "claims-older", "older-chromium"],
)
def test_opera_blink(chrome: str, opr: str, expected: int) -> None:
    """Test that Blink builds translate their Chromium version to Opera's numbering."""
    environment = StaticEnvironment.from_paths(["chrome", "Proxy"])
    ua = (
        "Mozilla/5.0 (Windows NT 10.0; WOW64) AppleWebKit/537.36 (KHTML, like Gecko) "
        f"Chrome/{chrome}.0.2785.101 Safari/537.36 OPR/{opr}.2308.62"
    )

    opera = opera_version(environment, ua, UNKNOWN)

    assert opera.version == expected
    assert opera.engine_name == "blink"
    assert opera.engine_version == int(chrome)
    assert opera.ua_version == float(opr)


def test_opera_blink_before_chromium_28() -> None:
    """Test that early Chromium versions are reported without translation."""
    environment = StaticEnvironment.from_paths(["chrome", "elements.template.content"])
    ua = "Mozilla/5.0 AppleWebKit/537.36 (KHTML, like Gecko) Chrome/26.0.1410.64 Safari/537.36"

    opera = opera_version(environment, ua, UNKNOWN)

    assert opera.version == 26
    assert opera.engine_version == 26
    assert opera.ua_version == UNKNOWN
