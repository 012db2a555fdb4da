"""Failure-open capability probes over an `Environment`.

Every classifier decision goes through these helpers, so they must never
raise: a missing parent object, a missing property and a provider that
throws while being read all mean "not supported".
"""

import logging
from typing import Any, Callable

from sniffer.environment import Environment

logger = logging.getLogger(__name__)

# A predicate over an environment, the unit rule tables are built from.
Check = Callable[[Environment], bool]

_MISSING = object()


def _read(environment: Environment | None, path: str) -> Any:
    if environment is None or not path:
        return _MISSING
    try:
        return environment.lookup(tuple(path.split(".")))
    except LookupError:
        return _MISSING
    except Exception as exc:
        # Providers backed by a real runtime can throw from property getters.
        logger.debug(f"Capability probe for {path} raised {exc!r}")
        return _MISSING


def probe(environment: Environment | None, path: str) -> bool:
    """Return whether the dotted property chain `path` exists in `environment`."""
    return _read(environment, path) is not _MISSING


def lookup(environment: Environment | None, path: str, default: Any = None) -> Any:
    """Return the value at `path`, or `default` if it cannot be read."""
    value = _read(environment, path)
    return default if value is _MISSING else value


def has(path: str) -> Check:
    """Build a check passing when `path` exists."""
    return lambda environment: probe(environment, path)


def lacks(path: str) -> Check:
    """Build a check passing when `path` does not exist."""
    return lambda environment: not probe(environment, path)


def all_of(*checks: Check) -> Check:
    """Build a check passing when every check passes."""
    return lambda environment: all(check(environment) for check in checks)


def any_of(*checks: Check) -> Check:
    """Build a check passing when at least one check passes."""
    return lambda environment: any(check(environment) for check in checks)


def safely(check: Callable[[Environment], Any], environment: Environment) -> bool:
    """Run a provider call that is allowed to fail, treating failure as `False`."""
    try:
        return bool(check(environment))
    except Exception as exc:
        logger.debug(f"Capability check {check!r} raised {exc!r}")
        return False
