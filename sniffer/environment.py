"""Capability providers the classifier probes instead of a live browser global."""

import pathlib
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from sniffer.exceptions import EnvironmentFileError


class Environment(Protocol):
    """A protocol describing the global API surface of a browser.

    Property chains mirror what a script would reach from `window`, e.g.
    `("navigator", "permissions")` or `("document", "all")`. Freshly created
    elements are exposed under `elements.<tag>` so that
    `document.createElement("template").content` becomes
    `("elements", "template", "content")`.
    """

    def lookup(self, path: Sequence[str]) -> Any:  # pragma: no cover
        """Return the value found by walking `path` from the global scope.

        Raises:
            - `LookupError` when any segment of the chain is absent. Providers
              backed by a real runtime may raise anything else a getter raises.
        """
        ...

    def creates_touch_event(self) -> bool:  # pragma: no cover
        """Return whether `document.createEvent("TouchEvent")` succeeds."""
        ...

    def renders_mathml(self) -> bool:  # pragma: no cover
        """Return whether a MathML fraction lays out taller than it is wide."""
        ...


class StaticEnvironment(BaseModel):
    """A snapshot of browser capabilities.

    `capabilities` is a nested mapping rooted at the global scope. Any key that
    exists counts as a supported capability, whatever its value, matching a
    `typeof x !== "undefined"` check.
    """

    model_config = ConfigDict(frozen=True)

    capabilities: dict[str, Any] = Field(default_factory=dict)
    touch_events: bool = False
    mathml: bool = False

    def lookup(self, path: Sequence[str]) -> Any:
        """Walk `path` through the nested capability mapping."""
        node: Any = self.capabilities
        for segment in path:
            match node:
                case Mapping() if segment in node:
                    node = node[segment]
                case _:
                    raise KeyError(".".join(path))
        return node

    def creates_touch_event(self) -> bool:
        """Return the recorded touch event support."""
        return self.touch_events

    def renders_mathml(self) -> bool:
        """Return the recorded MathML layout support."""
        return self.mathml

    @classmethod
    def from_paths(
        cls,
        paths: Iterable[str] = (),
        values: Mapping[str, Any] | None = None,
        touch_events: bool = False,
        mathml: bool = False,
    ) -> "StaticEnvironment":
        """Build a snapshot from dotted capability paths.

        Every entry of `paths` becomes a present capability; `values` sets
        leaves that carry data such as `navigator.userAgent`.
        """
        tree: dict[str, Any] = {}
        leaves = {path: True for path in paths} | dict(values or {})
        for path, value in leaves.items():
            *parents, leaf = path.split(".")
            node = tree
            for segment in parents:
                child = node.get(segment)
                if not isinstance(child, dict):
                    child = node[segment] = {}
                node = child
            if not isinstance(node.get(leaf), dict):
                node[leaf] = value
        return cls(capabilities=tree, touch_events=touch_events, mathml=mathml)

    @classmethod
    def from_file(cls, path: pathlib.Path) -> "StaticEnvironment":
        """Load a snapshot from a JSON file.

        Raises:
            EnvironmentFileError if the file is missing, is not JSON, or does not
            match the snapshot model.
        """
        try:
            return cls.model_validate_json(path.read_text())
        except (OSError, ValidationError) as exc:
            raise EnvironmentFileError(f"Cannot load environment from {path}: {exc}") from exc
