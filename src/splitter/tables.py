"""
Routing data for the React / ReactDOM / ReactDOMServer split.

`ClassificationTable` decides which destination owns a member of the core
namespace. `SplitTarget` names one historical spelling of the core module and
the modules its split-out members move to. `SplitConfig` bundles both with the
printer's quote style and can be loaded from a JSON file.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple, Union

from emitter import QUOTE_STYLES

CORE_MEMBERS = frozenset(
    [
        "Children",
        "Component",
        "createElement",
        "cloneElement",
        "isValidElement",
        "PropTypes",
        "createClass",
        "createFactory",
        "createMixin",
        "DOM",
        "__spread",
    ]
)

DOM_MEMBERS = frozenset(
    [
        "findDOMNode",
        "render",
        "unmountComponentAtNode",
        "unstable_batchedUpdates",
        "unstable_renderSubtreeIntoContainer",
    ]
)

DOM_SERVER_MEMBERS = frozenset(
    [
        "renderToString",
        "renderToStaticMarkup",
    ]
)


class Destination(str, Enum):
    CORE = "core"
    DOM = "dom"
    DOM_SERVER = "dom_server"


SPLIT_DESTINATIONS = (Destination.DOM, Destination.DOM_SERVER)


@dataclass(frozen=True)
class ClassificationTable:
    core: FrozenSet[str] = CORE_MEMBERS
    dom: FrozenSet[str] = DOM_MEMBERS
    dom_server: FrozenSet[str] = DOM_SERVER_MEMBERS

    def __post_init__(self) -> None:
        for name in ("core", "dom", "dom_server"):
            object.__setattr__(self, name, frozenset(getattr(self, name)))
        overlap = (
            (self.core & self.dom)
            | (self.core & self.dom_server)
            | (self.dom & self.dom_server)
        )
        if overlap:
            raise ValueError(
                "Members listed in more than one table: " + ", ".join(sorted(overlap))
            )

    def classify(self, member: str) -> Optional[Destination]:
        if member in self.core:
            return Destination.CORE
        if member in self.dom:
            return Destination.DOM
        if member in self.dom_server:
            return Destination.DOM_SERVER
        return None


@dataclass(frozen=True)
class Namespace:
    """Identifier a split namespace is bound to, and the module it loads."""

    identifier: str
    module_path: str


@dataclass(frozen=True)
class SplitTarget:
    module_name: str
    dom: Namespace
    dom_server: Namespace

    def namespace(self, destination: Destination) -> Namespace:
        if destination is Destination.DOM:
            return self.dom
        if destination is Destination.DOM_SERVER:
            return self.dom_server
        raise ValueError(f"{destination.value} is not a split namespace")

    def namespaces(self) -> Iterable[Tuple[Destination, Namespace]]:
        return ((destination, self.namespace(destination)) for destination in SPLIT_DESTINATIONS)


def _target(module_name: str, dom_path: str, dom_server_path: str) -> SplitTarget:
    return SplitTarget(
        module_name=module_name,
        dom=Namespace("ReactDOM", dom_path),
        dom_server=Namespace("ReactDOMServer", dom_server_path),
    )


# Legacy haste-style name first, then the npm package name.
DEFAULT_TARGETS: Tuple[SplitTarget, ...] = (
    _target("React", "ReactDOM", "ReactDOMServer"),
    _target("react", "react-dom", "react-dom/server"),
)


@dataclass(frozen=True)
class SplitConfig:
    table: ClassificationTable = field(default_factory=ClassificationTable)
    targets: Tuple[SplitTarget, ...] = DEFAULT_TARGETS
    quote: str = "single"

    def __post_init__(self) -> None:
        if self.quote not in QUOTE_STYLES:
            raise ValueError(f"Unknown quote style: {self.quote!r}")

    def with_quote(self, quote: Optional[str]) -> "SplitConfig":
        return self if quote is None else replace(self, quote=quote)


def _parse_target(raw: Dict[str, Any]) -> SplitTarget:
    try:
        return SplitTarget(
            module_name=raw["module"],
            dom=Namespace(
                raw.get("dom_identifier", "ReactDOM"), raw["dom_module"]
            ),
            dom_server=Namespace(
                raw.get("dom_server_identifier", "ReactDOMServer"),
                raw["dom_server_module"],
            ),
        )
    except KeyError as exc:
        raise ValueError(f"Split target is missing key {exc.args[0]!r}") from exc


def config_from_dict(payload: Dict[str, Any]) -> SplitConfig:
    """Build a configuration from a JSON-compatible mapping; absent keys keep defaults."""
    defaults = ClassificationTable()
    table = ClassificationTable(
        core=payload.get("core", defaults.core),
        dom=payload.get("dom", defaults.dom),
        dom_server=payload.get("dom_server", defaults.dom_server),
    )
    targets = DEFAULT_TARGETS
    if "targets" in payload:
        targets = tuple(_parse_target(raw) for raw in payload["targets"])
    return SplitConfig(table=table, targets=targets, quote=payload.get("quote", "single"))


def load_config(path: Union[str, Path]) -> SplitConfig:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"{path}: configuration must be a JSON object")
    return config_from_dict(payload)


__all__ = [
    "CORE_MEMBERS",
    "DEFAULT_TARGETS",
    "DOM_MEMBERS",
    "DOM_SERVER_MEMBERS",
    "ClassificationTable",
    "Destination",
    "Namespace",
    "SPLIT_DESTINATIONS",
    "SplitConfig",
    "SplitTarget",
    "config_from_dict",
    "load_config",
]
