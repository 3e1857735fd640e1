"""
Arena of AST nodes keyed by stable integer handles.

esprima materialises some source spans twice (the key and value of a shorthand
property `{a}` become two separate dicts after `toDict()`), so object identity
is not a reliable "same physical node" test. The index assigns every node a
handle; parsed nodes are keyed by `(type, start, end)` so duplicates collapse
onto one handle, while synthesised nodes (no `range`) get a handle per object.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

SKIPPED_KEYS = frozenset({"loc", "range"})


def is_node(value: Any) -> bool:
    return isinstance(value, dict) and isinstance(value.get("type"), str)


def iter_child_fields(node: Dict[str, Any]) -> Iterator[Tuple[str, Any]]:
    """Yield `(field, value)` pairs holding a child node or a list of nodes."""
    for key, value in node.items():
        if key in SKIPPED_KEYS:
            continue
        if is_node(value):
            yield key, value
        elif isinstance(value, list) and any(is_node(item) for item in value):
            yield key, value


@dataclass(frozen=True)
class NodePath:
    """Location of a node inside its parent: `parent[field]` holds it."""

    handle: int
    node: Dict[str, Any]
    parent: Optional[Dict[str, Any]]
    field: Optional[str]

    @property
    def parent_type(self) -> Optional[str]:
        return self.parent.get("type") if self.parent else None


class NodeIndex:
    def __init__(self) -> None:
        self._paths: List[NodePath] = []
        self._by_identity: Dict[int, int] = {}
        self._by_span: Dict[Tuple[str, int, int], int] = {}
        self._by_type: Dict[str, List[int]] = {}
        # Keep every indexed object alive so `id()` keys stay valid.
        self._objects: List[Dict[str, Any]] = []

    @classmethod
    def build(cls, root: Dict[str, Any]) -> "NodeIndex":
        index = cls()
        stack: List[Tuple[Dict[str, Any], Optional[Dict[str, Any]], Optional[str]]] = [
            (root, None, None)
        ]
        while stack:
            node, parent, field = stack.pop()
            index._register(node, parent, field)
            children = []
            for key, value in iter_child_fields(node):
                if isinstance(value, list):
                    children.extend((item, node, key) for item in value if is_node(item))
                else:
                    children.append((value, node, key))
            # Reverse so nodes are registered in source (pre-)order.
            stack.extend(reversed(children))
        return index

    def _register(
        self,
        node: Dict[str, Any],
        parent: Optional[Dict[str, Any]],
        field: Optional[str],
    ) -> None:
        self._objects.append(node)
        span = _span_key(node)
        if span is not None and span in self._by_span:
            self._by_identity[id(node)] = self._by_span[span]
            return
        handle = len(self._paths)
        self._paths.append(NodePath(handle=handle, node=node, parent=parent, field=field))
        self._by_identity[id(node)] = handle
        if span is not None:
            self._by_span[span] = handle
        self._by_type.setdefault(node["type"], []).append(handle)

    def handle_of(self, node: Dict[str, Any]) -> Optional[int]:
        return self._by_identity.get(id(node))

    def path_of(self, node: Dict[str, Any]) -> Optional[NodePath]:
        handle = self.handle_of(node)
        return None if handle is None else self._paths[handle]

    def parent_of(self, node: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        path = self.path_of(node)
        return path.parent if path else None

    def find(self, node_type: str, **attrs: Any) -> List[NodePath]:
        """Return paths of every node of `node_type` whose attributes match, in source order."""
        matches = []
        for handle in self._by_type.get(node_type, []):
            path = self._paths[handle]
            if all(path.node.get(key) == value for key, value in attrs.items()):
                matches.append(path)
        return matches

    def count(self, node_type: str) -> int:
        return len(self._by_type.get(node_type, []))


def _span_key(node: Dict[str, Any]) -> Optional[Tuple[str, int, int]]:
    span = node.get("range")
    if not span or len(span) != 2:
        return None
    return (node["type"], span[0], span[1])


__all__ = ["NodeIndex", "NodePath", "is_node", "iter_child_fields"]
