"""
Small helpers for inspecting and editing esprima dict trees.

Builders create nodes without `range`/`loc`, which is how the emitter tells
synthesised code from parsed code. Edits locate siblings by identity at the
moment they are applied, so earlier insertions or removals in the same list
never invalidate later ones.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from analyzer import NodeIndex, NodePath, is_node
from emitter import BLANK_LINE_BEFORE

from .errors import UnsupportedConstructError

Node = Dict[str, Any]

_STATEMENT_LIST_FIELDS = {
    ("Program", "body"),
    ("BlockStatement", "body"),
    ("SwitchCase", "consequent"),
}


# ---------------------------------------------------------------- builders


def identifier(name: str) -> Node:
    return {"type": "Identifier", "name": name}


def string_literal(value: str) -> Node:
    return {"type": "Literal", "value": value, "raw": None}


def require_call(module_path: str) -> Node:
    return {
        "type": "CallExpression",
        "callee": identifier("require"),
        "arguments": [string_literal(module_path)],
    }


def variable_declaration(kind: str, declarators: List[Node], *, blank_line: bool = False) -> Node:
    node = {"type": "VariableDeclaration", "declarations": declarators, "kind": kind}
    if blank_line:
        node[BLANK_LINE_BEFORE] = True
    return node


def variable_declarator(target: Node, init: Optional[Node]) -> Node:
    return {"type": "VariableDeclarator", "id": target, "init": init}


def object_pattern(properties: List[Node]) -> Node:
    return {"type": "ObjectPattern", "properties": properties}


def assignment_statement(name: str, value: Node) -> Node:
    return {
        "type": "ExpressionStatement",
        "expression": {
            "type": "AssignmentExpression",
            "operator": "=",
            "left": identifier(name),
            "right": value,
        },
    }


def import_declaration(specifier_type: str, local: str, module_path: str) -> Node:
    return {
        "type": "ImportDeclaration",
        "specifiers": [{"type": specifier_type, "local": identifier(local)}],
        "source": string_literal(module_path),
        BLANK_LINE_BEFORE: True,
    }


# -------------------------------------------------------------- predicates


def node_type(node: Any) -> Optional[str]:
    return node.get("type") if is_node(node) else None


def is_require(node: Any, module_name: str) -> bool:
    """True for `require('<module_name>')` exactly."""
    if node_type(node) != "CallExpression":
        return False
    callee = node.get("callee")
    args = node.get("arguments") or []
    return (
        node_type(callee) == "Identifier"
        and callee.get("name") == "require"
        and len(args) == 1
        and node_type(args[0]) == "Literal"
        and args[0].get("value") == module_name
    )


def _key_name(key: Any, computed: bool) -> Optional[str]:
    if node_type(key) == "Literal" and isinstance(key.get("value"), str):
        return key["value"]
    if not computed and node_type(key) == "Identifier":
        return key.get("name")
    return None


def static_key(prop: Node) -> Optional[str]:
    """Name of a `Property` key written as an identifier or a string literal."""
    if node_type(prop) != "Property":
        return None
    return _key_name(prop.get("key"), bool(prop.get("computed")))


def member_name(member: Node) -> Optional[str]:
    """`foo.bar` and `foo['bar']` give `'bar'`; other computed accesses give None."""
    return _key_name(member.get("property"), bool(member.get("computed")))


def is_property_name(path: NodePath) -> bool:
    """True when the identifier at `path` names a property rather than a variable."""
    parent = path.parent
    parent_type = node_type(parent)
    if parent_type == "MemberExpression":
        return path.field == "property" and not parent.get("computed")
    if parent_type in ("Property", "MethodDefinition"):
        return (
            path.field == "key"
            and not parent.get("computed")
            and not parent.get("shorthand")
        )
    return False


# ------------------------------------------------------------------- edits


def statement_list(index: NodeIndex, statement: Node) -> List[Node]:
    """The list `statement` lives in; fails if it is not directly in a block."""
    path = index.path_of(statement)
    if path is None or path.parent is None:
        raise UnsupportedConstructError(
            f"Cannot edit {node_type(statement)} outside a statement list", statement
        )
    if (node_type(path.parent), path.field) not in _STATEMENT_LIST_FIELDS:
        raise UnsupportedConstructError(
            f"Cannot edit {node_type(statement)} inside {node_type(path.parent)}", statement
        )
    return path.parent[path.field]


def _position(items: List[Node], target: Node) -> int:
    for position, item in enumerate(items):
        if item is target:
            return position
    raise ValueError(f"{node_type(target)} node is no longer in its list")


def insert_after(items: List[Node], anchor: Node, node: Node) -> None:
    items.insert(_position(items, anchor) + 1, node)


def remove_from(items: List[Node], node: Node) -> None:
    del items[_position(items, node)]


def replace_child(parent: Node, field: str, old: Node, new: Node) -> None:
    value = parent.get(field)
    if isinstance(value, list):
        value[_position(value, old)] = new
    elif value is old:
        parent[field] = new
    else:
        raise ValueError(f"{node_type(old)} node is not {node_type(parent)}.{field}")


__all__ = [
    "assignment_statement",
    "identifier",
    "import_declaration",
    "insert_after",
    "is_property_name",
    "is_require",
    "member_name",
    "node_type",
    "object_pattern",
    "remove_from",
    "replace_child",
    "require_call",
    "statement_list",
    "static_key",
    "string_literal",
    "variable_declaration",
    "variable_declarator",
]
