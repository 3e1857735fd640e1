"""
Print a (possibly rewritten) esprima AST back to JavaScript source text.

Rather than regenerating the whole file, the emitter reuses the original text:
`capture_layout` snapshots which child nodes every parsed node had before any
rewrite, and `emit_program` copies each unchanged region verbatim while only
printing nodes that were replaced, inserted or whose child lists changed.
Comments, blank lines and formatting outside edited lists are kept intact.
In an edited comma list the separator after each kept item survives with any
comment in it; comments after the last kept item go with the removed items.
Inserted statements use the file's line ending, and generated string literals
follow the configured quote style.
"""

from __future__ import annotations

import io
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from analyzer import is_node, iter_child_fields

QUOTE_STYLES = ("single", "double")

# Set on synthesised statements that should be separated by an empty line.
BLANK_LINE_BEFORE = "blankLineBefore"

_STATEMENT_LISTS = {
    ("Program", "body"),
    ("BlockStatement", "body"),
    ("ClassBody", "body"),
    ("SwitchCase", "consequent"),
}

_COMMA_LISTS = {
    ("VariableDeclaration", "declarations"),
    ("ObjectPattern", "properties"),
    ("ObjectExpression", "properties"),
    ("ArrayExpression", "elements"),
    ("CallExpression", "arguments"),
}

# Nodes whose list punctuation lives outside the children's ranges.
_REGENERATE_ON_CHANGE = {"ImportDeclaration", "ExportNamedDeclaration"}

_LEADING_WHITESPACE = re.compile(r"[ \t]*")


class EmitError(RuntimeError):
    """Raised when a synthesised node cannot be printed."""


@dataclass(frozen=True)
class EmitOptions:
    quote: str = "single"

    def __post_init__(self) -> None:
        if self.quote not in QUOTE_STYLES:
            raise ValueError(f"Unknown quote style: {self.quote!r}")


@dataclass(frozen=True)
class EmitResult:
    source: str


@dataclass(frozen=True)
class _Entry:
    node: Dict[str, Any]
    fields: Dict[str, Any]


class SourceLayout:
    """Snapshot of the original source and the original children of each node."""

    def __init__(self, source: str) -> None:
        self.source = source
        self._entries: Dict[int, _Entry] = {}

    def record(self, node: Dict[str, Any]) -> None:
        fields = {}
        for key, value in iter_child_fields(node):
            fields[key] = list(value) if isinstance(value, list) else value
        self._entries[id(node)] = _Entry(node=node, fields=fields)

    def entry(self, node: Dict[str, Any]) -> Optional[_Entry]:
        entry = self._entries.get(id(node))
        if entry is None or entry.node is not node:
            return None
        return entry


def capture_layout(ast: Dict[str, Any], source: str) -> SourceLayout:
    """Record the original structure of `ast`; call before mutating the tree."""
    layout = SourceLayout(source)
    stack = [ast]
    while stack:
        node = stack.pop()
        if _span(node) is None:
            continue
        layout.record(node)
        for _, value in iter_child_fields(node):
            if isinstance(value, list):
                stack.extend(item for item in value if is_node(item))
            else:
                stack.append(value)
    return layout


def _span(node: Any) -> Optional[Tuple[int, int]]:
    if not is_node(node):
        return None
    span = node.get("range")
    if not span or len(span) != 2:
        return None
    return span[0], span[1]


def _same_items(left: List[Any], right: Any) -> bool:
    if not isinstance(right, list) or len(left) != len(right):
        return False
    return all(a is b for a, b in zip(left, right))


class _Printer:
    def __init__(self, layout: SourceLayout, options: EmitOptions) -> None:
        self.layout = layout
        self.source = layout.source
        self.options = options
        self.newline = "\r\n" if "\r\n" in self.source else "\n"

    # ------------------------------------------------------------ reprinting

    def print(self, node: Any) -> str:
        if node is None:
            return ""
        entry = self.layout.entry(node)
        span = _span(node)
        if entry is None or span is None:
            return self.generate(node)

        start, end = span
        slots: List[Tuple[int, int, Any]] = []
        for field, original in entry.fields.items():
            current = node.get(field)
            if isinstance(original, list):
                children = [item for item in original if _span(item) is not None]
                if not children:
                    continue
                if _same_items(original, current):
                    slots.extend((*_span(child), child) for child in children)
                    continue
                if node["type"] in _REGENERATE_ON_CHANGE:
                    return self.generate(node)
                region = (_span(children[0])[0], _span(children[-1])[1])
                slots.append((*region, (node, field, children, current or [])))
            elif _span(original) is not None:
                slots.append((*_span(original), current))

        slots.sort(key=lambda slot: (slot[0], slot[1]))
        out = io.StringIO()
        cursor = start
        for slot_start, slot_end, content in slots:
            if slot_start < cursor or slot_end > end:
                # Parser duplicates (shorthand properties) share a span.
                continue
            out.write(self.source[cursor:slot_start])
            if isinstance(content, tuple):
                out.write(self._print_list(*content))
            else:
                out.write(self.print(content))
            cursor = slot_end
        out.write(self.source[cursor:end])
        return out.getvalue()

    def _print_list(
        self,
        owner: Dict[str, Any],
        field: str,
        originals: List[Dict[str, Any]],
        current: List[Any],
    ) -> str:
        if (owner["type"], field) in _STATEMENT_LISTS:
            return self._print_statements(originals, current)
        if (owner["type"], field) in _COMMA_LISTS:
            return self._print_commas(originals, current)
        raise EmitError(f"Cannot reprint edited {owner['type']}.{field}")

    def _print_statements(
        self, originals: List[Dict[str, Any]], current: List[Dict[str, Any]]
    ) -> str:
        positions = {id(stmt): pos for pos, stmt in enumerate(originals)}
        leading = {}
        previous_end = None
        for stmt in originals:
            stmt_start, stmt_end = _span(stmt)
            leading[id(stmt)] = "" if previous_end is None else self.source[previous_end:stmt_start]
            previous_end = stmt_end
        indent = self._indent_at(_span(originals[0])[0])

        out = io.StringIO()
        emitted = False
        for stmt in current:
            pos = positions.get(id(stmt))
            if pos is not None:
                gap = leading[id(stmt)]
                if emitted:
                    out.write(gap)
                elif pos > 0:
                    # Predecessors were removed; keep comments, drop their spacing.
                    out.write(gap.lstrip())
            elif emitted:
                out.write(self.newline * 2 if stmt.get(BLANK_LINE_BEFORE) else self.newline)
                out.write(indent)
            out.write(self.print(stmt))
            emitted = True
        return out.getvalue()

    def _print_commas(self, originals: List[Dict[str, Any]], current: List[Any]) -> str:
        positions = {id(item): pos for pos, item in enumerate(originals)}
        out = io.StringIO()
        previous = None
        for item in current:
            if previous is not None:
                pos = positions.get(id(previous))
                if pos is not None and pos + 1 < len(originals):
                    # The separator after a kept item carries its trailing comment.
                    out.write(self.source[_span(originals[pos])[1] : _span(originals[pos + 1])[0]])
                else:
                    out.write(", ")
            out.write(self.print(item))
            previous = item
        return out.getvalue()

    def _indent_at(self, offset: int) -> str:
        line_start = self.source.rfind("\n", 0, offset) + 1
        return _LEADING_WHITESPACE.match(self.source, line_start).group(0)

    # ------------------------------------------------------------ generation

    def generate(self, node: Any) -> str:
        if not is_node(node):
            raise EmitError(f"Cannot print value {node!r}")
        handler = getattr(self, f"_gen_{node['type']}", None)
        if handler is None:
            raise EmitError(f"Cannot print synthesised {node['type']} node")
        return handler(node)

    def _quote(self, value: str) -> str:
        quote = "'" if self.options.quote == "single" else '"'
        escaped = (
            value.replace("\\", "\\\\")
            .replace(quote, "\\" + quote)
            .replace("\n", "\\n")
            .replace("\r", "\\r")
        )
        return f"{quote}{escaped}{quote}"

    def _gen_Identifier(self, node: Dict[str, Any]) -> str:
        return node["name"]

    def _gen_Literal(self, node: Dict[str, Any]) -> str:
        value = node.get("value")
        if isinstance(value, str):
            return self._quote(value)
        if node.get("raw") is not None:
            return node["raw"]
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def _gen_CallExpression(self, node: Dict[str, Any]) -> str:
        args = ", ".join(self.print(arg) for arg in node.get("arguments", []))
        return f"{self.print(node['callee'])}({args})"

    def _gen_MemberExpression(self, node: Dict[str, Any]) -> str:
        obj = self.print(node["object"])
        if node.get("computed"):
            return f"{obj}[{self.print(node['property'])}]"
        return f"{obj}.{self.print(node['property'])}"

    def _gen_AssignmentExpression(self, node: Dict[str, Any]) -> str:
        operator = node.get("operator", "=")
        return f"{self.print(node['left'])} {operator} {self.print(node['right'])}"

    def _gen_ExpressionStatement(self, node: Dict[str, Any]) -> str:
        return f"{self.print(node['expression'])};"

    def _gen_VariableDeclaration(self, node: Dict[str, Any]) -> str:
        declarators = ", ".join(self.print(item) for item in node.get("declarations", []))
        return f"{node.get('kind', 'var')} {declarators};"

    def _gen_VariableDeclarator(self, node: Dict[str, Any]) -> str:
        text = self.print(node["id"])
        if node.get("init") is not None:
            text += " = " + self.print(node["init"])
        return text

    def _gen_ObjectPattern(self, node: Dict[str, Any]) -> str:
        return "{" + ", ".join(self.print(prop) for prop in node.get("properties", [])) + "}"

    def _gen_Property(self, node: Dict[str, Any]) -> str:
        if node.get("shorthand"):
            return self.print(node["value"])
        key = self.print(node["key"])
        if node.get("computed"):
            key = f"[{key}]"
        return f"{key}: {self.print(node['value'])}"

    def _gen_ImportDeclaration(self, node: Dict[str, Any]) -> str:
        leading: List[str] = []
        named: List[str] = []
        for specifier in node.get("specifiers", []):
            if specifier["type"] == "ImportSpecifier":
                named.append(self.print(specifier))
            else:
                leading.append(self.print(specifier))
        if named:
            leading.append("{" + ", ".join(named) + "}")
        source = self.print(node["source"])
        if not leading:
            return f"import {source};"
        return f"import {', '.join(leading)} from {source};"

    def _gen_ImportDefaultSpecifier(self, node: Dict[str, Any]) -> str:
        return self.print(node["local"])

    def _gen_ImportNamespaceSpecifier(self, node: Dict[str, Any]) -> str:
        return "* as " + self.print(node["local"])

    def _gen_ImportSpecifier(self, node: Dict[str, Any]) -> str:
        imported = self.print(node["imported"])
        local = self.print(node["local"])
        return imported if imported == local else f"{imported} as {local}"


def emit_program(
    program: Dict[str, Any],
    layout: SourceLayout,
    options: Optional[EmitOptions] = None,
) -> EmitResult:
    """
    Render the given esprima Program back to JavaScript source text.
    """
    options = options or EmitOptions()
    printer = _Printer(layout, options)

    span = _span(program)
    if span is None:
        source = printer.print(program)
    else:
        start, end = span
        source = layout.source[:start] + printer.print(program) + layout.source[end:]
    return EmitResult(source=source)


__all__ = [
    "BLANK_LINE_BEFORE",
    "EmitError",
    "EmitOptions",
    "EmitResult",
    "QUOTE_STYLES",
    "SourceLayout",
    "capture_layout",
    "emit_program",
]
