"""
Scope analysis for JavaScript ASTs.

The analyzer walks an esprima-compatible AST, builds a tree of lexical scopes,
and records bindings introduced by `var`, `let`, `const`, `function`, `class`,
function parameters, catch parameters and `import` specifiers. Every
identifier is mapped to the scope it is written in, so later phases can answer
"which declaration does this name refer to" by walking the parent chain with
`Scope.lookup`. It also flags constructs (`with`, `eval`) that make static
resolution unreliable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .node_index import NodeIndex, is_node, iter_child_fields


class ScopeType(str, Enum):
    GLOBAL = "global"
    FUNCTION = "function"
    BLOCK = "block"
    CATCH = "catch"
    CLASS = "class"


class BindingKind(str, Enum):
    VAR = "var"
    LET = "let"
    CONST = "const"
    FUNCTION = "function"
    CLASS = "class"
    PARAMETER = "parameter"
    CATCH_PARAMETER = "catch_parameter"
    IMPORT = "import"


@dataclass(frozen=True)
class SourcePosition:
    line: Optional[int]
    column: Optional[int]


@dataclass(frozen=True)
class Binding:
    """Represents a single identifier binding within a scope.

    `node` is the declared Identifier; `declarator` is the construct that
    introduced it (a VariableDeclarator, an import specifier, a function or
    class node, or a catch clause).
    """

    name: str
    kind: BindingKind
    loc: SourcePosition
    node: Dict[str, Any]
    declarator: Optional[Dict[str, Any]] = None


@dataclass(eq=False)
class Scope:
    """A lexical scope containing zero or more bindings and child scopes."""

    scope_id: str
    scope_type: ScopeType
    node: Dict[str, Any]
    parent: Optional["Scope"] = None
    bindings: Dict[str, List[Binding]] = field(default_factory=dict)
    children: List["Scope"] = field(default_factory=list)

    def add_binding(self, binding: Binding) -> None:
        """Register a binding within the current scope."""
        self.bindings.setdefault(binding.name, []).append(binding)

    def add_child(self, child: "Scope") -> None:
        self.children.append(child)

    def declares(self, name: str) -> bool:
        return name in self.bindings

    def get_bindings(self, name: str) -> List[Binding]:
        return list(self.bindings.get(name, []))

    def lookup(self, name: str) -> Optional["Scope"]:
        """Return the nearest scope (self or an ancestor) declaring `name`."""
        scope: Optional[Scope] = self
        while scope is not None:
            if scope.declares(name):
                return scope
            scope = scope.parent
        return None

    def function_scope(self) -> "Scope":
        """Nearest scope that receives hoisted `var` declarations."""
        scope = self
        while scope.parent is not None and scope.scope_type not in (
            ScopeType.FUNCTION,
            ScopeType.GLOBAL,
        ):
            scope = scope.parent
        return scope


@dataclass(frozen=True)
class AnalysisIssue:
    code: str
    message: str
    loc: SourcePosition


@dataclass(frozen=True)
class AnalysisResult:
    source_name: str
    root_scope: Scope
    issues: List[AnalysisIssue]
    index: NodeIndex
    node_scopes: Dict[int, Scope]

    def scope_for(self, node: Dict[str, Any]) -> Optional[Scope]:
        """Scope in which `node` (usually an Identifier) is written."""
        handle = self.index.handle_of(node)
        if handle is None:
            return None
        return self.node_scopes.get(handle)


_VARIABLE_KINDS = {
    "var": BindingKind.VAR,
    "let": BindingKind.LET,
    "const": BindingKind.CONST,
}

_FUNCTION_TYPES = {"FunctionDeclaration", "FunctionExpression", "ArrowFunctionExpression"}


class _BindingAnalyzer:
    def __init__(self, source_name: str, index: NodeIndex) -> None:
        self._source_name = source_name
        self._index = index
        self._scope_counter = 0
        self._issues: List[AnalysisIssue] = []
        self._node_scopes: Dict[int, Scope] = {}

    def analyze(self, ast: Dict[str, Any]) -> AnalysisResult:
        root_scope = self._new_scope(ScopeType.GLOBAL, ast, parent=None)
        self._visit(ast, root_scope)
        return AnalysisResult(
            source_name=self._source_name,
            root_scope=root_scope,
            issues=self._issues,
            index=self._index,
            node_scopes=self._node_scopes,
        )

    # ------------------------------------------------------------------ helpers

    def _new_scope(
        self, scope_type: ScopeType, node: Dict[str, Any], parent: Optional[Scope]
    ) -> Scope:
        scope_id = f"S{self._scope_counter}"
        self._scope_counter += 1
        scope = Scope(scope_id=scope_id, scope_type=scope_type, node=node, parent=parent)
        if parent:
            parent.add_child(scope)
        return scope

    @staticmethod
    def _source_position(node: Dict[str, Any]) -> SourcePosition:
        loc = node.get("loc") or {}
        start = loc.get("start") or {}
        return SourcePosition(
            line=start.get("line"),
            column=start.get("column"),
        )

    def _add_issue(self, code: str, message: str, node: Dict[str, Any]) -> None:
        self._issues.append(
            AnalysisIssue(code=code, message=message, loc=self._source_position(node))
        )

    def _mark(self, node: Dict[str, Any], scope: Scope) -> None:
        handle = self._index.handle_of(node)
        if handle is not None:
            self._node_scopes.setdefault(handle, scope)

    def _declare(
        self,
        identifier: Dict[str, Any],
        kind: BindingKind,
        scope: Scope,
        declarator: Optional[Dict[str, Any]],
    ) -> None:
        scope.add_binding(
            Binding(
                name=identifier.get("name"),
                kind=kind,
                loc=self._source_position(identifier),
                node=identifier,
                declarator=declarator,
            )
        )

    def _declare_pattern(
        self,
        pattern: Any,
        kind: BindingKind,
        binding_scope: Scope,
        current_scope: Scope,
        declarator: Optional[Dict[str, Any]],
    ) -> None:
        """Register every identifier bound by `pattern` and visit its defaults."""
        if not is_node(pattern):
            return
        pattern_type = pattern.get("type")
        if pattern_type == "Identifier":
            self._mark(pattern, current_scope)
            self._declare(pattern, kind, binding_scope, declarator)
        elif pattern_type == "ObjectPattern":
            self._mark(pattern, current_scope)
            for prop in pattern.get("properties", []):
                if prop.get("type") == "RestElement":
                    self._declare_pattern(
                        prop.get("argument"), kind, binding_scope, current_scope, declarator
                    )
                    continue
                key = prop.get("key")
                if prop.get("computed"):
                    self._visit(key, current_scope)
                elif is_node(key):
                    self._mark(key, current_scope)
                self._declare_pattern(
                    prop.get("value"), kind, binding_scope, current_scope, declarator
                )
        elif pattern_type == "ArrayPattern":
            for element in pattern.get("elements", []):
                self._declare_pattern(element, kind, binding_scope, current_scope, declarator)
        elif pattern_type == "AssignmentPattern":
            self._declare_pattern(
                pattern.get("left"), kind, binding_scope, current_scope, declarator
            )
            self._visit(pattern.get("right"), current_scope)
        elif pattern_type == "RestElement":
            self._declare_pattern(
                pattern.get("argument"), kind, binding_scope, current_scope, declarator
            )
        else:
            # Member expressions in assignment patterns are plain references.
            self._visit(pattern, current_scope)

    def _visit(self, node: Any, scope: Scope) -> None:
        if node is None:
            return
        if isinstance(node, list):
            for element in node:
                self._visit(element, scope)
            return
        if not is_node(node):
            return

        self._mark(node, scope)
        handler = getattr(self, f"_visit_{node.get('type')}", None)
        if handler:
            handler(node, scope)
        else:
            self._generic_visit(node, scope)

    def _generic_visit(self, node: Dict[str, Any], scope: Scope) -> None:
        for _, value in iter_child_fields(node):
            self._visit(value, scope)

    def _visit_body(self, node: Dict[str, Any], scope: Scope) -> None:
        """Visit a function body without opening an extra block scope."""
        if is_node(node) and node.get("type") == "BlockStatement":
            self._mark(node, scope)
            self._visit(node.get("body", []), scope)
        else:
            self._visit(node, scope)

    # ----------------------------------------------------------------- visitors

    def _visit_Program(self, node: Dict[str, Any], scope: Scope) -> None:
        self._visit(node.get("body", []), scope)

    def _visit_BlockStatement(self, node: Dict[str, Any], scope: Scope) -> None:
        block_scope = self._new_scope(ScopeType.BLOCK, node, scope)
        self._visit(node.get("body", []), block_scope)

    def _visit_ForStatement(self, node: Dict[str, Any], scope: Scope) -> None:
        loop_scope = self._new_scope(ScopeType.BLOCK, node, scope)
        self._generic_visit(node, loop_scope)

    _visit_ForInStatement = _visit_ForStatement
    _visit_ForOfStatement = _visit_ForStatement

    def _visit_VariableDeclaration(self, node: Dict[str, Any], scope: Scope) -> None:
        kind = _VARIABLE_KINDS.get(node.get("kind"), BindingKind.VAR)
        binding_scope = scope.function_scope() if kind is BindingKind.VAR else scope
        for declarator in node.get("declarations", []):
            self._mark(declarator, scope)
            self._declare_pattern(declarator.get("id"), kind, binding_scope, scope, declarator)
            # Visit initializer to catch nested functions etc.
            self._visit(declarator.get("init"), scope)

    def _visit_FunctionDeclaration(self, node: Dict[str, Any], scope: Scope) -> None:
        identifier = node.get("id")
        if is_node(identifier) and identifier.get("type") == "Identifier":
            self._mark(identifier, scope)
            self._declare(identifier, BindingKind.FUNCTION, scope, node)
        self._visit_function(node, scope)

    def _visit_FunctionExpression(self, node: Dict[str, Any], scope: Scope) -> None:
        self._visit_function(node, scope)

    def _visit_ArrowFunctionExpression(self, node: Dict[str, Any], scope: Scope) -> None:
        self._visit_function(node, scope)

    def _visit_function(self, node: Dict[str, Any], scope: Scope) -> None:
        function_scope = self._new_scope(ScopeType.FUNCTION, node, scope)
        identifier = node.get("id")
        if node.get("type") == "FunctionExpression" and is_node(identifier):
            # Named function expressions bind the name within the inner scope.
            self._mark(identifier, function_scope)
            self._declare(identifier, BindingKind.FUNCTION, function_scope, node)
        for param in node.get("params", []):
            self._declare_pattern(
                param, BindingKind.PARAMETER, function_scope, function_scope, node
            )
        self._visit_body(node.get("body"), function_scope)

    def _visit_ClassDeclaration(self, node: Dict[str, Any], scope: Scope) -> None:
        identifier = node.get("id")
        if is_node(identifier):
            self._mark(identifier, scope)
            self._declare(identifier, BindingKind.CLASS, scope, node)
        self._visit_class(node, scope)

    def _visit_ClassExpression(self, node: Dict[str, Any], scope: Scope) -> None:
        self._visit_class(node, scope)

    def _visit_class(self, node: Dict[str, Any], scope: Scope) -> None:
        self._visit(node.get("superClass"), scope)
        class_scope = self._new_scope(ScopeType.CLASS, node, scope)
        identifier = node.get("id")
        if node.get("type") == "ClassExpression" and is_node(identifier):
            self._mark(identifier, class_scope)
            self._declare(identifier, BindingKind.CLASS, class_scope, node)
        self._visit(node.get("body"), class_scope)

    def _visit_CallExpression(self, node: Dict[str, Any], scope: Scope) -> None:
        callee = node.get("callee")
        if (
            is_node(callee)
            and callee.get("type") == "Identifier"
            and callee.get("name") == "eval"
        ):
            self._add_issue(
                code="EVAL_CALL",
                message="Use of eval makes static analysis unreliable.",
                node=callee,
            )
        self._visit(callee, scope)
        self._visit(node.get("arguments", []), scope)

    def _visit_TryStatement(self, node: Dict[str, Any], scope: Scope) -> None:
        self._visit(node.get("block"), scope)
        handler = node.get("handler")
        if is_node(handler):
            self._mark(handler, scope)
            self._visit_CatchClause(handler, scope)
        self._visit(node.get("finalizer"), scope)

    def _visit_CatchClause(self, node: Dict[str, Any], scope: Scope) -> None:
        catch_scope = self._new_scope(ScopeType.CATCH, node, scope)
        self._declare_pattern(
            node.get("param"), BindingKind.CATCH_PARAMETER, catch_scope, catch_scope, node
        )
        self._visit_body(node.get("body"), catch_scope)

    def _visit_ImportDeclaration(self, node: Dict[str, Any], scope: Scope) -> None:
        for specifier in node.get("specifiers", []):
            self._mark(specifier, scope)
            imported = specifier.get("imported")
            if is_node(imported):
                self._mark(imported, scope)
            local = specifier.get("local")
            if is_node(local):
                self._mark(local, scope)
                self._declare(local, BindingKind.IMPORT, scope, specifier)
        self._visit(node.get("source"), scope)

    def _visit_WithStatement(self, node: Dict[str, Any], scope: Scope) -> None:
        self._add_issue(
            code="WITH_STATEMENT",
            message="`with` statement changes scope resolution dynamically.",
            node=node,
        )
        self._visit(node.get("object"), scope)
        self._visit(node.get("body"), scope)


def analyze_bindings(
    ast: Dict[str, Any],
    *,
    source_name: str = "<input>",
    index: Optional[NodeIndex] = None,
) -> AnalysisResult:
    """
    Run scope and binding analysis on a JavaScript AST.

    Args:
        ast: esprima-compatible AST (result of `parse_js`).
        source_name: Label for diagnostics and reporting.
        index: Node arena for `ast`; built on demand when omitted.

    Returns:
        AnalysisResult with the scope tree, per-node scopes and analysis issues.
    """
    if index is None:
        index = NodeIndex.build(ast)
    analyzer = _BindingAnalyzer(source_name=source_name, index=index)
    return analyzer.analyze(ast)


__all__ = [
    "AnalysisResult",
    "AnalysisIssue",
    "Binding",
    "BindingKind",
    "Scope",
    "ScopeType",
    "SourcePosition",
    "analyze_bindings",
]
