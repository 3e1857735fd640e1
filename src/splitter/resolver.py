"""
Locate the single declaration that binds the core module in a file.

A file may load the core module with `var X = require(name)`, with
`import X from name` / `import * as X from name`, or by declaring `X` first and
assigning `X = require(name)` later. Loads destructured into core members only
(`var {PropTypes} = require(name)`) never name the namespace and are left
alone.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, List, Optional

from analyzer import AnalysisResult, NodeIndex, Scope

from .errors import (
    MultipleDeclarationsError,
    UnexpectedBindingCountError,
    UnexpectedInitializationError,
    UnsupportedConstructError,
    UnsupportedDestructuringError,
)
from .tables import ClassificationTable, Destination, SplitTarget
from .tree import Node, is_require, node_type, statement_list, static_key


class DeclarationKind(str, Enum):
    VARIABLE = "variable"
    IMPORT = "import"
    REASSIGNMENT = "reassignment"


@dataclass(frozen=True)
class CoreBinding:
    """The declaration that introduces the core alias into scope.

    `declarator` is the VariableDeclarator or import specifier naming the
    alias, `declaration` the statement holding it and `container` the
    statement list the declaration sits in.
    """

    alias: str
    kind: DeclarationKind
    declarator: Node
    declaration: Node
    container: List[Node]
    scope: Scope

    @property
    def initializer(self) -> Optional[Node]:
        if self.kind is DeclarationKind.IMPORT:
            return self.declaration
        return self.declarator.get("init")

    @property
    def is_import(self) -> bool:
        return self.kind is DeclarationKind.IMPORT


@dataclass(frozen=True)
class ScopeState:
    """Split namespaces already declared in the alias's scope."""

    declared: FrozenSet[Destination]

    def is_declared(self, destination: Destination) -> bool:
        return destination in self.declared


@dataclass(frozen=True)
class Resolution:
    binding: CoreBinding
    state: ScopeState


class BindingResolver:
    def __init__(
        self,
        index: NodeIndex,
        analysis: AnalysisResult,
        target: SplitTarget,
        table: ClassificationTable,
    ) -> None:
        self.index = index
        self.analysis = analysis
        self.target = target
        self.table = table
        self._binding: Optional[CoreBinding] = None

    @property
    def module_name(self) -> str:
        return self.target.module_name

    def resolve(self) -> Optional[Resolution]:
        for path in self.index.find("CallExpression"):
            if is_require(path.node, self.module_name):
                self._visit_require(path.node)
        for path in self.index.find("ImportDeclaration"):
            source = path.node.get("source") or {}
            if source.get("value") == self.module_name:
                self._visit_import(path.node)

        if self._binding is None:
            return None
        declared = frozenset(
            destination
            for destination, namespace in self.target.namespaces()
            if self._binding.scope.declares(namespace.identifier)
        )
        return Resolution(binding=self._binding, state=ScopeState(declared=declared))

    # ------------------------------------------------------------------ loads

    def _visit_require(self, call: Node) -> None:
        path = self.index.path_of(call)
        parent = path.parent
        if node_type(parent) == "VariableDeclarator" and path.field == "init":
            self._visit_declarator(call, parent)
        elif node_type(parent) == "AssignmentExpression" and path.field == "right":
            self._visit_reassignment(call, parent)
        # Any other load (nested in an expression) never names the namespace.

    def _visit_declarator(self, call: Node, declarator: Node) -> None:
        pattern = declarator.get("id")
        if node_type(pattern) == "ObjectPattern" and self._all_core(pattern):
            # var {PropTypes} = require('React'); so leave alone
            return
        if self._binding is not None:
            raise MultipleDeclarationsError(
                f"Multiple declarations of {self.module_name}", call
            )
        if node_type(pattern) != "Identifier":
            raise UnsupportedDestructuringError(
                f"Unexpected destructuring in require of {self.module_name}", call
            )
        declaration = self.index.parent_of(declarator)
        self._binding = CoreBinding(
            alias=pattern["name"],
            kind=DeclarationKind.VARIABLE,
            declarator=declarator,
            declaration=declaration,
            container=statement_list(self.index, declaration),
            scope=self._declaring_scope(pattern),
        )

    def _visit_reassignment(self, call: Node, assignment: Node) -> None:
        left = assignment.get("left")
        if node_type(left) != "Identifier":
            raise UnsupportedDestructuringError(
                f"Unexpected destructuring in require of {self.module_name}", call
            )
        name = left["name"]
        scope = self._declaring_scope(left)
        bindings = scope.get_bindings(name) if scope is not None else []
        if len(bindings) != 1:
            raise UnexpectedBindingCountError(
                f"Unexpected number of bindings: {len(bindings)}", assignment
            )
        declarator = bindings[0].declarator
        if node_type(declarator) != "VariableDeclarator":
            raise UnsupportedConstructError(
                f"Cannot reassign {self.module_name} to {name} declared by "
                f"{node_type(declarator)}",
                assignment,
            )
        init = declarator.get("init")
        if init is not None and not is_require(init, self.module_name):
            raise UnexpectedInitializationError(
                f"Unexpected initialization of {self.module_name}", declarator
            )
        if self._binding is not None:
            if self._binding.declarator is declarator:
                return
            raise MultipleDeclarationsError(
                f"Multiple declarations of {self.module_name}", call
            )
        declaration = self.index.parent_of(declarator)
        self._binding = CoreBinding(
            alias=name,
            kind=DeclarationKind.REASSIGNMENT,
            declarator=declarator,
            declaration=declaration,
            container=statement_list(self.index, declaration),
            scope=scope,
        )

    def _visit_import(self, declaration: Node) -> None:
        primary = None
        for specifier in declaration.get("specifiers", []):
            if specifier.get("type") == "ImportSpecifier":
                imported = (specifier.get("imported") or {}).get("name")
                if self.table.classify(imported) is not Destination.CORE:
                    raise UnsupportedDestructuringError(
                        f"Unexpected destructuring in import of {self.module_name}",
                        declaration,
                    )
            else:
                primary = specifier
        if primary is None:
            # import {PropTypes} from 'react'; so leave alone
            return
        if self._binding is not None:
            raise MultipleDeclarationsError(
                f"Multiple declarations of {self.module_name}", declaration
            )
        local = primary["local"]
        self._binding = CoreBinding(
            alias=local["name"],
            kind=DeclarationKind.IMPORT,
            declarator=primary,
            declaration=declaration,
            container=statement_list(self.index, declaration),
            scope=self._declaring_scope(local),
        )

    # ---------------------------------------------------------------- helpers

    def _all_core(self, pattern: Node) -> bool:
        properties = pattern.get("properties", [])
        return all(
            self.table.classify(static_key(prop) or "") is Destination.CORE
            for prop in properties
        )

    def _declaring_scope(self, identifier: Node) -> Optional[Scope]:
        scope = self.analysis.scope_for(identifier)
        if scope is None:
            return self.analysis.root_scope.lookup(identifier["name"])
        return scope.lookup(identifier["name"])


def resolve_binding(
    index: NodeIndex,
    analysis: AnalysisResult,
    target: SplitTarget,
    table: ClassificationTable,
) -> Optional[Resolution]:
    """Find the core alias binding for `target.module_name`, or None when the file never loads it."""
    return BindingResolver(index, analysis, target, table).resolve()


__all__ = [
    "BindingResolver",
    "CoreBinding",
    "DeclarationKind",
    "Resolution",
    "ScopeState",
    "resolve_binding",
]
