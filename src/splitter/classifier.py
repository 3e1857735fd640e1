"""
Classify and rewrite every use of the core alias.

Each identifier named like the alias is visited once. Member accesses and
destructuring initializers are routed through the classification table:
core members stay on the alias, split members are rewritten onto the
ReactDOM / ReactDOMServer identifiers. Reassignments that reload the core
module are collected so the synthesizer can mirror them. Anything else is
refused with `UnsupportedConstructError`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Set, Tuple

from analyzer import AnalysisResult, NodeIndex, NodePath

from .errors import (
    UnexpectedAssignmentError,
    UnknownMemberError,
    UnsupportedConstructError,
)
from .resolver import CoreBinding
from .tables import ClassificationTable, Destination, SplitTarget
from .tree import (
    Node,
    identifier,
    insert_after,
    is_property_name,
    is_require,
    member_name,
    node_type,
    object_pattern,
    replace_child,
    statement_list,
    static_key,
    variable_declaration,
    variable_declarator,
)

# Markup that compiles to React.createElement without naming React.
IMPLICIT_CORE_NODES = ("JSXElement",)


class UsageKind(str, Enum):
    ACCESS = "access"
    DECLARATION = "declaration"
    REASSIGNMENT = "reassignment"
    UNRELATED = "unrelated"


@dataclass(frozen=True)
class UsageRecord:
    handle: int
    node: Node
    kind: UsageKind
    destinations: Tuple[Destination, ...] = ()


@dataclass(frozen=True)
class ReassignmentSite:
    """`alias = require(module)` and the expression statement holding it."""

    assignment: Node
    statement: Node
    container: List[Node]


@dataclass
class Tally:
    core: int = 0
    dom: int = 0
    dom_server: int = 0

    def add(self, destination: Destination, count: int = 1) -> None:
        setattr(self, destination.value, self.get(destination) + count)

    def get(self, destination: Destination) -> int:
        return getattr(self, destination.value)

    @property
    def split_uses(self) -> int:
        return self.dom + self.dom_server


@dataclass
class Classification:
    records: List[UsageRecord] = field(default_factory=list)
    tally: Tally = field(default_factory=Tally)
    reassignments: List[ReassignmentSite] = field(default_factory=list)
    implicit_core_uses: int = 0


class UsageClassifier:
    def __init__(
        self,
        index: NodeIndex,
        analysis: AnalysisResult,
        binding: CoreBinding,
        target: SplitTarget,
        table: ClassificationTable,
    ) -> None:
        self.index = index
        self.analysis = analysis
        self.binding = binding
        self.target = target
        self.table = table
        self.result = Classification()
        self._processed: Set[int] = set()

    @property
    def alias(self) -> str:
        return self.binding.alias

    def run(self) -> Classification:
        # Collect first: rewrites below insert nodes the index does not know.
        paths = self.index.find("Identifier", name=self.alias)
        for path in paths:
            if path.handle in self._processed:
                continue
            self._processed.add(path.handle)
            self._visit(path)

        implicit = sum(self.index.count(node_kind) for node_kind in IMPLICIT_CORE_NODES)
        self.result.implicit_core_uses = implicit
        self.result.tally.add(Destination.CORE, implicit)
        return self.result

    # ------------------------------------------------------------- dispatch

    def _record(self, path: NodePath, kind: UsageKind, *destinations: Destination) -> None:
        self.result.records.append(
            UsageRecord(handle=path.handle, node=path.node, kind=kind, destinations=destinations)
        )
        for destination in destinations:
            self.result.tally.add(destination)

    def _visit(self, path: NodePath) -> None:
        if is_property_name(path) or not self._refers_to_alias(path.node):
            self._record(path, UsageKind.UNRELATED)
            return
        handler = getattr(self, f"_visit_{path.parent_type}", None)
        if handler is None:
            raise UnsupportedConstructError(
                f"unimplemented {path.parent_type}", path.node
            )
        handler(path)

    def _refers_to_alias(self, node: Node) -> bool:
        scope = self.analysis.scope_for(node)
        if scope is None:
            return True
        return scope.lookup(self.alias) is self.binding.scope

    def _refuse_inside_declaration(self, path: NodePath) -> None:
        """Split namespaces are declared after the alias statement, so uses within it cannot move."""
        node = path.parent
        while node is not None:
            if node is self.binding.declaration:
                raise UnsupportedConstructError(
                    f"Cannot move {self.alias} members used inside its own declaration",
                    path.node,
                )
            node = self.index.parent_of(node)

    # ------------------------------------------------------------- handlers

    def _visit_MemberExpression(self, path: NodePath) -> None:
        member = path.parent
        if path.field != "object":
            # foo[React]
            raise UnsupportedConstructError("unimplemented computed member", member)
        name = member_name(member)
        if name is None:
            raise UnsupportedConstructError(
                f"Dynamic member access on {self.alias}", member
            )
        destination = self.table.classify(name)
        if destination is None:
            raise UnknownMemberError(f"Unknown property {self.alias}.{name}", member)
        if destination is not Destination.CORE:
            self._refuse_inside_declaration(path)
            namespace = self.target.namespace(destination)
            replace_child(member, "object", path.node, identifier(namespace.identifier))
        self._record(path, UsageKind.ACCESS, destination)

    def _visit_VariableDeclarator(self, path: NodePath) -> None:
        declarator = path.parent
        if path.field == "id":
            # var React = ...;
            self._record(path, UsageKind.DECLARATION)
        elif path.field == "init":
            self._split_destructuring(path, declarator)
        else:
            raise UnsupportedConstructError("unimplemented VariableDeclarator", declarator)

    def _visit_AssignmentExpression(self, path: NodePath) -> None:
        assignment = path.parent
        if path.field != "left":
            raise UnsupportedConstructError("unimplemented AssignmentExpression", assignment)
        if assignment.get("operator") != "=" or not is_require(
            assignment.get("right"), self.target.module_name
        ):
            raise UnexpectedAssignmentError(
                f"Unexpected assignment to {self.target.module_name}", assignment
            )
        statement = self.index.parent_of(assignment)
        if node_type(statement) != "ExpressionStatement":
            raise UnsupportedConstructError(
                f"Reassignment of {self.alias} must be a statement of its own", assignment
            )
        self.result.reassignments.append(
            ReassignmentSite(
                assignment=assignment,
                statement=statement,
                container=statement_list(self.index, statement),
            )
        )
        self._record(path, UsageKind.REASSIGNMENT)

    def _visit_ImportDefaultSpecifier(self, path: NodePath) -> None:
        self._record(path, UsageKind.DECLARATION)

    _visit_ImportNamespaceSpecifier = _visit_ImportDefaultSpecifier

    # -------------------------------------------------------- destructuring

    def _split_destructuring(self, path: NodePath, declarator: Node) -> None:
        pattern = declarator.get("id")
        if node_type(pattern) != "ObjectPattern":
            raise UnsupportedConstructError(
                f"unimplemented {node_type(pattern)} = {self.alias}", declarator
            )

        groups: Dict[Destination, List[Node]] = {destination: [] for destination in Destination}
        for prop in pattern.get("properties", []):
            key = static_key(prop)
            if key is None:
                raise UnsupportedConstructError("unimplemented destructuring", prop)
            destination = self.table.classify(key)
            if destination is None:
                raise UnknownMemberError(
                    f"Unknown property {self.alias}.{key} while destructuring", prop
                )
            groups[destination].append(prop)

        present = [destination for destination in Destination if groups[destination]]
        if not present:
            self._record(path, UsageKind.ACCESS, Destination.CORE)
            return
        if present != [Destination.CORE]:
            self._refuse_inside_declaration(path)

        kept, moved = present[0], present[1:]
        if kept is not Destination.CORE:
            namespace = self.target.namespace(kept)
            replace_child(declarator, "init", path.node, identifier(namespace.identifier))
        if moved:
            declaration = self.index.parent_of(declarator)
            container = statement_list(self.index, declaration)
            pattern["properties"] = groups[kept]
            # Insert in reverse so siblings end up in table order.
            for destination in reversed(moved):
                namespace = self.target.namespace(destination)
                sibling = variable_declaration(
                    declaration.get("kind", "var"),
                    [
                        variable_declarator(
                            object_pattern(groups[destination]),
                            identifier(namespace.identifier),
                        )
                    ],
                )
                insert_after(container, declaration, sibling)
        self._record(path, UsageKind.ACCESS, *present)


def classify_usages(
    index: NodeIndex,
    analysis: AnalysisResult,
    binding: CoreBinding,
    target: SplitTarget,
    table: ClassificationTable,
) -> Classification:
    """Visit, tally and rewrite every use of `binding.alias`."""
    return UsageClassifier(index, analysis, binding, target, table).run()


__all__ = [
    "Classification",
    "IMPLICIT_CORE_NODES",
    "ReassignmentSite",
    "Tally",
    "UsageClassifier",
    "UsageKind",
    "UsageRecord",
    "classify_usages",
]
