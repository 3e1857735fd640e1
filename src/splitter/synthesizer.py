"""
Declare the split namespaces a rewritten file now depends on.

New declarations mirror the core declaration: an `import` next to an
`import`, a `var`/`let`/`const` of the same kind next to a variable, with an
initializer only when the core declarator had one. Every reassignment that
reloads the core module gets a matching reassignment of the namespace.
"""

from __future__ import annotations

from typing import List

from analyzer import NodeIndex

from .classifier import Classification
from .errors import ScopeConflictError
from .resolver import CoreBinding, ScopeState
from .tables import SPLIT_DESTINATIONS, Namespace, SplitTarget
from .tree import (
    assignment_statement,
    identifier,
    import_declaration,
    insert_after,
    is_property_name,
    require_call,
    variable_declaration,
    variable_declarator,
)


def check_scope_conflicts(
    index: NodeIndex, binding: CoreBinding, state: ScopeState, target: SplitTarget
) -> None:
    """Refuse files that already use a namespace name the alias's scope does not declare."""
    for destination, namespace in target.namespaces():
        if state.is_declared(destination):
            continue
        for path in index.find("Identifier", name=namespace.identifier):
            if is_property_name(path):
                continue
            raise ScopeConflictError(
                f"{namespace.identifier} is already defined in a different scope "
                f"than {binding.alias}",
                path.node,
            )


def _declaration_for(binding: CoreBinding, namespace: Namespace):
    if binding.is_import:
        return import_declaration(
            binding.declarator["type"], namespace.identifier, namespace.module_path
        )
    init = require_call(namespace.module_path) if binding.initializer is not None else None
    return variable_declaration(
        binding.declaration.get("kind", "var"),
        [variable_declarator(identifier(namespace.identifier), init)],
        blank_line=True,
    )


def insert_namespace_load(
    binding: CoreBinding, classification: Classification, namespace: Namespace
) -> None:
    for site in classification.reassignments:
        insert_after(
            site.container,
            site.statement,
            assignment_statement(namespace.identifier, require_call(namespace.module_path)),
        )
    insert_after(binding.container, binding.declaration, _declaration_for(binding, namespace))


def synthesize_declarations(
    binding: CoreBinding,
    state: ScopeState,
    classification: Classification,
    target: SplitTarget,
) -> List[str]:
    """Insert loads for every used, undeclared namespace; return their identifiers."""
    inserted: List[str] = []
    # Each insertion lands right after the anchor, so go in reverse table order.
    for destination in reversed(SPLIT_DESTINATIONS):
        if classification.tally.get(destination) <= 0 or state.is_declared(destination):
            continue
        namespace = target.namespace(destination)
        insert_namespace_load(binding, classification, namespace)
        inserted.insert(0, namespace.identifier)
    return inserted


__all__ = [
    "check_scope_conflicts",
    "insert_namespace_load",
    "synthesize_declarations",
]
