"""Remove the core declaration once nothing refers to the core namespace."""

from __future__ import annotations

from .classifier import Classification
from .resolver import CoreBinding
from .tree import remove_from


def should_prune(classification: Classification) -> bool:
    tally = classification.tally
    return tally.split_uses > 0 and tally.core == 0


def _remove_declarator(binding: CoreBinding) -> None:
    declaration = binding.declaration
    siblings_field = "specifiers" if binding.is_import else "declarations"
    siblings = declaration.get(siblings_field, [])
    if len(siblings) > 1:
        remove_from(siblings, binding.declarator)
    else:
        remove_from(binding.container, declaration)


def prune_core_declaration(binding: CoreBinding, classification: Classification) -> bool:
    """Drop the alias declaration and its reassignments when every use moved away."""
    if not should_prune(classification):
        return False
    _remove_declarator(binding)
    for site in classification.reassignments:
        remove_from(site.container, site.statement)
    return True


__all__ = ["prune_core_declaration", "should_prune"]
