"""Helpers for working with the category hierarchy.

A :class:`CategoryTree` is an in-memory index over the flat ``categories``
rows. It is rebuilt for every request that needs it and never cached: the
table is small enough to read in full, and a fresh snapshot keeps the cycle
checks honest.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Set

from app.core.exceptions import (
    CircularReferenceError,
    CorruptHierarchyError,
    HasListingsError,
    HasSubcategoriesError,
    SelfParentError,
)


class CategoryRecord(Protocol):
    """Anything shaped like a category row (ORM object, dataclass, ...)."""

    id: int
    name: str
    parent_id: Optional[int]


@dataclass
class CategoryNode:
    """A category together with its subcategories."""

    id: int
    name: str
    parent_id: Optional[int]
    children: List["CategoryNode"] = field(default_factory=list)


class CategoryTree:
    def __init__(self, categories: Iterable[CategoryRecord]):
        self._by_id: Dict[int, CategoryRecord] = {}
        self._children: Dict[int, List[int]] = {}

        for category in categories:
            self._by_id[category.id] = category
        for category in self._by_id.values():
            if category.parent_id is not None:
                self._children.setdefault(category.parent_id, []).append(category.id)

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._by_id

    def children_of(self, category_id: int) -> List[int]:
        return list(self._children.get(category_id, ()))

    def resolve_path(self, category_id: int) -> List[Dict[str, object]]:
        """Return the breadcrumb from the root down to ``category_id``.

        Unknown ids give an empty list. A parent chain that revisits a
        category raises :class:`CorruptHierarchyError`.
        """
        path: List[Dict[str, object]] = []
        visited: Set[int] = set()
        current = self._by_id.get(category_id)

        while current is not None:
            if current.id in visited:
                raise CorruptHierarchyError(current.id)
            visited.add(current.id)
            path.append({"id": current.id, "name": current.name})
            if current.parent_id is None:
                break
            current = self._by_id.get(current.parent_id)

        path.reverse()
        return path

    def compute_descendants(self, category_id: int, include_self: bool) -> Set[int]:
        """Collect every category reachable from ``category_id`` via child links."""
        result: Set[int] = {category_id}
        stack = [category_id]

        while stack:
            for child_id in self._children.get(stack.pop(), ()):
                if child_id in result:
                    raise CorruptHierarchyError(child_id)
                result.add(child_id)
                stack.append(child_id)

        if not include_self:
            result.discard(category_id)
        return result

    def descendants_inclusive(self, category_id: int) -> Set[int]:
        # used by the parent cycle check and the listing category filter
        return self.compute_descendants(category_id, include_self=True)

    def descendants_exclusive(self, category_id: int) -> Set[int]:
        return self.compute_descendants(category_id, include_self=False)

    def validate_no_cycle(self, category_id: int, proposed_parent_id: Optional[int]) -> None:
        """Raise if making ``proposed_parent_id`` the parent would create a cycle."""
        if proposed_parent_id is None:
            return
        if proposed_parent_id == category_id:
            raise SelfParentError(category_id)
        if proposed_parent_id in self.descendants_inclusive(category_id):
            raise CircularReferenceError(category_id, proposed_parent_id)

    def validate_deletable(self, category_id: int, listing_counts: Mapping[int, int]) -> None:
        """Subcategories are checked first, so they win over listings."""
        if self.children_of(category_id):
            raise HasSubcategoriesError(category_id)
        if listing_counts.get(category_id, 0) > 0:
            raise HasListingsError(category_id)

    def top_level(self) -> List[CategoryRecord]:
        roots = [c for c in self._by_id.values() if c.parent_id is None]
        return sorted(roots, key=lambda c: (c.name, c.id))

    def build_forest(self) -> List[CategoryNode]:
        """Build nested nodes; categories whose parent is missing become roots."""
        nodes = {
            c.id: CategoryNode(id=c.id, name=c.name, parent_id=c.parent_id)
            for c in self._by_id.values()
        }
        roots: List[CategoryNode] = []

        for node in nodes.values():
            if node.parent_id is not None and node.parent_id in nodes:
                nodes[node.parent_id].children.append(node)
            else:
                roots.append(node)

        _sort_nodes(roots)
        return roots


def _sort_nodes(nodes: List[CategoryNode]) -> None:
    nodes.sort(key=lambda node: (node.name, node.id))
    for node in nodes:
        _sort_nodes(node.children)
