"""Radix tree over strings, with compressed edge labels.

Nodes live in an arena and are addressed by index, so a subtree is just
an ``int``. Only insertion and read access are needed.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

ROOT = 0


@dataclass(slots=True)
class _Node:
    edges: dict[str, int] = field(default_factory=dict)
    has_value: bool = False
    value: Any = None


def _common_prefix_length(a: str, b: str) -> int:
    n = 0
    for x, y in zip(a, b, strict=False):
        if x != y:
            break
        n += 1
    return n


class RadixTree:
    """String-keyed radix tree.

    Example:
        >>> tree = RadixTree()
        >>> for name in ("foo-bar", "foo-baz"):
        ...     tree.insert(name)
        >>> [label for label, _ in tree.iter_subtrees()]
        ['foo-ba']
    """

    def __init__(self) -> None:
        self._nodes: list[_Node] = [_Node()]

    def __len__(self) -> int:
        return sum(1 for _ in self.iter_mappings())

    def _new_node(self) -> int:
        self._nodes.append(_Node())
        return len(self._nodes) - 1

    def insert(self, key: str, value: Any = True) -> None:
        node = ROOT
        while key:
            edges = self._nodes[node].edges
            label = next((edge for edge in edges if edge[0] == key[0]), None)
            if label is None:
                child = self._new_node()
                edges[key] = child
                node, key = child, ""
                break
            n = _common_prefix_length(label, key)
            if n < len(label):
                # Split the edge at the shared part.
                middle = self._new_node()
                self._nodes[middle].edges[label[n:]] = edges.pop(label)
                edges[label[:n]] = middle
                node = middle
            else:
                node = edges[label]
            key = key[n:]
        target = self._nodes[node]
        target.has_value = True
        target.value = value

    def lookup(self, key: str, node: int = ROOT) -> Any:
        """Value stored under ``key`` below ``node``, or None."""
        while key:
            edges = self._nodes[node].edges
            label = next((edge for edge in edges if key.startswith(edge)), None)
            if label is None:
                return None
            node, key = edges[label], key[len(label) :]
        target = self._nodes[node]
        return target.value if target.has_value else None

    def iter_subtrees(self, node: int = ROOT) -> Iterator[tuple[str, int]]:
        """Outgoing edges of ``node`` as (label, subtree) pairs, sorted by label."""
        edges = self._nodes[node].edges
        for label in sorted(edges):
            yield label, edges[label]

    def iter_mappings(self, node: int = ROOT, prefix: str = "") -> Iterator[tuple[str, Any]]:
        """Every (key, value) stored below ``node``, keys relative to it."""
        target = self._nodes[node]
        if target.has_value:
            yield prefix, target.value
        for label, child in self.iter_subtrees(node):
            yield from self.iter_mappings(child, prefix + label)
