"""Tests for the radix tree."""

from __future__ import annotations

from loaddefs.extract.radix import ROOT, RadixTree


def build(*keys: str) -> RadixTree:
    tree = RadixTree()
    for key in keys:
        tree.insert(key)
    return tree


class TestRadixTree:
    def test_empty(self) -> None:
        tree = RadixTree()

        assert len(tree) == 0
        assert list(tree.iter_subtrees()) == []
        assert tree.lookup("foo") is None

    def test_lookup_exact_keys_only(self) -> None:
        tree = build("foo", "foobar")

        assert tree.lookup("foo") is True
        assert tree.lookup("foobar") is True
        assert tree.lookup("fo") is None
        assert tree.lookup("foob") is None
        assert tree.lookup("foobarbaz") is None

    def test_values(self) -> None:
        tree = RadixTree()
        tree.insert("a", 1)
        tree.insert("ab", 2)
        tree.insert("a", 3)

        assert tree.lookup("a") == 3
        assert tree.lookup("ab") == 2
        assert len(tree) == 2

    def test_edges_are_split_on_shared_prefix(self) -> None:
        tree = build("foo-bar", "foo-baz", "foo2-x")

        root_edges = list(tree.iter_subtrees())
        assert [label for label, _ in root_edges] == ["foo"]
        _, subtree = root_edges[0]
        assert [label for label, _ in tree.iter_subtrees(subtree)] == ["-ba", "2-x"]

    def test_lookup_relative_to_subtree(self) -> None:
        tree = build("foo", "foo-bar")
        (_, subtree), = tree.iter_subtrees()

        assert tree.lookup("", subtree) is True
        assert tree.lookup("-bar", subtree) is True
        assert tree.lookup("", ROOT) is None

    def test_iter_mappings_in_sorted_order(self) -> None:
        tree = build("b", "abc", "ab", "a")

        assert [key for key, _ in tree.iter_mappings()] == ["a", "ab", "abc", "b"]

    def test_iter_mappings_keys_relative_to_subtree(self) -> None:
        tree = build("foo-a", "foo-b")
        (label, subtree), = tree.iter_subtrees()

        assert label == "foo-"
        assert [key for key, _ in tree.iter_mappings(subtree, label)] == ["foo-a", "foo-b"]
