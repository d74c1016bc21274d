import pytest
from conftest import make_candidate, make_leaf

from haiku.raptor.exceptions import DuplicateNodeError
from haiku.raptor.models import Candidate, Forest, TreeNode


def summary(id: str, children: list[TreeNode], level: int = 1) -> TreeNode:
    return TreeNode(
        id=id,
        content=f"Summary {id}",
        embedding=[1.0, 0.0],
        level=level,
        children=[child.id for child in children],
    )


class TestTreeNode:
    def test_from_candidate(self):
        candidate = make_candidate("doc-1", [0.1, 0.2, 0.3], "Original content")
        node = TreeNode.from_candidate(candidate)

        assert node.id == "doc-1"
        assert node.content == "Original content"
        assert node.embedding == [0.1, 0.2, 0.3]
        assert node.level == 0
        assert node.children == []
        assert node.parent is None
        assert node.source is candidate
        assert node.is_leaf

    def test_summary_node(self):
        node = summary("s1", [make_leaf("a", [1.0]), make_leaf("b", [1.0])])
        assert not node.is_leaf
        assert node.children == ["a", "b"]
        assert node.source is None

    def test_leaf_cannot_have_children(self):
        with pytest.raises(ValueError):
            TreeNode(
                id="x",
                content="x",
                embedding=[1.0],
                children=["y"],
                source=Candidate(id="x", content="x"),
            )

    def test_leaf_must_be_level_zero(self):
        with pytest.raises(ValueError):
            TreeNode(
                id="x",
                content="x",
                embedding=[1.0],
                level=1,
                source=Candidate(id="x", content="x"),
            )

    def test_node_needs_source_or_children(self):
        with pytest.raises(ValueError):
            TreeNode(id="x", content="x", embedding=[1.0])

    def test_summary_cannot_be_level_zero(self):
        with pytest.raises(ValueError):
            TreeNode(id="x", content="x", embedding=[1.0], level=0, children=["a"])

    def test_nodes_are_immutable(self):
        node = make_leaf("a", [1.0])
        with pytest.raises(ValueError):
            node.content = "changed"  # type: ignore[misc]


class TestForest:
    def test_add_sets_parent_on_children(self):
        forest = Forest()
        a = forest.add(make_leaf("a", [1.0, 0.0]))
        b = forest.add(make_leaf("b", [0.0, 1.0]))
        parent = forest.add(summary("s1", [a, b]))
        forest.set_roots(["s1"])

        assert forest.get("a").parent == "s1"
        assert forest.get("b").parent == "s1"
        assert forest.parent_of(a) == parent
        assert forest.parent_of(parent) is None
        assert [child.id for child in forest.children_of(parent)] == ["a", "b"]
        assert [root.id for root in forest.roots] == ["s1"]
        assert len(forest) == 3
        assert "a" in forest
        assert forest.depth == 1

    def test_duplicate_id_rejected(self):
        forest = Forest()
        forest.add(make_leaf("a", [1.0]))
        with pytest.raises(DuplicateNodeError):
            forest.add(make_leaf("a", [1.0]))

    def test_unknown_child_rejected(self):
        forest = Forest()
        with pytest.raises(KeyError):
            forest.add(summary("s1", [make_leaf("missing", [1.0])]))

    def test_child_cannot_have_two_parents(self):
        forest = Forest()
        a = forest.add(make_leaf("a", [1.0]))
        b = forest.add(make_leaf("b", [1.0]))
        forest.add(summary("s1", [a, b]))
        with pytest.raises(ValueError):
            forest.add(summary("s2", [a, b]))

    def test_root_must_not_have_parent(self):
        forest = Forest()
        a = forest.add(make_leaf("a", [1.0]))
        b = forest.add(make_leaf("b", [1.0]))
        forest.add(summary("s1", [a, b]))
        with pytest.raises(ValueError):
            forest.set_roots(["a"])

    def test_flatten_is_preorder_over_roots(self):
        forest = Forest()
        a = forest.add(make_leaf("a", [1.0]))
        b = forest.add(make_leaf("b", [1.0]))
        c = forest.add(make_leaf("c", [1.0]))
        d = forest.add(make_leaf("d", [1.0]))
        e = forest.add(make_leaf("e", [1.0]))
        s1 = forest.add(summary("s1", [a, b]))
        s2 = forest.add(summary("s2", [c, d]))
        forest.add(summary("s3", [s1, s2], level=2))
        forest.set_roots(["s3", "e"])

        assert [node.id for node in forest.flatten()] == [
            "s3",
            "s1",
            "a",
            "b",
            "s2",
            "c",
            "d",
            "e",
        ]

    def test_flatten_empty_forest(self):
        forest = Forest()
        assert forest.flatten() == []
        assert forest.depth == -1

    def test_flatten_deep_chain_does_not_recurse(self):
        forest = Forest()
        previous = forest.add(make_leaf("leaf", [1.0]))
        other = forest.add(make_leaf("other-0", [1.0]))
        for level in range(1, 3001):
            node = forest.add(summary(f"s{level}", [previous, other], level=level))
            other = forest.add(make_leaf(f"other-{level}", [1.0]))
            previous = node
        forest.set_roots([previous.id, other.id])

        flattened = forest.flatten()
        assert len(flattened) == len(forest)
        assert flattened[0].id == "s3000"
