import pytest
from conftest import make_leaf

from haiku.raptor.models import Forest, TreeNode
from haiku.raptor.retriever import CollapsedTreeRetriever, node_to_candidate


def build_forest(leaves, summary_embedding=(0.0, 1.0, 0.0)) -> Forest:
    forest = Forest()
    for leaf in leaves:
        forest.add(leaf)
    forest.add(
        TreeNode(
            id="summary_1",
            content="Summary of everything",
            embedding=list(summary_embedding),
            level=1,
            children=[leaf.id for leaf in leaves],
        )
    )
    forest.set_roots(["summary_1"])
    return forest


class TestCollapsedTreeRetriever:
    def test_ranks_all_levels(self):
        forest = build_forest(
            [make_leaf("a", [1.0, 0.0, 0.0]), make_leaf("b", [0.9, 0.1, 0.0])],
            summary_embedding=(0.7, 0.7, 0.0),
        )
        results = CollapsedTreeRetriever().retrieve(forest, [1.0, 0.0, 0.0])
        assert [r.id for r in results] == ["a", "b", "summary_1"]

    def test_leaf_results_are_original_candidates(self):
        leaf = make_leaf("a", [1.0, 0.0, 0.0])
        forest = build_forest([leaf, make_leaf("b", [0.0, 1.0, 0.0])])

        results = CollapsedTreeRetriever().retrieve(forest, [1.0, 0.0, 0.0])

        assert results[0] is leaf.source
        assert results[0].metadata == {"source": "test"}

    def test_summary_results_are_tagged(self):
        forest = build_forest([make_leaf("a", [1.0, 0.0, 0.0]), make_leaf("b", [0.0, 0.0, 1.0])])
        results = CollapsedTreeRetriever().retrieve(forest, [0.0, 1.0, 0.0])

        summary = next(r for r in results if r.id == "summary_1")
        assert summary.content == "Summary of everything"
        assert summary.embedding == [0.0, 1.0, 0.0]
        assert summary.metadata == {"raptor_level": 1, "raptor_type": "summary"}

    def test_incompatible_nodes_are_excluded(self):
        forest = build_forest([make_leaf("a", [1.0, 0.0, 0.0]), make_leaf("b", [1.0, 0.0])])
        results = CollapsedTreeRetriever().retrieve(forest, [1.0, 0.0, 0.0])
        assert [r.id for r in results] == ["a", "summary_1"]

    def test_ties_keep_flatten_order(self):
        same = [1.0, 0.0]
        forest = build_forest(
            [make_leaf("x", same), make_leaf("y", same), make_leaf("z", same)],
            summary_embedding=(1.0, 0.0),
        )
        results = CollapsedTreeRetriever().retrieve(forest, [2.0, 0.0])
        assert [r.id for r in results] == ["summary_1", "x", "y", "z"]

    def test_limit(self):
        forest = build_forest([make_leaf("a", [1.0, 0.0, 0.0]), make_leaf("b", [0.9, 0.1, 0.0])])
        results = CollapsedTreeRetriever(limit=2).retrieve(forest, [1.0, 0.0, 0.0])
        assert [r.id for r in results] == ["a", "b"]

    def test_invalid_limit(self):
        with pytest.raises(ValueError):
            CollapsedTreeRetriever(limit=0)

    def test_score_returns_descending_scores(self):
        forest = build_forest(
            [make_leaf("a", [1.0, 0.0, 0.0]), make_leaf("b", [0.0, 1.0, 0.0])],
            summary_embedding=(0.5, 0.5, 0.0),
        )
        scored = CollapsedTreeRetriever().score(forest, [1.0, 0.0, 0.0])
        scores = [score for _, score in scored]
        assert scores == sorted(scores, reverse=True)
        assert scores[0] == pytest.approx(1.0)

    def test_empty_forest(self):
        assert CollapsedTreeRetriever().retrieve(Forest(), [1.0]) == []


def test_node_to_candidate_for_leaf():
    leaf = make_leaf("a", [1.0])
    assert node_to_candidate(leaf) is leaf.source
