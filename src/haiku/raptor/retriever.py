import logging
from collections.abc import Sequence

from haiku.raptor.exceptions import IncompatibleVectorsError
from haiku.raptor.models import SUMMARY_TYPE, Candidate, Forest, TreeNode
from haiku.raptor.similarity import cosine_similarity

logger = logging.getLogger(__name__)


class CollapsedTreeRetriever:
    """Ranks every node of a forest, leaves and summaries alike, against a query.

    Nodes whose embeddings cannot be compared with the query are left out of
    the result. Equal scores keep flatten (pre-order) order.
    """

    def __init__(self, limit: int | None = None):
        if limit is not None and limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit

    def retrieve(
        self, forest: Forest, query_embedding: Sequence[float]
    ) -> list[Candidate]:
        scored = self.score(forest, query_embedding)
        return [node_to_candidate(node) for node, _ in scored]

    def score(
        self, forest: Forest, query_embedding: Sequence[float]
    ) -> list[tuple[TreeNode, float]]:
        """Return (node, cosine similarity) pairs, best first."""
        scored: list[tuple[TreeNode, float]] = []
        for node in forest.walk():
            try:
                scored.append((node, cosine_similarity(query_embedding, node.embedding)))
            except IncompatibleVectorsError as e:
                logger.debug(f"Skipping node {node.id}: {e}")

        # sorted() is stable, so ties stay in flatten order
        scored = sorted(scored, key=lambda item: item[1], reverse=True)
        if self.limit is not None:
            scored = scored[: self.limit]
        return scored


def node_to_candidate(node: TreeNode) -> Candidate:
    if node.source is not None:
        return node.source
    return Candidate(
        id=node.id,
        content=node.content,
        embedding=node.embedding,
        metadata={"raptor_level": node.level, "raptor_type": SUMMARY_TYPE},
    )
