import logging
from collections.abc import Sequence

from haiku.raptor.clustering.base import ClusteringStrategy
from haiku.raptor.exceptions import IncompatibleVectorsError
from haiku.raptor.models import TreeNode
from haiku.raptor.similarity import cosine_similarity

logger = logging.getLogger(__name__)


class SimilarityClustering(ClusteringStrategy):
    """Greedy seed-based clustering.

    Walks the nodes in order. Each unassigned node seeds a cluster and pulls
    in later unassigned nodes whose cosine similarity to the seed is strictly
    greater than `threshold`, until the cluster holds `max_cluster_size`
    nodes. Membership is relative to the seed only, so two members of the
    same cluster need not be similar to each other.
    """

    def __init__(self, threshold: float = 0.7, max_cluster_size: int = 8):
        if max_cluster_size < 1:
            raise ValueError("max_cluster_size must be at least 1")
        self.threshold = threshold
        self.max_cluster_size = max_cluster_size

    def cluster(self, nodes: Sequence[TreeNode]) -> list[list[TreeNode]]:
        clusters: list[list[TreeNode]] = []
        used = [False] * len(nodes)

        for i, seed in enumerate(nodes):
            if used[i]:
                continue

            cluster = [seed]
            used[i] = True

            for j in range(i + 1, len(nodes)):
                if used[j] or len(cluster) >= self.max_cluster_size:
                    continue
                try:
                    similarity = cosine_similarity(seed.embedding, nodes[j].embedding)
                except IncompatibleVectorsError as e:
                    logger.debug(f"Skipping pair {seed.id}/{nodes[j].id}: {e}")
                    continue

                if similarity > self.threshold:
                    cluster.append(nodes[j])
                    used[j] = True

            clusters.append(cluster)

        return clusters
