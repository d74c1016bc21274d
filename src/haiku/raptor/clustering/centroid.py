import logging
import math
from collections.abc import Sequence

import numpy as np

from haiku.raptor.clustering.base import ClusteringStrategy
from haiku.raptor.exceptions import IncompatibleVectorsError
from haiku.raptor.models import TreeNode

logger = logging.getLogger(__name__)

RANDOM_SEED = 42


class CentroidClustering(ClusteringStrategy):
    """K-means clustering with BIC-style selection of the cluster count.

    This approximates Gaussian-mixture clustering: for every k from 1 to
    `min(max_clusters, n)` a bounded k-means run yields a partition whose
    log-likelihood is estimated as the negative sum of squared distances to
    the cluster centroids. The k with the lowest BIC score wins (the smallest
    k on ties). Groups larger than `max_cluster_size` are then sliced into
    contiguous chunks.
    """

    def __init__(
        self,
        max_clusters: int = 10,
        max_iterations: int = 100,
        min_cluster_size: int = 2,
        max_cluster_size: int = 8,
        use_dimension_reduction: bool = False,
        random_seed: int | None = RANDOM_SEED,
    ):
        if max_clusters < 1:
            raise ValueError("max_clusters must be at least 1")
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        if min_cluster_size < 1 or max_cluster_size < min_cluster_size:
            raise ValueError(
                "Cluster size bounds must satisfy 1 <= min_cluster_size <= max_cluster_size"
            )
        self.max_clusters = max_clusters
        self.max_iterations = max_iterations
        self.min_cluster_size = min_cluster_size
        self.max_cluster_size = max_cluster_size
        self.use_dimension_reduction = use_dimension_reduction
        self.random_seed = random_seed

    def cluster(self, nodes: Sequence[TreeNode]) -> list[list[TreeNode]]:
        if not nodes:
            return []
        if len(nodes) == 1:
            return [[nodes[0]]]

        embeddings = self._stack_embeddings(nodes)
        if self.use_dimension_reduction:
            embeddings = self.reduce_dimensions(embeddings)

        rng = np.random.default_rng(self.random_seed)
        k, assignments = self.select_cluster_count(embeddings, rng)
        logger.debug(f"Selected {k} clusters for {len(nodes)} nodes")

        return self._split_oversized(self._group_by_assignments(nodes, assignments))

    def reduce_dimensions(self, embeddings: np.ndarray) -> np.ndarray:
        """Dimensionality reduction hook. Currently returns the embeddings unchanged."""
        return embeddings

    def select_cluster_count(
        self,
        embeddings: np.ndarray,
        rng: np.random.Generator | None = None,
    ) -> tuple[int, np.ndarray]:
        """Pick the cluster count with the lowest BIC score.

        Returns:
            Tuple of (k, assignments for that k)
        """
        if rng is None:
            rng = np.random.default_rng(self.random_seed)

        n = len(embeddings)
        best_k = 1
        best_bic = math.inf
        best_assignments = np.zeros(n, dtype=int)

        for k in range(1, min(self.max_clusters, n) + 1):
            assignments = self.kmeans(embeddings, k, rng)
            log_likelihood = estimate_log_likelihood(embeddings, assignments)
            bic = bic_score(log_likelihood, k, embeddings.shape[1], n)
            if bic < best_bic:
                best_k, best_bic, best_assignments = k, bic, assignments

        return best_k, best_assignments

    def kmeans(
        self, embeddings: np.ndarray, k: int, rng: np.random.Generator
    ) -> np.ndarray:
        """Bounded k-means returning one cluster index per row."""
        n = len(embeddings)
        if k <= 1:
            return np.zeros(n, dtype=int)
        if n <= k:
            return np.arange(n)

        centroids = embeddings[rng.choice(n, size=k, replace=False)].copy()
        assignments: np.ndarray | None = None

        for _ in range(self.max_iterations):
            distances = ((embeddings[:, None, :] - centroids[None, :, :]) ** 2).sum(
                axis=2
            )
            new_assignments = distances.argmin(axis=1)

            for j in range(k):
                members = embeddings[new_assignments == j]
                # An empty cluster keeps its previous centroid.
                if len(members):
                    centroids[j] = members.mean(axis=0)

            if assignments is not None and np.array_equal(assignments, new_assignments):
                break
            assignments = new_assignments

        assert assignments is not None
        return assignments

    def _stack_embeddings(self, nodes: Sequence[TreeNode]) -> np.ndarray:
        dims = {len(node.embedding) for node in nodes}
        if 0 in dims:
            raise IncompatibleVectorsError("Cannot cluster nodes with empty embeddings")
        if len(dims) > 1:
            raise IncompatibleVectorsError(
                f"Cannot cluster embeddings of mixed dimensions: {sorted(dims)}"
            )
        return np.array([node.embedding for node in nodes], dtype=float)

    def _group_by_assignments(
        self, nodes: Sequence[TreeNode], assignments: np.ndarray
    ) -> list[list[TreeNode]]:
        # Groups are ordered by first appearance, members by input order.
        groups: dict[int, list[TreeNode]] = {}
        for node, label in zip(nodes, assignments.tolist()):
            groups.setdefault(label, []).append(node)
        return list(groups.values())

    def _split_oversized(self, groups: list[list[TreeNode]]) -> list[list[TreeNode]]:
        result: list[list[TreeNode]] = []
        for group in groups:
            if len(group) > self.max_cluster_size:
                result.extend(
                    group[i : i + self.max_cluster_size]
                    for i in range(0, len(group), self.max_cluster_size)
                )
            else:
                # Singletons and undersized groups are kept so every node
                # stays in the partition.
                result.append(group)
        return result


def estimate_log_likelihood(embeddings: np.ndarray, assignments: np.ndarray) -> float:
    """Negative sum of squared distances from each point to its cluster centroid."""
    log_likelihood = 0.0
    for label in np.unique(assignments):
        members = embeddings[assignments == label]
        centroid = members.mean(axis=0)
        log_likelihood -= float(((members - centroid) ** 2).sum())
    return log_likelihood


def bic_score(log_likelihood: float, k: int, dimensions: int, n: int) -> float:
    """BIC = -2 * log-likelihood + (k means + k variances + k-1 weights) * ln(n)."""
    num_params = 2 * k * dimensions + (k - 1)
    return -2 * log_likelihood + num_params * math.log(n)
