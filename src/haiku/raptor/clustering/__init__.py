from haiku.raptor.clustering.base import ClusteringStrategy
from haiku.raptor.clustering.centroid import CentroidClustering
from haiku.raptor.clustering.similarity import SimilarityClustering
from haiku.raptor.config import AppConfig, Config

__all__ = [
    "ClusteringStrategy",
    "CentroidClustering",
    "SimilarityClustering",
    "get_clustering",
]


def get_clustering(config: AppConfig = Config) -> ClusteringStrategy:
    """
    Factory function to get the clustering strategy named by the configuration.

    Args:
        config: Configuration to use. Defaults to global Config.

    Returns:
        A clustering strategy configured according to the config.
    """
    clustering = config.clustering

    if clustering.strategy == "similarity":
        return SimilarityClustering(
            threshold=clustering.similarity.threshold,
            max_cluster_size=clustering.similarity.max_cluster_size,
        )

    if clustering.strategy == "centroid":
        centroid = clustering.centroid
        return CentroidClustering(
            max_clusters=centroid.max_clusters,
            max_iterations=centroid.max_iterations,
            min_cluster_size=centroid.min_cluster_size,
            max_cluster_size=centroid.max_cluster_size,
            use_dimension_reduction=centroid.use_dimension_reduction,
            random_seed=centroid.random_seed,
        )

    raise ValueError(f"Unsupported clustering strategy: {clustering.strategy}")
