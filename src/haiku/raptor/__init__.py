from haiku.raptor.builder import TreeBuilder
from haiku.raptor.client import RaptorRetrieval
from haiku.raptor.clustering import (
    CentroidClustering,
    ClusteringStrategy,
    SimilarityClustering,
    get_clustering,
)
from haiku.raptor.models import Candidate, Forest, TreeNode
from haiku.raptor.retriever import CollapsedTreeRetriever
from haiku.raptor.sources import CandidateSource
from haiku.raptor.summarizer import ClusterSummarizer, Summarizer

__all__ = [
    "Candidate",
    "CandidateSource",
    "CentroidClustering",
    "ClusterSummarizer",
    "ClusteringStrategy",
    "CollapsedTreeRetriever",
    "Forest",
    "RaptorRetrieval",
    "SimilarityClustering",
    "Summarizer",
    "TreeBuilder",
    "TreeNode",
    "get_clustering",
]
