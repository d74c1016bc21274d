from abc import ABC, abstractmethod
from collections.abc import Sequence

from haiku.raptor.models import TreeNode


class ClusteringStrategy(ABC):
    """Partitions same-level nodes into groups.

    Every input node must appear in exactly one returned group, and no group
    may be empty.
    """

    @abstractmethod
    def cluster(self, nodes: Sequence[TreeNode]) -> list[list[TreeNode]]: ...
