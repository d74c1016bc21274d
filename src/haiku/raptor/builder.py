import asyncio
import logging
from collections import Counter
from collections.abc import Sequence

from haiku.raptor.clustering.base import ClusteringStrategy
from haiku.raptor.embeddings.base import EmbedderBase
from haiku.raptor.exceptions import (
    DuplicateNodeError,
    IncompatibleVectorsError,
    InvalidPartitionError,
)
from haiku.raptor.ids import IdGenerator, SequentialIdGenerator
from haiku.raptor.models import Forest, TreeNode
from haiku.raptor.similarity import cosine_similarity
from haiku.raptor.summarizer import Summarizer

logger = logging.getLogger(__name__)

MAX_ID_ATTEMPTS = 100


class TreeBuilder:
    """Builds a forest of summary trees on top of a set of leaf nodes."""

    def __init__(
        self,
        clustering: ClusteringStrategy,
        summarizer: Summarizer,
        embedder: EmbedderBase,
        id_generator: IdGenerator | None = None,
        max_concurrency: int = 1,
        max_depth: int | None = None,
    ):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        if max_depth is not None and max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        self._clustering = clustering
        self._summarizer = summarizer
        self._embedder = embedder
        self._id_generator = id_generator or SequentialIdGenerator()
        self._max_concurrency = max_concurrency
        self._max_depth = max_depth

    async def build(self, leaves: Sequence[TreeNode]) -> Forest:
        """Cluster and summarize level by level until at most one node remains.

        Each pass clusters the current level. Singleton groups are promoted
        unchanged; every larger group becomes one summary node whose children
        are the group's nodes. A pass in which the clustering returns only
        singletons force-merges the two most similar nodes, so every pass
        shrinks the level. When `max_depth` passes have run, the remaining
        nodes are returned as the roots of a multi-root forest.

        Leaves repeating an earlier id are dropped. Summarizer and embedder
        errors are not caught.

        Returns:
            The forest holding every leaf and summary node
        """
        forest = Forest()
        current: list[TreeNode] = []
        for leaf in leaves:
            if leaf.id in forest:
                # first occurrence wins
                logger.warning(f"Dropping duplicate candidate {leaf.id}")
                continue
            current.append(forest.add(leaf))

        passes = 0
        summaries = 0

        while len(current) > 1:
            if self._max_depth is not None and passes >= self._max_depth:
                logger.debug(
                    f"Reached max depth {self._max_depth} with {len(current)} roots"
                )
                break

            logger.debug(f"Building level {passes + 1} from {len(current)} nodes")
            groups = self._clustering.cluster(current)
            check_partition(current, groups)

            if all(len(group) == 1 for group in groups):
                groups = self._force_merge(current)

            current = await self._build_level(forest, groups)
            summaries += sum(1 for group in groups if len(group) > 1)
            passes += 1

        forest.set_roots([node.id for node in current])
        logger.debug(
            f"Built forest of {len(forest)} nodes ({summaries} summaries, "
            f"{len(current)} roots) in {passes} passes"
        )
        return forest

    async def _build_level(
        self, forest: Forest, groups: list[list[TreeNode]]
    ) -> list[TreeNode]:
        # Ids are allocated in group order so the forest does not depend on
        # the order in which concurrent summaries complete.
        taken: set[str] = set()
        pending = []
        for group in groups:
            if len(group) > 1:
                node_id = self._next_id(forest, taken)
                taken.add(node_id)
                pending.append((node_id, group))
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def synthesize(node_id: str, group: list[TreeNode]) -> TreeNode:
            async with semaphore:
                return await self._create_summary_node(node_id, group)

        summary_nodes = iter(
            await asyncio.gather(*(synthesize(nid, group) for nid, group in pending))
        )

        next_level: list[TreeNode] = []
        for group in groups:
            if len(group) == 1:
                next_level.append(forest.get(group[0].id))
            else:
                next_level.append(forest.add(next(summary_nodes)))
        return next_level

    def _next_id(self, forest: Forest, taken: set[str]) -> str:
        """Draw ids until one is free in the forest and in the current level."""
        for _ in range(MAX_ID_ATTEMPTS):
            node_id = self._id_generator()
            if node_id not in forest and node_id not in taken:
                return node_id
            logger.debug(f"Summary id {node_id} already in use, drawing another")
        raise DuplicateNodeError(
            f"No free summary id after {MAX_ID_ATTEMPTS} attempts"
        )

    async def _create_summary_node(
        self, node_id: str, cluster: list[TreeNode]
    ) -> TreeNode:
        summary = await self._summarizer.summarize([node.content for node in cluster])
        [embedding] = await self._embedder.embed_documents([summary])
        return TreeNode(
            id=node_id,
            content=summary,
            embedding=embedding,
            level=cluster[0].level + 1,
            children=[node.id for node in cluster],
        )

    def _force_merge(self, nodes: list[TreeNode]) -> list[list[TreeNode]]:
        """Group the two most similar nodes together, leaving the rest as singletons."""
        best: tuple[int, int] | None = None
        best_similarity = float("-inf")
        for i in range(len(nodes)):
            for j in range(i + 1, len(nodes)):
                try:
                    similarity = cosine_similarity(
                        nodes[i].embedding, nodes[j].embedding
                    )
                except IncompatibleVectorsError:
                    continue
                if similarity > best_similarity:
                    best, best_similarity = (i, j), similarity

        i, j = best if best is not None else (0, 1)
        logger.warning(
            f"Clustering returned only singletons for {len(nodes)} nodes; "
            f"merging {nodes[i].id} and {nodes[j].id}"
        )

        groups: list[list[TreeNode]] = []
        for index, node in enumerate(nodes):
            if index == i:
                groups.append([node, nodes[j]])
            elif index != j:
                groups.append([node])
        return groups


def check_partition(nodes: Sequence[TreeNode], groups: list[list[TreeNode]]) -> None:
    """Raise InvalidPartitionError unless `groups` holds every node exactly once."""
    if any(not group for group in groups):
        raise InvalidPartitionError("Clustering returned an empty group")
    expected = Counter(node.id for node in nodes)
    actual = Counter(node.id for group in groups for node in group)
    if expected != actual:
        raise InvalidPartitionError(
            "Clustering result is not a partition of its input: "
            f"missing={sorted((expected - actual).keys())}, "
            f"extra={sorted((actual - expected).keys())}"
        )
