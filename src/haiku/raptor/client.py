import logging

from haiku.raptor.builder import TreeBuilder
from haiku.raptor.clustering import ClusteringStrategy, get_clustering
from haiku.raptor.config import AppConfig, Config
from haiku.raptor.embeddings import EmbedderBase, get_embedder
from haiku.raptor.ids import IdGenerator
from haiku.raptor.models import Candidate, TreeNode
from haiku.raptor.retriever import CollapsedTreeRetriever
from haiku.raptor.sources import CandidateSource
from haiku.raptor.summarizer import ClusterSummarizer, Summarizer

logger = logging.getLogger(__name__)


class RaptorRetrieval:
    """Collapsed-tree RAPTOR retrieval.

    Each call embeds the query, fetches candidates, builds a fresh tree of
    cluster summaries on top of them and ranks every node of that tree
    against the query. Nothing is kept between calls.

    Example:
        >>> retrieval = RaptorRetrieval.from_config(my_vector_store)
        >>> results = await retrieval.retrieve("What happened in 1989?")
    """

    def __init__(
        self,
        candidate_source: CandidateSource,
        embedder: EmbedderBase,
        summarizer: Summarizer,
        clustering: ClusteringStrategy | None = None,
        config: AppConfig = Config,
        id_generator: IdGenerator | None = None,
    ):
        self._candidate_source = candidate_source
        self._embedder = embedder
        self._summarizer = summarizer
        self._clustering = clustering or get_clustering(config)
        self._config = config
        self._id_generator = id_generator
        self._retriever = CollapsedTreeRetriever(limit=config.retrieval.limit)

    @classmethod
    def from_config(
        cls,
        candidate_source: CandidateSource,
        config: AppConfig = Config,
    ) -> "RaptorRetrieval":
        """Wire the embedder, summarizer and clustering strategy from configuration."""
        return cls(
            candidate_source,
            embedder=get_embedder(config),
            summarizer=ClusterSummarizer(config),
            clustering=get_clustering(config),
            config=config,
        )

    async def retrieve(self, query: str) -> list[Candidate]:
        """Return candidates and cluster summaries ranked by relevance to the query.

        Any embedder, summarizer or candidate source error aborts the call.
        """
        query_embedding = await self._embedder.embed_query(query)
        candidates = await self._candidate_source.similarity_search(query_embedding)
        if not candidates:
            logger.debug("No candidates found, skipping tree construction")
            return []

        builder = TreeBuilder(
            clustering=self._clustering,
            summarizer=self._summarizer,
            embedder=self._embedder,
            id_generator=self._id_generator,
            max_concurrency=self._config.builder.max_concurrency,
            max_depth=self._config.builder.max_depth,
        )
        forest = await builder.build(
            [TreeNode.from_candidate(candidate) for candidate in candidates]
        )
        return self._retriever.retrieve(forest, query_embedding)
