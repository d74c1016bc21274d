import os
import tempfile
from collections.abc import Sequence
from pathlib import Path

# Prevent tests from loading user's local haiku.raptor.yaml by setting env var
# to an empty config file BEFORE any haiku.raptor imports.
# This ensures tests always use default config values.
_test_config_dir = tempfile.mkdtemp()
_test_config_path = Path(_test_config_dir) / "test-defaults.yaml"
_test_config_path.write_text("{}")  # Empty YAML = use all defaults
os.environ["HAIKU_RAPTOR_CONFIG_PATH"] = str(_test_config_path)

import pytest  # noqa: E402

from haiku.raptor.clustering.base import ClusteringStrategy  # noqa: E402
from haiku.raptor.embeddings.base import EmbedderBase  # noqa: E402
from haiku.raptor.models import Candidate, TreeNode  # noqa: E402


class FakeEmbedder(EmbedderBase):
    """Returns fixed vectors per text and records every call."""

    def __init__(
        self,
        vectors: dict[str, list[float]] | None = None,
        default: list[float] | None = None,
    ):
        self.vectors = vectors or {}
        self.default = default if default is not None else [0.0, 0.0, 1.0]
        self.vector_dim = len(self.default)
        self.calls: list[str] = []

    async def embed_query(self, text: str) -> list[float]:
        self.calls.append(text)
        return self.vectors.get(text, self.default)

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.calls.extend(texts)
        return [self.vectors.get(text, self.default) for text in texts]


class FakeSummarizer:
    """Returns a fixed summary (or numbered summaries) and records its inputs."""

    def __init__(self, summary: str | None = None):
        self.summary = summary
        self.calls: list[list[str]] = []

    async def summarize(self, texts: list[str]) -> str:
        self.calls.append(list(texts))
        if self.summary is not None:
            return self.summary
        return f"Summary {len(self.calls)}: " + " | ".join(texts)


class FailingSummarizer:
    async def summarize(self, texts: list[str]) -> str:
        raise RuntimeError("LLM unavailable")


class FakeCandidateSource:
    def __init__(self, candidates: list[Candidate]):
        self.candidates = candidates
        self.queries: list[list[float]] = []

    async def similarity_search(
        self, query_embedding: Sequence[float]
    ) -> list[Candidate]:
        self.queries.append(list(query_embedding))
        return list(self.candidates)


class RecordingClustering(ClusteringStrategy):
    """Delegates to a function and records the ids it was asked to cluster."""

    def __init__(self, fn):
        self.fn = fn
        self.calls: list[list[str]] = []

    def cluster(self, nodes: Sequence[TreeNode]) -> list[list[TreeNode]]:
        self.calls.append([node.id for node in nodes])
        return self.fn(list(nodes))


def make_candidate(
    id: str, embedding: list[float], content: str | None = None
) -> Candidate:
    return Candidate(
        id=id,
        content=content if content is not None else f"Content of {id}",
        embedding=embedding,
        metadata={"source": "test"},
    )


def make_leaf(id: str, embedding: list[float], content: str | None = None) -> TreeNode:
    return TreeNode.from_candidate(make_candidate(id, embedding, content))


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def summarizer():
    return FakeSummarizer()
