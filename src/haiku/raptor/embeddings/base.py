from abc import ABC, abstractmethod


class EmbedderBase(ABC):
    """Base interface for text embedders."""

    vector_dim: int

    @abstractmethod
    async def embed_query(self, text: str) -> list[float]:
        """Embed a search query."""

    @abstractmethod
    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        """Embed documents (chunks or summaries)."""
