import os

from haiku.raptor.config import AppConfig, Config
from haiku.raptor.embeddings.base import EmbedderBase
from haiku.raptor.embeddings.openai_compatible import Embedder

__all__ = ["EmbedderBase", "Embedder", "get_embedder"]


def get_embedder(config: AppConfig = Config) -> EmbedderBase:
    """
    Factory function to get the appropriate embedder based on the configuration.

    Args:
        config: Configuration to use. Defaults to global Config.

    Returns:
        An embedder instance configured according to the config.
    """
    embedding_model = config.embeddings.model

    if embedding_model.provider == "ollama":
        return Embedder(
            base_url=embedding_model.base_url or config.providers.ollama.base_url,
            model=embedding_model.name,
            vector_dim=embedding_model.vector_dim,
            timeout=embedding_model.timeout,
        )

    if embedding_model.provider == "openai":
        return Embedder(
            base_url=embedding_model.base_url or "https://api.openai.com",
            model=embedding_model.name,
            vector_dim=embedding_model.vector_dim,
            api_key=os.environ.get("OPENAI_API_KEY"),
            timeout=embedding_model.timeout,
        )

    if embedding_model.provider == "vllm":
        if not embedding_model.base_url:
            raise ValueError("vLLM embeddings require embeddings.model.base_url")
        return Embedder(
            base_url=embedding_model.base_url,
            model=embedding_model.name,
            vector_dim=embedding_model.vector_dim,
            timeout=embedding_model.timeout,
        )

    raise ValueError(f"Unsupported embedding provider: {embedding_model.provider}")
