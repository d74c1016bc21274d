import os
from typing import Literal

from pydantic import BaseModel, Field


class ModelConfig(BaseModel):
    """Configuration for a language model.

    Attributes:
        provider: Model provider (ollama, openai, anthropic, etc.)
        name: Model name/identifier
        enable_thinking: Reasoning effort for gpt-oss on ollama and for openai
            models (true/false/None for default)
        temperature: Sampling temperature (0.0 to 1.0+)
        max_tokens: Maximum tokens to generate
    """

    provider: str = "ollama"
    name: str = "gpt-oss"

    enable_thinking: bool | None = None
    temperature: float | None = None
    max_tokens: int | None = None


class EmbeddingModelConfig(BaseModel):
    """Configuration for an embedding model.

    Attributes:
        provider: Model provider (ollama, openai, vllm)
        name: Model name/identifier
        vector_dim: Vector dimensions produced by the model
        base_url: Optional base URL for OpenAI-compatible servers (vLLM, LM Studio, etc.)
        timeout: HTTP timeout in seconds
    """

    provider: str = "ollama"
    name: str = "qwen3-embedding:4b"
    vector_dim: int = 2560
    base_url: str | None = None
    timeout: int = 60


class EmbeddingsConfig(BaseModel):
    model: EmbeddingModelConfig = Field(default_factory=EmbeddingModelConfig)


class SummarizerConfig(BaseModel):
    model: ModelConfig = Field(
        default_factory=lambda: ModelConfig(
            provider="ollama",
            name="gpt-oss",
            enable_thinking=False,
        )
    )


class SimilarityClusteringConfig(BaseModel):
    threshold: float = 0.7
    max_cluster_size: int = Field(default=8, ge=1)


class CentroidClusteringConfig(BaseModel):
    max_clusters: int = Field(default=10, ge=1)
    max_iterations: int = Field(default=100, ge=1)
    min_cluster_size: int = Field(default=2, ge=1)
    max_cluster_size: int = Field(default=8, ge=1)
    use_dimension_reduction: bool = False
    random_seed: int | None = 42


class ClusteringConfig(BaseModel):
    strategy: Literal["similarity", "centroid"] = "similarity"
    similarity: SimilarityClusteringConfig = Field(
        default_factory=SimilarityClusteringConfig
    )
    centroid: CentroidClusteringConfig = Field(
        default_factory=CentroidClusteringConfig
    )


class BuilderConfig(BaseModel):
    max_concurrency: int = Field(default=1, ge=1)
    max_depth: int | None = Field(default=None, ge=1)


class RetrievalConfig(BaseModel):
    limit: int | None = Field(default=None, ge=1)


class OllamaConfig(BaseModel):
    base_url: str = Field(
        default_factory=lambda: os.environ.get(
            "OLLAMA_BASE_URL", "http://localhost:11434"
        )
    )


class ProvidersConfig(BaseModel):
    ollama: OllamaConfig = Field(default_factory=OllamaConfig)


class AppConfig(BaseModel):
    environment: str = "production"
    embeddings: EmbeddingsConfig = Field(default_factory=EmbeddingsConfig)
    summarizer: SummarizerConfig = Field(default_factory=SummarizerConfig)
    clustering: ClusteringConfig = Field(default_factory=ClusteringConfig)
    builder: BuilderConfig = Field(default_factory=BuilderConfig)
    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
