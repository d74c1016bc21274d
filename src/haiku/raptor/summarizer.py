from typing import Any, Protocol

from pydantic_ai import Agent

from haiku.raptor.config import AppConfig, Config
from haiku.raptor.prompts import CLUSTER_SUMMARY_PROMPT
from haiku.raptor.utils import get_model


class Summarizer(Protocol):
    async def summarize(self, texts: list[str]) -> str: ...


def join_texts(texts: list[str]) -> str:
    return "\n\n".join(texts).strip()


class ClusterSummarizer:
    """Summarizes clusters of tree node contents with an LLM."""

    def __init__(self, config: AppConfig = Config, model: Any | None = None):
        """Initialize the summarizer.

        Args:
            config: Application configuration
            model: Optional pydantic-ai model (or model name) overriding
                   config.summarizer.model
        """
        self._config = config
        if model is None:
            model = get_model(config.summarizer.model, config)
        self._agent: Agent[None, str] = Agent(
            model=model,
            output_type=str,
            retries=2,
        )

    async def summarize(self, texts: list[str]) -> str:
        """Summarize a cluster of texts.

        Args:
            texts: Contents of the clustered nodes, in cluster order

        Returns:
            A summary of the combined texts

        Raises:
            ValueError: If texts is empty
        """
        if not texts:
            raise ValueError("Cannot summarize empty list of texts")

        prompt = CLUSTER_SUMMARY_PROMPT.format(content=join_texts(texts))
        result = await self._agent.run(prompt)
        return result.output
