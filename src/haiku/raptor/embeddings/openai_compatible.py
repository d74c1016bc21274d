import httpx

from haiku.raptor.embeddings.base import EmbedderBase


class Embedder(EmbedderBase):
    """Embedder for OpenAI-compatible `POST /v1/embeddings` servers (Ollama, OpenAI, vLLM)."""

    def __init__(
        self,
        *,
        base_url: str,
        model: str,
        vector_dim: int,
        api_key: str | None = None,
        timeout: int = 60,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        # Accept base_url with or without a trailing /v1.
        cleaned = base_url.rstrip("/")
        if cleaned.endswith("/v1"):
            cleaned = cleaned[: -len("/v1")]
        self.base_url = cleaned
        self.model = model
        self.vector_dim = vector_dim
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    async def embed_query(self, text: str) -> list[float]:
        return (await self._post_embeddings([text]))[0]

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        return await self._post_embeddings(texts)

    async def _post_embeddings(self, inputs: list[str]) -> list[list[float]]:
        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        payload = {"model": self.model, "input": inputs, "encoding_format": "float"}

        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self._transport
        ) as client:
            resp = await client.post(
                f"{self.base_url}/v1/embeddings", json=payload, headers=headers
            )
            resp.raise_for_status()
            data = resp.json()

        items = sorted(data["data"], key=lambda item: item.get("index", 0))
        embeddings = [item["embedding"] for item in items]
        if len(embeddings) != len(inputs):
            raise ValueError(
                f"Expected {len(inputs)} embeddings, got {len(embeddings)}"
            )
        for embedding in embeddings:
            if len(embedding) != self.vector_dim:
                raise ValueError(
                    f"Embedding dimension mismatch: expected {self.vector_dim}, "
                    f"got {len(embedding)}"
                )
        return embeddings
