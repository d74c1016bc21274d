from collections.abc import Sequence
from typing import Protocol

from haiku.raptor.models import Candidate


class CandidateSource(Protocol):
    """Supplies the initial, pre-ranked candidates for a query embedding."""

    async def similarity_search(
        self, query_embedding: Sequence[float]
    ) -> list[Candidate]: ...
