from collections.abc import Sequence

import numpy as np

from haiku.raptor.exceptions import IncompatibleVectorsError


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity between two embeddings.

    Raises:
        IncompatibleVectorsError: If the vectors are empty, differ in
            dimension, or either has zero magnitude.
    """
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)

    if va.ndim != 1 or vb.ndim != 1:
        raise IncompatibleVectorsError("Embeddings must be one-dimensional")
    if va.size == 0 or vb.size == 0:
        raise IncompatibleVectorsError("Cannot compare empty embeddings")
    if va.shape != vb.shape:
        raise IncompatibleVectorsError(
            f"Embedding dimensions differ: {va.size} != {vb.size}"
        )

    norm = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if norm == 0.0:
        raise IncompatibleVectorsError("Cannot compare zero-magnitude embeddings")

    return float(np.dot(va, vb) / norm)
