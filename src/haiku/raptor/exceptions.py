class IncompatibleVectorsError(ValueError):
    """Raised when two embeddings cannot be compared."""

    pass


class DuplicateNodeError(ValueError):
    """Raised when a node id is already present in a forest."""

    pass


class InvalidPartitionError(RuntimeError):
    """Raised when a clustering strategy does not partition its input."""

    pass
