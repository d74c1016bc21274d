import itertools
from typing import Protocol
from uuid import uuid4


class IdGenerator(Protocol):
    def __call__(self) -> str: ...


class SequentialIdGenerator:
    """Monotonic ids (`summary_1`, `summary_2`, ...), reproducible per instance."""

    def __init__(self, prefix: str = "summary_", start: int = 1):
        self._prefix = prefix
        self._counter = itertools.count(start)

    def __call__(self) -> str:
        return f"{self._prefix}{next(self._counter)}"


def uuid_id_generator() -> str:
    return f"summary_{uuid4().hex}"
