from collections.abc import Iterator
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from haiku.raptor.exceptions import DuplicateNodeError

SUMMARY_TYPE = "summary"


class Candidate(BaseModel):
    """A retrieved chunk with its embedding.

    Candidates come from a `CandidateSource` and are also the record type
    returned by retrieval: original chunks are returned as-is, summaries are
    returned as new candidates tagged with `raptor_level` and `raptor_type`
    metadata.
    """

    id: str
    content: str
    embedding: list[float] = []
    metadata: dict[str, Any] = Field(default_factory=dict)


class TreeNode(BaseModel):
    """A node in the abstraction tree.

    Leaves wrap a candidate (`source` set, no children, level 0). Summary
    nodes have children and no source; their level is one above their
    children's. `children` and `parent` hold node ids into a `Forest`.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    content: str
    embedding: list[float]
    level: int = Field(default=0, ge=0)
    children: list[str] = []
    parent: str | None = None
    source: Candidate | None = None

    @model_validator(mode="after")
    def _check_shape(self) -> Self:
        if self.source is not None:
            if self.children:
                raise ValueError(f"Leaf node {self.id} cannot have children")
            if self.level != 0:
                raise ValueError(f"Leaf node {self.id} must be at level 0")
        elif not self.children:
            raise ValueError(f"Node {self.id} needs either a source or children")
        elif self.level < 1:
            raise ValueError(f"Summary node {self.id} must be above level 0")
        return self

    @classmethod
    def from_candidate(cls, candidate: Candidate) -> "TreeNode":
        return cls(
            id=candidate.id,
            content=candidate.content,
            embedding=candidate.embedding,
            level=0,
            source=candidate,
        )

    @property
    def is_leaf(self) -> bool:
        return self.source is not None


class Forest:
    """Arena of tree nodes keyed by id, with ordered roots."""

    def __init__(self) -> None:
        self._nodes: dict[str, TreeNode] = {}
        self._roots: list[str] = []

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def add(self, node: TreeNode) -> TreeNode:
        """Add a node. A summary node adopts its children, which must already exist."""
        if node.id in self._nodes:
            raise DuplicateNodeError(f"Node id already in use: {node.id}")

        for child_id in node.children:
            child = self._nodes.get(child_id)
            if child is None:
                raise KeyError(f"Unknown child node: {child_id}")
            if child.parent is not None:
                raise ValueError(f"Node {child_id} already has a parent")

        self._nodes[node.id] = node
        for child_id in node.children:
            self._nodes[child_id] = self._nodes[child_id].model_copy(
                update={"parent": node.id}
            )
        return node

    def get(self, node_id: str) -> TreeNode:
        return self._nodes[node_id]

    def children_of(self, node: TreeNode) -> list[TreeNode]:
        return [self._nodes[child_id] for child_id in node.children]

    def parent_of(self, node: TreeNode) -> TreeNode | None:
        current = self._nodes[node.id]
        if current.parent is None:
            return None
        return self._nodes[current.parent]

    def set_roots(self, node_ids: list[str]) -> None:
        for node_id in node_ids:
            if node_id not in self._nodes:
                raise KeyError(f"Unknown root node: {node_id}")
            if self._nodes[node_id].parent is not None:
                raise ValueError(f"Node {node_id} has a parent and cannot be a root")
        self._roots = list(node_ids)

    @property
    def roots(self) -> list[TreeNode]:
        return [self._nodes[node_id] for node_id in self._roots]

    @property
    def depth(self) -> int:
        """Highest level present, or -1 for an empty forest."""
        return max((node.level for node in self._nodes.values()), default=-1)

    def walk(self) -> Iterator[TreeNode]:
        """Pre-order traversal of every root in order, children in stored order."""
        stack = list(reversed(self._roots))
        while stack:
            node = self._nodes[stack.pop()]
            yield node
            stack.extend(reversed(node.children))

    def flatten(self) -> list[TreeNode]:
        return list(self.walk())
