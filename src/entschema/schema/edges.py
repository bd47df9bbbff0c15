"""Edge declaration variants.

Every edge is one of five shapes, told apart by ``cardinality`` and ``type``:

- SingleFieldEdge:   this table stores the foreign key in ``field``
- SingleRefEdge:     the inverse table stores the key in ``ref``
- PendingEdges:      multiple edge whose storage is not decided yet
- MultipleFieldEdge: many-to-one collapsed onto the inverse's ``ref`` field
- MultipleRefEdge:   pairs stored in the junction ``table``

Only PendingEdges and an unresolved SingleRefEdge exist before resolution.
"""

from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict

from entschema.core.types import Cardinality, EdgeInfo, EdgeType


class _Edge(BaseModel):
    """Fields shared by all edge variants."""

    model_config = ConfigDict(frozen=True)

    name: str
    to: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to the plain dict read by query and mutation helpers."""
        data = self.model_dump(mode="json", exclude={"inverse_of"})
        return {k: v for k, v in data.items() if v is not None or k == "type"}

    def to_info(self) -> EdgeInfo:
        return EdgeInfo(**self.model_dump(mode="json", exclude={"inverse_of"}))


class SingleFieldEdge(_Edge):
    cardinality: Literal[Cardinality.SINGLE] = Cardinality.SINGLE
    type: Literal[EdgeType.FIELD] = EdgeType.FIELD
    field: str
    unique: bool = False


class SingleRefEdge(_Edge):
    cardinality: Literal[Cardinality.SINGLE] = Cardinality.SINGLE
    type: Literal[EdgeType.REF] = EdgeType.REF
    ref: str | None = None


class PendingEdges(_Edge):
    cardinality: Literal[Cardinality.MULTIPLE] = Cardinality.MULTIPLE
    type: None = None
    inverse: bool = False
    # Name of the edge this one was generated as the inverse of
    inverse_of: str | None = None


class MultipleFieldEdge(_Edge):
    cardinality: Literal[Cardinality.MULTIPLE] = Cardinality.MULTIPLE
    type: Literal[EdgeType.FIELD] = EdgeType.FIELD
    ref: str


class MultipleRefEdge(_Edge):
    cardinality: Literal[Cardinality.MULTIPLE] = Cardinality.MULTIPLE
    type: Literal[EdgeType.REF] = EdgeType.REF
    table: str
    field: str
    ref: str
    symmetric: bool = False
    inverse: bool = False


EdgeConfig = Union[
    SingleFieldEdge, SingleRefEdge, PendingEdges, MultipleFieldEdge, MultipleRefEdge
]


def is_resolved(edge: EdgeConfig) -> bool:
    """Whether the edge's storage is fully known."""
    if isinstance(edge, PendingEdges):
        return False
    if isinstance(edge, SingleRefEdge):
        return edge.ref is not None
    return True
