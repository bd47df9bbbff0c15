"""Schema resolver: decides how every declared edge is stored.

The resolver runs once over all tables. For each edge it looks up the inverse
edge on the target table, then:

- optional single edge + required single edge -> 1:1, the field side is unique
- multiple edges + required single edge       -> 1:many on the single edge's field
- multiple edges + multiple edges             -> many:many through a junction table
- self-referential multiple edges, no inverse -> symmetric junction table

Edges are kept in one flat index keyed by (table, edge name). Resolving a pair
writes both records back into the index, so the other side is skipped when its
own turn comes. Snapshots are never mutated; resolve() returns new ones, with
synthesized junction tables appended after the declared tables.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from entschema.exceptions import (
    AmbiguousInverseEdgeError,
    ConflictingOptionalEdgesError,
    InvalidInverseEdgeTypeError,
    InvalidManyToOneInverseError,
    InverseEdgeAlreadyPairedError,
    JunctionTableConflictError,
    RefFieldMismatchError,
)
from entschema.schema.definition import IndexConfig, TableDefinition, TableSnapshot
from entschema.schema.edges import (
    EdgeConfig,
    MultipleFieldEdge,
    MultipleRefEdge,
    PendingEdges,
    SingleFieldEdge,
    SingleRefEdge,
)
from entschema.values import id_of

logger = logging.getLogger(__name__)

EdgeKey = tuple[str, str]


class SchemaResolver:
    """Resolves the edges of a complete set of tables.

    Resolution is a single global pass because an edge can only be resolved
    by looking at edges declared on another table.
    """

    def __init__(self, tables: Mapping[str, TableSnapshot]) -> None:
        """Initialize the resolver.

        Args:
            tables: Every table of the schema, by name
        """
        self._tables: dict[str, TableSnapshot] = dict(tables)
        self._edges: dict[EdgeKey, EdgeConfig] = {}
        self._edge_names: dict[str, list[str]] = {}
        for table_name, table in self._tables.items():
            self._edge_names[table_name] = list(table.edges)
            for edge_name, edge in table.edges.items():
                self._edges[(table_name, edge_name)] = edge
        self._partners: dict[EdgeKey, EdgeKey] = {}
        self._junctions: dict[str, TableSnapshot] = {}

    def resolve(self) -> dict[str, TableSnapshot]:
        """Resolve every edge and return the resulting tables.

        Returns:
            Declared tables with resolved edges, followed by junction tables

        Raises:
            AmbiguousInverseEdgeError: If an edge has several possible inverses
            ConflictingOptionalEdgesError: If both sides of a 1:1 edge are optional
            InvalidInverseEdgeTypeError: If an optional edge has no required inverse
            RefFieldMismatchError: If an explicit `ref` disagrees with the inverse field
            InvalidManyToOneInverseError: If the single side of a 1:many edge is optional
            InverseEdgeAlreadyPairedError: If two edges claim the same inverse
            JunctionTableConflictError: If a junction table name is already taken
        """
        for key in list(self._edges):
            self._resolve_edge(key)

        resolved: dict[str, TableSnapshot] = {}
        for table_name, table in self._tables.items():
            edges = {name: self._edges[(table_name, name)] for name in self._edge_names[table_name]}
            resolved[table_name] = table.with_edges(edges)
        resolved.update(self._junctions)

        logger.info(
            f"Resolved {len(self._edges)} edges across {len(self._tables)} tables, "
            f"created {len(self._junctions)} junction tables"
        )
        return resolved

    def _edges_of(self, table_name: str) -> list[EdgeConfig]:
        return [self._edges[(table_name, name)] for name in self._edge_names[table_name]]

    def _resolve_edge(self, key: EdgeKey) -> None:
        table_name, _ = key
        edge = self._edges[key]
        if edge.to not in self._tables:
            logger.warning(
                f"Edge '{edge.name}' in table '{table_name}' points at unknown table "
                f"'{edge.to}', it is left as declared"
            )
            return

        inverse = self._find_inverse(table_name, edge)
        if isinstance(edge, SingleRefEdge):
            self._resolve_optional_single(table_name, edge, inverse)
        elif isinstance(edge, PendingEdges):
            self._resolve_multiple(table_name, edge, inverse)

    def _find_inverse(self, table_name: str, edge: EdgeConfig) -> EdgeConfig | None:
        is_self_directed = edge.to == table_name
        candidates = [
            candidate
            for candidate in self._edges_of(edge.to)
            if candidate.to == table_name
            and candidate.name != edge.name
            and (not is_self_directed or _is_designated_pair(edge, candidate))
        ]
        if len(candidates) > 1:
            raise AmbiguousInverseEdgeError(table_name, edge.name, [c.name for c in candidates])
        return candidates[0] if candidates else None

    def _pair(self, key: EdgeKey, inverse_key: EdgeKey) -> None:
        """Record that two edges are each other's inverse."""
        for this, that in ((key, inverse_key), (inverse_key, key)):
            partner = self._partners.get(this)
            if partner is not None and partner != that:
                raise InverseEdgeAlreadyPairedError(
                    table_name=that[0],
                    edge_name=that[1],
                    other_table=this[0],
                    other_edge=this[1],
                    paired_with=f"edge '{partner[1]}' in table '{partner[0]}'",
                )
        self._partners[key] = inverse_key
        self._partners[inverse_key] = key

    def _resolve_optional_single(
        self, table_name: str, edge: SingleRefEdge, inverse: EdgeConfig | None
    ) -> None:
        other_table = edge.to
        if isinstance(inverse, SingleRefEdge):
            raise ConflictingOptionalEdgesError(table_name, edge.name, other_table, inverse.name)
        if not isinstance(inverse, SingleFieldEdge):
            raise InvalidInverseEdgeTypeError(
                table_name, edge.name, other_table, inverse.name if inverse else None
            )
        if edge.ref is not None and edge.ref != inverse.field:
            raise RefFieldMismatchError(
                table_name, edge.name, edge.ref, other_table, inverse.name, inverse.field
            )

        self._pair((table_name, edge.name), (other_table, inverse.name))
        self._edges[(table_name, edge.name)] = edge.model_copy(update={"ref": inverse.field})
        # The field side is written as many:1 but its optional partner makes it 1:1
        self._edges[(other_table, inverse.name)] = inverse.model_copy(update={"unique": True})
        logger.debug(
            f"Resolved 1:1 edge '{edge.name}' in '{table_name}' via "
            f"'{other_table}.{inverse.field}'"
        )

    def _resolve_multiple(
        self, table_name: str, edge: PendingEdges, inverse: EdgeConfig | None
    ) -> None:
        other_table = edge.to
        key = (table_name, edge.name)

        if isinstance(inverse, SingleRefEdge):
            raise InvalidManyToOneInverseError(table_name, edge.name, other_table, inverse.name)
        if isinstance(inverse, SingleFieldEdge):
            self._pair(key, (other_table, inverse.name))
            self._edges[key] = MultipleFieldEdge(name=edge.name, to=other_table, ref=inverse.field)
            logger.debug(
                f"Resolved 1:many edge '{edge.name}' in '{table_name}' via "
                f"'{other_table}.{inverse.field}'"
            )
            return
        if isinstance(inverse, (MultipleFieldEdge, MultipleRefEdge)):
            partner = self._partners.get((other_table, inverse.name))
            if partner is not None:
                paired_with = f"edge '{partner[1]}' in table '{partner[0]}'"
            elif isinstance(inverse, MultipleRefEdge):
                paired_with = f"junction table '{inverse.table}'"
            else:
                paired_with = f"field '{inverse.ref}'"
            raise InverseEdgeAlreadyPairedError(
                table_name, edge.name, other_table, inverse.name, paired_with
            )
        if inverse is None and other_table != table_name:
            logger.warning(
                f"Edge '{edge.name}' in table '{table_name}' has no inverse edge in table "
                f"'{other_table}', its storage is left undecided"
            )
            return

        # The edge named in edges(..., inverse=...) always plays the forward role
        if isinstance(inverse, PendingEdges) and edge.inverse and edge.inverse_of == inverse.name:
            edge, inverse = inverse, edge
        self._create_junction(table_name, other_table, edge, inverse)

    def _create_junction(
        self,
        table_name: str,
        other_table: str,
        edge: PendingEdges,
        inverse: PendingEdges | None,
    ) -> None:
        if inverse is None:
            junction = f"{table_name}_{edge.name}"
        elif inverse.name != table_name:
            junction = f"{table_name}_{inverse.name}_to_{edge.name}"
        else:
            junction = f"{inverse.name}_to_{edge.name}"

        if inverse is None:
            forward_id, inverse_id = "aId", "bId"
        elif table_name == other_table:
            forward_id, inverse_id = f"{inverse.name}Id", f"{edge.name}Id"
        else:
            forward_id, inverse_id = f"{table_name}Id", f"{other_table}Id"

        if junction in self._tables or junction in self._junctions:
            raise JunctionTableConflictError(junction, table_name, edge.name)

        # Each compound index also serves lookups on its leading field alone
        self._junctions[junction] = TableSnapshot(
            document_schema={forward_id: id_of(table_name), inverse_id: id_of(other_table)},
            indexes=(
                IndexConfig(name=forward_id, fields=(forward_id, inverse_id)),
                IndexConfig(name=inverse_id, fields=(inverse_id, forward_id)),
            ),
            is_junction=True,
        )

        self._edges[(table_name, edge.name)] = MultipleRefEdge(
            name=edge.name,
            to=other_table,
            table=junction,
            field=forward_id,
            ref=inverse_id,
            symmetric=inverse is None,
            inverse=edge.inverse,
        )
        if inverse is not None:
            self._pair((table_name, edge.name), (other_table, inverse.name))
            self._edges[(other_table, inverse.name)] = MultipleRefEdge(
                name=inverse.name,
                to=table_name,
                table=junction,
                field=inverse_id,
                ref=forward_id,
                inverse=inverse.inverse,
            )
        logger.debug(f"Created junction table '{junction}' for edge '{edge.name}' in '{table_name}'")


def _is_designated_pair(edge: EdgeConfig, candidate: EdgeConfig) -> bool:
    """Whether two self-referential edges were declared as each other's inverse."""
    if not isinstance(candidate, PendingEdges):
        return False
    if candidate.inverse and candidate.inverse_of == edge.name:
        return True
    return isinstance(edge, PendingEdges) and edge.inverse_of == candidate.name


def resolve_edges(
    tables: Mapping[str, TableDefinition | TableSnapshot],
) -> dict[str, TableSnapshot]:
    """Snapshot the given tables and resolve their edges.

    Resolving an already resolved mapping returns an equal mapping.
    """
    snapshots = {
        name: table.snapshot() if isinstance(table, TableDefinition) else table
        for name, table in tables.items()
    }
    return SchemaResolver(snapshots).resolve()
