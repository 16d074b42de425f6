"""
Typed, partition-aware queries over the document store.

``Query`` is an immutable description of a container query: restrictions
(AND-ed together), optional ordering, offset/limit and an optional single
field projection. Stores either translate it to their native query
language or materialize candidate documents and call ``Query.apply``.

The ``query_by_*`` functions are the only place queries for a document
kind are started. They always restrict ``type`` to the kind's concrete
variants and know which field carries each kind's partition key, so a
query can't silently lose its partition restriction or miss a variant
added to the registry later.
"""

from typing import (
    Any,
    Iterable,
    List,
    Literal,
    Mapping,
    Optional,
    Sequence,
    Tuple,
)

from pydantic import BaseModel, ConfigDict

from projectideas.domain.kinds import (
    DocumentKind,
    partition_key_field_of,
    type_names,
)

Operator = Literal["eq", "in", "array_contains", "any"]


class Restriction(BaseModel):
    """A single predicate on a stored document."""

    model_config = ConfigDict(frozen=True)

    operator: Operator
    field_name: Optional[str] = None
    value: Any = None
    partial: bool = False
    clauses: Tuple["Restriction", ...] = ()

    def matches(self, document: Mapping[str, Any]) -> bool:
        if self.operator == "any":
            return any(clause.matches(document) for clause in self.clauses)

        assert self.field_name is not None
        actual = document.get(self.field_name)
        if self.operator == "eq":
            return actual == self.value
        if self.operator == "in":
            return actual in self.value
        # array_contains
        if not isinstance(actual, list):
            return False
        if self.partial and isinstance(self.value, Mapping):
            return any(
                isinstance(element, Mapping)
                and all(element.get(k) == v for k, v in self.value.items())
                for element in actual
            )
        return self.value in actual

    def describe(self) -> str:
        if self.operator == "any":
            return (
                "(" + " OR ".join(c.describe() for c in self.clauses) + ")"
            )
        if self.operator == "eq":
            return f"c.{self.field_name} = {self.value!r}"
        if self.operator == "in":
            values = ", ".join(repr(v) for v in self.value)
            return f"c.{self.field_name} IN ({values})"
        return (
            f"ARRAY_CONTAINS(c.{self.field_name}, {self.value!r}, "
            f"{str(self.partial).lower()})"
        )


Restriction.model_rebuild()


def eq(field_name: str, value: Any) -> Restriction:
    return Restriction(operator="eq", field_name=field_name, value=value)


def in_(field_name: str, values: Iterable[Any]) -> Restriction:
    return Restriction(
        operator="in", field_name=field_name, value=tuple(values)
    )


def array_contains(
    field_name: str, value: Any, partial: bool = False
) -> Restriction:
    return Restriction(
        operator="array_contains",
        field_name=field_name,
        value=value,
        partial=partial,
    )


def any_of(*clauses: Restriction) -> Restriction:
    return Restriction(operator="any", clauses=tuple(clauses))


class Query(BaseModel):
    """Immutable query builder; every method returns a new query."""

    model_config = ConfigDict(frozen=True)

    restrictions: Tuple[Restriction, ...] = ()
    order_field: Optional[str] = None
    descending: bool = False
    offset: Optional[int] = None
    limit: Optional[int] = None
    value_field: Optional[str] = None

    def where(self, *restrictions: Restriction) -> "Query":
        return self.model_copy(
            update={"restrictions": self.restrictions + tuple(restrictions)}
        )

    def where_eq(self, field_name: str, value: Any) -> "Query":
        return self.where(eq(field_name, value))

    def where_in(self, field_name: str, values: Iterable[Any]) -> "Query":
        return self.where(in_(field_name, values))

    def where_array_contains(
        self, field_name: str, value: Any, partial: bool = False
    ) -> "Query":
        return self.where(array_contains(field_name, value, partial))

    def where_any(self, *clauses: Restriction) -> "Query":
        return self.where(any_of(*clauses))

    def order_by(self, field_name: str, descending: bool = False) -> "Query":
        return self.model_copy(
            update={"order_field": field_name, "descending": descending}
        )

    def offset_and_limit(self, offset: int, limit: int) -> "Query":
        if offset < 0 or limit < 0:
            raise ValueError("Offset and limit must not be negative")
        return self.model_copy(update={"offset": offset, "limit": limit})

    def value_of(self, field_name: str) -> "Query":
        """Project every result to the value of a single field."""
        return self.model_copy(update={"value_field": field_name})

    def unpaged(self) -> "Query":
        return self.model_copy(update={"offset": None, "limit": None})

    def partition_key_values(
        self, partition_field: str
    ) -> Optional[List[Any]]:
        """Partition key values this query is restricted to.

        Returns None when the query is not restricted to a known set of
        partitions and has to scan the whole container.
        """
        values: Optional[List[Any]] = None
        for restriction in self.restrictions:
            if restriction.field_name != partition_field:
                continue
            if restriction.operator == "eq":
                allowed = [restriction.value]
            elif restriction.operator == "in":
                allowed = list(restriction.value)
            else:
                continue
            values = (
                allowed
                if values is None
                else [v for v in values if v in allowed]
            )
        return values

    def matches(self, document: Mapping[str, Any]) -> bool:
        return all(r.matches(document) for r in self.restrictions)

    def apply(self, documents: Iterable[Mapping[str, Any]]) -> List[Any]:
        """Evaluate the query against materialized documents."""
        results: Sequence[Mapping[str, Any]] = [
            d for d in documents if self.matches(d)
        ]
        if self.order_field is not None:
            order_field = self.order_field
            results = sorted(
                results,
                key=lambda d: (
                    d.get(order_field) is not None,
                    d.get(order_field),
                ),
                reverse=self.descending,
            )
        start = self.offset or 0
        end = None if self.limit is None else start + self.limit
        page = list(results[start:end])
        if self.value_field is not None:
            return [d.get(self.value_field) for d in page]
        return page

    def describe(self) -> str:
        selection = (
            f"VALUE c.{self.value_field}" if self.value_field else "*"
        )
        text = f"SELECT {selection} FROM c"
        if self.restrictions:
            text += " WHERE " + " AND ".join(
                r.describe() for r in self.restrictions
            )
        if self.order_field:
            direction = "DESC" if self.descending else "ASC"
            text += f" ORDER BY c.{self.order_field} {direction}"
        if self.limit is not None:
            text += f" OFFSET {self.offset or 0} LIMIT {self.limit}"
        return text


def query_by_type(kind: DocumentKind) -> Query:
    return Query().where_in("type", type_names(kind))


def query_by_id(item_id: str, kind: DocumentKind) -> Query:
    return query_by_type(kind).where_eq("id", item_id)


def query_by_partition_key(partition_key: str, kind: DocumentKind) -> Query:
    return query_by_type(kind).where_eq(
        partition_key_field_of(kind), partition_key
    )


def query_by_id_and_partition_key(
    item_id: str, partition_key: str, kind: DocumentKind
) -> Query:
    return query_by_type(kind).where(
        eq("id", item_id), eq(partition_key_field_of(kind), partition_key)
    )


def query_by_partition_key_list(
    partition_keys: Iterable[str], kind: DocumentKind
) -> Query:
    return query_by_type(kind).where_in(
        partition_key_field_of(kind), partition_keys
    )
