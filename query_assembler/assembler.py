"""
Fluent SELECT assembler.
Same accumulated state ALWAYS renders to the same SQL and argument list.
"""

from typing import Any, List, Tuple
import logging

from query_assembler.models import (
    Condition,
    Relation,
    CommonTableExpression,
    PlaceholderNumbering
)

logger = logging.getLogger(__name__)


class QueryAssembler:
    """
    Accumulates the parts of a SELECT statement and renders them to
    `$N`-parameterized SQL plus positional arguments.

    Every mutator appends and returns the same instance:

        sql, args = (
            QueryAssembler("users")
            .select("id", "name")
            .where("age", ">", 18)
            .or_where("status", "=", "active")
            .build_query()
        )
    """

    def __init__(self, table_name: str):
        self.table_name = table_name
        self.fields: List[str] = []
        self.conditions: List[Condition] = []
        self.or_conditions: List[Condition] = []
        self.relations: List[Relation] = []
        self.ctes: List[CommonTableExpression] = []

    def __repr__(self) -> str:
        return (
            f"QueryAssembler(table_name={self.table_name!r}, fields={len(self.fields)}, "
            f"conditions={len(self.conditions)}, or_conditions={len(self.or_conditions)}, "
            f"relations={len(self.relations)}, ctes={len(self.ctes)})"
        )

    def select(self, *fields: str) -> "QueryAssembler":
        self.fields.extend(fields)
        return self

    def where(self, field: str, operator: str, value: Any) -> "QueryAssembler":
        self.conditions.append(Condition(field=field, operator=operator, value=value))
        return self

    def or_where(self, field: str, operator: str, value: Any) -> "QueryAssembler":
        self.or_conditions.append(Condition(field=field, operator=operator, value=value))
        return self

    def join(self, table: str, foreign_key: str, primary_key: str) -> "QueryAssembler":
        self.relations.append(
            Relation(table=table, foreign_key=foreign_key, primary_key=primary_key)
        )
        return self

    def add_cte(self, name: str, sub_assembler: "QueryAssembler") -> "QueryAssembler":
        """Attach a named sub-query. It is rendered at build time, not here."""
        self.ctes.append(CommonTableExpression(name=name, sub_assembler=sub_assembler))
        return self

    @property
    def argument_count(self) -> int:
        """Number of arguments this assembler contributes, CTEs included."""
        own = len(self.conditions) + len(self.or_conditions)
        return own + sum(cte.sub_assembler.argument_count for cte in self.ctes)

    def build_query(
        self,
        numbering: PlaceholderNumbering = PlaceholderNumbering.SHARED
    ) -> Tuple[str, List[Any]]:
        """
        Render the statement.
        Returns (sql, args) where `$k` in sql binds args[k-1] under SHARED
        numbering. Never raises; incomplete state renders incomplete SQL.
        """
        numbering = PlaceholderNumbering(numbering)
        sql, args, _ = self._render(1, numbering, [])
        logger.debug(f"Built query on {self.table_name} ({len(args)} args): {sql}")
        return sql, args

    def placeholder_numbers(
        self,
        numbering: PlaceholderNumbering = PlaceholderNumbering.SHARED
    ) -> List[int]:
        """Placeholder numbers the render assigns, in the order they appear in the SQL."""
        placeholders: List[int] = []
        self._render(1, PlaceholderNumbering(numbering), placeholders)
        return placeholders

    def _render(
        self,
        placeholder_index: int,
        numbering: PlaceholderNumbering,
        placeholders: List[int]
    ) -> Tuple[str, List[Any], int]:
        """
        Render starting at `placeholder_index`; return the next free index.
        Every number handed out is appended to `placeholders`.
        """
        parts: List[str] = []
        args: List[Any] = []

        # 1. WITH clause - nested args come before our own
        if self.ctes:
            cte_parts = []
            for cte in self.ctes:
                if numbering == PlaceholderNumbering.SHARED:
                    cte_sql, cte_args, placeholder_index = cte.sub_assembler._render(
                        placeholder_index, numbering, placeholders
                    )
                else:
                    cte_sql, cte_args, _ = cte.sub_assembler._render(1, numbering, placeholders)
                cte_parts.append(f"{cte.name} AS ({cte_sql})")
                args.extend(cte_args)
            parts.append(f"WITH {', '.join(cte_parts)} ")

        # 2. Projection and source
        parts.append(f"SELECT {', '.join(self.fields)} FROM {self.table_name}")

        # 3. Joins, insertion order
        for relation in self.relations:
            parts.append(relation.render(self.table_name))

        # 4. Filters - AND group first, then one parenthesized OR group
        if self.conditions or self.or_conditions:
            where_parts = []
            for condition in self.conditions:
                where_parts.append(condition.render(placeholder_index))
                args.append(condition.value)
                placeholders.append(placeholder_index)
                placeholder_index += 1

            if self.or_conditions:
                or_parts = []
                for condition in self.or_conditions:
                    or_parts.append(condition.render(placeholder_index))
                    args.append(condition.value)
                    placeholders.append(placeholder_index)
                    placeholder_index += 1
                where_parts.append(f"({' OR '.join(or_parts)})")

            parts.append(f" WHERE {' AND '.join(where_parts)}")

        return "".join(parts), args, placeholder_index
