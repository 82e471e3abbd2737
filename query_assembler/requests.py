"""
Pydantic models for JSON query descriptions.
Callers outside Python describe a query with this structure; it is replayed
onto a QueryAssembler in list order.
"""

from typing import Any, List
from pydantic import BaseModel, Field

from query_assembler.assembler import QueryAssembler


class ConditionSpec(BaseModel):
    """One filter condition."""
    field: str = Field(..., description="Column to filter on")
    operator: str = Field(..., description="SQL comparison operator, e.g. '=', '>', 'LIKE'")
    value: Any = Field(None, description="Value bound to the placeholder")


class JoinSpec(BaseModel):
    """Join of the primary table on primary.primary_key = table.foreign_key."""
    table: str = Field(..., description="Table to join")
    foreign_key: str = Field(..., description="Column on the joined table")
    primary_key: str = Field(..., description="Column on the primary table")


class CTESpec(BaseModel):
    """Named sub-query materialized with WITH ... AS (...)."""
    name: str = Field(..., description="CTE name")
    query: "QueryRequest" = Field(..., description="Sub-query description")


class QueryRequest(BaseModel):
    """
    Structured description of a SELECT statement.

    Example:
    {
        "table": "users",
        "fields": ["id", "name"],
        "where": [{"field": "age", "operator": ">", "value": 18}],
        "or_where": [{"field": "status", "operator": "=", "value": "active"}],
        "joins": [{"table": "orders", "foreign_key": "user_id", "primary_key": "id"}],
        "ctes": []
    }
    """
    table: str = Field(..., description="Primary table")
    fields: List[str] = Field(default_factory=list, description="Projected fields, in order")
    where: List[ConditionSpec] = Field(default_factory=list, description="AND-group conditions")
    or_where: List[ConditionSpec] = Field(default_factory=list, description="OR-group conditions")
    joins: List[JoinSpec] = Field(default_factory=list, description="Join relations")
    ctes: List[CTESpec] = Field(default_factory=list, description="Common table expressions")

    def to_assembler(self) -> QueryAssembler:
        assembler = QueryAssembler(self.table)

        for cte in self.ctes:
            assembler.add_cte(cte.name, cte.query.to_assembler())

        assembler.select(*self.fields)

        for join in self.joins:
            assembler.join(join.table, join.foreign_key, join.primary_key)

        for condition in self.where:
            assembler.where(condition.field, condition.operator, condition.value)

        for condition in self.or_where:
            assembler.or_where(condition.field, condition.operator, condition.value)

        return assembler


CTESpec.model_rebuild()
