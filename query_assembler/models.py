"""
Query fragment models.
Each fragment is appended once and never changed afterwards.
"""

from typing import Any
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


class PlaceholderNumbering(str, Enum):
    """How $N placeholders are numbered across CTE boundaries."""
    SHARED = "shared"        # one counter for the whole statement
    PER_QUERY = "per_query"  # every nested query restarts at $1


class Condition(BaseModel):
    """A single `<field> <operator> $N` filter."""
    model_config = ConfigDict(frozen=True)

    field: Any = Field(..., description="Column or expression on the left-hand side")
    operator: Any = Field(..., description="Comparison operator, emitted verbatim")
    value: Any = Field(None, description="Bound argument, forwarded untouched")

    def render(self, placeholder_index: int) -> str:
        return f"{self.field} {self.operator} ${placeholder_index}"


class Relation(BaseModel):
    """
    Join of the primary table to `table`.
    Renders as `JOIN table ON primary.primary_key = table.foreign_key`.
    """
    model_config = ConfigDict(frozen=True)

    table: Any = Field(..., description="Table being joined")
    foreign_key: Any = Field(..., description="Column on the joined table")
    primary_key: Any = Field(..., description="Column on the primary table")

    def render(self, primary_table: str) -> str:
        return (
            f" JOIN {self.table} ON {primary_table}.{self.primary_key}"
            f" = {self.table}.{self.foreign_key}"
        )


class CommonTableExpression(BaseModel):
    """
    Named sub-query rendered ahead of the main SELECT.
    The sub-assembler is held by reference and rendered lazily.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: Any = Field(..., description="Name the main query refers to")
    sub_assembler: Any = Field(..., description="QueryAssembler producing the CTE body")
