"""
Query assembler package for parameterized SELECT generation.
Pure string assembly - no parsing, no execution, no identifier quoting.
"""

from query_assembler.models import (
    PlaceholderNumbering,
    Condition,
    Relation,
    CommonTableExpression
)

from query_assembler.assembler import QueryAssembler
from query_assembler.validator import AssemblerValidator, KNOWN_OPERATORS
from query_assembler.requests import (
    ConditionSpec,
    JoinSpec,
    CTESpec,
    QueryRequest
)

__all__ = [
    'PlaceholderNumbering',
    'Condition',
    'Relation',
    'CommonTableExpression',
    'QueryAssembler',
    'AssemblerValidator',
    'KNOWN_OPERATORS',
    'ConditionSpec',
    'JoinSpec',
    'CTESpec',
    'QueryRequest'
]

__version__ = "1.0.0"
