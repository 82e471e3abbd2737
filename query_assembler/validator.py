"""
Optional validation layer.
Rendering never fails; this reports what would make the SQL invalid.
"""

from typing import Any, List, Set

from query_assembler.assembler import QueryAssembler
from query_assembler.models import PlaceholderNumbering


KNOWN_OPERATORS = {
    "=", "!=", "<>", "<", ">", "<=", ">=",
    "LIKE", "NOT LIKE", "ILIKE", "NOT ILIKE",
    "IN", "NOT IN", "IS", "IS NOT",
    "@>", "<@", "&&"
}


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


class AssemblerValidator:
    """
    Validates an assembler before it is handed to a driver.
    Checks:
    1. Table name is set
    2. At least one field is projected
    3. Conditions have a field and a known operator
    4. Joins are fully specified
    5. CTE names are set and unique
    6. CTEs do not reference themselves
    7. CTE sub-queries are valid
    8. Placeholders line up with the argument list
    """

    def __init__(self, operators=None):
        self.operators = {op.upper() for op in (operators or KNOWN_OPERATORS)}

    def validate(
        self,
        assembler: QueryAssembler,
        numbering: PlaceholderNumbering = PlaceholderNumbering.SHARED
    ) -> List[str]:
        """
        Validate the assembler.
        Returns list of validation errors, empty list if valid.
        """
        cycle = self._find_cycle(assembler, [assembler], [])
        if cycle:
            names = " -> ".join(cycle + [cycle[0]])
            return [f"CTE cycle detected: {names}"]

        errors = self._validate_structure(assembler)

        # 8. Placeholder alignment over the whole statement
        placeholders = assembler.placeholder_numbers(numbering)
        expected = list(range(1, assembler.argument_count + 1))
        if placeholders != expected:
            errors.append(
                f"Placeholders {self._format_placeholders(placeholders)} do not match "
                f"{len(expected)} argument(s); expected {self._format_placeholders(expected)}"
            )

        return errors

    def is_valid(
        self,
        assembler: QueryAssembler,
        numbering: PlaceholderNumbering = PlaceholderNumbering.SHARED
    ) -> bool:
        return not self.validate(assembler, numbering)

    def _validate_structure(self, assembler: QueryAssembler) -> List[str]:
        errors = []

        # 1. Table
        if _is_blank(assembler.table_name):
            errors.append("Table name is empty")

        # 2. Projection
        if not assembler.fields:
            errors.append(f"No fields selected from '{assembler.table_name}'")
        elif any(_is_blank(f) for f in assembler.fields):
            errors.append(f"Empty field name in projection of '{assembler.table_name}'")

        # 3. Conditions
        for group, conditions in (("AND", assembler.conditions), ("OR", assembler.or_conditions)):
            for condition in conditions:
                if _is_blank(condition.field):
                    errors.append(f"{group} condition has an empty field name")
                operator = condition.operator
                if not isinstance(operator, str) or " ".join(operator.split()).upper() not in self.operators:
                    errors.append(
                        f"Unknown operator '{operator}' on field '{condition.field}'"
                    )

        # 4. Joins
        for relation in assembler.relations:
            if any(_is_blank(v) for v in (relation.table, relation.foreign_key, relation.primary_key)):
                errors.append(
                    f"Join to '{relation.table}' requires table, foreign_key and primary_key"
                )

        # 5. CTE names
        seen: Set[str] = set()
        for cte in assembler.ctes:
            if _is_blank(cte.name):
                errors.append("CTE name is empty")
            elif cte.name in seen:
                errors.append(f"Duplicate CTE name '{cte.name}'")
            else:
                seen.add(cte.name)

        # 7. Nested queries
        for cte in assembler.ctes:
            for error in self._validate_structure(cte.sub_assembler):
                errors.append(f"CTE '{cte.name}': {error}")

        return errors

    def _find_cycle(
        self,
        assembler: QueryAssembler,
        path: List[QueryAssembler],
        names: List[str]
    ) -> List[str]:
        """
        Return the CTE names that form a cycle, or an empty list.
        `names[i]` is the CTE leading from `path[i]` to `path[i + 1]`.
        """
        for cte in assembler.ctes:
            sub = cte.sub_assembler
            for i, node in enumerate(path):
                if node is sub:
                    return names[i:] + [cte.name]

            cycle = self._find_cycle(sub, path + [sub], names + [cte.name])
            if cycle:
                return cycle
        return []

    @staticmethod
    def _format_placeholders(numbers: List[int]) -> str:
        return "[" + ", ".join(f"${n}" for n in numbers) + "]"
