"""Rendering of execution results into report text and sampler variables.

A result set renders as a header line of column labels followed by one line
per row, fields separated by tabs::

    id\tname
    1\ta
    2\tb

Alongside the text, rows are published as variables. With variable names
``"id,name"`` the first column of row 1 is stored as ``id_1``, the second as
``name_1``, and ``id_#`` holds the row count. A later execution returning
fewer rows removes the slots beyond its own count.

With a result variable configured the rows are also stored as one list of
``{label: value}`` dicts.
"""

from typing import TYPE_CHECKING, Any, Final, Optional

from sqlsampler.core.binding import NO_OUTPUT
from sqlsampler.core.splitter import split_plain
from sqlsampler.core.type_conversion import format_value
from sqlsampler.driver._common import close_quietly
from sqlsampler.driver.statement import NO_MORE_RESULTS, CallableStatement

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlsampler.driver.statement import ResultSet, Statement
    from sqlsampler.protocols import VariableStore

__all__ = ("COUNT_SUFFIX", "OUTPUT_HEADER", "ResultMaterializer", "text_or_none")

UNDERSCORE: Final = "_"
COUNT_SUFFIX: Final = "_#"
OUTPUT_HEADER: Final = "Output variables by position:\n"


def text_or_none(value: Any) -> Optional[str]:
    """Variable form of a value: its report text, or None for SQL NULL."""
    if value is None:
        return None
    return format_value(value)


class ResultMaterializer:
    """Turns results into report text and variable side effects.

    Args:
        variables: Store the variables are written to.
        variable_names: Comma-separated names, one per column (or output
            value); empty names skip their column.
        result_variable: Name of the variable receiving all rows, or empty.
    """

    __slots__ = ("_result_variable", "_variable_names", "_variables")

    def __init__(self, variables: "VariableStore", variable_names: str = "", result_variable: str = "") -> None:
        self._variables = variables
        self._variable_names = [name.strip() for name in split_plain(variable_names)]
        self._result_variable = result_variable.strip()

    @property
    def variable_names(self) -> "list[str]":
        return list(self._variable_names)

    def render(self, result_set: "ResultSet") -> str:
        """Render one result set and publish its rows.

        Returns:
            Header line plus one line per row, each newline-terminated.
        """
        labels = result_set.column_labels
        lines = ["\t".join(labels) + "\n"]

        rows: Optional[list[dict[str, Any]]] = None
        if self._result_variable:
            rows = []
            self._variables.put_object(self._result_variable, rows)

        names = self._variable_names
        row_count = 0
        for row in result_set:
            row_count += 1
            values = list(row)
            if rows is not None:
                rows.append(dict(zip(labels, values)))
            fields = []
            for column, value in enumerate(values, start=1):
                text = format_value(value)
                fields.append(text)
                if column <= len(names) and names[column - 1]:
                    self._variables.put(
                        f"{names[column - 1]}{UNDERSCORE}{row_count}", None if value is None else text
                    )
            lines.append("\t".join(fields) + "\n")

        self._prune_stale_rows(row_count)
        return "".join(lines)

    def _prune_stale_rows(self, row_count: int) -> None:
        """Drop slots left from a previous execution that had more rows, then save the count."""
        for name in self._variable_names:
            if not name:
                continue
            count_name = name + COUNT_SUFFIX
            previous = self._variables.get(count_name)
            if previous is not None:
                for stale in range(row_count + 1, int(previous) + 1):
                    self._variables.remove(f"{name}{UNDERSCORE}{stale}")
            self._variables.put(count_name, str(row_count))

    def render_all(
        self, statement: "Statement", has_result_set: bool, outputs: "Optional[Sequence[int]]" = None
    ) -> str:
        """Render every result of an execution, in the order the database returns them.

        Args:
            statement: The executed handle.
            has_result_set: Whether the first result is a result set.
            outputs: Output descriptors from binding, for callable statements.

        Returns:
            Result sets as rendered by ``render`` plus a blank line,
            ``"<n> updates.\\n"`` for update counts, then the output
            parameters if any.
        """
        parts: list[str] = []
        result = has_result_set
        update_count = 0 if result else statement.get_update_count()
        while True:
            if result:
                result_set = statement.get_result_set()
                try:
                    if result_set is not None:
                        parts.append(self.render(result_set))
                    parts.append("\n")
                finally:
                    close_quietly(result_set, "ResultSet")
            else:
                parts.append(f"{update_count} updates.\n")
            result = statement.get_more_results()
            if not result:
                update_count = statement.get_update_count()
            if not result and update_count == NO_MORE_RESULTS:
                break

        if outputs and isinstance(statement, CallableStatement):
            parts.append(self._render_outputs(statement, outputs))
        return "".join(parts)

    def _render_outputs(self, statement: CallableStatement, outputs: "Sequence[int]") -> str:
        lines = [OUTPUT_HEADER]
        values: list[Any] = []
        for index, output_type in enumerate(outputs):
            if output_type == NO_OUTPUT:
                continue
            position = index + 1
            value = statement.get_object(position)
            values.append(value)
            lines.append(f"[{position}] {format_value(value)}\n")

        for name, value in zip(self._variable_names, values):
            if name:
                self._variables.put(name, text_or_none(value))
        return "".join(lines)
