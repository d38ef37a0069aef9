"""Statement handles over DB-API cursors.

A handle owns one cursor of a connection and gives it the verbs a sampler
needs: positional binding by index, output parameters, and iteration over
the results of one execution. Three kinds exist:

- ``Statement``: ad-hoc text, no parameters
- ``PreparedStatement``: fixed text with ``?`` markers, reusable
- ``CallableStatement``: a prepared ``{call proc(?, ...)}`` with output parameters

Update counts follow the JDBC convention: ``-1`` means the current result is
a result set, or there are no more results.
"""

import re
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, Final, Optional

from sqlsampler.core.parameters import ParameterStyle, parse_query
from sqlsampler.exceptions import ArgumentBindingError, SQLSamplerError

if TYPE_CHECKING:
    from sqlsampler.core.parameters import ParsedQuery
    from sqlsampler.protocols import ConnectionProtocol

__all__ = ("NO_MORE_RESULTS", "CallableStatement", "PreparedStatement", "ResultSet", "Statement")

NO_MORE_RESULTS: Final = -1

_CALL_PATTERN: Final = re.compile(
    r"^\s*\{?\s*call\s+(?P<name>[^\s(){};]+)\s*(?:\((?P<arguments>.*)\))?\s*\}?\s*;?\s*$", re.IGNORECASE | re.DOTALL
)


class ResultSet:
    """Rows of the current result of a cursor.

    The cursor stays owned by its statement; closing a result set only stops
    iteration.
    """

    __slots__ = ("_closed", "_cursor", "column_labels")

    def __init__(self, cursor: Any) -> None:
        self._cursor = cursor
        self._closed = False
        self.column_labels: list[str] = [str(column[0]) for column in cursor.description or ()]

    @property
    def column_count(self) -> int:
        return len(self.column_labels)

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> "Iterator[Any]":
        while not self._closed:
            row = self._cursor.fetchone()
            if row is None:
                return
            yield row

    def close(self) -> None:
        self._closed = True


class Statement:
    """A cursor executing ad-hoc query text."""

    __slots__ = ("_connection", "_cursor", "_exhausted")

    def __init__(self, connection: "ConnectionProtocol") -> None:
        self._connection = connection
        self._cursor = connection.cursor()
        self._exhausted = True

    @property
    def connection(self) -> "ConnectionProtocol":
        return self._connection

    @property
    def cursor(self) -> Any:
        return self._cursor

    def _run(self, sql: str, parameters: "Optional[list[Any]]" = None) -> None:
        if parameters is None:
            self._cursor.execute(sql)
        else:
            self._cursor.execute(sql, parameters)
        self._exhausted = False

    def execute_query(self, sql: str) -> ResultSet:
        self._run(sql)
        return ResultSet(self._cursor)

    def execute_update(self, sql: str) -> int:
        self._run(sql)
        return self.get_update_count()

    def get_result_set(self) -> Optional[ResultSet]:
        """The current result as a result set, or None if it is an update count."""
        if self._exhausted or self._cursor.description is None:
            return None
        return ResultSet(self._cursor)

    def get_update_count(self) -> int:
        """Row count of the current result.

        Returns:
            ``NO_MORE_RESULTS`` if the current result is a result set or
            results are exhausted. Drivers reporting an unknown row count for
            a statement give ``0``.
        """
        if self._exhausted or self._cursor.description is not None:
            return NO_MORE_RESULTS
        rowcount = getattr(self._cursor, "rowcount", NO_MORE_RESULTS)
        if rowcount is None or rowcount < 0:
            return 0
        return int(rowcount)

    def get_more_results(self) -> bool:
        """Move to the next result.

        Returns:
            True if the next result is a result set. False if it is an update
            count, or if there are no more results (the update count is then
            ``NO_MORE_RESULTS``).
        """
        nextset = getattr(self._cursor, "nextset", None)
        if nextset is None:
            self._exhausted = True
            return False
        unsupported = getattr(self._connection, "NotSupportedError", None) or ()
        try:
            more = nextset()
        except unsupported:
            more = None
        if not more:
            self._exhausted = True
            return False
        return self._cursor.description is not None

    def close(self) -> None:
        self._exhausted = True
        self._cursor.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(cursor={self._cursor!r})"


class PreparedStatement(Statement):
    """Reusable query text with positional ``?`` markers.

    Parameters are bound by 1-based position and kept until
    ``clear_parameters()``.
    """

    __slots__ = ("_parameters", "_query", "_types")

    def __init__(
        self, connection: "ConnectionProtocol", sql: str, parameter_style: ParameterStyle = ParameterStyle.QMARK
    ) -> None:
        super().__init__(connection)
        self._query: "ParsedQuery" = parse_query(sql, parameter_style)
        self._parameters: dict[int, Any] = {}
        self._types: dict[int, int] = {}

    @property
    def sql(self) -> str:
        return self._query.original_sql

    @property
    def marker_count(self) -> int:
        return self._query.marker_count

    def _check_position(self, position: int) -> None:
        if not 1 <= position <= self._query.marker_count:
            raise ArgumentBindingError(position)

    def set_object(self, position: int, value: Any, type_code: Optional[int] = None) -> None:
        """Bind ``value`` at ``position``.

        Raises:
            ArgumentBindingError: If the query has no marker at ``position``.
        """
        self._check_position(position)
        self._parameters[position] = value
        if type_code is not None:
            self._types[position] = type_code

    def set_null(self, position: int, type_code: int) -> None:
        """Bind SQL NULL of ``type_code`` at ``position``."""
        self.set_object(position, None, type_code)

    def register_out_parameter(self, position: int, type_code: int) -> None:
        msg = f"{self.__class__.__name__} does not support output parameters"
        raise SQLSamplerError(msg)

    def clear_parameters(self) -> None:
        self._parameters.clear()
        self._types.clear()

    def _parameter_value(self, position: int) -> Any:
        if position not in self._parameters:
            raise ArgumentBindingError(position, f"No value specified for parameter {position}")
        return self._parameters[position]

    def _bound_parameters(self) -> "list[Any]":
        return [self._parameter_value(position) for position in range(1, self._query.marker_count + 1)]

    def execute(self) -> bool:
        """Execute with the bound parameters.

        Returns:
            True if the first result is a result set.
        """
        self._run(self._query.sql, self._bound_parameters())
        return self._cursor.description is not None

    def execute_query(self) -> ResultSet:  # type: ignore[override]
        self.execute()
        return ResultSet(self._cursor)

    def execute_update(self) -> int:  # type: ignore[override]
        self.execute()
        return self.get_update_count()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(sql={self.sql!r}, parameters={self._parameters!r})"


class CallableStatement(PreparedStatement):
    """A stored procedure call with input and output parameters.

    ``{call name(?, ?)}`` and ``call name(?, ?)`` run through
    ``cursor.callproc``, whose returned sequence holds the output values.
    Any other text is executed as-is and reports its bound values as output.
    """

    __slots__ = ("_out_types", "_out_values", "_procedure")

    def __init__(
        self, connection: "ConnectionProtocol", sql: str, parameter_style: ParameterStyle = ParameterStyle.QMARK
    ) -> None:
        super().__init__(connection, sql, parameter_style)
        match = _CALL_PATTERN.match(sql)
        self._procedure: Optional[str] = match.group("name") if match else None
        self._out_types: dict[int, int] = {}
        self._out_values: Optional[list[Any]] = None

    @property
    def procedure(self) -> Optional[str]:
        return self._procedure

    def register_out_parameter(self, position: int, type_code: int) -> None:
        """Declare ``position`` as an output parameter of ``type_code``."""
        self._check_position(position)
        self._out_types[position] = type_code

    def clear_parameters(self) -> None:
        super().clear_parameters()
        self._out_types.clear()
        self._out_values = None

    def _parameter_value(self, position: int) -> Any:
        if position not in self._parameters and position in self._out_types:
            return None
        return super()._parameter_value(position)

    def execute(self) -> bool:
        parameters = self._bound_parameters()
        self._out_values = None
        if self._procedure is None:
            self._run(self._query.sql, parameters)
            self._out_values = parameters
            return self._cursor.description is not None
        callproc = getattr(self._cursor, "callproc", None)
        if callproc is None:
            msg = f"Cursor {self._cursor!r} does not support stored procedure calls"
            raise SQLSamplerError(msg)
        returned = callproc(self._procedure, parameters)
        self._exhausted = False
        self._out_values = list(returned) if returned is not None else parameters
        return self._cursor.description is not None

    def get_object(self, position: int) -> Any:
        """Value of the output parameter at ``position`` after execution."""
        if position not in self._out_types:
            msg = f"Parameter {position} is not registered as an output parameter"
            raise SQLSamplerError(msg)
        if self._out_values is None:
            msg = f"No output values available for {self.sql!r}"
            raise SQLSamplerError(msg)
        return self._out_values[position - 1]
