"""DB-API fakes shared by the unit tests.

A fake connection is scripted with the results each operation produces. A
result is either an update count (``int``) or ``(columns, rows)``.
"""

from typing import Any, Callable, Optional, Union

import pytest

ScriptedResult = Union[int, "tuple[list[str], list[tuple[Any, ...]]]"]


class FakeNotSupportedError(Exception):
    """DB-API ``NotSupportedError`` of the fake driver."""


class FakeCursor:
    def __init__(self, connection: "FakeConnection") -> None:
        self.connection = connection
        self.executed: list[tuple[str, Any]] = []
        self.closed = False
        self.description: Optional[list[tuple[Any, ...]]] = None
        self.rowcount = -1
        self._pending: list[ScriptedResult] = []
        self._rows: list[tuple[Any, ...]] = []

    def execute(self, operation: str, parameters: Any = None) -> None:
        self.executed.append((operation, parameters))
        self._start(operation)

    def _start(self, key: str) -> None:
        error = self.connection.errors.get(key)
        if error is not None:
            raise error
        self._pending = list(self.connection.results.get(key, []))
        self._advance()

    def _advance(self) -> bool:
        if not self._pending:
            self.description = None
            self.rowcount = -1
            self._rows = []
            return False
        result = self._pending.pop(0)
        if isinstance(result, int):
            self.description = None
            self.rowcount = result
            self._rows = []
        else:
            columns, rows = result
            self.description = [(column, None, None, None, None, None, None) for column in columns]
            self.rowcount = -1
            self._rows = list(rows)
        return True

    def fetchone(self) -> Optional[tuple[Any, ...]]:
        return self._rows.pop(0) if self._rows else None

    def nextset(self) -> Optional[bool]:
        return True if self._advance() else None

    def close(self) -> None:
        self.closed = True


class FakeProcedureCursor(FakeCursor):
    def __init__(self, connection: "FakeConnection") -> None:
        super().__init__(connection)
        self.called: list[tuple[str, list[Any]]] = []

    def callproc(self, procname: str, parameters: "list[Any]") -> "list[Any]":
        self.called.append((procname, list(parameters)))
        self._start(procname)
        procedure = self.connection.procedures[procname]
        return procedure(list(parameters))


class FakeConnection:
    NotSupportedError = FakeNotSupportedError

    def __init__(
        self,
        results: "Optional[dict[str, list[ScriptedResult]]]" = None,
        procedures: "Optional[dict[str, Callable[[list[Any]], list[Any]]]]" = None,
        errors: "Optional[dict[str, Exception]]" = None,
    ) -> None:
        self.results = results or {}
        self.procedures = procedures or {}
        self.errors = errors or {}
        self.cursors: list[FakeCursor] = []
        self.commits = 0
        self.rollbacks = 0
        self.closed = False
        self.autocommit = False

    def cursor(self) -> FakeCursor:
        cursor = FakeProcedureCursor(self) if self.procedures else FakeCursor(self)
        self.cursors.append(cursor)
        return cursor

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_connection_factory() -> "type[FakeConnection]":
    return FakeConnection


@pytest.fixture
def fake_connection() -> FakeConnection:
    return FakeConnection()
