"""Execution of one sampler request.

The query type selects the path:

- Select / Update: ad-hoc statement, closed afterwards
- Prepared Select / Prepared Update / Callable: cached handle with bound arguments
- Commit / Rollback / AutoCommit(false) / AutoCommit(true): connection pass-through

Every path returns the report encoded as UTF-8.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Final, Optional, Union

from sqlsampler.config import SamplerConfig, get_global_config
from sqlsampler.core.binding import ArgumentBinder
from sqlsampler.core.cache import StatementCache, get_statement_cache
from sqlsampler.core.result import ResultMaterializer
from sqlsampler.core.type_conversion import ENCODING
from sqlsampler.driver._common import close_quietly
from sqlsampler.driver.statement import Statement
from sqlsampler.exceptions import UnsupportedQueryKindError
from sqlsampler.utils.logging import correlation_scope, get_logger, log_with_context

if TYPE_CHECKING:
    from sqlsampler.protocols import ConnectionProtocol, VariableStore

__all__ = ("ExecutionDispatcher", "QueryKind", "QueryRequest")

logger = get_logger("sqlsampler.driver.dispatch")

_LOG_QUERY_LIMIT: Final = 200


class QueryKind(str, Enum):
    """Query types. The values are persisted in test plans and must not change."""

    SELECT = "Select Statement"
    UPDATE = "Update Statement"
    CALLABLE = "Callable Statement"
    PREPARED_SELECT = "Prepared Select Statement"
    PREPARED_UPDATE = "Prepared Update Statement"
    COMMIT = "Commit"
    ROLLBACK = "Rollback"
    AUTOCOMMIT_FALSE = "AutoCommit(false)"
    AUTOCOMMIT_TRUE = "AutoCommit(true)"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: "Union[str, QueryKind]") -> "QueryKind":
        """Look up a query kind by its label.

        Raises:
            UnsupportedQueryKindError: If the label is unknown.
        """
        try:
            return cls(value)
        except ValueError as e:
            raise UnsupportedQueryKindError(value) from e


@dataclass(frozen=True)
class QueryRequest:
    """Settings of one sampler."""

    query: str = ""
    query_type: "Union[str, QueryKind]" = QueryKind.SELECT
    query_arguments: str = ""
    query_arguments_types: str = ""
    variable_names: str = ""
    result_variable: str = ""


class ExecutionDispatcher:
    """Runs sampler requests against DB-API connections.

    Holds no per-request state; prepared statements live in the shared
    statement cache.

    Args:
        config: Sampler settings, the global configuration by default.
        statement_cache: Cache of prepared statements, the process-wide one by default.
    """

    __slots__ = ("_binder", "_cache", "_config")

    def __init__(
        self, config: Optional[SamplerConfig] = None, statement_cache: Optional[StatementCache] = None
    ) -> None:
        self._config = config if config is not None else get_global_config()
        self._cache = statement_cache if statement_cache is not None else get_statement_cache()
        self._binder = ArgumentBinder(self._config.null_marker)

    @property
    def config(self) -> SamplerConfig:
        return self._config

    @property
    def statement_cache(self) -> StatementCache:
        return self._cache

    def execute(
        self, connection: "ConnectionProtocol", request: QueryRequest, variables: "VariableStore"
    ) -> bytes:
        """Execute ``request`` on ``connection``.

        Args:
            connection: DB-API connection, used by the calling thread only.
            request: What to execute.
            variables: Store receiving the result variables.

        Raises:
            UnsupportedQueryKindError: If the query type is unknown.

        Returns:
            The report, UTF-8 encoded.
        """
        kind = QueryKind.parse(request.query_type)
        with correlation_scope():
            log_with_context(
                logger, logging.DEBUG, "executing query", query_type=kind.value, query=request.query[:_LOG_QUERY_LIMIT]
            )
            return self._dispatch(kind, connection, request, variables).encode(ENCODING)

    def _dispatch(
        self,
        kind: QueryKind,
        connection: "ConnectionProtocol",
        request: QueryRequest,
        variables: "VariableStore",
    ) -> str:
        materializer = ResultMaterializer(variables, request.variable_names, request.result_variable)
        if kind is QueryKind.SELECT:
            return self._execute_select(connection, request, materializer)
        if kind is QueryKind.UPDATE:
            return self._execute_update(connection, request)
        if kind is QueryKind.CALLABLE:
            return self._execute_callable(connection, request, materializer)
        if kind is QueryKind.PREPARED_SELECT:
            return self._execute_prepared_select(connection, request, materializer)
        if kind is QueryKind.PREPARED_UPDATE:
            return self._execute_prepared_update(connection, request, materializer)
        if kind is QueryKind.ROLLBACK:
            connection.rollback()
        elif kind is QueryKind.COMMIT:
            connection.commit()
        elif kind is QueryKind.AUTOCOMMIT_FALSE:
            set_autocommit(connection, False)
        elif kind is QueryKind.AUTOCOMMIT_TRUE:
            set_autocommit(connection, True)
        return kind.value

    def _execute_select(
        self, connection: "ConnectionProtocol", request: QueryRequest, materializer: ResultMaterializer
    ) -> str:
        statement = Statement(connection)
        try:
            result_set = statement.execute_query(request.query)
            try:
                return materializer.render(result_set)
            finally:
                close_quietly(result_set, "ResultSet")
        finally:
            close_quietly(statement)

    def _execute_update(self, connection: "ConnectionProtocol", request: QueryRequest) -> str:
        statement = Statement(connection)
        try:
            update_count = statement.execute_update(request.query)
            return f"{update_count} updates"
        finally:
            close_quietly(statement)

    def _execute_callable(
        self, connection: "ConnectionProtocol", request: QueryRequest, materializer: ResultMaterializer
    ) -> str:
        statement = self._cache.acquire(connection, request.query, callable_=True)
        outputs = self._binder.bind(statement, request.query_arguments, request.query_arguments_types)
        has_result_set = statement.execute()
        # a callable statement can return several result sets and update counts
        return materializer.render_all(statement, has_result_set, outputs)

    def _execute_prepared_select(
        self, connection: "ConnectionProtocol", request: QueryRequest, materializer: ResultMaterializer
    ) -> str:
        statement = self._cache.acquire(connection, request.query)
        self._binder.bind(statement, request.query_arguments, request.query_arguments_types)
        logger.debug("Executing %r", statement)
        result_set = statement.execute_query()
        try:
            return materializer.render(result_set)
        finally:
            close_quietly(result_set, "ResultSet")

    def _execute_prepared_update(
        self, connection: "ConnectionProtocol", request: QueryRequest, materializer: ResultMaterializer
    ) -> str:
        statement = self._cache.acquire(connection, request.query)
        self._binder.bind(statement, request.query_arguments, request.query_arguments_types)
        statement.execute_update()
        return materializer.render_all(statement, False)

    def test_started(self) -> None:
        """Hook for the start of a test run."""
        logger.debug("Test run started")

    def test_ended(self) -> None:
        """Close every cached prepared statement at the end of a test run."""
        self._cache.flush_all()
        logger.debug("Test run ended, statement cache flushed")


def set_autocommit(connection: "ConnectionProtocol", enabled: bool) -> None:
    """Switch autocommit on ``connection``.

    Drivers without an ``autocommit`` attribute, such as sqlite3 before
    Python 3.12, are switched through ``isolation_level``: ``None`` commits
    every statement, an empty string opens implicit transactions.
    """
    if hasattr(connection, "autocommit"):
        connection.autocommit = enabled  # type: ignore[attr-defined]
        return
    connection.isolation_level = None if enabled else ""  # type: ignore[attr-defined]
