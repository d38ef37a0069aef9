"""SQLSampler: JDBC-style request sampling over Python DB-API connections."""

from sqlsampler import config, core, driver, exceptions, utils
from sqlsampler.__metadata__ import __version__
from sqlsampler.config import SamplerConfig, get_global_config, set_global_config
from sqlsampler.core.binding import ArgumentBinder
from sqlsampler.core.cache import CacheStats, StatementCache, get_statement_cache
from sqlsampler.core.parameters import ParameterStyle
from sqlsampler.core.result import ResultMaterializer
from sqlsampler.core.types import SQLType, TypeRegistry, get_type_registry
from sqlsampler.driver import CallableStatement, PreparedStatement, ResultSet, Statement
from sqlsampler.driver.dispatch import ExecutionDispatcher, QueryKind, QueryRequest
from sqlsampler.exceptions import (
    ArgumentBindingError,
    ArgumentConversionError,
    ArgumentCountMismatchError,
    InvalidTypeError,
    SQLSamplerError,
    UnsupportedQueryKindError,
)
from sqlsampler.variables import SessionVariables, get_thread_variables

__all__ = (
    "ArgumentBinder",
    "ArgumentBindingError",
    "ArgumentConversionError",
    "ArgumentCountMismatchError",
    "CacheStats",
    "CallableStatement",
    "ExecutionDispatcher",
    "InvalidTypeError",
    "ParameterStyle",
    "PreparedStatement",
    "QueryKind",
    "QueryRequest",
    "ResultMaterializer",
    "ResultSet",
    "SQLSamplerError",
    "SQLType",
    "SamplerConfig",
    "SessionVariables",
    "Statement",
    "StatementCache",
    "TypeRegistry",
    "UnsupportedQueryKindError",
    "__version__",
    "config",
    "core",
    "driver",
    "exceptions",
    "get_global_config",
    "get_statement_cache",
    "get_thread_variables",
    "get_type_registry",
    "set_global_config",
    "utils",
)
