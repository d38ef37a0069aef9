"""Statement handles over DB-API connections."""

from sqlsampler.driver.statement import NO_MORE_RESULTS, CallableStatement, PreparedStatement, ResultSet, Statement

__all__ = ("NO_MORE_RESULTS", "CallableStatement", "PreparedStatement", "ResultSet", "Statement")
