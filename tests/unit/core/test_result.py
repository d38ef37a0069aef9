"""Unit tests for result rendering and variable publication."""

from typing import Any

import pytest

from sqlsampler.core.result import COUNT_SUFFIX, OUTPUT_HEADER, ResultMaterializer, text_or_none
from sqlsampler.driver.statement import CallableStatement, PreparedStatement, Statement
from sqlsampler.variables import SessionVariables


def _result_set(connection: Any, columns: "list[str]", rows: "list[tuple[Any, ...]]") -> Any:
    connection.results["SELECT"] = [(columns, rows)]
    return Statement(connection).execute_query("SELECT")


def test_render_report(fake_connection) -> None:
    result_set = _result_set(fake_connection, ["id", "name"], [(1, "a"), (2, "b")])

    report = ResultMaterializer(SessionVariables()).render(result_set)

    assert report == "id\tname\n1\ta\n2\tb\n"


@pytest.mark.parametrize(("column_count", "row_count"), [(1, 0), (1, 3), (3, 1), (4, 7)])
def test_render_shape(fake_connection, column_count: int, row_count: int) -> None:
    columns = [f"c{index}" for index in range(column_count)]
    rows = [tuple(f"v{row}{column}" for column in range(column_count)) for row in range(row_count)]
    result_set = _result_set(fake_connection, columns, rows)

    lines = ResultMaterializer(SessionVariables()).render(result_set).splitlines()

    assert len(lines) == row_count + 1
    assert all(len(line.split("\t")) == column_count for line in lines)


def test_render_nulls_and_booleans(fake_connection) -> None:
    result_set = _result_set(fake_connection, ["a", "b"], [(None, True)])

    assert ResultMaterializer(SessionVariables()).render(result_set) == "a\tb\nnull\ttrue\n"


def test_render_publishes_row_variables(fake_connection) -> None:
    variables = SessionVariables()
    result_set = _result_set(fake_connection, ["id", "name", "extra"], [(1, "a", "x"), (2, None, "y")])

    ResultMaterializer(variables, "id,,extra,unused").render(result_set)

    assert variables.get("id_1") == "1"
    assert variables.get("id_2") == "2"
    assert variables.get("extra_2") == "y"
    assert "name_1" not in variables
    assert variables.get("id" + COUNT_SUFFIX) == "2"
    assert variables.get("extra_#") == "2"
    assert variables.get("unused_#") == "2"
    assert "_1" not in variables


def test_render_null_value_is_recorded_without_text(fake_connection) -> None:
    variables = SessionVariables()
    result_set = _result_set(fake_connection, ["a"], [(None,)])

    ResultMaterializer(variables, "a").render(result_set)

    assert "a_1" in variables
    assert variables.get("a_1") is None


def test_render_prunes_stale_row_variables(fake_connection) -> None:
    variables = SessionVariables()
    materializer = ResultMaterializer(variables, "id")

    materializer.render(_result_set(fake_connection, ["id"], [(1,), (2,), (3,), (4,)]))
    materializer.render(_result_set(fake_connection, ["id"], [(9,)]))

    assert variables.get("id_1") == "9"
    for stale in (2, 3, 4):
        assert f"id_{stale}" not in variables
    assert variables.get("id_#") == "1"


def test_render_prunes_everything_on_empty_result(fake_connection) -> None:
    variables = SessionVariables()
    materializer = ResultMaterializer(variables, "id")

    materializer.render(_result_set(fake_connection, ["id"], [(1,), (2,)]))
    materializer.render(_result_set(fake_connection, ["id"], []))

    assert "id_1" not in variables
    assert "id_2" not in variables
    assert variables.get("id_#") == "0"


def test_render_result_variable(fake_connection) -> None:
    variables = SessionVariables()
    result_set = _result_set(fake_connection, ["id", "name"], [(1, "a"), (2, None)])

    ResultMaterializer(variables, result_variable="rows").render(result_set)

    assert variables.get_object("rows") == [{"id": 1, "name": "a"}, {"id": 2, "name": None}]


def test_render_result_variable_empty_result(fake_connection) -> None:
    variables = SessionVariables()

    ResultMaterializer(variables, result_variable="rows").render(_result_set(fake_connection, ["id"], []))

    assert variables.get_object("rows") == []


def test_render_all_update_count(fake_connection) -> None:
    fake_connection.results["UPDATE t SET a = ?"] = [3]
    statement = PreparedStatement(fake_connection, "UPDATE t SET a = ?")
    statement.set_object(1, 1)
    statement.execute_update()

    assert ResultMaterializer(SessionVariables()).render_all(statement, False) == "3 updates.\n"


def test_render_all_mixed_results(fake_connection) -> None:
    fake_connection.results["BATCH"] = [(["a"], [(1,)]), 2, (["b"], [(True,)]), 0]
    statement = PreparedStatement(fake_connection, "BATCH")

    has_result_set = statement.execute()
    report = ResultMaterializer(SessionVariables()).render_all(statement, has_result_set)

    assert report == "a\n1\n\n2 updates.\nb\ntrue\n\n0 updates.\n"


def test_render_all_output_parameters(fake_connection_factory) -> None:
    connection = fake_connection_factory(procedures={"add": lambda params: [params[0], params[0] + 1, None]})
    variables = SessionVariables()
    statement = CallableStatement(connection, "{call add(?, ?, ?)}")
    statement.set_object(1, 41)
    statement.register_out_parameter(2, 4)
    statement.register_out_parameter(3, 12)

    has_result_set = statement.execute()
    report = ResultMaterializer(variables, "sum,missing").render_all(statement, has_result_set, [0, 4, 12])

    assert report == "0 updates.\n" + OUTPUT_HEADER + "[2] 42\n[3] null\n"
    assert variables.get("sum") == "42"
    assert "missing" in variables
    assert variables.get("missing") is None


def test_text_or_none() -> None:
    assert text_or_none(None) is None
    assert text_or_none(False) == "false"
    assert text_or_none(b"x") == "x"
