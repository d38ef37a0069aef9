import sqlite3
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from click import Group

__all__ = ("get_sqlsampler_group",)


def get_sqlsampler_group() -> "Group":
    """Get the SQLSampler CLI group.

    Raises:
        MissingDependencyError: If the `cli` extra is not installed.

    Returns:
        The SQLSampler CLI group.
    """
    from sqlsampler.exceptions import MissingDependencyError

    try:
        import rich_click as click
    except ImportError:
        try:
            import click  # type: ignore[no-redef]
        except ImportError as e:
            raise MissingDependencyError(package="click", install_package="cli") from e
    try:
        from rich import get_console
    except ImportError as e:
        raise MissingDependencyError(package="rich", install_package="cli") from e

    from sqlsampler.driver.dispatch import QueryKind

    console = get_console()

    @click.group(name="sqlsampler")
    @click.option(
        "--log-level",
        help="Logging level of the sampler loggers.",
        type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
        default="WARNING",
        show_default=True,
    )
    @click.pass_context
    def sqlsampler_group(ctx: "click.Context", log_level: str) -> None:
        """SQLSampler CLI commands."""
        from sqlsampler.utils.logging import configure_logging

        ctx.ensure_object(dict)
        configure_logging(level=log_level.upper())

    @sqlsampler_group.command(name="run", help="Execute a sampler request against an SQLite database.")
    @click.option(
        "--database", help="Path of the SQLite database file.", type=str, default=":memory:", show_default=True
    )
    @click.option(
        "--query-type",
        help="Query type label.",
        type=click.Choice([kind.value for kind in QueryKind]),
        default=QueryKind.SELECT.value,
        show_default=True,
    )
    @click.option("--query", help="Query text, with '?' parameter markers.", type=str, required=True)
    @click.option("--arguments", help="Comma-separated argument values.", type=str, default="")
    @click.option("--argument-types", help="Comma-separated '[direction ]type' tokens.", type=str, default="")
    @click.option("--variable-names", help="Comma-separated variable names, one per column.", type=str, default="")
    @click.option("--result-variable", help="Variable receiving all rows.", type=str, default="")
    @click.option(
        "--iterations", help="Number of executions.", type=click.IntRange(min=1), default=1, show_default=True
    )
    @click.option("--null-marker", help="Argument value binding SQL NULL.", type=str, default=None)
    @click.option("--max-open-statements", help="Prepared statements kept per connection.", type=int, default=None)
    def run_request(  # pyright: ignore[reportUnusedFunction]
        database: str,
        query_type: str,
        query: str,
        arguments: str,
        argument_types: str,
        variable_names: str,
        result_variable: str,
        iterations: int,
        null_marker: Optional[str],
        max_open_statements: Optional[int],
    ) -> None:
        """Run one request and print its report and variables."""
        from rich.markup import escape
        from rich.table import Table

        from sqlsampler.config import get_global_config
        from sqlsampler.core.cache import StatementCache
        from sqlsampler.driver.dispatch import ExecutionDispatcher, QueryRequest
        from sqlsampler.exceptions import SQLSamplerError
        from sqlsampler.variables import SessionVariables

        ctx = click.get_current_context()
        config = get_global_config()
        if null_marker is not None:
            config = config.replace(null_marker=null_marker)
        if max_open_statements is not None:
            config = config.replace(max_open_prepared_statements=max_open_statements)
        errors = config.validate()
        if errors:
            console.print(f"[red]Invalid configuration: {', '.join(errors)}[/]")
            ctx.exit(1)

        dispatcher = ExecutionDispatcher(
            config, StatementCache(config.max_open_prepared_statements, config.parameter_style)
        )
        request = QueryRequest(
            query=query,
            query_type=query_type,
            query_arguments=arguments,
            query_arguments_types=argument_types,
            variable_names=variable_names,
            result_variable=result_variable,
        )
        variables = SessionVariables()
        connection = sqlite3.connect(database)
        dispatcher.test_started()
        try:
            for iteration in range(1, iterations + 1):
                console.rule(f"[yellow]Iteration {iteration}[/]", align="left")
                report = dispatcher.execute(connection, request, variables)
                text = report.decode("utf-8")
                click.echo(text, nl=not text.endswith("\n"))
        except (SQLSamplerError, sqlite3.Error) as e:
            console.print(f"[red]{e.__class__.__name__}:[/] {escape(str(e))}")
            ctx.exit(1)
        finally:
            dispatcher.test_ended()
            connection.close()

        if len(variables):
            table = Table(title="Variables")
            table.add_column("Name", style="cyan")
            table.add_column("Value")
            for name in variables:
                table.add_row(escape(name), escape(repr(variables.get_object(name))))
            console.print(table)

    @sqlsampler_group.command(name="types", help="List the supported argument types.")
    def list_types() -> None:  # pyright: ignore[reportUnusedFunction]
        """Print the type vocabulary."""
        from rich.table import Table

        from sqlsampler.core.types import get_type_registry

        table = Table(title="Argument types")
        table.add_column("Name", style="cyan")
        table.add_column("Code", justify="right")
        for name, code in get_type_registry():
            table.add_row(name, str(code))
        console.print(table)

    return sqlsampler_group
