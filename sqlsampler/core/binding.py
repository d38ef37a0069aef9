"""Binding of sampler arguments onto statement handles.

Arguments come as two comma-separated lists of equal length: the values
(CSV-quoted, so a value may contain a comma) and the types. A type token may
start with a direction::

    "5,]NULL[,x"  /  "INTEGER,VARCHAR,OUT INTEGER"

``OUT`` positions are only registered as output parameters, ``INOUT``
positions are bound and registered, anything else is an input.
"""

from enum import Enum
from typing import TYPE_CHECKING, Any, Final, Optional

from mypy_extensions import mypyc_attr

from sqlsampler.config import DEFAULT_NULL_MARKER
from sqlsampler.core.splitter import split_delimited, split_plain
from sqlsampler.core.type_conversion import convert_value
from sqlsampler.core.types import SQLType, TypeRegistry, get_type_registry
from sqlsampler.exceptions import ArgumentConversionError, ArgumentCountMismatchError
from sqlsampler.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlsampler.driver.statement import PreparedStatement

__all__ = ("NO_OUTPUT", "ArgumentBinder", "Direction", "TypeDescriptor", "parse_type_token")

logger = get_logger("sqlsampler.core.binding")

NO_OUTPUT: Final = SQLType.NULL
"""Output descriptor of an input-only position; NULL is never a valid output type."""


class Direction(str, Enum):
    """Direction of a callable statement parameter."""

    IN = "IN"
    OUT = "OUT"
    INOUT = "INOUT"

    @property
    def is_input(self) -> bool:
        return self is not Direction.OUT

    @property
    def is_output(self) -> bool:
        return self is not Direction.IN

    def __str__(self) -> str:
        return self.value


class TypeDescriptor:
    """A parsed argument type token."""

    __slots__ = ("direction", "type_name")

    def __init__(self, type_name: str, direction: Direction = Direction.IN) -> None:
        self.type_name = type_name
        self.direction = direction

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TypeDescriptor):
            return NotImplemented
        return self.type_name == other.type_name and self.direction == other.direction

    def __hash__(self) -> int:
        return hash((self.type_name, self.direction))

    def __repr__(self) -> str:
        return f"TypeDescriptor({self.type_name!r}, {self.direction!s})"


def parse_type_token(token: str) -> TypeDescriptor:
    """Parse ``"[direction ]type"``.

    Only ``OUT`` and ``INOUT`` (in any case) change the direction; any other
    leading word leaves the parameter an input.
    """
    parts = token.split(None, 1)
    if len(parts) < 2:  # noqa: PLR2004
        return TypeDescriptor(token.strip())
    keyword, type_name = parts[0].upper(), parts[1].strip()
    if keyword == Direction.OUT.value:
        return TypeDescriptor(type_name, Direction.OUT)
    if keyword == Direction.INOUT.value:
        return TypeDescriptor(type_name, Direction.INOUT)
    return TypeDescriptor(type_name)


@mypyc_attr(allow_interpreted_subclasses=False)
class ArgumentBinder:
    """Binds argument lists onto prepared and callable statements.

    Args:
        null_marker: Argument value that binds SQL NULL of the declared type.
        registry: Type vocabulary used to resolve type tokens.
    """

    __slots__ = ("_null_marker", "_registry")

    def __init__(self, null_marker: str = DEFAULT_NULL_MARKER, registry: Optional[TypeRegistry] = None) -> None:
        self._null_marker = null_marker
        self._registry = registry if registry is not None else get_type_registry()

    @property
    def null_marker(self) -> str:
        return self._null_marker

    def parse(self, argument_values: str, argument_types: str) -> "list[tuple[str, TypeDescriptor]]":
        """Split both lists and pair values with their type descriptors.

        Raises:
            ArgumentCountMismatchError: If the lists differ in length.
        """
        values = split_delimited(argument_values)
        tokens = split_plain(argument_types)
        if len(values) != len(tokens):
            raise ArgumentCountMismatchError(len(values), len(tokens))
        return [(value, parse_type_token(token)) for value, token in zip(values, tokens)]

    def bind(self, statement: "PreparedStatement", argument_values: str, argument_types: str) -> "list[int]":
        """Bind ``argument_values`` onto ``statement``.

        Args:
            statement: Handle to bind onto. Output directions require a
                ``CallableStatement``.
            argument_values: Comma-separated values, CSV-quoted.
            argument_types: Comma-separated ``[direction ]type`` tokens.

        Raises:
            ArgumentCountMismatchError: Value and type counts differ; nothing is bound.
            InvalidTypeError: A type token does not resolve.
            ArgumentBindingError: The statement has no marker at a position.
            ArgumentConversionError: A value is not valid for its type.

        Returns:
            One entry per position: the type code of output parameters,
            ``NO_OUTPUT`` for inputs. Empty when there are no arguments.
        """
        if not argument_values.strip():
            return []
        arguments = self.parse(argument_values, argument_types)
        outputs: list[int] = []
        for position, (value, descriptor) in enumerate(arguments, start=1):
            type_code = self._registry.resolve(descriptor.type_name)
            if descriptor.direction.is_input:
                self._bind_value(statement, position, value, type_code)
            if descriptor.direction.is_output:
                statement.register_out_parameter(position, type_code)
                outputs.append(type_code)
            else:
                outputs.append(NO_OUTPUT)
        logger.debug("Bound %d argument(s) onto %r", len(arguments), statement)
        return outputs

    def _bind_value(self, statement: "PreparedStatement", position: int, value: str, type_code: int) -> None:
        if value == self._null_marker:
            statement.set_null(position, type_code)
            return
        try:
            converted: Any = convert_value(value, type_code)
        except ValueError as e:
            raise ArgumentConversionError(position, value, self._registry.name_of(type_code)) from e
        statement.set_object(position, converted, type_code)
