from typing import Any, Optional

__all__ = (
    "ArgumentBindingError",
    "ArgumentConversionError",
    "ArgumentCountMismatchError",
    "ImproperConfigurationError",
    "InvalidTypeError",
    "MissingDependencyError",
    "ResourceReleaseError",
    "SQLSamplerError",
    "UnsupportedQueryKindError",
)


class SQLSamplerError(Exception):
    """Base exception class from which all SQLSampler exceptions inherit."""

    detail: str

    def __init__(self, *args: Any, detail: str = "") -> None:
        """Initialize ``SQLSamplerError``.

        Args:
            *args: args are converted to :class:`str` before passing to :class:`Exception`
            detail: detail of the exception.
        """
        str_args = [str(arg) for arg in args if arg]
        if not detail:
            if str_args:
                detail, *str_args = str_args
            elif hasattr(self, "detail"):
                detail = self.detail
        self.detail = detail
        super().__init__(*str_args)

    def __repr__(self) -> str:
        if self.detail:
            return f"{self.__class__.__name__} - {self.detail}"
        return self.__class__.__name__

    def __str__(self) -> str:
        return " ".join((*self.args, self.detail)).strip()


class MissingDependencyError(SQLSamplerError, ImportError):
    """Missing optional dependency.

    This exception is raised only when a module depends on a dependency that has not been installed.
    """

    def __init__(self, package: str, install_package: Optional[str] = None) -> None:
        super().__init__(
            f"Package {package!r} is not installed but required. You can install it by running "
            f"'pip install sqlsampler[{install_package or package}]' to install sqlsampler with the required extra "
            f"or 'pip install {install_package or package}' to install the package separately",
        )


class ImproperConfigurationError(SQLSamplerError):
    """Raised when sampler settings are invalid."""


class InvalidTypeError(SQLSamplerError):
    """A type token is neither a known type name nor an integer type code."""

    token: str

    def __init__(self, token: str) -> None:
        super().__init__(detail=f"Invalid data type: {token}")
        self.token = token


class ArgumentCountMismatchError(SQLSamplerError):
    """The number of argument values differs from the number of argument types."""

    value_count: int
    type_count: int

    def __init__(self, value_count: int, type_count: int) -> None:
        super().__init__(
            detail=f"number of arguments ({value_count}) and number of types ({type_count}) are not equal"
        )
        self.value_count = value_count
        self.type_count = type_count


class ArgumentBindingError(SQLSamplerError):
    """A statement rejected the argument at a given position.

    The position is 1-based, as in the query text.
    """

    position: int

    def __init__(self, position: int, message: Optional[str] = None) -> None:
        if message is None:
            message = f"Could not set argument no: {position} - missing parameter marker?"
        super().__init__(detail=message)
        self.position = position


class ArgumentConversionError(ArgumentBindingError):
    """An argument value could not be converted to its declared type."""

    value: str

    def __init__(self, position: int, value: str, type_name: str) -> None:
        super().__init__(position, f"Could not convert argument no: {position} ({value!r}) to {type_name}")
        self.value = value


class UnsupportedQueryKindError(SQLSamplerError):
    """The query type is not one of the known query kinds."""

    query_kind: str

    def __init__(self, query_kind: Any) -> None:
        super().__init__(detail=f"Unexpected query type: {query_kind}")
        self.query_kind = str(query_kind)


class ResourceReleaseError(SQLSamplerError):
    """Closing a cursor, result or connection failed.

    Only raised inside cleanup helpers, which log and suppress it.
    """
