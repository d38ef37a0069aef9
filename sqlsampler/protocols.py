"""Runtime-checkable protocols for the collaborators of a sampler.

The database side is any PEP 249 connection; the variable side is whatever
key/value store the host keeps per thread.
"""

from typing import Any, Optional, Protocol, runtime_checkable

__all__ = ("ConnectionProtocol", "VariableStore")


@runtime_checkable
class ConnectionProtocol(Protocol):
    """The DB-API connection verbs the dispatcher relies on."""

    def cursor(self) -> Any:
        """Open a new cursor."""
        ...

    def commit(self) -> None:
        """Commit the current transaction."""
        ...

    def rollback(self) -> None:
        """Roll back the current transaction."""
        ...

    def close(self) -> None:
        """Close the connection."""
        ...


@runtime_checkable
class VariableStore(Protocol):
    """String-keyed, last-write-wins store of sampler variables."""

    def get(self, name: str) -> Optional[str]:
        """Get a text variable, or None when unset."""
        ...

    def put(self, name: str, value: Optional[str]) -> None:
        """Set a text variable. None records a variable without value."""
        ...

    def remove(self, name: str) -> Any:
        """Remove a variable if present."""
        ...

    def put_object(self, name: str, value: Any) -> None:
        """Set a structured variable."""
        ...
