"""In-memory sampler variables."""

import threading
from collections.abc import Iterator
from typing import Any, Optional

__all__ = ("SessionVariables", "get_thread_variables")


class SessionVariables:
    """Variables of one sampling session.

    Text variables and structured variables share one namespace, as a later
    ``put`` replaces an earlier ``put_object`` of the same name.
    """

    __slots__ = ("_lock", "_values")

    def __init__(self, initial: "Optional[dict[str, Any]]" = None) -> None:
        self._values: dict[str, Any] = dict(initial or {})
        self._lock = threading.RLock()

    def get(self, name: str) -> Optional[str]:
        with self._lock:
            value = self._values.get(name)
        if value is None or isinstance(value, str):
            return value
        return str(value)

    def get_object(self, name: str, default: Any = None) -> Any:
        with self._lock:
            return self._values.get(name, default)

    def put(self, name: str, value: Optional[str]) -> None:
        with self._lock:
            self._values[name] = value

    def put_object(self, name: str, value: Any) -> None:
        with self._lock:
            self._values[name] = value

    def remove(self, name: str) -> Any:
        """Remove ``name`` and return its previous value."""
        with self._lock:
            return self._values.pop(name, None)

    def as_dict(self) -> "dict[str, Any]":
        """Snapshot of all variables."""
        with self._lock:
            return dict(self._values)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._values

    def __iter__(self) -> "Iterator[str]":
        return iter(self.as_dict())

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)

    def __repr__(self) -> str:
        return f"SessionVariables({self.as_dict()!r})"


_thread_state = threading.local()


def get_thread_variables() -> SessionVariables:
    """Variables of the calling thread, created on first use.

    Each load-generating thread samples with its own variables.
    """
    variables = getattr(_thread_state, "variables", None)
    if variables is None:
        variables = SessionVariables()
        _thread_state.variables = variables
    return variables
