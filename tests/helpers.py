"""Result unwrapping for assertions."""

from typing import Any

import pytest
from kungfu import Error, Ok, Result


def unwrap_ok[T](result: Result[T, Any]) -> T:
    match result:
        case Ok(value):
            return value
        case Error(e):
            pytest.fail(f"expected Ok, got Error({e!r})")


def unwrap_err[E](result: Result[Any, E]) -> E:
    match result:
        case Ok(value):
            pytest.fail(f"expected Error, got Ok({value!r})")
        case Error(e):
            return e


class BrokenTier:
    """Cache tier that raises on every operation, like an unreachable backend."""

    def __init__(self, name: str = "broken") -> None:
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    async def get(self, key: str) -> Any:
        raise ConnectionError(f"{self._name} down")

    async def set(self, key: str, value: Any) -> None:
        raise ConnectionError(f"{self._name} down")

    async def delete(self, key: str) -> bool:
        raise ConnectionError(f"{self._name} down")
