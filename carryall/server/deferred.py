"""Deferred code: client-side statements built on the server and returned instead of data."""

from __future__ import annotations

from typing import Any, Sequence

from carryall.protocol import codec


class DeferredCode:
    """
    Chainable builder for a fragment of client-executable code.

    Property reads and method calls are joined with ``.`` unless the buffer already ends
    with a statement terminator, so ``read_property("a").assign(5).call_method("b", [1, 2])``
    builds ``a=5;b(1,2)``. Returning an instance from a bridged callable makes the
    dispatcher answer with ``jscode`` instead of a projected result.
    """

    def __init__(self, code: str = ""):
        self._code = code

    @property
    def code(self) -> str:
        return self._code

    def add_code(self, code: str) -> DeferredCode:
        """Append raw source text."""
        self._code += code
        return self

    def read_property(self, name: str) -> DeferredCode:
        self._join()
        return self.add_code(name)

    def write_property(self, name: str, value: Any) -> DeferredCode:
        return self.read_property(name).assign(value)

    def call_method(self, name: str, args: Sequence[Any] = ()) -> DeferredCode:
        self._join()
        arguments = codec.encode(list(args))[1:-1]
        return self.add_code(f"{name}({arguments})")

    def assign(self, value: Any) -> DeferredCode:
        return self.add_code(f"={codec.encode(value)};")

    def end(self) -> DeferredCode:
        """Terminate the current statement."""
        return self.add_code(";")

    def _join(self) -> None:
        if self._code and not self._code.rstrip().endswith(";"):
            self._code += "."

    def __str__(self) -> str:
        return self._code

    def __repr__(self) -> str:
        return f"DeferredCode({self._code!r})"
