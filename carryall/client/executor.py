"""Execution of deferred code fragments returned by the server."""

from __future__ import annotations

from typing import Any, Protocol


class CodeExecutor(Protocol):
    def execute(self, source: str) -> None: ...


class PythonCodeExecutor:
    """
    Run fragments as Python statements in a persistent namespace.

    The namespace is seeded with ``true``, ``false`` and ``null`` so JSON literals written
    by ``DeferredCode`` evaluate. Names a fragment assigns stay visible to later fragments.
    """

    def __init__(self, namespace: dict[str, Any] | None = None):
        self.namespace: dict[str, Any] = {"true": True, "false": False, "null": None}
        if namespace:
            self.namespace.update(namespace)

    def execute(self, source: str) -> None:
        exec(compile(source, "<carryall:jscode>", "exec"), self.namespace)
