"""Library bridge client: talks to ``examples/library/server.py``.

Usage:
  python examples/library/client.py
"""

from __future__ import annotations

from carryall.client import CallBuilder, PythonCodeExecutor, ResponseInterpreter
from carryall.utils.exceptions import RemoteError


def main() -> None:
    executor = PythonCodeExecutor()
    builder = CallBuilder(interpreter=ResponseInterpreter(executor=executor))

    print("server time:", builder.call("time"))

    builder.call("Library::add", ["Refactoring", ["craft"]])
    print("added book:", executor.namespace["last_added"])

    books = (
        CallBuilder()
        .add_field("title")
        .add_getter("getTagCount", key="tags")
        .add_getter("getExcerpt", 10)
        .call("Library::search", "ra")
    )
    for book in books.values():
        print(f"{book['excerpt']:<12} {book['title']} ({book['tags']} tags)")

    # not exposed: the server answers with errortext
    try:
        builder.call("Library::clear")
    except RemoteError as exc:
        print("denied:", exc)


if __name__ == "__main__":
    main()
