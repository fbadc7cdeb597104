"""Library bridge server: books exposed as ``Library::*`` callables.

Usage:
  python examples/library/server.py
"""

from __future__ import annotations

import time
import uuid

import uvicorn

from carryall.config.schema import Config
from carryall.server import CallableRegistry, DeferredCode, Dispatcher, bridge_exposed
from carryall.server.app import create_app


class Book:
    def __init__(self, title: str, tags: list[str]):
        self.id = uuid.uuid4().hex[:8]
        self.title = title
        self.tags = tags
        self.created_at = int(time.time())

    def getTagCount(self) -> int:
        return len(self.tags)

    def getExcerpt(self, length: int = 12) -> str:
        return self.title[:length]


class Library:
    _books: list[Book] = [
        Book("The Pragmatic Programmer", ["craft"]),
        Book("Structure and Interpretation of Computer Programs", ["lisp", "classic"]),
    ]

    @classmethod
    @bridge_exposed
    def catalog(cls) -> list[Book]:
        return list(cls._books)

    @classmethod
    @bridge_exposed
    def search(cls, text: str) -> list[Book]:
        needle = text.lower()
        return [book for book in cls._books if needle in book.title.lower()]

    @classmethod
    @bridge_exposed
    def add(cls, title: str, tags: list[str] | None = None) -> DeferredCode:
        book = Book(title, tags or [])
        cls._books.append(book)
        return DeferredCode().write_property("last_added", book.id)

    @classmethod
    def clear(cls) -> None:
        cls._books.clear()


def main() -> None:
    config = Config()
    registry = CallableRegistry().register(Library)
    app = create_app(Dispatcher(registry), config=config)
    uvicorn.run(app, host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    main()
