from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import datetime, timezone


@dataclass(frozen=True)
class Book:
    id: int
    title: str
    author: str
    added: datetime

    def to_dict(self) -> dict:
        return {"id": self.id, "title": self.title, "author": self.author, "added": self.added.isoformat()}


class BookStore:
    """In-memory books table; one lock serializes reads and writes."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._data: dict[int, Book] = {}
        self._next = 1

    def create(self, *, title: str, author: str) -> Book:
        with self._lock:
            book = Book(id=self._next, title=title, author=author, added=datetime.now(timezone.utc))
            self._data[book.id] = book
            self._next += 1
            return book

    def list(self, *, author: str | None = None, q: str | None = None) -> list[Book]:
        q = (q or "").lower()
        with self._lock:
            items = list(self._data.values())
        out = []
        for b in items:
            if author and b.author != author:
                continue
            if q and q not in b.title.lower():
                continue
            out.append(b)
        return sorted(out, key=lambda b: b.id)

    def get(self, book_id: int) -> Book | None:
        with self._lock:
            return self._data.get(book_id)

    def update(self, book_id: int, *, title: str | None = None, author: str | None = None) -> Book | None:
        with self._lock:
            book = self._data.get(book_id)
            if book is None:
                return None
            if title:
                book = replace(book, title=title)
            if author:
                book = replace(book, author=author)
            self._data[book_id] = book
            return book

    def delete(self, book_id: int) -> None:
        with self._lock:
            self._data.pop(book_id, None)
