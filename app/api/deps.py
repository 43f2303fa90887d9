from __future__ import annotations

from functools import lru_cache

from app.books.store import BookStore
from app.core.config import settings
from app.fanout.dispatcher import FanOutDispatcher


@lru_cache(maxsize=1)
def get_dispatcher() -> FanOutDispatcher:
    return FanOutDispatcher.from_settings(settings)


@lru_cache(maxsize=1)
def get_book_store() -> BookStore:
    return BookStore()
