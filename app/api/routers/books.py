from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel, ValidationError

from app.api.deps import get_book_store
from app.books.store import BookStore
from app.core.errors import SerializationError

router = APIRouter()


class BookIn(BaseModel):
    title: str = ""
    author: str = ""


async def _read_book(request: Request) -> BookIn:
    try:
        raw = await request.json()
        return BookIn.model_validate(raw)
    except (ValueError, ValidationError) as e:
        raise SerializationError(str(e)) from e


async def book_body(request: Request) -> BookIn:
    try:
        return await _read_book(request)
    except SerializationError:
        raise HTTPException(status_code=400, detail="bad json")


@router.post("", status_code=201)
def create_book(body: BookIn = Depends(book_body), store: BookStore = Depends(get_book_store)) -> dict:
    return store.create(title=body.title, author=body.author).to_dict()


@router.get("")
def list_books(author: str | None = None, q: str | None = None, store: BookStore = Depends(get_book_store)) -> list[dict]:
    return [b.to_dict() for b in store.list(author=author, q=q)]


@router.get("/{book_id}")
def get_book(book_id: int, store: BookStore = Depends(get_book_store)) -> dict:
    b = store.get(book_id)
    if not b:
        raise HTTPException(status_code=404, detail="Not found")
    return b.to_dict()


@router.put("/{book_id}")
def update_book(book_id: int, body: BookIn = Depends(book_body), store: BookStore = Depends(get_book_store)) -> dict:
    b = store.update(book_id, title=body.title or None, author=body.author or None)
    if not b:
        raise HTTPException(status_code=404, detail="Not found")
    return b.to_dict()


@router.delete("/{book_id}", status_code=204)
def delete_book(book_id: int, store: BookStore = Depends(get_book_store)) -> Response:
    store.delete(book_id)
    return Response(status_code=204)
