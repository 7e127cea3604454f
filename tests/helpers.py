"""Helpers for arranging and inspecting store state directly."""

import uuid
from datetime import datetime, timedelta, timezone

import jwt

from bookstore.core.config import Settings
from bookstore.models.book import Book


def add_book(
    session_factory,
    price: int = 1000,
    stock_quantity: int = 10,
    archived: bool = False,
    title: str = "Dune",
    author: str = "Frank Herbert",
) -> str:
    """Insert a book directly into the store and return its id."""
    book_id = str(uuid.uuid4())
    with session_factory() as db:
        db.add(Book(
            id=book_id,
            title=title,
            author=author,
            price=price,
            stock_quantity=stock_quantity,
            archived=archived,
        ))
        db.commit()
    return book_id


def read_book(session_factory, book_id: str) -> Book:
    with session_factory() as db:
        return db.get(Book, book_id)


def make_token(settings: Settings, role: str = "admin", expires_in: int = 3600) -> str:
    claims = {
        "sub": str(uuid.uuid4()),
        "role": role,
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
